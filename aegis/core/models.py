#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Core Data Models
Модели данных трекера с валидацией и типизацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import uuid
from datetime import date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
from enum import Enum
import logging

from aegis.utils.datetime_utils import now_millis, parse_date

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class TaskType(Enum):
    """Типы миссий"""
    COMMON = "COMMON"
    FOCUS = "FOCUS"

class RecurrenceType(Enum):
    """Правила повторения"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    ONCE = "ONCE"

class TaskPriority(Enum):
    """Приоритеты задач"""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

class AchievementTier(Enum):
    """Уровень достижения"""
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"

class AchievementID(Enum):
    """Закрытый перечень достижений"""
    # Выполнение задач
    FIRST_TASK = "FIRST_TASK"
    TASK_MASTER_BRONZE = "TASK_MASTER_BRONZE"
    TASK_MASTER_SILVER = "TASK_MASTER_SILVER"
    TASK_MASTER_GOLD = "TASK_MASTER_GOLD"

    # Фокус
    FIRST_FOCUS_TASK = "FIRST_FOCUS_TASK"
    FOCUS_10_HOURS = "FOCUS_10_HOURS"
    FOCUS_100_HOURS = "FOCUS_100_HOURS"
    MARATHONER_BRONZE = "MARATHONER_BRONZE"

    # Серии и постоянство
    STREAK_3_DAYS = "STREAK_3_DAYS"
    STREAK_7_DAYS = "STREAK_7_DAYS"
    STREAK_30_DAYS = "STREAK_30_DAYS"
    PERFECTIONIST_BRONZE = "PERFECTIONIST_BRONZE"
    WEEKEND_WARRIOR_BRONZE = "WEEKEND_WARRIOR_BRONZE"
    WEEKLY_WARRIOR_SILVER = "WEEKLY_WARRIOR_SILVER"
    PERFECT_MONTH_GOLD = "PERFECT_MONTH_GOLD"

    # Учеба
    FIRST_STUDY_SESSION = "FIRST_STUDY_SESSION"
    SUBJECT_CREATOR_BRONZE = "SUBJECT_CREATOR_BRONZE"
    STUDY_50_HOURS = "STUDY_50_HOURS"
    SUBJECT_SPECIALIST_SILVER = "SUBJECT_SPECIALIST_SILVER"
    PROBLEM_SOLVER_SILVER = "PROBLEM_SOLVER_SILVER"
    ACADEMIC_ACCURACY_GOLD = "ACADEMIC_ACCURACY_GOLD"

    # Мета
    AEGIS_LEGEND_GOLD = "AEGIS_LEGEND_GOLD"

PRIORITY_ORDER = {
    TaskPriority.HIGH.value: 1,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 3
}

# task_id -> {"YYYY-MM-DD": выполнено}
CompletionLog = Dict[str, Dict[str, bool]]
# "YYYY-MM-DD" -> секунды фокуса за день
FocusLog = Dict[str, int]
# task_id -> {"YYYY-MM-DD": прошедшие секунды таймера}
FocusProgress = Dict[str, Dict[str, int]]

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Валидация значений enum"""
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} должен быть одним из: {valid_values}")

def validate_non_negative(value: Any, field_name: str = "value") -> int:
    """Валидация неотрицательных целых"""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{field_name} должен быть неотрицательным целым числом")
    return value

# ===== CORE MODELS =====

@dataclass
class RecurrenceRule:
    """Правило повторения миссии.

    Правило может прийти из сохраненных данных в неполном виде, поэтому
    конструктор ничего не проверяет: некорректное правило просто никогда
    не срабатывает. Строгая проверка пользовательского ввода - validate().
    """
    recurrence: str = RecurrenceType.DAILY.value
    repeat_days: List[int] = field(default_factory=list)  # 0 (вс) .. 6 (сб)
    specific_date: Optional[str] = None  # YYYY-MM-DD

    def validate(self) -> "RecurrenceRule":
        """Проверка правила перед сохранением"""
        validate_enum_value(self.recurrence, RecurrenceType, "recurrence")

        if self.recurrence == RecurrenceType.WEEKLY.value:
            if not self.repeat_days:
                raise ValidationError("repeat_days обязателен для еженедельных миссий")
            for day in self.repeat_days:
                if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                    raise ValidationError("repeat_days должен содержать числа от 0 до 6")
            self.repeat_days = sorted(set(self.repeat_days))

        if self.recurrence == RecurrenceType.ONCE.value:
            if parse_date(self.specific_date) is None:
                raise ValidationError(f"Неверный формат даты: {self.specific_date}")

        return self

    @property
    def is_recurring(self) -> bool:
        return self.recurrence in (RecurrenceType.DAILY.value, RecurrenceType.WEEKLY.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recurrence": self.recurrence,
            "repeat_days": list(self.repeat_days or []),
            "specific_date": self.specific_date
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecurrenceRule":
        return cls(
            recurrence=data.get("recurrence", RecurrenceType.DAILY.value),
            repeat_days=list(data.get("repeat_days") or []),
            specific_date=data.get("specific_date")
        )

    @classmethod
    def daily(cls) -> "RecurrenceRule":
        return cls(recurrence=RecurrenceType.DAILY.value)

    @classmethod
    def weekly(cls, days: List[int]) -> "RecurrenceRule":
        return cls(recurrence=RecurrenceType.WEEKLY.value, repeat_days=list(days))

    @classmethod
    def once(cls, on: date) -> "RecurrenceRule":
        return cls(recurrence=RecurrenceType.ONCE.value, specific_date=on.isoformat())

@dataclass
class Task:
    """Миссия: обычная или с таймером фокуса"""
    task_id: str
    title: str
    description: Optional[str] = None
    task_type: str = TaskType.COMMON.value
    rule: RecurrenceRule = field(default_factory=RecurrenceRule)
    min_duration: Optional[int] = None  # в минутах, только FOCUS
    priority: str = TaskPriority.MEDIUM.value
    created_at: int = field(default_factory=now_millis)  # мс с эпохи
    is_immutable: bool = False

    def __post_init__(self):
        """Валидация после создания объекта"""
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")

        if self.description is not None:
            self.description = validate_text(self.description, min_length=0, max_length=1000,
                                             field_name="description") or None

        self.task_type = validate_enum_value(self.task_type, TaskType, "task_type")
        self.priority = validate_enum_value(self.priority, TaskPriority, "priority")

        if self.min_duration is not None:
            if self.task_type != TaskType.FOCUS.value:
                raise ValidationError("min_duration допустим только для FOCUS миссий")
            if isinstance(self.min_duration, bool) or not isinstance(self.min_duration, int) \
                    or self.min_duration <= 0:
                raise ValidationError("min_duration должен быть положительным числом")

    # ===== PROPERTIES =====

    @property
    def is_focus(self) -> bool:
        return self.task_type == TaskType.FOCUS.value

    @property
    def is_recurring(self) -> bool:
        return self.rule.is_recurring

    @property
    def min_duration_seconds(self) -> int:
        return (self.min_duration or 0) * 60

    @property
    def priority_rank(self) -> int:
        return PRIORITY_ORDER.get(self.priority, 2)

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь"""
        return {
            "task_id": self.task_id,
            "title": self.title,
            "description": self.description,
            "task_type": self.task_type,
            "rule": self.rule.to_dict(),
            "min_duration": self.min_duration,
            "priority": self.priority,
            "created_at": self.created_at,
            "is_immutable": self.is_immutable
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Десериализация из словаря"""
        try:
            return cls(
                task_id=data["task_id"],
                title=data["title"],
                description=data.get("description"),
                task_type=data.get("task_type", TaskType.COMMON.value),
                rule=RecurrenceRule.from_dict(data.get("rule") or {}),
                min_duration=data.get("min_duration"),
                priority=data.get("priority", TaskPriority.MEDIUM.value),
                created_at=data.get("created_at", 0),
                is_immutable=bool(data.get("is_immutable", False))
            )
        except (KeyError, TypeError, ValidationError) as e:
            logger.error(f"Task deserialization failed: {e}")
            raise ValidationError(f"Не удалось загрузить задачу: {e}")

    @classmethod
    def create(cls, title: str, rule: Optional[RecurrenceRule] = None,
               task_type: str = TaskType.COMMON.value,
               priority: str = TaskPriority.MEDIUM.value,
               description: Optional[str] = None,
               min_duration: Optional[int] = None,
               is_immutable: bool = False) -> "Task":
        """Создание новой миссии"""
        rule = (rule or RecurrenceRule.daily()).validate()
        return cls(
            task_id=str(uuid.uuid4()),
            title=title,
            description=description,
            task_type=task_type,
            rule=rule,
            min_duration=min_duration,
            priority=priority,
            is_immutable=is_immutable
        )

@dataclass
class Subject:
    """Учебный предмет"""
    subject_id: str
    name: str
    importance: int = 3  # 1-5 звезд
    created_at: int = field(default_factory=now_millis)

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")

        if isinstance(self.importance, bool) or not isinstance(self.importance, int) \
                or not 1 <= self.importance <= 5:
            raise ValidationError("importance должен быть от 1 до 5")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subject":
        try:
            return cls(**data)
        except TypeError as e:
            raise ValidationError(f"Не удалось загрузить предмет: {e}")

    @classmethod
    def create(cls, name: str, importance: int = 3) -> "Subject":
        return cls(subject_id=str(uuid.uuid4()), name=name, importance=importance)

@dataclass(frozen=True)
class StudySession:
    """Учебная сессия. После создания не меняется."""
    session_id: str
    subject_id: str
    date: str  # YYYY-MM-DD
    duration_seconds: int
    questions_correct: Optional[int] = None
    questions_total: Optional[int] = None

    def __post_init__(self):
        if parse_date(self.date) is None:
            raise ValidationError(f"Неверный формат даты: {self.date}")

        validate_non_negative(self.duration_seconds, "duration_seconds")

        if self.questions_correct is not None:
            validate_non_negative(self.questions_correct, "questions_correct")
        if self.questions_total is not None:
            validate_non_negative(self.questions_total, "questions_total")

        if (self.questions_correct or 0) > (self.questions_total or 0):
            raise ValidationError("questions_correct не может превышать questions_total")

    @property
    def correct_count(self) -> int:
        return self.questions_correct or 0

    @property
    def total_count(self) -> int:
        return self.questions_total or 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudySession":
        try:
            return cls(**data)
        except TypeError as e:
            raise ValidationError(f"Не удалось загрузить учебную сессию: {e}")

    @classmethod
    def create(cls, subject_id: str, on: date, duration_seconds: int,
               questions_correct: Optional[int] = None,
               questions_total: Optional[int] = None) -> "StudySession":
        return cls(
            session_id=str(uuid.uuid4()),
            subject_id=subject_id,
            date=on.isoformat(),
            duration_seconds=duration_seconds,
            questions_correct=questions_correct,
            questions_total=questions_total
        )

__all__ = [
    'TaskType',
    'RecurrenceType',
    'TaskPriority',
    'AchievementTier',
    'AchievementID',
    'PRIORITY_ORDER',
    'CompletionLog',
    'FocusLog',
    'FocusProgress',
    'ValidationError',
    'validate_text',
    'validate_enum_value',
    'validate_non_negative',
    'RecurrenceRule',
    'Task',
    'Subject',
    'StudySession'
]
