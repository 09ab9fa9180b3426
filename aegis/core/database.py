#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Tracker Store
Владелец всего состояния трекера: миссии, выполнения, фокус, учеба, достижения

Версия: 1.0.0
Дата: 2026-10-19
"""

import math
from datetime import date
from typing import Dict, List, Optional, Any, Iterable
import logging

from aegis.core.achievements import AchievementDefinition, evaluate_achievements
from aegis.core.ledger import UnlockLedger
from aegis.core.models import (
    CompletionLog, FocusLog, FocusProgress, RecurrenceRule, StudySession, Subject, Task,
    TaskPriority, TaskType, ValidationError, validate_non_negative
)
from aegis.core.recurrence import tasks_for_date
from aegis.core.snapshot import Snapshot
from aegis.core.streaks import calculate_streak, is_completed
from aegis.utils.datetime_utils import today as local_today

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Базовое исключение слоя состояния"""
    pass

class TaskNotFoundError(StorageError):
    """Миссия не найдена"""
    pass

class SubjectNotFoundError(StorageError):
    """Предмет не найден"""
    pass

class ImmutableTaskError(StorageError):
    """Попытка изменить зафиксированную миссию"""
    pass

class InvalidBackupError(StorageError):
    """Файл резервной копии не прошел проверку"""
    pass

# Поля, которые нельзя менять у неизменяемой миссии
FROZEN_FIELDS = ('task_type', 'rule', 'min_duration', 'priority')

class TrackerStore:
    """Состояние трекера.

    Мутации только меняют данные. Проверка достижений - отдельный явный
    шаг check_and_unlock_achievements(), который вызывающий делает после
    мутации, когда состояние уже зафиксировано.
    """

    def __init__(self):
        self.tasks: List[Task] = []
        self.completions: CompletionLog = {}
        self.focus_progress: FocusProgress = {}
        self.focus_sessions: FocusLog = {}
        self.subjects: List[Subject] = []
        self.study_sessions: List[StudySession] = []
        self.ledger = UnlockLedger()

    # ===== TASKS =====

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def _require_task(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return task

    def add_task(self, title: str, rule: Optional[RecurrenceRule] = None,
                 task_type: str = TaskType.COMMON.value,
                 priority: str = TaskPriority.MEDIUM.value,
                 description: Optional[str] = None,
                 min_duration: Optional[int] = None,
                 is_immutable: bool = False) -> Task:
        """Добавить миссию"""
        task = Task.create(
            title=title,
            rule=rule,
            task_type=task_type,
            priority=priority,
            description=description,
            min_duration=min_duration,
            is_immutable=is_immutable
        )
        self.tasks.append(task)
        logger.info(f"Task added: {task.task_id} ({task.title})")
        return task

    def update_task(self, task_id: str, **changes: Any) -> Task:
        """Обновить миссию.

        У неизменяемой миссии можно менять только title и description.
        """
        task = self._require_task(task_id)
        unknown = set(changes) - {'title', 'description', 'is_immutable'} - set(FROZEN_FIELDS)
        if unknown:
            raise ValidationError(f"Неизвестные поля миссии: {sorted(unknown)}")

        if task.is_immutable:
            frozen = [name for name in FROZEN_FIELDS
                      if name in changes and changes[name] != getattr(task, name)]
            if frozen:
                raise ImmutableTaskError(f"Task {task_id} is immutable, cannot change: {', '.join(frozen)}")
            if changes.get('is_immutable') is False:
                raise ImmutableTaskError(f"Task {task_id} is immutable and cannot be unlocked")

        data = task.to_dict()
        for name, value in changes.items():
            data[name] = value.to_dict() if isinstance(value, RecurrenceRule) else value
        updated = Task.from_dict(data)
        if 'rule' in changes:
            updated.rule.validate()

        self.tasks = [updated if t.task_id == task_id else t for t in self.tasks]
        logger.info(f"Task updated: {task_id}")
        return updated

    def delete_task(self, task_id: str) -> bool:
        """Удалить миссию вместе с выполнениями и прогрессом фокуса"""
        initial_count = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.task_id != task_id]
        self.completions.pop(task_id, None)
        self.focus_progress.pop(task_id, None)

        deleted = len(self.tasks) < initial_count
        if deleted:
            logger.info(f"Task deleted: {task_id}")
        return deleted

    # ===== COMPLETIONS =====

    def is_task_completed(self, task_id: str, day: date) -> bool:
        return is_completed(self.completions, task_id, day)

    def toggle_task_completion(self, task_id: str, day: date) -> bool:
        """Переключить отметку выполнения. Возвращает новое значение.

        Выполненную FOCUS или неизменяемую миссию снять нельзя.
        """
        task = self._require_task(task_id)
        key = day.isoformat()
        per_day = self.completions.setdefault(task_id, {})
        currently_done = bool(per_day.get(key, False))

        if currently_done and (task.is_focus or task.is_immutable):
            raise ImmutableTaskError(f"Task {task_id} cannot be un-completed")

        per_day[key] = not currently_done
        return per_day[key]

    def tasks_for_date(self, day: date) -> List[Task]:
        return tasks_for_date(self.tasks, day)

    def task_streak(self, task_id: str, day: date) -> int:
        return calculate_streak(self.get_task(task_id), self.completions, day)

    # ===== FOCUS =====

    def add_focus_time(self, day: date, seconds: int) -> int:
        """Добавить секунды фокуса ко дню. Лог только растет."""
        validate_non_negative(seconds, "seconds")
        key = day.isoformat()
        self.focus_sessions[key] = (self.focus_sessions.get(key) or 0) + seconds
        return self.focus_sessions[key]

    def update_focus_progress(self, task_id: str, day: date, elapsed_seconds: int) -> None:
        """Сохранить прогресс таймера миссии. Запущенный таймер фиксирует миссию."""
        task = self._require_task(task_id)
        validate_non_negative(elapsed_seconds, "elapsed_seconds")
        self.focus_progress.setdefault(task_id, {})[day.isoformat()] = elapsed_seconds

        if not task.is_immutable and elapsed_seconds > 0:
            task.is_immutable = True
            logger.info(f"Task marked as immutable: {task_id}")

    def get_focus_progress(self, task_id: str, day: date) -> int:
        return (self.focus_progress.get(task_id) or {}).get(day.isoformat(), 0)

    def record_quick_focus(self, title: str, seconds: int, day: Optional[date] = None,
                           subject_id: Optional[str] = None,
                           questions_correct: Optional[int] = None,
                           questions_total: Optional[int] = None) -> Task:
        """Записать свободную сессию фокуса как выполненную разовую миссию"""
        day = day or local_today()
        validate_non_negative(seconds, "seconds")

        # Все проверяется до первой записи в состояние
        task = Task.create(
            title=title,
            rule=RecurrenceRule.once(day),
            task_type=TaskType.FOCUS.value,
            min_duration=max(1, math.ceil(seconds / 60)),
            is_immutable=True
        )
        session = None
        if subject_id is not None:
            session = self._build_study_session(subject_id, seconds, questions_correct, questions_total, day)

        self.tasks.append(task)
        if session is not None:
            self.study_sessions.append(session)
        logger.info(f"Quick focus recorded: {task.task_id} ({seconds}s)")

        self.completions.setdefault(task.task_id, {})[day.isoformat()] = True
        self.add_focus_time(day, seconds)
        return task

    # ===== STUDY =====

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        for subject in self.subjects:
            if subject.subject_id == subject_id:
                return subject
        return None

    def add_subject(self, name: str, importance: int = 3) -> Subject:
        subject = Subject.create(name, importance)
        self.subjects.append(subject)
        logger.info(f"Subject added: {subject.subject_id} ({subject.name})")
        return subject

    def update_subject(self, subject_id: str, name: Optional[str] = None,
                       importance: Optional[int] = None) -> Subject:
        subject = self.get_subject(subject_id)
        if subject is None:
            raise SubjectNotFoundError(f"Subject not found: {subject_id}")

        updated = Subject(
            subject_id=subject.subject_id,
            name=name if name is not None else subject.name,
            importance=importance if importance is not None else subject.importance,
            created_at=subject.created_at
        )
        self.subjects = [updated if s.subject_id == subject_id else s for s in self.subjects]
        return updated

    def delete_subject(self, subject_id: str) -> bool:
        """Удалить предмет вместе со всеми его сессиями"""
        initial_count = len(self.subjects)
        self.subjects = [s for s in self.subjects if s.subject_id != subject_id]
        self.reset_subject(subject_id)
        return len(self.subjects) < initial_count

    def reset_subject(self, subject_id: str) -> int:
        """Удалить сессии предмета, сам предмет остается"""
        initial_count = len(self.study_sessions)
        self.study_sessions = [ss for ss in self.study_sessions if ss.subject_id != subject_id]
        removed = initial_count - len(self.study_sessions)
        if removed:
            logger.info(f"Removed {removed} study sessions of subject {subject_id}")
        return removed

    def add_study_session(self, subject_id: str, duration_seconds: int,
                          questions_correct: Optional[int] = None,
                          questions_total: Optional[int] = None,
                          day: Optional[date] = None) -> StudySession:
        session = self._build_study_session(subject_id, duration_seconds, questions_correct,
                                            questions_total, day or local_today())
        self.study_sessions.append(session)
        return session

    def _build_study_session(self, subject_id: str, duration_seconds: int,
                             questions_correct: Optional[int], questions_total: Optional[int],
                             day: date) -> StudySession:
        if self.get_subject(subject_id) is None:
            raise SubjectNotFoundError(f"Subject not found: {subject_id}")

        return StudySession.create(
            subject_id=subject_id,
            on=day,
            duration_seconds=duration_seconds,
            questions_correct=questions_correct,
            questions_total=questions_total
        )

    # ===== ACHIEVEMENTS =====

    def build_snapshot(self, today: Optional[date] = None) -> Snapshot:
        """Срез текущего состояния. Коллекции копируются."""
        return Snapshot(
            tasks=tuple(self.tasks),
            completions={task_id: dict(per_day) for task_id, per_day in self.completions.items()},
            focus_sessions=dict(self.focus_sessions),
            subjects=tuple(self.subjects),
            study_sessions=tuple(self.study_sessions),
            today=today or local_today(),
            unlocked=self.ledger.unlocked_ids
        )

    def check_and_unlock_achievements(self, today: Optional[date] = None) -> List[AchievementDefinition]:
        """Проверить достижения и записать новые в журнал"""
        new_achievements = evaluate_achievements(self.build_snapshot(today))
        return self.ledger.apply(new_achievements)

    def record_unlocks(self, achievement_ids: Iterable) -> List[AchievementDefinition]:
        return self.ledger.record_unlocks(achievement_ids)

    def pop_notification(self) -> Optional[AchievementDefinition]:
        return self.ledger.pop_notification()

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tasks': [t.to_dict() for t in self.tasks],
            'completions': {task_id: dict(per_day) for task_id, per_day in self.completions.items()},
            'focus_progress': {task_id: dict(per_day) for task_id, per_day in self.focus_progress.items()},
            'focus_sessions': dict(self.focus_sessions),
            'subjects': [s.to_dict() for s in self.subjects],
            'study_sessions': [ss.to_dict() for ss in self.study_sessions],
            **self.ledger.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackerStore":
        """Загрузка состояния. Битые записи пропускаются с предупреждением."""
        store = cls()
        store.tasks = _load_records(data.get('tasks'), Task.from_dict, "task")
        store.subjects = _load_records(data.get('subjects'), Subject.from_dict, "subject")
        store.study_sessions = _load_records(data.get('study_sessions'), StudySession.from_dict, "study session")

        store.completions = {
            str(task_id): {str(day): bool(done) for day, done in per_day.items()}
            for task_id, per_day in _section(data, 'completions').items()
            if isinstance(per_day, dict)
        }
        store.focus_progress = {
            str(task_id): _seconds_log(per_day, f"focus_progress[{task_id}]")
            for task_id, per_day in _section(data, 'focus_progress').items()
            if isinstance(per_day, dict)
        }
        store.focus_sessions = _seconds_log(_section(data, 'focus_sessions'), "focus_sessions")
        store.ledger = UnlockLedger.from_dict(data)
        return store

    def replace_state(self, other: "TrackerStore") -> None:
        """Атомарно заменить все состояние (восстановление, не слияние)"""
        self.__dict__.update({
            'tasks': other.tasks,
            'completions': other.completions,
            'focus_progress': other.focus_progress,
            'focus_sessions': other.focus_sessions,
            'subjects': other.subjects,
            'study_sessions': other.study_sessions,
            'ledger': other.ledger
        })
        logger.info(f"State replaced: {len(self.tasks)} tasks, {len(self.ledger)} achievements")

def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring malformed section '{key}': expected object, got {type(value).__name__}")
        return {}
    return value

def _seconds_log(per_day: Dict[str, Any], kind: str) -> Dict[str, int]:
    """Только неотрицательные целые секунды, остальное отбрасывается"""
    log = {}
    for day, seconds in per_day.items():
        try:
            log[str(day)] = validate_non_negative(seconds, kind)
        except ValidationError:
            logger.warning(f"Dropping invalid {kind} value for {day}: {seconds!r}")
    return log

def _load_records(items, loader, kind: str) -> list:
    if items is not None and not isinstance(items, list):
        logger.warning(f"Ignoring malformed {kind} list: got {type(items).__name__}")
        return []
    records = []
    for item in items or []:
        try:
            records.append(loader(item))
        except (ValidationError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load {kind}: {e}")
    return records

__all__ = [
    'StorageError',
    'TaskNotFoundError',
    'SubjectNotFoundError',
    'ImmutableTaskError',
    'InvalidBackupError',
    'FROZEN_FIELDS',
    'TrackerStore'
]
