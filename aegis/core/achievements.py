#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Achievement Rule Set
Каталог достижений и проверка условий по срезу истории

Версия: 1.0.0
Дата: 2026-10-19
"""

from datetime import timedelta
from typing import Dict, List, Optional, Any, Callable, Tuple
from dataclasses import dataclass
from abc import ABC, abstractmethod
import logging

from aegis.core.models import AchievementID, AchievementTier
from aegis.core.snapshot import Snapshot
from aegis.utils.datetime_utils import last_n_days, most_recent_sunday

logger = logging.getLogger(__name__)

HOUR = 3600

# ===== DATA CLASSES =====

@dataclass(frozen=True)
class AchievementDefinition:
    """Определение достижения"""
    achievement_id: AchievementID
    title: str
    description: str
    tier: AchievementTier
    icon: str
    tags: Tuple[str, ...] = ()

    @property
    def tier_emoji(self) -> str:
        """Emoji для уровня"""
        tier_emojis = {
            AchievementTier.BRONZE: "🥉",
            AchievementTier.SILVER: "🥈",
            AchievementTier.GOLD: "🥇"
        }
        return tier_emojis.get(self.tier, "🏅")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'achievement_id': self.achievement_id.value,
            'title': self.title,
            'description': self.description,
            'tier': self.tier.value,
            'icon': self.icon,
            'tags': list(self.tags)
        }

# ===== ACHIEVEMENT CHECKERS =====

class AchievementChecker(ABC):
    """Базовый класс для проверки достижений"""

    @abstractmethod
    def check(self, snapshot: Snapshot) -> bool:
        """Проверить условие достижения"""
        pass

    @abstractmethod
    def get_progress(self, snapshot: Snapshot) -> Tuple[int, int]:
        """Получить прогресс (текущий, максимальный)"""
        pass

class SimpleCountChecker(AchievementChecker):
    """Проверка порога накопленного значения"""

    def __init__(self, target_count: float, value_getter: Callable[[Snapshot], float]):
        self.target_count = target_count
        self.value_getter = value_getter

    def check(self, snapshot: Snapshot) -> bool:
        return self.value_getter(snapshot) >= self.target_count

    def get_progress(self, snapshot: Snapshot) -> Tuple[int, int]:
        current = min(self.target_count, self.value_getter(snapshot))
        return int(current), int(self.target_count)

class StreakChecker(AchievementChecker):
    """Проверка серии любой повторяющейся миссии на сегодня"""

    def __init__(self, target_streak: int):
        self.target_streak = target_streak

    def check(self, snapshot: Snapshot) -> bool:
        return any(
            snapshot.streak(task.task_id, snapshot.today) >= self.target_streak
            for task in snapshot.tasks if task.is_recurring
        )

    def get_progress(self, snapshot: Snapshot) -> Tuple[int, int]:
        current = min(self.target_streak, snapshot.max_recurring_streak)
        return current, self.target_streak

class PerfectDaysChecker(AchievementChecker):
    """Проверка, что каждый день из окна был идеальным"""

    def __init__(self, days_getter: Callable[[Snapshot], List]):
        self.days_getter = days_getter

    def check(self, snapshot: Snapshot) -> bool:
        days = self.days_getter(snapshot)
        return bool(days) and all(snapshot.is_perfect_day(day) for day in days)

    def get_progress(self, snapshot: Snapshot) -> Tuple[int, int]:
        days = self.days_getter(snapshot)
        perfect = sum(1 for day in days if snapshot.is_perfect_day(day))
        return perfect, len(days)

class ConditionalChecker(AchievementChecker):
    """Проверка сложных условий"""

    def __init__(self, condition_func: Callable[[Snapshot], bool],
                 progress_func: Optional[Callable[[Snapshot], Tuple[int, int]]] = None):
        self.condition_func = condition_func
        self.progress_func = progress_func

    def check(self, snapshot: Snapshot) -> bool:
        return self.condition_func(snapshot)

    def get_progress(self, snapshot: Snapshot) -> Tuple[int, int]:
        if self.progress_func:
            return self.progress_func(snapshot)
        return (1 if self.check(snapshot) else 0, 1)

# ===== CONDITIONS =====

def has_completed_focus_task(snapshot: Snapshot) -> bool:
    return any(
        any((snapshot.completions.get(task.task_id) or {}).values())
        for task in snapshot.tasks if task.is_focus
    )

def weekend_days(snapshot: Snapshot) -> List:
    """Последнее воскресенье (не позже сегодняшнего дня) и суббота перед ним"""
    sunday = most_recent_sunday(snapshot.today)
    return [sunday - timedelta(days=1), sunday]

def best_subject_seconds(snapshot: Snapshot) -> float:
    return max(snapshot.study_seconds_by_subject.values(), default=0)

def check_academic_accuracy(snapshot: Snapshot) -> bool:
    total = snapshot.total_questions
    if total < 200:
        return False
    return snapshot.total_correct / total >= 0.9

def regular_achievement_ids() -> List[AchievementID]:
    return [a for a in AchievementID if a != AchievementID.AEGIS_LEGEND_GOLD]

def check_legend(snapshot: Snapshot) -> bool:
    # Смотрит только на разблокированные в прошлых проходах
    return all(a in snapshot.unlocked for a in regular_achievement_ids())

def legend_progress(snapshot: Snapshot) -> Tuple[int, int]:
    others = regular_achievement_ids()
    return sum(1 for a in others if a in snapshot.unlocked), len(others)

# ===== ACHIEVEMENT REGISTRY =====

class AchievementRegistry:
    """Реестр всех достижений. Порядок регистрации - порядок каталога."""

    def __init__(self):
        self.achievements: Dict[AchievementID, AchievementDefinition] = {}
        self.checkers: Dict[AchievementID, AchievementChecker] = {}
        self._load_default_achievements()

    def register_achievement(self, definition: AchievementDefinition,
                             checker: AchievementChecker) -> None:
        """Зарегистрировать достижение"""
        self.achievements[definition.achievement_id] = definition
        self.checkers[definition.achievement_id] = checker
        logger.debug(f"Registered achievement: {definition.achievement_id.value}")

    def get_achievement(self, achievement_id: AchievementID) -> Optional[AchievementDefinition]:
        """Получить определение достижения"""
        return self.achievements.get(achievement_id)

    def get_checker(self, achievement_id: AchievementID) -> Optional[AchievementChecker]:
        """Получить проверщик достижения"""
        return self.checkers.get(achievement_id)

    def get_all_achievements(self) -> List[AchievementDefinition]:
        """Получить все достижения"""
        return list(self.achievements.values())

    def get_achievements_by_tier(self, tier: AchievementTier) -> List[AchievementDefinition]:
        """Получить достижения по уровню"""
        return [ach for ach in self.achievements.values() if ach.tier == tier]

    def _add(self, achievement_id: AchievementID, title: str, description: str,
             tier: AchievementTier, icon: str, checker: AchievementChecker, *tags: str) -> None:
        self.register_achievement(
            AchievementDefinition(
                achievement_id=achievement_id,
                title=title,
                description=description,
                tier=tier,
                icon=icon,
                tags=tags
            ),
            checker
        )

    def _load_default_achievements(self):
        """Загрузка стандартных достижений"""

        # ===== ЗАДАЧИ =====

        self._add(AchievementID.FIRST_TASK, "Посвященный", "Выполните первую миссию.",
                  AchievementTier.BRONZE, "star",
                  SimpleCountChecker(1, lambda s: s.total_completions), "tasks")
        self._add(AchievementID.TASK_MASTER_BRONZE, "Мастер задач (бронза)", "Выполните 50 миссий.",
                  AchievementTier.BRONZE, "shield",
                  SimpleCountChecker(50, lambda s: s.total_completions), "tasks")
        self._add(AchievementID.TASK_MASTER_SILVER, "Мастер задач (серебро)", "Выполните 250 миссий.",
                  AchievementTier.SILVER, "shield",
                  SimpleCountChecker(250, lambda s: s.total_completions), "tasks")
        self._add(AchievementID.TASK_MASTER_GOLD, "Мастер задач (золото)", "Выполните 1000 миссий.",
                  AchievementTier.GOLD, "shield",
                  SimpleCountChecker(1000, lambda s: s.total_completions), "tasks")

        # ===== ФОКУС =====

        self._add(AchievementID.FIRST_FOCUS_TASK, "Сосредоточенный", "Выполните первую миссию фокуса.",
                  AchievementTier.BRONZE, "clock",
                  ConditionalChecker(has_completed_focus_task), "focus")
        self._add(AchievementID.MARATHONER_BRONZE, "Марафонец", "Наберите 2 часа фокуса за один день.",
                  AchievementTier.BRONZE, "bolt",
                  SimpleCountChecker(2 * HOUR, lambda s: s.best_focus_day_seconds), "focus")
        self._add(AchievementID.FOCUS_10_HOURS, "Ученик", "Накопите 10 часов фокуса.",
                  AchievementTier.SILVER, "book",
                  SimpleCountChecker(10 * HOUR, lambda s: s.total_focus_seconds), "focus")
        self._add(AchievementID.FOCUS_100_HOURS, "Мастер фокуса", "Накопите 100 часов фокуса.",
                  AchievementTier.GOLD, "brain",
                  SimpleCountChecker(100 * HOUR, lambda s: s.total_focus_seconds), "focus")

        # ===== ПОСТОЯНСТВО =====

        self._add(AchievementID.STREAK_3_DAYS, "В ритме", "Держите серию 3 дня в любой миссии.",
                  AchievementTier.BRONZE, "flame", StreakChecker(3), "streaks")
        self._add(AchievementID.STREAK_7_DAYS, "Настойчивый", "Держите серию 7 дней в любой миссии.",
                  AchievementTier.SILVER, "flame", StreakChecker(7), "streaks")
        self._add(AchievementID.STREAK_30_DAYS, "Железная воля", "Держите серию 30 дней в любой миссии.",
                  AchievementTier.GOLD, "flame", StreakChecker(30), "streaks")
        self._add(AchievementID.PERFECTIONIST_BRONZE, "Перфекционист", "Выполните все миссии дня.",
                  AchievementTier.BRONZE, "checkmark",
                  PerfectDaysChecker(lambda s: [s.today]), "streaks")
        self._add(AchievementID.WEEKEND_WARRIOR_BRONZE, "Воин выходных",
                  "Выполните все миссии субботы и воскресенья.",
                  AchievementTier.BRONZE, "calendar", PerfectDaysChecker(weekend_days), "streaks")
        self._add(AchievementID.WEEKLY_WARRIOR_SILVER, "Воин недели",
                  "Выполняйте все миссии 7 дней подряд.",
                  AchievementTier.SILVER, "calendar",
                  PerfectDaysChecker(lambda s: last_n_days(s.today, 7)), "streaks")
        self._add(AchievementID.PERFECT_MONTH_GOLD, "Идеальный месяц",
                  "Выполняйте все миссии 30 дней подряд.",
                  AchievementTier.GOLD, "calendar",
                  PerfectDaysChecker(lambda s: last_n_days(s.today, 30)), "streaks")

        # ===== УЧЕБА =====

        self._add(AchievementID.FIRST_STUDY_SESSION, "Прилежный ученик", "Запишите первую учебную сессию.",
                  AchievementTier.BRONZE, "book",
                  SimpleCountChecker(1, lambda s: len(s.study_sessions)), "study")
        self._add(AchievementID.SUBJECT_CREATOR_BRONZE, "Эрудит", "Создайте 5 разных предметов.",
                  AchievementTier.BRONZE, "brain",
                  SimpleCountChecker(5, lambda s: len(s.subjects)), "study")
        self._add(AchievementID.SUBJECT_SPECIALIST_SILVER, "Специалист",
                  "Накопите 25 часов учебы по одному предмету.",
                  AchievementTier.SILVER, "mountain",
                  SimpleCountChecker(25 * HOUR, best_subject_seconds), "study")
        self._add(AchievementID.PROBLEM_SOLVER_SILVER, "Решатель задач", "Ответьте в сумме на 500 вопросов.",
                  AchievementTier.SILVER, "shield",
                  SimpleCountChecker(500, lambda s: s.total_questions), "study")
        self._add(AchievementID.STUDY_50_HOURS, "Мастер учебы", "Накопите 50 часов учебы.",
                  AchievementTier.GOLD, "brain",
                  SimpleCountChecker(50 * HOUR, lambda s: s.total_study_seconds), "study")
        self._add(AchievementID.ACADEMIC_ACCURACY_GOLD, "Академическая точность",
                  "Держите 90% верных ответов на 200 и более вопросах.",
                  AchievementTier.GOLD, "target",
                  ConditionalChecker(
                      check_academic_accuracy,
                      lambda s: (min(200, int(s.total_questions)), 200)
                  ), "study")

        # ===== МЕТА =====

        self._add(AchievementID.AEGIS_LEGEND_GOLD, "Легенда Aegis", "Откройте все остальные достижения.",
                  AchievementTier.GOLD, "star",
                  ConditionalChecker(check_legend, legend_progress), "meta")

# ===== EVALUATION =====

registry = AchievementRegistry()

def evaluate_achievements(snapshot: Snapshot,
                          achievement_registry: Optional[AchievementRegistry] = None
                          ) -> List[AchievementDefinition]:
    """Новые достижения, условия которых выполнены на срезе.

    Уже открытые (snapshot.unlocked) пропускаются. Состояния между
    вызовами нет: каждое условие пересчитывается по всему срезу.
    Ошибка одного условия логируется и не прерывает проход.
    """
    achievement_registry = achievement_registry or registry
    new_achievements = []

    for achievement_id, definition in achievement_registry.achievements.items():
        if achievement_id in snapshot.unlocked:
            continue

        checker = achievement_registry.get_checker(achievement_id)
        if not checker:
            continue

        try:
            if checker.check(snapshot):
                new_achievements.append(definition)
        except Exception as e:
            logger.error(f"Error checking achievement {achievement_id.value}: {e}")

    return new_achievements

def achievement_progress(snapshot: Snapshot,
                         achievement_registry: Optional[AchievementRegistry] = None
                         ) -> Dict[AchievementID, Tuple[int, int]]:
    """Прогресс (текущий, максимальный) по каждому достижению каталога"""
    achievement_registry = achievement_registry or registry
    progress = {}

    for achievement_id, checker in achievement_registry.checkers.items():
        try:
            progress[achievement_id] = checker.get_progress(snapshot)
        except Exception as e:
            logger.error(f"Error computing progress for {achievement_id.value}: {e}")
            progress[achievement_id] = (0, 1)

    return progress

__all__ = [
    'AchievementDefinition',
    'AchievementChecker',
    'SimpleCountChecker',
    'StreakChecker',
    'PerfectDaysChecker',
    'ConditionalChecker',
    'AchievementRegistry',
    'registry',
    'evaluate_achievements',
    'achievement_progress',
    'regular_achievement_ids'
]
