#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - History Snapshot
Неизменяемый срез всей истории для проверки достижений

Версия: 1.0.0
Дата: 2026-10-19
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from aegis.core.models import (
    AchievementID, CompletionLog, FocusLog, StudySession, Subject, Task
)
from aegis.core.recurrence import tasks_for_date
from aegis.core.streaks import calculate_streak, is_completed
from aegis.utils.datetime_utils import today as local_today

StreakLookup = Callable[[str, date], int]
DueTasksLookup = Callable[[date], List[Task]]

def as_number(value) -> float:
    """Безопасное приведение к числу: мусор и None считаются нулем"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    return 0

@dataclass(frozen=True)
class Snapshot:
    """Срез истории на момент проверки.

    streak_lookup и due_tasks_for_date можно подменить (например, в тестах
    или у вызывающего слоя со своим кэшем); по умолчанию они считаются
    по данным самого среза.
    """
    tasks: Tuple[Task, ...] = ()
    completions: CompletionLog = field(default_factory=dict)
    focus_sessions: FocusLog = field(default_factory=dict)
    subjects: Tuple[Subject, ...] = ()
    study_sessions: Tuple[StudySession, ...] = ()
    today: date = field(default_factory=local_today)
    unlocked: FrozenSet[AchievementID] = frozenset()
    streak_lookup: Optional[StreakLookup] = None
    due_tasks_for_date: Optional[DueTasksLookup] = None

    # ===== QUERIES =====

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def streak(self, task_id: str, day: date) -> int:
        if self.streak_lookup is not None:
            return self.streak_lookup(task_id, day)
        return calculate_streak(self.get_task(task_id), self.completions, day)

    def tasks_for(self, day: date) -> List[Task]:
        if self.due_tasks_for_date is not None:
            return self.due_tasks_for_date(day)
        return tasks_for_date(self.tasks, day)

    def is_completed(self, task_id: str, day: date) -> bool:
        return is_completed(self.completions, task_id, day)

    def is_perfect_day(self, day: date) -> bool:
        """Все миссии дня выполнены. День без миссий идеальным не считается."""
        due = self.tasks_for(day)
        if not due:
            return False
        return all(self.is_completed(task.task_id, day) for task in due)

    # ===== AGGREGATES =====

    @property
    def total_completions(self) -> int:
        return sum(
            1 for per_day in self.completions.values()
            for done in (per_day or {}).values() if done
        )

    @property
    def total_focus_seconds(self) -> float:
        return sum(as_number(seconds) for seconds in self.focus_sessions.values())

    @property
    def best_focus_day_seconds(self) -> float:
        return max((as_number(seconds) for seconds in self.focus_sessions.values()), default=0)

    @property
    def max_recurring_streak(self) -> int:
        return max(
            [self.streak(task.task_id, self.today) for task in self.tasks if task.is_recurring] + [0]
        )

    @property
    def study_seconds_by_subject(self) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for session in self.study_sessions:
            totals[session.subject_id] = totals.get(session.subject_id, 0) + as_number(session.duration_seconds)
        return totals

    @property
    def total_study_seconds(self) -> float:
        return sum(as_number(session.duration_seconds) for session in self.study_sessions)

    @property
    def total_questions(self) -> int:
        return sum(as_number(session.questions_total) for session in self.study_sessions)

    @property
    def total_correct(self) -> int:
        return sum(as_number(session.questions_correct) for session in self.study_sessions)

__all__ = ['Snapshot', 'StreakLookup', 'DueTasksLookup', 'as_number']
