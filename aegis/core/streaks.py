#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Streak Calculator
Подсчет серий выполнения повторяющихся миссий

Версия: 1.0.0
Дата: 2026-10-19
"""

from datetime import date, timedelta
from typing import Optional, Union
import logging

from aegis.config import config
from aegis.core.models import CompletionLog, Task
from aegis.core.recurrence import is_due
from aegis.utils.datetime_utils import parse_date

logger = logging.getLogger(__name__)

def is_completed(completions: CompletionLog, task_id: str, day: Union[date, str]) -> bool:
    """Выполнена ли миссия в день. Отсутствие записи означает 'нет'."""
    if isinstance(day, date):
        day = day.isoformat()
    return bool((completions.get(task_id) or {}).get(day, False))

def calculate_streak(task: Optional[Task], completions: CompletionLog, reference_date: date,
                     safety_bound: Optional[int] = None) -> int:
    """Текущая серия миссии на дату.

    Идем назад от reference_date. Если в сам день миссия еще не выполнена,
    отсчет начинается со вчерашнего дня: незакрытый сегодняшний день
    серию не обрывает. Дни, в которые миссия не запланирована,
    пропускаются; первый запланированный и невыполненный день обрывает
    серию.

    Цикл ограничен safety_bound итерациями (по умолчанию 366), поэтому
    результат, равный границе, означает "не меньше".
    """
    if task is None or not task.is_recurring:
        return 0

    bound = safety_bound if safety_bound is not None else config.rules.streak_safety_bound
    task_completions = completions.get(task.task_id) or {}

    cursor = reference_date
    if not task_completions.get(cursor.isoformat(), False):
        cursor -= timedelta(days=1)

    streak = 0
    for _ in range(bound):
        if is_due(task.rule, cursor):
            if task_completions.get(cursor.isoformat(), False):
                streak += 1
            else:
                break
        cursor -= timedelta(days=1)

    return streak

def longest_streak(task: Optional[Task], completions: CompletionLog, until: date) -> int:
    """Самая длинная серия миссии за всю историю до даты until"""
    if task is None or not task.is_recurring:
        return 0

    task_completions = completions.get(task.task_id) or {}
    completed_dates = [
        parsed for parsed in (parse_date(key) for key, done in task_completions.items() if done)
        if parsed is not None and parsed <= until
    ]
    if not completed_dates:
        return 0

    cursor = min(completed_dates)
    best = 0
    current = 0
    while cursor <= until:
        if is_due(task.rule, cursor):
            if task_completions.get(cursor.isoformat(), False):
                current += 1
                best = max(best, current)
            else:
                current = 0
        cursor += timedelta(days=1)

    return best

__all__ = ['is_completed', 'calculate_streak', 'longest_streak']
