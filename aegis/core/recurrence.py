#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Recurrence Resolver
Определение, запланирована ли миссия на календарный день

Версия: 1.0.0
Дата: 2026-10-19
"""

from datetime import date
from typing import Iterable, List, Optional

from aegis.core.models import RecurrenceRule, RecurrenceType, Task
from aegis.utils.datetime_utils import weekday_index

def is_due(rule: Optional[RecurrenceRule], day: date) -> bool:
    """Должна ли миссия с этим правилом появиться в указанный день.

    Некорректное правило (неизвестный тип, пустой набор дней,
    отсутствующая дата) дает False, исключений нет.
    """
    if rule is None:
        return False

    if rule.recurrence == RecurrenceType.DAILY.value:
        return True

    if rule.recurrence == RecurrenceType.WEEKLY.value:
        try:
            return weekday_index(day) in (rule.repeat_days or ())
        except TypeError:
            return False

    if rule.recurrence == RecurrenceType.ONCE.value:
        return bool(rule.specific_date) and rule.specific_date == day.isoformat()

    return False

def tasks_for_date(tasks: Iterable[Task], day: date) -> List[Task]:
    """Миссии дня: сначала по приоритету, затем по времени создания"""
    due = [task for task in tasks if is_due(task.rule, day)]
    due.sort(key=lambda task: (task.priority_rank, task.created_at))
    return due

__all__ = ['is_due', 'tasks_for_date']
