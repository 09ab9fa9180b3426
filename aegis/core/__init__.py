#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Core Package
Ядро: повторения, серии, достижения и состояние трекера
"""

from .models import (
    TaskType,
    RecurrenceType,
    TaskPriority,
    AchievementTier,
    AchievementID,
    ValidationError,
    RecurrenceRule,
    Task,
    Subject,
    StudySession
)

from .recurrence import is_due, tasks_for_date
from .streaks import calculate_streak, longest_streak
from .snapshot import Snapshot
from .achievements import (
    AchievementDefinition,
    AchievementRegistry,
    evaluate_achievements,
    achievement_progress
)
from .ledger import UnlockLedger
from .database import (
    StorageError,
    TaskNotFoundError,
    SubjectNotFoundError,
    ImmutableTaskError,
    InvalidBackupError,
    TrackerStore
)

__all__ = [
    # Enums
    'TaskType',
    'RecurrenceType',
    'TaskPriority',
    'AchievementTier',
    'AchievementID',

    # Models
    'ValidationError',
    'RecurrenceRule',
    'Task',
    'Subject',
    'StudySession',

    # Rules
    'is_due',
    'tasks_for_date',
    'calculate_streak',
    'longest_streak',
    'Snapshot',
    'AchievementDefinition',
    'AchievementRegistry',
    'evaluate_achievements',
    'achievement_progress',
    'UnlockLedger',

    # State
    'StorageError',
    'TaskNotFoundError',
    'SubjectNotFoundError',
    'ImmutableTaskError',
    'InvalidBackupError',
    'TrackerStore'
]
