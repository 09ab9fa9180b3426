"""
Статистика трекера: неделя, месяц, год, предметы и сводка достижений
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from aegis.core.achievements import achievement_progress, registry
from aegis.core.database import TrackerStore
from aegis.core.models import AchievementTier
from aegis.utils.datetime_utils import parse_date, today as local_today
from aegis.utils.text_utils import format_duration, percent

logger = logging.getLogger(__name__)

# Сколько дней без учебы допустимо для предмета данной важности
NEGLECT_THRESHOLDS = {
    5: 4,
    4: 6,
    3: 8,
    2: 14,
    1: 21,
}
DEFAULT_NEGLECT_THRESHOLD = 30

def _day_stats(store: TrackerStore, day: date) -> Dict[str, Any]:
    due = store.tasks_for_date(day)
    completed = [t for t in due if store.is_task_completed(t.task_id, day)]
    return {
        'date': day.isoformat(),
        'due_count': len(due),
        'completed_count': len(completed),
        'focus_seconds': store.focus_sessions.get(day.isoformat(), 0) or 0,
    }

def weekly_overview(store: TrackerStore, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Последние 7 дней, от старого к новому"""
    today = today or local_today()
    return [_day_stats(store, today - timedelta(days=6 - i)) for i in range(7)]

def month_calendar(store: TrackerStore, year: int, month: int,
                   today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Дни месяца со статусом: done / missed / pending / future"""
    today = today or local_today()
    _, days_in_month = calendar.monthrange(year, month)
    cells = []

    for day_number in range(1, days_in_month + 1):
        day = date(year, month, day_number)
        stats = _day_stats(store, day)

        if day > today:
            status = 'future'
        elif stats['completed_count'] > 0:
            status = 'done'
        elif day == today:
            status = 'pending'
        else:
            status = 'missed'

        stats['status'] = status
        cells.append(stats)

    return cells

def yearly_completion(store: TrackerStore, year: int) -> List[Dict[str, Any]]:
    """Средний процент выполнения по месяцам (только дни с миссиями)"""
    months = []
    for month in range(1, 13):
        _, days_in_month = calendar.monthrange(year, month)
        total_percentage = 0.0
        days_with_tasks = 0

        for day_number in range(1, days_in_month + 1):
            stats = _day_stats(store, date(year, month, day_number))
            if stats['due_count'] > 0:
                days_with_tasks += 1
                total_percentage += percent(stats['completed_count'], stats['due_count'])

        months.append({
            'month': month,
            'percentage': total_percentage / days_with_tasks if days_with_tasks else 0.0,
        })
    return months

def subject_overview(store: TrackerStore, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Метрики по предметам, по убыванию времени учебы"""
    today = today or local_today()
    stats = {
        s.subject_id: {'total_seconds': 0, 'total_questions': 0, 'correct_questions': 0, 'last_studied': None}
        for s in store.subjects
    }

    for session in store.study_sessions:
        entry = stats.get(session.subject_id)
        if entry is None:
            continue
        entry['total_seconds'] += session.duration_seconds
        entry['total_questions'] += session.total_count
        entry['correct_questions'] += session.correct_count
        if entry['last_studied'] is None or session.date > entry['last_studied']:
            entry['last_studied'] = session.date

    overview = []
    for subject in store.subjects:
        entry = stats[subject.subject_id]
        last_studied = parse_date(entry['last_studied'])
        days_since = (today - last_studied).days if last_studied else None
        threshold = NEGLECT_THRESHOLDS.get(subject.importance, DEFAULT_NEGLECT_THRESHOLD)

        overview.append({
            'subject_id': subject.subject_id,
            'name': subject.name,
            'importance': subject.importance,
            **entry,
            'duration': format_duration(entry['total_seconds']),
            'accuracy': percent(entry['correct_questions'], entry['total_questions']),
            'days_since_studied': days_since,
            'neglected': days_since is None or days_since > threshold,
        })

    overview.sort(key=lambda x: x['total_seconds'], reverse=True)
    return overview

def achievement_summary(store: TrackerStore, today: Optional[date] = None) -> Dict[str, Any]:
    """Сводка достижений: открыто, по уровням, ближайшие к открытию"""
    unlocked = store.ledger.unlocked_ids
    all_achievements = registry.get_all_achievements()

    tier_stats = {}
    for tier in AchievementTier:
        tier_achievements = registry.get_achievements_by_tier(tier)
        earned = sum(1 for ach in tier_achievements if ach.achievement_id in unlocked)
        tier_stats[tier.value] = {
            'earned': earned,
            'total': len(tier_achievements),
            'percentage': percent(earned, len(tier_achievements))
        }

    progress = achievement_progress(store.build_snapshot(today))
    in_progress = []
    for definition in all_achievements:
        if definition.achievement_id in unlocked:
            continue
        current, maximum = progress.get(definition.achievement_id, (0, 1))
        if current > 0:
            in_progress.append({
                'achievement_id': definition.achievement_id.value,
                'title': definition.title,
                'progress': current,
                'max_progress': maximum,
                'percentage': min(100.0, percent(current, maximum))
            })

    in_progress.sort(key=lambda x: x['percentage'], reverse=True)

    return {
        'total_earned': len(unlocked),
        'total_available': len(all_achievements),
        'completion_percentage': percent(len(unlocked), len(all_achievements)),
        'tier_stats': tier_stats,
        'in_progress': in_progress,
    }

__all__ = [
    'NEGLECT_THRESHOLDS',
    'weekly_overview',
    'month_calendar',
    'yearly_completion',
    'subject_overview',
    'achievement_summary'
]
