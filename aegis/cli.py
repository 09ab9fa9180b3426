#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Command Line
Использование: aegis [--data FILE] [--json] summary|achievements|check|backup|restore|streaks

Версия: 1.0.0
Дата: 2026-10-19
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from aegis import __version__
from aegis.core.achievements import registry
from aegis.core.database import StorageError, TrackerStore
from aegis.core.streaks import longest_streak
from aegis.services.backup import BackupService
from aegis.services.statistics import achievement_summary, subject_overview, weekly_overview
from aegis.services.storage import DataStorage
from aegis.utils.datetime_utils import parse_date, today as local_today
from aegis.utils.logger import setup_logger, setup_logging
from aegis.utils.text_utils import format_duration, truncate

logger = logging.getLogger(__name__)

# ===== COMMANDS =====

def cmd_summary(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    tasks = [
        {
            'task_id': task.task_id,
            'title': task.title,
            'priority': task.priority,
            'completed': store.is_task_completed(task.task_id, day),
            'streak': store.task_streak(task.task_id, day)
        }
        for task in store.tasks_for_date(day)
    ]
    return {
        'date': day.isoformat(),
        'tasks': tasks,
        'focus_seconds': store.focus_sessions.get(day.isoformat(), 0),
        'week': weekly_overview(store, day),
        'subjects': subject_overview(store, day)
    }

def cmd_achievements(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    summary = achievement_summary(store, day)
    summary['catalog'] = [
        {**definition.to_dict(), 'unlocked': store.ledger.is_unlocked(definition.achievement_id)}
        for definition in registry.get_all_achievements()
    ]
    return summary

def cmd_check(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    store.check_and_unlock_achievements(day)
    DataStorage(args.data).save(store)

    notifications = []
    while True:
        definition = store.pop_notification()
        if definition is None:
            break
        notifications.append(definition.to_dict())

    return {'new_achievements': notifications, 'total_unlocked': len(store.ledger)}

def cmd_backup(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    service = BackupService(args.backup_file)
    path = service.save_backup(store)
    return {'backup_file': str(path), 'archives': len(service.list_archives())}

def cmd_restore(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    result = BackupService(args.backup_file).restore_into(store)
    if result.error:
        return {'restored': False, 'error': result.error}
    if result.is_missing:
        return {'restored': False, 'error': None}

    DataStorage(args.data).save(store)
    return {'restored': True, 'tasks': len(store.tasks), 'achievements': len(store.ledger)}

def cmd_streaks(store: TrackerStore, day: date, args) -> Dict[str, Any]:
    streaks = [
        {
            'task_id': task.task_id,
            'title': task.title,
            'current': store.task_streak(task.task_id, day),
            'longest': longest_streak(task, store.completions, day)
        }
        for task in store.tasks if task.is_recurring
    ]
    streaks.sort(key=lambda x: x['current'], reverse=True)
    return {'date': day.isoformat(), 'streaks': streaks}

COMMANDS = {
    'summary': cmd_summary,
    'achievements': cmd_achievements,
    'check': cmd_check,
    'backup': cmd_backup,
    'restore': cmd_restore,
    'streaks': cmd_streaks,
}

# ===== OUTPUT =====

def format_human_readable(command: str, result: Dict[str, Any]) -> str:
    """Форматирование результата в человекочитаемом виде"""
    lines: List[str] = []

    if command == 'summary':
        lines.append(f"📅 {result['date']}")
        if not result['tasks']:
            lines.append("  Миссий на сегодня нет")
        for task in result['tasks']:
            mark = "✅" if task['completed'] else "⬜"
            lines.append(f"  {mark} {truncate(task['title'], 48)} 🔥{task['streak']}")
        lines.append(f"⏱ Фокус сегодня: {format_duration(result['focus_seconds'])}")
        for subject in result['subjects']:
            warning = " ⚠️" if subject['neglected'] else ""
            lines.append(f"  📚 {subject['name']}: {subject['duration']}{warning}")

    elif command == 'achievements':
        lines.append(f"🏆 Открыто {result['total_earned']}/{result['total_available']} "
                     f"({result['completion_percentage']:.0f}%)")
        for item in result['catalog']:
            mark = "✅" if item['unlocked'] else "🔒"
            lines.append(f"  {mark} {item['title']} [{item['tier']}]")

    elif command == 'check':
        if not result['new_achievements']:
            lines.append("Новых достижений нет")
        for item in result['new_achievements']:
            lines.append(f"🎉 {item['title']}: {item['description']}")

    elif command == 'backup':
        lines.append(f"💾 Копия сохранена: {result['backup_file']}")

    elif command == 'restore':
        if result['restored']:
            lines.append(f"♻️ Восстановлено миссий: {result['tasks']}")
        elif result['error']:
            lines.append(f"❌ {result['error']}")
        else:
            lines.append("Резервная копия не найдена")

    elif command == 'streaks':
        for item in result['streaks']:
            lines.append(f"  🔥 {truncate(item['title'], 48)}: {item['current']} (рекорд {item['longest']})")

    return "\n".join(lines)

# ===== ENTRY POINT =====

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='aegis', description='Трекер миссий, фокуса и учебы')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--data', type=Path, help='Файл данных (по умолчанию из DATA_DIR)')
    parser.add_argument('--backup-file', type=Path, help='Файл резервной копии')
    parser.add_argument('--date', type=str, help='Дата отчета YYYY-MM-DD (по умолчанию сегодня)')
    parser.add_argument('--json', action='store_true', help='Вывод в формате JSON')
    parser.add_argument('--log-file', type=str, help='Дополнительно писать лог в файл')
    parser.add_argument('command', choices=sorted(COMMANDS), help='Команда')
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()
    if args.log_file:
        setup_logger(args.log_file)

    day = local_today()
    if args.date:
        day = parse_date(args.date)
        if day is None:
            parser.error(f"Неверный формат даты: {args.date}")

    try:
        # Восстановление заменяет состояние целиком, текущий файл может быть битым
        if args.command == 'restore':
            store = TrackerStore()
        else:
            store = DataStorage(args.data).load_or_create()
        result = COMMANDS[args.command](store, day, args)
    except StorageError as e:
        logger.error(f"Command {args.command} failed: {e}")
        print(f"💥 Ошибка: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(format_human_readable(args.command, result))

    if args.command == 'restore' and result.get('error'):
        return 2
    return 0

if __name__ == "__main__":
    sys.exit(main())
