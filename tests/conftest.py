"""
Общие фикстуры тестов трекера
"""

import logging
from datetime import date, timedelta

import pytest

from aegis.core.database import TrackerStore
from aegis.core.models import RecurrenceRule, TaskType

# Среда, 15 января 2025
TODAY = date(2025, 1, 15)

@pytest.fixture(autouse=True)
def reset_aegis_logger():
    """CLI перенастраивает логгер 'aegis'; возвращаем распространение в root для caplog"""
    yield
    aegis_logger = logging.getLogger("aegis")
    for handler in list(aegis_logger.handlers):
        aegis_logger.removeHandler(handler)
    aegis_logger.propagate = True
    aegis_logger.setLevel(logging.NOTSET)

@pytest.fixture
def today():
    return TODAY

@pytest.fixture
def store():
    return TrackerStore()

@pytest.fixture
def daily_task(store):
    return store.add_task("Зарядка", RecurrenceRule.daily())

@pytest.fixture
def focus_task(store):
    return store.add_task("Глубокая работа", RecurrenceRule.daily(),
                          task_type=TaskType.FOCUS.value, min_duration=25)

def complete_days(store, task_id, last_day, count):
    """Отметить миссию выполненной count дней подряд, заканчивая last_day"""
    for offset in range(count):
        store.completions.setdefault(task_id, {})[(last_day - timedelta(days=offset)).isoformat()] = True
