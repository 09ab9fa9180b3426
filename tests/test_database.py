"""
Тесты состояния трекера: миссии, фокус, учеба, достижения
"""

from datetime import date, timedelta

import pytest
from freezegun import freeze_time

from aegis.core.database import (
    ImmutableTaskError, SubjectNotFoundError, TaskNotFoundError, TrackerStore
)
from aegis.core.models import (
    AchievementID, RecurrenceRule, TaskPriority, TaskType, ValidationError
)
from tests.conftest import TODAY, complete_days

# ===== TASKS =====

def test_add_task_validates_rule(store):
    with pytest.raises(ValidationError):
        store.add_task("Пустая неделя", RecurrenceRule.weekly([]))
    assert store.tasks == []

def test_min_duration_only_for_focus(store):
    with pytest.raises(ValidationError):
        store.add_task("Обычная", min_duration=10)

    task = store.add_task("Фокус", task_type=TaskType.FOCUS.value, min_duration=10)
    assert task.min_duration_seconds == 600

def test_toggle_common_task(store, daily_task):
    assert store.toggle_task_completion(daily_task.task_id, TODAY) is True
    assert store.is_task_completed(daily_task.task_id, TODAY)
    assert store.toggle_task_completion(daily_task.task_id, TODAY) is False
    assert not store.is_task_completed(daily_task.task_id, TODAY)

def test_toggle_unknown_task(store):
    with pytest.raises(TaskNotFoundError):
        store.toggle_task_completion("missing", TODAY)

def test_completed_focus_task_cannot_be_uncompleted(store, focus_task):
    store.toggle_task_completion(focus_task.task_id, TODAY)

    with pytest.raises(ImmutableTaskError):
        store.toggle_task_completion(focus_task.task_id, TODAY)
    assert store.is_task_completed(focus_task.task_id, TODAY)

def test_immutable_task_allows_only_title_and_description(store):
    task = store.add_task("Зафиксированная", is_immutable=True)

    updated = store.update_task(task.task_id, title="Новое имя", description="описание")
    assert updated.title == "Новое имя"
    assert store.get_task(task.task_id).description == "описание"

    # Та же величина - не изменение
    store.update_task(task.task_id, priority=task.priority)

    with pytest.raises(ImmutableTaskError):
        store.update_task(task.task_id, priority=TaskPriority.HIGH.value)
    with pytest.raises(ImmutableTaskError):
        store.update_task(task.task_id, rule=RecurrenceRule.weekly([1]))
    with pytest.raises(ImmutableTaskError):
        store.update_task(task.task_id, is_immutable=False)

def test_update_task_rejects_unknown_fields(store, daily_task):
    with pytest.raises(ValidationError):
        store.update_task(daily_task.task_id, colour="red")

def test_update_task_validates_new_rule(store, daily_task):
    with pytest.raises(ValidationError):
        store.update_task(daily_task.task_id, rule=RecurrenceRule.weekly([9]))

    updated = store.update_task(daily_task.task_id, rule=RecurrenceRule.weekly([3, 1]))
    assert updated.rule.repeat_days == [1, 3]

def test_delete_task_cascades(store, focus_task):
    store.toggle_task_completion(focus_task.task_id, TODAY)
    store.update_focus_progress(focus_task.task_id, TODAY, 120)

    assert store.delete_task(focus_task.task_id) is True
    assert focus_task.task_id not in store.completions
    assert focus_task.task_id not in store.focus_progress
    assert store.delete_task(focus_task.task_id) is False

def test_tasks_for_date_ordering(store):
    low = store.add_task("Low", priority=TaskPriority.LOW.value)
    high = store.add_task("High", priority=TaskPriority.HIGH.value)
    store.add_task("Tomorrow", RecurrenceRule.once(TODAY + timedelta(days=1)))

    assert [t.task_id for t in store.tasks_for_date(TODAY)] == [high.task_id, low.task_id]

def test_task_streak(store, daily_task):
    complete_days(store, daily_task.task_id, TODAY - timedelta(days=1), 4)
    assert store.task_streak(daily_task.task_id, TODAY) == 4
    assert store.task_streak("missing", TODAY) == 0

# ===== FOCUS =====

def test_focus_log_accumulates(store):
    assert store.add_focus_time(TODAY, 600) == 600
    assert store.add_focus_time(TODAY, 300) == 900

    with pytest.raises(ValidationError):
        store.add_focus_time(TODAY, -5)

def test_running_timer_freezes_task(store, focus_task):
    store.update_focus_progress(focus_task.task_id, TODAY, 0)
    assert store.get_task(focus_task.task_id).is_immutable is False

    store.update_focus_progress(focus_task.task_id, TODAY, 90)
    assert store.get_task(focus_task.task_id).is_immutable is True
    assert store.get_focus_progress(focus_task.task_id, TODAY) == 90
    assert store.get_focus_progress(focus_task.task_id, TODAY - timedelta(days=1)) == 0

def test_quick_focus_creates_completed_once_task(store):
    task = store.record_quick_focus("Спринт", 90, day=TODAY)

    assert task.is_focus and task.is_immutable
    assert task.rule == RecurrenceRule.once(TODAY)
    assert task.min_duration == 2
    assert store.is_task_completed(task.task_id, TODAY)
    assert store.focus_sessions[TODAY.isoformat()] == 90

def test_quick_focus_minimum_duration(store):
    assert store.record_quick_focus("Миг", 0, day=TODAY).min_duration == 1

def test_quick_focus_logs_study_session(store):
    subject = store.add_subject("Математика", importance=4)
    store.record_quick_focus("Задачи", 1800, day=TODAY, subject_id=subject.subject_id,
                             questions_correct=8, questions_total=10)

    assert len(store.study_sessions) == 1
    session = store.study_sessions[0]
    assert session.subject_id == subject.subject_id
    assert session.duration_seconds == 1800
    assert session.date == TODAY.isoformat()

def test_quick_focus_invalid_title_leaves_no_trace(store):
    subject = store.add_subject("Математика")

    with pytest.raises(ValidationError):
        store.record_quick_focus("   ", 600, day=TODAY, subject_id=subject.subject_id)

    assert store.study_sessions == []
    assert store.tasks == []
    assert store.focus_sessions == {}

def test_quick_focus_unknown_subject_leaves_no_trace(store):
    with pytest.raises(SubjectNotFoundError):
        store.record_quick_focus("Спринт", 600, day=TODAY, subject_id="missing")

    assert store.tasks == []
    assert store.focus_sessions == {}

@freeze_time("2025-01-15 12:00:00", tz_offset=0)
def test_quick_focus_defaults_to_today(store):
    task = store.record_quick_focus("Без даты", 60)
    assert store.is_task_completed(task.task_id, date(2025, 1, 15))

# ===== STUDY =====

def test_study_session_requires_known_subject(store):
    with pytest.raises(SubjectNotFoundError):
        store.add_study_session("missing", 60, day=TODAY)

def test_study_session_validates_questions(store):
    subject = store.add_subject("Физика")
    with pytest.raises(ValidationError):
        store.add_study_session(subject.subject_id, 60, questions_correct=5, questions_total=3, day=TODAY)

def test_subject_importance_range(store):
    with pytest.raises(ValidationError):
        store.add_subject("Химия", importance=6)

def test_update_subject(store):
    subject = store.add_subject("История")
    updated = store.update_subject(subject.subject_id, importance=5)

    assert updated.name == "История"
    assert updated.importance == 5
    with pytest.raises(SubjectNotFoundError):
        store.update_subject("missing", name="x")

def test_reset_and_delete_subject(store):
    keep = store.add_subject("Биология")
    drop = store.add_subject("География")
    for _ in range(3):
        store.add_study_session(drop.subject_id, 60, day=TODAY)
    store.add_study_session(keep.subject_id, 60, day=TODAY)

    assert store.reset_subject(drop.subject_id) == 3
    assert store.get_subject(drop.subject_id) is not None

    store.add_study_session(drop.subject_id, 60, day=TODAY)
    assert store.delete_subject(drop.subject_id) is True
    assert [s.subject_id for s in store.study_sessions] == [keep.subject_id]

# ===== ACHIEVEMENTS =====

def test_mutations_do_not_unlock_until_checked(store, daily_task):
    store.toggle_task_completion(daily_task.task_id, TODAY)
    assert len(store.ledger) == 0

    new = store.check_and_unlock_achievements(TODAY)

    assert AchievementID.FIRST_TASK in {d.achievement_id for d in new}
    assert store.pop_notification().achievement_id == AchievementID.FIRST_TASK
    assert store.check_and_unlock_achievements(TODAY) == []

def test_snapshot_is_detached_from_store(store, daily_task):
    snapshot = store.build_snapshot(TODAY)
    store.toggle_task_completion(daily_task.task_id, TODAY)

    assert not snapshot.is_completed(daily_task.task_id, TODAY)

def test_record_unlocks(store):
    added = store.record_unlocks(["FIRST_TASK"])
    assert [d.achievement_id for d in added] == [AchievementID.FIRST_TASK]

# ===== SERIALIZATION =====

def test_round_trip(store, daily_task):
    subject = store.add_subject("Литература")
    store.add_study_session(subject.subject_id, 300, day=TODAY)
    store.toggle_task_completion(daily_task.task_id, TODAY)
    store.add_focus_time(TODAY, 120)
    store.check_and_unlock_achievements(TODAY)

    restored = TrackerStore.from_dict(store.to_dict())

    assert restored.to_dict() == store.to_dict()
    assert restored.ledger.pending_count == 0

def test_from_dict_skips_bad_records(caplog):
    data = {
        'tasks': [
            {'task_id': 't1', 'title': 'OK'},
            {'task_id': 't2', 'title': ''},
            {'title': 'no id'},
        ],
        'subjects': [{'subject_id': 's1', 'name': 'Art', 'importance': 99}],
        'completions': {'t1': {'2025-01-15': True}, 'bad': 'oops'},
    }

    store = TrackerStore.from_dict(data)

    assert [t.task_id for t in store.tasks] == ['t1']
    assert store.subjects == []
    assert store.is_task_completed('t1', TODAY)
    assert 'bad' not in store.completions

def test_replace_state(store, daily_task):
    other = TrackerStore()
    other.add_task("Из копии")
    other.record_unlocks(["FIRST_TASK"])

    store.replace_state(other)

    assert [t.title for t in store.tasks] == ["Из копии"]
    assert store.ledger.is_unlocked(AchievementID.FIRST_TASK)

def test_from_dict_ignores_malformed_sections():
    data = {
        'tasks': {'t1': 'not a list'},
        'completions': [['t1', {}]],
        'focus_progress': 'oops',
        'focus_sessions': ['2025-01-15', 10],
        'unlocked_achievements': 'FIRST_TASK',
    }

    store = TrackerStore.from_dict(data)

    assert store.tasks == []
    assert store.completions == {}
    assert store.focus_progress == {}
    assert store.focus_sessions == {}
    assert len(store.ledger) == 0

def test_from_dict_keeps_only_valid_focus_seconds():
    data = {
        'focus_sessions': {'2025-01-14': 300, '2025-01-15': '10', '2025-01-16': True, '2025-01-17': -5},
        'focus_progress': {'t1': {'2025-01-15': 120, '2025-01-16': 'x'}},
    }

    store = TrackerStore.from_dict(data)

    assert store.focus_sessions == {'2025-01-14': 300}
    assert store.focus_progress == {'t1': {'2025-01-15': 120}}
    assert store.add_focus_time(TODAY, 5) == 5
