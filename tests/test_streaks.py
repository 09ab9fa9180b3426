"""
Тесты подсчета серий
"""

from datetime import date, timedelta

from aegis.core.models import RecurrenceRule, Task
from aegis.core.streaks import calculate_streak, is_completed, longest_streak

TODAY = date(2025, 1, 15)  # среда

def _completions(task_id, days):
    return {task_id: {d.isoformat(): True for d in days}}

def _days_back(last_day, count):
    return [last_day - timedelta(days=i) for i in range(count)]

def test_is_completed_missing_entry_means_not_done():
    assert is_completed({}, "t1", TODAY) is False
    assert is_completed({"t1": {TODAY.isoformat(): True}}, "t1", TODAY) is True
    assert is_completed({"t1": {TODAY.isoformat(): True}}, "t1", TODAY.isoformat()) is True

def test_unfinished_today_does_not_break_streak():
    task = Task(task_id="t1", title="Daily")
    completions = _completions("t1", _days_back(TODAY - timedelta(days=1), 3))

    assert calculate_streak(task, completions, TODAY) == 3

def test_completed_today_counts():
    task = Task(task_id="t1", title="Daily")
    completions = _completions("t1", _days_back(TODAY, 3))

    assert calculate_streak(task, completions, TODAY) == 3

def test_missed_day_breaks_streak():
    task = Task(task_id="t1", title="Daily")
    completions = _completions("t1", [TODAY, TODAY - timedelta(days=2), TODAY - timedelta(days=3)])

    assert calculate_streak(task, completions, TODAY) == 1

def test_weekly_streak_skips_days_not_due():
    task = Task(task_id="t1", title="Mon/Wed", rule=RecurrenceRule.weekly([1, 3]))
    done = [date(2025, 1, 15), date(2025, 1, 13), date(2025, 1, 8), date(2025, 1, 6)]
    completions = _completions("t1", done)

    assert calculate_streak(task, completions, TODAY) == 4

def test_non_recurring_and_missing_tasks_have_no_streak():
    once = Task(task_id="t1", title="Once", rule=RecurrenceRule.once(TODAY))
    completions = _completions("t1", [TODAY])

    assert calculate_streak(once, completions, TODAY) == 0
    assert calculate_streak(None, completions, TODAY) == 0

def test_streak_is_capped_by_safety_bound():
    task = Task(task_id="t1", title="Daily")
    completions = _completions("t1", _days_back(TODAY, 400))

    assert calculate_streak(task, completions, TODAY) == 366
    assert calculate_streak(task, completions, TODAY, safety_bound=10) == 10

def test_weekly_rule_without_days_stops_at_bound():
    task = Task(task_id="t1", title="Broken", rule=RecurrenceRule(recurrence="WEEKLY"))
    assert calculate_streak(task, {}, TODAY) == 0

def test_completing_today_never_lowers_streak():
    task = Task(task_id="t1", title="Daily")
    completions = _completions("t1", _days_back(TODAY - timedelta(days=1), 4))
    before = calculate_streak(task, completions, TODAY)

    completions["t1"][TODAY.isoformat()] = True

    assert calculate_streak(task, completions, TODAY) == before + 1

def test_longest_streak_finds_best_run():
    task = Task(task_id="t1", title="Daily")
    first_run = _days_back(TODAY - timedelta(days=10), 5)
    second_run = _days_back(TODAY, 2)
    completions = _completions("t1", first_run + second_run)

    assert longest_streak(task, completions, TODAY) == 5
    assert longest_streak(task, {}, TODAY) == 0
