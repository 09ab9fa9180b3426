"""
Тесты журнала открытых достижений и очереди уведомлений
"""

import logging

from aegis.core.achievements import registry
from aegis.core.ledger import UnlockLedger
from aegis.core.models import AchievementID

FIRST_TASK = registry.get_achievement(AchievementID.FIRST_TASK)
FIRST_STUDY = registry.get_achievement(AchievementID.FIRST_STUDY_SESSION)

def test_apply_is_idempotent():
    ledger = UnlockLedger()

    assert ledger.apply([FIRST_TASK]) == [FIRST_TASK]
    assert ledger.apply([FIRST_TASK]) == []
    assert len(ledger) == 1
    assert ledger.pending_count == 1

def test_notifications_are_fifo():
    ledger = UnlockLedger()
    ledger.apply([FIRST_TASK, FIRST_STUDY])

    assert ledger.pop_notification() == FIRST_TASK
    assert ledger.pop_notification() == FIRST_STUDY
    assert ledger.pop_notification() is None

def test_queued_achievements_are_already_unlocked():
    ledger = UnlockLedger()
    ledger.apply([FIRST_TASK, FIRST_STUDY])

    while ledger.pending_count:
        assert ledger.is_unlocked(ledger.pop_notification().achievement_id)

def test_unlocked_set_only_grows():
    ledger = UnlockLedger()
    sizes = []
    for batch in ([FIRST_TASK], [], [FIRST_TASK, FIRST_STUDY], [FIRST_STUDY]):
        ledger.apply(batch)
        sizes.append(len(ledger.unlocked_ids))

    assert sizes == sorted(sizes)
    assert ledger.unlocked_in_order == [AchievementID.FIRST_TASK, AchievementID.FIRST_STUDY_SESSION]

def test_record_unlocks_accepts_strings_and_ignores_unknown(caplog):
    ledger = UnlockLedger()

    with caplog.at_level(logging.WARNING):
        added = ledger.record_unlocks(["FIRST_TASK", "NOT_AN_ACHIEVEMENT", AchievementID.FIRST_STUDY_SESSION])

    assert [d.achievement_id for d in added] == [AchievementID.FIRST_TASK, AchievementID.FIRST_STUDY_SESSION]
    assert "NOT_AN_ACHIEVEMENT" in caplog.text

def test_clear_notifications_keeps_unlocked():
    ledger = UnlockLedger()
    ledger.apply([FIRST_TASK])
    ledger.clear_notifications()

    assert ledger.pending_count == 0
    assert ledger.is_unlocked(AchievementID.FIRST_TASK)

def test_serialization_drops_queue_and_unknown_ids():
    ledger = UnlockLedger()
    ledger.apply([FIRST_TASK])

    data = ledger.to_dict()
    assert data == {'unlocked_achievements': ['FIRST_TASK']}

    data['unlocked_achievements'].append('REMOVED_LONG_AGO')
    restored = UnlockLedger.from_dict(data)

    assert restored.unlocked_ids == frozenset({AchievementID.FIRST_TASK})
    assert restored.pending_count == 0
