#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Unlock Ledger
Учет открытых достижений и очередь уведомлений

Версия: 1.0.0
Дата: 2026-10-19
"""

from collections import deque
from typing import Any, Deque, Dict, FrozenSet, Iterable, List, Optional, Union
import logging

from aegis.core.achievements import AchievementDefinition, AchievementRegistry, registry
from aegis.core.models import AchievementID

logger = logging.getLogger(__name__)

class UnlockLedger:
    """Открытые достижения (только добавление) и FIFO очередь уведомлений.

    Достижение сначала попадает в набор открытых и лишь затем в очередь,
    поэтому все, что лежит в очереди, уже открыто.
    """

    def __init__(self, unlocked: Optional[Iterable[AchievementID]] = None,
                 achievement_registry: Optional[AchievementRegistry] = None):
        self.registry = achievement_registry or registry
        self._unlocked: List[AchievementID] = []
        self._queue: Deque[AchievementDefinition] = deque()

        for achievement_id in unlocked or ():
            if achievement_id not in self._unlocked:
                self._unlocked.append(achievement_id)

    # ===== QUERIES =====

    @property
    def unlocked_ids(self) -> FrozenSet[AchievementID]:
        return frozenset(self._unlocked)

    @property
    def unlocked_in_order(self) -> List[AchievementID]:
        return list(self._unlocked)

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def is_unlocked(self, achievement_id: AchievementID) -> bool:
        return achievement_id in self._unlocked

    def __len__(self) -> int:
        return len(self._unlocked)

    # ===== MUTATORS =====

    def apply(self, newly_qualifying: Iterable[AchievementDefinition]) -> List[AchievementDefinition]:
        """Объединить новые достижения с открытыми. Повтор - no-op."""
        added = []
        for definition in newly_qualifying:
            if definition.achievement_id in self._unlocked:
                continue
            self._unlocked.append(definition.achievement_id)
            added.append(definition)

        self._queue.extend(added)

        if added:
            logger.info(f"Achievements unlocked: {', '.join(d.achievement_id.value for d in added)}")

        return added

    def record_unlocks(self, achievement_ids: Iterable[Union[AchievementID, str]]) -> List[AchievementDefinition]:
        """Открыть достижения по идентификаторам каталога"""
        definitions = []
        for raw_id in achievement_ids:
            try:
                achievement_id = AchievementID(raw_id)
            except ValueError:
                logger.warning(f"Unknown achievement id ignored: {raw_id}")
                continue
            definition = self.registry.get_achievement(achievement_id)
            if definition is None:
                logger.warning(f"Unknown achievement id ignored: {raw_id}")
                continue
            definitions.append(definition)
        return self.apply(definitions)

    def pop_notification(self) -> Optional[AchievementDefinition]:
        """Снять первое уведомление из очереди. None - очередь пуста."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def clear_notifications(self) -> None:
        self._queue.clear()

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        # Очередь уведомлений не сохраняется
        return {'unlocked_achievements': [a.value for a in self._unlocked]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  achievement_registry: Optional[AchievementRegistry] = None) -> "UnlockLedger":
        raw_ids = data.get('unlocked_achievements') or []
        if not isinstance(raw_ids, list):
            logger.warning(f"Ignoring malformed unlocked achievements: got {type(raw_ids).__name__}")
            raw_ids = []

        unlocked = []
        for raw_id in raw_ids:
            try:
                unlocked.append(AchievementID(raw_id))
            except ValueError:
                logger.warning(f"Dropping unknown achievement id from saved data: {raw_id}")
        return cls(unlocked, achievement_registry)

__all__ = ['UnlockLedger']
