"""
Постоянное хранение состояния трекера в JSON файле
"""

import json
import shutil
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from aegis.config import config
from aegis.core.database import StorageError, TrackerStore
from aegis.core.models import ValidationError

logger = logging.getLogger(__name__)

def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """Атомарная запись через временный файл"""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_suffix('.tmp')

    try:
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        # Проверяем целостность записанного файла
        with open(temp_file, 'r', encoding='utf-8') as f:
            json.load(f)

        shutil.move(str(temp_file), str(path))
    except Exception:
        if temp_file.exists():
            temp_file.unlink()
        raise

class DataStorage:
    """Загрузка и сохранение состояния"""

    def __init__(self, data_file: Optional[Path] = None):
        self.data_file = Path(data_file) if data_file else config.storage.path

    def load(self) -> Optional[TrackerStore]:
        """Загрузить состояние. None - файла еще нет (первый запуск)."""
        if not self.data_file.exists():
            logger.info("Data file does not exist, starting with empty state")
            return None

        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Data file is corrupted: {e}")
            raise StorageError(f"Data file is corrupted: {e}")
        except OSError as e:
            logger.error(f"Failed to read data file: {e}")
            raise StorageError(f"Failed to read data file: {e}")

        if not isinstance(data, dict):
            raise StorageError("Data file has unexpected structure")

        try:
            store = TrackerStore.from_dict(data)
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Data file has unexpected content: {e}")
            raise StorageError(f"Data file has unexpected content: {e}")

        logger.info(f"Loaded {len(store.tasks)} tasks and {len(store.subjects)} subjects")
        return store

    def load_or_create(self) -> TrackerStore:
        return self.load() or TrackerStore()

    def save(self, store: TrackerStore) -> None:
        try:
            write_json_atomic(self.data_file, store.to_dict())
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save data: {e}")
            raise StorageError(f"Failed to save data: {e}")

        logger.debug(f"State saved to {self.data_file}")

__all__ = ['DataStorage', 'write_json_atomic']
