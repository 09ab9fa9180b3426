"""
Резервное копирование: версионированный JSON документ с меткой приложения
"""

import gzip
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from aegis.config import config
from aegis.core.database import InvalidBackupError, TrackerStore
from aegis.core.models import ValidationError
from aegis.services.storage import write_json_atomic

logger = logging.getLogger(__name__)

BACKUP_SIGNATURE = {
    'app': 'aegis',
    'version': 1,
}

@dataclass
class BackupResult:
    """Результат загрузки копии.

    data - валидная копия; error - файл есть, но он битый или чужой;
    оба None - файла нет, обычный первый запуск.
    """
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.data is not None

    @property
    def is_missing(self) -> bool:
        return self.data is None and self.error is None

def wrap_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    return {**BACKUP_SIGNATURE, 'data': data}

def unwrap_payload(payload: Any) -> Dict[str, Any]:
    """Проверить метку и версию, вернуть данные"""
    if not isinstance(payload, dict):
        raise InvalidBackupError("Backup payload is not an object")
    if payload.get('app') != BACKUP_SIGNATURE['app'] or payload.get('version') != BACKUP_SIGNATURE['version']:
        raise InvalidBackupError("Backup signature or version mismatch")
    data = payload.get('data')
    if not isinstance(data, dict):
        raise InvalidBackupError("Backup has no data section")
    return data

class BackupService:
    """Сохранение и восстановление полной копии состояния"""

    def __init__(self, backup_file: Optional[Path] = None, max_backups: Optional[int] = None):
        self.backup_file = Path(backup_file) if backup_file else config.storage.backup_path
        self.archive_dir = self.backup_file.parent / "archive"
        self.max_backups = max_backups or config.storage.max_backups

    def save_backup(self, store: TrackerStore) -> Path:
        """Записать копию. Предыдущая копия уходит в архив (.gz)."""
        if self.backup_file.exists():
            self._archive_previous()

        write_json_atomic(self.backup_file, wrap_payload(store.to_dict()))
        logger.info(f"Backup saved: {self.backup_file}")
        return self.backup_file

    def load_backup(self) -> BackupResult:
        if not self.backup_file.exists():
            logger.info("No backup file found, starting fresh")
            return BackupResult()

        try:
            with open(self.backup_file, 'r', encoding='utf-8') as f:
                payload = json.load(f)
            data = unwrap_payload(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, InvalidBackupError) as e:
            logger.warning(f"Invalid backup file format: {e}")
            return BackupResult(error="Invalid or corrupted backup file")
        except OSError as e:
            logger.error(f"Error loading backup: {e}")
            return BackupResult(error="Could not read backup file")

        logger.info("Valid backup loaded successfully")
        return BackupResult(data=data)

    def restore_into(self, store: TrackerStore) -> BackupResult:
        """Восстановить состояние из копии. Замена целиком, не слияние."""
        result = self.load_backup()
        if result.data is None:
            return result

        try:
            restored = TrackerStore.from_dict(result.data)
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Backup data could not be loaded: {e}")
            return BackupResult(error="Invalid or corrupted backup file")

        store.replace_state(restored)
        return result

    def list_archives(self) -> List[Dict[str, Any]]:
        """Список архивных копий, новые первыми"""
        archives = []
        for archive in self.archive_dir.glob("backup_*.json.gz"):
            stat = archive.stat()
            archives.append({
                'name': archive.name,
                'path': str(archive),
                'size_kb': round(stat.st_size / 1024, 2)
            })
        # Имена содержат метку времени, сортировка по имени хронологическая
        return sorted(archives, key=lambda x: x['name'], reverse=True)

    def _archive_previous(self) -> None:
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        archive_path = self.archive_dir / f"backup_{timestamp}.json.gz"

        with open(self.backup_file, 'rb') as f_in:
            with gzip.open(archive_path, 'wb') as f_out:
                f_out.writelines(f_in)

        self._cleanup_old_archives()

    def _cleanup_old_archives(self) -> None:
        archives = sorted(self.archive_dir.glob("backup_*.json.gz"), key=lambda p: p.name, reverse=True)
        for archive in archives[self.max_backups:]:
            archive.unlink()
            logger.info(f"Removed old backup: {archive}")

__all__ = ['BACKUP_SIGNATURE', 'BackupResult', 'BackupService', 'wrap_payload', 'unwrap_payload']
