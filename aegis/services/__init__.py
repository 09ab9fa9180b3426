"""
Сервисы трекера: хранение, резервные копии, статистика
"""

from .storage import DataStorage
from .backup import BackupService, BackupResult, BACKUP_SIGNATURE

__all__ = [
    'DataStorage',
    'BackupService',
    'BackupResult',
    'BACKUP_SIGNATURE'
]
