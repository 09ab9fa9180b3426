#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0 - Configuration
Централизованная конфигурация трекера с валидацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import os
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Конфигурация хранилища"""
    path: Path
    backup_path: Path
    max_backups: int = 10

@dataclass
class TrackerRules:
    """Правила расчета серий и достижений"""
    timezone: str = "UTC"
    streak_safety_bound: int = 366

    @property
    def tzinfo(self):
        return pytz.timezone(self.timezone)

class TrackerConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('AEGIS_ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Хранилище
        self.storage = StorageConfig(
            path=self.data_dir / "aegis_data.json",
            backup_path=self.backup_dir / "aegis_backup.json",
            max_backups=int(os.getenv('MAX_BACKUPS', 10))
        )

        # Правила трекера
        self.rules = TrackerRules(
            timezone=os.getenv('AEGIS_TIMEZONE', 'UTC'),
            streak_safety_bound=int(os.getenv('AEGIS_STREAK_SAFETY_BOUND', 366))
        )

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO'))
        self.log_to_file = os.getenv('LOG_TO_FILE', 'false').lower() == 'true'
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.rules.timezone not in pytz.all_timezones_set:
            errors.append(f"AEGIS_TIMEZONE: неизвестная временная зона '{self.rules.timezone}'")

        if self.rules.streak_safety_bound <= 0:
            errors.append("AEGIS_STREAK_SAFETY_BOUND должен быть положительным числом")

        if self.storage.max_backups < 1:
            errors.append("MAX_BACKUPS должен быть не меньше 1")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [
            self.data_dir,
            self.backup_dir
        ]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': 'ext://sys.stderr'
                }
            },
            'loggers': {
                'aegis': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"aegis_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

# Глобальный экземпляр конфигурации
config = TrackerConfig()

__all__ = [
    'config',
    'TrackerConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'TrackerRules'
]
