import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from aegis.config import TrackerConfig, config

def setup_logger(log_file: str = "logs/aegis.log", max_bytes: int = 10_000_000, backup_count: int = 5):
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger("aegis")
    logger.setLevel(logging.INFO)
    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger

def setup_logging(cfg: Optional[TrackerConfig] = None) -> logging.Logger:
    cfg = cfg or config
    if cfg.log_to_file:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(cfg.get_logging_config())
    return logging.getLogger("aegis")
