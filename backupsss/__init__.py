import os
import logging
from logging.handlers import RotatingFileHandler


def configure_logging(config):
    """Configure application logging"""

    # Set log level based on environment
    log_level = logging.DEBUG if getattr(config, 'DEBUG', False) else logging.INFO

    handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    handlers.append(console_handler)

    # File handler
    log_dir = getattr(config, 'LOG_DIR', None)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'backupsss.log'),
            maxBytes=10485760,  # 10MB
            backupCount=10
        )
        file_handler.setLevel(log_level)
        file_formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    # Configure root logger; force replaces handlers from an earlier call
    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    logging.getLogger(__name__).info(
        f"Logging configured (level: {logging.getLevelName(log_level)})"
    )


def create_executor(config_name=None):
    """Build config, configure logging and return a BackupExecutor"""
    from backupsss.config import get_config
    from backupsss.backup.executor import BackupExecutor

    config = get_config(config_name)
    configure_logging(config)

    return BackupExecutor(config)
