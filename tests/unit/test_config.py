"""
Unit tests for configuration and logging setup (backupsss/config.py, backupsss/__init__.py).
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from backupsss import configure_logging, create_executor
from backupsss.backup.executor import BackupExecutor
from backupsss.config import (
    get_config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('BACKUP_SRC_DIR', 'BACKUP_DEST_DIR', 'BACKUP_COMPRESS', 'S3_BUCKET',
                 'S3_BUCKET_PREFIX', 'AWS_REGION', 'REMOTE_RETENTION', 'LOCAL_RETENTION',
                 'LOG_DIR', 'BACKUPSSS_ENV'):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def restore_root_logger():
    """Put the root logger back after configure_logging replaces its handlers."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfig:
    """Test environment driven configuration."""

    def test_defaults(self, clean_env):
        """Test defaults when nothing is set."""
        config = get_config('production')

        assert isinstance(config, ProductionConfig)
        assert config.BACKUP_SRC_DIR == '/backup/src'
        assert config.BACKUP_DEST_DIR == '/backup/dest'
        assert config.BACKUP_COMPRESS is True
        assert config.S3_BUCKET is None
        assert config.S3_BUCKET_PREFIX == ''
        assert config.AWS_REGION == 'us-east-1'
        assert config.REMOTE_RETENTION is None
        assert config.LOCAL_RETENTION is None
        assert config.DEBUG is False

    def test_reads_environment(self, clean_env):
        """Test values come from the environment."""
        clean_env.setenv('BACKUP_SRC_DIR', '/srv/data')
        clean_env.setenv('S3_BUCKET', 'backups')
        clean_env.setenv('S3_BUCKET_PREFIX', 'nightly')
        clean_env.setenv('REMOTE_RETENTION', '7')
        clean_env.setenv('BACKUP_COMPRESS', 'false')

        config = get_config('production')

        assert config.BACKUP_SRC_DIR == '/srv/data'
        assert config.S3_BUCKET == 'backups'
        assert config.S3_BUCKET_PREFIX == 'nightly'
        assert config.REMOTE_RETENTION == 7
        assert config.BACKUP_COMPRESS is False

    def test_env_name_selects_config(self, clean_env):
        """Test BACKUPSSS_ENV picks the config class."""
        clean_env.setenv('BACKUPSSS_ENV', 'development')

        config = get_config()

        assert isinstance(config, DevelopmentConfig)
        assert config.DEBUG is True
        assert config.BACKUP_DEST_DIR.endswith('backups')

    def test_testing_config_never_uploads(self, clean_env):
        """Test the testing config ignores S3_BUCKET."""
        clean_env.setenv('S3_BUCKET', 'backups')

        assert TestingConfig().S3_BUCKET is None

    def test_invalid_name(self, clean_env):
        """Test unknown config names are rejected."""
        with pytest.raises(ValueError, match='Invalid config name'):
            get_config('staging')

    @pytest.mark.parametrize("value", ['seven', '-1'])
    def test_invalid_retention(self, clean_env, value):
        """Test bad retention values name the variable."""
        clean_env.setenv('REMOTE_RETENTION', value)

        with pytest.raises(ValueError, match='REMOTE_RETENTION'):
            get_config('production')


class TestLogging:
    """Test configure_logging."""

    def test_console_only_without_log_dir(self, clean_env, restore_root_logger):
        """Test only a console handler is installed without LOG_DIR."""
        configure_logging(get_config('production'))

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)

    def test_file_handler_with_log_dir(self, clean_env, restore_root_logger, tmp_path):
        """Test LOG_DIR adds a rotating file handler."""
        clean_env.setenv('LOG_DIR', str(tmp_path / 'logs'))

        configure_logging(get_config('production'))
        logging.getLogger('backupsss.test').info('hello')

        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        file_handlers[0].flush()
        assert 'hello' in (tmp_path / 'logs' / 'backupsss.log').read_text()

    def test_repeated_calls_do_not_duplicate(self, clean_env, restore_root_logger):
        """Test calling twice replaces rather than adds handlers."""
        config = get_config('production')

        configure_logging(config)
        count = len(logging.getLogger().handlers)
        configure_logging(config)

        assert len(logging.getLogger().handlers) == count

    def test_debug_level(self, clean_env, restore_root_logger):
        """Test DEBUG configs log at DEBUG."""
        configure_logging(TestingConfig())

        assert logging.getLogger().level == logging.DEBUG


class TestCreateExecutor:
    """Test the create_executor factory."""

    def test_create_executor(self, clean_env, restore_root_logger):
        """Test the factory returns an executor for the named config."""
        executor = create_executor('testing')

        assert isinstance(executor, BackupExecutor)
        assert isinstance(executor.config, TestingConfig)
