import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_count(name, default=None):
    """Read a non-negative integer from the environment."""
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    try:
        count = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if count < 0:
        raise ValueError(f"{name} must be >= 0, got {count}")
    return count


class Config:
    """Base configuration"""

    DEBUG = False

    def __init__(self):
        # Read at instantiation so changes to the environment are picked up
        self.BACKUP_SRC_DIR = os.environ.get('BACKUP_SRC_DIR') or '/backup/src'
        self.BACKUP_DEST_DIR = os.environ.get('BACKUP_DEST_DIR') or '/backup/dest'
        self.BACKUP_COMPRESS = _env_bool('BACKUP_COMPRESS', True)

        # Remote storage (no upload when the bucket is unset)
        self.S3_BUCKET = os.environ.get('S3_BUCKET') or None
        self.S3_BUCKET_PREFIX = os.environ.get('S3_BUCKET_PREFIX') or ''
        self.AWS_REGION = os.environ.get('AWS_REGION') or 'us-east-1'

        # Retention
        self.REMOTE_RETENTION = _env_count('REMOTE_RETENTION')
        self.LOCAL_RETENTION = _env_count('LOCAL_RETENTION')

        # Logging
        self.LOG_DIR = os.environ.get('LOG_DIR') or None


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True

    def __init__(self):
        super().__init__()
        # Use local data directory for development
        base_dir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
        data_dir = os.path.join(base_dir, 'data')
        if not os.environ.get('BACKUP_DEST_DIR'):
            self.BACKUP_DEST_DIR = os.path.join(data_dir, 'backups')
        if not os.environ.get('LOG_DIR'):
            self.LOG_DIR = os.path.join(data_dir, 'logs')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True

    def __init__(self):
        super().__init__()
        self.S3_BUCKET = None
        self.LOG_DIR = None


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig
}


def get_config(config_name=None):
    """
    Build the configuration for `config_name`.

    Falls back to the BACKUPSSS_ENV environment variable, then 'production'.

    Raises:
        ValueError: If the name is unknown or an env value is invalid
    """
    if config_name is None:
        config_name = os.environ.get('BACKUPSSS_ENV', 'production')

    if config_name not in config:
        raise ValueError(
            f"Invalid config name: {config_name}. "
            f"Valid options: {list(config.keys())}"
        )

    return config[config_name]()
