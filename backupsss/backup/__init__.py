"""
Backup module for backupsss.

This module handles the core backup functionality including:
- Archive creation with the system tar binary
- Storage drivers (S3 and local)
- Retention policy enforcement
- Execution orchestration
"""

from .tar import (
    Tar,
    TarVerdict,
    ExecutionOutcome,
    ArchiveError,
    SourceNotFoundError,
    SourceNotReadableError,
    DestinationDirNotFoundError,
    DestinationDirNotWritableError,
    TarProcessError,
    DestinationFileMissingError,
    DestinationFileEmptyError,
)
from .storage import StorageDriver, S3Storage, LocalStorage, StorageError, RemovalError
from .janitor import Janitor, CleanupResult
from .executor import BackupExecutor

__all__ = [
    'Tar',
    'TarVerdict',
    'ExecutionOutcome',
    'ArchiveError',
    'SourceNotFoundError',
    'SourceNotReadableError',
    'DestinationDirNotFoundError',
    'DestinationDirNotWritableError',
    'TarProcessError',
    'DestinationFileMissingError',
    'DestinationFileEmptyError',
    'StorageDriver',
    'S3Storage',
    'LocalStorage',
    'StorageError',
    'RemovalError',
    'Janitor',
    'CleanupResult',
    'BackupExecutor'
]
