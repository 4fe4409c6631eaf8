#!/usr/bin/env python3
"""Run a single backup"""
import sys
import logging

from backupsss import create_executor
from backupsss.backup import ArchiveError, StorageError

if __name__ == '__main__':
    executor = create_executor()

    try:
        executor.execute()
    except (ArchiveError, StorageError) as e:
        logging.getLogger('backupsss').error(f"Backup failed: {e}")
        sys.exit(1)
