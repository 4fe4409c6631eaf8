"""
Backup executor - runs one complete backup.

Workflow:
1. Archive the source directory into the destination directory
2. Upload the archive to remote storage (if configured)
3. Prune old archives from remote storage
4. Prune old archives from the destination directory (if configured)
"""

import os
import time
import logging
from typing import Any, Callable, Dict, List, Optional

from .tar import Tar, TarVerdict, ExecutionOutcome
from .storage import StorageDriver, S3Storage, LocalStorage
from .janitor import Janitor, CleanupResult


logger = logging.getLogger(__name__)


def generate_archive_filename(compress: bool = True) -> str:
    """
    Generate a timestamped archive filename.

    Format: {unix timestamp}.tar.gz, or {unix timestamp}.tar uncompressed.
    Names sort in creation order.
    """
    extension = 'tar.gz' if compress else 'tar'
    return f"{int(time.time())}.{extension}"


class BackupExecutor:
    """
    Orchestrates a backup run from a Config.
    """

    def __init__(
        self,
        config,
        remote: Optional[StorageDriver] = None,
        local: Optional[StorageDriver] = None,
        runner: Optional[Callable[[List[str]], ExecutionOutcome]] = None
    ):
        """
        Initialize backup executor.

        Args:
            config: Config instance (see backupsss.config)
            remote: Remote storage driver (default: S3Storage when S3_BUCKET is set)
            local: Driver over the destination directory (default: LocalStorage)
            runner: Tar runner passed through to Tar (default: run_tar)
        """
        self.config = config
        self.remote = remote if remote is not None else self._default_remote()
        self.local = local if local is not None else LocalStorage(config.BACKUP_DEST_DIR)
        self.runner = runner
        self.archive_path = None
        self.logs = []

    def _default_remote(self) -> Optional[StorageDriver]:
        if not self.config.S3_BUCKET:
            return None
        return S3Storage(
            bucket_name=self.config.S3_BUCKET,
            prefix=self.config.S3_BUCKET_PREFIX,
            region=self.config.AWS_REGION
        )

    def execute(self) -> Dict[str, Any]:
        """
        Run the backup.

        Returns:
            Summary dict:
            {
                'archive': str,
                'size_bytes': int,
                'remote_key': str or None,
                'warning': bool,
                'remote_removed': List[str],
                'remote_failed': List[str],
                'local_removed': List[str],
                'local_failed': List[str],
                'logs': List[str]
            }

        Raises:
            ArchiveError: If the archive cannot be built
            StorageError: If the upload or a listing fails
        """
        summary = {
            'archive': None,
            'size_bytes': 0,
            'remote_key': None,
            'warning': False,
            'remote_removed': [],
            'remote_failed': [],
            'local_removed': [],
            'local_failed': []
        }

        # Step 1: Build archive
        filename = generate_archive_filename(self.config.BACKUP_COMPRESS)
        dest = os.path.join(self.config.BACKUP_DEST_DIR, filename)
        self._log(f"Creating archive {dest} from {self.config.BACKUP_SRC_DIR}")

        tar = Tar(
            self.config.BACKUP_SRC_DIR,
            dest,
            compress=self.config.BACKUP_COMPRESS,
            runner=self.runner
        )
        archive_path, outcome = tar.make()
        verdict = tar.classify_exit(outcome)

        self.archive_path = str(archive_path)
        summary['archive'] = self.archive_path
        summary['size_bytes'] = os.path.getsize(self.archive_path)
        summary['warning'] = verdict.status == TarVerdict.WARNING
        self._log(f"Archive created: {tar.filename} ({summary['size_bytes'] / 1024 / 1024:.2f} MB)")

        # Step 2-3: Upload and prune remote
        if self.remote is not None:
            self._log("Uploading archive")
            summary['remote_key'] = self.remote.put_file(self.archive_path)
            self._log(f"Uploaded: {summary['remote_key']}")

            if self.config.REMOTE_RETENTION is not None:
                results = self._prune(self.remote, self.config.REMOTE_RETENTION)
                summary['remote_removed'], summary['remote_failed'] = _split(results)
            else:
                self._log("Remote retention not configured, skipping")
        else:
            self._log("Remote storage not configured, skipping upload")

        # Step 4: Prune local
        if self.config.LOCAL_RETENTION is not None:
            results = self._prune(self.local, self.config.LOCAL_RETENTION)
            summary['local_removed'], summary['local_failed'] = _split(results)
        else:
            self._log("Local retention not configured, skipping")

        self._log("Backup completed successfully")
        summary['logs'] = self.logs
        return summary

    def _prune(self, driver: StorageDriver, retention_count: int) -> List[CleanupResult]:
        janitor = Janitor(driver, retention_count=retention_count)
        results = janitor.cleanup()
        self.logs.extend(janitor.logs)
        return results

    def _log(self, message: str):
        self.logs.append(message)
        logger.info(message)


def _split(results: List[CleanupResult]):
    removed = [result.name for result in results if result.removed]
    failed = [result.name for result in results if not result.removed]
    return removed, failed
