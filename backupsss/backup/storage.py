"""
Storage drivers for backup archives.

Supports:
- S3Storage: Archives kept in an AWS S3 bucket under an optional prefix
- LocalStorage: Archives kept in a local directory

Both list their archives newest first (`ls_rt`) and remove a single
archive by name (`rm`), which is all the Janitor needs.
"""

import os
import shutil
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

import boto3
from botocore.exceptions import ClientError, BotoCoreError


logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage operation fails."""
    pass


class RemovalError(StorageError):
    """Raised when a single archive cannot be removed."""
    pass


class StorageDriver(ABC):
    """Capabilities the Janitor and the executor rely on."""

    @abstractmethod
    def ls_rt(self) -> List[str]:
        """Return archive names, most recently created first."""

    @abstractmethod
    def rm(self, name: str):
        """Remove one archive. Raises RemovalError on failure."""

    @abstractmethod
    def put_file(self, local_path: str) -> str:
        """Store a local archive and return its name in this storage."""


class S3Storage(StorageDriver):
    """
    Driver for backups stored in AWS S3.

    Objects live at {prefix}/{filename}, or at {filename} when no prefix is
    configured.
    """

    def __init__(self, bucket_name: str, prefix: str = '', region: str = 'us-east-1', client=None):
        """
        Initialize S3 storage driver.

        Args:
            bucket_name: S3 bucket name
            prefix: Key prefix the backups live under (default: bucket root)
            region: AWS region (default: us-east-1)
            client: Preconfigured boto3 S3 client (default: built from region)
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.strip('/')
        self.region = region

        if client is not None:
            self.s3_client = client
            return

        try:
            self.s3_client = boto3.client('s3', region_name=region)
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    def key_for(self, filename: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{filename}"
        return filename

    def put_file(self, local_path: str) -> str:
        """
        Upload archive to S3.

        Args:
            local_path: Path to local archive file

        Returns:
            S3 key of uploaded file

        Raises:
            StorageError: If upload fails
        """
        if not os.path.exists(local_path):
            raise StorageError(f"Local file not found: {local_path}")

        s3_key = self.key_for(os.path.basename(local_path))

        try:
            with open(local_path, 'rb') as f:
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=s3_key,
                    Body=f
                )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise StorageError(f"S3 upload failed ({error_code}): {e}")
        except BotoCoreError as e:
            raise StorageError(f"S3 upload failed: {e}")

        logger.info(f"Uploaded {local_path} to s3://{self.bucket_name}/{s3_key}")
        return s3_key

    def ls_rt(self) -> List[str]:
        """
        List backup keys under the prefix, newest first.

        Returns:
            List of S3 keys sorted by LastModified, descending

        Raises:
            StorageError: If listing fails
        """
        list_prefix = f"{self.prefix}/" if self.prefix else ''

        try:
            objects = []
            paginator = self.s3_client.get_paginator('list_objects_v2')

            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=list_prefix):
                for obj in page.get('Contents', []):
                    objects.append((obj['LastModified'], obj['Key']))

        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise StorageError(f"S3 list failed ({error_code}): {e}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to list S3 objects: {e}")

        objects.sort(key=lambda item: item[0], reverse=True)
        return [key for _, key in objects]

    def rm(self, name: str):
        """
        Delete an object from S3.

        Args:
            name: S3 object key to delete

        Raises:
            RemovalError: If deletion fails
        """
        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=name
            )
        except ClientError as e:
            raise RemovalError(e.response.get('Error', {}).get('Message') or str(e))
        except BotoCoreError as e:
            raise RemovalError(str(e))


class LocalStorage(StorageDriver):
    """
    Driver for backups kept in a flat local directory.
    """

    def __init__(self, base_path: str):
        """
        Initialize local storage driver.

        Args:
            base_path: Directory holding the archives
        """
        self.base_path = Path(base_path)

    def put_file(self, local_path: str) -> str:
        """
        Copy archive into the storage directory.

        Returns:
            Name of the stored file

        Raises:
            StorageError: If the copy fails
        """
        source = Path(local_path)
        if not source.exists():
            raise StorageError(f"Source file not found: {local_path}")

        dest_path = self.base_path / source.name
        if dest_path.resolve() == source.resolve():
            return source.name

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest_path)
        except PermissionError as e:
            raise StorageError(f"Permission denied writing to {dest_path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to store locally: {e}")

        return source.name

    def ls_rt(self) -> List[str]:
        """
        List archive names in the directory, newest first.

        Returns:
            File names sorted by modification time, descending

        Raises:
            StorageError: If the directory cannot be read
        """
        if not self.base_path.exists():
            return []

        try:
            files = [
                (path.stat().st_mtime, path.name)
                for path in self.base_path.iterdir()
                if path.is_file()
            ]
        except OSError as e:
            raise StorageError(f"Failed to list local files: {e}")

        files.sort(key=lambda item: item[0], reverse=True)
        return [name for _, name in files]

    def rm(self, name: str):
        """
        Delete an archive from the directory.

        Args:
            name: File name relative to base_path

        Raises:
            RemovalError: If deletion fails
        """
        try:
            (self.base_path / name).unlink()
        except OSError as e:
            raise RemovalError(e.strerror or str(e))

