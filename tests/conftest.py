"""
Shared pytest fixtures for backupsss tests.

This module provides fixtures for:
- Fake AWS credentials and a moto-backed S3 bucket
- Temporary source and destination directories
- Filesystem and tar runner doubles for Tar
- A storage driver double for Janitor
- Test configuration
"""

from unittest.mock import MagicMock

import pytest
import boto3
from moto import mock_aws

from backupsss.backup.tar import ExecutionOutcome, LocalFilesystem
from backupsss.backup.storage import StorageDriver
from backupsss.config import TestingConfig


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches real AWS."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def mock_s3():
    """
    Mock AWS S3 service using moto.

    Creates a test bucket 'test-bucket' in us-east-1 region.
    """
    with mock_aws():
        s3 = boto3.resource('s3', region_name='us-east-1')
        s3.create_bucket(Bucket='test-bucket')

        yield s3


@pytest.fixture
def backup_src(tmp_path):
    """
    Create a source directory with some data.

    Creates:
    - with_data/file1.txt
    - with_data/nested/file2.txt
    """
    src = tmp_path / 'backup_src' / 'with_data'
    (src / 'nested').mkdir(parents=True)
    (src / 'file1.txt').write_text('Content 1')
    (src / 'nested' / 'file2.txt').write_text('Content 2')
    return src


@pytest.fixture
def backups_dest(tmp_path):
    """Empty destination directory for archives."""
    dest = tmp_path / 'backups_dest'
    dest.mkdir()
    return dest


@pytest.fixture
def fake_filesystem():
    """
    Filesystem double where everything exists, is accessible and is 999 bytes.
    """
    fs = MagicMock(spec=LocalFilesystem)
    fs.exists.return_value = True
    fs.readable.return_value = True
    fs.writable.return_value = True
    fs.size.return_value = 999
    return fs


@pytest.fixture
def make_outcome():
    """Factory for ExecutionOutcome values."""
    def _make(exit_code=0, stderr=''):
        return ExecutionOutcome(
            exit_code=exit_code,
            stderr=stderr,
            status_description=f"pid 4242 exit {exit_code}"
        )
    return _make


@pytest.fixture
def fake_runner(make_outcome):
    """Tar runner double that reports a clean exit."""
    return MagicMock(return_value=make_outcome(0))


@pytest.fixture
def driver():
    """Storage driver double for Janitor tests."""
    return MagicMock(spec=StorageDriver)


@pytest.fixture
def testing_config(backup_src, backups_dest, monkeypatch):
    """TestingConfig pointed at the temporary directories."""
    for name in ('S3_BUCKET', 'S3_BUCKET_PREFIX', 'REMOTE_RETENTION', 'LOCAL_RETENTION',
                 'BACKUP_COMPRESS', 'LOG_DIR'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('BACKUP_SRC_DIR', str(backup_src))
    monkeypatch.setenv('BACKUP_DEST_DIR', str(backups_dest))
    return TestingConfig()
