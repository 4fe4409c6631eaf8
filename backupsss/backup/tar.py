"""
Tar archive builder.

Validates the source and destination paths, runs the system `tar` binary
as a subprocess and checks the result:
- exit 0: success
- exit 1 with a known harmless warning on stderr: success with diagnostics
- anything else: fatal

A successful run is followed by an inspection of the archive file itself
(it must exist and must not be empty).
"""

import os
import shlex
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)

# tar exits 1 for these; the archive is still usable
BENIGN_TAR_WARNINGS = (
    'file changed as we read it',
    'file removed before we read it',
)


class ArchiveError(Exception):
    """Base class for archive build failures."""
    pass


class SourceNotFoundError(ArchiveError, FileNotFoundError):
    """Raised when the source path does not exist."""
    pass


class SourceNotReadableError(ArchiveError, PermissionError):
    """Raised when the source path exists but cannot be read."""
    pass


class DestinationDirNotFoundError(ArchiveError, FileNotFoundError):
    """Raised when the destination's directory does not exist."""
    pass


class DestinationDirNotWritableError(ArchiveError, PermissionError):
    """Raised when the destination's directory cannot be written to."""
    pass


class TarProcessError(ArchiveError):
    """Raised when tar exits with a fatal status."""

    def __init__(self, command: str, exit_code: int, stderr: str = ''):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"ERROR: {command} exited {exit_code}")


class DestinationFileMissingError(ArchiveError):
    """Raised when tar reported success but wrote no archive."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("ERROR: Tar destination file does not exist.")


class DestinationFileEmptyError(ArchiveError):
    """Raised when tar reported success but the archive is 0 bytes."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("ERROR: Tar destination file is 0 bytes.")


@dataclass
class ExecutionOutcome:
    """Captured result of one tar run."""
    exit_code: int
    stderr: str
    status_description: str
    stdout: str = ''


@dataclass
class TarVerdict:
    """Classification of an ExecutionOutcome."""
    SUCCESS = 'success'
    WARNING = 'warning'
    FATAL = 'fatal'

    status: str
    reason: Optional[str] = None
    diagnostics: Dict[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status != self.FATAL


class LocalFilesystem:
    """Filesystem checks used by Tar. Swap it out in tests."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def readable(self, path: str) -> bool:
        return os.access(path, os.R_OK)

    def writable(self, path: str) -> bool:
        return os.access(path, os.W_OK)

    def size(self, path: str) -> int:
        return os.path.getsize(path)


def run_tar(args: List[str]) -> ExecutionOutcome:
    """
    Run tar and wait for it to finish.

    There is no timeout; callers that need one must wrap this call.

    Args:
        args: Full argv, e.g. ['tar', '-zcvf', 'dest.tar.gz', 'src']

    Returns:
        ExecutionOutcome with exit code, stderr and a status description
    """
    try:
        proc = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )
    except OSError as e:
        # Same code a shell reports for a missing binary
        return ExecutionOutcome(
            exit_code=127,
            stderr=str(e),
            status_description=f"could not start {args[0]}: {e}"
        )

    stdout, stderr = proc.communicate()
    return ExecutionOutcome(
        exit_code=proc.returncode,
        stderr=stderr or '',
        status_description=f"pid {proc.pid} exit {proc.returncode}",
        stdout=stdout or ''
    )


class Tar:
    """
    Builds a single tar archive of `src` at `dest`.

    The request (src, dest, compress) is fixed at construction time.
    """

    def __init__(
        self,
        src: str,
        dest: str,
        compress: bool = True,
        filesystem: Optional[LocalFilesystem] = None,
        runner: Optional[Callable[[List[str]], ExecutionOutcome]] = None
    ):
        """
        Initialize tar builder.

        Args:
            src: Path of the file or directory to archive
            dest: Path of the archive to create
            compress: Gzip the archive (default: True)
            filesystem: Filesystem checks (default: LocalFilesystem)
            runner: Callable running an argv and returning an ExecutionOutcome
                (default: run_tar)
        """
        self._src = src
        self._dest = dest
        self._compress = compress
        self.filesystem = filesystem or LocalFilesystem()
        self.runner = runner or run_tar

    @property
    def src(self) -> str:
        return self._src

    @property
    def dest(self) -> str:
        return self._dest

    @property
    def compress(self) -> bool:
        return self._compress

    @property
    def filename(self) -> str:
        return os.path.basename(self._dest)

    @property
    def dest_dir(self) -> str:
        return os.path.dirname(self._dest) or '.'

    def tar_command(self) -> str:
        return 'tar -zcvf' if self._compress else 'tar -cvf'

    def valid_src(self) -> bool:
        """
        Check that the source exists and is readable.

        Raises:
            SourceNotFoundError: If src does not exist
            SourceNotReadableError: If src cannot be read
        """
        if not self.filesystem.exists(self._src):
            raise SourceNotFoundError(f"Source does not exist: {self._src}")
        if not self.filesystem.readable(self._src):
            raise SourceNotReadableError(f"Source is not readable: {self._src}")
        return True

    def valid_dest(self) -> bool:
        """
        Check that the destination's directory exists and is writable.

        Raises:
            DestinationDirNotFoundError: If the directory does not exist
            DestinationDirNotWritableError: If the directory cannot be written to
        """
        dest_dir = self.dest_dir
        if not self.filesystem.exists(dest_dir):
            raise DestinationDirNotFoundError(
                f"Destination directory does not exist: {dest_dir}"
            )
        if not self.filesystem.writable(dest_dir):
            raise DestinationDirNotWritableError(
                f"Destination directory is not writable: {dest_dir}"
            )
        return True

    def make(self) -> Tuple[Path, ExecutionOutcome]:
        """
        Validate paths, run tar and check the result.

        Nothing is cleaned up on failure; a partial archive stays where tar
        left it.

        Returns:
            Tuple of (archive path, ExecutionOutcome)

        Raises:
            ArchiveError: On the first failing stage
        """
        self.valid_src()
        self.valid_dest()

        command = self.tar_command()
        args = shlex.split(command) + [self._dest, self._src]
        logger.info(f"Running {command} {self._dest} {self._src}")

        outcome = self.runner(args)
        self.check_tar_result(outcome)

        return Path(self._dest), outcome

    def classify_exit(self, outcome: ExecutionOutcome) -> TarVerdict:
        """
        Classify a tar exit status.

        Args:
            outcome: Result of the tar run

        Returns:
            TarVerdict with status SUCCESS, WARNING (carrying diagnostics)
            or FATAL (carrying a reason)
        """
        if outcome.exit_code == 0:
            return TarVerdict(TarVerdict.SUCCESS)

        command = self.tar_command()

        if outcome.exit_code == 1 and _is_benign(outcome.stderr):
            return TarVerdict(
                TarVerdict.WARNING,
                diagnostics={
                    'command': command,
                    'stderr': outcome.stderr,
                    'status': outcome.status_description,
                    'exit_code': outcome.exit_code
                }
            )

        return TarVerdict(
            TarVerdict.FATAL,
            reason=f"{command} exited {outcome.exit_code}"
        )

    def valid_artifact(self) -> bool:
        """
        Check that tar actually produced a non-empty archive.

        Raises:
            DestinationFileMissingError: If dest does not exist
            DestinationFileEmptyError: If dest is 0 bytes
        """
        if not self.filesystem.exists(self._dest):
            raise DestinationFileMissingError(self._dest)
        if self.filesystem.size(self._dest) == 0:
            raise DestinationFileEmptyError(self._dest)
        return True

    def check_tar_result(self, outcome: ExecutionOutcome) -> TarVerdict:
        """
        Classify the exit status, then inspect the archive.

        A fatal exit raises before the archive is looked at.

        Raises:
            TarProcessError: If tar exited fatally
            DestinationFileMissingError: If dest does not exist
            DestinationFileEmptyError: If dest is 0 bytes
        """
        verdict = self.classify_exit(outcome)

        if verdict.status == TarVerdict.FATAL:
            error = TarProcessError(self.tar_command(), outcome.exit_code, outcome.stderr)
            logger.error(f"{error}: {outcome.stderr.strip()}")
            raise error

        if verdict.status == TarVerdict.WARNING:
            logger.warning(f"tar finished with warnings: {verdict.diagnostics}")

        try:
            self.valid_artifact()
        except ArchiveError as e:
            logger.error(str(e))
            raise

        return verdict


def _is_benign(stderr: str) -> bool:
    text = (stderr or '').lower()
    return any(pattern in text for pattern in BENIGN_TAR_WARNINGS)
