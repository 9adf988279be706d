from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import (
    AlreadyExists,
    DeleteError,
    NoContent,
    NoFile,
    StorageDirectoryError,
    WriteFailed,
)

ENCRYPTED_NAME = "twofa.storage"
PLAINTEXT_NAME = "buffer.storage"   # scratch file, lives only inside a transaction


class Overwrite(Enum):
    REQUIRE_ABSENT = "require-absent"
    FORCE = "force"


@dataclass(frozen=True)
class StoragePaths:
    directory: Path

    @property
    def encrypted_file(self) -> Path:
        return self.directory / ENCRYPTED_NAME

    @property
    def plaintext_file(self) -> Path:
        return self.directory / PLAINTEXT_NAME


def ensure_600(path: Path) -> None:
    try:
        path.chmod(0o600)
    except OSError:
        pass


def ensure_directory(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise StorageDirectoryError(f"Storage path exists and is not a directory: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageDirectoryError(f"Could not create storage directory {path}: {e}") from e


def read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NoFile(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise NoContent(f"Could not read {path}: {e}") from e


def write(path: Path, contents: str, overwrite: Overwrite) -> None:
    """Create or truncate PATH. REQUIRE_ABSENT refuses to touch an existing file."""
    if overwrite is Overwrite.REQUIRE_ABSENT and path.exists():
        raise AlreadyExists(f"File already exists: {path}")
    try:
        path.touch(mode=0o600, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    except OSError as e:
        raise WriteFailed(f"Could not save {path}: {e}") from e
    ensure_600(path)


def delete(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError as e:
        raise DeleteError(f"Error deleting file, not found: {path}") from e
    except OSError as e:
        raise DeleteError(f"Error deleting file {path}: {e}") from e
