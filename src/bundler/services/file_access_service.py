from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol, Union

from bundler.model import BuildError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileAccess(Protocol):
    """The file operations the transformer needs for referenced assets."""

    def exists(self, path: PathLike) -> bool: ...

    def read_text(self, path: PathLike) -> str: ...


class LocalFileAccess:
    """
    Disk-backed file access. Read and write failures are raised as BuildError
    so the build aborts with the offending path attached.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def exists(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def read_text(self, path: PathLike) -> str:
        """Reads the file as-is; '\\r\\n' line endings are kept."""
        try:
            with open(path, "r", encoding=self.encoding, newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise BuildError(path, f"Could not read file ({e})") from e

    def write_text(self, path: PathLike, content: str) -> None:
        try:
            with open(path, "w", encoding=self.encoding, newline="") as f:
                f.write(content)
        except OSError as e:
            raise BuildError(path, f"Could not write file ({e})") from e

    def copy(self, src: PathLike, dst: PathLike) -> None:
        """Byte-for-byte copy."""
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            raise BuildError(src, f"Could not copy file ({e})") from e

    def make_dirs(self, path: PathLike) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildError(path, f"Could not create directory ({e})") from e
