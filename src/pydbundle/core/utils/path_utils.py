# src/pydbundle/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package paths.
    """

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the installed 'pydbundle' package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    @staticmethod
    def to_relative_posix(path: Path, root: Path) -> str:
        """
        Expresses `path` relative to `root` with forward slashes, the form used
        for subject paths. Raises ValueError if `path` is outside `root`.
        """
        return Path(path).resolve().relative_to(Path(root).resolve()).as_posix()
