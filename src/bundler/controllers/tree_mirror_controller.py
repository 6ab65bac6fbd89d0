# ============================================
# file: src/bundler/controllers/tree_mirror_controller.py
# ============================================
from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from tqdm.auto import tqdm

from bundler.matchers import DISCARD_RE
from bundler.model import BuildError, BundleSettings, Document
from bundler.services.file_access_service import LocalFileAccess
from bundler.services.html_bundle_service import HtmlBundleService

logger = logging.getLogger(__name__)


def walk_tree(root: Path, _prefix: str = "") -> Iterator[str]:
    """
    Yields every entry below `root` as a POSIX path relative to it.

    Entries are sorted by name at each level and directories are reported
    (with a trailing '/') before their contents, so parents always come
    before the files inside them.
    """
    base = Path(root) / _prefix if _prefix else Path(root)
    try:
        with os.scandir(base) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise BuildError(base, f"Could not list directory ({e})") from e

    for entry in entries:
        rel = _prefix + entry.name
        if entry.is_dir():
            yield rel + "/"
            yield from walk_tree(root, rel + "/")
        else:
            yield rel


class TreeMirrorController:
    """
    Reproduces an input tree under an output root. Subject HTML documents go
    through the HtmlBundleService; everything else is copied byte for byte.
    """

    def __init__(self, settings: Optional[BundleSettings] = None, bundler: Optional[HtmlBundleService] = None,
                 files: Optional[LocalFileAccess] = None) -> None:
        self.settings = settings or BundleSettings()
        self.files = files or LocalFileAccess()
        self.bundler = bundler or HtmlBundleService(files=self.files)

    def _should_discard(self, rel_path: str) -> bool:
        if not self.settings.discard_assets or not DISCARD_RE.search(rel_path):
            return False
        return not self.settings.is_preserved(rel_path)

    def _process_html(self, rel_path: str, src: Path, dst: Path, stats: Dict[str, Any]) -> None:
        i, o = src / rel_path, dst / rel_path
        document = Document(rel_path=rel_path, location=i)
        result = self.bundler.bundle(document, self.files.read_text(i), src)
        self.files.make_dirs(o.parent)
        self.files.write_text(o, result.html)
        stats["transformed"] += 1
        stats["scripts_bundled"] += len(result.scripts)
        stats["styles_bundled"] += len(result.styles)

    def _preserve_file(self, rel_path: str, src: Path, dst: Path) -> None:
        o = dst / rel_path
        self.files.make_dirs(o.parent)
        self.files.copy(src / rel_path, o)

    def mirror(self, src: Path, dst: Path) -> Dict[str, Any]:
        """
        Runs one build from `src` into `dst` and returns execution statistics.
        Raises BuildError on the first I/O failure.
        """
        src, dst = Path(src).resolve(), Path(dst).resolve()
        if not src.is_dir():
            raise BuildError(src, "Input directory does not exist")
        if src == dst or src in dst.parents:
            raise BuildError(dst, "Output directory must not be inside the input tree")

        self.files.make_dirs(dst)
        entries: List[str] = list(walk_tree(src))
        stats: Dict[str, Any] = self._empty_stats(len(entries))
        start = time.perf_counter()

        iterator = entries
        if self.settings.show_progress:
            iterator = tqdm(entries, desc="Bundling", unit=" entry", leave=False)

        for rel_path in iterator:
            if rel_path.endswith("/"):
                self.files.make_dirs(dst / rel_path)
                stats["directories"] += 1
            elif self.settings.is_subject(rel_path):
                self._process_html(rel_path, src, dst, stats)
            elif self._should_discard(rel_path):
                logger.debug("Discarding bundled asset %s", rel_path)
                stats["discarded"] += 1
            else:
                self._preserve_file(rel_path, src, dst)
                stats["copied"] += 1

        files_seen = self._file_set(entries)
        for s in self.settings.subjects:
            if s not in files_seen:
                logger.warning("Subject '%s' was not found in the input tree.", s)

        stats["duration_s"] = round(time.perf_counter() - start, 3)
        return stats

    @staticmethod
    def _file_set(entries: List[str]) -> set:
        return {e for e in entries if not e.endswith("/")}

    @staticmethod
    def _empty_stats(total: int) -> Dict[str, Any]:
        return {
            "entries_total": total, "directories": 0, "copied": 0,
            "transformed": 0, "discarded": 0, "scripts_bundled": 0,
            "styles_bundled": 0, "duration_s": 0.0,
        }
