# ============================================
# file: src/pydbundle/core/handlers/build_handler.py
# ============================================
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from bundler.controllers.tree_mirror_controller import TreeMirrorController
from bundler.model import BuildError, BundleSettings
from pydbundle.core.managers.config_manager import config_manager
from pydbundle.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

build_help_text = """
  build <src> <dst> [--subject <path>]... [--subjects-file <file>] [--all-html]
        [--discard-assets] [--preserve <regex>]... [--no-progress]
      Mirrors <src> into <dst>, inlining local scripts and stylesheets of the
      subject HTML documents.
""".strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pydbundle build", description="Bundle local assets into HTML documents.")
    parser.add_argument("src", type=Path, help="Input directory tree.")
    parser.add_argument("dst", type=Path, help="Output directory root.")
    parser.add_argument("--subject", action="append", default=[], metavar="PATH",
                        help="HTML document (relative to <src>) to transform. Repeatable.")
    parser.add_argument("--subjects-file", type=Path, default=None,
                        help="File listing subject paths, one per line ('#' starts a comment).")
    parser.add_argument("--all-html", action="store_true", help="Transform every .html file in the tree.")
    parser.add_argument("--discard-assets", action="store_true",
                        help="Leave standalone .js/.css files out of the output.")
    parser.add_argument("--preserve", action="append", default=[], metavar="REGEX",
                        help="Asset paths matching REGEX are always copied. Repeatable.")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    return parser


def read_subjects_file(path: Path) -> List[str]:
    """Reads subject paths from a text file, skipping blanks and comments."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise BuildError(path, f"Could not read subjects file ({e})") from e
    out = []
    for line in lines:
        line = line.split("#", 1)[0].strip()
        if line:
            out.append(line)
    return out


def _normalize_subject(subject: str, src: Path) -> str:
    p = Path(subject)
    if p.is_absolute():
        try:
            return PathUtils.to_relative_posix(p, src)
        except ValueError:
            logger.warning("Subject '%s' is outside the input tree and will be ignored.", subject)
            return ""
    return subject


def apply_cli_overrides(pargs: argparse.Namespace) -> None:
    """Writes command-line flags into the in-memory configuration."""
    if pargs.all_html:
        config_manager.set_nested("bundler.all_html", True)
    if pargs.discard_assets:
        config_manager.set_nested("bundler.discard_assets", True)
    if pargs.no_progress:
        config_manager.set_nested("bundler.show_progress", False)


def resolve_settings(pargs: argparse.Namespace) -> BundleSettings:
    """Merges settings.json defaults with command-line overrides. CLI wins."""
    apply_cli_overrides(pargs)
    cfg: Dict[str, Any] = dict(config_manager.get_nested("bundler", {}) or {})

    subjects = list(cfg.get("subjects") or [])
    subjects.extend(pargs.subject)
    if pargs.subjects_file is not None:
        subjects.extend(read_subjects_file(pargs.subjects_file))
    subjects = [s for s in (_normalize_subject(s, pargs.src) for s in subjects) if s]

    return BundleSettings(
        subjects=subjects,
        all_html=bool(cfg.get("all_html", False)),
        show_progress=bool(cfg.get("show_progress", True)),
        discard_assets=bool(cfg.get("discard_assets", False)),
        preserve=list(cfg.get("preserve") or []) + pargs.preserve,
    )


def _print_summary(stats: Dict[str, Any], dst: Path) -> None:
    print(f"✅ Build written to {dst}")
    print(f"   Entries:     {stats['entries_total']} ({stats['directories']} directories)")
    print(f"   Transformed: {stats['transformed']} document(s), "
          f"{stats['scripts_bundled']} script(s), {stats['styles_bundled']} stylesheet(s) inlined")
    print(f"   Copied:      {stats['copied']} file(s)")
    if stats["discarded"]:
        print(f"   Discarded:   {stats['discarded']} asset(s)")
    print(f"   Duration:    {stats['duration_s']}s")


def handle_build(args: List[str], controller: Optional[TreeMirrorController] = None) -> int:
    parser = _build_parser()
    if not args:
        parser.print_help()
        return 1

    try:
        pargs = parser.parse_args(args)
    except SystemExit:
        return 1

    try:
        settings = resolve_settings(pargs)
    except ValidationError as e:
        print(f"❌ Error: Invalid settings: {e}")
        return 1
    except BuildError as e:
        logger.error("Build failed: %s", e)
        print(f"❌ Error: {e}")
        return 1

    if not settings.subjects and not settings.all_html:
        logger.warning("No subject documents given; the tree will be copied unchanged.")

    controller = controller or TreeMirrorController(settings=settings)
    try:
        stats = controller.mirror(pargs.src, pargs.dst)
    except BuildError as e:
        logger.error("Build failed at %s: %s", e.path, e)
        print(f"❌ Error: {e}")
        return 1

    _print_summary(stats, pargs.dst)
    return 0
