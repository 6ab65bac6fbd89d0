from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from bundler.matchers import EXTERNAL_URL_RE
from bundler.model import AssetKind, RefClass, Reference
from bundler.services.file_access_service import FileAccess

logger = logging.getLogger(__name__)


def resolve_reference(
        value: Optional[str],
        doc_dir: Path,
        tree_root: Path,
        kind: AssetKind,
) -> Reference:
    """
    Classifies a script src / stylesheet href and computes the file it points to.

    Pure path arithmetic; the filesystem is never consulted. Root-relative
    references ('/js/app.js') resolve against the tree root, everything else
    against the document's directory.
    """
    s = (value or "").strip()
    if not s:
        return Reference(kind=kind, value=s, classification=RefClass.MISSING)

    if EXTERNAL_URL_RE.match(s):
        return Reference(kind=kind, value=s, classification=RefClass.EXTERNAL)

    if s.startswith("/"):
        target = os.path.join(str(tree_root), s.lstrip("/"))
        classification = RefClass.ROOT_RELATIVE
    else:
        target = os.path.join(str(doc_dir), s)
        classification = RefClass.DOC_RELATIVE

    target = os.path.normpath(target)
    if not _is_within(target, tree_root):
        logger.debug("Reference %r resolves outside the tree: %s", s, target)
        return Reference(kind=kind, value=s, classification=RefClass.MISSING)

    return Reference(
        kind=kind,
        value=s,
        path=Path(target),
        classification=classification,
    )


def _is_within(target: str, tree_root: Path) -> bool:
    root = os.path.normpath(str(tree_root))
    try:
        return os.path.commonpath([root, target]) == root
    except ValueError:
        return False


def check_reference(ref: Reference, files: FileAccess) -> Reference:
    """Reclassifies a local reference as MISSING when its file does not exist."""
    if not ref.qualifies:
        return ref
    if files.exists(ref.path):
        return ref
    logger.debug("Referenced %s not found on disk: %s", ref.kind.value, ref.path)
    return ref.model_copy(update={"classification": RefClass.MISSING})
