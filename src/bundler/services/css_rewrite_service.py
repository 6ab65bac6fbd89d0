from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path, PurePath

from bundler.matchers import CSS_KEEP_URL_RE, CSS_URL_RE

logger = logging.getLogger(__name__)


class CssRewriteService:
    """
    Re-bases relative url() references when stylesheet content is moved from
    its own file into a document's inline <style> block.
    """

    @staticmethod
    def _split_suffix(ref: str):
        """Separates a '?query' or '#fragment' tail from the path part."""
        idx = min((i for i in (ref.find("?"), ref.find("#")) if i >= 0), default=-1)
        if idx <= 0:
            return ref, ""
        return ref[:idx], ref[idx:]

    def rebase(self, ref: str, stylesheet_dir: Path, document_dir: Path) -> str:
        """Returns `ref` expressed relative to `document_dir` as a POSIX path."""
        path_part, suffix = self._split_suffix(ref)
        target = os.path.normpath(os.path.join(str(stylesheet_dir), path_part))
        relative = os.path.relpath(target, str(document_dir))
        return PurePath(relative).as_posix() + suffix

    def rewrite(self, css: str, stylesheet_dir: Path, document_dir: Path) -> str:
        def repl(match: re.Match) -> str:
            ref = match.group(1).strip()
            if CSS_KEEP_URL_RE.search(ref):
                return match.group(0)
            rebased = self.rebase(ref, stylesheet_dir, document_dir)
            logger.debug("Rewrote url(%s) -> url(%s)", ref, rebased)
            return "url(" + json.dumps(rebased) + ")"

        return CSS_URL_RE.sub(repl, css)
