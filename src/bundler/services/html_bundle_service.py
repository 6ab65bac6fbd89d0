from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from bundler.model import AssetKind, BundleResult, Document, Reference
from bundler.services.css_rewrite_service import CssRewriteService
from bundler.services.file_access_service import FileAccess, LocalFileAccess
from bundler.services.reference_resolve_service import check_reference, resolve_reference

logger = logging.getLogger(__name__)

# (tag, resolved reference, file content)
Collected = List[Tuple[Tag, Reference, str]]


class HtmlBundleService:
    """
    Inlines the local scripts and stylesheets of one HTML document.

    All qualifying <script src> files end up in a single inline <script> and
    all qualifying <link rel="stylesheet"> files in a single inline <style>,
    both appended to <head>. External URLs and references to files that do
    not exist are left where they are.
    """

    def __init__(self, files: Optional[FileAccess] = None, css_rewriter: Optional[CssRewriteService] = None):
        self.files = files or LocalFileAccess()
        self.css_rewriter = css_rewriter or CssRewriteService()

    # -------- Discovery --------

    @staticmethod
    def _is_stylesheet(tag: Tag) -> bool:
        rel = tag.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        tokens = {r.lower() for r in rel}
        # Alternate sheets are off by default in browsers; inlining would force them on.
        return "stylesheet" in tokens and "alternate" not in tokens

    def _find_script_tags(self, soup: BeautifulSoup) -> List[Tag]:
        return soup.select("script[src]")

    def _find_stylesheet_tags(self, soup: BeautifulSoup) -> List[Tag]:
        return [t for t in soup.select("link[href]") if self._is_stylesheet(t)]

    def _collect(self, tags: List[Tag], attr: str, kind: AssetKind, document: Document, tree_root: Path) -> Collected:
        """Resolves each tag's reference and reads the files that qualify, in tag order."""
        collected: Collected = []
        for tag in tags:
            ref = resolve_reference(tag.get(attr), document.directory, tree_root, kind)
            ref = check_reference(ref, self.files)
            if not ref.qualifies:
                logger.debug("Keeping %s tag for %r in %s (%s)", kind.value, ref.value, document.rel_path,
                             ref.classification.value)
                continue
            collected.append((tag, ref, self.files.read_text(ref.path)))
        return collected

    # -------- Assembly --------

    @staticmethod
    def _ensure_head(soup: BeautifulSoup) -> Tag:
        head = soup.head
        if head is not None:
            return head
        head = soup.new_tag("head")
        if soup.html is not None:
            soup.html.insert(0, head)
        else:
            soup.insert(0, head)
        return head

    def _append_inline(self, soup: BeautifulSoup, name: str, mime: str, body: str) -> None:
        el = soup.new_tag(name, attrs={"type": mime})
        el.string = body
        self._ensure_head(soup).append(el)

    @staticmethod
    def _remove(collected: Collected) -> None:
        # Only the exact tags that were bundled; never a second selector pass.
        for tag, _, _ in collected:
            tag.decompose()

    def _bundle_scripts(self, soup: BeautifulSoup, document: Document, tree_root: Path) -> List[Reference]:
        collected = self._collect(self._find_script_tags(soup), "src", AssetKind.SCRIPT, document, tree_root)
        if not collected:
            return []
        self._remove(collected)
        body = "\n".join(data for _, _, data in collected)
        self._append_inline(soup, "script", "text/javascript", body)
        return [ref for _, ref, _ in collected]

    def _bundle_styles(self, soup: BeautifulSoup, document: Document, tree_root: Path) -> List[Reference]:
        collected = self._collect(self._find_stylesheet_tags(soup), "href", AssetKind.STYLE, document, tree_root)
        if not collected:
            return []
        self._remove(collected)
        body = "\n".join(
            self.css_rewriter.rewrite(data, ref.path.parent, document.directory)
            for _, ref, data in collected
        )
        self._append_inline(soup, "style", "text/css", body)
        return [ref for _, ref, _ in collected]

    # -------- Public API --------

    def bundle(self, document: Document, content: str, tree_root: Path) -> BundleResult:
        soup = BeautifulSoup(content, "html.parser")
        scripts = self._bundle_scripts(soup, document, tree_root)
        styles = self._bundle_styles(soup, document, tree_root)

        if scripts:
            logger.info("%s: inlined %d script(s) as %s", document.rel_path, len(scripts),
                        document.bundle_name(AssetKind.SCRIPT))
        if styles:
            logger.info("%s: inlined %d stylesheet(s) as %s", document.rel_path, len(styles),
                        document.bundle_name(AssetKind.STYLE))

        return BundleResult(html=str(soup), scripts=scripts, styles=styles)

    def transform(self, document: Document, content: str, tree_root: Path) -> str:
        """Returns the document markup with its local assets inlined."""
        return self.bundle(document, content, tree_root).html
