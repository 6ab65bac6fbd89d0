# src/bundler/model.py (Bundle Layer)
from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from bundler.matchers import HTML_RE

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Fatal I/O failure. Aborts the whole build and names the offending path."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class AssetKind(str, Enum):
    SCRIPT = "script"
    STYLE = "style"

    @property
    def extension(self) -> str:
        return ".js" if self is AssetKind.SCRIPT else ".css"


class RefClass(str, Enum):
    EXTERNAL = "external"
    ROOT_RELATIVE = "root_relative"
    DOC_RELATIVE = "doc_relative"
    MISSING = "missing"


class Reference(BaseModel):
    """A script src or stylesheet href pulled out of a document."""
    kind: AssetKind
    value: str = ""
    path: Optional[Path] = None
    classification: RefClass

    @property
    def qualifies(self) -> bool:
        """True for local references whose file was found."""
        return self.path is not None and self.classification in (
            RefClass.ROOT_RELATIVE, RefClass.DOC_RELATIVE
        )


class Document(BaseModel):
    rel_path: str
    location: Path

    @property
    def directory(self) -> Path:
        """Resolution base for doc-relative references."""
        return self.location.parent

    @property
    def basename(self) -> str:
        return HTML_RE.sub("", self.location.name)

    def bundle_name(self, kind: AssetKind) -> str:
        # Bundles are inlined; the name only shows up in log output.
        return self.basename + kind.extension


class BundleResult(BaseModel):
    html: str
    scripts: List[Reference] = Field(default_factory=list)
    styles: List[Reference] = Field(default_factory=list)


class BundleSettings(BaseModel):
    subjects: List[str] = Field(default_factory=list)
    all_html: bool = Field(default=False, description="Treat every .html file in the tree as a subject.")
    show_progress: bool = Field(default=True)
    discard_assets: bool = Field(default=False, description="Drop standalone .js/.css files from the output.")
    preserve: List[str] = Field(default_factory=list, description="Regexes for asset paths that are never discarded.")

    @field_validator("subjects", mode="before")
    @classmethod
    def _normalize_subjects(cls, v):
        if v is None:
            return []
        out = []
        for item in v:
            s = str(item).strip().replace("\\", "/")
            while s.startswith("./"):
                s = s[2:]
            s = s.lstrip("/")
            if s:
                out.append(s)
        return out

    @field_validator("preserve", mode="before")
    @classmethod
    def _check_patterns(cls, v):
        if v is None:
            return []
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid preserve pattern {pattern!r}: {e}") from e
        return list(v)

    def is_subject(self, rel_path: str) -> bool:
        """Whether the walked path should go through the transformer."""
        if not HTML_RE.search(rel_path):
            return False
        return self.all_html or rel_path in self.subjects

    def is_preserved(self, rel_path: str) -> bool:
        return any(re.search(p, rel_path) for p in self.preserve)
