# src/bundler/matchers.py
"""
Classification policy for the bundler. Every pattern that decides whether a
path or reference is handled lives here.
"""
import re

# Documents eligible for transformation.
HTML_RE = re.compile(r"\.html$")

# Standalone assets that may be dropped from the output once bundled.
DISCARD_RE = re.compile(r"\.(js|css)$")

# Absolute URLs (http://, data:, mailto:) and protocol-relative ones (//cdn...).
EXTERNAL_URL_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*:|//)")

# url(...) inside stylesheet content, optionally quoted.
CSS_URL_RE = re.compile(r"""url\(\s*['"]?(.+?)['"]?\s*\)""")

# CSS url() targets that already resolve from any document.
CSS_KEEP_URL_RE = re.compile(r"^(?:/|#|data:)|https?:", re.IGNORECASE)
