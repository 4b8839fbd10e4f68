import html
import os
import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from .config import COMMENT_LINE_RE

BEGIN_DOCUMENT = "\\begin{document}"
END_DOCUMENT = "\\end{document}"


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def extract_body(tex: str) -> str:
    """Return the text between the document markers, or everything when they are unusable."""
    start = tex.find(BEGIN_DOCUMENT)
    end = tex.find(END_DOCUMENT)
    if start != -1 and end != -1 and end > start:
        return tex[start + len(BEGIN_DOCUMENT):end].strip()
    return tex


def strip_comment_lines(text: str) -> str:
    return COMMENT_LINE_RE.sub("", text)


def slugify_cite_key(key: str) -> str:
    # Keys differing only in case share a slug
    return re.sub(r"[^a-z0-9_-]+", "-", key.lower())


def escape_html(text: str) -> str:
    return html.escape(text, quote=True)


def read_braced(text: str, open_index: int) -> Optional[Tuple[str, int]]:
    """
    Read the brace group starting at ``open_index``.

    Returns the group content and the index just past its closing brace, or
    None when the group is not closed. Escaped braces (``\\{``) do not count.
    """
    if open_index >= len(text) or text[open_index] != "{":
        return None
    depth = 0
    idx = open_index
    while idx < len(text):
        ch = text[idx]
        if ch == "\\":
            idx += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[open_index + 1:idx], idx + 1
        idx += 1
    return None


def command_argument(text: str, command: str) -> Optional[str]:
    """Mandatory argument of the first ``\\command`` in text, nested braces included."""
    match = re.search(r"\\" + command + r"\*?(?:\[[^\]]*\])?\s*\{", text)
    if not match:
        return None
    found = read_braced(text, match.end() - 1)
    return found[0] if found else None
