import re
from typing import List, Tuple

from .config import MATH_PLACEHOLDER

# Pass order matters: $$ before $, and inline $...$ never spans a newline.
MATH_PATTERNS = [
    re.compile(r"\$\$.*?\$\$", re.S),
    re.compile(r"\\\[.*?\\\]", re.S),
    re.compile(r"\$[^$\n]*\$"),
]


def placeholder_token(index: int) -> str:
    return MATH_PLACEHOLDER.format(index=index)


def extract_math_placeholders(text: str) -> Tuple[str, List[str]]:
    """Swap every math span for an opaque token so Markdown never sees TeX."""
    placeholders: List[str] = []

    def _stash(match) -> str:
        token = placeholder_token(len(placeholders))
        placeholders.append(match.group(0))
        return token

    for pattern in MATH_PATTERNS:
        text = pattern.sub(_stash, text)
    return text, placeholders


def restore_math_placeholders(html: str, placeholders: List[str]) -> str:
    for idx, math in enumerate(placeholders):
        html = html.replace(placeholder_token(idx), math, 1)
    return html
