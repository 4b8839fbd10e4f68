import re
from typing import Callable, List

from bs4 import BeautifulSoup, NavigableString, Tag
from latex2mathml.converter import convert as latex2mathml_convert

# Delimiter order mirrors the placeholder guard, plus the \( \) form pandoc emits
MATH_SPAN_RE = re.compile(
    r"\$\$(?P<dd>.+?)\$\$|\\\[(?P<db>.+?)\\\]|\\\((?P<ip>.+?)\\\)|\$(?P<id>[^$\n]+?)\$",
    re.S,
)

SKIP_PARENTS = {"code", "pre", "script", "style", "template", "math"}


class MathTypesetter:
    """Replaces TeX math spans inside a rendered container with MathML."""

    def __init__(self, log_fn: Callable[[str], None] = lambda _msg: None) -> None:
        self.log_fn = log_fn

    def typeset(self, container: Tag) -> int:
        """Typeset every math span under ``container``; returns how many were converted."""
        converted = 0
        for text_node in self._math_text_nodes(container):
            converted += self._typeset_node(text_node)
        return converted

    def _math_text_nodes(self, container: Tag) -> List[NavigableString]:
        nodes = []
        for node in container.find_all(string=True):
            if type(node) is not NavigableString:
                continue
            if any(parent.name in SKIP_PARENTS for parent in node.parents if isinstance(parent, Tag)):
                continue
            if MATH_SPAN_RE.search(str(node)):
                nodes.append(node)
        return nodes

    def _typeset_node(self, node: NavigableString) -> int:
        text = str(node)
        pieces = []
        converted = 0
        pos = 0
        for match in MATH_SPAN_RE.finditer(text):
            display = match.group("dd") is not None or match.group("db") is not None
            latex = next(group for group in match.groups() if group is not None).strip()
            try:
                mathml = latex2mathml_convert(latex, display="block" if display else "inline")
            except Exception as exc:  # noqa: BLE001
                self.log_fn(f"Math typesetting failed for {latex[:60]!r}: {exc}")
                continue
            pieces.append(NavigableString(text[pos:match.start()]))
            fragment = BeautifulSoup(mathml, "html.parser")
            pieces.extend(list(fragment.contents))
            pos = match.end()
            converted += 1
        if not converted:
            return 0
        pieces.append(NavigableString(text[pos:]))
        for piece in pieces:
            node.insert_before(piece)
        node.extract()
        return converted
