from typing import Callable, Dict, Iterable, List, Optional

from .config import CITE_RE
from .models import BibEntry, ResolvedEntry
from .utils import escape_html, slugify_cite_key, strip_comment_lines

# (key, slug, number or None) -> link text
LinkFormatter = Callable[[str, str, Optional[int]], str]


def split_cite_keys(content: str) -> List[str]:
    return [key.strip() for key in content.split(",") if key.strip()]


def collect_citations(body: str) -> List[str]:
    """Distinct cited keys in order of first appearance."""
    order: List[str] = []
    seen = set()
    for match in CITE_RE.finditer(strip_comment_lines(body)):
        for key in split_cite_keys(match.group(2)):
            if key not in seen:
                seen.add(key)
                order.append(key)
    return order


def make_citation_map(order: Iterable[str]) -> Dict[str, int]:
    return {key: idx for idx, key in enumerate(order, start=1)}


def filter_bibliography(entries: List[BibEntry], order: List[str]) -> List[ResolvedEntry]:
    by_key = {}
    for entry in entries:
        by_key.setdefault(entry.citekey, entry)

    resolved: List[ResolvedEntry] = []
    for number, key in enumerate(order, start=1):
        entry = by_key.get(key)
        if entry is None:
            resolved.append(ResolvedEntry(citekey=key, number=number, fields={"title": key}, stub=True))
        else:
            resolved.append(
                ResolvedEntry(
                    citekey=key,
                    number=number,
                    fields=dict(entry.fields),
                    entry_type=entry.entry_type,
                )
            )
    return resolved


def markdown_citation_link(key: str, slug: str, number: Optional[int]) -> str:
    if number is None:
        return escape_html(key)
    return f'<a class="citation" href="#ref-{slug}" data-cite-key="{escape_html(key)}">[{number}]</a>'


def latex_citation_link(key: str, slug: str, number: Optional[int]) -> str:
    if number is None:
        return key
    return f"\\href{{#ref-{slug}}}{{[{number}]}}"


def link_citations(text: str, citation_map: Dict[str, int], formatter: LinkFormatter) -> str:
    def _replace(match) -> str:
        keys = split_cite_keys(match.group(2))
        links = [formatter(key, slugify_cite_key(key), citation_map.get(key)) for key in keys]
        return "; ".join(links)

    return CITE_RE.sub(_replace, text)
