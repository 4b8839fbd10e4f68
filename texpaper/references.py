import re
from functools import partial
from typing import Callable, Dict, List, Optional

from bs4 import Tag

from .config import DETAIL_PANEL_SCRIPT, DOI_RESOLVER
from .models import ResolvedEntry
from .page import Page
from .utils import escape_html, slugify_cite_key


def split_authors(raw: str) -> List[str]:
    return [a.strip() for a in re.split(r"\s+and\s+", raw, flags=re.I)]


def format_authors(raw: str) -> str:
    """Join authors as "A", "A & B" or "A, B, & C"."""
    authors = split_authors(raw)
    if len(authors) == 1:
        return authors[0]
    if len(authors) == 2:
        return f"{authors[0]} & {authors[1]}"
    return f"{', '.join(authors[:-1])}, & {authors[-1]}"


def entry_venue(fields: Dict[str, str]) -> str:
    return fields.get("journal") or fields.get("booktitle") or ""


def entry_link(fields: Dict[str, str]) -> Optional[str]:
    if fields.get("doi"):
        return f"{DOI_RESOLVER}{fields['doi']}"
    return fields.get("url") or None


def _link_html(fields: Dict[str, str]) -> str:
    href = entry_link(fields)
    if not href:
        return ""
    label = "doi" if fields.get("doi") else "link"
    return f'<a href="{escape_html(href)}" target="_blank" rel="noopener noreferrer">{label}</a>'


def format_bib_entry(entry: ResolvedEntry) -> str:
    fields = entry.fields
    title = escape_html(fields.get("title") or entry.citekey)
    parts = [f'<span class="ref-number">[{entry.number}]</span> <span class="ref-title">{title}</span>']
    if fields.get("year"):
        parts.append(f" ({escape_html(fields['year'])})")
    if fields.get("author"):
        parts.append(f" {escape_html(format_authors(fields['author']))}")
    venue = entry_venue(fields)
    if venue:
        parts.append(f" — {escape_html(venue)}")
    link = _link_html(fields)
    if link:
        parts.append(f" {link}")
    return "".join(parts)


def render_bibliography_section(entries: List[ResolvedEntry]) -> str:
    items = "".join(
        f'<li id="ref-{slugify_cite_key(entry.citekey)}">{format_bib_entry(entry)}</li>' for entry in entries
    )
    return (
        '<section class="references">'
        '<h2 id="references">References</h2>'
        f"<ol>{items}</ol>"
        "</section>"
    )


DETAIL_FIELDS = [
    ("volume", "Volume"),
    ("number", "Number"),
    ("pages", "Pages"),
    ("publisher", "Publisher"),
]


def format_bib_detail(entry: ResolvedEntry) -> str:
    """Expanded panel view of one entry."""
    fields = entry.fields
    rows = [f'<h3 class="detail-title">[{entry.number}] {escape_html(fields.get("title") or entry.citekey)}</h3>']
    if entry.stub:
        rows.append('<p class="detail-stub">No bibliography record for this key.</p>')
    if fields.get("author"):
        names = "".join(f"<li>{escape_html(name)}</li>" for name in split_authors(fields["author"]))
        rows.append(f'<ul class="detail-authors">{names}</ul>')
    meta = []
    if entry.entry_type:
        meta.append(("Type", entry.entry_type))
    venue = entry_venue(fields)
    if venue:
        meta.append(("Venue", venue))
    if fields.get("year"):
        meta.append(("Year", fields["year"]))
    for key, label in DETAIL_FIELDS:
        if fields.get(key):
            meta.append((label, fields[key]))
    if meta:
        dl = "".join(f"<dt>{label}</dt><dd>{escape_html(value)}</dd>" for label, value in meta)
        rows.append(f"<dl>{dl}</dl>")
    link = _link_html(fields)
    if link:
        rows.append(f"<p>{link}</p>")
    rows.append(f'<p class="detail-key"><code>{escape_html(entry.citekey)}</code></p>')
    return "".join(rows)


def not_found_detail(key: str) -> str:
    return f'<p class="detail-missing">Reference not found: {escape_html(key)}</p>'


def annotate_citation_anchors(container: Tag, order: List[str]) -> int:
    """Give every ``#ref-`` anchor the citation class and its raw key."""
    by_slug: Dict[str, str] = {}
    for key in order:
        by_slug.setdefault(slugify_cite_key(key), key)
    annotated = 0
    for anchor in container.find_all("a", href=True):
        href = anchor["href"]
        if not href.startswith("#ref-"):
            continue
        classes = anchor.get("class", [])
        if "citation" not in classes:
            anchor["class"] = list(classes) + ["citation"]
        key = by_slug.get(href[len("#ref-"):])
        if key is not None and not anchor.get("data-cite-key"):
            anchor["data-cite-key"] = key
        annotated += 1
    return annotated


class CitationDetailPanel:
    """Maps cited keys to "show detail" actions that fill the page's side panel."""

    def __init__(self, page: Page, entries: List[ResolvedEntry]) -> None:
        self.page = page
        self.entries = {entry.citekey: entry for entry in entries}
        self.handlers: Dict[str, Callable[[], None]] = {}

    def attach(self, container: Tag) -> int:
        for anchor in container.find_all("a", class_="citation"):
            key = anchor.get("data-cite-key")
            if key and key not in self.handlers:
                self.handlers[key] = partial(self.show, key)
        self._embed_for_browser()
        return len(self.handlers)

    def click(self, key: str) -> None:
        handler = self.handlers.get(key)
        if handler is None:
            self.show(key)
        else:
            handler()

    def show(self, key: str) -> None:
        entry = self.entries.get(key)
        html = format_bib_detail(entry) if entry else not_found_detail(key)
        self.page.set_panel_html(html)

    def _embed_for_browser(self) -> None:
        stale = self.page.soup.find(id="citation-detail-data")
        if stale is not None:
            stale.decompose()
        templates = "".join(
            f'<template data-cite-detail="{escape_html(key)}">{format_bib_detail(entry)}</template>'
            for key, entry in self.entries.items()
        )
        self.page.attach_body_html(f'<div id="citation-detail-data" hidden>{templates}</div>')
        if self.page.soup.find(id="citation-detail-script") is None:
            self.page.attach_body_html(f'<script id="citation-detail-script">{DETAIL_PANEL_SCRIPT}</script>')
