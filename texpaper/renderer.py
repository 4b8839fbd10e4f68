import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qs

import requests

from .backends import MarkdownBackend, PandocLatexBackend
from .bibtex import parse_bibtex
from .citations import collect_citations, filter_bibliography, make_citation_map
from .config import (
    FORCE_LATEX_RENDERERS,
    STATUS_FAILED,
    STATUS_LATEX,
    STATUS_LATEX_FALLBACK,
    STATUS_LOADING,
    STATUS_MARKDOWN,
)
from .http_client import FetchError, build_session, fetch_text
from .math_guard import extract_math_placeholders, restore_math_placeholders
from .models import BibEntry, RenderOutcome
from .normalize import latex_to_markdown, normalize_latex
from .page import Page
from .references import CitationDetailPanel, annotate_citation_anchors, render_bibliography_section
from .typeset import MathTypesetter
from .utils import ensure_dir, extract_body


def renderer_from_query(query: str) -> Optional[str]:
    """Value of ``renderer=`` in a URL query string such as ``?renderer=latexjs``."""
    values = parse_qs(query.lstrip("?")).get("renderer")
    return values[0] if values else None


def forces_latex(renderer: Optional[str]) -> bool:
    return (renderer or "").strip().lower() in FORCE_LATEX_RENDERERS


class PaperRenderer:
    """
    Loads one paper into a Page, trying the Markdown path first and falling
    back to the LaTeX path.

    The renderer owns the page for its whole lifetime; calling ``load`` again
    recomputes everything but attaches the LaTeX-path assets only once.
    """

    def __init__(
        self,
        log_fn: Callable[[str], None],
        progress_fn: Callable[[float, str], None] = lambda *_: None,
        session: Optional[requests.Session] = None,
        fetch_fn: Optional[Callable[[str], str]] = None,
        markdown_backend=None,
        latex_backend=None,
        typesetter=None,
        typeset: bool = True,
        page: Optional[Page] = None,
    ):
        self.log_fn = log_fn
        self.progress_fn = progress_fn
        self.session = session or build_session()
        self.fetch_fn = fetch_fn or self._fetch
        self.markdown_backend = markdown_backend or MarkdownBackend()
        self.latex_backend = latex_backend or PandocLatexBackend(log_fn=log_fn)
        if typesetter is None and typeset:
            typesetter = MathTypesetter(log_fn=log_fn)
        self.typesetter = typesetter
        self.page = page or Page()
        self.panel: Optional[CitationDetailPanel] = None
        self.assets_attached = False

    def _fetch(self, source: str) -> str:
        return fetch_text(source, self.session, self.log_fn)

    # ---- loading ----
    def load_bibliography(self, bib_source: Optional[str]) -> List[BibEntry]:
        if not bib_source:
            return []
        try:
            raw = self.fetch_fn(bib_source)
        except FetchError as exc:
            self.log_fn(f"Warning: failed to load bibliography: {exc}")
            return []
        entries = parse_bibtex(raw)
        self.log_fn(f"Parsed {len(entries)} bibliography entries")
        return entries

    def load(self, paper_source: str, bib_source: Optional[str] = None, renderer: Optional[str] = None) -> RenderOutcome:
        page = self.page
        self.panel = None
        page.reset_detail_panel()
        page.set_status(STATUS_LOADING)
        self.progress_fn(0.05, STATUS_LOADING)

        # The bibliography is in flight before the document fetch starts
        with ThreadPoolExecutor(max_workers=1) as pool:
            bib_future = pool.submit(self.load_bibliography, bib_source)
            try:
                raw_tex = self.fetch_fn(paper_source)
            except FetchError as exc:
                return self._fail(str(exc), RenderOutcome(status=STATUS_FAILED))
            bib_entries = bib_future.result()

        self.progress_fn(0.3, "Resolving citations...")
        body = extract_body(raw_tex)
        order = collect_citations(body)
        citation_map = make_citation_map(order)
        resolved = filter_bibliography(bib_entries, order)
        outcome = RenderOutcome(
            status=STATUS_LOADING,
            citation_order=order,
            citation_map=citation_map,
            entries=resolved,
        )
        self.log_fn(f"Found {len(order)} cited keys")

        markdown_failed = False
        if not forces_latex(renderer):
            self.progress_fn(0.5, "Rendering via Markdown...")
            try:
                page.set_content_html(self.render_markdown(body, citation_map))
                outcome.backend = "markdown"
                outcome.status = STATUS_MARKDOWN
            except Exception as exc:  # noqa: BLE001
                self.log_fn(f"Warning: Markdown render failed, trying LaTeX: {exc}")
                markdown_failed = True

        if outcome.backend is None:
            self.progress_fn(0.6, "Rendering via LaTeX...")
            try:
                fragment = self.render_latex(body, citation_map)
            except Exception as exc:  # noqa: BLE001
                return self._fail(str(exc), outcome)
            page.set_content_html(fragment)
            outcome.backend = "latex"
            outcome.fallback = markdown_failed
            outcome.status = STATUS_LATEX_FALLBACK if markdown_failed else STATUS_LATEX
        page.set_status(outcome.status)

        if self.typesetter is not None:
            self.progress_fn(0.8, "Typesetting math...")
            try:
                count = self.typesetter.typeset(page.content)
                self.log_fn(f"Typeset {count} math spans")
            except Exception as exc:  # noqa: BLE001
                self.log_fn(f"Warning: math typesetting failed: {exc}")

        annotate_citation_anchors(page.content, order)
        if bib_entries:
            page.append_html(render_bibliography_section(resolved))
        self.panel = CitationDetailPanel(page, resolved)
        self.panel.attach(page.content)

        self.progress_fn(1.0, outcome.status)
        self.log_fn(outcome.status)
        return outcome

    def _fail(self, message: str, outcome: RenderOutcome) -> RenderOutcome:
        self.log_fn(f"Error: {message}")
        self.page.set_status(STATUS_FAILED)
        self.page.show_error(message)
        outcome.status = STATUS_FAILED
        outcome.backend = None
        outcome.error = message
        self.progress_fn(0.0, STATUS_FAILED)
        return outcome

    # ---- backends ----
    def render_markdown(self, body: str, citation_map: Dict[str, int]) -> str:
        markdown = latex_to_markdown(body, citation_map)
        text, placeholders = extract_math_placeholders(markdown)
        html = self.markdown_backend.render(text)
        return restore_math_placeholders(html, placeholders)

    def render_latex(self, body: str, citation_map: Dict[str, int]) -> str:
        normalized = normalize_latex(body, citation_map)
        fragment = self.latex_backend.render(normalized)
        self._attach_latex_assets()
        return fragment

    def _attach_latex_assets(self) -> None:
        if self.assets_attached:
            return
        self.assets_attached = True
        assets = self.latex_backend.styles_and_scripts()
        if assets:
            self.page.attach_head_html(assets)

    # ---- output ----
    def write(self, output_path: str) -> str:
        ensure_dir(os.path.dirname(os.path.abspath(output_path)))
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.page.to_html())
        self.log_fn(f"HTML written to {output_path}")
        return output_path
