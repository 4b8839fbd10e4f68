from typing import Optional

from bs4 import BeautifulSoup, Tag

from .config import DETAIL_PANEL_EMPTY, PAGE_TEMPLATE
from .utils import escape_html


class Page:
    """The HTML shell the pipeline renders into: a status line, a content area and a detail panel."""

    def __init__(self, title: str = "Paper") -> None:
        self.soup = BeautifulSoup(PAGE_TEMPLATE.format(title=escape_html(title), detail_empty=DETAIL_PANEL_EMPTY), "html.parser")

    @property
    def status(self) -> Tag:
        return self.soup.find(id="paper-status")

    @property
    def content(self) -> Tag:
        return self.soup.find(id="paper-content")

    @property
    def detail_panel(self) -> Tag:
        return self.soup.find(id="citation-detail")

    def set_status(self, text: str) -> None:
        self.status.string = text

    def clear_content(self) -> None:
        self.content.clear()

    def set_content_html(self, html: str) -> None:
        self.clear_content()
        self.append_html(html)

    def append_html(self, html: str, target: Optional[Tag] = None) -> None:
        target = target if target is not None else self.content
        fragment = BeautifulSoup(html, "html.parser")
        for node in list(fragment.contents):
            target.append(node)

    def set_panel_html(self, html: str) -> None:
        self.detail_panel.clear()
        self.append_html(html, target=self.detail_panel)

    def attach_head_html(self, html: str) -> None:
        self.append_html(html, target=self.soup.head)

    def attach_body_html(self, html: str) -> None:
        self.append_html(html, target=self.soup.body)

    def reset_detail_panel(self) -> None:
        self.set_panel_html(DETAIL_PANEL_EMPTY)
        data = self.soup.find(id="citation-detail-data")
        if data is not None:
            data.decompose()

    def show_error(self, message: str) -> None:
        self.set_content_html(f'<div class="error">Could not load paper: {escape_html(message)}</div>')

    def to_html(self) -> str:
        return str(self.soup)
