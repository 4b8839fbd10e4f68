import os
import sys
import unittest

from bs4 import BeautifulSoup

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from texpaper.models import ResolvedEntry
from texpaper.page import Page
from texpaper.references import (
    CitationDetailPanel,
    annotate_citation_anchors,
    format_authors,
    format_bib_detail,
    format_bib_entry,
    render_bibliography_section,
)
from texpaper.utils import slugify_cite_key


def _resolved(key: str, number: int, **fields) -> ResolvedEntry:
    return ResolvedEntry(citekey=key, number=number, fields=fields, entry_type="article")


class SlugTests(unittest.TestCase):
    def test_case_variants_collide(self) -> None:
        self.assertEqual(slugify_cite_key("Foo2021"), "foo2021")
        self.assertEqual(slugify_cite_key("foo2021"), "foo2021")

    def test_runs_collapse_to_one_hyphen(self) -> None:
        self.assertEqual(slugify_cite_key("Smith:2020 et al"), "smith-2020-et-al")
        self.assertEqual(slugify_cite_key("keep_this-one"), "keep_this-one")


class FormatTests(unittest.TestCase):
    def test_authors(self) -> None:
        self.assertEqual(format_authors("Ann Lee"), "Ann Lee")
        self.assertEqual(format_authors("Ann Lee and Bo Chen"), "Ann Lee & Bo Chen")
        self.assertEqual(format_authors("A and B AND C"), "A, B, & C")

    def test_entry_prefers_doi_and_journal(self) -> None:
        entry = _resolved(
            "a", 1, title="Paper A", author="X and Y", year="2020", journal="J", booktitle="Proc",
            doi="10.1/abc", url="https://example.org",
        )
        soup = BeautifulSoup(format_bib_entry(entry), "html.parser")
        self.assertEqual(soup.find("a")["href"], "https://doi.org/10.1/abc")
        text = soup.get_text()
        self.assertTrue(text.startswith("[1] Paper A (2020) X & Y — J"))
        self.assertNotIn("Proc", text)

    def test_entry_falls_back_to_booktitle_and_url(self) -> None:
        entry = _resolved("b", 2, title="B", booktitle="Proc", url="https://example.org")
        soup = BeautifulSoup(format_bib_entry(entry), "html.parser")
        self.assertEqual(soup.find("a")["href"], "https://example.org")
        self.assertIn("— Proc", soup.get_text())

    def test_entry_without_title_uses_citekey(self) -> None:
        entry = _resolved("nokey", 3)
        self.assertEqual(BeautifulSoup(format_bib_entry(entry), "html.parser").get_text(), "[3] nokey")

    def test_field_text_is_escaped(self) -> None:
        entry = _resolved("x", 1, title="<script>alert(1)</script>")
        self.assertIn("&lt;script&gt;", format_bib_entry(entry))

    def test_section_lists_entries_with_slug_ids(self) -> None:
        entries = [_resolved("Paper:A", 1, title="Paper A"), ResolvedEntry("b", 2, {"title": "b"}, stub=True)]
        soup = BeautifulSoup(render_bibliography_section(entries), "html.parser")
        items = soup.select("section.references ol li")
        self.assertEqual([li["id"] for li in items], ["ref-paper-a", "ref-b"])
        self.assertEqual([li.get_text() for li in items], ["[1] Paper A", "[2] b"])

    def test_detail_is_expanded(self) -> None:
        entry = _resolved("a", 1, title="Paper A", author="X and Y", pages="1--9", publisher="Pub")
        soup = BeautifulSoup(format_bib_detail(entry), "html.parser")
        self.assertEqual([li.get_text() for li in soup.select("ul.detail-authors li")], ["X", "Y"])
        self.assertIn("Pub", soup.get_text())
        self.assertIn("1--9", soup.get_text())


class AnchorAndPanelTests(unittest.TestCase):
    def test_annotate_backend_anchors(self) -> None:
        soup = BeautifulSoup('<p><a href="#ref-foo2021">[1]</a> <a href="https://x.org">x</a></p>', "html.parser")
        self.assertEqual(annotate_citation_anchors(soup, ["Foo2021"]), 1)
        anchor = soup.find("a", href="#ref-foo2021")
        self.assertIn("citation", anchor["class"])
        self.assertEqual(anchor["data-cite-key"], "Foo2021")
        self.assertIsNone(soup.find("a", href="https://x.org").get("class"))

    def test_panel_click_shows_detail(self) -> None:
        page = Page()
        page.set_content_html('<p><a class="citation" href="#ref-a" data-cite-key="a">[1]</a></p>')
        panel = CitationDetailPanel(page, [_resolved("a", 1, title="Paper A")])
        self.assertEqual(panel.attach(page.content), 1)
        self.assertIn("a", panel.handlers)
        panel.click("a")
        self.assertIn("Paper A", page.detail_panel.get_text())

    def test_panel_click_unknown_key(self) -> None:
        page = Page()
        page.set_content_html('<p><a class="citation" href="#ref-z" data-cite-key="z">[1]</a></p>')
        panel = CitationDetailPanel(page, [])
        panel.attach(page.content)
        panel.click("z")
        self.assertIn("Reference not found: z", page.detail_panel.get_text())

    def test_panel_embeds_browser_templates_once(self) -> None:
        page = Page()
        page.set_content_html('<a class="citation" href="#ref-a" data-cite-key="a">[1]</a>')
        entries = [_resolved("a", 1, title="Paper A")]
        CitationDetailPanel(page, entries).attach(page.content)
        CitationDetailPanel(page, entries).attach(page.content)
        self.assertEqual(len(page.soup.find_all("template", attrs={"data-cite-detail": "a"})), 1)
        self.assertEqual(len(page.soup.find_all("script", id="citation-detail-script")), 1)


if __name__ == "__main__":
    unittest.main()
