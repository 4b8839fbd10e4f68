import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from texpaper.citations import (
    collect_citations,
    filter_bibliography,
    latex_citation_link,
    link_citations,
    make_citation_map,
    markdown_citation_link,
)
from texpaper.models import BibEntry
from texpaper.utils import extract_body


def _entry(key: str, title: str) -> BibEntry:
    return BibEntry(entry_type="article", citekey=key, fields={"title": title})


class CollectCitationsTests(unittest.TestCase):
    def test_first_appearance_order_across_variants(self) -> None:
        body = "See \\citep{b, a} and \\cite{a,c}.\n\\citet[p.~3]{d} then \\cite{}."
        self.assertEqual(collect_citations(body), ["b", "a", "c", "d"])

    def test_commented_citations_are_ignored(self) -> None:
        body = "% \\cite{zzz}\nText \\cite{a}"
        self.assertEqual(collect_citations(body), ["a"])

    def test_empty_keys_are_dropped(self) -> None:
        self.assertEqual(collect_citations("\\cite{a,, ,b,}"), ["a", "b"])

    def test_document_scenario(self) -> None:
        doc = "\\begin{document}\\section{Intro}Hello \\cite{a,b}.\\end{document}"
        order = collect_citations(extract_body(doc))
        self.assertEqual(order, ["a", "b"])
        self.assertEqual(make_citation_map(order), {"a": 1, "b": 2})


class CitationMapTests(unittest.TestCase):
    def test_numbers_are_dense_and_ordered(self) -> None:
        cmap = make_citation_map(["x", "y", "z"])
        self.assertEqual(cmap, {"x": 1, "y": 2, "z": 3})
        self.assertEqual(sorted(cmap.values()), list(range(1, len(cmap) + 1)))

    def test_empty_order(self) -> None:
        self.assertEqual(make_citation_map([]), {})


class FilterBibliographyTests(unittest.TestCase):
    def test_follows_citation_order_not_file_order(self) -> None:
        entries = [_entry("a", "Paper A"), _entry("b", "Paper B"), _entry("unused", "Never cited")]
        resolved = filter_bibliography(entries, ["b", "a"])
        self.assertEqual([(r.citekey, r.number) for r in resolved], [("b", 1), ("a", 2)])
        self.assertEqual(resolved[0].fields["title"], "Paper B")
        self.assertFalse(resolved[0].stub)

    def test_missing_key_becomes_stub(self) -> None:
        resolved = filter_bibliography([_entry("a", "Paper A")], ["a", "b"])
        stub = resolved[1]
        self.assertEqual(stub.citekey, "b")
        self.assertEqual(stub.number, 2)
        self.assertEqual(stub.fields, {"title": "b"})
        self.assertTrue(stub.stub)

    def test_numbers_match_citation_map(self) -> None:
        order = ["q", "a", "missing"]
        cmap = make_citation_map(order)
        resolved = filter_bibliography([_entry("a", "A"), _entry("q", "Q")], order)
        self.assertEqual({r.citekey: r.number for r in resolved}, cmap)


class LinkCitationsTests(unittest.TestCase):
    def test_markdown_links(self) -> None:
        text = link_citations("Hello \\cite{a,b}.", {"a": 1, "b": 2}, markdown_citation_link)
        self.assertEqual(
            text,
            'Hello <a class="citation" href="#ref-a" data-cite-key="a">[1]</a>; '
            '<a class="citation" href="#ref-b" data-cite-key="b">[2]</a>.',
        )

    def test_anchor_uses_slug_and_raw_key(self) -> None:
        text = link_citations("\\citet{Smith:2020}", {"Smith:2020": 1}, markdown_citation_link)
        self.assertIn('href="#ref-smith-2020"', text)
        self.assertIn('data-cite-key="Smith:2020"', text)

    def test_unmapped_key_renders_bare(self) -> None:
        text = link_citations("\\cite{ghost}", {}, markdown_citation_link)
        self.assertEqual(text, "ghost")

    def test_latex_links(self) -> None:
        text = link_citations("As in \\citep{Foo2021}.", {"Foo2021": 3}, latex_citation_link)
        self.assertEqual(text, "As in \\href{#ref-foo2021}{[3]}.")

    def test_empty_command_disappears(self) -> None:
        self.assertEqual(link_citations("x\\cite{}y", {}, markdown_citation_link), "xy")


if __name__ == "__main__":
    unittest.main()
