"""
Rewrite passes that turn the paper's LaTeX dialect into something a backend
can render.

Each pass is a plain ``str -> str`` function. The Markdown and LaTeX paths are
ordered lists of passes; later passes rely on earlier ones having run, so the
order of ``markdown_passes`` and ``latex_passes`` matters.
"""
import re
from typing import Callable, Dict, List, Tuple

from .citations import latex_citation_link, link_citations, markdown_citation_link
from .config import LATEX_MACRO_PRELUDE, LATEX_THEOREM_LABELS, MARKDOWN_THEOREM_LABELS
from .math_guard import extract_math_placeholders, restore_math_placeholders
from .utils import command_argument, strip_comment_lines

Pass = Callable[[str], str]

FIGURE_RE = re.compile(r"\\begin\{figure\*?\}.*?\\end\{figure\*?\}", re.S)
ALGORITHM_RE = re.compile(r"\\begin\{algorithm\*?\}(?:\[[^\]]*\])?(.*?)\\end\{algorithm\*?\}", re.S)
LABEL_RE = re.compile(r"\\label\{[^}]*\}")
PAGE_DIRECTIVE_RE = re.compile(r"\\(?:newpage|clearpage|onecolumn|twocolumn)\b")
FENCE_RE = re.compile(r"(```.*?```)", re.S)


# ---- passes shared by both paths ----
def strip_comments(text: str) -> str:
    return strip_comment_lines(text)


def strip_two_column(text: str) -> str:
    text = text.replace("\\twocolumn[", "")
    return re.sub(r"^\]\s*$", "", text, flags=re.M)


def strip_preamble_directives(text: str) -> str:
    text = re.sub(r"\\usepackage[^\n]*\n", "", text)
    text = re.sub(r"\\bibliographystyle\{[^}]*\}", "", text)
    text = re.sub(r"\\addbibresource\{[^}]*\}", "", text)
    return re.sub(r"\\bibliography\{[^}]*\}", "", text)


def strip_labels(text: str) -> str:
    return LABEL_RE.sub("", text)


def strip_page_directives(text: str) -> str:
    return PAGE_DIRECTIVE_RE.sub("", text)


def algorithm_lines(block: str) -> List[str]:
    """Inner lines of an algorithm block with algorithmic markup removed."""
    cleaned = re.sub(r"\\begin\{algorithmic\}(?:\[\d*\])?", "", block)
    cleaned = cleaned.replace("\\end{algorithmic}", "")
    cleaned = re.sub(r"\\caption\{[^}]*\}", "", cleaned)
    cleaned = LABEL_RE.sub("", cleaned)
    lines = [re.sub(r"^\\", "", line).strip() for line in cleaned.strip().split("\n")]
    return [line for line in lines if line]


def theorem_begin_re(env: str) -> "re.Pattern[str]":
    return re.compile(r"\\begin\{" + env + r"\*?\}(?:\[([^\]]*)\])?")


def theorem_end_re(env: str) -> "re.Pattern[str]":
    return re.compile(r"\\end\{" + env + r"\*?\}")


def named_label(label: str, name: str) -> str:
    # "Theorem." with optional name "Main" -> "Theorem (Main)."
    if not name:
        return label
    return f"{label.rstrip('.')} ({name.strip()})."


def flatten_theorems(text: str, labels: List[Tuple[str, str]], render: Callable[[str], str]) -> str:
    for env, label in labels:
        text = theorem_begin_re(env).sub(lambda m, label=label: render(named_label(label, m.group(1) or "")), text)
        text = theorem_end_re(env).sub("", text)
    return text


# ---- Markdown path ----
def markdown_title_block(text: str) -> str:
    text = re.sub(r"\\aistatstitle\{([^}]*)\}", lambda m: f"# {m.group(1)}\n", text, count=1)
    text = re.sub(r"\\title\{([^}]*)\}", lambda m: f"# {m.group(1)}\n", text, count=1)
    text = re.sub(r"\\aistatsauthor\{([^}]*)\}", lambda m: f"*{m.group(1)}*\n", text, count=1)
    text = re.sub(r"\\aistatsaddress\{([^}]*)\}", lambda m: f"*{m.group(1)}*\n", text, count=1)
    text = re.sub(r"\\author\{([^}]*)\}", lambda m: f"*{m.group(1)}*\n", text, count=1)
    return text.replace("\\maketitle", "")


def markdown_abstract(text: str) -> str:
    text = text.replace("\\begin{abstract}", "### Abstract\n", 1)
    return text.replace("\\end{abstract}", "\n", 1)


def markdown_sections(text: str) -> str:
    # \section is H2 because the title takes H1
    text = re.sub(r"\\section\*?\{([^}]*)\}", lambda m: f"## {m.group(1)}", text)
    text = re.sub(r"\\subsection\*?\{([^}]*)\}", lambda m: f"### {m.group(1)}", text)
    return re.sub(r"\\subsubsection\*?\{([^}]*)\}", lambda m: f"#### {m.group(1)}", text)


def markdown_lists(text: str) -> str:
    text = re.sub(r"\\begin\{(?:itemize|enumerate)\}(?:\[[^\]]*\])?", "", text)
    text = re.sub(r"\\end\{(?:itemize|enumerate)\}", "", text)
    return re.sub(r"\\item\b\s*", "- ", text)


def markdown_math_environments(text: str) -> str:
    # align loses its alignment; it only becomes \[ ... \]
    for env in ("equation", "gather"):
        pattern = r"\\begin\{" + env + r"\*?\}(.*?)\\end\{" + env + r"\*?\}"
        text = re.sub(pattern, lambda m: f"$$\n{m.group(1).strip()}\n$$", text, flags=re.S)
    return re.sub(
        r"\\begin\{align\*?\}(.*?)\\end\{align\*?\}",
        lambda m: f"\\[\n{m.group(1).strip()}\n\\]",
        text,
        flags=re.S,
    )


def markdown_inline_macros(text: str) -> str:
    text = re.sub(r"\\textproc\{([^}]*)\}", lambda m: f"`{m.group(1)}`", text)
    return re.sub(r"\\mathds\{([^}]*)\}", lambda m: f"\\mathbb{{{m.group(1)}}}", text)


def _style_prose(text: str) -> str:
    text = re.sub(r"\\texttt\{([^}]*)\}", lambda m: f"`{m.group(1)}`", text)
    text = re.sub(r"\\textbf\{([^}]*)\}", lambda m: f"**{m.group(1)}**", text)
    text = re.sub(r"\\(?:emph|textit)\{([^}]*)\}", lambda m: f"*{m.group(1)}*", text)
    return re.sub(r"\\url\{([^}]*)\}", lambda m: f"<{m.group(1)}>", text)


def markdown_text_styles(text: str) -> str:
    """Font and URL commands to Markdown, outside math spans and fenced code."""
    parts = FENCE_RE.split(text)
    for i in range(0, len(parts), 2):
        guarded, spans = extract_math_placeholders(parts[i])
        parts[i] = restore_math_placeholders(_style_prose(guarded), spans)
    return "".join(parts)


def markdown_algorithms(text: str) -> str:
    def _fence(match) -> str:
        lines = algorithm_lines(match.group(1))
        return "\n```text\n" + "\n".join(lines) + "\n```\n"

    return ALGORITHM_RE.sub(_fence, text)


def markdown_figures(text: str) -> str:
    def _quote(match) -> str:
        fig = match.group(0)
        pieces = []
        caption = command_argument(fig, "caption")
        if caption:
            pieces.append(caption)
        src = re.search(r"\\includegraphics(?:\[[^\]]*\])?\{([^}]*)\}", fig)
        if src:
            pieces.append(src.group(1))
        return "> " + (" — ".join(pieces) if pieces else "Figure") + "\n"

    return FIGURE_RE.sub(_quote, text)


def markdown_theorems(text: str) -> str:
    return flatten_theorems(text, MARKDOWN_THEOREM_LABELS, lambda label: f"**{label}**")


def markdown_appendix(text: str) -> str:
    return text.replace("\\appendix", "\n## Appendix\n")


def collapse_blank_lines(text: str) -> str:
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def markdown_passes(citation_map: Dict[str, int]) -> List[Tuple[str, Pass]]:
    return [
        ("strip_comments", strip_comments),
        ("link_citations", lambda text: link_citations(text, citation_map, markdown_citation_link)),
        ("strip_two_column", strip_two_column),
        ("strip_preamble_directives", strip_preamble_directives),
        ("title_block", markdown_title_block),
        ("abstract", markdown_abstract),
        ("sections", markdown_sections),
        ("lists", markdown_lists),
        ("math_environments", markdown_math_environments),
        ("strip_labels", strip_labels),
        ("inline_macros", markdown_inline_macros),
        ("algorithms", markdown_algorithms),
        ("figures", markdown_figures),
        ("text_styles", markdown_text_styles),
        ("theorems", markdown_theorems),
        ("appendix", markdown_appendix),
        ("strip_page_directives", strip_page_directives),
        ("collapse_blank_lines", collapse_blank_lines),
    ]


# ---- LaTeX path ----
def latex_strip_graphics(text: str) -> str:
    return re.sub(r"\\includegraphics(?:\[[^\]]*\])?\{[^}]*\}", "", text)


def latex_appendix(text: str) -> str:
    return text.replace("\\appendix", "\\section*{Appendix}")


def latex_theorems(text: str) -> str:
    return flatten_theorems(text, LATEX_THEOREM_LABELS, lambda label: f"\\paragraph{{{label}}}")


def latex_figures(text: str) -> str:
    def _quote(match) -> str:
        caption = command_argument(match.group(0), "caption")
        return f"\\begin{{quote}}{caption or 'Figure'}\\end{{quote}}"

    return FIGURE_RE.sub(_quote, text)


def latex_algorithms(text: str) -> str:
    def _verbatim(match) -> str:
        lines = algorithm_lines(match.group(1))
        return "\\begin{verbatim}\n" + "\n".join(lines) + "\n\\end{verbatim}"

    return ALGORITHM_RE.sub(_verbatim, text)


def prepend_macro_prelude(text: str) -> str:
    return f"{LATEX_MACRO_PRELUDE}\n{text}"


def latex_passes(citation_map: Dict[str, int]) -> List[Tuple[str, Pass]]:
    return [
        ("strip_comments", strip_comments),
        ("strip_two_column", strip_two_column),
        ("strip_preamble_directives", strip_preamble_directives),
        ("strip_graphics", latex_strip_graphics),
        ("strip_page_directives", strip_page_directives),
        ("appendix", latex_appendix),
        ("strip_labels", strip_labels),
        ("link_citations", lambda text: link_citations(text, citation_map, latex_citation_link)),
        ("theorems", latex_theorems),
        ("figures", latex_figures),
        ("algorithms", latex_algorithms),
        ("macro_prelude", prepend_macro_prelude),
    ]


def run_passes(text: str, passes: List[Tuple[str, Pass]]) -> str:
    for _name, rewrite in passes:
        text = rewrite(text)
    return text


def latex_to_markdown(body: str, citation_map: Dict[str, int]) -> str:
    return run_passes(body, markdown_passes(citation_map))


def normalize_latex(body: str, citation_map: Dict[str, int]) -> str:
    return run_passes(body, latex_passes(citation_map))
