import re

DEFAULT_PAPER_PATH = "core.tex"
DEFAULT_BIB_PATH = "refs.bib"
DEFAULT_OUTPUT_PATH = "paper.html"

# Seconds before an HTTP fetch of a source file is abandoned
REQUEST_TIMEOUT = 20

PANDOC_CMD = "pandoc"
PANDOC_CMD_TIMEOUT = 60

# Renderer override values that skip the Markdown attempt entirely
FORCE_LATEX_RENDERERS = {"latex", "latexjs", "pandoc"}

STATUS_LOADING = "Loading main paper…"
STATUS_MARKDOWN = "Rendered via Markdown"
STATUS_LATEX = "Rendered with LaTeX"
STATUS_LATEX_FALLBACK = "Rendered via LaTeX fallback"
STATUS_FAILED = "Failed to load paper"

MATH_PLACEHOLDER = "@@MATH{index}@@"

# Matches \cite, \citep and \citet with optional natbib [pre][post] notes
CITE_RE = re.compile(r"\\cite(p|t)?(?:\[[^\]]*\]){0,2}\{([^}]*)\}")

COMMENT_LINE_RE = re.compile(r"^%.*$", re.M)

MARKDOWN_THEOREM_LABELS = [
    ("lemma", "Lemma."),
    ("theorem", "Theorem."),
    ("corollary", "Corollary."),
    ("conjecture", "Conjecture."),
    ("assumption", "Assumption."),
    ("proof", "Proof."),
]

LATEX_THEOREM_LABELS = [
    ("theorem", "Theorem."),
    ("lemma", "Lemma."),
    ("corollary", "Corollary."),
    ("proof", "Proof."),
]

LATEX_MACRO_PRELUDE = "\n".join(
    [
        r"\newcommand{\aistatstitle}[1]{\section*{#1}}",
        r"\newcommand{\aistatsauthor}[1]{}",
        r"\newcommand{\aistatsaddress}[1]{}",
        r"\newcommand{\textproc}[1]{\texttt{#1}}",
        r"\newcommand{\mathds}[1]{\mathbb{#1}}",
        r"\newcommand{\citep}[1]{[ #1 ]}",
        r"\newcommand{\citet}[1]{[ #1 ]}",
        r"\newcommand{\argmax}{\mathrm{argmax}}",
        r"\newcommand{\argmin}{\mathrm{argmin}}",
        r"\newcommand{\logit}{\mathrm{logit}}",
        r"\newcommand{\ceil}[1]{\lceil #1 \rceil}",
        r"\newcommand{\floor}[1]{\lfloor #1 \rfloor}",
    ]
)

# Bib entry kinds that carry no citable record
NON_ENTRY_TYPES = {"comment", "preamble", "string"}

DOI_RESOLVER = "https://doi.org/"

DETAIL_PANEL_EMPTY = '<p class="detail-empty">Click a citation to see its details.</p>'

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Georgia, serif; margin: 0; display: flex; }}
main {{ flex: 1; max-width: 52rem; padding: 2rem; line-height: 1.5; }}
aside {{ width: 20rem; padding: 2rem 1rem; border-left: 1px solid #ddd; font-size: 0.9rem; }}
#paper-status {{ color: #666; font-size: 0.85rem; }}
.references ol {{ list-style: none; padding-left: 0; }}
.references li {{ margin-bottom: 0.5rem; }}
.error {{ color: #a00; }}
</style>
</head>
<body>
<main>
<p id="paper-status"></p>
<div id="paper-content"></div>
</main>
<aside id="citation-detail">{detail_empty}</aside>
</body>
</html>
"""

# Stylesheet attached to the page head once when the LaTeX path renders
LATEX_ASSETS = """<style id="latex-path-assets">
#paper-content .math.display { display: block; text-align: center; margin: 1em 0; }
#paper-content blockquote { font-style: italic; color: #444; }
#paper-content pre { background: #f6f6f6; padding: 0.75em; overflow-x: auto; }
</style>"""

DETAIL_PANEL_SCRIPT = """
document.addEventListener('click', function (event) {
  var anchor = event.target.closest('a.citation');
  if (!anchor) return;
  event.preventDefault();
  var key = anchor.getAttribute('data-cite-key');
  var panel = document.getElementById('citation-detail');
  var tpl = null;
  document.querySelectorAll('template[data-cite-detail]').forEach(function (t) {
    if (t.getAttribute('data-cite-detail') === key) tpl = t;
  });
  panel.innerHTML = tpl ? tpl.innerHTML : '<p class="detail-missing">Reference not found: ' + key + '</p>';
});
"""
