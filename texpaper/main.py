import argparse
import sys
from datetime import datetime
from typing import List, Optional

from .config import DEFAULT_BIB_PATH, DEFAULT_OUTPUT_PATH, DEFAULT_PAPER_PATH
from .renderer import PaperRenderer, renderer_from_query


def cli_main(argv: Optional[List[str]] = None) -> int:
    """
    Render a paper to HTML without the GUI.

    Examples:
      texpaper --paper core.tex --bib refs.bib --output paper.html
      texpaper --paper https://example.org/core.tex --query "?renderer=latexjs"
    """
    parser = argparse.ArgumentParser(description="LaTeX paper to HTML renderer (CLI)")
    parser.add_argument("--paper", default=DEFAULT_PAPER_PATH, help=f"Paper .tex path or URL (default: {DEFAULT_PAPER_PATH})")
    parser.add_argument("--bib", default=DEFAULT_BIB_PATH, help=f"Bibliography .bib path or URL (default: {DEFAULT_BIB_PATH})")
    parser.add_argument("--output", default=DEFAULT_OUTPUT_PATH, help=f"Output HTML file (default: {DEFAULT_OUTPUT_PATH})")
    parser.add_argument(
        "--renderer",
        choices=["auto", "latex"],
        default="auto",
        help="auto tries Markdown first and falls back to LaTeX; latex skips Markdown",
    )
    parser.add_argument(
        "--query",
        default=None,
        help='Page query string, e.g. "?renderer=latexjs" (overrides --renderer when it names one)',
    )
    parser.add_argument("--no-typeset", action="store_true", help="Leave TeX math as-is instead of converting to MathML")
    args = parser.parse_args(argv)

    def log_fn(msg: str) -> None:
        ts = datetime.now().strftime("%H:%M:%S")
        print(f"[{ts}] {msg}")

    def progress_fn(value: float, text: str) -> None:
        pct = int(value * 100)
        print(f"[{pct:3d}%] {text}")

    renderer = args.renderer
    if args.query:
        renderer = renderer_from_query(args.query) or renderer

    paper_renderer = PaperRenderer(log_fn, progress_fn, typeset=not args.no_typeset)
    outcome = paper_renderer.load(args.paper, args.bib or None, renderer=renderer)
    paper_renderer.write(args.output)
    if not outcome.ok:
        return 1
    return 0


def main() -> None:
    if len(sys.argv) > 1:
        sys.exit(cli_main())
    else:
        from .gui import App

        app = App()
        app.mainloop()
