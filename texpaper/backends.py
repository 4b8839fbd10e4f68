import os
import shutil
import subprocess
from typing import Callable, List, Optional

from markdown_it import MarkdownIt

from .config import LATEX_ASSETS, PANDOC_CMD, PANDOC_CMD_TIMEOUT


class BackendError(RuntimeError):
    """A rendering backend failed to produce HTML."""


class BackendUnavailable(BackendError):
    """The backend's engine is not installed."""


class MarkdownBackend:
    """Markdown to HTML with markdown-it. Raw HTML passes through for citation anchors."""

    name = "markdown"

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark", {"html": True}).enable("table").enable("strikethrough")

    def render(self, text: str) -> str:
        return self._md.render(text)


class PandocLatexBackend:
    """
    LaTeX to an HTML fragment through the pandoc binary.

    Math is kept as ``\\(..\\)`` / ``\\[..\\]`` spans (``--mathjax``) so the
    typesetter can pick it up afterwards.
    """

    name = "latex"

    def __init__(
        self,
        command: str = PANDOC_CMD,
        timeout: float = PANDOC_CMD_TIMEOUT,
        log_fn: Callable[[str], None] = lambda _msg: None,
    ) -> None:
        self.command = command
        self.timeout = timeout
        self.log_fn = log_fn

    def available(self) -> bool:
        return shutil.which(self.command) is not None

    def build_command(self) -> List[str]:
        return [self.command, "--quiet", "--wrap=none", "--mathjax", "-f", "latex", "-t", "html"]

    def render(self, text: str) -> str:
        if not self.available():
            raise BackendUnavailable(f"{self.command} not found on system PATH.")
        self.log_fn(f"Running {self.command} (latex -> html)...")
        creationflags = 0
        if os.name == "nt":
            creationflags = subprocess.CREATE_NO_WINDOW
        try:
            proc = subprocess.run(
                self.build_command(),
                input=text,
                capture_output=True,
                check=False,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                creationflags=creationflags,
            )
        except FileNotFoundError as exc:
            raise BackendUnavailable(f"{self.command} not found on system PATH.") from exc
        except subprocess.TimeoutExpired as exc:
            raise BackendError(f"{self.command} timed out after {self.timeout}s") from exc
        if proc.returncode != 0:
            tail = "\n".join((proc.stderr or "").splitlines()[-12:])
            self.log_fn(f"{self.command} returned {proc.returncode}; tail of log:\n{tail}")
            raise BackendError(f"{self.command} exited with status {proc.returncode}")
        return proc.stdout or ""

    def styles_and_scripts(self) -> Optional[str]:
        return LATEX_ASSETS
