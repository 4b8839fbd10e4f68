from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class BibEntry:
    entry_type: str
    citekey: str
    fields: Dict[str, str] = field(default_factory=dict)


@dataclass
class ResolvedEntry:
    citekey: str
    number: int
    fields: Dict[str, str]
    entry_type: Optional[str] = None
    # True when the key was cited but missing from the bibliography
    stub: bool = False


@dataclass
class RenderOutcome:
    status: str
    # "markdown", "latex" or None when rendering failed
    backend: Optional[str] = None
    fallback: bool = False
    error: Optional[str] = None
    citation_order: List[str] = field(default_factory=list)
    citation_map: Dict[str, int] = field(default_factory=dict)
    entries: List[ResolvedEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
