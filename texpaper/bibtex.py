import re
from typing import Dict, List

from .config import NON_ENTRY_TYPES
from .models import BibEntry

BIB_COMMENT_RE = re.compile(r"^[ \t]*%.*$", re.M)

# The body ends at the first "}" that opens a line. This is not brace balanced:
# a field value whose closing "}" starts a line cuts the entry short.
ENTRY_RE = re.compile(r"@(\w+)\s*\{\s*([^,{}@\s]+)\s*,(.*?)\n\}", re.S)

FIELD_RE = re.compile(r"(\w+)\s*=\s*(\{[^{}]*\}|\"[^\"]*\"|[^,\n]+)\s*,?")


def clean_field_value(raw: str) -> str:
    value = raw.strip()
    value = re.sub(r"^\{|\}$", "", value)
    value = re.sub(r'^"|"$', "", value)
    return re.sub(r"\s+", " ", value)


def parse_fields(body: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for match in FIELD_RE.finditer(body):
        key, raw_value = match.group(1), match.group(2)
        fields[key.lower()] = clean_field_value(raw_value)
    return fields


def parse_bibtex(raw: str) -> List[BibEntry]:
    """
    Parse BibTeX text into entries in file order.

    Malformed blocks are skipped without error; unknown fields are kept and
    nothing is validated.
    """
    cleaned = BIB_COMMENT_RE.sub("", raw)
    entries: List[BibEntry] = []
    for match in ENTRY_RE.finditer(cleaned):
        entry_type, citekey, body = match.group(1), match.group(2), match.group(3)
        entry_type = entry_type.lower()
        if entry_type in NON_ENTRY_TYPES:
            continue
        entries.append(BibEntry(entry_type=entry_type, citekey=citekey.strip(), fields=parse_fields(body)))
    return entries
