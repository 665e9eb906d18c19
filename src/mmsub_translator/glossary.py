"""Name and term glossary for consistent translations."""

from __future__ import annotations

import re
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, Tuple

logger = logging.getLogger(__name__)

_TERM_LINE_RE = re.compile(r'^(.+?)\s*(?:=|->)\s*(.+)$')


class Glossary:
    """术语表：人名、地名等必须统一的译法。"""

    def __init__(self):
        self._terms: Dict[str, str] = {}
        self._lower_index: Dict[str, str] = {}

    def add(self, term: str, translation: str) -> None:
        """Add a term; blank terms or translations are ignored."""
        term = term.strip()
        translation = translation.strip()
        if term and translation:
            old = self._lower_index.get(term.lower())
            if old is not None and old != term:
                del self._terms[old]
            self._terms[term] = translation
            self._lower_index[term.lower()] = term

    def get(self, term: str) -> str | None:
        """Look up a translation, ignoring case."""
        original_term = self._lower_index.get(term.lower())
        if original_term:
            return self._terms.get(original_term)
        return None

    def find_matches(self, text: str) -> Dict[str, str]:
        """Return the terms (original casing) that occur in ``text``."""
        text_lower = text.lower()
        return {
            term: translation
            for term, translation in self._terms.items()
            if term.lower() in text_lower
        }

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._terms.items())

    def __len__(self) -> int:
        return len(self._terms)

    def __bool__(self) -> bool:
        return len(self._terms) > 0


def parse_glossary_line(line: str) -> Tuple[str, str] | None:
    """Split ``Term = Translation`` or ``Term -> Translation``."""
    match = _TERM_LINE_RE.match(line.strip())
    if match is None:
        return None
    term, translation = match.groups()
    return term, translation


def parse_glossary_terms(lines: Iterable[str]) -> Glossary:
    """Build a glossary from term lines; comments and invalid lines are skipped."""
    glossary = Glossary()

    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        parsed = parse_glossary_line(line)
        if parsed:
            glossary.add(*parsed)
        else:
            logger.debug(f"Skipping invalid glossary line {line_num}: {line}")

    return glossary


def load_glossary(path: Path) -> Glossary:
    """
    Load glossary from a text file.

    Supported formats:
        Term = Translation
        Term -> Translation
        # Comment lines

    Args:
        path: Path to glossary file

    Returns:
        Glossary instance (empty if the file does not exist)
    """
    if not path.exists():
        logger.warning(f"Glossary file not found: {path}")
        return Glossary()

    glossary = parse_glossary_terms(path.read_text(encoding='utf-8-sig').splitlines())
    logger.info(f"Loaded {len(glossary)} terms from glossary")
    return glossary
