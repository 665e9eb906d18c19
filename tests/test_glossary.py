"""Tests for glossary module."""

import pytest
from pathlib import Path
import tempfile

from mmsub_translator.glossary import Glossary, load_glossary, parse_glossary_terms


class TestGlossary:

    def test_add_and_get(self):
        g = Glossary()
        g.add("Walter", "ဝေါ်လ်တာ")
        assert g.get("Walter") == "ဝေါ်လ်တာ"

    def test_case_insensitive_get(self):
        g = Glossary()
        g.add("Walter", "ဝေါ်လ်တာ")
        assert g.get("walter") == "ဝေါ်လ်တာ"
        assert g.get("WALTER") == "ဝေါ်လ်တာ"

    def test_readd_with_other_case_replaces(self):
        g = Glossary()
        g.add("walter", "old")
        g.add("Walter", "ဝေါ်လ်တာ")
        assert len(g) == 1
        assert list(g) == [("Walter", "ဝေါ်လ်တာ")]

    def test_blank_ignored(self):
        g = Glossary()
        g.add("  ", "x")
        g.add("Yangon", "  ")
        assert len(g) == 0

    def test_find_matches(self):
        g = Glossary()
        g.add("Walter", "ဝေါ်လ်တာ")
        g.add("Yangon", "ရန်ကုန်")
        g.add("Mandalay", "မန္တလေး")

        matches = g.find_matches("walter went to Yangon")
        assert matches == {"Walter": "ဝေါ်လ်တာ", "Yangon": "ရန်ကုန်"}

    def test_len_and_bool(self):
        g = Glossary()
        assert len(g) == 0
        assert not g

        g.add("Test", "စမ်းသပ်")
        assert len(g) == 1
        assert g


class TestParseGlossaryTerms:

    def test_separators_and_comments(self):
        g = parse_glossary_terms([
            "# names",
            "Walter = ဝေါ်လ်တာ",
            "Yangon -> ရန်ကုန်",
            "",
            "not a term",
        ])
        assert list(g) == [("Walter", "ဝေါ်လ်တာ"), ("Yangon", "ရန်ကုန်")]

    def test_compact_form(self):
        g = parse_glossary_terms(["Walter=ဝေါ်လ်တာ"])
        assert g.get("Walter") == "ဝေါ်လ်တာ"


class TestLoadGlossary:

    def test_load_file(self):
        content = """# Characters
Walter = ဝေါ်လ်တာ
Jesse -> ဂျက်စီ
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False, encoding='utf-8') as f:
            f.write(content)
            path = Path(f.name)

        try:
            glossary = load_glossary(path)
            assert len(glossary) == 2
            assert glossary.get("Jesse") == "ဂျက်စီ"
        finally:
            path.unlink()

    def test_nonexistent(self):
        glossary = load_glossary(Path("/nonexistent"))
        assert len(glossary) == 0
