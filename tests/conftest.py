"""Shared helpers for building SRT text in tests."""

from typing import Iterable, Tuple

import pytest


def build_srt(cues: Iterable[Tuple[int, str, str]], end: str = "00:59:59,000") -> str:
    """Render (id, start, text) triples as SRT content."""
    return "\n\n".join(f"{idx}\n{start} --> {end}\n{text}" for idx, start, text in cues)


def ts(seconds: int) -> str:
    """SRT timestamp for a whole number of seconds."""
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d},000"


@pytest.fixture
def make_srt():
    return build_srt
