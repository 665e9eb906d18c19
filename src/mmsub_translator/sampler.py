"""Sampling of training examples from saved project history."""

from __future__ import annotations

import re
import logging
from typing import Iterable, List

from .models import SrtBlock, StyleExample, TranslationProject

logger = logging.getLogger(__name__)

DEFAULT_TRAINING_LIMIT = 30
MAX_PER_PROJECT = 10
MIN_TEXT_LENGTH = 10

_NUMERIC_RE = re.compile(r'\d+', re.ASCII)


def is_training_candidate(block: SrtBlock) -> bool:
    """A block with both texts, longer than a short interjection and not just a number."""
    if not block.text or not block.translated:
        return False
    if len(block.text) <= MIN_TEXT_LENGTH:
        return False
    return _NUMERIC_RE.fullmatch(block.text) is None


def sample_training_examples(
    projects: Iterable[TranslationProject],
    limit: int = DEFAULT_TRAINING_LIMIT,
) -> List[StyleExample]:
    """
    Take up to ``limit`` original/translation pairs from past projects.

    Projects are expected newest first. Only imported training data and
    projects with at least one translation are used; from each, the first
    10 qualifying blocks are taken in file order.

    Args:
        projects: Project history, newest first
        limit: Maximum number of examples to return

    Returns:
        Examples ordered by project recency, then block order
    """
    examples: List[StyleExample] = []
    if limit <= 0:
        return examples

    for project in projects:
        if not (project.is_external_import or project.has_translations):
            continue

        candidates = [b for b in project.blocks if is_training_candidate(b)]
        for block in candidates[:MAX_PER_PROJECT]:
            examples.append(StyleExample.flattened(block.text, block.translated))
            if len(examples) >= limit:
                return examples

    logger.debug(f"Sampled {len(examples)} training examples")
    return examples
