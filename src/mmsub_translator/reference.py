"""Reference lookups and few-shot examples derived from a previous episode."""

from __future__ import annotations

import re
import logging
from typing import Callable, Dict, List

from .aligner import align_srts
from .models import StyleExample, TrainingDiff
from .parser import parse_srt

logger = logging.getLogger(__name__)

# 句中出现大写单词（多半是人名、地名）
PROPER_NOUN_RE = re.compile(r'[a-z] [A-Z]')

MAX_STYLE_EXAMPLES = 40
SOFT_STYLE_EXAMPLES = 20
MIN_STYLE_TEXT_LENGTH = 20

MAX_TRAINING_DIFFS = 20


def has_proper_noun(text: str) -> bool:
    """Return True if a capitalized word follows a lowercase word mid-sentence."""
    return PROPER_NOUN_RE.search(text) is not None


def create_reference_map(original_content: str, translated_content: str) -> Dict[str, str]:
    """
    Build an exact-match lookup (original text -> translated text).

    Blocks are paired strictly by position, which suits recurring lines such
    as intros and credits in tracks that correspond one to one. Later
    duplicates of the same original text overwrite earlier ones.

    Args:
        original_content: Raw SRT of the reference original
        translated_content: Raw SRT of the reference translation

    Returns:
        Mapping of trimmed original text to trimmed translation
    """
    originals = parse_srt(original_content)
    translations = parse_srt(translated_content)

    reference: Dict[str, str] = {}
    for orig, trans in zip(originals, translations):
        key = orig.text.strip()
        value = trans.text.strip()
        if key and value:
            reference[key] = value

    logger.debug(f"Reference map built with {len(reference)} entries")
    return reference


def extract_style_examples(
    original_content: str,
    translated_content: str,
    predicate: Callable[[str], bool] = has_proper_noun,
) -> List[StyleExample]:
    """
    Pick aligned pairs worth showing to the translator as context.

    A pair is kept when ``predicate`` accepts its original text, or while
    fewer than 20 examples are collected and the text is longer than 20
    characters. At most 40 examples are returned.
    """
    examples: List[StyleExample] = []

    for pair in align_srts(original_content, translated_content):
        if not pair.target:
            continue
        text = pair.source.strip()

        if predicate(text) or (len(examples) < SOFT_STYLE_EXAMPLES and len(text) > MIN_STYLE_TEXT_LENGTH):
            examples.append(StyleExample.flattened(text, pair.target))

        if len(examples) >= MAX_STYLE_EXAMPLES:
            break

    return examples


def find_training_diffs(
    original_content: str,
    ai_content: str,
    human_content: str,
    limit: int = MAX_TRAINING_DIFFS,
) -> List[TrainingDiff]:
    """
    Collect lines where the human edit differs from the AI draft.

    The AI and human tracks are matched to the original by id.
    """
    ai_by_id = {b.index: b.text for b in parse_srt(ai_content)}
    human_by_id = {b.index: b.text for b in parse_srt(human_content)}

    diffs: List[TrainingDiff] = []
    if limit <= 0:
        return diffs

    for orig in parse_srt(original_content):
        ai_text = ai_by_id.get(orig.index)
        human_text = human_by_id.get(orig.index)

        if ai_text and human_text and ai_text.strip() != human_text.strip():
            diffs.append(TrainingDiff(
                original=orig.text.replace('\n', ' '),
                ai_draft=ai_text.replace('\n', ' '),
                human_edit=human_text.replace('\n', ' '),
            ))
            if len(diffs) >= limit:
                break

    return diffs
