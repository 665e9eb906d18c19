"""English to Myanmar subtitle translation using an LLM."""

from __future__ import annotations

import json
import re
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from openai import AsyncOpenAI

from .config import DEFAULT_MODEL
from .glossary import Glossary
from .llm_client import chat
from .models import SrtBlock, StyleExample, TrainingDiff
from .text_utils import clean_translated_text, truncate_text, validate_translation

logger = logging.getLogger(__name__)

BATCH_SIZE = 20

ProgressCallback = Callable[[int, str], None]

ALL_FROM_REFERENCE_MESSAGE = "All lines matched from reference file."
FEEDBACK_FALLBACK = "Could not generate feedback at this time."

SYSTEM_PROMPT_BASE = """You are a professional subtitle localizer for movies and series, aimed at a Myanmar audience.
Your goal: subtitles that sound 100% natural, fluid and native (သဘာဝကျသော အပြောစကား).
Translate the feeling, context and intent, not just the words.

## Rules:
1. Spoken style only (အပြောစကားစစ်စစ်):
   - Never use formal/literary words like 'သည်', 'မည်', '၌', '၏', '၎င်း', 'ကျွန်ုပ်'.
   - Use natural endings: 'တယ်', 'မယ်', 'ပါ', 'နော်', 'ဗျာ', 'ရှင်', 'ပဲ', 'လေ', 'ပေါ့', 'ကွ', 'ကွာ'.
2. Flow: do not copy English grammar, use natural Myanmar SOV order.
   Drop "I"/"You" pronouns unless needed for clarity or emphasis. Keep lines short.
3. Tone: match the emotion (casual, angry, sad, formal); translate idioms to Myanmar equivalents.
4. Formatting: no Myanmar punctuation ('။' or '၊').
   If a line is longer than 35-40 characters, split it in two with '\\n' at a natural pause."""

OUTPUT_RULES = """## Output:
Valid JSON only: {"translations": [{"id": 0, "translatedText": "..."}, ...]}
Keep the same ids and the same number of items as the input."""


def _glossary_section(glossary: Glossary) -> str:
    if not glossary:
        return ""
    terms = "\n".join(f'  - "{term}" -> "{translation}"' for term, translation in glossary)
    return (
        "## Glossary (must use):\n"
        "Use exactly these translations for names and terms.\n"
        f"{terms}"
    )


def _examples_section(title: str, intro: str, examples: Sequence[StyleExample], labels: tuple[str, str]) -> str:
    if not examples:
        return ""
    pairs = "\n---\n".join(
        f'{labels[0]}: "{e.original}"\n{labels[1]}: "{e.translated}"' for e in examples
    )
    return f"## {title}:\n{intro}\n{pairs}"


def build_system_prompt(
    glossary: Glossary,
    consistency_examples: Sequence[StyleExample],
    training_examples: Sequence[StyleExample],
) -> str:
    """Assemble the system prompt with glossary and example sections."""
    sections = [
        SYSTEM_PROMPT_BASE,
        _glossary_section(glossary),
        _examples_section(
            "Context & consistency (previous episode)",
            "Pay close attention to how names, places and recurring phrases were translated and keep the same terminology.",
            consistency_examples,
            ("Original", "Translation"),
        ),
        _examples_section(
            "My personal style guide (learned from corrections)",
            "These are my corrections of earlier drafts. Follow their tone, particles and sentence structure.",
            training_examples,
            ("English", "My Correction"),
        ),
        OUTPUT_RULES,
    ]
    return "\n\n".join(s for s in sections if s)


def parse_translation_response(json_str: str, expected_count: int) -> Dict[int, str]:
    """Parse the model's JSON answer into batch position -> text."""
    if not json_str:
        return {}

    clean = json_str.strip()
    clean = re.sub(r'^```(?:json)?\s*', '', clean)
    clean = re.sub(r'\s*```$', '', clean)

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse failed: {e}")
        logger.debug(f"Raw response: {truncate_text(json_str, 200)}")
        return {}

    items = data.get("translations", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        logger.warning("'translations' is not a list")
        return {}

    translated: Dict[int, str] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        item_id = item.get("id")
        text = item.get("translatedText", item.get("text"))
        if isinstance(item_id, int) and 0 <= item_id < expected_count and isinstance(text, str):
            translated[item_id] = text
        else:
            logger.debug(f"Invalid item in response: {item_id}")

    return translated


async def _translate_single(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    text: str,
    glossary: Glossary,
) -> str:
    """单条重试：用于批量翻译中缺失或无效的条目。"""
    matched = glossary.find_matches(text)
    hint = ""
    if matched:
        hint = "Terms: " + ", ".join(f"{k} -> {v}" for k, v in matched.items()) + "\n"

    result = await chat(
        client, model,
        system_prompt + "\n\nThis time output only the translation of the single line, no JSON and no explanation.",
        f"{hint}Translate:\n{text}",
        max_retries=2,
    )
    return clean_translated_text(result)


async def _translate_chunk(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    chunk: Sequence[SrtBlock],
    glossary: Glossary,
    retry_failed: bool,
) -> Dict[int, str]:
    """Translate one batch; returns batch position -> cleaned translation."""
    items = [{"id": i, "text": b.text} for i, b in enumerate(chunk)]
    json_str = await chat(
        client, model, system_prompt,
        json.dumps(items, ensure_ascii=False),
        json_mode=True,
    )
    raw = parse_translation_response(json_str, len(chunk))

    results: Dict[int, str] = {}
    failed: List[int] = []
    for i, block in enumerate(chunk):
        text = clean_translated_text(raw.get(i, ""))
        is_valid, error = validate_translation(block.text, text)
        if is_valid:
            results[i] = text
        else:
            logger.debug(f"Block {block.index} failed: {error}")
            failed.append(i)

    if retry_failed and failed:
        logger.info(f"Retrying {len(failed)} failed lines individually...")
        for i in failed:
            text = await _translate_single(client, model, system_prompt, chunk[i].text, glossary)
            if validate_translation(chunk[i].text, text)[0]:
                results[i] = text

    return results


def apply_reference_map(blocks: Sequence[SrtBlock], reference_map: Optional[Mapping[str, str]]) -> List[SrtBlock]:
    """Copy blocks, filling in known translations for exactly matching lines."""
    if not reference_map:
        return [b.copy() for b in blocks]

    result: List[SrtBlock] = []
    for block in blocks:
        known = reference_map.get(block.text.strip())
        if known is not None:
            result.append(block.copy(translated=known, from_reference=True))
        else:
            result.append(block.copy())
    return result


async def translate_batch(
    client: AsyncOpenAI,
    blocks: Sequence[SrtBlock],
    reference_map: Optional[Mapping[str, str]],
    consistency_examples: Sequence[StyleExample],
    training_examples: Sequence[StyleExample],
    glossary: Glossary,
    on_progress: ProgressCallback,
    model: str = DEFAULT_MODEL,
    batch_size: int = BATCH_SIZE,
    retry_failed: bool = True,
) -> List[SrtBlock]:
    """
    Translate subtitle blocks, reusing reference translations where possible.

    Lines found in ``reference_map`` are filled in directly and never sent to
    the model; blocks that already carry a translation are left as they are.
    The remaining lines are translated in batches of ``batch_size``. A batch
    that fails is logged and its lines stay untranslated.

    ``on_progress(done, message)`` is called before and after each batch
    with a non-decreasing count that ends at ``len(blocks)``.

    Returns:
        New list of blocks in the input order
    """
    result = apply_reference_map(blocks, reference_map)
    pending = [i for i, b in enumerate(result) if not b.translated]
    total = len(result)
    done_before = total - len(pending)

    if not pending:
        on_progress(total, ALL_FROM_REFERENCE_MESSAGE)
        return result

    if done_before:
        logger.info(f"{done_before} lines filled from reference, {len(pending)} to translate")

    system_prompt = build_system_prompt(glossary, consistency_examples, training_examples)

    for start in range(0, len(pending), batch_size):
        batch_positions = pending[start:start + batch_size]
        end = start + len(batch_positions)
        on_progress(done_before + start, f"Translating lines {start + 1}-{end} of new content...")

        chunk = [result[i] for i in batch_positions]
        try:
            translated = await _translate_chunk(client, model, system_prompt, chunk, glossary, retry_failed)
        except Exception as e:
            logger.error(f"Error translating batch {start + 1}-{end}: {e}")
            translated = {}

        for pos, text in translated.items():
            i = batch_positions[pos]
            result[i] = result[i].copy(translated=text, from_reference=False)

        missing = len(chunk) - len(translated)
        if missing:
            logger.warning(f"{missing} line(s) in batch {start + 1}-{end} left untranslated")

        on_progress(done_before + end, "Processed batch...")

    return result


async def generate_training_feedback(
    client: AsyncOpenAI,
    diffs: Sequence[TrainingDiff],
    instructions: str = "",
    model: str = DEFAULT_MODEL,
) -> str:
    """Ask the model to reflect on how the human edits differ from its drafts."""
    examples: List[Dict[str, Any]] = [
        {"original": d.original, "aiDraft": d.ai_draft, "humanEdit": d.human_edit}
        for d in diffs
    ]

    system_prompt = (
        "You are an English-to-Myanmar subtitle translator being trained by a human editor. "
        "Analyze your mistakes against the editor's corrections."
    )
    user_prompt = f"""## Editor's instructions:
"{instructions or 'No specific instructions provided, infer from the corrections.'}"

## Your drafts vs. my corrections:
{json.dumps(examples, ensure_ascii=False, indent=2)}

Reply in Markdown, in English (quote Myanmar words as examples), concise and professional:
1. **What I Learned:** 3-4 key patterns where your draft differed from the human edit (tone, vocabulary, sentence structure).
2. **Improvement Strategy:** specific rules you will apply to avoid these mistakes.
3. **Future Commitment:** one short sentence on how the next translation will be better."""

    content = await chat(client, model, system_prompt, user_prompt, temperature=0.5, max_retries=2)
    if not content:
        logger.warning("Failed to generate training feedback")
        return FEEDBACK_FALLBACK
    return content
