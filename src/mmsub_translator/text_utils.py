"""Text processing utilities."""

from __future__ import annotations

import re


# 缅甸语句读号，字幕中不保留
MYANMAR_PUNCTUATION = "။၊"


def clean_translated_text(text: str) -> str:
    """
    Clean a translated subtitle line returned by the model.

    Formatting marks are removed; line breaks requested by the model
    (real or escaped ``\\n``) are kept.

    Args:
        text: Raw translated text

    Returns:
        Cleaned text
    """
    if not text or not isinstance(text, str):
        return ""

    text = text.replace('\\n', '\n')

    lines = []
    for line in text.split('\n'):
        # 列表标记、markdown 粗体/斜体
        line = re.sub(r'^\s*(\d+[\.:\)]\s+|[*•]\s*)', '', line)
        line = re.sub(r'\*\*|__|\*', '', line)
        line = re.sub(f"[{MYANMAR_PUNCTUATION}]", ' ', line)
        line = re.sub(r'\s+', ' ', line).strip()
        if line:
            lines.append(line)

    return '\n'.join(lines)


def validate_translation(original: str, translated: str) -> tuple[bool, str]:
    """
    Validate a translated line.

    Args:
        original: Original text
        translated: Translated text

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not translated:
        return False, "Empty translation"

    clean = re.sub(r'[\s\W]', '', translated)
    if not clean:
        return False, "Translation contains only special characters"

    orig_len = len(original)
    if orig_len > 10 and len(translated) > orig_len * 5:
        return False, f"Translation too long ({len(translated)} vs {orig_len})"

    if translated.strip().lower() == original.strip().lower() and re.search(r'[A-Za-z]{3,}', original):
        return False, "Translation is identical to original"

    return True, ""


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to ``max_length`` characters including ``suffix``."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
