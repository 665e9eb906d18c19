"""SRT parsing and saving utilities."""

from __future__ import annotations

import re
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .models import SrtBlock

logger = logging.getLogger(__name__)

# 序号行：可选符号 + 开头的数字，其余忽略
_INDEX_RE = re.compile(r'^\s*([+-]?\d+)')

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB


def _parse_index(line: str) -> Optional[int]:
    match = _INDEX_RE.match(line)
    if match is None:
        return None
    return int(match.group(1))


def _parse_block(chunk: str) -> Optional[SrtBlock]:
    """Parse one blank-line separated chunk, None if it is not a valid cue."""
    lines = chunk.strip().split('\n')
    if len(lines) < 3:
        return None

    index = _parse_index(lines[0])
    if index is None:
        return None

    time_line = lines[1]
    if '-->' not in time_line:
        return None
    parts = time_line.split('-->')
    start, end = parts[0].strip(), parts[1].strip()

    return SrtBlock(index, start, end, '\n'.join(lines[2:]))


def parse_srt(content: str) -> List[SrtBlock]:
    """
    Parse SRT content into a list of SrtBlock objects.

    Malformed chunks (too few lines, no numeric id, no ``-->`` timing line)
    are skipped; the rest of the file is still parsed.

    Args:
        content: Raw SRT file content as string

    Returns:
        List of parsed SrtBlock objects in file order
    """
    if not content:
        return []

    # 预处理：去掉 BOM，标准化换行符
    content = content.lstrip('\ufeff')
    content = content.replace('\r\n', '\n').replace('\r', '\n')

    blocks: List[SrtBlock] = []
    chunks = re.split(r'\n{2,}', content)

    for chunk in chunks:
        block = _parse_block(chunk)
        if block is not None:
            blocks.append(block)

    dropped = sum(1 for c in chunks if c.strip()) - len(blocks)
    if dropped:
        logger.debug(f"Skipped {dropped} malformed SRT chunk(s)")

    return blocks


def stringify_srt(blocks: Sequence[SrtBlock]) -> str:
    """Serialize blocks to SRT text, preferring translated text."""
    return '\n\n'.join(b.to_srt() for b in blocks)


def read_srt(path: Path) -> List[SrtBlock]:
    """Read and parse an SRT file (BOM tolerant)."""
    return parse_srt(path.read_text(encoding="utf-8-sig"))


def validate_srt_file(path: Path) -> Optional[str]:
    """
    Validate SRT file before processing.

    Args:
        path: Path to SRT file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix != '.srt':
        return f"Invalid file extension: {suffix} (expected .srt)"

    size = path.stat().st_size
    if size == 0:
        return "File is empty"
    if size > MAX_FILE_SIZE:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None


def save_srt(blocks: Sequence[SrtBlock], path: Path) -> None:
    """
    Save blocks to an SRT file, keeping their original ids.

    Args:
        blocks: Sequence of SrtBlock objects to save
        path: Output file path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(stringify_srt(blocks) + '\n', encoding="utf-8")

    logger.info(f"Saved {len(blocks)} blocks to {path}")
