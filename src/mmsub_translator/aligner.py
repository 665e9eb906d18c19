"""Block-for-block alignment of two independently authored SRT tracks."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .models import AlignedBlock, SrtBlock
from .parser import parse_srt

logger = logging.getLogger(__name__)


def _match_block(
    position: int,
    block: SrtBlock,
    by_id: Dict[int, SrtBlock],
    targets: Sequence[SrtBlock],
) -> Optional[SrtBlock]:
    """Find the counterpart of ``block``: same id, else same position with the same start time."""
    match = by_id.get(block.index)
    if match is not None:
        return match

    if position < len(targets):
        candidate = targets[position]
        # 序号错位时，只接受开始时间一致的候选
        if candidate.start == block.start:
            return candidate

    return None


def align_blocks(
    sources: Sequence[SrtBlock],
    targets: Sequence[SrtBlock],
) -> List[AlignedBlock]:
    """
    Pair each source block with a block of the target track.

    Matching is by id first; when the id is absent from the target track the
    block at the same position is used, but only if its start time is
    identical. Unmatched source blocks are left out.

    Args:
        sources: Blocks of the original track
        targets: Blocks of the translated (or edited) track

    Returns:
        Aligned pairs in source order
    """
    by_id: Dict[int, SrtBlock] = {}
    for t in targets:
        by_id[t.index] = t

    aligned: List[AlignedBlock] = []
    for position, block in enumerate(sources):
        match = _match_block(position, block, by_id, targets)
        if match is None:
            continue
        aligned.append(AlignedBlock(
            index=block.index,
            start=block.start,
            end=block.end,
            source=block.text,
            target=match.text,
        ))

    if len(aligned) < len(sources):
        logger.debug(f"Aligned {len(aligned)}/{len(sources)} blocks, {len(sources) - len(aligned)} unmatched")

    return aligned


def align_srts(original_content: str, translated_content: str) -> List[AlignedBlock]:
    """Parse two SRT texts and align them with :func:`align_blocks`."""
    return align_blocks(parse_srt(original_content), parse_srt(translated_content))
