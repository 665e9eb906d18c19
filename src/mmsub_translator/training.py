"""Import of human-corrected translations as training data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .aligner import align_srts
from .config import TRAINING_NAME_SUFFIX
from .errors import AlignmentError
from .models import TrainingDiff, TranslationProject
from .reference import find_training_diffs
from .store import ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class TrainingImport:
    """Result of importing an original / AI draft / human edit triple."""

    project: TranslationProject
    diffs: List[TrainingDiff]


def import_training_data(
    store: ProjectStore,
    file_name: str,
    original_content: str,
    ai_content: str,
    human_content: str,
) -> TrainingImport:
    """
    Save the original + human edit as a training project.

    Args:
        store: Where the project is saved
        file_name: Name of the human-edited file
        original_content: English SRT
        ai_content: AI draft SRT
        human_content: Human-corrected SRT

    Returns:
        The saved project and the draft/edit differences

    Raises:
        AlignmentError: original and human tracks have nothing in common
    """
    aligned = align_srts(original_content, human_content)
    if not aligned:
        raise AlignmentError("Could not align original and human-edited files")

    project = TranslationProject.create(
        f"{file_name}{TRAINING_NAME_SUFFIX}",
        [pair.to_block() for pair in aligned],
        is_external_import=True,
    )
    store.save(project)
    logger.info(f"Imported {len(aligned)} aligned lines as '{project.file_name}'")

    diffs = find_training_diffs(original_content, ai_content, human_content)
    logger.info(f"Found {len(diffs)} lines changed by the editor")

    return TrainingImport(project=project, diffs=diffs)
