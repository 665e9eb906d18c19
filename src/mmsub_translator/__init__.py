"""
MM Sub Translator - English to Myanmar subtitle translation with an LLM.

Features:
- Lenient SRT parsing (malformed cues are skipped, not fatal)
- Alignment of two subtitle tracks by id with a timestamp-checked fallback
- Exact reuse of recurring lines from a previous episode
- Few-shot style examples from reference episodes and past corrections
- Glossary support for names and terms
"""

__version__ = "1.0.0"

from .models import SrtBlock, AlignedBlock, StyleExample, TrainingDiff, TranslationProject
from .parser import parse_srt, stringify_srt, read_srt, save_srt, validate_srt_file
from .aligner import align_blocks, align_srts
from .reference import (
    create_reference_map,
    extract_style_examples,
    find_training_diffs,
    has_proper_noun,
)
from .sampler import sample_training_examples
from .store import ProjectStore, load_training_examples
from .training import import_training_data, TrainingImport
from .glossary import Glossary, load_glossary, parse_glossary_terms
from .translator import translate_batch, generate_training_feedback
from .config import TranslatorConfig
from .errors import MmsubError, StoreError, AlignmentError

__all__ = [
    # Models
    "SrtBlock",
    "AlignedBlock",
    "StyleExample",
    "TrainingDiff",
    "TranslationProject",
    "TranslatorConfig",
    "Glossary",
    # Parsing
    "parse_srt",
    "stringify_srt",
    "read_srt",
    "save_srt",
    "validate_srt_file",
    # Alignment
    "align_blocks",
    "align_srts",
    # Reference
    "create_reference_map",
    "extract_style_examples",
    "find_training_diffs",
    "has_proper_noun",
    # History
    "sample_training_examples",
    "ProjectStore",
    "load_training_examples",
    "import_training_data",
    "TrainingImport",
    # Glossary
    "load_glossary",
    "parse_glossary_terms",
    # Translation
    "translate_batch",
    "generate_training_feedback",
    # Errors
    "MmsubError",
    "StoreError",
    "AlignmentError",
]
