"""Tokenizer loading and repair."""

from ort_tts.tokenizer.loader import (
    Stage,
    TokenizerLoader,
    load_tokenizer_file,
    scratch_path,
)
from ort_tts.tokenizer.repair import (
    INCOMPATIBLE_PROCESSOR_TYPES,
    RepairAction,
    RepairOutcome,
    normalize_model_section,
    repair_document,
    repair_post_processor,
)

__all__ = [
    "INCOMPATIBLE_PROCESSOR_TYPES",
    "RepairAction",
    "RepairOutcome",
    "Stage",
    "TokenizerLoader",
    "load_tokenizer_file",
    "normalize_model_section",
    "repair_document",
    "repair_post_processor",
    "scratch_path",
]
