"""Tokenizer definition repair - Pure JSON surgery.

Some exported tokenizer definitions carry post-processing stages the
tokenizer runtime cannot deserialize (e.g. a ``ByteFallback`` entry
inside the ``post_processor`` block). These functions take a parsed
definition and return a patched copy; they never touch the filesystem.

Post-processor rules:
- sole stage is incompatible        -> remove ``post_processor``
- composite with one survivor       -> replace composite with the survivor
- composite with several survivors  -> keep composite, filtered list
- no incompatible stage found       -> remove ``post_processor`` (strict mode)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

INCOMPATIBLE_PROCESSOR_TYPES: frozenset[str] = frozenset({"ByteFallback"})

# model-section keys rejected by older runtimes, and keys they require
_MODEL_DROP_KEYS = ("byte_fallback", "ignore_merges")
_MODEL_REQUIRED_KEYS = ("unk_token", "dropout")


class RepairAction(str, Enum):
    """What was done to a definition."""

    REMOVED = "removed"
    UNWRAPPED = "unwrapped"
    FILTERED = "filtered"
    STRIPPED = "stripped"
    MODEL_NORMALIZED = "model_normalized"


@dataclass
class RepairOutcome:
    """A patched definition and the actions that produced it."""

    document: dict[str, Any]
    actions: list[RepairAction] = field(default_factory=list)
    removed_processors: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.actions)


def _is_incompatible(processor: Any, incompatible: frozenset[str]) -> bool:
    return isinstance(processor, dict) and processor.get("type") in incompatible


def repair_post_processor(
    document: dict[str, Any],
    incompatible: frozenset[str] = INCOMPATIBLE_PROCESSOR_TYPES,
) -> RepairOutcome:
    """Filter incompatible stages out of the post-processor block.

    Args:
        document: Parsed tokenizer definition (not modified)
        incompatible: Type tags to remove

    Returns:
        Outcome holding a patched deep copy
    """
    doc = copy.deepcopy(document)
    outcome = RepairOutcome(document=doc)

    post = doc.get("post_processor")
    if not isinstance(post, dict):
        return outcome

    processors = post.get("processors")
    if isinstance(processors, list):
        kept = [p for p in processors if not _is_incompatible(p, incompatible)]
        outcome.removed_processors = len(processors) - len(kept)

        if not kept:
            del doc["post_processor"]
            outcome.actions.append(RepairAction.REMOVED)
        elif len(kept) == 1:
            doc["post_processor"] = kept[0]
            outcome.actions.append(RepairAction.UNWRAPPED)
        elif outcome.removed_processors:
            post["processors"] = kept
            outcome.actions.append(RepairAction.FILTERED)

    elif _is_incompatible(post, incompatible):
        del doc["post_processor"]
        outcome.removed_processors = 1
        outcome.actions.append(RepairAction.REMOVED)

    return outcome


def normalize_model_section(document: dict[str, Any]) -> RepairOutcome:
    """Drop model keys older runtimes reject and add the ones they require."""
    doc = copy.deepcopy(document)
    outcome = RepairOutcome(document=doc)

    model = doc.get("model")
    if not isinstance(model, dict):
        return outcome

    changed = False
    for key in _MODEL_DROP_KEYS:
        if key in model:
            del model[key]
            changed = True
    for key in _MODEL_REQUIRED_KEYS:
        if key not in model:
            model[key] = None
            changed = True

    if changed:
        outcome.actions.append(RepairAction.MODEL_NORMALIZED)
    return outcome


def repair_document(
    document: dict[str, Any],
    strict: bool = True,
    normalize_model: bool = False,
) -> RepairOutcome:
    """Apply every repair rule to a tokenizer definition.

    Args:
        document: Parsed tokenizer definition (not modified)
        strict: Remove the whole post-processor when filtering found
            nothing to remove
        normalize_model: Also normalize the ``model`` section

    Returns:
        Combined outcome
    """
    outcome = repair_post_processor(document)

    if strict and not outcome.changed and "post_processor" in outcome.document:
        if outcome.document["post_processor"] is not None:
            del outcome.document["post_processor"]
            outcome.actions.append(RepairAction.STRIPPED)

    if normalize_model:
        model_outcome = normalize_model_section(outcome.document)
        outcome.document = model_outcome.document
        outcome.actions.extend(model_outcome.actions)

    return outcome
