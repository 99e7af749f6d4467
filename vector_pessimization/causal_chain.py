"""
vector_pessimization/causal_chain.py
════════════════════════════════════

Causal chain tracer.

Called for a type the evaluator has already found to degrade, it explains
*why*, one record at a time, outer to inner:

    Outer ──field──► Middle ──base──► Inner ──► throwing move ctor

Priority per record (first match wins, the rest are never looked at):

  1. a user-provided move constructor classified THROWING
     → terminal step, no further nesting
  2. the first own data member, in declaration order, whose type degrades
  3. the first *non-virtual* base, in declaration order, that degrades;
     virtual bases are shared across the hierarchy and never blamed

Steps 2 and 3 recurse into the blamed type while ``current_depth`` is below
``max_depth``.  The record at ``max_depth`` still reports its own cause;
nothing deeper is appended.  If no rule matches, the record contributes no
step.

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from vector_pessimization.descriptors import (
    ClassifiedSpec,
    ConstructorDescriptor,
    RecordDescriptor,
    SourceLocation,
    TypeDescriptor,
)
from vector_pessimization.exception_spec import classify
from vector_pessimization.move_safety import will_degrade

_log = logging.getLogger(__name__)

MAX_DEPTH: int = 3


class CauseKind(Enum):
    USER_THROWING_MOVE_CONSTRUCTOR = "userThrowingMoveConstructor"
    THROWING_FIELD = "throwingField"
    THROWING_NON_VIRTUAL_BASE = "throwingNonVirtualBase"


@dataclass(frozen=True)
class BlamedEntity:
    """The constructor, field or base a step points at."""
    name: str
    location: SourceLocation = field(default_factory=SourceLocation)
    type: Optional[TypeDescriptor] = None


@dataclass(frozen=True)
class CauseStep:
    record_name: str
    record_definition_site: SourceLocation
    kind: CauseKind
    blamed: BlamedEntity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "record": self.record_name,
            "recordSite": str(self.record_definition_site),
            "blamed": self.blamed.name,
            "blamedSite": str(self.blamed.location),
        }


Chain = Tuple[CauseStep, ...]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — PER-RECORD CAUSE SELECTION
# ═════════════════════════════════════════════════════════════════════════

def throwing_user_move_constructor(
    record: RecordDescriptor,
) -> Optional[ConstructorDescriptor]:
    """The record's user-provided move constructor, if it is THROWING."""
    for ctor in record.constructors:
        if ctor.is_move_constructor and ctor.is_user_provided:
            if classify(ctor, record) is ClassifiedSpec.THROWING:
                return ctor
            return None
    return None


def first_cause(record: RecordDescriptor) -> Optional[CauseStep]:
    """Select the single step explaining *record*, or ``None``."""
    ctor = throwing_user_move_constructor(record)
    if ctor is not None:
        return CauseStep(
            record_name=record.name,
            record_definition_site=record.definition_site,
            kind=CauseKind.USER_THROWING_MOVE_CONSTRUCTOR,
            blamed=BlamedEntity(name=ctor.name or record.name,
                                location=ctor.location),
        )

    for fld in record.fields:
        if fld.is_own_data_member and will_degrade(fld.type):
            return CauseStep(
                record_name=record.name,
                record_definition_site=record.definition_site,
                kind=CauseKind.THROWING_FIELD,
                blamed=BlamedEntity(name=fld.name, location=fld.location,
                                    type=fld.type),
            )

    for base in record.bases:
        if base.is_virtual:
            continue
        if will_degrade(base.type):
            return CauseStep(
                record_name=record.name,
                record_definition_site=record.definition_site,
                kind=CauseKind.THROWING_NON_VIRTUAL_BASE,
                blamed=BlamedEntity(name=base.type.name,
                                    location=base.location, type=base.type),
            )

    _log.debug("no field, base or constructor explains '%s'", record.name)
    return None


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — RECURSIVE EXPLANATION
# ═════════════════════════════════════════════════════════════════════════

def explain(
    type_: TypeDescriptor,
    current_depth: int = 1,
    max_depth: int = MAX_DEPTH,
) -> Chain:
    """
    Build the causal chain for *type_*, starting at ``current_depth``.

    Returns an empty chain for incomplete records or when no cause is
    found.  Never raises.
    """
    record = type_.definition
    if record is None:
        return ()
    step = first_cause(record)
    if step is None:
        return ()
    _log.debug("depth %d: %s blames '%s'", current_depth,
               step.kind.value, step.blamed.name)
    if step.kind is CauseKind.USER_THROWING_MOVE_CONSTRUCTOR:
        return (step,)
    if current_depth >= max_depth or step.blamed.type is None:
        return (step,)
    return (step,) + explain(step.blamed.type, current_depth + 1, max_depth)


__all__ = [
    "MAX_DEPTH",
    "CauseKind",
    "BlamedEntity",
    "CauseStep",
    "Chain",
    "throwing_user_move_constructor",
    "first_cause",
    "explain",
]
