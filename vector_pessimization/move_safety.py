"""
vector_pessimization/move_safety.py
═══════════════════════════════════

Move-safety evaluator: will a resizable container holding this type fall
back to copying its elements?

    will_degrade(T) = not trivially_copyable(T)
                      and T is complete
                      and not has_nothrow_move(T)

    has_nothrow_move(T) = move constructor exists
                          and classify(move constructor) != THROWING

The same predicate is applied to the element type and, while tracing, to
every field and base; there is no level-specific rule.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from vector_pessimization.descriptors import (
    ClassifiedSpec,
    RecordDescriptor,
    TypeDescriptor,
)
from vector_pessimization.exception_spec import classify, find_move_constructor
from vector_pessimization.triviality import is_trivially_copyable

_log = logging.getLogger(__name__)


class Verdict(Enum):
    SAFE = auto()
    DEGRADES = auto()


def has_nothrow_move_constructor(record: RecordDescriptor) -> bool:
    ctor = find_move_constructor(record)
    if ctor is None:
        return False
    return classify(ctor, record) is not ClassifiedSpec.THROWING


def will_degrade(type_: TypeDescriptor) -> bool:
    """Return ``True`` if moving *type_* may throw and it is not trivial."""
    if is_trivially_copyable(type_):
        return False
    record = type_.definition
    if record is None:
        # No definition visible: fail open.
        return False
    degrades = not has_nothrow_move_constructor(record)
    _log.debug("'%s' %s", type_.name,
               "degrades to copy" if degrades else "moves safely")
    return degrades


def evaluate(type_: TypeDescriptor) -> Verdict:
    return Verdict.DEGRADES if will_degrade(type_) else Verdict.SAFE


__all__ = [
    "Verdict",
    "has_nothrow_move_constructor",
    "will_degrade",
    "evaluate",
]
