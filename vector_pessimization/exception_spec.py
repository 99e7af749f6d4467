"""
vector_pessimization/exception_spec.py
══════════════════════════════════════

Exception-specification classifier.

Reduces the specification a frontend reports for a constructor to one of
three states:

    ┌──────────────────────────────┬───────────────┐
    │ written form                 │ ClassifiedSpec│
    ├──────────────────────────────┼───────────────┤
    │ noexcept, noexcept(true),    │ NOT_THROWING  │
    │ throw()                      │               │
    │ (none), noexcept(false),     │ THROWING      │
    │ throw(T...)                  │               │
    │ noexcept(<dependent expr>)   │ UNKNOWN       │
    │ implicit / = default         │ derived from  │
    │                              │ sub-objects   │
    └──────────────────────────────┴───────────────┘

UNKNOWN is treated as non-throwing by every consumer: ambiguity never blames
code.

An implicitly declared or defaulted constructor has no written
specification.  Its specification is the conjunction of the corresponding
constructors of all bases (virtual ones included) and own data members, so
classifying it needs the owning record.  Without one the answer is UNKNOWN.
Moving a ``const`` member calls its copy constructor.

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Tuple

from vector_pessimization.descriptors import (
    ClassifiedSpec,
    ConstructorDescriptor,
    ExceptionSpecKind,
    RecordDescriptor,
    TypeDescriptor,
)
from vector_pessimization.triviality import is_trivially_copyable

_log = logging.getLogger(__name__)

_NOT_THROWING_FORMS = frozenset({
    ExceptionSpecKind.BASIC_NOEXCEPT,
    ExceptionSpecKind.NOEXCEPT_TRUE,
    ExceptionSpecKind.DYNAMIC_NONE,
})

_THROWING_FORMS = frozenset({
    ExceptionSpecKind.NONE,
    ExceptionSpecKind.NOEXCEPT_FALSE,
    ExceptionSpecKind.DYNAMIC,
})


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CONSTRUCTOR LOOKUP
# ═════════════════════════════════════════════════════════════════════════

def find_move_constructor(
    record: RecordDescriptor,
) -> Optional[ConstructorDescriptor]:
    """
    Return the record's move constructor, or ``None``.

    The first constructor flagged as a move constructor wins; overload
    resolution upstream already guarantees there is at most one viable
    candidate.  A deleted move constructor counts as absent.
    """
    for ctor in record.constructors:
        if ctor.is_move_constructor:
            return None if ctor.is_deleted else ctor
    return None


def find_copy_constructor(
    record: RecordDescriptor,
) -> Optional[ConstructorDescriptor]:
    for ctor in record.constructors:
        if ctor.is_copy_constructor:
            return None if ctor.is_deleted else ctor
    return None


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — CLASSIFIER
# ═════════════════════════════════════════════════════════════════════════

def classify(
    ctor: ConstructorDescriptor,
    owner: Optional[RecordDescriptor] = None,
) -> ClassifiedSpec:
    """
    Classify *ctor*'s exception specification.

    Parameters
    ----------
    ctor  : any constructor, not necessarily a move constructor
    owner : the record declaring *ctor*; needed only to derive the
            specification of implicit/defaulted constructors
    """
    spec = ctor.exception_spec
    if spec in _NOT_THROWING_FORMS:
        return ClassifiedSpec.NOT_THROWING
    if spec in _THROWING_FORMS:
        return ClassifiedSpec.THROWING
    if spec is ExceptionSpecKind.DEPENDENT_NOEXCEPT:
        return ClassifiedSpec.UNKNOWN
    if spec is ExceptionSpecKind.UNEVALUATED:
        if owner is None:
            return ClassifiedSpec.UNKNOWN
        return _classify_defaulted(ctor, owner)
    return ClassifiedSpec.UNKNOWN


def _classify_defaulted(
    ctor: ConstructorDescriptor,
    owner: RecordDescriptor,
) -> ClassifiedSpec:
    result = ClassifiedSpec.NOT_THROWING
    for sub_type, is_const in _sub_objects(owner):
        state = _classify_sub_object(sub_type,
                                     ctor.is_move_constructor and not is_const)
        if state is ClassifiedSpec.THROWING:
            _log.debug(
                "defaulted constructor of '%s' throws via '%s'",
                owner.name, sub_type.name,
            )
            return ClassifiedSpec.THROWING
        if state is ClassifiedSpec.UNKNOWN:
            result = ClassifiedSpec.UNKNOWN
    return result


def _sub_objects(record: RecordDescriptor) -> Iterator[Tuple[TypeDescriptor, bool]]:
    """Bases, then own data members, with their constness."""
    for base in record.bases:
        yield base.type, False
    for fld in record.fields:
        if fld.is_own_data_member:
            yield fld.type, fld.is_const


def _classify_sub_object(
    type_: TypeDescriptor,
    moving: bool,
) -> ClassifiedSpec:
    if is_trivially_copyable(type_):
        return ClassifiedSpec.NOT_THROWING
    record = type_.definition
    if record is None:
        return ClassifiedSpec.UNKNOWN
    ctor = find_move_constructor(record) if moving else None
    if ctor is None:
        # Without a usable move constructor the sub-object is copied.
        ctor = find_copy_constructor(record)
    if ctor is None:
        return ClassifiedSpec.UNKNOWN
    return classify(ctor, record)


__all__ = [
    "classify",
    "find_move_constructor",
    "find_copy_constructor",
]
