"""
vector_pessimization/descriptors.py
═══════════════════════════════════

Read-only type graph consumed by the move-degradation analysis.

The graph is produced by a frontend (see :mod:`vector_pessimization.frontend`
for the Cppcheck dump adapter) and is never mutated by the analyzer.
Records only ever contain other types *by value*, so the graph is acyclic.

    TypeDescriptor ──► RecordDescriptor ──► FieldDescriptor ──► TypeDescriptor
                                       ├──► BaseDescriptor  ──► TypeDescriptor
                                       └──► ConstructorDescriptor

Ordering of ``fields`` and ``bases`` is declaration order and must be
preserved: the analysis blames the *first* offending entity.

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — LOCATIONS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — ENUMERATIONS
# ═════════════════════════════════════════════════════════════════════════

class TypeKind(Enum):
    """Discriminant for :class:`TypeDescriptor`."""
    BUILTIN = auto()
    ENUM = auto()
    POINTER = auto()      # pointers and reference members
    RECORD = auto()       # class / struct / union


SCALAR_KINDS = frozenset({TypeKind.BUILTIN, TypeKind.ENUM, TypeKind.POINTER})


class ExceptionSpecKind(Enum):
    """
    The exception specification as *written* (or implied) on a constructor.

    NONE               — no specification on a user-provided function
    BASIC_NOEXCEPT     — ``noexcept``
    NOEXCEPT_TRUE      — ``noexcept(true)``
    NOEXCEPT_FALSE     — ``noexcept(false)``
    DYNAMIC_NONE       — ``throw()``
    DYNAMIC            — ``throw(T, ...)``
    DEPENDENT_NOEXCEPT — ``noexcept(expr)`` the frontend could not evaluate
    UNEVALUATED        — implicit or defaulted; derived from sub-objects
    """
    NONE = auto()
    BASIC_NOEXCEPT = auto()
    NOEXCEPT_TRUE = auto()
    NOEXCEPT_FALSE = auto()
    DYNAMIC_NONE = auto()
    DYNAMIC = auto()
    DEPENDENT_NOEXCEPT = auto()
    UNEVALUATED = auto()


class ClassifiedSpec(Enum):
    """Three-valued result of the exception-spec classifier."""
    NOT_THROWING = auto()
    THROWING = auto()
    UNKNOWN = auto()


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — DESCRIPTORS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ConstructorDescriptor:
    """
    One constructor of a record.

    Attributes
    ----------
    name                : spelling used in diagnostics (usually the class name)
    location            : declaration site
    is_move_constructor : ``T(T&&)``
    is_copy_constructor : ``T(const T&)``
    is_user_provided    : user-declared and not defaulted/deleted on first
                          declaration
    is_defaulted        : ``= default`` or implicitly declared
    is_deleted          : ``= delete``
    exception_spec      : the written specification
    """
    name: str = ""
    location: SourceLocation = field(default_factory=SourceLocation)
    is_move_constructor: bool = False
    is_copy_constructor: bool = False
    is_user_provided: bool = False
    is_defaulted: bool = False
    is_deleted: bool = False
    exception_spec: ExceptionSpecKind = ExceptionSpecKind.NONE


@dataclass(frozen=True)
class FieldDescriptor:
    """A data member; a ``const`` member is copied even by a move."""
    name: str
    type: TypeDescriptor
    is_own_data_member: bool = True
    location: SourceLocation = field(default_factory=SourceLocation)
    is_const: bool = False


@dataclass(frozen=True)
class BaseDescriptor:
    type: TypeDescriptor
    is_virtual: bool = False
    location: SourceLocation = field(default_factory=SourceLocation)


@dataclass(frozen=True)
class RecordDescriptor:
    """
    A defined class/struct/union.

    ``is_trivially_copyable`` is the frontend's fact and accounts for all
    bases and fields transitively; the analyzer never recomputes it.
    """
    name: str
    definition_site: SourceLocation = field(default_factory=SourceLocation)
    constructors: Tuple[ConstructorDescriptor, ...] = ()
    fields: Tuple[FieldDescriptor, ...] = ()
    bases: Tuple[BaseDescriptor, ...] = ()
    is_trivially_copyable: bool = False


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Handle to a resolved type.

    For ``TypeKind.RECORD`` a ``definition`` of ``None`` means no definition
    is visible (incomplete record).
    """
    name: str
    kind: TypeKind
    definition: Optional[RecordDescriptor] = None

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    @property
    def is_record(self) -> bool:
        return self.kind is TypeKind.RECORD

    @property
    def is_complete(self) -> bool:
        return self.is_scalar or self.definition is not None

    def __str__(self) -> str:
        return self.name

    # ── Factory methods ──────────────────────────────────────────────

    @classmethod
    def builtin(cls, name: str) -> TypeDescriptor:
        return cls(name=name, kind=TypeKind.BUILTIN)

    @classmethod
    def enum(cls, name: str) -> TypeDescriptor:
        return cls(name=name, kind=TypeKind.ENUM)

    @classmethod
    def pointer(cls, name: str) -> TypeDescriptor:
        return cls(name=name, kind=TypeKind.POINTER)

    @classmethod
    def record(cls, definition: RecordDescriptor) -> TypeDescriptor:
        return cls(name=definition.name, kind=TypeKind.RECORD,
                   definition=definition)

    @classmethod
    def incomplete(cls, name: str) -> TypeDescriptor:
        return cls(name=name, kind=TypeKind.RECORD)


__all__ = [
    "SourceLocation",
    "TypeKind",
    "SCALAR_KINDS",
    "ExceptionSpecKind",
    "ClassifiedSpec",
    "ConstructorDescriptor",
    "FieldDescriptor",
    "BaseDescriptor",
    "RecordDescriptor",
    "TypeDescriptor",
]
