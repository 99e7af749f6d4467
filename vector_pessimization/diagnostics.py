"""
vector_pessimization/diagnostics.py
═══════════════════════════════════

Diagnostic model and the finding renderer.

A :class:`Finding` is structured data; this module turns it into a
cppcheck-addon-compatible :class:`Diagnostic` whose notes walk the causal
chain outer to inner::

    a.cpp:14:35: performance: 'vector<Outer>' will copy elements on resize
        instead of moving because the move constructor of 'Outer' may throw
        [vectorPessimization]
    a.cpp:3:8: note: 'Outer' defined here
    a.cpp:5:11: note: because the move constructor of 'Inner' may throw
    a.cpp:9:8: note: 'Inner' defined here
    a.cpp:10:5: note: throwing move constructor declared here

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Tuple

from vector_pessimization.causal_chain import CauseKind, CauseStep
from vector_pessimization.descriptors import SourceLocation
from vector_pessimization.site_driver import Finding

ADDON_NAME = "vector-pessimization"
ERROR_ID = "vectorPessimization"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """cppcheck-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    PERFORMANCE = "performance"
    PORTABILITY = "portability"
    INFORMATION = "information"


class Confidence(Enum):
    """
    How certain we are that the diagnostic is a true positive.

    HIGH   — every step of the chain was proven from the type graph
    MEDIUM — the verdict holds but no cause could be pinned down
    LOW    — heuristic
    """
    HIGH = auto()
    MEDIUM = auto()
    LOW = auto()


@dataclass(frozen=True)
class DiagnosticNote:
    message: str
    location: SourceLocation = field(default_factory=SourceLocation)

    def to_gcc_format(self) -> str:
        return f"{self.location}: note: {self.message}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "vectorPessimization")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Primary source location
    confidence   : Confidence level
    checker_name : Name of the checker that produced this
    addon        : Addon name for cppcheck protocol
    extra        : Additional context string
    notes        : Follow-up notes, in emission order
    evidence     : Machine-readable evidence dict for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    confidence: Confidence = Confidence.HIGH
    checker_name: str = ""
    addon: str = ADDON_NAME
    extra: str = ""
    notes: Tuple[DiagnosticNote, ...] = ()
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_cppcheck_json(self) -> Dict[str, Any]:
        """Serialize to cppcheck's JSON addon output format."""
        return {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "extra": self.extra,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string for cppcheck addon stdout."""
        return json.dumps(self.to_cppcheck_json())

    def to_gcc_format(self) -> str:
        """GCC-style text: the primary line, then one line per note."""
        lines = [
            f"{self.location}: {self.severity.value}: "
            f"{self.message} [{self.error_id}]"
        ]
        lines.extend(note.to_gcc_format() for note in self.notes)
        return "\n".join(lines)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — FINDING RENDERER
# ═════════════════════════════════════════════════════════════════════════

def _step_notes(step: CauseStep) -> List[DiagnosticNote]:
    notes = [DiagnosticNote(f"'{step.record_name}' defined here",
                            step.record_definition_site)]
    if step.kind is CauseKind.USER_THROWING_MOVE_CONSTRUCTOR:
        notes.append(DiagnosticNote(
            "throwing move constructor declared here", step.blamed.location))
    else:
        blamed_type = step.blamed.type.name if step.blamed.type else step.blamed.name
        notes.append(DiagnosticNote(
            f"because the move constructor of '{blamed_type}' may throw",
            step.blamed.location))
    return notes


def render_finding(finding: Finding, checker_name: str = ADDON_NAME) -> Diagnostic:
    """Turn *finding* into a :class:`Diagnostic`, preserving chain order."""
    element = finding.element_type
    notes: List[DiagnosticNote] = []
    if finding.chain:
        for step in finding.chain:
            notes.extend(_step_notes(step))
    elif element.definition is not None:
        notes.append(DiagnosticNote(f"'{element.name}' defined here",
                                    element.definition.definition_site))

    message = (
        f"'{finding.container_spelling}' will copy elements on resize "
        f"instead of moving because the move constructor of "
        f"'{element.name}' may throw"
    )
    return Diagnostic(
        error_id=ERROR_ID,
        message=message,
        severity=DiagnosticSeverity.PERFORMANCE,
        location=finding.site,
        confidence=Confidence.HIGH if finding.chain else Confidence.MEDIUM,
        checker_name=checker_name,
        extra=" -> ".join(step.blamed.name for step in finding.chain),
        notes=tuple(notes),
        evidence={
            "container": finding.container,
            "elementType": element.name,
            "chain": [step.to_dict() for step in finding.chain],
        },
    )


__all__ = [
    "ADDON_NAME",
    "ERROR_ID",
    "DiagnosticSeverity",
    "Confidence",
    "SourceLocation",
    "DiagnosticNote",
    "Diagnostic",
    "render_finding",
]
