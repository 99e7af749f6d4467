"""
vector_pessimization/triviality.py
══════════════════════════════════

Trivially-copyable oracle.

Built-in, enumeration and pointer types are always trivially copyable.
A record is trivially copyable iff the frontend says so.  An incomplete
record is *not* trivially copyable: being unknown is no exemption here, the
fail-open behaviour lives in the move-safety evaluator.
"""

from __future__ import annotations

from vector_pessimization.descriptors import TypeDescriptor


def is_trivially_copyable(type_: TypeDescriptor) -> bool:
    if type_.is_scalar:
        return True
    record = type_.definition
    if record is None:
        return False
    return record.is_trivially_copyable


__all__ = ["is_trivially_copyable"]
