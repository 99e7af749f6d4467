"""
vector_pessimization — Move-degradation analysis for Cppcheck addons
====================================================================

Finds ``std::vector`` (and other configured resizable, contiguous
containers) whose element type cannot be moved without risk of an
exception, so that growth falls back to copying every element, and explains
the cause down to the responsible field, base class or move constructor.

Core modules
------------
descriptors
    Immutable type graph (records, fields, bases, constructors).
exception_spec
    Three-valued exception-specification classifier.
triviality
    Trivially-copyable oracle.
move_safety
    The ``will_degrade`` predicate.
causal_chain
    Depth-bounded causal chain tracer.
site_driver
    Per-instantiation-site entry point.
diagnostics
    Diagnostic model and finding renderer.
frontend
    Descriptor graph from ``cppcheckdata`` dump objects.
checkers
    Checker framework, runner and addon entry point.

Quick start
-----------
>>> from vector_pessimization import TypeDescriptor, will_degrade
>>> will_degrade(TypeDescriptor.builtin("int"))
False

Package layout
--------------
::

    vector_pessimization/
    ├── __init__.py            ← this file
    ├── __main__.py
    ├── descriptors.py
    ├── exception_spec.py
    ├── triviality.py
    ├── move_safety.py
    ├── causal_chain.py
    ├── site_driver.py
    ├── diagnostics.py
    ├── frontend.py
    ├── config.py
    ├── errors.py
    └── checkers.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING, Dict, List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"
__all__: List[str] = []          # populated incrementally below

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

# ---------------------------------------------------------------------------
# Re-export registry: module name → public names
# ---------------------------------------------------------------------------

_CORE_MODULES: Dict[str, List[str]] = {
    "descriptors": [
        "SourceLocation",
        "TypeKind",
        "ExceptionSpecKind",
        "ClassifiedSpec",
        "ConstructorDescriptor",
        "FieldDescriptor",
        "BaseDescriptor",
        "RecordDescriptor",
        "TypeDescriptor",
    ],
    "exception_spec": [
        "classify",
        "find_move_constructor",
    ],
    "triviality": [
        "is_trivially_copyable",
    ],
    "move_safety": [
        "Verdict",
        "will_degrade",
        "evaluate",
    ],
    "causal_chain": [
        "MAX_DEPTH",
        "CauseKind",
        "CauseStep",
        "BlamedEntity",
        "explain",
    ],
    "site_driver": [
        "Finding",
        "on_container_instantiation",
    ],
    "diagnostics": [
        "Diagnostic",
        "DiagnosticSeverity",
        "render_finding",
    ],
    "config": [
        "AnalyzerConfig",
    ],
    "errors": [
        "AnalyzerError",
        "ConfigError",
        "DumpLoadError",
    ],
    "frontend": [
        "CppcheckFrontend",
    ],
    "checkers": [
        "VectorPessimizationChecker",
        "CheckerRunner",
        "run_addon",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"vector_pessimization: required submodule '{module_rel_name}' "
            f"failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        if not hasattr(mod, name):
            raise AttributeError(
                f"vector_pessimization.{module_rel_name} does not export '{name}'"
            )
        setattr(current_module, name, getattr(mod, name))
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)

del _mod, _names


def list_submodules() -> List[str]:
    """Return the names of all re-exported submodules."""
    return sorted(_CORE_MODULES)


def analyzer_info() -> dict:
    """Metadata about the installed analyzer, for logging inside addons."""
    return {
        "package": __name__,
        "version": __version__,
        "python": sys.version,
        "max_depth": MAX_DEPTH,  # noqa: F821  (bound dynamically above)
        "submodules": list_submodules(),
    }


__all__ += ["list_submodules", "analyzer_info", "__version__"]

if TYPE_CHECKING:
    from .descriptors import (
        SourceLocation as SourceLocation,
        TypeKind as TypeKind,
        ExceptionSpecKind as ExceptionSpecKind,
        ClassifiedSpec as ClassifiedSpec,
        ConstructorDescriptor as ConstructorDescriptor,
        FieldDescriptor as FieldDescriptor,
        BaseDescriptor as BaseDescriptor,
        RecordDescriptor as RecordDescriptor,
        TypeDescriptor as TypeDescriptor,
    )
    from .exception_spec import (
        classify as classify,
        find_move_constructor as find_move_constructor,
    )
    from .triviality import is_trivially_copyable as is_trivially_copyable
    from .move_safety import (
        Verdict as Verdict,
        will_degrade as will_degrade,
        evaluate as evaluate,
    )
    from .causal_chain import (
        MAX_DEPTH as MAX_DEPTH,
        CauseKind as CauseKind,
        CauseStep as CauseStep,
        BlamedEntity as BlamedEntity,
        explain as explain,
    )
    from .site_driver import (
        Finding as Finding,
        on_container_instantiation as on_container_instantiation,
    )
    from .diagnostics import (
        Diagnostic as Diagnostic,
        DiagnosticSeverity as DiagnosticSeverity,
        render_finding as render_finding,
    )
    from .config import AnalyzerConfig as AnalyzerConfig
    from .errors import (
        AnalyzerError as AnalyzerError,
        ConfigError as ConfigError,
        DumpLoadError as DumpLoadError,
    )
    from .frontend import CppcheckFrontend as CppcheckFrontend
    from .checkers import (
        VectorPessimizationChecker as VectorPessimizationChecker,
        CheckerRunner as CheckerRunner,
        run_addon as run_addon,
    )
