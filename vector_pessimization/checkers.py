"""
vector_pessimization/checkers.py
════════════════════════════════

Checker framework and the ``vector-pessimization`` Cppcheck addon.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │  ┌───────────────────────────────────────────────────┐  │
  │  │          VectorPessimizationChecker               │  │
  │  │  configure        → AnalyzerConfig                │  │
  │  │  collect_evidence → CppcheckFrontend sites        │  │
  │  │  diagnose         → site driver + renderer        │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │                             │                           │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │           SuppressionManager                      │  │
  │  │  // cppcheck-suppress  │  file-level  │  global   │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │                             │                           │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │        Diagnostic output (JSON / gcc / summary)   │  │
  │  └───────────────────────────────────────────────────┘  │
  └─────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — read options, set thresholds
  2. **collect_evidence()** — gather suspicious sites
  3. **diagnose()**         — turn evidence into diagnostics
  4. **report()**           — emit Diagnostics (filtered by suppressions)

License: MIT — same as vector-pessimization.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from vector_pessimization.config import AnalyzerConfig
from vector_pessimization.diagnostics import (
    ERROR_ID,
    Diagnostic,
    DiagnosticSeverity,
    SourceLocation,
    render_finding,
)
from vector_pessimization.errors import AnalyzerError, DumpLoadError
from vector_pessimization.frontend import ContainerSite, CppcheckFrontend
from vector_pessimization.site_driver import on_container_instantiation

_log = logging.getLogger(__name__)

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline ``// cppcheck-suppress errorId`` (as parsed by cppcheck into
         ``cfg.suppressions``)
      2. File-level suppressions (passed programmatically)
      3. Global suppressions (command-line or config)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.load_inline_suppressions(cfg)
    >>> sm.add_global_suppression("vectorPessimization")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # {(file, line)} → set of error_ids suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file pattern → set of error_ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, cfg: Any) -> None:
        for supp in getattr(cfg, "suppressions", None) or []:
            error_id = getattr(supp, "errorId", None)
            file = getattr(supp, "fileName", "") or ""
            line = getattr(supp, "lineNumber", 0) or 0
            if not error_id:
                continue
            if file and line:
                self._inline[(file, int(line))].add(error_id)
            elif file:
                self._file_level[file].add(error_id)
            else:
                self._global.add(error_id)

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        eid = diag.error_id
        if eid in self._global or "*" in self._global:
            return True

        loc = diag.location
        # exact line, or the line above for a preceding-line comment
        for line_offset in (0, 1):
            ids = self._inline.get((loc.file, loc.line - line_offset), set())
            if eid in ids or "*" in ids:
                return True

        for pattern, ids in self._file_level.items():
            if eid not in ids and "*" not in ids:
                continue
            if pattern == loc.file or loc.file.endswith(pattern) \
                    or fnmatch(loc.file, pattern):
                return True
        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker(ABC):
    """
    Abstract base class for all checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """Called before evidence collection.  Default does nothing."""

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Return final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during execution.

    Attributes
    ----------
    cfg          : cppcheckdata.Configuration
    suppressions : SuppressionManager
    options      : user-provided options dict
    stats        : mutable dict for timing / counting statistics
    """
    cfg: Any
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    options: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """Registry of available checkers with enable/disable."""

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}
        self._disabled: Set[str] = set()

    def register(self, checker_cls: Type[Checker]) -> None:
        self._checkers[checker_cls.name] = checker_cls

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_enabled(self) -> List[Type[Checker]]:
        return [
            cls for name, cls in self._checkers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        return self._checkers.get(name)

    @property
    def names(self) -> List[str]:
        return sorted(self._checkers.keys())


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — VECTOR PESSIMIZATION CHECKER
# ═════════════════════════════════════════════════════════════════════════

class VectorPessimizationChecker(Checker):
    """
    Finds resizable containers whose elements will be copied, not moved,
    when the container grows, because the element type's move constructor
    may throw.

    Each finding carries a causal chain down to the field, base class or
    user-written move constructor responsible.
    """

    name: ClassVar[str] = "vector-pessimization"
    description: ClassVar[str] = (
        "Container growth copies elements because moving may throw"
    )
    error_ids: ClassVar[FrozenSet[str]] = frozenset({ERROR_ID})
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.PERFORMANCE

    def __init__(self) -> None:
        super().__init__()
        self.config = AnalyzerConfig()
        self._sites: List[ContainerSite] = []

    def configure(self, ctx: CheckerContext) -> None:
        self.config = AnalyzerConfig.from_options(ctx.options)

    def collect_evidence(self, ctx: CheckerContext) -> None:
        frontend = CppcheckFrontend(ctx.cfg)
        self._sites = list(frontend.container_sites(self.config.containers))
        ctx.stats[f"{self.name}_sites"] = len(self._sites)
        _log.debug("%d container site(s) found", len(self._sites))

    def diagnose(self, ctx: CheckerContext) -> None:
        for site in self._sites:
            on_container_instantiation(
                site.element_type,
                site.location,
                container=site.container,
                renderer=self._render,
                max_depth=self.config.max_depth,
            )

    def _render(self, finding: Any) -> None:
        self._diagnostics.append(render_finding(finding, checker_name=self.name))


_DEFAULT_REGISTRY = CheckerRegistry()
_DEFAULT_REGISTRY.register(VectorPessimizationChecker)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """Aggregate results from running a suite of checkers."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def finding_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.error_id == ERROR_ID)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        lines = [f"Checker run complete: {self.total_count} diagnostics"]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of checkers against a cppcheck Configuration.

    Usage
    -----
    >>> runner = CheckerRunner(options={"max_depth": 2})
    >>> results = runner.run(cfg)
    >>> print(results.summary())
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.registry = registry or _DEFAULT_REGISTRY
        self.suppressions = suppressions or SuppressionManager()
        self.options = options or {}

    def _select(self, checkers: Optional[Sequence[str]]) -> List[Type[Checker]]:
        if checkers is None:
            return self.registry.get_enabled()
        selected = []
        for name in checkers:
            cls = self.registry.get_by_name(name)
            if cls is None:
                _log.warning("unknown checker '%s' ignored", name)
                continue
            selected.append(cls)
        return selected

    def run(
        self,
        cfg: Any,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        results = CheckerRunResults()
        self.suppressions.load_inline_suppressions(cfg)
        ctx = CheckerContext(
            cfg=cfg,
            suppressions=self.suppressions,
            options=self.options,
        )

        for cls in self._select(checkers):
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except AnalyzerError as exc:
                _log.error("checker '%s' failed: %s", checker_name, exc)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name] = diags
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms
            results.stats.update(ctx.stats)

        return results

    def run_all_configurations(
        self,
        data: Any,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """Run checkers across all configurations in a CppcheckData dump."""
        combined = CheckerRunResults()
        for cfg in getattr(data, "configurations", None) or []:
            partial = self.run(cfg, checkers=checkers)
            combined.diagnostics.extend(partial.diagnostics)
            for name, diags in partial.diagnostics_by_checker.items():
                combined.diagnostics_by_checker[name].extend(diags)
            for key, val in partial.stats.items():
                combined.stats[key] = combined.stats.get(key, 0) + val
            for name in partial.checker_names:
                if name not in combined.checker_names:
                    combined.checker_names.append(name)
        return combined


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 — ADDON ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

DumpLoader = Callable[[str], Any]


def load_dump(dump_file: str) -> Any:
    """Parse *dump_file* with ``cppcheckdata.parsedump``."""
    try:
        from cppcheckdata import parsedump  # type: ignore[import-untyped]
    except ImportError as exc:
        raise DumpLoadError(dump_file, "cppcheckdata module not found") from exc
    try:
        return parsedump(dump_file)
    except (OSError, ValueError, ET.ParseError) as exc:
        raise DumpLoadError(dump_file, str(exc)) from exc


def run_addon(
    dump_file: str,
    output: str = "json",
    suppress: Optional[Sequence[str]] = None,
    options: Optional[Dict[str, Any]] = None,
    loader: DumpLoader = load_dump,
    stream: Any = None,
) -> int:
    """
    Run the checker suite as a cppcheck addon.

    Returns the exit code: 0 = nothing found, 1 = findings, 2 = the dump
    could not be loaded or the options are invalid.
    """
    stream = stream or sys.stdout
    try:
        AnalyzerConfig.from_options(options)
        data = loader(dump_file)
    except AnalyzerError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    sm = SuppressionManager()
    for eid in suppress or ():
        sm.add_global_suppression(eid)

    runner = CheckerRunner(suppressions=sm, options=options)
    results = runner.run_all_configurations(data)

    if output == "json":
        for diag in results.diagnostics:
            stream.write(diag.to_json_str() + "\n")
    elif output == "gcc":
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
    else:
        stream.write(results.summary() + "\n")

    return EXIT_FINDINGS if results.finding_count else EXIT_OK


def _configure_logging(verbosity: int) -> None:
    """0 → WARNING, 1 → INFO, 2+ → DEBUG on the package logger."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("vector_pessimization")
    root.setLevel(level)
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report containers that copy instead of move on growth",
        prog="vector-pessimization",
    )
    parser.add_argument("dump_file", nargs="?", help="Path to .dump file")
    parser.add_argument(
        "--output", choices=["json", "gcc", "summary"],
        default="json", help="Output format",
    )
    parser.add_argument(
        "--max-depth", type=int, default=None,
        help="Maximum causal chain length (default: 3)",
    )
    parser.add_argument(
        "--container", action="append", default=None, metavar="NAME",
        help="Qualified container name to check (repeatable; "
             "default: std::vector)",
    )
    parser.add_argument(
        "--suppress", nargs="*", default=None,
        help="Error IDs to suppress",
    )
    parser.add_argument(
        "--list-checkers", action="store_true",
        help="List available checkers and exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    loader: DumpLoader = load_dump,
) -> int:
    """CLI entry point for ``python -m vector_pessimization``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_checkers:
        for name in _DEFAULT_REGISTRY.names:
            cls = _DEFAULT_REGISTRY.get_by_name(name)
            desc = cls.description if cls else ""
            ids = ", ".join(sorted(cls.error_ids)) if cls else ""
            print(f"  {name:25s} {desc}")
            print(f"  {'':25s} IDs: {ids}")
        return EXIT_OK

    if not args.dump_file:
        parser.error("the dump_file argument is required")

    options: Dict[str, Any] = {}
    if args.max_depth is not None:
        options["max_depth"] = args.max_depth
    if args.container:
        options["containers"] = args.container

    return run_addon(
        dump_file=args.dump_file,
        output=args.output,
        suppress=args.suppress,
        options=options,
        loader=loader,
    )


__all__ = [
    "SuppressionManager",
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "VectorPessimizationChecker",
    "CheckerRunResults",
    "CheckerRunner",
    "load_dump",
    "run_addon",
    "build_parser",
    "main",
]
