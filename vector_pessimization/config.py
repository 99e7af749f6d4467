"""
vector_pessimization/config.py
══════════════════════════════

Options for the vector-pessimization checker.

Options arrive as a plain mapping (``CheckerRunner(options=...)`` or the
CLI) and are validated once, up front:

    max_depth  : int ≥ 1       — causal chain length cap (default 3)
    containers : [str, ...]    — qualified names of resizable contiguous
                                 containers (default ``["std::vector"]``)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from vector_pessimization.causal_chain import MAX_DEPTH
from vector_pessimization.errors import ConfigError
from vector_pessimization.site_driver import DEFAULT_CONTAINER


@dataclass(frozen=True)
class AnalyzerConfig:
    max_depth: int = MAX_DEPTH
    containers: Tuple[str, ...] = (DEFAULT_CONTAINER,)

    @classmethod
    def from_options(
        cls, options: Optional[Mapping[str, Any]] = None
    ) -> AnalyzerConfig:
        options = options or {}

        max_depth = options.get("max_depth", MAX_DEPTH)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int):
            raise ConfigError("max_depth", max_depth, "expected an integer")
        if max_depth < 1:
            raise ConfigError("max_depth", max_depth, "must be at least 1")

        containers = options.get("containers", (DEFAULT_CONTAINER,))
        if isinstance(containers, str):
            containers = (containers,)
        containers = tuple(
            c.strip().lstrip(":") for c in containers if c and c.strip()
        )
        if not containers:
            raise ConfigError("containers", containers,
                              "at least one container name is required")

        return cls(max_depth=max_depth, containers=containers)


__all__ = ["AnalyzerConfig"]
