"""
vector_pessimization/site_driver.py
═══════════════════════════════════

Entry point per container instantiation site.

    on_container_instantiation(T, site)
        │
        ├─ will_degrade(T)?  no → None
        │
        └─ yes → Finding(site, T, explain(T, depth=1)) ──► renderer
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from vector_pessimization.causal_chain import MAX_DEPTH, Chain, explain
from vector_pessimization.descriptors import SourceLocation, TypeDescriptor
from vector_pessimization.move_safety import will_degrade

_log = logging.getLogger(__name__)

DEFAULT_CONTAINER = "std::vector"


@dataclass(frozen=True)
class Finding:
    """Primary finding for one degrading site plus its causal chain."""
    container: str
    element_type: TypeDescriptor
    site: SourceLocation
    chain: Chain = ()

    @property
    def container_spelling(self) -> str:
        """``vector<T>`` — the container's unqualified name with its argument."""
        short = self.container.rsplit("::", 1)[-1]
        return f"{short}<{self.element_type.name}>"


Renderer = Callable[[Finding], object]


def on_container_instantiation(
    element_type: TypeDescriptor,
    site: SourceLocation,
    container: str = DEFAULT_CONTAINER,
    renderer: Optional[Renderer] = None,
    max_depth: int = MAX_DEPTH,
) -> Optional[Finding]:
    """
    Analyse one instantiation of *container* with *element_type*.

    Returns the :class:`Finding` (also handed to *renderer*, chain order
    untouched) or ``None`` when elements will be moved.
    """
    if not will_degrade(element_type):
        return None
    finding = Finding(
        container=container,
        element_type=element_type,
        site=site,
        chain=explain(element_type, 1, max_depth),
    )
    _log.debug("%s at %s: %d cause step(s)", finding.container_spelling,
               site, len(finding.chain))
    if renderer is not None:
        renderer(finding)
    return finding


__all__ = [
    "DEFAULT_CONTAINER",
    "Finding",
    "Renderer",
    "on_container_instantiation",
]
