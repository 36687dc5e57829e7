"""
GATE Core Primitives — Reusable Building Blocks
=================================================
Pure Python, immutable, deterministic.

Primitives:
    workflow — state-machine schema for lifecycle records
"""

from core.primitives.workflow import WorkflowDefinition

__all__ = [
    "WorkflowDefinition",
]
