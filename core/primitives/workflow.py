"""
GATE Workflow Primitive — Generic State Machine
=================================================
Frozen state-machine schema shared by every record type that tracks
a lifecycle (deliveries today).

RULES:
- Exactly one initial state
- Terminal states have no outgoing transitions
- Invalid transitions are rejected by the caller — no silent skips

Pure schema: nothing here touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Fields:
        name:            Identifier for this workflow type (e.g. "Delivery")
        initial_state:   Starting state for all new records
        terminal_states: states with no outgoing edge
        transitions:     {from_state → frozenset(allowed_to_states)}
    """
    name: str
    initial_state: str
    terminal_states: FrozenSet[str]
    transitions: Dict[str, FrozenSet[str]]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if self.initial_state not in self.transitions:
            raise ValueError(
                f"initial_state '{self.initial_state}' not in transitions."
            )
        if self.initial_state in self.terminal_states:
            raise ValueError("initial_state cannot be terminal.")
        for state in self.terminal_states:
            if self.transitions.get(state):
                raise ValueError(
                    f"terminal state '{state}' must not have outgoing transitions."
                )
        for targets in self.transitions.values():
            unknown = set(targets) - set(self.transitions)
            if unknown:
                raise ValueError(f"Unknown target states: {sorted(unknown)}.")

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self.transitions)

    def is_valid_transition(self, from_state: str, to_state: str) -> bool:
        return to_state in self.transitions.get(from_state, frozenset())

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def allowed_next_states(self, from_state: str) -> FrozenSet[str]:
        return self.transitions.get(from_state, frozenset())
