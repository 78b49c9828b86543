from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Built from an ordered pipeline where each status may only move to the one
after it:
    from procurement.utils.fsm import TransitionValidator
    ORDER_FSM = TransitionValidator.linear(('pending', 'quoting', 'delivered'))
    target = ORDER_FSM.next_for(current_status)

Raises InvalidTransitionError if the move is not allowed.
"""
from typing import Dict, Iterable, Optional, Set
from procurement.errors import InvalidTransitionError

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    @classmethod
    def linear(cls, pipeline: Iterable[str], field_name: str = 'status') -> 'TransitionValidator':
        stages = list(pipeline)
        graph = {s: ({stages[i + 1]} if i + 1 < len(stages) else set()) for i, s in enumerate(stages)}
        return cls(graph, field_name)

    def is_terminal(self, current: str) -> bool:
        return not self.graph.get(current)

    def assert_can_transition(self, current: str, target: str):
        allowed = self.graph.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def next_for(self, current: str) -> str:
        """Return the single allowed successor of ``current``."""
        if current not in self.graph:
            raise InvalidTransitionError(description=f"Unknown {self.field_name} {current}")
        allowed = self.graph[current]
        if len(allowed) != 1:
            raise InvalidTransitionError(description=f"{self.field_name} {current} has no single next step")
        return next(iter(allowed))

    def peek_next(self, current: str) -> Optional[str]:
        allowed = self.graph.get(current) or set()
        return next(iter(allowed)) if len(allowed) == 1 else None

__all__ = ['TransitionValidator']
