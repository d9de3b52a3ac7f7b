"""
Undo/redo history for the editor.

Keeps a bounded list of tree values. Trees are never mutated in place, so a
snapshot is just a reference to the list returned by the mutator.
"""

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_LIMIT = 50


class EditHistory(Generic[T]):
    """Linear history with a cursor; pushing after an undo discards the redo tail."""

    def __init__(self, initial: T, limit: int = DEFAULT_LIMIT):
        self._states: List[T] = [initial]
        self._index = 0
        self.limit = max(1, limit)

    @property
    def current(self) -> T:
        return self._states[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def push(self, state: T) -> T:
        # Unchanged trees come back as the same object; don't record a step for them
        if state is self.current:
            return state
        del self._states[self._index + 1:]
        self._states.append(state)
        if len(self._states) > self.limit:
            del self._states[0]
        self._index = len(self._states) - 1
        return state

    def undo(self) -> Optional[T]:
        if not self.can_undo:
            return None
        self._index -= 1
        return self.current

    def redo(self) -> Optional[T]:
        if not self.can_redo:
            return None
        self._index += 1
        return self.current

    def reset(self, state: T) -> None:
        self._states = [state]
        self._index = 0

    def __len__(self) -> int:
        return len(self._states)
