"""Interaction modes and the transitions between them.

The machine only decides which state a gesture leads to. Effects such as
expansion, classification and viewport locking are carried out by the
session that owns it.
"""

from dataclasses import dataclass
from enum import Enum

from influence_map.config import settings
from influence_map.explorer.semantic_zoom import clamp_level


class Mode(str, Enum):
    IDLE = "idle"
    FOCUSED = "focused"
    PATH_WAITING_START = "path_waiting_start"
    PATH_WAITING_END = "path_waiting_end"


@dataclass(frozen=True)
class Idle:
    mode = Mode.IDLE


@dataclass(frozen=True)
class Focused:
    focus_id: str
    level: float
    mode = Mode.FOCUSED


@dataclass(frozen=True)
class PathWaitingStart:
    mode = Mode.PATH_WAITING_START


@dataclass(frozen=True)
class PathWaitingEnd:
    start_id: str
    mode = Mode.PATH_WAITING_END


State = Idle | Focused | PathWaitingStart | PathWaitingEnd


class InteractionStateMachine:
    """Current interaction mode.

    Gesture methods return the new state, or None when the gesture does not
    apply in the current state (the state is then unchanged).
    """

    def __init__(self, default_level: float | None = None) -> None:
        self.default_level = (
            settings.default_filter_level if default_level is None else default_level
        )
        self.state: State = Idle()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def focus_id(self) -> str | None:
        return self.state.focus_id if isinstance(self.state, Focused) else None

    @property
    def level(self) -> float | None:
        return self.state.level if isinstance(self.state, Focused) else None

    @property
    def in_path_mode(self) -> bool:
        return isinstance(self.state, PathWaitingStart | PathWaitingEnd)

    def select(self, node_id: str) -> State | None:
        state = self.state
        if isinstance(state, Idle | Focused):
            new_state: State = Focused(node_id, self.default_level)
        elif isinstance(state, PathWaitingStart):
            new_state = PathWaitingEnd(node_id)
        elif state.start_id == node_id:
            # No self path
            return None
        else:
            new_state = PathWaitingStart()
        self.state = new_state
        return new_state

    def dismiss(self) -> State:
        self.state = Idle()
        return self.state

    def adjust_level(self, delta: float) -> Focused | None:
        """Move the filter level by ``delta``. None if unfocused or already at the limit."""
        state = self.state
        if not isinstance(state, Focused):
            return None
        level = clamp_level(state.level + delta)
        if level == state.level:
            return None
        self.state = Focused(state.focus_id, level)
        return self.state

    def toggle_path(self) -> State:
        if self.in_path_mode:
            self.state = Idle()
        else:
            self.state = PathWaitingStart()
        return self.state

    def reset(self) -> None:
        self.state = Idle()
