from __future__ import annotations

import logging
from typing import Callable, Literal, Optional

from .models import CandidateMember

DragState = Literal["idle", "dragging", "hovering", "dropped"]

logger = logging.getLogger(__name__)


class DragAssignCoordinator:
    """Turns drag and click gestures on roster cards into add intents.

    Only one drag session exists at a time. Starting a new drag while one is
    active cancels the previous session without touching the selection. The
    dragged member is captured at drag start; members are frozen, so a roster
    refresh during the drag cannot alter what gets dropped.
    """

    def __init__(self, on_add: Callable[[CandidateMember], object]) -> None:
        self._on_add = on_add
        self._state: DragState = "idle"
        self._member: Optional[CandidateMember] = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def dragged_member(self) -> Optional[CandidateMember]:
        return self._member

    @property
    def is_active(self) -> bool:
        return self._state in ("dragging", "hovering")

    def start_drag(self, member: CandidateMember) -> None:
        if self.is_active:
            logger.debug("drag of %s superseded by %s", self._member.id, member.id)
            self.cancel()
        self._member = member
        self._state = "dragging"

    def enter_target(self) -> None:
        if self._state == "dragging":
            self._state = "hovering"

    def leave_target(self) -> None:
        if self._state == "hovering":
            self._state = "dragging"

    def release(self, over_target: Optional[bool] = None) -> bool:
        """Finish the drag. Returns True when the member was handed to the add callback."""
        if not self.is_active:
            return False
        if over_target is None:
            over_target = self._state == "hovering"
        member = self._member
        self._member = None
        if not over_target:
            self._state = "idle"
            return False
        self._state = "dropped"
        self._on_add(member)
        return True

    def cancel(self) -> None:
        self._member = None
        self._state = "idle"

    def click(self, member: CandidateMember) -> None:
        self._on_add(member)
