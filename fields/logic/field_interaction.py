# fields/logic/field_interaction.py
"""
Drag/resize of a single field as an explicit state machine.

    IDLE --begin_drag--> DRAGGING --pointer up / release--> IDLE
    IDLE --begin_resize--> RESIZING --pointer up / release--> IDLE

The pointer listener is attached to a :class:`PointerEvents` hub when a
gesture begins and detached when it ends; attach/detach are always paired.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Literal, Optional

from documents.exceptions.errors import InteractionError

from ..models.page_geometry import PageDimensions
from ..models.signature_field import SignatureField
from .geometry import MIN_HEIGHT_FRACTION, MIN_WIDTH_FRACTION, apply_drag, apply_resize

PointerEventType = Literal["move", "up"]


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in client pixels."""

    type: PointerEventType
    x: float
    y: float


PointerListener = Callable[[PointerEvent], None]


class PointerEvents:
    """Observer hub standing in for window-level mouse listeners."""

    def __init__(self) -> None:
        self._listeners: List[PointerListener] = []

    def subscribe(self, listener: PointerListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: PointerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, event: PointerEvent) -> None:
        # copy: a listener may unsubscribe itself while handling "up"
        for listener in list(self._listeners):
            listener(event)


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class FieldInteraction:
    """
    Produces geometry updates for one field while a gesture is active.

    ``on_update(field_id, geometry)`` receives the partial geometry
    (``x/y`` while dragging, ``width/height`` while resizing).
    """

    def __init__(self, pointer_events: PointerEvents,
                 on_update: Callable[[str, Dict[str, float]], None], *,
                 min_width: float = MIN_WIDTH_FRACTION,
                 min_height: float = MIN_HEIGHT_FRACTION) -> None:
        self._events = pointer_events
        self._on_update = on_update
        self._min_width = min_width
        self._min_height = min_height

        self._state = InteractionState.IDLE
        self._origin: Optional[SignatureField] = None
        self._start = (0.0, 0.0)
        self._dims: Optional[PageDimensions] = None

    # ------------------------------------------------------------ properties
    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def field_id(self) -> Optional[str]:
        return self._origin.id if self._origin else None

    # ------------------------------------------------------------ gestures
    def begin_drag(self, field: SignatureField, x: float, y: float, dims: PageDimensions) -> None:
        self._begin(InteractionState.DRAGGING, field, x, y, dims)

    def begin_resize(self, field: SignatureField, x: float, y: float, dims: PageDimensions) -> None:
        self._begin(InteractionState.RESIZING, field, x, y, dims)

    def update_dimensions(self, dims: PageDimensions) -> None:
        """The page was re-rendered at a new size mid-gesture."""
        self._dims = dims

    def release(self) -> None:
        if self._state == InteractionState.IDLE:
            return
        self._events.unsubscribe(self._on_pointer)
        self._state = InteractionState.IDLE
        self._origin = None
        self._dims = None

    # ------------------------------------------------------------ internals
    def _begin(self, state: InteractionState, field: SignatureField,
               x: float, y: float, dims: PageDimensions) -> None:
        if self._state != InteractionState.IDLE:
            raise InteractionError(
                f"Cannot start {state.value}: field {self.field_id} is already {self._state.value}."
            )
        self._state = state
        self._origin = field
        self._start = (float(x), float(y))
        self._dims = dims
        self._events.subscribe(self._on_pointer)

    def _on_pointer(self, event: PointerEvent) -> None:
        if event.type == "up":
            self.release()
            return
        if self._origin is None or self._dims is None:
            return

        dx = event.x - self._start[0]
        dy = event.y - self._start[1]
        if self._state == InteractionState.DRAGGING:
            moved = apply_drag(self._origin, dx, dy, self._dims)
            self._on_update(self._origin.id, {"x": moved.x, "y": moved.y})
        elif self._state == InteractionState.RESIZING:
            resized = apply_resize(self._origin, dx, dy, self._dims,
                                   min_width=self._min_width, min_height=self._min_height)
            self._on_update(self._origin.id, {"width": resized.width, "height": resized.height})
