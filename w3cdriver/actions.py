"""
Input action sequences (POST /session/{id}/actions).

An action sequence is a list of input sources (pointer, key, wheel, none),
each holding an ordered list of actions. The remote end dispatches the Nth
action of every source together as one "tick", so all sources are padded
with zero-length pauses to the same length before they are encoded.

Two layers are provided:

- Low-level append operations (`add_pointer_move`, `add_key_down`, ...) that
  append exactly one action to one named source, creating the source on first
  use. Source order in the encoded body is insertion order.
- Intent helpers (`click`, `send_keys`, `drag_and_drop`, ...) that append
  one tick at a time: the action goes to its device and every other source
  gets a pause, so intents run in the order they were written.

Usage:
    chain = session.action_chain()
    chain.click(field).key_down(Keys.SHIFT).send_keys("abc").key_up(Keys.SHIFT)
    await chain.perform()  # sends one PerformActions command, then clears

`build()` never resets the builder; `perform()` always does, so a reused
builder cannot leak stale actions into the next command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Iterator, Literal, Union

from .errors import InvalidCommandError
from .models import ElementRef

if TYPE_CHECKING:
    from .element import WebElement
    from .session import WebDriverSession


SourceKind = Literal["pointer", "key", "wheel", "none"]
PointerType = Literal["mouse", "pen", "touch"]
Origin = Union[Literal["viewport", "pointer"], ElementRef, "WebElement"]

DEFAULT_POINTER = "mouse"
DEFAULT_KEYBOARD = "keyboard"
DEFAULT_WHEEL = "wheel"

_DEFAULT_KINDS: dict[str, SourceKind] = {
    DEFAULT_POINTER: "pointer",
    DEFAULT_KEYBOARD: "key",
    DEFAULT_WHEEL: "wheel",
}


class MouseButton(IntEnum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2
    BACK = 3
    FORWARD = 4


def _duration(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise InvalidCommandError(f"Action duration must be a non-negative number of ms, got {value!r}")
    return int(value)


def _coord(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCommandError(f"{name} must be a number, got {value!r}")
    return int(round(value))


def _key(value: Any) -> str:
    if not isinstance(value, str) or len(value) != 1:
        raise InvalidCommandError(f"Key actions take a single character, got {value!r}")
    return value


def _origin_ref(origin: Any) -> ElementRef | None:
    if isinstance(origin, ElementRef):
        return origin
    ref = getattr(origin, "ref", None)
    return ref if isinstance(ref, ElementRef) else None


def _origin_to_wire(origin: Any) -> Any:
    if origin in ("viewport", "pointer"):
        return origin
    ref = _origin_ref(origin)
    if ref is None:
        raise InvalidCommandError(f"Invalid action origin: {origin!r}")
    return ref.to_wire()


# ========== Actions ==========


@dataclass(frozen=True)
class Pause:
    duration: int = 0

    def to_wire(self) -> dict[str, Any]:
        return {"type": "pause", "duration": self.duration}


@dataclass(frozen=True)
class KeyDown:
    value: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "keyDown", "value": self.value}


@dataclass(frozen=True)
class KeyUp:
    value: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "keyUp", "value": self.value}


@dataclass(frozen=True)
class PointerMove:
    x: int = 0
    y: int = 0
    duration: int = 0
    origin: Any = "viewport"

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "pointerMove",
            "duration": self.duration,
            "x": self.x,
            "y": self.y,
            "origin": _origin_to_wire(self.origin),
        }


@dataclass(frozen=True)
class PointerDown:
    button: int = MouseButton.LEFT

    def to_wire(self) -> dict[str, Any]:
        return {"type": "pointerDown", "button": int(self.button)}


@dataclass(frozen=True)
class PointerUp:
    button: int = MouseButton.LEFT

    def to_wire(self) -> dict[str, Any]:
        return {"type": "pointerUp", "button": int(self.button)}


@dataclass(frozen=True)
class Scroll:
    x: int = 0
    y: int = 0
    delta_x: int = 0
    delta_y: int = 0
    duration: int = 0
    origin: Any = "viewport"

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "scroll",
            "x": self.x,
            "y": self.y,
            "deltaX": self.delta_x,
            "deltaY": self.delta_y,
            "duration": self.duration,
            "origin": _origin_to_wire(self.origin),
        }


Action = Union[Pause, KeyDown, KeyUp, PointerMove, PointerDown, PointerUp, Scroll]

_ALLOWED: dict[str, tuple[type, ...]] = {
    "pointer": (Pause, PointerMove, PointerDown, PointerUp),
    "key": (Pause, KeyDown, KeyUp),
    "wheel": (Pause, Scroll),
    "none": (Pause,),
}


# ========== Sources / sequence ==========


@dataclass
class InputSource:
    kind: SourceKind
    id: str
    actions: list[Action] = field(default_factory=list)
    pointer_type: PointerType = "mouse"

    def append(self, action: Action) -> None:
        if not isinstance(action, _ALLOWED[self.kind]):
            raise InvalidCommandError(
                f"{type(action).__name__} cannot be dispatched by {self.kind} source {self.id!r}"
            )
        self.actions.append(action)

    def to_wire(self, length: int | None = None) -> dict[str, Any]:
        actions = list(self.actions)
        if length is not None and len(actions) < length:
            actions.extend(Pause(0) for _ in range(length - len(actions)))
        data: dict[str, Any] = {"type": self.kind, "id": self.id}
        if self.kind == "pointer":
            data["parameters"] = {"pointerType": self.pointer_type}
        data["actions"] = [a.to_wire() for a in actions]
        return data


@dataclass
class ActionSequence:
    """Ordered input sources (insertion order) for one PerformActions command."""

    sources: list[InputSource] = field(default_factory=list)

    def get(self, source_id: str) -> InputSource | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None

    def source(self, source_id: str, kind: SourceKind, pointer_type: PointerType = "mouse") -> InputSource:
        existing = self.get(source_id)
        if existing is None:
            existing = InputSource(kind=kind, id=source_id, pointer_type=pointer_type)
            self.sources.append(existing)
        elif existing.kind == "none" and kind != "none":
            # A source holding only pauses takes the kind of its first device action.
            existing.kind = kind
            existing.pointer_type = pointer_type
        elif existing.kind != kind:
            raise InvalidCommandError(
                f"Input source {source_id!r} is a {existing.kind} source, not {kind}"
            )
        return existing

    @property
    def tick_count(self) -> int:
        return max((len(s.actions) for s in self.sources), default=0)

    def element_refs(self) -> Iterator[ElementRef]:
        for source in self.sources:
            for action in source.actions:
                ref = _origin_ref(getattr(action, "origin", None))
                if ref is not None:
                    yield ref

    def to_wire(self) -> dict[str, Any]:
        length = self.tick_count
        return {"actions": [s.to_wire(length) for s in self.sources]}

    def copy(self) -> ActionSequence:
        return ActionSequence(
            sources=[
                InputSource(kind=s.kind, id=s.id, actions=list(s.actions), pointer_type=s.pointer_type)
                for s in self.sources
            ]
        )


class ActionChain:
    """
    Builder for one input action sequence.

    Args:
        session: Session used by `perform()` (optional for pure building)
        pointer_type: Pointer type of the default pointer source
        duration_ms: Duration of pointer moves and scrolls emitted by the intent helpers
    """

    def __init__(
        self,
        session: WebDriverSession | None = None,
        *,
        pointer_type: PointerType = "mouse",
        duration_ms: int = 250,
    ) -> None:
        self._session = session
        self._pointer_type = pointer_type
        self._duration_ms = _duration(duration_ms)
        self._sequence = ActionSequence()

    @property
    def sequence(self) -> ActionSequence:
        return self._sequence

    def __len__(self) -> int:
        return self._sequence.tick_count

    # ----- low-level appends -----

    def _append(self, source_id: str, kind: SourceKind, action: Action) -> ActionChain:
        pointer_type = self._pointer_type if source_id == DEFAULT_POINTER else "mouse"
        self._sequence.source(source_id, kind, pointer_type).append(action)
        return self

    def add_pointer_move(
        self,
        x: float = 0,
        y: float = 0,
        *,
        duration: int = 0,
        origin: Origin = "viewport",
        source: str = DEFAULT_POINTER,
    ) -> ActionChain:
        _origin_to_wire(origin)
        move = PointerMove(_coord("x", x), _coord("y", y), _duration(duration), origin)
        return self._append(source, "pointer", move)

    def add_pointer_down(self, button: int = MouseButton.LEFT, *, source: str = DEFAULT_POINTER) -> ActionChain:
        return self._append(source, "pointer", PointerDown(int(button)))

    def add_pointer_up(self, button: int = MouseButton.LEFT, *, source: str = DEFAULT_POINTER) -> ActionChain:
        return self._append(source, "pointer", PointerUp(int(button)))

    def add_key_down(self, value: str, *, source: str = DEFAULT_KEYBOARD) -> ActionChain:
        return self._append(source, "key", KeyDown(_key(value)))

    def add_key_up(self, value: str, *, source: str = DEFAULT_KEYBOARD) -> ActionChain:
        return self._append(source, "key", KeyUp(_key(value)))

    def add_scroll(
        self,
        x: float = 0,
        y: float = 0,
        delta_x: float = 0,
        delta_y: float = 0,
        *,
        duration: int = 0,
        origin: Origin = "viewport",
        source: str = DEFAULT_WHEEL,
    ) -> ActionChain:
        _origin_to_wire(origin)
        scroll = Scroll(
            _coord("x", x),
            _coord("y", y),
            _coord("delta_x", delta_x),
            _coord("delta_y", delta_y),
            _duration(duration),
            origin,
        )
        return self._append(source, "wheel", scroll)

    def add_pause(
        self, duration: int = 0, *, source: str = "none", kind: SourceKind | None = None
    ) -> ActionChain:
        existing = self._sequence.get(source)
        if existing is not None:
            kind = existing.kind
        elif kind is None:
            kind = _DEFAULT_KINDS.get(source, "none")
        return self._append(source, kind, Pause(_duration(duration)))

    # ----- build / reset / perform -----

    def build(self) -> dict[str, Any]:
        """Encode the PerformActions body, padding sources to equal length. Does not reset."""
        return self._sequence.to_wire()

    def clear(self) -> None:
        self._sequence = ActionSequence()

    def take(self) -> ActionSequence:
        """Return the built sequence and leave the builder empty."""
        sequence, self._sequence = self._sequence, ActionSequence()
        return sequence

    async def perform(self) -> None:
        """Send the sequence as one PerformActions command, then clear the builder."""
        if self._session is None:
            raise InvalidCommandError("ActionChain.perform() needs a session")
        await self._session.perform_actions(self)

    # ----- intent helpers (one tick each) -----

    def _tick(self, source_id: str, kind: SourceKind, action: Action) -> ActionChain:
        target = self._sequence.source(
            source_id, kind, self._pointer_type if source_id == DEFAULT_POINTER else "mouse"
        )
        # Bring every source to the same tick before appending so intents stay ordered.
        length = self._sequence.tick_count
        for source in self._sequence.sources:
            while len(source.actions) < length:
                source.actions.append(Pause(0))
        target.append(action)
        for source in self._sequence.sources:
            if source is not target:
                source.actions.append(Pause(0))
        return self

    def pause(self, seconds: float) -> ActionChain:
        duration = _duration(seconds * 1000)
        if not self._sequence.sources:
            return self._tick("none", "none", Pause(duration))
        target = self._sequence.sources[0]
        return self._tick(target.id, target.kind, Pause(duration))

    def move_to_element(self, element: Origin, x_offset: float = 0, y_offset: float = 0) -> ActionChain:
        _origin_to_wire(element)
        move = PointerMove(_coord("x_offset", x_offset), _coord("y_offset", y_offset), self._duration_ms, element)
        return self._tick(DEFAULT_POINTER, "pointer", move)

    def move_by_offset(self, x_offset: float, y_offset: float) -> ActionChain:
        move = PointerMove(_coord("x_offset", x_offset), _coord("y_offset", y_offset), self._duration_ms, "pointer")
        return self._tick(DEFAULT_POINTER, "pointer", move)

    def move_to_location(self, x: float, y: float) -> ActionChain:
        move = PointerMove(_coord("x", x), _coord("y", y), self._duration_ms, "viewport")
        return self._tick(DEFAULT_POINTER, "pointer", move)

    def click_and_hold(self, element: Origin | None = None, button: int = MouseButton.LEFT) -> ActionChain:
        if element is not None:
            self.move_to_element(element)
        return self._tick(DEFAULT_POINTER, "pointer", PointerDown(int(button)))

    def release(self, element: Origin | None = None, button: int = MouseButton.LEFT) -> ActionChain:
        if element is not None:
            self.move_to_element(element)
        return self._tick(DEFAULT_POINTER, "pointer", PointerUp(int(button)))

    def click(self, element: Origin | None = None, button: int = MouseButton.LEFT) -> ActionChain:
        self.click_and_hold(element, button)
        return self._tick(DEFAULT_POINTER, "pointer", PointerUp(int(button)))

    def double_click(self, element: Origin | None = None) -> ActionChain:
        self.click(element)
        return self.click()

    def context_click(self, element: Origin | None = None) -> ActionChain:
        return self.click(element, MouseButton.RIGHT)

    def drag_and_drop(self, source: Origin, target: Origin) -> ActionChain:
        self.click_and_hold(source)
        self.move_to_element(target)
        return self._tick(DEFAULT_POINTER, "pointer", PointerUp(MouseButton.LEFT))

    def drag_and_drop_by_offset(self, source: Origin, x_offset: float, y_offset: float) -> ActionChain:
        self.click_and_hold(source)
        self.move_by_offset(x_offset, y_offset)
        return self._tick(DEFAULT_POINTER, "pointer", PointerUp(MouseButton.LEFT))

    def key_down(self, value: str, element: Origin | None = None) -> ActionChain:
        if element is not None:
            self.click(element)
        return self._tick(DEFAULT_KEYBOARD, "key", KeyDown(_key(value)))

    def key_up(self, value: str, element: Origin | None = None) -> ActionChain:
        if element is not None:
            self.click(element)
        return self._tick(DEFAULT_KEYBOARD, "key", KeyUp(_key(value)))

    def send_keys(self, *keys: str) -> ActionChain:
        """Press and release every character of `keys` in order."""
        for key in keys:
            for ch in str(key):
                self._tick(DEFAULT_KEYBOARD, "key", KeyDown(ch))
                self._tick(DEFAULT_KEYBOARD, "key", KeyUp(ch))
        return self

    def send_keys_to_element(self, element: Origin, *keys: str) -> ActionChain:
        self.click(element)
        return self.send_keys(*keys)

    def scroll_by_amount(self, delta_x: float, delta_y: float) -> ActionChain:
        scroll = Scroll(0, 0, _coord("delta_x", delta_x), _coord("delta_y", delta_y), self._duration_ms, "viewport")
        return self._tick(DEFAULT_WHEEL, "wheel", scroll)

    def scroll_from_element(
        self,
        element: Origin,
        delta_x: float,
        delta_y: float,
        x_offset: float = 0,
        y_offset: float = 0,
    ) -> ActionChain:
        _origin_to_wire(element)
        scroll = Scroll(
            _coord("x_offset", x_offset),
            _coord("y_offset", y_offset),
            _coord("delta_x", delta_x),
            _coord("delta_y", delta_y),
            self._duration_ms,
            element,
        )
        return self._tick(DEFAULT_WHEEL, "wheel", scroll)
