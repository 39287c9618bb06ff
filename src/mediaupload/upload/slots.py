"""Result slots: one per input file, indexed by original position.

Each slot tracks the lifecycle of a single file and enforces valid
transitions.  :class:`ResultSlots` holds the ordered collection and
produces the compacted list handed to ``on_file_change``.
"""

from __future__ import annotations

from enum import Enum

from mediaupload.models import MediaItem, MediaRecord, PlaceholderMedia


class SlotState(str, Enum):
    """Lifecycle states of a result slot."""

    UNSET = "unset"
    """Never populated: the file was excluded or rejected by a gate."""

    PLACEHOLDER = "placeholder"
    """Holds a temporary preview while the save is in flight."""

    SAVED = "saved"
    """Holds the server's media record."""

    FAILED = "failed"
    """The save failed; the slot is empty again."""


class ResultSlot:
    """Finite state machine for a single file's slot.

    Valid transitions::

        UNSET       -> PLACEHOLDER
        PLACEHOLDER -> SAVED | FAILED
        SAVED       -> (terminal)
        FAILED      -> (terminal)
    """

    VALID_TRANSITIONS: dict[SlotState, set[SlotState]] = {
        SlotState.UNSET: {SlotState.PLACEHOLDER},
        SlotState.PLACEHOLDER: {SlotState.SAVED, SlotState.FAILED},
        SlotState.SAVED: set(),
        SlotState.FAILED: set(),
    }

    __slots__ = ("index", "state", "value")

    def __init__(self, index: int) -> None:
        self.index: int = index
        self.state: SlotState = SlotState.UNSET
        self.value: MediaItem | None = None

    def __repr__(self) -> str:
        return f"ResultSlot(index={self.index}, state={self.state.value}, value={self.value!r})"

    def _transition(self, new_state: SlotState, value: MediaItem | None) -> None:
        allowed = self.VALID_TRANSITIONS[self.state]
        if new_state not in allowed:
            raise ValueError(
                f"Invalid slot transition: {self.state.value} -> {new_state.value} "
                f"for slot {self.index}"
            )
        self.state = new_state
        self.value = value

    def set_placeholder(self, placeholder: PlaceholderMedia) -> None:
        self._transition(SlotState.PLACEHOLDER, placeholder)

    def save(self, record: MediaRecord) -> None:
        self._transition(SlotState.SAVED, record)

    def fail(self) -> None:
        self._transition(SlotState.FAILED, None)

    @property
    def is_visible(self) -> bool:
        """Whether the slot contributes an entry to the compacted list."""
        return self.value is not None


class ResultSlots:
    """Fixed-size ordered collection of :class:`ResultSlot`."""

    def __init__(self, size: int) -> None:
        self._slots = [ResultSlot(i) for i in range(size)]

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> ResultSlot:
        return self._slots[index]

    def compacted(self) -> list[MediaItem]:
        """Values of every populated slot, in index order.

        A new list is returned on every call so callers may keep it.
        """
        return [slot.value for slot in self._slots if slot.value is not None]
