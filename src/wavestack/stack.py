"""WaveStack -- an ordered, mutable stack of buffers flattened lazily into one."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Hashable, Iterator, Union

from wavestack.buffers import MixFunction, MixOperation, MixSpec, SampleBuffer, _mix_raw
from wavestack.errors import EntryNotFoundError, InvalidEntryError, StackCycleError
from wavestack.provider import BufferProvider, RawBuffer

_LOGGER = logging.getLogger("wavestack.stack")

EntryRef = Union[int, SampleBuffer]


@dataclass(frozen=True)
class StackEntry:
    buffer: SampleBuffer
    muted: bool = False


class WaveStack(SampleBuffer):
    """Composite buffer that remixes its entries on read.

    Any structural change (add, replace, remove, mute toggle) only marks the
    stack dirty. The next read of :attr:`buffer` zeroes the stack's storage and
    mixes every unmuted entry into it, in stack order, using the stack's own
    mix operation. Nested stacks are regenerated first when they are read as
    entries, and a change inside a nested stack also makes its parents dirty.

    Not thread-safe: callers sharing a stack across threads must serialise
    access to it.
    """

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        *,
        channels: int = 1,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        super().__init__(provider, duration, channels=channels, mix_operation=mix_operation)
        self._entries: list[StackEntry] = []
        self._dirty = False
        self._mutations = 0
        self._mixed_revisions: tuple[Hashable, ...] = ()
        self._regenerating = False
        self.regeneration_count = 0

    # -- state --------------------------------------------------------------

    @property
    def is_dirty(self) -> bool:
        return self._dirty or self._entry_revisions() != self._mixed_revisions

    @property
    def revision(self) -> Hashable:
        return (self._mutations, self._entry_revisions())

    @property
    def buffer(self) -> RawBuffer:
        if self._regenerating:
            raise StackCycleError(f"{self!r} was read while it was being regenerated")
        if self.is_dirty:
            self._generate_buffer_data()
        return self._buffer

    def _entry_revisions(self) -> tuple[Hashable, ...]:
        return tuple(entry.buffer.revision for entry in self._entries)

    def _mark_dirty(self, action: str) -> None:
        self._dirty = True
        self._mutations += 1
        _LOGGER.debug("%r: %s, %d entries", self, action, len(self._entries))

    def _generate_buffer_data(self) -> None:
        self._regenerating = True
        try:
            self._clear_sample_buffer()
            for entry in self._entries:
                if entry.muted:
                    continue
                entry.buffer.mix_into(self)
        finally:
            self._regenerating = False
        self._mixed_revisions = self._entry_revisions()
        self._dirty = False
        self.regeneration_count += 1
        _LOGGER.debug("%r: regenerated (%d total)", self, self.regeneration_count)

    def _receive(self, source: RawBuffer, combine: MixFunction) -> None:
        """Mix *source* on top of the current contents.

        A dirty stack is regenerated first. The mixed-in samples last until the
        next regeneration, which rebuilds the stack from its entries alone.
        """
        if self._regenerating:
            _mix_raw(source, self._buffer, combine)
            return
        _mix_raw(source, self.buffer, combine)
        self._mutations += 1
        _LOGGER.debug("%r: external mix applied", self)

    # -- lookup -------------------------------------------------------------

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[StackEntry, ...]:
        return tuple(self._entries)

    def get_entry(self, index: int) -> SampleBuffer:
        return self._entries[self._check_index(index)].buffer

    def index_of(self, buffer: SampleBuffer) -> int:
        """Position of *buffer* (compared by identity), or -1 if absent."""
        for i, entry in enumerate(self._entries):
            if entry.buffer is buffer:
                return i
        return -1

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SampleBuffer]:
        return iter([entry.buffer for entry in self._entries])

    def __contains__(self, buffer: object) -> bool:
        return any(entry.buffer is buffer for entry in self._entries)

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"Stack index {index} out of range ({len(self._entries)} entries)")
        return index

    def _resolve(self, ref: EntryRef) -> int:
        """Index for *ref*; -1 when a buffer reference is not in the stack."""
        if isinstance(ref, SampleBuffer):
            return self.index_of(ref)
        return self._check_index(ref)

    # -- mutation -----------------------------------------------------------

    def _check_insertable(self, buffer: object) -> None:
        if not isinstance(buffer, SampleBuffer):
            raise InvalidEntryError(
                f"Stack entries must be SampleBuffer instances, got {type(buffer).__name__}"
            )
        if buffer is self or (isinstance(buffer, WaveStack) and buffer._reaches(self)):
            raise StackCycleError(f"Adding {buffer!r} would make {self!r} contain itself")

    def _reaches(self, target: WaveStack) -> bool:
        for entry in self._entries:
            if entry.buffer is target:
                return True
            if isinstance(entry.buffer, WaveStack) and entry.buffer._reaches(target):
                return True
        return False

    def add_entry(self, buffer: SampleBuffer, index: int | None = None) -> int:
        """Insert *buffer* at *index* (default: on top) and return its position."""
        self._check_insertable(buffer)
        if index is None:
            index = len(self._entries)
        elif not 0 <= index <= len(self._entries):
            raise IndexError(
                f"Insert index {index} out of range (0..{len(self._entries)})"
            )
        self._entries.insert(index, StackEntry(buffer))
        self._mark_dirty(f"added {buffer!r} at {index}")
        return index

    def replace_entry(self, old: SampleBuffer, new: SampleBuffer) -> int:
        """Swap *old* for *new* in place, keeping position and muted state."""
        index = self.index_of(old)
        if index < 0:
            raise EntryNotFoundError(f"{old!r} is not in the stack")
        self._check_insertable(new)
        self._entries[index] = replace(self._entries[index], buffer=new)
        self._mark_dirty(f"replaced entry {index}")
        return index

    def remove_entry(self, buffer: SampleBuffer) -> None:
        """Remove *buffer* if present; absent buffers are ignored."""
        index = self.index_of(buffer)
        if index < 0:
            return
        del self._entries[index]
        self._mark_dirty(f"removed entry {index}")

    def set_muted_state(self, ref: EntryRef, muted: bool) -> None:
        """Mute or unmute an entry by index or by buffer; unknown buffers are ignored."""
        index = self._resolve(ref)
        if index < 0:
            return
        self._entries[index] = replace(self._entries[index], muted=bool(muted))
        self._mark_dirty(f"{'muted' if muted else 'unmuted'} entry {index}")

    def get_muted_state(self, ref: EntryRef) -> bool:
        index = self._resolve(ref)
        if index < 0:
            raise EntryNotFoundError(f"{ref!r} is not in the stack")
        return self._entries[index].muted
