"""Raw sample storage and the buffer provider contract.

Generators never allocate memory themselves; they ask an injected provider for
a zeroed multi-channel store at the provider's sample rate.
"""

from __future__ import annotations

import logging
from typing import Protocol

import numpy as np
import numpy.typing as npt

_LOGGER = logging.getLogger("wavestack.provider")

DEFAULT_SAMPLE_RATE = 44100.0


class RawBuffer:
    """Fixed-size multi-channel float storage, shape ``(channels, length)``."""

    def __init__(self, data: npt.NDArray[np.floating], sample_rate: float) -> None:
        if data.ndim != 2:
            raise ValueError(f"RawBuffer data must be 2-D (channels, length), got {data.ndim}-D")
        self._data = data
        self._sample_rate = float(sample_rate)

    @property
    def data(self) -> npt.NDArray[np.floating]:
        return self._data

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def channel_count(self) -> int:
        return int(self._data.shape[0])

    @property
    def length(self) -> int:
        return int(self._data.shape[1])

    def channel_data(self, channel: int) -> npt.NDArray[np.floating]:
        """Return a mutable view of one channel's samples."""
        if not 0 <= channel < self.channel_count:
            raise IndexError(f"Channel {channel} out of range (0..{self.channel_count - 1})")
        return self._data[channel]

    def copy_range(
        self, source: npt.ArrayLike, dest_channel: int, dest_offset: int = 0
    ) -> int:
        """Copy *source* into *dest_channel* starting at *dest_offset*.

        Samples that would land past the end of the channel are dropped.
        Returns the number of samples written.
        """
        if dest_offset < 0:
            raise ValueError(f"dest_offset must be non-negative, got {dest_offset}")
        dest = self.channel_data(dest_channel)
        src = np.asarray(source)
        count = max(0, min(src.shape[0], self.length - dest_offset))
        dest[dest_offset : dest_offset + count] = src[:count]
        return count

    def __repr__(self) -> str:
        return (
            f"RawBuffer(channels={self.channel_count}, length={self.length}, "
            f"sample_rate={self._sample_rate})"
        )


class BufferProvider(Protocol):
    """Anything able to hand out zeroed sample storage at a fixed sample rate."""

    sample_rate: float

    def allocate(
        self, channels: int, length: int, sample_rate: float | None = None
    ) -> RawBuffer: ...


class ArrayBufferProvider:
    """In-memory provider backed by numpy arrays."""

    def __init__(
        self,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
        dtype: npt.DTypeLike = np.float32,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = float(sample_rate)
        self.dtype = np.dtype(dtype)

    def allocate(
        self, channels: int, length: int, sample_rate: float | None = None
    ) -> RawBuffer:
        if channels <= 0:
            raise ValueError(f"channels must be positive, got {channels}")
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        rate = self.sample_rate if sample_rate is None else sample_rate
        _LOGGER.debug("Allocating %d x %d samples at %s Hz", channels, length, rate)
        return RawBuffer(np.zeros((channels, length), dtype=self.dtype), rate)

    def __repr__(self) -> str:
        return f"ArrayBufferProvider(sample_rate={self.sample_rate}, dtype={self.dtype})"
