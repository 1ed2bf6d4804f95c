"""Sample buffers: the mixing contract and periodic generators."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Hashable, Union

import numpy as np
import numpy.typing as npt

from wavestack.errors import ConfigurationError
from wavestack.provider import BufferProvider, RawBuffer

_LOGGER = logging.getLogger("wavestack.buffers")

# Combining function applied as fn(source_samples, target_samples) -> new target samples.
MixFunction = Callable[[npt.NDArray[np.floating], npt.NDArray[np.floating]], npt.ArrayLike]


class MixOperation(str, Enum):
    ADD = "add"
    MULT = "mult"


MixSpec = Union[MixOperation, str, MixFunction]

_MIX_FUNCTIONS: dict[MixOperation, MixFunction] = {
    MixOperation.ADD: np.add,
    MixOperation.MULT: np.multiply,
}


def resolve_mix_operation(operation: MixSpec) -> MixFunction:
    """Turn a MixOperation (or its string value, or a callable) into a combining function."""
    if isinstance(operation, str):
        try:
            return _MIX_FUNCTIONS[MixOperation(operation)]
        except ValueError:
            valid = ", ".join(repr(m.value) for m in MixOperation)
            raise ConfigurationError(
                f"Unknown mix operation {operation!r} (expected one of {valid})"
            ) from None
    if callable(operation):
        return operation
    raise ConfigurationError(f"Mix operation must be a MixOperation or callable, got {operation!r}")


def _mix_raw(source: RawBuffer, target: RawBuffer, combine: MixFunction) -> None:
    """Mix *source* into *target* in place.

    Only the overlapping prefix is touched. Target channels beyond the
    source's channel count read source channel 0.
    """
    count = min(source.length, target.length)
    if count == 0:
        return
    for channel in range(target.channel_count):
        src_channel = channel if channel < source.channel_count else 0
        src = source.channel_data(src_channel)[:count]
        dest = target.channel_data(channel)
        dest[:count] = combine(src, dest[:count])


class SampleBuffer(ABC):
    """Base class for anything that owns samples and can be mixed into another buffer.

    The raw storage is allocated once from *provider* with
    ``seconds_to_sample_offset(duration)`` samples per channel (subclasses may
    adjust this in ``_sample_length``) and is never resized.
    """

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        *,
        channels: int = 1,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        if duration < 0:
            raise ConfigurationError(f"duration must be non-negative, got {duration}")
        if channels < 1:
            raise ConfigurationError(f"channels must be at least 1, got {channels}")
        self._provider = provider
        self._duration = float(duration)
        self._mix_function = resolve_mix_operation(mix_operation)
        self._mix_operation = (
            MixOperation(mix_operation) if isinstance(mix_operation, str) else mix_operation
        )
        self._mixes = 0
        length = self._sample_length(duration)
        self._buffer = provider.allocate(channels, length, provider.sample_rate)

    # -- time conversion ----------------------------------------------------

    def seconds_to_sample_offset(self, seconds: float) -> int:
        return math.floor(self.sample_rate * seconds)

    def sample_offset_to_seconds(self, sample: int) -> int:
        """Whole seconds covered by *sample* (sub-second precision is dropped)."""
        return math.floor(sample / self.sample_rate)

    def _sample_length(self, duration: float) -> int:
        """Samples per channel to allocate for *duration* seconds."""
        return self.seconds_to_sample_offset(duration)

    # -- properties ---------------------------------------------------------

    @property
    def provider(self) -> BufferProvider:
        return self._provider

    @property
    def sample_rate(self) -> float:
        return self._provider.sample_rate

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def length_in_samples(self) -> int:
        return self._buffer.length

    @property
    def channel_count(self) -> int:
        return self._buffer.channel_count

    @property
    def mix_operation(self) -> MixOperation | MixFunction:
        return self._mix_operation

    @property
    def buffer(self) -> RawBuffer:
        return self._buffer

    @property
    def revision(self) -> Hashable:
        """Token that changes whenever this buffer's contents may have changed.

        Generated samples only change when another buffer is mixed into this
        one, so the token counts those mixes.
        """
        return self._mixes

    # -- mixing -------------------------------------------------------------

    def mix_into(self, target: SampleBuffer) -> None:
        """Combine this buffer's samples into *target* using the target's mix operation."""
        target._receive(self.buffer, target._mix_function)

    def mix(self, source: SampleBuffer, operation: MixSpec | None = None) -> None:
        """Mix *source* into this buffer, optionally overriding the combining operation."""
        if operation is None:
            source.mix_into(self)
            return
        self._receive(source.buffer, resolve_mix_operation(operation))

    def _receive(self, source: RawBuffer, combine: MixFunction) -> None:
        """Mix raw *source* samples into this buffer's storage."""
        _mix_raw(source, self._buffer, combine)
        self._mixes += 1

    def add(self, source: SampleBuffer) -> None:
        self.mix(source, MixOperation.ADD)

    def mult(self, source: SampleBuffer) -> None:
        self.mix(source, MixOperation.MULT)

    # -- generation ---------------------------------------------------------

    def _clear_sample_buffer(self) -> None:
        self._buffer.data.fill(0.0)

    @abstractmethod
    def _generate_buffer_data(self) -> None:
        """Populate the raw buffer."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(duration={self._duration}, "
            f"channels={self.channel_count}, length={self.length_in_samples})"
        )


class FrequencyBuffer(SampleBuffer):
    """A periodic generator described by frequency (Hz), phase (radians) and amplitude."""

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        frequency: float,
        *,
        channels: int = 1,
        phase: float = 0.0,
        amplitude: float = 1.0,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        super().__init__(provider, duration, channels=channels, mix_operation=mix_operation)
        self._frequency = frequency
        self._phase = phase
        self._amplitude = amplitude

    @property
    def frequency(self) -> float:
        return self._frequency

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def amplitude(self) -> float:
        return self._amplitude

    def _sample_times(self) -> npt.NDArray[np.float64]:
        """Angular time base ``i * 2pi / sample_rate`` for every sample index."""
        indices = np.arange(self.length_in_samples, dtype=np.float64)
        return (indices * math.pi * 2) / self.sample_rate


class SineBuffer(FrequencyBuffer):
    """Sine wave, identical on every channel."""

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        frequency: float,
        *,
        channels: int = 1,
        phase: float = 0.0,
        amplitude: float = 1.0,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        super().__init__(
            provider,
            duration,
            frequency,
            channels=channels,
            phase=phase,
            amplitude=amplitude,
            mix_operation=mix_operation,
        )
        self._generate_buffer_data()

    def _generate_buffer_data(self) -> None:
        wave = np.sin(self._sample_times() * self.frequency + self.phase) * self.amplitude
        # Broadcast the single waveform across all channels
        self._buffer.data[:] = wave
        _LOGGER.debug(
            "Generated sine %s Hz, %d samples x %d channels",
            self.frequency,
            self.length_in_samples,
            self.channel_count,
        )
