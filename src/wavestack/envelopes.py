"""Envelope generators.

An envelope is a mono control signal moving from ``start_value`` to
``end_value``. Its path is decided by a shaping function evaluated over the
sample offsets after ``start_time``::

    value = start_value + shape(offset, width) * (end_value - start_value)

where ``width`` is the number of samples from ``start_time`` to the end of the
buffer. Shaping functions receive a float array of offsets and return an
array of multipliers (nominally in [0, 1]; no clamping is applied).
"""

from __future__ import annotations

import logging
import math
from typing import Callable

import numpy as np
import numpy.typing as npt

from wavestack.buffers import MixOperation, MixSpec, SampleBuffer
from wavestack.errors import ConfigurationError
from wavestack.provider import BufferProvider

_LOGGER = logging.getLogger("wavestack.envelopes")

ShapeFunction = Callable[[npt.NDArray[np.float64], int], npt.NDArray[np.float64]]


# ---------------------------------------------------------------------------
# Shaping laws
# ---------------------------------------------------------------------------


def linear_shape(offsets: npt.NDArray[np.float64], width: int) -> npt.NDArray[np.float64]:
    return offsets / width


def exponential_shape(exponent: float = 2.0) -> ShapeFunction:
    """Return a shape raising the linear ramp to *exponent*."""

    def shape(offsets: npt.NDArray[np.float64], width: int) -> npt.NDArray[np.float64]:
        return np.power(offsets / width, exponent)

    return shape


def constant_shape(offsets: npt.NDArray[np.float64], width: int) -> npt.NDArray[np.float64]:
    return np.ones_like(offsets)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class EnvelopeBase(SampleBuffer):
    """Mono envelope driven by a shaping function.

    Samples before ``start_time`` hold ``start_value``. A ``start_time`` past
    the end of the buffer is a configuration error rather than being clamped.
    """

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        shape: ShapeFunction,
        *,
        start_value: float = 0.0,
        end_value: float = 1.0,
        start_time: float = 0.0,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        if start_time < 0:
            raise ConfigurationError(f"start_time must be non-negative, got {start_time}")
        super().__init__(provider, duration, channels=1, mix_operation=mix_operation)
        self._shape = shape
        self._start_value = start_value
        self._end_value = end_value
        self._start_time = start_time
        self._generate_buffer_data()

    @property
    def shape(self) -> ShapeFunction:
        return self._shape

    @property
    def start_value(self) -> float:
        return self._start_value

    @property
    def end_value(self) -> float:
        return self._end_value

    @property
    def start_time(self) -> float:
        return self._start_time

    def _generate_buffer_data(self) -> None:
        start = self.seconds_to_sample_offset(self.start_time)
        width = self.length_in_samples - start
        if width < 0:
            raise ConfigurationError(
                f"{type(self).__name__}: start_time {self.start_time}s is past the end of "
                f"a {self._duration}s envelope"
            )
        channel = self._buffer.channel_data(0)
        channel[:start] = self.start_value
        offsets = np.arange(width, dtype=np.float64)
        multiplier = self._shape(offsets, width)
        channel[start:] = self.start_value + multiplier * (self.end_value - self.start_value)
        _LOGGER.debug(
            "Generated %s: %d samples, %d held before start",
            type(self).__name__,
            self.length_in_samples,
            start,
        )


class LinearEnvelope(EnvelopeBase):
    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        *,
        start_value: float = 0.0,
        end_value: float = 1.0,
        start_time: float = 0.0,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        super().__init__(
            provider,
            duration,
            linear_shape,
            start_value=start_value,
            end_value=end_value,
            start_time=start_time,
            mix_operation=mix_operation,
        )


class ExponentialEnvelope(EnvelopeBase):
    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        *,
        exponent: float = 2.0,
        start_value: float = 0.0,
        end_value: float = 1.0,
        start_time: float = 0.0,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        self._exponent = exponent
        super().__init__(
            provider,
            duration,
            exponential_shape(exponent),
            start_value=start_value,
            end_value=end_value,
            start_time=start_time,
            mix_operation=mix_operation,
        )

    @property
    def exponent(self) -> float:
        return self._exponent


class PassThroughEnvelope(EnvelopeBase):
    """Constant unity envelope; multiplying by it leaves a signal unchanged."""

    def __init__(
        self,
        provider: BufferProvider,
        duration: float,
        *,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        super().__init__(provider, duration, constant_shape, mix_operation=mix_operation)


class ASREnvelope(EnvelopeBase):
    """Attack, sustain and release envelopes concatenated end to end.

    Channel 0 of each component is copied verbatim, with no crossfade. The
    buffer is never shorter than the three segments together. If rounding the
    summed duration leaves it longer, the trailing samples hold ``end_value``.
    All three components must share one sample rate.
    """

    def __init__(
        self,
        attack: EnvelopeBase,
        sustain: EnvelopeBase,
        release: EnvelopeBase,
        *,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> None:
        for name, part in (("attack", attack), ("sustain", sustain), ("release", release)):
            if not isinstance(part, EnvelopeBase):
                raise TypeError(f"ASR {name} must be an envelope, got {type(part).__name__}")
        for name, part in (("sustain", sustain), ("release", release)):
            if part.sample_rate != attack.sample_rate:
                raise ConfigurationError(
                    f"ASR {name} runs at {part.sample_rate} Hz but attack runs at "
                    f"{attack.sample_rate} Hz"
                )
        self._attack = attack
        self._sustain = sustain
        self._release = release
        duration = attack.duration + sustain.duration + release.duration
        super().__init__(
            attack.provider,
            duration,
            constant_shape,
            start_value=attack.start_value,
            end_value=release.end_value,
            mix_operation=mix_operation,
        )

    @property
    def attack(self) -> EnvelopeBase:
        return self._attack

    @property
    def sustain(self) -> EnvelopeBase:
        return self._sustain

    @property
    def release(self) -> EnvelopeBase:
        return self._release

    def _sample_length(self, duration: float) -> int:
        segments = sum(
            part.length_in_samples for part in (self._attack, self._sustain, self._release)
        )
        return max(super()._sample_length(duration), segments)

    def _generate_buffer_data(self) -> None:
        super()._generate_buffer_data()
        offset = 0
        for part in (self._attack, self._sustain, self._release):
            self._buffer.copy_range(part.buffer.channel_data(0), 0, offset)
            offset += part.length_in_samples

    @classmethod
    def create_interpolated(
        cls,
        attack: EnvelopeBase,
        release: EnvelopeBase,
        duration: float,
        *,
        mix_operation: MixSpec = MixOperation.ADD,
    ) -> ASREnvelope:
        """Build an ASR envelope lasting *duration* seconds.

        The sustain segment is a linear bridge from ``attack.end_value`` to
        ``release.start_value`` filling the time between the two.
        """
        edges = attack.duration + release.duration
        sustain_duration = duration - edges
        if sustain_duration < 0:
            # Float noise from summing the edge durations is not a real overlap
            if not math.isclose(duration, edges, rel_tol=1e-9, abs_tol=1e-12):
                raise ConfigurationError(
                    f"ASR duration {duration}s is shorter than attack + release ({edges}s)"
                )
            sustain_duration = 0.0
        sustain = LinearEnvelope(
            attack.provider,
            sustain_duration,
            start_value=attack.end_value,
            end_value=release.start_value,
        )
        return cls(attack, sustain, release, mix_operation=mix_operation)
