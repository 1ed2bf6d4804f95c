"""Build live buffers and stacks from declarative patch models."""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from wavestack.buffers import SampleBuffer, SineBuffer
from wavestack.envelopes import (
    ASREnvelope,
    EnvelopeBase,
    ExponentialEnvelope,
    LinearEnvelope,
    PassThroughEnvelope,
)
from wavestack.errors import ConfigurationError
from wavestack.models import (
    ASREnvelopeSource,
    Entry,
    EnvelopeSource,
    ExponentialEnvelopeSource,
    LinearEnvelopeSource,
    PassThroughEnvelopeSource,
    Patch,
    SineSource,
    Source,
    StackSource,
)
from wavestack.provider import ArrayBufferProvider, BufferProvider
from wavestack.stack import WaveStack
from wavestack.validate import validate_patch

_LOGGER = logging.getLogger("wavestack.render")


def _build_envelope(source: EnvelopeSource, provider: BufferProvider) -> EnvelopeBase:
    if isinstance(source, LinearEnvelopeSource):
        return LinearEnvelope(
            provider,
            source.duration,
            start_value=source.start_value,
            end_value=source.end_value,
            start_time=source.start_time,
            mix_operation=source.mix,
        )
    if isinstance(source, ExponentialEnvelopeSource):
        return ExponentialEnvelope(
            provider,
            source.duration,
            exponent=source.exponent,
            start_value=source.start_value,
            end_value=source.end_value,
            start_time=source.start_time,
            mix_operation=source.mix,
        )
    if isinstance(source, PassThroughEnvelopeSource):
        return PassThroughEnvelope(provider, source.duration, mix_operation=source.mix)
    if isinstance(source, ASREnvelopeSource):
        attack = _build_envelope(source.attack, provider)
        release = _build_envelope(source.release, provider)
        if source.sustain is not None:
            sustain = _build_envelope(source.sustain, provider)
            return ASREnvelope(attack, sustain, release, mix_operation=source.mix)
        if source.duration is None:
            raise ConfigurationError("ASR envelope needs an explicit sustain or a total duration")
        return ASREnvelope.create_interpolated(
            attack, release, source.duration, mix_operation=source.mix
        )
    raise TypeError(f"Unknown envelope source: {type(source).__name__}")


def _fill_stack(stack: WaveStack, entries: list[Entry], provider: BufferProvider) -> None:
    for entry in entries:
        index = stack.add_entry(build_source(entry.source, provider))
        if entry.muted:
            stack.set_muted_state(index, True)


def build_source(source: Source, provider: BufferProvider) -> SampleBuffer:
    """Construct the buffer described by a single source model."""
    if isinstance(source, SineSource):
        return SineBuffer(
            provider,
            source.duration,
            source.frequency,
            channels=source.channels,
            phase=source.phase,
            amplitude=source.amplitude,
            mix_operation=source.mix,
        )
    if isinstance(source, StackSource):
        stack = WaveStack(
            provider, source.duration, channels=source.channels, mix_operation=source.mix
        )
        _fill_stack(stack, source.entries, provider)
        return stack
    return _build_envelope(source, provider)


def build_patch(patch: Patch, provider: BufferProvider | None = None) -> WaveStack:
    """Validate *patch* and build its top-level WaveStack.

    Without an explicit *provider*, an in-memory provider at the patch's
    sample rate is used. Raises ConfigurationError if validation reports
    errors; warnings are logged.
    """
    problems = validate_patch(patch)
    errors = [p for p in problems if p.severity == "error"]
    if errors:
        raise ConfigurationError(f"Invalid patch '{patch.name}': " + "; ".join(errors))
    for warning in problems:
        if warning.severity == "warning":
            _LOGGER.warning("Patch '%s': %s", patch.name, warning)

    if provider is None:
        provider = ArrayBufferProvider(patch.sample_rate)
    elif provider.sample_rate != patch.sample_rate:
        _LOGGER.warning(
            "Patch '%s' declares %s Hz but provider runs at %s Hz; using the provider rate",
            patch.name,
            patch.sample_rate,
            provider.sample_rate,
        )

    stack = WaveStack(provider, patch.duration, channels=patch.channels, mix_operation=patch.mix)
    _fill_stack(stack, patch.entries, provider)
    _LOGGER.debug("Built patch '%s' with %d entries", patch.name, stack.entry_count)
    return stack


def render_patch(
    patch: Patch, provider: BufferProvider | None = None
) -> npt.NDArray[np.floating]:
    """Build *patch* and return a copy of its mixed samples, shape ``(channels, length)``."""
    return build_patch(patch, provider).buffer.data.copy()
