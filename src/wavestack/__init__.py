"""wavestack -- in-memory audio waveform generation and compositing."""

from wavestack.buffers import (
    FrequencyBuffer,
    MixOperation,
    SampleBuffer,
    SineBuffer,
    resolve_mix_operation,
)
from wavestack.envelopes import (
    ASREnvelope,
    EnvelopeBase,
    ExponentialEnvelope,
    LinearEnvelope,
    PassThroughEnvelope,
    constant_shape,
    exponential_shape,
    linear_shape,
)
from wavestack.errors import (
    ConfigurationError,
    EntryNotFoundError,
    InvalidEntryError,
    StackCycleError,
    WaveStackError,
)
from wavestack.models import (
    ASREnvelopeSource,
    Entry,
    ExponentialEnvelopeSource,
    LinearEnvelopeSource,
    PassThroughEnvelopeSource,
    Patch,
    SineSource,
    StackSource,
)
from wavestack.provider import ArrayBufferProvider, BufferProvider, RawBuffer
from wavestack.render import build_patch, build_source, render_patch
from wavestack.stack import StackEntry, WaveStack
from wavestack.validate import PatchValidationError, validate_patch

__all__ = [
    "ASREnvelope",
    "ASREnvelopeSource",
    "ArrayBufferProvider",
    "BufferProvider",
    "ConfigurationError",
    "Entry",
    "EntryNotFoundError",
    "EnvelopeBase",
    "ExponentialEnvelope",
    "ExponentialEnvelopeSource",
    "FrequencyBuffer",
    "InvalidEntryError",
    "LinearEnvelope",
    "LinearEnvelopeSource",
    "MixOperation",
    "PassThroughEnvelope",
    "PassThroughEnvelopeSource",
    "Patch",
    "PatchValidationError",
    "RawBuffer",
    "SampleBuffer",
    "SineBuffer",
    "SineSource",
    "StackCycleError",
    "StackEntry",
    "StackSource",
    "WaveStack",
    "WaveStackError",
    "build_patch",
    "build_source",
    "constant_shape",
    "exponential_shape",
    "linear_shape",
    "render_patch",
    "resolve_mix_operation",
    "validate_patch",
]
