from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from wavestack.buffers import MixOperation
from wavestack.provider import DEFAULT_SAMPLE_RATE

# ---------------------------------------------------------------------------
# Periodic generators
# ---------------------------------------------------------------------------


class SineSource(BaseModel):
    kind: Literal["sine"] = "sine"
    duration: float = Field(ge=0.0)
    frequency: float
    phase: float = 0.0
    amplitude: float = 1.0
    channels: int = Field(default=1, ge=1)
    mix: MixOperation = MixOperation.ADD


# ---------------------------------------------------------------------------
# Envelopes (discriminated union on "kind")
# ---------------------------------------------------------------------------


class LinearEnvelopeSource(BaseModel):
    kind: Literal["linear"] = "linear"
    duration: float = Field(ge=0.0)
    start_value: float = 0.0
    end_value: float = 1.0
    start_time: float = Field(default=0.0, ge=0.0)
    mix: MixOperation = MixOperation.ADD


class ExponentialEnvelopeSource(BaseModel):
    kind: Literal["exponential"] = "exponential"
    duration: float = Field(ge=0.0)
    exponent: float = 2.0
    start_value: float = 0.0
    end_value: float = 1.0
    start_time: float = Field(default=0.0, ge=0.0)
    mix: MixOperation = MixOperation.ADD


class PassThroughEnvelopeSource(BaseModel):
    kind: Literal["pass_through"] = "pass_through"
    duration: float = Field(ge=0.0)
    mix: MixOperation = MixOperation.ADD


class ASREnvelopeSource(BaseModel):
    """Attack/sustain/release envelope.

    Give either an explicit ``sustain`` segment or a total ``duration``, in
    which case a linear sustain bridges attack and release.
    """

    kind: Literal["asr"] = "asr"
    attack: EnvelopeSource
    release: EnvelopeSource
    sustain: Optional[EnvelopeSource] = None
    duration: Optional[float] = Field(default=None, ge=0.0)
    mix: MixOperation = MixOperation.ADD


EnvelopeSource = Annotated[
    Union[
        LinearEnvelopeSource,
        ExponentialEnvelopeSource,
        PassThroughEnvelopeSource,
        ASREnvelopeSource,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Stacks
# ---------------------------------------------------------------------------


class Entry(BaseModel):
    source: Source
    muted: bool = False


class StackSource(BaseModel):
    kind: Literal["stack"] = "stack"
    duration: float = Field(ge=0.0)
    channels: int = Field(default=1, ge=1)
    mix: MixOperation = MixOperation.ADD
    entries: list[Entry] = []


# Discriminated union of everything that can sit in a stack
Source = Annotated[
    Union[
        SineSource,
        LinearEnvelopeSource,
        ExponentialEnvelopeSource,
        PassThroughEnvelopeSource,
        ASREnvelopeSource,
        StackSource,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Top-level patch
# ---------------------------------------------------------------------------


class Patch(BaseModel):
    name: str
    sample_rate: float = Field(default=DEFAULT_SAMPLE_RATE, gt=0.0)
    duration: float = Field(ge=0.0)
    channels: int = Field(default=1, ge=1)
    mix: MixOperation = MixOperation.ADD
    entries: list[Entry] = []


ASREnvelopeSource.model_rebuild()
Entry.model_rebuild()
StackSource.model_rebuild()
Patch.model_rebuild()
