from __future__ import annotations

import math

from wavestack.models import (
    ASREnvelopeSource,
    Entry,
    ExponentialEnvelopeSource,
    LinearEnvelopeSource,
    Patch,
    Source,
    StackSource,
)


class PatchValidationError(str):
    """A structured validation error that behaves as a plain string.

    Subclasses ``str`` so callers can compare, join and print errors
    directly while still inspecting ``kind``, ``path`` and ``severity``.
    """

    kind: str
    path: str
    severity: str  # "error" | "warning"

    def __new__(
        cls,
        kind: str,
        message: str,
        *,
        path: str = "",
        severity: str = "error",
    ) -> PatchValidationError:
        return super().__new__(cls, message)

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        path: str = "",
        severity: str = "error",
    ) -> None:
        self.kind = kind
        self.path = path
        self.severity = severity


def _samples(sample_rate: float, seconds: float) -> int:
    return math.floor(sample_rate * seconds)


def source_duration(source: Source) -> float:
    """Duration in seconds the built buffer for *source* will have."""
    if isinstance(source, ASREnvelopeSource):
        if source.sustain is not None:
            return (
                source_duration(source.attack)
                + source_duration(source.sustain)
                + source_duration(source.release)
            )
        if source.duration is not None:
            return source.duration
        return source_duration(source.attack) + source_duration(source.release)
    return source.duration


def source_samples(source: Source, sample_rate: float) -> int:
    """Samples per channel the built buffer for *source* will have."""
    length = _samples(sample_rate, source_duration(source))
    if isinstance(source, ASREnvelopeSource):
        if source.sustain is not None:
            sustain = source_samples(source.sustain, sample_rate)
        elif source.duration is not None:
            edges = source_duration(source.attack) + source_duration(source.release)
            sustain = _samples(sample_rate, max(source.duration - edges, 0.0))
        else:
            sustain = 0
        segments = (
            source_samples(source.attack, sample_rate)
            + sustain
            + source_samples(source.release, sample_rate)
        )
        length = max(length, segments)
    return length


def source_channels(source: Source) -> int:
    return getattr(source, "channels", 1)


def _check_source(
    source: Source, path: str, sample_rate: float, errors: list[PatchValidationError]
) -> None:
    if isinstance(source, (LinearEnvelopeSource, ExponentialEnvelopeSource)):
        if _samples(sample_rate, source.start_time) > _samples(sample_rate, source.duration):
            errors.append(
                PatchValidationError(
                    "start_past_end",
                    f"{path}: start_time {source.start_time}s is past the end of "
                    f"a {source.duration}s envelope",
                    path=path,
                )
            )
    elif isinstance(source, ASREnvelopeSource):
        _check_source(source.attack, f"{path}.attack", sample_rate, errors)
        _check_source(source.release, f"{path}.release", sample_rate, errors)
        if source.sustain is not None:
            _check_source(source.sustain, f"{path}.sustain", sample_rate, errors)
            if source.duration is not None:
                errors.append(
                    PatchValidationError(
                        "asr_sustain",
                        f"{path}: give either an explicit sustain or a total duration, not both",
                        path=path,
                    )
                )
        elif source.duration is None:
            errors.append(
                PatchValidationError(
                    "asr_sustain",
                    f"{path}: needs an explicit sustain or a total duration",
                    path=path,
                )
            )
        else:
            edges = source_duration(source.attack) + source_duration(source.release)
            if source.duration < edges and not math.isclose(
                source.duration, edges, rel_tol=1e-9, abs_tol=1e-12
            ):
                errors.append(
                    PatchValidationError(
                        "negative_sustain",
                        f"{path}: duration {source.duration}s is shorter than "
                        f"attack + release ({edges}s)",
                        path=path,
                    )
                )
    elif isinstance(source, StackSource):
        _check_entries(
            source.entries, path, source.duration, source.channels, sample_rate, errors
        )


def _check_entries(
    entries: list[Entry],
    path: str,
    duration: float,
    channels: int,
    sample_rate: float,
    errors: list[PatchValidationError],
) -> None:
    length = _samples(sample_rate, duration)
    for i, entry in enumerate(entries):
        entry_path = f"{path}.entries[{i}]" if path else f"entries[{i}]"
        source = entry.source
        _check_source(source, entry_path, sample_rate, errors)
        if source_samples(source, sample_rate) > length:
            errors.append(
                PatchValidationError(
                    "truncated",
                    f"{entry_path}: {source.kind} is longer than its {duration}s stack "
                    f"and will be truncated",
                    path=entry_path,
                    severity="warning",
                )
            )
        if source_channels(source) > channels:
            errors.append(
                PatchValidationError(
                    "extra_channels",
                    f"{entry_path}: {source.kind} has {source_channels(source)} channels, "
                    f"stack has {channels}; extra channels are ignored",
                    path=entry_path,
                    severity="warning",
                )
            )


def validate_patch(patch: Patch) -> list[PatchValidationError]:
    """Validate a patch and return a list of problems (empty = valid).

    Errors describe patches that cannot be built. Warnings (``severity ==
    "warning"``) flag material that will be silently truncated or ignored
    when mixing, and are appended after all errors.
    """
    found: list[PatchValidationError] = []
    _check_entries(
        patch.entries, "", patch.duration, patch.channels, patch.sample_rate, found
    )
    errors = [e for e in found if e.severity == "error"]
    warnings = [e for e in found if e.severity == "warning"]
    return errors + warnings
