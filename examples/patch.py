"""Declarative patch: validate, dump as JSON, render."""

from wavestack import (
    ASREnvelopeSource,
    Entry,
    LinearEnvelopeSource,
    Patch,
    SineSource,
    StackSource,
    render_patch,
    validate_patch,
)

patch = Patch(
    name="layered",
    sample_rate=8000.0,
    duration=0.5,
    channels=2,
    entries=[
        Entry(source=SineSource(duration=0.5, frequency=220.0, amplitude=0.4)),
        Entry(
            source=StackSource(
                duration=0.5,
                entries=[
                    Entry(source=SineSource(duration=0.5, frequency=330.0, amplitude=0.2)),
                    Entry(source=SineSource(duration=0.5, frequency=440.0, amplitude=0.1)),
                ],
            )
        ),
        Entry(
            source=ASREnvelopeSource(
                attack=LinearEnvelopeSource(duration=0.05, end_value=0.2),
                release=LinearEnvelopeSource(duration=0.1, start_value=0.1, end_value=0.0),
                duration=0.5,
            ),
            muted=True,
        ),
    ],
)

if __name__ == "__main__":
    errors = validate_patch(patch)
    if errors:
        print("Validation problems:")
        for e in errors:
            print(f"  - [{e.severity}] {e}")
    else:
        print("Patch is valid.")
    print()
    print(patch.model_dump_json(indent=2))
    data = render_patch(patch)
    print(f"\nRendered {data.shape[1]} samples x {data.shape[0]} channels, peak {abs(data).max():.3f}")
