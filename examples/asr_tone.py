"""A tone shaped by an interpolated attack/sustain/release envelope."""

from wavestack import (
    ArrayBufferProvider,
    ASREnvelope,
    ExponentialEnvelope,
    LinearEnvelope,
    MixOperation,
    SineBuffer,
    WaveStack,
)

provider = ArrayBufferProvider(sample_rate=16.0)
attack = ExponentialEnvelope(provider, 0.25, exponent=0.5)
release = LinearEnvelope(provider, 0.5, start_value=0.6, end_value=0.0)
envelope = ASREnvelope.create_interpolated(attack, release, 2.0)

tone = WaveStack(provider, 2.0, channels=2)
tone.add_entry(SineBuffer(provider, 2.0, 2.0))

if __name__ == "__main__":
    print("envelope:", envelope.buffer.channel_data(0).round(3).tolist())
    tone.mix(envelope, MixOperation.MULT)
    print("left:    ", tone.buffer.channel_data(0).round(3).tolist())
    print("right:   ", tone.buffer.channel_data(1).round(3).tolist())
