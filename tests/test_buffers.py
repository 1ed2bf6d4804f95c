"""Tests for the SampleBuffer mixing contract and the sine generator."""

from __future__ import annotations

import math

import numpy as np
import pytest

from wavestack import (
    ArrayBufferProvider,
    ConfigurationError,
    LinearEnvelope,
    MixOperation,
    PassThroughEnvelope,
    SampleBuffer,
    SineBuffer,
    resolve_mix_operation,
)

SQRT_HALF = math.sqrt(0.5)
# One cycle of a 1 Hz sine at 8 Hz sample rate
SINE_8 = [0.0, SQRT_HALF, 1.0, SQRT_HALF, 0.0, -SQRT_HALF, -1.0, -SQRT_HALF]
RAMP_8 = [i / 8 for i in range(8)]


# ---------------------------------------------------------------------------
# Construction and time conversion
# ---------------------------------------------------------------------------


class TestSampleBufferBasics:
    def test_abstract(self, provider: ArrayBufferProvider) -> None:
        with pytest.raises(TypeError):
            SampleBuffer(provider, 1.0)  # type: ignore[abstract]

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [(1.0, 8), (0.5, 4), (0.99, 7), (2.0, 16), (0.0, 0)],
    )
    def test_length_is_floor(
        self, provider: ArrayBufferProvider, duration: float, expected: int
    ) -> None:
        buf = SineBuffer(provider, duration, 1.0)
        assert buf.length_in_samples == expected
        assert buf.buffer.length == expected

    def test_properties(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0, channels=2)
        assert buf.provider is provider
        assert buf.sample_rate == 8.0
        assert buf.duration == 1.0
        assert buf.channel_count == 2
        assert buf.mix_operation is MixOperation.ADD
        assert buf.revision == 0

    def test_seconds_to_sample_offset_truncates(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0)
        assert buf.seconds_to_sample_offset(0.5) == 4
        assert buf.seconds_to_sample_offset(0.99) == 7
        assert buf.seconds_to_sample_offset(1.0) == 8

    def test_sample_offset_to_seconds_whole_seconds(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0)
        assert buf.sample_offset_to_seconds(7) == 0
        assert buf.sample_offset_to_seconds(8) == 1
        assert buf.sample_offset_to_seconds(15) == 1
        assert buf.sample_offset_to_seconds(16) == 2

    def test_negative_duration(self, provider: ArrayBufferProvider) -> None:
        with pytest.raises(ConfigurationError, match="duration"):
            SineBuffer(provider, -1.0, 1.0)

    def test_zero_channels(self, provider: ArrayBufferProvider) -> None:
        with pytest.raises(ConfigurationError, match="channels"):
            SineBuffer(provider, 1.0, 1.0, channels=0)

    def test_configuration_error_is_value_error(self, provider: ArrayBufferProvider) -> None:
        with pytest.raises(ValueError):
            SineBuffer(provider, -1.0, 1.0)

    def test_repr(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0, channels=2)
        assert repr(buf) == "SineBuffer(duration=1.0, channels=2, length=8)"


class TestMixOperationResolution:
    def test_enum_values(self) -> None:
        assert resolve_mix_operation(MixOperation.ADD) is np.add
        assert resolve_mix_operation(MixOperation.MULT) is np.multiply

    def test_string_values(self) -> None:
        assert resolve_mix_operation("add") is np.add
        assert resolve_mix_operation("mult") is np.multiply

    def test_callable_passthrough(self) -> None:
        def op(s: np.ndarray, t: np.ndarray) -> np.ndarray:
            return s - t

        assert resolve_mix_operation(op) is op

    def test_unknown_string(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown mix operation"):
            resolve_mix_operation("sub")

    def test_not_callable(self) -> None:
        with pytest.raises(ConfigurationError):
            resolve_mix_operation(5)  # type: ignore[arg-type]

    def test_string_stored_as_enum(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0, mix_operation="mult")
        assert buf.mix_operation is MixOperation.MULT


# ---------------------------------------------------------------------------
# SineBuffer
# ---------------------------------------------------------------------------


class TestSineBuffer:
    def test_one_cycle_at_eight_hz(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0)
        assert buf.buffer.channel_data(0).tolist() == pytest.approx(SINE_8, abs=1e-12)

    def test_parameters_stored(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 440.0, phase=0.25, amplitude=0.5)
        assert buf.frequency == 440.0
        assert buf.phase == 0.25
        assert buf.amplitude == 0.5

    def test_parameters_read_only(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0)
        for name in ("frequency", "phase", "amplitude"):
            with pytest.raises(AttributeError):
                setattr(buf, name, 2.0)
        assert buf.buffer.channel_data(0).tolist() == pytest.approx(SINE_8, abs=1e-12)

    def test_formula(self, fine_provider: ArrayBufferProvider) -> None:
        freq, phase, amp = 3.5, 0.3, 0.8
        buf = SineBuffer(fine_provider, 0.25, freq, phase=phase, amplitude=amp)
        data = buf.buffer.channel_data(0)
        for i in (0, 1, 17, 101, 249):
            t = (i * 2 * math.pi) / 1000.0
            assert data[i] == pytest.approx(math.sin(t * freq + phase) * amp, abs=1e-12)

    def test_phase_and_amplitude(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 1.0, phase=math.pi / 2, amplitude=2.0)
        data = buf.buffer.channel_data(0)
        assert data[0] == pytest.approx(2.0)
        assert data[4] == pytest.approx(-2.0)

    def test_identical_channels(self, provider: ArrayBufferProvider) -> None:
        buf = SineBuffer(provider, 1.0, 2.0, channels=3)
        data = buf.buffer.data
        assert np.array_equal(data[0], data[1])
        assert np.array_equal(data[0], data[2])

    def test_deterministic(self, fine_provider: ArrayBufferProvider) -> None:
        a = SineBuffer(fine_provider, 0.1, 440.0, phase=1.0)
        b = SineBuffer(fine_provider, 0.1, 440.0, phase=1.0)
        assert np.array_equal(a.buffer.data, b.buffer.data)

    def test_default_float32_storage(self) -> None:
        buf = SineBuffer(ArrayBufferProvider(sample_rate=8.0), 1.0, 1.0)
        assert buf.buffer.data.dtype == np.float32
        assert buf.buffer.channel_data(0).tolist() == pytest.approx(SINE_8, abs=1e-6)


# ---------------------------------------------------------------------------
# mix_into
# ---------------------------------------------------------------------------


class TestMixInto:
    def test_add_into_target(self, provider: ArrayBufferProvider) -> None:
        target = SineBuffer(provider, 1.0, 1.0)
        source = SineBuffer(provider, 1.0, 1.0)
        source.mix_into(target)
        expected = [2 * v for v in SINE_8]
        assert target.buffer.channel_data(0).tolist() == pytest.approx(expected, abs=1e-12)

    def test_source_untouched(self, provider: ArrayBufferProvider) -> None:
        target = SineBuffer(provider, 1.0, 1.0)
        source = LinearEnvelope(provider, 1.0)
        before = source.buffer.data.copy()
        source.mix_into(target)
        assert np.array_equal(source.buffer.data, before)

    def test_uses_target_operation(self, provider: ArrayBufferProvider) -> None:
        # Target multiplies, source declares ADD: the target's operation wins
        target = SineBuffer(provider, 1.0, 1.0, mix_operation=MixOperation.MULT)
        source = LinearEnvelope(provider, 1.0, mix_operation=MixOperation.ADD)
        source.mix_into(target)
        expected = [s * r for s, r in zip(SINE_8, RAMP_8)]
        assert target.buffer.channel_data(0).tolist() == pytest.approx(expected, abs=1e-12)

    def test_custom_operation_operand_order(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0, mix_operation=lambda s, t: s - t)
        source = LinearEnvelope(provider, 1.0)
        source.mix_into(target)
        expected = [r - 1.0 for r in RAMP_8]
        assert target.buffer.channel_data(0).tolist() == pytest.approx(expected)

    def test_shorter_source_truncates(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0)
        source = PassThroughEnvelope(provider, 0.5)
        source.mix_into(target)
        assert target.buffer.channel_data(0).tolist() == [2.0] * 4 + [1.0] * 4

    def test_longer_source_truncates(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 0.5)
        source = LinearEnvelope(provider, 1.0)
        source.mix_into(target)
        assert target.length_in_samples == 4
        assert target.buffer.channel_data(0).tolist() == pytest.approx(
            [1.0 + r for r in RAMP_8[:4]]
        )

    def test_mono_source_broadcasts(self, provider: ArrayBufferProvider) -> None:
        target = SineBuffer(provider, 1.0, 1.0, channels=2, amplitude=0.0)
        source = LinearEnvelope(provider, 1.0)
        source.mix_into(target)
        assert target.buffer.channel_data(0).tolist() == pytest.approx(RAMP_8)
        assert target.buffer.channel_data(1).tolist() == pytest.approx(RAMP_8)

    def test_extra_source_channels_ignored(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0)
        source = SineBuffer(provider, 1.0, 1.0, channels=2)
        source.mix_into(target)
        assert target.channel_count == 1
        assert target.buffer.channel_data(0).tolist() == pytest.approx(
            [1.0 + v for v in SINE_8], abs=1e-12
        )

    def test_empty_source_is_noop(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0)
        SineBuffer(provider, 0.0, 1.0).mix_into(target)
        assert target.buffer.channel_data(0).tolist() == [1.0] * 8


class TestMixShortcuts:
    def test_mix_defaults_to_own_operation(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0, mix_operation=MixOperation.MULT)
        target.mix(LinearEnvelope(provider, 1.0))
        assert target.buffer.channel_data(0).tolist() == pytest.approx(RAMP_8)

    def test_mix_with_override(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0, mix_operation=MixOperation.MULT)
        target.mix(LinearEnvelope(provider, 1.0), MixOperation.ADD)
        assert target.buffer.channel_data(0).tolist() == pytest.approx(
            [1.0 + r for r in RAMP_8]
        )

    def test_add(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0)
        target.add(PassThroughEnvelope(provider, 1.0))
        assert target.buffer.channel_data(0).tolist() == [2.0] * 8

    def test_mult(self, provider: ArrayBufferProvider) -> None:
        target = SineBuffer(provider, 1.0, 1.0)
        target.mult(LinearEnvelope(provider, 1.0))
        expected = [s * r for s, r in zip(SINE_8, RAMP_8)]
        assert target.buffer.channel_data(0).tolist() == pytest.approx(expected, abs=1e-12)

    def test_mix_changes_revision(self, provider: ArrayBufferProvider) -> None:
        target = PassThroughEnvelope(provider, 1.0)
        before = target.revision
        target.add(PassThroughEnvelope(provider, 1.0))
        assert target.revision != before
        after = target.revision
        LinearEnvelope(provider, 1.0).mix_into(target)
        assert target.revision != after
