"""Tests for raw sample storage and the numpy-backed provider."""

from __future__ import annotations

import numpy as np
import pytest

from wavestack import ArrayBufferProvider, RawBuffer


class TestArrayBufferProvider:
    def test_defaults(self) -> None:
        p = ArrayBufferProvider()
        assert p.sample_rate == 44100.0
        assert p.dtype == np.float32

    def test_allocate_zeroed(self) -> None:
        p = ArrayBufferProvider(sample_rate=8.0)
        raw = p.allocate(2, 5)
        assert raw.channel_count == 2
        assert raw.length == 5
        assert raw.sample_rate == 8.0
        assert raw.data.dtype == np.float32
        assert not raw.data.any()

    def test_allocate_explicit_rate(self) -> None:
        raw = ArrayBufferProvider(sample_rate=8.0).allocate(1, 3, 16.0)
        assert raw.sample_rate == 16.0

    def test_allocate_empty(self) -> None:
        raw = ArrayBufferProvider().allocate(1, 0)
        assert raw.length == 0

    def test_invalid_sample_rate(self) -> None:
        with pytest.raises(ValueError, match="sample_rate"):
            ArrayBufferProvider(sample_rate=0.0)

    def test_invalid_channels(self) -> None:
        with pytest.raises(ValueError, match="channels"):
            ArrayBufferProvider().allocate(0, 4)

    def test_invalid_length(self) -> None:
        with pytest.raises(ValueError, match="length"):
            ArrayBufferProvider().allocate(1, -1)


class TestRawBuffer:
    def test_channel_data_is_view(self) -> None:
        raw = ArrayBufferProvider(dtype=np.float64).allocate(2, 4)
        raw.channel_data(1)[2] = 0.5
        assert raw.data[1, 2] == 0.5
        assert raw.data[0, 2] == 0.0

    def test_channel_out_of_range(self) -> None:
        raw = ArrayBufferProvider().allocate(2, 4)
        with pytest.raises(IndexError, match="Channel 2"):
            raw.channel_data(2)
        with pytest.raises(IndexError):
            raw.channel_data(-1)

    def test_copy_range(self) -> None:
        raw = ArrayBufferProvider(dtype=np.float64).allocate(1, 5)
        written = raw.copy_range([1.0, 2.0], 0, 1)
        assert written == 2
        assert raw.data[0].tolist() == [0.0, 1.0, 2.0, 0.0, 0.0]

    def test_copy_range_clips_at_end(self) -> None:
        raw = ArrayBufferProvider(dtype=np.float64).allocate(1, 4)
        written = raw.copy_range([1.0, 2.0, 3.0], 0, 2)
        assert written == 2
        assert raw.data[0].tolist() == [0.0, 0.0, 1.0, 2.0]

    def test_copy_range_past_end(self) -> None:
        raw = ArrayBufferProvider(dtype=np.float64).allocate(1, 2)
        assert raw.copy_range([1.0], 0, 5) == 0
        assert raw.data[0].tolist() == [0.0, 0.0]

    def test_copy_range_negative_offset(self) -> None:
        raw = ArrayBufferProvider().allocate(1, 2)
        with pytest.raises(ValueError, match="dest_offset"):
            raw.copy_range([1.0], 0, -1)

    def test_rejects_1d_data(self) -> None:
        with pytest.raises(ValueError, match="2-D"):
            RawBuffer(np.zeros(4), 8.0)

    def test_repr(self) -> None:
        raw = ArrayBufferProvider(sample_rate=8.0).allocate(2, 3)
        assert repr(raw) == "RawBuffer(channels=2, length=3, sample_rate=8.0)"
