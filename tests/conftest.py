from __future__ import annotations

import numpy as np
import pytest

from wavestack import ArrayBufferProvider


@pytest.fixture
def provider() -> ArrayBufferProvider:
    """Eight samples per second, float64, so expected buffers can be written out by hand."""
    return ArrayBufferProvider(sample_rate=8.0, dtype=np.float64)


@pytest.fixture
def fine_provider() -> ArrayBufferProvider:
    """1 kHz float64 provider for properties that need many samples."""
    return ArrayBufferProvider(sample_rate=1000.0, dtype=np.float64)
