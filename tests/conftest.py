"""Pytest fixtures for dicsubset tests."""

import numpy as np
import pytest
from pathlib import Path
import tempfile


@pytest.fixture
def sample_grayscale_image():
    """Create a sample grayscale image."""
    np.random.seed(42)
    return (np.random.rand(100, 100) * 255).astype(np.uint8)


@pytest.fixture
def sample_rgb_image():
    """Create a sample RGB image."""
    np.random.seed(42)
    return (np.random.rand(100, 100, 3) * 255).astype(np.uint8)


@pytest.fixture
def sample_16bit_image():
    """Create a sample 16-bit grayscale image."""
    np.random.seed(42)
    return (np.random.rand(100, 100) * 65535).astype(np.uint16)


@pytest.fixture
def sample_speckle_pattern():
    """Create a synthetic 400 x 400 speckle pattern."""
    np.random.seed(42)
    size = 400

    x, y = np.meshgrid(np.arange(size), np.arange(size))

    pattern = np.zeros((size, size), dtype=np.float64)

    # Add multiple speckle sizes
    for freq in [10, 20, 30, 50]:
        phase_x = np.random.rand() * 2 * np.pi
        phase_y = np.random.rand() * 2 * np.pi
        pattern += np.sin(2 * np.pi * x / freq + phase_x) * np.sin(2 * np.pi * y / freq + phase_y)

    # Add random noise
    pattern += np.random.randn(size, size) * 0.3

    # Normalize to 0-255
    pattern = (pattern - pattern.min()) / (pattern.max() - pattern.min())
    return (pattern * 255).astype(np.uint8)


@pytest.fixture
def speckle_image(sample_speckle_pattern):
    """Image built from the speckle pattern."""
    from dicsubset.core.image import Image

    return Image.from_array(sample_speckle_pattern, name="speckle")


@pytest.fixture
def ramp_image():
    """Image whose intensity is a linear function of x and y."""
    from dicsubset.core.image import Image

    x, y = np.meshgrid(np.arange(60, dtype=np.float64), np.arange(60, dtype=np.float64))
    return Image(0.01 * x + 0.005 * y, name="ramp")


@pytest.fixture
def square_subset():
    """13 x 19 rectangle subset centred on (125, 250)."""
    from dicsubset.core.subset import Subset

    return Subset.from_rectangle(125, 250, 13, 19)


@pytest.fixture
def temp_image_file(sample_grayscale_image):
    """Create a temporary image file."""
    from PIL import Image

    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        filepath = Path(f.name)

    img = Image.fromarray(sample_grayscale_image)
    img.save(filepath)

    yield filepath

    if filepath.exists():
        filepath.unlink()


@pytest.fixture
def temp_tif_file(sample_speckle_pattern, tmp_path):
    """Speckle pattern saved as an 8-bit TIFF."""
    from PIL import Image

    filepath = tmp_path / "ImageA.tif"
    Image.fromarray(sample_speckle_pattern).save(filepath)
    return filepath
