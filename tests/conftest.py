import logging

import numpy as np
import pytest
from PIL import Image

from hyperstencil import logging_config


@pytest.fixture(autouse=True)
def _reset_logging():
    """cli.main() installs a stderr handler; drop it so it never outlives a test's capture."""
    yield
    logger = logging.getLogger("hyperstencil")
    if logging_config._handler is not None:
        logger.removeHandler(logging_config._handler)
        logging_config._handler = None
    logger.propagate = True


@pytest.fixture
def rgb_array():
    """Deterministic 5x4 RGB image covering the whole byte range."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(4, 5, 3), dtype=np.uint8)


@pytest.fixture
def png_path(tmp_path, rgb_array):
    path = tmp_path / "input.png"
    Image.fromarray(rgb_array).save(path)
    return path
