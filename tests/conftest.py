import pytest

from deepzoom.util.logging_setup import get_logger


@pytest.fixture(autouse=True)
def _reset_package_logger():
    # The CLI installs its own handlers and stops propagation; undo that so caplog sees records.
    logger = get_logger()
    yield
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(0)


@pytest.fixture
def tiny_config(tmp_path):
    return {
        "width": 8,
        "height": 6,
        "max_iter": 20,
        "total_frames": 3,
        "start_zoom": 1.0,
        "zoom_increment": 0.5,
        "center": ["-0.75", "0.1"],
        "palette": [[0, 0, 0], [255, 255, 255], [255, 0, 0]],
        "workers": 1,
        "band_height": 4,
        "frames_dir": str(tmp_path / "frames"),
    }
