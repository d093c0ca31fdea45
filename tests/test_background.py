import numpy as np
import pytest

from detect.background import BackgroundModel
from detect.config import BackgroundConfig
from exceptions import BackgroundModelError, BackgroundNotReadyError

WIDTH, HEIGHT = 160, 120


def _trained(depth_mm: int, frames: int = 40) -> BackgroundModel:
    model = BackgroundModel(WIDTH, HEIGHT)
    for _ in range(frames):
        model.accumulate(np.full((HEIGHT, WIDTH), depth_mm, dtype=np.uint16))
    model.synthesize(5, 6)
    return model


def test_all_zero_accumulation_gives_valid_band() -> None:
    model = _trained(0)

    assert model.initialized
    assert np.all(model.low <= model.average)
    assert np.all(model.average <= model.high)
    mask = model.classify(np.zeros((HEIGHT, WIDTH), dtype=np.uint16))
    assert not mask.any()


def test_band_low_is_inclusive_and_high_is_exclusive() -> None:
    model = _trained(1000)
    y, x = HEIGHT // 2, WIDTH // 2
    assert model.is_in_center_column(x)
    # Constant input has zero jitter, so the floor of 1 mm times the centre scale of 5 applies.
    assert model.low[y, x] == pytest.approx(995.0)
    assert model.high[y, x] == pytest.approx(1005.0)

    frame = np.full((HEIGHT, WIDTH), 1000, dtype=np.uint16)
    for value, expected in [(995, False), (994, True), (1004, False), (1005, True)]:
        frame[y, x] = value
        assert bool(model.classify(frame)[y, x]) is expected, value


def test_scale_widens_towards_the_corners() -> None:
    model = _trained(1000)

    assert model.scale[HEIGHT // 2, WIDTH // 2] == pytest.approx(5.0)
    assert model.scale[0, 0] == pytest.approx(6.0, abs=1e-4)
    assert model.scale[HEIGHT - 1, WIDTH - 1] == pytest.approx(6.0, abs=1e-4)
    assert model.low[0, 0] < model.low[HEIGHT // 2, WIDTH // 2]


def test_jitter_sets_band_width() -> None:
    model = BackgroundModel(WIDTH, HEIGHT)
    for i in range(40):
        model.accumulate(np.full((HEIGHT, WIDTH), 1000 + 10 * (i % 2), dtype=np.uint16))
    model.synthesize(5, 6)

    assert model.avg_diff > 1.0
    y, x = HEIGHT // 2, WIDTH // 2
    half_band = model.high[y, x] - model.average[y, x]
    assert half_band == pytest.approx(model.diff[y, x] * 5.0, rel=1e-5)
    assert model.average[y, x] == pytest.approx(1005.0)


def test_synthesize_without_samples_raises() -> None:
    model = BackgroundModel(WIDTH, HEIGHT)

    with pytest.raises(BackgroundModelError):
        model.synthesize(5, 6)


def test_classify_before_synthesize_raises() -> None:
    model = BackgroundModel(WIDTH, HEIGHT)
    model.accumulate(np.zeros((HEIGHT, WIDTH), dtype=np.uint16))

    with pytest.raises(BackgroundNotReadyError):
        model.classify(np.zeros((HEIGHT, WIDTH), dtype=np.uint16))


def test_resynthesize_keeps_statistics() -> None:
    model = _trained(1000)
    model.synthesize(2, 3)

    assert model.count == 40
    assert model.low[HEIGHT // 2, WIDTH // 2] == pytest.approx(998.0)


def test_reset_returns_to_accumulation() -> None:
    model = _trained(1000)
    model.reset()

    assert not model.initialized
    assert model.count == 0
    assert model.max_depth == 0
    assert (model.width, model.height) == (WIDTH, HEIGHT)


def test_stats_and_max_depth() -> None:
    model = _trained(1000)

    assert model.max_depth == 1000
    assert model.avg_depth() == pytest.approx(1000.0)
    assert len(model.stats().splitlines()) == 3


def test_center_column_uses_config_factor() -> None:
    model = BackgroundModel(WIDTH, HEIGHT, BackgroundConfig(center_column_width_factor=0.1))

    assert model.is_in_center_column(79.5 + 16)
    assert not model.is_in_center_column(79.5 + 17)


def test_shape_mismatch_is_rejected() -> None:
    model = BackgroundModel(WIDTH, HEIGHT)

    with pytest.raises(ValueError):
        model.accumulate(np.zeros((10, 10), dtype=np.uint16))
