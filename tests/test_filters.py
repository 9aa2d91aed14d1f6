from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from earnings_ocr.services import filters


def test_box_blur_interior_matches_window_mean() -> None:
    rng = np.random.default_rng(7)
    gray = rng.integers(0, 256, size=(20, 24), dtype=np.uint8)
    radius = 2
    blurred = filters.box_blur(gray, radius)
    assert blurred.shape == gray.shape
    for y in range(radius, gray.shape[0] - radius):
        for x in range(radius, gray.shape[1] - radius):
            window = gray[y - radius : y + radius + 1, x - radius : x + radius + 1]
            assert abs(int(blurred[y, x]) - window.mean()) <= 1


def test_box_blur_radius_zero_is_identity_copy() -> None:
    gray = np.arange(12, dtype=np.uint8).reshape(3, 4)
    blurred = filters.box_blur(gray, 0)
    assert np.array_equal(blurred, gray)
    assert blurred is not gray


def test_box_blur_replicates_edges_on_flat_image() -> None:
    gray = np.full((5, 9), 90, dtype=np.uint8)
    assert np.array_equal(filters.box_blur(gray, 4), gray)


def test_clip_points_flat_image_falls_back_to_full_range() -> None:
    gray = np.full((10, 10), 77, dtype=np.uint8)
    assert filters.compute_clip_points(gray, 5) == (0, 255)


def test_clip_points_on_gradient() -> None:
    gray = np.tile(np.arange(256, dtype=np.uint8), (4, 1))
    low, high = filters.compute_clip_points(gray, 5)
    assert (low, high) == (12, 243)
    assert filters.compute_clip_points(gray, 0) == (0, 255)


def test_median_and_fallback() -> None:
    assert filters.compute_median(np.full((3, 3), 200, dtype=np.uint8)) == 200
    mixed = np.array([[10, 20, 30, 40, 250]], dtype=np.uint8)
    assert filters.compute_median(mixed) == 30
    assert filters.compute_median(np.zeros((0, 0), dtype=np.uint8)) == 128


def test_auto_invert_uses_median() -> None:
    light = np.full((4, 4), 200, dtype=np.uint8)
    dark = np.full((4, 4), 50, dtype=np.uint8)
    assert not filters.should_invert(light, auto_invert=True, force_invert=False)
    assert filters.should_invert(dark, auto_invert=True, force_invert=False)
    assert not filters.should_invert(dark, auto_invert=True, force_invert=True, cutoff=40)


def test_force_invert_only_when_auto_disabled() -> None:
    light = np.full((4, 4), 200, dtype=np.uint8)
    assert filters.should_invert(light, auto_invert=False, force_invert=True)
    assert not filters.should_invert(light, auto_invert=True, force_invert=True)


def test_contrast_stretch_maps_clip_window() -> None:
    gray = np.array([[40, 50, 100, 150, 200]], dtype=np.uint8)
    stretched = filters.contrast_stretch(gray, 50, 150)
    assert stretched.tolist() == [[0, 0, 128, 255, 255]]
    again = filters.contrast_stretch(stretched, 0, 255)
    assert np.array_equal(again, stretched)


def test_invert() -> None:
    gray = np.array([[0, 100, 255]], dtype=np.uint8)
    assert filters.invert(gray).tolist() == [[255, 155, 0]]


def test_global_threshold() -> None:
    gray = np.array([[10, 159, 160, 255]], dtype=np.uint8)
    assert filters.global_threshold(gray, 160).tolist() == [[0, 0, 255, 255]]


def test_summed_area_table() -> None:
    gray = np.arange(20, dtype=np.uint8).reshape(4, 5)
    sat = filters.summed_area_table(gray)
    assert sat.shape == (5, 6)
    assert sat[-1, -1] == int(gray.sum())
    assert sat[0].sum() == 0 and sat[:, 0].sum() == 0
    assert sat[2, 3] == int(gray[:2, :3].sum())


def test_adaptive_threshold_with_whole_image_window_matches_global_mean() -> None:
    rng = np.random.default_rng(3)
    gray = rng.integers(0, 256, size=(15, 17), dtype=np.uint8)
    adaptive = filters.adaptive_threshold(gray, radius=50, bias=0)
    expected = np.where(gray >= gray.mean(), 255, 0)
    assert np.array_equal(adaptive, expected)


def test_adaptive_threshold_handles_uneven_background() -> None:
    gray = np.empty((20, 40), dtype=np.uint8)
    gray[:, :20] = 200
    gray[:, 20:] = 80
    gray[10, 5:9] = 150
    gray[10, 25:29] = 30

    binary = filters.adaptive_threshold(gray, radius=3, bias=-10)
    assert (binary[10, 5:9] == 0).all()
    assert (binary[10, 25:29] == 0).all()
    assert binary[2, 2] == 255
    assert binary[2, 35] == 255
    # one global cut loses the whole dark panel
    assert filters.global_threshold(gray, 160)[2, 35] == 0


@pytest.mark.parametrize("strength", [4.5, 5.0, 6.5])
def test_sharpen_preserves_flat_regions(strength: float) -> None:
    rgba = filters.gray_to_rgba(np.full((6, 7), 123, dtype=np.uint8))
    sharpened = filters.laplacian_sharpen(rgba, strength)
    assert (sharpened[..., :3] == 123).all()
    assert (sharpened[..., 3] == 255).all()


def test_sharpen_copies_border_and_amplifies_edges() -> None:
    gray = np.full((5, 6), 100, dtype=np.uint8)
    gray[:, 3:] = 200
    rgba = filters.gray_to_rgba(gray)
    rgba[0, :, 3] = 90
    sharpened = filters.laplacian_sharpen(rgba, 5.0)

    assert np.array_equal(sharpened[0], rgba[0])
    assert np.array_equal(sharpened[:, 0], rgba[:, 0])
    assert np.array_equal(sharpened[:, -1], rgba[:, -1])
    assert sharpened[2, 2, 0] == 0
    assert sharpened[2, 3, 0] == 255
    assert sharpened[2, 2, 3] == 255


def test_pad_adds_white_border() -> None:
    rgba = filters.gray_to_rgba(np.zeros((3, 4), dtype=np.uint8))
    padded = filters.pad(rgba, 2)
    assert padded.shape == (7, 8, 4)
    assert (padded[:2] == 255).all()
    assert (padded[:, -2:] == 255).all()
    assert (padded[2:5, 2:6, :3] == 0).all()
    assert filters.pad(rgba, 0).shape == rgba.shape


def test_grayscale_uses_luminance_weights() -> None:
    bgr = np.array([[[0, 0, 255], [0, 255, 0], [255, 0, 0]]], dtype=np.uint8)
    assert filters.to_grayscale(bgr).tolist() == [[76, 150, 29]]


def test_grayscale_drops_alpha_channel() -> None:
    bgra = np.array([[[0, 255, 0, 0], [10, 10, 10, 255]]], dtype=np.uint8)
    assert filters.to_grayscale(bgra).tolist() == [[150, 10]]
