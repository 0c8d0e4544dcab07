import unittest

import numpy as np
from PIL import Image

from src.core.effects import (
    DegenerateSelectionError,
    apply_brightness,
    brightness_params,
    crop,
    draw_line,
    draw_text,
    is_effectively_grayscale,
    to_grayscale,
)
from src.core.geometry import Rect


def _noise_image(size=(16, 12), seed=7) -> Image.Image:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(size[1], size[0], 4), dtype=np.uint8)
    return Image.fromarray(arr)


class BrightnessTests(unittest.TestCase):
    def test_zero_factor_is_identity(self) -> None:
        image = _noise_image()
        before = image.tobytes()
        apply_brightness(image, 0.0)
        self.assertEqual(image.tobytes(), before)

    def test_params_are_asymmetric(self) -> None:
        self.assertEqual(brightness_params(0.5), (1.5, 12.5))
        self.assertEqual(brightness_params(-0.5), (0.5, -25.0))

    def test_brighten_and_darken_keep_alpha(self) -> None:
        bright = Image.new("RGBA", (2, 2), (100, 100, 100, 77))
        result = apply_brightness(bright, 0.5)
        self.assertIs(result, bright)
        self.assertEqual(bright.getpixel((0, 0)), (162, 162, 162, 77))

        dark = Image.new("RGBA", (2, 2), (100, 100, 100, 77))
        apply_brightness(dark, -0.5)
        self.assertEqual(dark.getpixel((1, 1)), (25, 25, 25, 77))

    def test_out_of_range_values_are_clamped(self) -> None:
        image = Image.new("RGB", (3, 3), (200, 10, 255))
        apply_brightness(image, 1.0)
        self.assertEqual(image.getpixel((0, 0)), (255, 45, 255))
        apply_brightness(image, -1.0)
        self.assertEqual(image.getpixel((0, 0)), (0, 0, 0))

    def test_single_channel_image(self) -> None:
        image = Image.new("L", (4, 4), 100)
        apply_brightness(image, 0.5)
        self.assertEqual(image.getpixel((2, 2)), 162)


class GrayscaleTests(unittest.TestCase):
    def test_conversion_returns_new_luminance_image(self) -> None:
        image = Image.new("RGBA", (20, 10), (200, 30, 60, 255))
        gray = to_grayscale(image)
        self.assertEqual(gray.mode, "L")
        self.assertEqual(gray.size, (20, 10))
        self.assertEqual(image.getpixel((0, 0)), (200, 30, 60, 255))

    def test_detection_on_gray_and_color(self) -> None:
        self.assertTrue(is_effectively_grayscale(Image.new("RGB", (30, 30), (80, 80, 80))))
        self.assertTrue(is_effectively_grayscale(Image.new("L", (5, 5), 10)))
        self.assertFalse(is_effectively_grayscale(Image.new("RGB", (3, 2), (1, 2, 3))))

    def test_detection_only_samples_top_left_block(self) -> None:
        image = Image.new("RGB", (30, 30), (80, 80, 80))
        image.putpixel((20, 20), (255, 0, 0))
        self.assertTrue(is_effectively_grayscale(image))
        image.putpixel((3, 3), (255, 0, 0))
        self.assertFalse(is_effectively_grayscale(image))


class CropTests(unittest.TestCase):
    def setUp(self) -> None:
        self.image = Image.new("RGBA", (40, 30), (1, 2, 3, 255))

    def test_rect_inside_bounds(self) -> None:
        self.assertEqual(crop(self.image, Rect(5, 5, 10, 20)).size, (10, 20))

    def test_rect_exceeding_bounds_is_shrunk(self) -> None:
        result = crop(self.image, Rect(30, 20, 50, 50))
        self.assertEqual(result.size, (10, 10))

    def test_negative_origin_is_clamped(self) -> None:
        self.assertEqual(crop(self.image, Rect(-5, -5, 10, 10)).size, (10, 10))

    def test_degenerate_rect_raises(self) -> None:
        with self.assertRaises(DegenerateSelectionError):
            crop(self.image, Rect(40, 0, 5, 5))
        with self.assertRaises(DegenerateSelectionError):
            crop(self.image, Rect(3, 3, 0, 10))

    def test_result_does_not_share_storage(self) -> None:
        result = crop(self.image, Rect(0, 0, 10, 10))
        result.putpixel((0, 0), (9, 9, 9, 9))
        self.assertEqual(self.image.getpixel((0, 0)), (1, 2, 3, 255))


class DrawingTests(unittest.TestCase):
    def test_draw_line_paints_segment_in_place(self) -> None:
        image = Image.new("RGBA", (20, 10), (255, 255, 255, 255))
        draw_line(image, (2, 5), (17, 5), (255, 0, 0), 3)
        self.assertEqual(image.getpixel((10, 5)), (255, 0, 0, 255))
        self.assertEqual(image.getpixel((10, 0)), (255, 255, 255, 255))

    def test_draw_text_renders_antialiased_glyphs(self) -> None:
        image = Image.new("RGB", (200, 60), (255, 255, 255))
        self.assertTrue(draw_text(image, (10, 40), "Hallo", (0, 0, 0)))
        arr = np.asarray(image)
        self.assertTrue((arr < 255).any())
        self.assertTrue(((arr > 0) & (arr < 255)).any())

    def test_blank_text_is_noop(self) -> None:
        image = Image.new("RGB", (50, 20), (255, 255, 255))
        before = image.tobytes()
        self.assertFalse(draw_text(image, (5, 15), "   ", (0, 0, 0)))
        self.assertFalse(draw_text(image, (5, 15), "", (0, 0, 0)))
        self.assertEqual(image.tobytes(), before)


if __name__ == "__main__":
    unittest.main()
