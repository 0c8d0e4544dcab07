import unittest

from src.core.geometry import Rect, to_image_space, to_view_space


class ToImageSpaceTests(unittest.TestCase):
    def test_subtracts_centering_offset(self) -> None:
        self.assertEqual(to_image_space((60, 30), (100, 50), (200, 100)), (10, 5))

    def test_clamps_into_image_bounds(self) -> None:
        self.assertEqual(to_image_space((0, 0), (100, 50), (200, 100)), (0, 0))
        self.assertEqual(to_image_space((500, 500), (100, 50), (200, 100)), (99, 49))

    def test_passthrough_without_image(self) -> None:
        self.assertEqual(to_image_space((321, -4), None, (200, 100)), (321, -4))
        self.assertEqual(to_image_space((7, 8), (0, 10), (200, 100)), (7, 8))

    def test_offset_truncates_toward_zero_for_larger_images(self) -> None:
        # (100 - 101) / 2 -> 0, not -1
        self.assertEqual(to_image_space((10, 10), (101, 101), (100, 100)), (10, 10))

    def test_view_space_inverts_offset(self) -> None:
        rect = to_view_space(Rect(10, 5, 20, 10), (100, 50), (200, 100))
        self.assertEqual(rect, Rect(60, 30, 20, 10))


class RectTests(unittest.TestCase):
    def test_from_corners_normalizes_negative_extent(self) -> None:
        self.assertEqual(Rect.from_corners((10, 20), (4, 5)), Rect(4, 5, 6, 15))

    def test_empty_and_box(self) -> None:
        self.assertTrue(Rect.at((3, 4)).is_empty)
        rect = Rect(2, 3, 4, 5)
        self.assertFalse(rect.is_empty)
        self.assertEqual(rect.box, (2, 3, 6, 8))
        self.assertEqual(rect.top_left, (2, 3))


if __name__ == "__main__":
    unittest.main()
