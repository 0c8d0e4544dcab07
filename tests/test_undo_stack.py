import unittest

from PIL import Image

from src.core.pixel_buffer import same_pixels
from src.core.undo_stack import NothingToUndoError, UndoStack


def _image(color=(10, 20, 30, 255), size=(8, 6)) -> Image.Image:
    return Image.new("RGBA", size, color)


class UndoStackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.stack = UndoStack()
        self.floor = _image()

    def test_push_stores_independent_copy(self) -> None:
        self.assertTrue(self.stack.push(self.floor))
        self.floor.putpixel((0, 0), (0, 0, 0, 0))
        self.assertEqual(self.stack.peek().getpixel((0, 0)), (10, 20, 30, 255))

    def test_push_of_invalid_image_is_rejected(self) -> None:
        self.assertFalse(self.stack.push(Image.new("RGBA", (0, 0))))
        self.assertFalse(self.stack.push(None))
        self.assertEqual(self.stack.depth, 0)

    def test_undo_on_empty_stack_raises(self) -> None:
        with self.assertRaises(NothingToUndoError):
            self.stack.undo(self.floor)

    def test_undo_pops_most_recent_snapshot(self) -> None:
        second = _image((1, 1, 1, 255))
        self.stack.push(self.floor)
        self.stack.push(second)

        restored = self.stack.undo(_image((2, 2, 2, 255)))

        self.assertTrue(same_pixels(restored, second))
        self.assertEqual(self.stack.depth, 1)

    def test_floor_rewind_keeps_floor_on_stack(self) -> None:
        self.stack.push(self.floor)
        edited = _image((200, 0, 0, 255))

        restored = self.stack.undo(edited)

        self.assertTrue(same_pixels(restored, self.floor))
        self.assertEqual(self.stack.depth, 1)

    def test_floor_rewind_reports_nothing_when_already_there(self) -> None:
        self.stack.push(self.floor)
        with self.assertRaises(NothingToUndoError):
            self.stack.undo(self.floor.copy())
        self.assertEqual(self.stack.depth, 1)

    def test_rollback_and_clear(self) -> None:
        self.stack.push(self.floor)
        self.stack.push(_image((5, 5, 5, 255)))
        self.stack.rollback()
        self.assertEqual(self.stack.depth, 1)
        self.stack.clear()
        self.assertEqual(len(self.stack), 0)
        self.assertIsNone(self.stack.peek())


if __name__ == "__main__":
    unittest.main()
