"""Tests for workspace path utilities."""

from spk.utils.paths import item_id, slugify, write_text_atomic


class TestSlugify:
    def test_basic(self):
        assert slugify("Hello World") == "hello-world"

    def test_special_characters(self):
        assert slugify("Lesson #3: Café!") == "lesson-3-café"

    def test_truncates(self):
        assert len(slugify("a" * 200)) <= 80


class TestItemId:
    def test_stable_for_same_file(self, tmp_path):
        path = tmp_path / "My Lesson.mp3"
        assert item_id(path) == item_id(tmp_path / "." / "My Lesson.mp3")
        assert item_id(path).startswith("my-lesson-")

    def test_differs_by_location(self, tmp_path):
        assert item_id(tmp_path / "a" / "x.mp3") != item_id(tmp_path / "b" / "x.mp3")

    def test_untitled_fallback(self, tmp_path):
        assert item_id(tmp_path / "???.mp3").startswith("untitled-")


def test_atomic_write_creates_parents(tmp_path):
    path = write_text_atomic(tmp_path / "a" / "b.txt", "hi")
    assert path.read_text() == "hi"
    assert [p.name for p in path.parent.iterdir()] == ["b.txt"]