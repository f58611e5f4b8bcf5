"""Unit tests for file name splitting."""

import pytest

from ffr.errors import OperationError
from ffr.processors.path_splitter import concat, join_segments, split_extension, split_file_name


class TestSplitExtension:
    """Tests for split_extension."""

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("foo.txt", ("foo", ".txt")),
            ("foo.bar.mp4", ("foo.bar", ".mp4")),
            ("foo", ("foo", "")),
            ("dir/sub/foo-bar.mkv", ("foo-bar", ".mkv")),
            ("dir\\foo.avi", ("foo", ".avi")),
            (".hidden", ("", ".hidden")),
        ],
    )
    def test_split(self, file_name, expected):
        """Test splitting off the directory and the extension."""
        assert split_extension(file_name) == expected


class TestSplitFileName:
    """Tests for split_file_name."""

    def test_segments(self):
        """Test splitting the base name on dashes."""
        name = split_file_name("foo-bar-baz.txt")

        assert name.base_path == "foo-bar-baz"
        assert name.extension == ".txt"
        assert name.segments == ["foo", "bar", "baz"]

    def test_empty_segments_are_kept(self):
        """Test that consecutive dashes produce empty segments."""
        name = split_file_name("foo--bar")

        assert name.segments == ["foo", "", "bar"]


class TestJoinSegments:
    """Tests for join_segments."""

    def test_round_trip(self):
        """Test that joining the split segments gives the file name back."""
        name = split_file_name("foo-bar-2ffc.mp4")

        assert join_segments(name.segments, name.extension) == "foo-bar-2ffc.mp4"


class TestConcat:
    """Tests for concat."""

    @pytest.mark.parametrize(
        "skip,expected",
        [
            (0, "new-foo-bar.txt"),
            (1, "foo-new-bar.txt"),
            (2, "foo-bar-new.txt"),
        ],
    )
    def test_insert_position(self, skip, expected):
        """Test that the new part lands after the skipped segments."""
        assert concat(["foo", "bar"], skip, "new", ".txt") == expected

    @pytest.mark.parametrize("skip", [-1, 3])
    def test_skip_out_of_range(self, skip):
        """Test that skipping outside the segment list is rejected."""
        with pytest.raises(OperationError):
            concat(["foo", "bar"], skip, "new", ".txt")
