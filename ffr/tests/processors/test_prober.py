"""Unit tests for the ffprobe wrapper."""

import io
import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from ffr.errors import ToolError
from ffr.log import RunLog
from ffr.processors.prober import FFprobe, parse_frame_rate, run_tool


@pytest.fixture
def log():
    """Create a quiet run log."""
    return RunLog(console=Console(file=io.StringIO()))


@pytest.fixture
def video_file(tmp_path):
    """Create a dummy video file."""
    path = tmp_path / "foo.mp4"
    path.write_bytes(b"\x00" * 1024)
    return path


def completed(stdout: str) -> MagicMock:
    return MagicMock(stdout=stdout, returncode=0)


class TestRunTool:
    """Tests for run_tool."""

    def test_returns_stdout(self, log):
        """Test that the standard output is returned and the command logged."""
        with patch("ffr.processors.prober.subprocess.run", return_value=completed("hello")) as mock_run:
            assert run_tool(["ffprobe", "-version"], log=log) == "hello"

        mock_run.assert_called_once_with(["ffprobe", "-version"], capture_output=True, text=True, check=True)
        assert "command: ffprobe -version" in log

    def test_missing_executable(self):
        """Test that a missing executable is reported as a tool error."""
        with patch("ffr.processors.prober.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(ToolError, match="not installed"):
                run_tool(["ffprobe", "-version"])

    def test_failed_command(self):
        """Test that a non-zero exit status is reported as a tool error."""
        error = subprocess.CalledProcessError(1, ["ffprobe"], stderr="Invalid data found")
        with patch("ffr.processors.prober.subprocess.run", side_effect=error):
            with pytest.raises(ToolError, match="Invalid data found"):
                run_tool(["ffprobe", "foo.mp4"])


class TestParseFrameRate:
    """Tests for parse_frame_rate."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("25/1", 25.0),
            ("30000/1001", 30000 / 1001),
            ("24", 24.0),
        ],
    )
    def test_parse(self, value, expected):
        """Test parsing fractions and plain numbers."""
        assert parse_frame_rate(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["0/0", "abc"])
    def test_invalid(self, value):
        """Test that invalid frame rates are rejected."""
        with pytest.raises(ToolError):
            parse_frame_rate(value)


class TestFFprobe:
    """Tests for FFprobe."""

    def test_probe(self, log, video_file):
        """Test reading stream properties from the JSON output."""
        output = json.dumps(
            {
                "streams": [
                    {
                        "codec_name": "h264",
                        "width": 1920,
                        "height": 1080,
                        "bit_rate": "4000000",
                        "r_frame_rate": "30000/1001",
                    }
                ],
                "format": {"duration": "12.500000"},
            }
        )
        with patch("ffr.processors.prober.subprocess.run", return_value=completed(output)) as mock_run:
            info = FFprobe(executable="/opt/ffprobe", log=log).probe(video_file)

        assert mock_run.call_args[0][0][0] == "/opt/ffprobe"
        assert info.name == "foo.mp4"
        assert info.size == 1024
        assert info.codec == "h264"
        assert info.width == 1920
        assert info.height == 1080
        assert info.bit_rate == 4_000_000
        assert info.duration == 12.5
        assert info.frame_rate == pytest.approx(29.97, abs=0.01)

    def test_probe_without_bit_rate(self, video_file):
        """Test that a missing bit rate is reported as zero."""
        output = json.dumps({"streams": [{"codec_name": "vp9", "width": 640, "height": 480, "r_frame_rate": "25/1"}]})
        with patch("ffr.processors.prober.subprocess.run", return_value=completed(output)):
            info = FFprobe().probe(video_file)

        assert info.bit_rate == 0
        assert info.duration == 0.0

    def test_probe_without_video_stream(self, video_file):
        """Test that files without a video stream fail."""
        with patch("ffr.processors.prober.subprocess.run", return_value=completed('{"streams": []}')):
            with pytest.raises(ToolError, match="no video stream"):
                FFprobe().probe(video_file)

    def test_probe_invalid_json(self, video_file):
        """Test that unparsable output fails."""
        with patch("ffr.processors.prober.subprocess.run", return_value=completed("not json")):
            with pytest.raises(ToolError, match="invalid ffprobe output"):
                FFprobe().probe(video_file)

    def test_dimensions(self, video_file):
        """Test reading the dimensions."""
        with patch("ffr.processors.prober.subprocess.run", return_value=completed("1920x1080\n")):
            assert FFprobe().dimensions(video_file) == "1920x1080"

    @pytest.mark.parametrize("output", ["", "N/A\n"])
    def test_dimensions_invalid(self, video_file, output):
        """Test that empty or invalid dimensions fail."""
        with patch("ffr.processors.prober.subprocess.run", return_value=completed(output)):
            with pytest.raises(ToolError, match="failed to probe dimensions"):
                FFprobe().dimensions(video_file)

    def test_key_frames(self, video_file):
        """Test collecting the first key frame timestamps."""
        output = "0.000000,K_\n0.033367,__\n2.002000,K_\n4.004000,K_\n6.006000,K_\n8.008000,K_\n"
        with patch("ffr.processors.prober.subprocess.run", return_value=completed(output)):
            assert FFprobe().key_frames(video_file) == ["0.0", "2.0", "4.0", "6.0"]

    def test_key_frames_max_count(self, video_file):
        """Test limiting the number of key frames."""
        output = "0.000000,K_\n2.002000,K_\n4.004000,K_\n"
        with patch("ffr.processors.prober.subprocess.run", return_value=completed(output)):
            assert FFprobe().key_frames(video_file, max_count=2) == ["0.0", "2.0"]
