"""ffprobe wrapper reading video stream properties."""

import json
import re
import shlex
import subprocess
from pathlib import Path

from ffr.errors import ToolError
from ffr.log import RunLog
from ffr.models.video import VideoInfo


DEFAULT_KEY_FRAME_COUNT = 4

_DIMENSIONS = re.compile(r"\d+x\d+$")


def run_tool(args: list[str], log: RunLog | None = None) -> str:
    """Run an external tool and return its standard output.

    Raises:
        ToolError: If the tool is missing or exits with a non-zero status.
    """
    if log is not None:
        log.log(f"command: {shlex.join(args)}")

    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise ToolError(f"{args[0]} is not installed or not in PATH") from e
    except subprocess.CalledProcessError as e:
        raise ToolError(f"{args[0]} failed with exit code {e.returncode}: {(e.stderr or '').strip()}") from e

    return result.stdout


def parse_frame_rate(value: str) -> float:
    """Parse an ffprobe frame rate such as `30000/1001`.

    Raises:
        ToolError: If the value is not a valid fraction or number.
    """
    try:
        if "/" in value:
            numerator, denominator = value.split("/", 1)
            return float(numerator) / float(denominator)
        return float(value)
    except (ValueError, ZeroDivisionError) as e:
        raise ToolError(f"failed to parse frame rate: {value!r}") from e


class FFprobe:
    """Reads video properties of files with ffprobe."""

    def __init__(self, executable: str = "ffprobe", log: RunLog | None = None) -> None:
        self.executable = executable
        self.log = log

    def _run(self, *args: str) -> str:
        return run_tool([self.executable, *args], log=self.log)

    def probe(self, path: Path) -> VideoInfo:
        """Probe the first video stream and the container of a file.

        Args:
            path: Path to the video file.

        Returns:
            VideoInfo with the stream properties. Unknown bit rates are 0.

        Raises:
            ToolError: If ffprobe fails or reports no video stream.
        """
        output = self._run(
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=codec_name,width,height,bit_rate,r_frame_rate:format=duration",
            "-of",
            "json",
            str(path),
        )
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise ToolError(f"invalid ffprobe output for {path}: {e}") from e

        streams = data.get("streams") or []
        if not streams:
            raise ToolError(f"no video stream found in {path}")
        stream = streams[0]

        try:
            bit_rate = int(stream.get("bit_rate") or 0)
        except ValueError:
            bit_rate = 0

        try:
            duration = float((data.get("format") or {}).get("duration") or 0.0)
        except ValueError:
            duration = 0.0

        return VideoInfo(
            name=path.name,
            size=path.stat().st_size if path.exists() else 0,
            bit_rate=bit_rate,
            duration=duration,
            frame_rate=parse_frame_rate(stream.get("r_frame_rate") or "0"),
            width=stream.get("width") or 0,
            height=stream.get("height") or 0,
            codec=stream.get("codec_name") or "",
        )

    def dimensions(self, path: Path) -> str:
        """Return the dimensions of the first video stream as `WIDTHxHEIGHT`.

        Raises:
            ToolError: If ffprobe fails or its output is empty or invalid.
        """
        output = self._run(
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "csv=s=x:p=0",
            str(path),
        )
        match = _DIMENSIONS.search(output.strip())
        if not match:
            raise ToolError(f"failed to probe dimensions of {path}, output was empty or invalid")

        return match.group(0)

    def key_frames(self, path: Path, max_count: int = DEFAULT_KEY_FRAME_COUNT) -> list[str]:
        """Return the timestamps of the first key frames, with one decimal.

        Raises:
            ToolError: If ffprobe fails or a timestamp cannot be parsed.
        """
        output = self._run(
            "-loglevel",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "packet=pts_time,flags",
            "-of",
            "csv=print_section=0",
            str(path),
        )

        timestamps: list[str] = []
        for line in output.splitlines():
            if len(timestamps) >= max_count:
                break

            pts_time, _, flags = line.partition(",")
            if not flags.startswith("K") or not pts_time:
                continue

            try:
                timestamps.append(f"{float(pts_time):.1f}")
            except ValueError as e:
                raise ToolError(f"unable to parse key frame time {pts_time!r}") from e

        return timestamps
