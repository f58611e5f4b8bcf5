"""Video information report."""

from pathlib import Path

from rich.markup import escape
from rich.table import Table
from tqdm import tqdm

from ffr.errors import ToolError
from ffr.log import RunLog
from ffr.models.video import VideoInfo
from ffr.processors.encoder import human_number
from ffr.processors.prober import FFprobe


DEFAULT_MAX_NAME_LENGTH = 50

COLUMNS = ["FILE", "SIZE", "BITRATE", "LENGTH", "FRAMERATE", "WIDTH", "HEIGHT", "CODEC", "INDEXES"]


def shorten_name(name: str, max_length: int) -> str:
    """Shorten a long name to its start and its last nine characters."""
    if len(name) <= max_length:
        return name
    return name[: max(max_length - 12, 0)] + "..." + name[-9:]


def _truncate(value: float) -> float:
    """Drop everything after the first decimal."""
    return int(value * 10) / 10


def gather_info(
    paths: list[Path],
    prober: FFprobe,
    log: RunLog,
    skip_key_frames: bool = False,
    show_progress: bool = True,
) -> list[VideoInfo]:
    """Probe every file, logging failures and keeping whatever could be read.

    Args:
        paths: Files to probe.
        prober: ffprobe wrapper.
        log: Run log receiving probe failures.
        skip_key_frames: If True, key frames are not looked up.
        show_progress: Display a progress bar.

    Returns:
        One VideoInfo per file, in the given order.
    """
    infos: list[VideoInfo] = []

    for path in tqdm(paths, desc="Probing files...", disable=not show_progress):
        try:
            info = prober.probe(path)
        except ToolError as e:
            log.log(f"failed to probe video. file: {path}, err: {e}")
            info = VideoInfo(name=path.name, size=path.stat().st_size)

        if not skip_key_frames:
            try:
                info.key_frames = prober.key_frames(path)
            except ToolError as e:
                log.log(f"failed to find key frames. file: {path}, err: {e}")

        infos.append(info)

    return infos


def build_info_table(
    infos: list[VideoInfo],
    skip_key_frames: bool = False,
    max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
) -> Table:
    """Build the report table, one row per file."""
    table = Table(show_header=True, header_style="bold", box=None)
    for column in COLUMNS:
        table.add_column(column, justify="left" if column in ("FILE", "CODEC", "INDEXES") else "right")

    for info in infos:
        table.add_row(
            escape(shorten_name(info.name, max_name_length)),
            human_number(info.size, " ", "B"),
            human_number(info.bit_rate, " ", "bit"),
            str(_truncate(info.duration)),
            str(_truncate(info.frame_rate)),
            str(info.width),
            str(info.height),
            info.codec,
            "SKIPPED" if skip_key_frames else " ".join(info.key_frames),
        )

    return table
