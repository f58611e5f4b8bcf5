"""ffmpeg re-encoding and cropping.

Output files are named after the input with the encoding settings (or the
crop size) appended as new segments, e.g. `movie-libx265-23-ultrafast.mp4`.
"""

import shlex
from pathlib import Path

from ffr.errors import OperationError, ToolError
from ffr.log import RunLog
from ffr.models.video import VideoInfo
from ffr.processors.path_splitter import split_extension
from ffr.processors.prober import FFprobe, run_tool


CODEC_H264 = "h264"
CODEC_H265 = "hevc"

ENCODER_H264 = "libx264"
ENCODER_H265 = "libx265"
ENCODER_VP9 = "vp9"
ENCODERS = [ENCODER_H264, ENCODER_H265, ENCODER_VP9]

ALLOWED_PRESETS = ["ultrafast", "superfast", "veryfast", "faster", "fast", "medium", "slow", "slower", "veryslow"]

DEFAULT_ENCODER = ENCODER_H265
DEFAULT_PRESET = "ultrafast"

# https://trac.ffmpeg.org/wiki/Encode/H.265
DEFAULT_CRF_H265 = 23
# https://trac.ffmpeg.org/wiki/Encode/H.264
DEFAULT_CRF_H264 = 20

VIDEO_CODEC_KEY = "-c:v"
AUDIO_CODEC_KEY = "-c:a"
CRF_KEY = "-crf"
BIT_RATE_KEY = "-b:v"
MAX_RATE_KEY = "-maxrate"
BUFSIZE_KEY = "-bufsize"
PRESET_KEY = "-preset"
LOSSLESS_KEY = "-lossless"
HWACCEL_KEY = "-hwaccel"
HWACCEL_DEVICE_KEY = "-hwaccel_device"
INPUT_KEY = "-i"

# Keys whose values end up in the output file name, in this order
PATH_KEYS = [VIDEO_CODEC_KEY, HWACCEL_KEY, CRF_KEY, LOSSLESS_KEY, PRESET_KEY]
# Keys rendered by name only in the output file name
FLAG_KEYS = {LOSSLESS_KEY}

QSV_ENCODERS = {
    ENCODER_H265: "hevc_qsv",
    ENCODER_H264: "h264_qsv",
    ENCODER_VP9: "vp9_qsv",
}

CROP_PRESETS = {
    "8k": (7680, 4320),
    "4320p": (7680, 4320),
    "4k": (3840, 2160),
    "2160p": (3840, 2160),
    "qhd": (2560, 1440),
    "1440p": (2560, 1440),
    "2k": (2048, 1080),
    "fullhd": (1920, 1080),
    "1080p": (1920, 1080),
    "hd": (1280, 720),
    "720p": (1280, 720),
    "540p": (960, 540),
    "sd": (640, 480),
    "480p": (640, 480),
}


def human_number(n: int, space: str = "", unit: str = "") -> str:
    """Format a number with a K/M/G/T multiplier and one decimal, e.g. `3.5M`."""
    for divisor, multiplier in ((10**12, "T"), (10**9, "G"), (10**6, "M"), (10**3, "K")):
        if n > divisor:
            return f"{n / divisor:.1f}{space}{multiplier}{unit}"
    return f"{n}{space}{unit}"


class EncodeParams:
    """Ordered ffmpeg parameters.

    Setting an existing key keeps its position, deleting a key removes it.
    """

    def __init__(self) -> None:
        self.params: dict[str, str] = {}

    def set(self, key: str, value: str) -> "EncodeParams":
        self.params[key] = value
        return self

    def delete(self, key: str) -> "EncodeParams":
        self.params.pop(key, None)
        return self

    def __contains__(self, key: str) -> bool:
        return key in self.params

    def __getitem__(self, key: str) -> str:
        return self.params[key]

    def to_args(self) -> list[str]:
        """Return the parameters as ffmpeg arguments."""
        args: list[str] = []
        for key, value in self.params.items():
            args.extend([key, value])
        return args

    def path_label(self) -> str:
        """Return the dash-joined settings used in the output file name."""
        values = []
        for key in PATH_KEYS:
            if key not in self.params:
                continue
            values.append(key.strip("-") if key in FLAG_KEYS else self.params[key])
        return "-".join(values)


def find_preset(preset: str) -> str:
    """Validate an x264/x265 preset name.

    Raises:
        OperationError: If the preset is unknown.
    """
    if preset not in ALLOWED_PRESETS:
        raise OperationError(f"invalid preset. preset: {preset}")
    return preset


def new_bit_rates(info: VideoInfo, encoder: str, log: RunLog | None = None) -> tuple[str, str]:
    """Estimate average and maximum bit rates for a hardware accelerated encode.

    An unknown source bit rate is estimated from the frame size and rate.
    Re-encoding to H.265 from another codec targets 60% of the source bit rate.

    Returns:
        Average and maximum bit rate, formatted for ffmpeg.
    """
    bit_rate = info.bit_rate
    if bit_rate == 0:
        bit_rate = info.width * info.height // 10 * int(info.frame_rate)

    if encoder == ENCODER_H265 and info.codec != CODEC_H265:
        bit_rate = bit_rate * 6 // 10

    if log is not None:
        log.log(
            f"file: {info.name}, old codec: {info.codec}, encoder: {encoder}, "
            f"old bit rate: {info.bit_rate}, new bit rate: {bit_rate} ({human_number(bit_rate)})"
        )

    return human_number(bit_rate), human_number(bit_rate * 2)


def build_reencode_params(
    path: Path,
    encoder: str = DEFAULT_ENCODER,
    crf: int = 0,
    preset: str = DEFAULT_PRESET,
    hwaccel: str = "",
    hwaccel_device: str = "",
) -> tuple[EncodeParams, str]:
    """Build the ffmpeg parameters for re-encoding a file.

    Bit rate parameters for hardware acceleration are added separately, see
    `new_bit_rates`.

    Returns:
        The parameters and the extension (without dot) of the output file.

    Raises:
        OperationError: If the encoder or the preset is unknown.
    """
    extension = "mp4"
    params = EncodeParams().set(HWACCEL_KEY, "auto")
    if hwaccel_device:
        params.set(HWACCEL_DEVICE_KEY, hwaccel_device)
    params.set(INPUT_KEY, str(path)).set(PRESET_KEY, preset)

    if encoder == ENCODER_H265:
        params.set(VIDEO_CODEC_KEY, ENCODER_H265).set("-x265-params", "keyint=1")
        params.set(PRESET_KEY, find_preset(preset)).set(CRF_KEY, str(crf or DEFAULT_CRF_H265))
        params.set(AUDIO_CODEC_KEY, "copy").set("-tag:v", "hvc1")
    elif encoder == ENCODER_H264:
        params.set(VIDEO_CODEC_KEY, ENCODER_H264).set("-x264-params", "keyint=1")
        params.set(PRESET_KEY, find_preset(preset)).set(CRF_KEY, str(crf or DEFAULT_CRF_H264))
        params.set(AUDIO_CODEC_KEY, "copy")
    elif encoder == ENCODER_VP9:
        # https://trac.ffmpeg.org/wiki/Encode/VP9
        extension = "mkv"
        params.delete(PRESET_KEY).set(VIDEO_CODEC_KEY, ENCODER_VP9).set("-g", "1")
        if crf:
            params.set(CRF_KEY, str(crf))
        else:
            params.set(LOSSLESS_KEY, "1")
        params.set(AUDIO_CODEC_KEY, "copy")
    else:
        raise OperationError(f"unknown encoder: {encoder}")

    if hwaccel == "qsv":
        params.delete(PRESET_KEY).delete(CRF_KEY).set(VIDEO_CODEC_KEY, QSV_ENCODERS[encoder])
    else:
        params.delete(HWACCEL_KEY).delete(HWACCEL_DEVICE_KEY)

    return params, extension


def unique_output_path(directory: Path, base_path: str, label: str, extension: str, log: RunLog | None = None) -> Path:
    """Return `<base>-<label>.<ext>`, adding a counter while the file exists."""
    output = directory / f"{base_path}-{label}.{extension}"
    counter = 1
    while output.exists():
        if log is not None:
            log.log(f"file exists: {output}")
        output = directory / f"{base_path}-{label}{counter}.{extension}"
        counter += 1
    return output


def crop_size(width: int = 0, height: int = 0, dimension_preset: str = "") -> tuple[int, int]:
    """Resolve the crop size from a preset name or explicit dimensions.

    Raises:
        OperationError: If neither results in a non-zero size.
    """
    if dimension_preset:
        if dimension_preset not in CROP_PRESETS:
            raise OperationError(f"unknown dimension preset: {dimension_preset}")
        width, height = CROP_PRESETS[dimension_preset]

    if width <= 0 or height <= 0:
        raise OperationError(f"wrong dimensions. width: {width}, height: {height}")

    return width, height


def crop_offset(position: str, original: int, size: int, start: str, end: str) -> int:
    """Resolve a crop offset given as a side name, `center` or a pixel count.

    Raises:
        OperationError: If the position is neither a known name nor a number.
    """
    if position == start:
        return 0
    if position in ("center", ""):
        return (original - size) // 2
    if position == end:
        return original - size

    try:
        offset = int(position)
    except ValueError as e:
        raise OperationError(f"wrong instructions, position: {position}") from e
    if offset < 0:
        raise OperationError(f"wrong instructions, negative position: {position}")
    return offset


def parse_dimensions(dimensions: str) -> tuple[int, int]:
    """Parse `WIDTHxHEIGHT`.

    Raises:
        ToolError: If the text is not in that form.
    """
    width, sep, height = dimensions.partition("x")
    if not sep or not width.isdigit() or not height.isdigit():
        raise ToolError(f"wrong dimensions: {dimensions}")
    return int(width), int(height)


class Encoder:
    """Runs ffmpeg to re-encode or crop video files."""

    def __init__(
        self,
        prober: FFprobe,
        log: RunLog,
        executable: str = "ffmpeg",
        dry_run: bool = False,
        force_overwrite: bool = False,
    ) -> None:
        """Initialize the encoder.

        Args:
            prober: Prober used to read source video properties.
            log: Run log receiving commands and details.
            executable: ffmpeg executable.
            dry_run: If True, commands are only logged.
            force_overwrite: If True, existing crop outputs are overwritten.
        """
        self.prober = prober
        self.log = log
        self.executable = executable
        self.dry_run = dry_run
        self.force_overwrite = force_overwrite

    def _execute(self, args: list[str]) -> None:
        command = [self.executable, *args]
        if self.dry_run:
            self.log.log(f"command: {shlex.join(command)}")
            return
        output = run_tool(command, log=self.log)
        if output:
            self.log.log(output)

    def reencode(
        self,
        path: Path,
        encoder: str = DEFAULT_ENCODER,
        crf: int = 0,
        preset: str = DEFAULT_PRESET,
        hwaccel: str = "",
        hwaccel_device: str = "",
        replace_file: bool = False,
    ) -> Path:
        """Re-encode a video file.

        Args:
            path: Video file to re-encode.
            encoder: One of `libx264`, `libx265` or `vp9`.
            crf: Constant rate factor, 0 for the encoder default (lossless for vp9).
            preset: x264/x265 preset.
            hwaccel: Hardware acceleration, `qsv` selects the Quick Sync encoders.
            hwaccel_device: Device used for hardware acceleration.
            replace_file: If True, the original is moved to a backup file and
                replaced by the output.

        Returns:
            Path of the re-encoded file.

        Raises:
            OperationError: If the settings are invalid.
            ToolError: If probing or encoding fails.
        """
        base_path, _ = split_extension(path.name)
        params, extension = build_reencode_params(path, encoder, crf, preset, hwaccel, hwaccel_device)

        if hwaccel:
            average, maximum = new_bit_rates(self.prober.probe(path), encoder, log=self.log)
            params.set(BIT_RATE_KEY, average).set(MAX_RATE_KEY, maximum).set(BUFSIZE_KEY, maximum)

        output = unique_output_path(path.parent, base_path, params.path_label(), extension, log=self.log)
        self.log.log(f"new path: {output}")

        self._execute([*params.to_args(), str(output)])
        if self.dry_run or not replace_file:
            return output

        backup = path.parent / f"{base_path}-backup.{extension}"
        try:
            self.log.log(f"mv {path} {backup}")
            path.replace(backup)
            self.log.log(f"mv {output} {path}")
            output.replace(path)
        except OSError as e:
            raise ToolError(f"failed to replace {path} with {output}: {e}") from e

        return path

    def crop(
        self,
        path: Path,
        width: int = 0,
        height: int = 0,
        x: str = "",
        y: str = "",
        dimension_preset: str = "",
    ) -> Path:
        """Crop a video file to the given size.

        Args:
            path: Video file to crop.
            width: Target width, ignored when a preset is given.
            height: Target height, ignored when a preset is given.
            x: `left`, `center`, `right` or a pixel offset from the left.
            y: `top`, `center`, `bottom` or a pixel offset from the top.
            dimension_preset: Named target size such as `fullhd` or `720p`.

        Returns:
            Path of the cropped file.

        Raises:
            OperationError: If the size or position does not fit the source.
            ToolError: If probing or cropping fails.
        """
        width, height = crop_size(width, height, dimension_preset)
        self.log.log(f"preset: {dimension_preset}, width: {width}, height: {height}")

        dimensions = self.prober.dimensions(path)
        original_width, original_height = parse_dimensions(dimensions)
        if original_width < width or original_height < height:
            raise OperationError(f"wrong dimensions. new dimensions: {width}x{height}, old dimensions: {dimensions}")

        x_offset = crop_offset(x, original_width, width, "left", "right")
        y_offset = crop_offset(y, original_height, height, "top", "bottom")
        self.log.log(f"x: {x_offset}, y: {y_offset}")

        if original_width < width + x_offset or original_height < height + y_offset:
            raise OperationError(
                f"wrong instructions. new dimensions: {width}x{height}, "
                f"pos x: {x_offset}, pos y: {y_offset}, old dimensions: {dimensions}"
            )

        base_path, extension = split_extension(path.name)
        output = path.parent / f"{base_path}-{width}x{height}{extension}"

        if not self.dry_run and not self.force_overwrite and output.exists():
            raise OperationError(f"file already exists. path: {output}")

        args = [INPUT_KEY, str(path), "-filter:v", f"crop={width}:{height}:{x_offset}:{y_offset}"]
        if self.force_overwrite:
            args.insert(0, "-y")
        self._execute([*args, str(output)])

        return output
