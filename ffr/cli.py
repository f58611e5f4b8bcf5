"""CLI entrypoints."""

from collections.abc import Callable
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from ffr.config import Settings
from ffr.log import RunLog
from ffr.processors import merge_arithmetic, rename_operations
from ffr.processors.encoder import ALLOWED_PRESETS, CROP_PRESETS, DEFAULT_ENCODER, DEFAULT_PRESET, ENCODERS, Encoder
from ffr.processors.info_report import DEFAULT_MAX_NAME_LENGTH, build_info_table, gather_info
from ffr.processors.prober import FFprobe
from ffr.processors.rename_processor import NameOperation, RenameProcessor


console = Console()


class PartList(click.ParamType):
    """Comma separated list of 1-based part positions, e.g. `1,3`."""

    name = "parts"

    def convert(self, value, param, ctx) -> list[int]:
        if isinstance(value, list):
            return value
        try:
            return [int(part) for part in value.split(",")]
        except ValueError:
            self.fail(f"{value!r} is not a comma separated list of numbers", param, ctx)


input_files_argument = click.argument("input_files", type=click.Path(), nargs=-1, required=True)
regular_expression_option = click.option(
    "-r", "--regular-expression", type=str, default="", help="Regular expression selecting the parts to change."
)
skip_finds_option = click.option("-s", "--skip-finds", type=click.IntRange(min=0), default=0, help="Number of finds to skip.")
skip_parts_option = click.option(
    "-s", "--skip-parts", type=click.IntRange(min=0), default=0, help="Number of dash-separated parts to skip."
)
regexp_group_option = click.option(
    "--regexp-group", "--rg", type=click.IntRange(min=0), default=0, help="Regular expression group to use."
)
max_count_option = click.option(
    "--max-count", "--mc", type=click.IntRange(min=0), default=1, help="Maximum number of changes, 0 means no maximum."
)
skip_dash_prefix_option = click.option(
    "--skip-dash-prefix", "--sdp", is_flag=True, default=False, help="Do not prefix the regular expression with a dash."
)
skip_duplicate_option = click.option(
    "--skip-duplicate", "--sd", is_flag=True, default=False, help="Do not insert the text if the file name contains it."
)


@click.group(context_settings=dict(show_default=True))
@click.option("-d", "--dry-run", is_flag=True, default=False, help="Only print the changes, do not execute anything.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print details and commands before executing them.")
@click.option("-f", "--force-overwrite", is_flag=True, default=False, help="Overwrite existing files.")
@click.option("-b", "--backwards", is_flag=True, default=False, help="Loop over the files backwards.")
@click.option("--ffmpeg", "ffmpeg_path", envvar="FFR_FFMPEG", default="ffmpeg", help="ffmpeg executable.")
@click.option("--ffprobe", "ffprobe_path", envvar="FFR_FFPROBE", default="ffprobe", help="ffprobe executable.")
@click.pass_context
def cli(
    ctx: click.Context,
    dry_run: bool,
    verbose: bool,
    force_overwrite: bool,
    backwards: bool,
    ffmpeg_path: str,
    ffprobe_path: str,
) -> None:
    """ffr - Rename and re-encode video files in batches."""
    ctx.obj = Settings(
        dry_run=dry_run,
        verbose=verbose,
        force_overwrite=force_overwrite,
        backwards=backwards,
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
    )


def _make_processor(settings: Settings) -> RenameProcessor:
    log = RunLog(verbose=settings.show_details)
    return RenameProcessor(log=log, dry_run=settings.dry_run, force_overwrite=settings.force_overwrite)


def _collect_files(processor: RenameProcessor, input_files: tuple[str, ...], backwards: bool) -> list[Path]:
    try:
        return processor.collect_files([Path(f) for f in input_files], backwards=backwards)
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e


def _by_name(function: Callable[..., str], **kwargs) -> NameOperation:
    """Bind an operation working on file names to its parameters."""
    return lambda path: function(path.name, **kwargs)


def _rename(settings: Settings, input_files: tuple[str, ...], build: Callable[[RunLog], NameOperation]) -> None:
    processor = _make_processor(settings)
    files = _collect_files(processor, input_files, settings.backwards)

    result = processor.run(files, build(processor.log))
    processor.log.log(result.summary())

    if settings.dry_run:
        console.print(f"[yellow]Dry run:[/yellow] no files were renamed ({len(result)} previewed).")
    else:
        console.print(f"[bold green]Renamed {result.renamed_count} file(s).[/bold green]")
    if result.failures:
        console.print(f"[bold red]{result.failed_count} file(s) failed.[/bold red]")


@cli.command("prefix")
@click.argument("text", type=str)
@input_files_argument
@skip_parts_option
@click.pass_obj
def prefix(settings: Settings, text: str, input_files: tuple[str, ...], skip_parts: int) -> None:
    """Prefix file names with a fixed string.

    Examples:

        ffr prefix draft foo-bar.mp4            # draft-foo-bar.mp4

        ffr prefix --skip-parts 1 draft foo-bar.mp4  # foo-draft-bar.mp4
    """
    _rename(settings, input_files, lambda log: _by_name(rename_operations.prefix, new_part=text, skip=skip_parts))


@cli.command("suffix")
@click.argument("text", type=str)
@input_files_argument
@skip_parts_option
@click.pass_obj
def suffix(settings: Settings, text: str, input_files: tuple[str, ...], skip_parts: int) -> None:
    """Suffix file names with a fixed string."""
    _rename(settings, input_files, lambda log: _by_name(rename_operations.suffix, new_part=text, skip=skip_parts))


@cli.command("replace")
@click.argument("search", type=str)
@click.argument("replacement", type=str)
@input_files_argument
@skip_finds_option
@click.pass_obj
def replace(settings: Settings, search: str, replacement: str, input_files: tuple[str, ...], skip_finds: int) -> None:
    """Replace a fixed string in file names."""
    _rename(
        settings,
        input_files,
        lambda log: _by_name(
            rename_operations.replace, search=search, replace_with=replacement, skip=skip_finds, log=log
        ),
    )


@cli.command("delete-parts")
@click.argument("parts", type=PartList())
@input_files_argument
@click.option("--from-back", "--fb", is_flag=True, default=False, help="Count the parts from the back.")
@click.pass_obj
def delete_parts(settings: Settings, parts: list[int], input_files: tuple[str, ...], from_back: bool) -> None:
    """Delete dash-separated parts given as a comma separated list of positions.

    Examples:

        ffr delete-parts 1,3 foo-bar-baz-2ffc.mp4       # bar-2ffc.mp4

        ffr delete-parts --fb 1,3 foo-bar-baz-2ffc.mp4  # foo-baz.mp4
    """
    _rename(settings, input_files, lambda log: _by_name(rename_operations.delete_parts, parts=parts, from_back=from_back))


@cli.command("delete-regexp")
@input_files_argument
@regular_expression_option
@regexp_group_option
@skip_finds_option
@max_count_option
@click.pass_obj
def delete_regexp(
    settings: Settings,
    input_files: tuple[str, ...],
    regular_expression: str,
    regexp_group: int,
    skip_finds: int,
    max_count: int,
) -> None:
    """Delete parts matching a regular expression (by default a description)."""
    _rename(
        settings,
        input_files,
        lambda log: _by_name(
            rename_operations.delete_regexp,
            pattern=regular_expression,
            group=regexp_group,
            skip_finds=skip_finds,
            max_count=max_count,
            log=log,
        ),
    )


@cli.command("add-number")
@click.argument("number", type=int)
@input_files_argument
@regular_expression_option
@regexp_group_option
@skip_finds_option
@max_count_option
@click.pass_obj
def add_number(
    settings: Settings,
    number: int,
    input_files: tuple[str, ...],
    regular_expression: str,
    regexp_group: int,
    skip_finds: int,
    max_count: int,
) -> None:
    """Add a number to the numbers of the descriptions.

    Examples:

        ffr add-number 2 foo-2ffc.mp4                                # foo-4ffc.mp4

        ffr add-number -r '-(\\d+)p' --rg 1 2 foo-1080p-2ffc.mp4     # foo-1082p-2ffc.mp4
    """
    _rename(
        settings,
        input_files,
        lambda log: _by_name(
            rename_operations.add_number,
            number_to_add=number,
            pattern=regular_expression,
            group=regexp_group,
            skip_finds=skip_finds,
            max_count=max_count,
            log=log,
        ),
    )


@cli.command("insert-before")
@click.argument("text", type=str)
@input_files_argument
@regular_expression_option
@skip_dash_prefix_option
@skip_duplicate_option
@click.pass_obj
def insert_before(
    settings: Settings,
    text: str,
    input_files: tuple[str, ...],
    regular_expression: str,
    skip_dash_prefix: bool,
    skip_duplicate: bool,
) -> None:
    """Insert text before the last description."""
    _rename(
        settings,
        input_files,
        lambda log: _by_name(
            rename_operations.insert_before,
            insert_text=text,
            pattern=regular_expression,
            skip_dash_prefix=skip_dash_prefix,
            skip_duplicate=skip_duplicate,
            log=log,
        ),
    )


@cli.command("insert-dimensions")
@input_files_argument
@regular_expression_option
@skip_dash_prefix_option
@skip_duplicate_option
@click.pass_obj
def insert_dimensions(
    settings: Settings,
    input_files: tuple[str, ...],
    regular_expression: str,
    skip_dash_prefix: bool,
    skip_duplicate: bool,
) -> None:
    """Insert the video dimensions before the last description."""

    def build(log: RunLog) -> NameOperation:
        prober = FFprobe(executable=settings.ffprobe_path, log=log)
        return lambda path: rename_operations.insert_dimensions_before(
            path.name,
            prober.dimensions(path),
            pattern=regular_expression,
            skip_dash_prefix=skip_dash_prefix,
            skip_duplicate=skip_duplicate,
            log=log,
        )

    _rename(settings, input_files, build)


@cli.command("merge-parts")
@input_files_argument
@regular_expression_option
@click.option("--delete-text", "--del", type=str, default="", help="Text to delete after merging.")
@click.pass_obj
def merge_parts(settings: Settings, input_files: tuple[str, ...], regular_expression: str, delete_text: str) -> None:
    """Merge the descriptions, summing their numbers (foo-12ffc-1bar -> foo-13ffc-bar)."""
    _rename(
        settings,
        input_files,
        lambda log: _by_name(
            merge_arithmetic.merge_parts, pattern=regular_expression, delete_text=delete_text, log=log
        ),
    )


@cli.command("prefix-date")
@input_files_argument
@click.pass_obj
def prefix_date(settings: Settings, input_files: tuple[str, ...]) -> None:
    """Prefix file names with the date found in them (YYYY.MM.DD)."""
    _rename(settings, input_files, lambda log: _by_name(rename_operations.prefix_date, log=log))


def _make_encoder(settings: Settings, log: RunLog) -> Encoder:
    return Encoder(
        prober=FFprobe(executable=settings.ffprobe_path, log=log),
        log=log,
        executable=settings.ffmpeg_path,
        dry_run=settings.dry_run,
        force_overwrite=settings.force_overwrite,
    )


@cli.command("reencode")
@input_files_argument
@click.option("--codec", type=click.Choice(ENCODERS), default=DEFAULT_ENCODER, help="Encoder to use.")
@click.option("--crf", type=click.IntRange(min=0), default=0, help="CRF to use, 0 for the encoder default.")
@click.option("--preset", type=click.Choice(ALLOWED_PRESETS), default=DEFAULT_PRESET, help="Preset (x264, x265 only).")
@click.option("--hwaccel", "--hw", type=str, default="", help="Hardware acceleration to use for encoding [qsv].")
@click.option("--hwaccel-device", "--hwd", type=str, default="", help="Device used for hardware acceleration.")
@click.option("--replace-file", "--rf", is_flag=True, default=False, help="Back up the original and replace it.")
@click.pass_obj
def reencode(
    settings: Settings,
    input_files: tuple[str, ...],
    codec: str,
    crf: int,
    preset: str,
    hwaccel: str,
    hwaccel_device: str,
    replace_file: bool,
) -> None:
    """Re-encode video files with ffmpeg.

    \b
    https://trac.ffmpeg.org/wiki/Encode/H.265
    https://trac.ffmpeg.org/wiki/Encode/H.264
    https://trac.ffmpeg.org/wiki/Encode/VP9
    """
    processor = _make_processor(settings)
    files = _collect_files(processor, input_files, settings.backwards)
    encoder = _make_encoder(settings, processor.log)

    processor.for_each(
        files,
        lambda path: encoder.reencode(path, codec, crf, preset, hwaccel, hwaccel_device, replace_file),
    )


@cli.command("crop")
@input_files_argument
@click.option("--width", type=click.IntRange(min=0), default=0, help="Width of the cropped video.")
@click.option("--height", type=click.IntRange(min=0), default=0, help="Height of the cropped video.")
@click.option("--x", "x", type=str, default="center", help="Horizontal position (left, center, right or px from left).")
@click.option("--y", "y", type=str, default="center", help="Vertical position (top, center, bottom or px from top).")
@click.option(
    "--dimension-preset", "--dp", type=click.Choice(list(CROP_PRESETS)), default=None, help="Named target dimensions."
)
@click.pass_obj
def crop(
    settings: Settings,
    input_files: tuple[str, ...],
    width: int,
    height: int,
    x: str,
    y: str,
    dimension_preset: str | None,
) -> None:
    """Crop video files with ffmpeg."""
    processor = _make_processor(settings)
    files = _collect_files(processor, input_files, settings.backwards)
    encoder = _make_encoder(settings, processor.log)

    processor.for_each(files, lambda path: encoder.crop(path, width, height, x, y, dimension_preset or ""))


@cli.command("keyframes")
@input_files_argument
@click.pass_obj
def keyframes(settings: Settings, input_files: tuple[str, ...]) -> None:
    """List the first key frames of video files."""
    processor = _make_processor(settings)
    files = _collect_files(processor, input_files, settings.backwards)
    prober = FFprobe(executable=settings.ffprobe_path, log=processor.log)

    def show(path: Path) -> None:
        timestamps = prober.key_frames(path)
        console.print(f"[bold cyan]{escape(str(path))}[/bold cyan]: {', '.join(timestamps)}...", highlight=False)

    processor.for_each(files, show)


@cli.command("info")
@input_files_argument
@click.option("--skip-keyframes", "--sk", is_flag=True, default=False, help="Do not look up key frames.")
@click.option(
    "--maximum-name-length",
    "--mnl",
    type=click.IntRange(min=12),
    default=DEFAULT_MAX_NAME_LENGTH,
    help="Maximum length of a displayed file name.",
)
@click.pass_obj
def info(settings: Settings, input_files: tuple[str, ...], skip_keyframes: bool, maximum_name_length: int) -> None:
    """Display information about video files. The backwards flag is ignored."""
    processor = _make_processor(settings)
    files = _collect_files(processor, input_files, backwards=False)
    prober = FFprobe(executable=settings.ffprobe_path, log=processor.log)

    infos = gather_info(files, prober, processor.log, skip_key_frames=skip_keyframes)
    console.print(build_info_table(infos, skip_key_frames=skip_keyframes, max_name_length=maximum_name_length))
