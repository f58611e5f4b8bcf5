"""Split file names into dash-delimited segments and put them back together."""

from ffr.errors import OperationError
from ffr.models.file_name import SEPARATOR, FileName


def split_extension(file_name: str) -> tuple[str, str]:
    """Split a file name into its base name and extension.

    The directory part is stripped first. The extension runs from the last dot
    of the remaining name to its end and keeps the dot; it is empty when the
    name has no dot.
    """
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot < 0:
        return name, ""
    return name[:dot], name[dot:]


def split_file_name(file_name: str) -> FileName:
    """Decompose a file name into base name, extension and segments."""
    base_path, extension = split_extension(file_name)
    return FileName(base_path=base_path, extension=extension, segments=base_path.split(SEPARATOR))


def join_segments(segments: list[str], extension: str = "") -> str:
    """Reassemble segments and an extension into a file name."""
    return SEPARATOR.join(segments) + extension


def concat(segments: list[str], skip: int, new_part: str, extension: str = "") -> str:
    """Insert `new_part` as a new segment after the first `skip` segments.

    Args:
        segments: Segments of the base name.
        skip: Number of leading segments to keep before the new part.
        new_part: Text of the inserted segment.
        extension: Extension appended to the result.

    Returns:
        The new file name.

    Raises:
        OperationError: If `skip` is negative or larger than the number of segments.
    """
    if skip < 0 or skip > len(segments):
        raise OperationError(f"cannot skip {skip} parts, only {len(segments)} present")

    start = SEPARATOR.join(segments[:skip])
    if start:
        start += SEPARATOR

    end = SEPARATOR.join(segments[skip:])
    if end:
        end = SEPARATOR + end

    return start + new_part + end + extension
