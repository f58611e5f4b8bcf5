"""Stateless file name transformations.

Each operation takes a file name without its directory and returns the new
file name. Precondition violations raise `OperationError`; the batch driver
logs them and moves on to the next file.

Most operations work on "descriptions": dash-prefixed segments made of an
optional number and a label, such as `-13ffc` in `movie-13ffc.mp4`.
"""

import re
from datetime import datetime

from ffr.errors import OperationError
from ffr.log import RunLog
from ffr.models.file_name import SEPARATOR
from ffr.processors.path_splitter import concat, split_extension, split_file_name


DEFAULT_DELETE_PATTERN = r"-\d+[a-z]+"
DEFAULT_ADD_NUMBER_PATTERN = r"-(\d+)[a-z]+"
DEFAULT_INSERT_PATTERN = r"\d+[a-z]+"

# Labels used by insert-dimensions for common resolutions
WELL_KNOWN_DIMENSIONS = {
    "7680x4320": "8k-4320p",
    "3840x2160": "4k-2160p",
    "2048x1080": "2k-1080p",
    "2560x1440": "qhd-1440p",
    "1920x1080": "fullhd-1080p",
    "1280x720": "hd-720p",
    "960x540": "ed-540p",
    "640x480": "sd-480p",
}

# Long form is tried first, the short form only when it finds nothing
DATE_PATTERNS = [
    (re.compile(r"20\d{6}"), "%Y%m%d"),
    (re.compile(r"\d{6}"), "%y%m%d"),
]
DATE_PREFIX_FORMAT = "%Y.%m.%d"

_INTEGER = re.compile(r"[+-]?\d+")


def _log(log: RunLog | None, message: str) -> None:
    if log is not None:
        log.log(message)


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a user supplied regular expression.

    Raises:
        OperationError: If the expression is malformed.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise OperationError(f"invalid regular expression {pattern!r}: {e}") from e


def _group_text(match: re.Match, group: int) -> str:
    try:
        text = match.group(group)
    except IndexError as e:
        raise OperationError(f"regular expression has no group {group}") from e
    return text or ""


def _select_matches(matches: list[re.Match], skip_finds: int, max_count: int) -> list[re.Match]:
    """Skip the first `skip_finds` matches and keep at most `max_count` (0 = all) of the rest."""
    if skip_finds < 0 or skip_finds > len(matches):
        raise OperationError(f"cannot skip {skip_finds} finds, only {len(matches)} found")

    selected = matches[skip_finds:]
    if max_count > 0:
        selected = selected[:max_count]
    return selected


def _parse_int(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise OperationError(f"not a number: {text!r}")
    return int(text)


def prefix(file_name: str, new_part: str, skip: int = 0) -> str:
    """Insert `new_part` as a segment after the first `skip` segments (0 prepends)."""
    name = split_file_name(file_name)
    return concat(name.segments, skip, new_part, name.extension)


def suffix(file_name: str, new_part: str, skip: int = 0) -> str:
    """Insert `new_part` as a segment before the last `skip` segments (0 appends)."""
    name = split_file_name(file_name)
    if skip < 0 or skip > len(name.segments):
        raise OperationError(
            f"more to skip than parts present. file: {name.base_path!r}, skip: {skip}, parts: {len(name.segments)}"
        )

    return concat(name.segments, len(name.segments) - skip, new_part, name.extension)


def replace(file_name: str, search: str, replace_with: str, skip: int = 0, log: RunLog | None = None) -> str:
    """Replace one occurrence of `search` in the base name.

    The first `skip` occurrences are left untouched. A base name that does not
    contain `search` is returned unchanged.
    """
    if not search:
        raise OperationError("search text must not be empty")

    base_path, extension = split_extension(file_name)
    chunks = base_path.split(search)
    occurrences = len(chunks) - 1
    if occurrences == 0:
        _log(log, f"{search!r} not found in {base_path!r}")
        return file_name

    if skip < 0 or skip >= occurrences:
        raise OperationError(
            f"more to skip than found occurrences. file: {base_path!r}, skip: {skip}, found: {occurrences}"
        )

    start = search.join(chunks[: skip + 1])
    end = search.join(chunks[skip + 1 :])
    new_name = start + replace_with + end + extension
    _log(log, f"{file_name!r} -> {new_name!r}, search: {search!r}, replace with: {replace_with!r}")

    return new_name


def delete_parts(file_name: str, parts: list[int], from_back: bool = False) -> str:
    """Drop segments by their 1-based position, counted from the back if `from_back`.

    Positions outside the segment list are ignored.
    """
    name = split_file_name(file_name)
    count = len(name.segments)
    to_delete = {count - part if from_back else part - 1 for part in parts}

    kept = [segment for i, segment in enumerate(name.segments) if i not in to_delete]
    return SEPARATOR.join(kept) + name.extension


def delete_regexp(
    file_name: str,
    pattern: str = "",
    group: int = 0,
    skip_finds: int = 0,
    max_count: int = 0,
    log: RunLog | None = None,
) -> str:
    """Remove the text of regular expression matches from the base name.

    Args:
        file_name: File name to transform.
        pattern: Regular expression, defaults to a dash-prefixed description.
        group: Group whose text is removed for each match.
        skip_finds: Number of leading matches left untouched.
        max_count: Maximum number of matches removed, 0 for all.
        log: Optional run log for match details.

    Raises:
        OperationError: If the expression is invalid or nothing matches.
    """
    base_path, extension = split_extension(file_name)
    regex = compile_pattern(pattern or DEFAULT_DELETE_PATTERN)

    matches = list(regex.finditer(base_path))
    _log(log, f"base path: {base_path}")
    _log(log, f"matches: {[m.group(0) for m in matches]}")
    if not matches:
        raise OperationError("no matches")

    for match in _select_matches(matches, skip_finds, max_count):
        base_path = base_path.replace(_group_text(match, group), "", 1)

    return base_path + extension


def add_number(
    file_name: str,
    number_to_add: int,
    pattern: str = "",
    group: int = 0,
    skip_finds: int = 0,
    max_count: int = 0,
    log: RunLog | None = None,
) -> str:
    """Add `number_to_add` to numbers found by a regular expression.

    With the default pattern the number of every description is changed and
    `group` is forced to 1. For a custom pattern, `group` selects the capture
    holding the number.

    Substitution is textual: the first occurrence of the old number inside the
    match is replaced, then the first occurrence of the match inside the base
    name is replaced by the result.

    Raises:
        OperationError: If the expression is invalid, nothing matches or the
            captured text is not a number.
    """
    base_path, extension = split_extension(file_name)
    if not pattern:
        pattern = DEFAULT_ADD_NUMBER_PATTERN
        group = 1
    regex = compile_pattern(pattern)

    matches = list(regex.finditer(base_path))
    _log(log, f"base path: {base_path}")
    _log(log, f"matches: {[m.group(0) for m in matches]}")
    if not matches:
        raise OperationError("no matches")

    for match in _select_matches(matches, skip_finds, max_count):
        found = _parse_int(_group_text(match, group))
        old_number = str(found)
        new_number = str(found + number_to_add)

        replacement = match.group(0).replace(old_number, new_number, 1)
        base_path = base_path.replace(match.group(0), replacement, 1)

    return base_path + extension


def insert_before(
    file_name: str,
    insert_text: str,
    pattern: str = "",
    skip_dash_prefix: bool = False,
    skip_duplicate: bool = False,
    log: RunLog | None = None,
) -> str:
    """Insert `insert_text` as a segment before the last match of `pattern`.

    The pattern defaults to a description (`\\d+[a-z]+`) and is prefixed with a
    dash unless `skip_dash_prefix` is set. Without a match the text is appended
    as a new last segment.
    """
    if skip_duplicate and insert_text in file_name:
        _log(log, f"skipping as duplicate is found. needle: {insert_text!r}, haystack: {file_name!r}")
        return file_name

    base_path, extension = split_extension(file_name)

    pattern = "(" + (pattern or DEFAULT_INSERT_PATTERN) + ")"
    if not skip_dash_prefix:
        pattern = SEPARATOR + pattern
    matches = list(compile_pattern(pattern).finditer(base_path))

    if not matches:
        new_name = base_path + SEPARATOR + insert_text + extension
        _log(log, f"{file_name!r} -> {new_name!r}, no match found")
        return new_name

    last = matches[-1].group(1)
    new_name = base_path.replace(last, insert_text + SEPARATOR + last, 1) + extension
    _log(log, f"{file_name!r} -> {new_name!r}, found: {last!r}")

    return new_name


def dimensions_label(dimensions: str) -> str:
    """Map well-known resolutions such as `1920x1080` to a label, others pass through."""
    return WELL_KNOWN_DIMENSIONS.get(dimensions, dimensions)


def insert_dimensions_before(
    file_name: str,
    dimensions: str,
    pattern: str = "",
    skip_dash_prefix: bool = False,
    skip_duplicate: bool = False,
    log: RunLog | None = None,
) -> str:
    """Insert the (labelled) video dimensions before the last description."""
    return insert_before(
        file_name,
        dimensions_label(dimensions),
        pattern=pattern,
        skip_dash_prefix=skip_dash_prefix,
        skip_duplicate=skip_duplicate,
        log=log,
    )


def prefix_date(file_name: str, log: RunLog | None = None) -> str:
    """Prefix the file name with the date found in it, formatted as `YYYY.MM.DD`.

    Raises:
        OperationError: If no date, more than one date or an invalid date is found.
    """
    base_path, extension = split_extension(file_name)

    matches: list[str] = []
    date_format = ""
    for regex, date_format in DATE_PATTERNS:
        matches = regex.findall(base_path)
        _log(log, f"base path: {base_path}, matches: {matches}")
        if matches:
            break

    if not matches:
        raise OperationError("no matches")
    if len(matches) > 1:
        raise OperationError("too many matches")

    try:
        parsed = datetime.strptime(matches[0], date_format)
    except ValueError as e:
        raise OperationError(f"failed to parse date {matches[0]!r}: {e}") from e

    return parsed.strftime(DATE_PREFIX_FORMAT) + SEPARATOR + base_path + extension
