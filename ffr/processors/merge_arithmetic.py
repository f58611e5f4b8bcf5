"""Merge chained descriptions by summing their numbers.

A file cut several times collects descriptions such as `movie-1bar-2baz.mp4`.
Merging keeps the labels and adds the numbers up: `movie-3bar-baz.mp4`.
"""

from ffr.errors import OperationError
from ffr.log import RunLog
from ffr.processors.path_splitter import split_extension
from ffr.processors.rename_operations import compile_pattern


DEFAULT_LABEL_PATTERN = "[a-z]+"


def label_group(pattern: str = "") -> str:
    """Return the label expression wrapped in a single capture group.

    An expression without parentheses is wrapped, one that already carries a
    single pair is used as is.

    Raises:
        OperationError: If the expression contains more than one pair of parentheses.
    """
    if not pattern:
        return f"({DEFAULT_LABEL_PATTERN})"

    stripped = pattern.replace("(", "").replace(")", "")
    if len(stripped) < len(pattern) - 2:
        raise OperationError("wrong regular expression received")
    if len(stripped) == len(pattern):
        return f"({pattern})"
    return pattern


def description_pattern(pattern: str = "") -> str:
    """Build the expression matching a description and the descriptions chained to it.

    Group 1 holds the number, group 2 the label together with any following
    number-less descriptions.
    """
    return r"-(\d{1,2})(" + label_group(pattern) + r"(-[a-z]+\d*)*)"


def merge_parts(file_name: str, pattern: str = "", delete_text: str = "", log: RunLog | None = None) -> str:
    """Merge all descriptions of a file name into one.

    Matches are consumed from the right, each one trimmed off the end of the
    base name. Their numbers are summed and their labels kept in their
    original order. `delete_text` is removed once from the result.

    A file name without descriptions is returned unchanged.

    Args:
        file_name: File name to transform.
        pattern: Optional label expression, defaults to lowercase letters.
        delete_text: Text removed from the merged name.
        log: Optional run log for match details.

    Returns:
        The merged file name.
    """
    base_path, extension = split_extension(file_name)
    regex = compile_pattern(description_pattern(pattern))

    matches = list(regex.finditer(base_path))
    if not matches:
        if log is not None:
            log.log(f"no descriptions to merge in {file_name!r}")
        return file_name

    total = 0
    extra = [""] * len(matches)
    for i in range(len(matches) - 1, -1, -1):
        match = matches[i]
        base_path = base_path[: len(base_path) - len(match.group(0))]
        total += int(match.group(1))
        extra[i] = match.group(2)

        if log is not None:
            log.log(f"base: {base_path}, match: {match.group(0)!r}, sum: {total}, extra: {extra}")

    new_name = f"{base_path}-{total}{'-'.join(extra)}{extension}"
    if delete_text:
        new_name = new_name.replace(delete_text, "", 1)

    return new_name
