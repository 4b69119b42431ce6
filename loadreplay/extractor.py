"""Request path extraction and filtering: pure functions over raw log lines."""

START_MARKER = '"GET '
END_MARKER = " HTTP/"


def extract_path(line: str) -> str | None:
    """Return the request path of a GET log line, or None if there is none.

    The path is the text between the first '"GET ' and the first ' HTTP/'
    that follows it, e.g. '127.0.0.1 - - [...] "GET /x HTTP/1.1" 200' -> '/x'.
    """
    start = line.find(START_MARKER)
    if start < 0:
        return None
    begin = start + len(START_MARKER)
    end = line.find(END_MARKER, begin)
    if end < 0:
        return None
    return line[begin:end]


def is_filtered(path: str, filters) -> bool:
    """Return True if any filter substring occurs anywhere in the path."""
    return any(f in path for f in filters)


def replayable_path(line: str, filters=()) -> str | None:
    """Extract the path and apply filters. None means nothing to replay."""
    path = extract_path(line)
    if path is None or is_filtered(path, filters):
        return None
    return path


def build_url(base_url: str, path: str) -> str:
    """Prefix the path with the base URL, verbatim."""
    return base_url + path
