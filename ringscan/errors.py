"""Exception types raised while ingesting a galaxy dump."""


class RingscanError(Exception):
    """Base class for ingestion failures."""


class MalformedRecordError(RingscanError):
    """A complete array element could not be decoded as a JSON object."""

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class FragmentTooLargeError(RingscanError):
    """The fragment buffer grew past its configured bound."""

    def __init__(self, size, limit, line_number=None):
        where = f" at line {line_number}" if line_number is not None else ""
        super().__init__(
            f"fragment of {size} characters exceeds limit of {limit} characters{where}; "
            "input is probably malformed"
        )
        self.size = size
        self.limit = limit
        self.line_number = line_number
