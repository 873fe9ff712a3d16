import logging

from ringscan.errors import FragmentTooLargeError

logger = logging.getLogger(__name__)

DEFAULT_MAX_FRAGMENT_CHARS = 64 * 1024 * 1024


class FragmentGuard:
    """Bound the size of a pending fragment so malformed input cannot eat the whole file."""

    def __init__(self, max_chars=DEFAULT_MAX_FRAGMENT_CHARS, threshold_percent=80):
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self.max_chars = max_chars
        self.threshold_percent = threshold_percent
        self._warned = False

    def get_usage(self, size):
        """Return fragment size as a percentage of the bound."""
        return (size / self.max_chars) * 100

    def check(self, size, line_number=None):
        """Raise FragmentTooLargeError once ``size`` passes the bound; warn once near it."""
        if size > self.max_chars:
            logger.error(f"Fragment reached {size} characters (limit {self.max_chars})")
            raise FragmentTooLargeError(size, self.max_chars, line_number)

        if not self._warned and self.get_usage(size) >= self.threshold_percent:
            self._warned = True
            logger.warning(
                f"Fragment size ({self.get_usage(size):.1f}% of {self.max_chars} characters) "
                f"exceeds threshold ({self.threshold_percent}%) near line {line_number}"
            )

    def reset(self):
        """Re-arm the warning after a fragment completes."""
        self._warned = False
