#!/usr/bin/env python3
"""Line-oriented view of a large text file."""
import logging, pathlib
from typing import Iterator, Union

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2 * 1024 * 1024


class LineSource:
    """Iterate the lines of ``path`` through a large read buffer.

    Every iteration reopens the file, so the source can be restarted from the
    beginning but not resumed mid-stream. Line terminators are stripped.
    """

    def __init__(self, path: Union[str, pathlib.Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.path = pathlib.Path(path)
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[str]:
        with open(self.path, 'r', encoding='utf-8-sig', buffering=self.chunk_size) as f:
            for line in f:
                yield line.rstrip('\r\n')

    def sniff_structure(self) -> str:
        """Return 'array', 'object', or 'unknown'."""
        try:
            with open(self.path, 'rb') as f:
                while True:
                    ch = f.read(1)
                    if not ch:
                        return 'unknown'
                    if ch == b'\xef':
                        # UTF-8 byte order mark
                        f.read(2)
                        continue
                    if not ch.isspace():
                        if ch == b'[':
                            return 'array'
                        if ch == b'{':
                            return 'object'
                        return 'unknown'
        except OSError as e:
            logger.error(f"detect structure failed: {e}")
            return 'unknown'
