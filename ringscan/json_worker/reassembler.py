#!/usr/bin/env python3
"""Rebuild the elements of a line-laid-out JSON array without loading the file."""
import json, logging, math, re
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ringscan.errors import MalformedRecordError
from ringscan.shared.fragment_guard import FragmentGuard

logger = logging.getLogger(__name__)

ARRAY_OPEN = '['
ARRAY_CLOSE = ']'

# characters that can change nesting depth or string state
_STRUCTURAL = re.compile(r'["\\{}\[\]]')
_SEPARATORS = re.compile(r'[\s,]*')


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"number {text} is out of range")
    return value


class ObjectReassembler:
    """Turn the lines of a dump into decoded top-level objects.

    The dump is expected to put ``[`` and ``]`` on lines of their own, with each
    element spread over one or more lines in between. Lines are appended to a
    fragment buffer and a depth counter that understands strings and escapes
    decides when the fragment holds a complete object. Only then is it decoded,
    so a decode failure always means malformed input and is raised.

    Fragment size is measured in characters and bounded by ``guard``.
    """

    OUTSIDE = 'outside-array'
    INSIDE = 'inside-array'
    DONE = 'done'

    def __init__(self, guard: Optional[FragmentGuard] = None):
        self.guard = guard if guard is not None else FragmentGuard()
        self.state = self.OUTSIDE
        self.line_number = 0
        self._parts: List[str] = []
        self._size = 0
        self._depth = 0
        self._in_string = False

    @property
    def pending(self) -> bool:
        """True while a fragment has been started but not completed."""
        return self._depth > 0

    @property
    def fragment(self) -> str:
        return ''.join(self._parts)

    def records(self, lines: Iterable[str]) -> Iterator[Dict[str, Any]]:
        """Yield every object of the array, stopping at its closing line."""
        for line in lines:
            yield from self.feed(line)
            if self.state == self.DONE:
                break

        if self.state == self.OUTSIDE:
            logger.warning("No array-open line found in %s lines of input", self.line_number)
        elif self.pending:
            logger.warning("Input ended inside an unfinished record at line %s; %s characters dropped",
                           self.line_number, self._size)

    def feed(self, line: str) -> Iterator[Dict[str, Any]]:
        """Consume one line; yields the objects it completes (usually zero or one)."""
        self.line_number += 1
        text = line.strip()
        if self.state != self.INSIDE:
            if self.state == self.OUTSIDE and text == ARRAY_OPEN:
                self.state = self.INSIDE
            return
        if not text:
            return

        if self._depth:
            # keep tokens on adjacent lines apart
            self._append(' ')
        elif text == ARRAY_CLOSE:
            self.state = self.DONE
            return

        yield from self._scan(text)

    def _scan(self, text: str) -> Iterator[Dict[str, Any]]:
        pos, end = 0, len(text)
        while pos < end:
            if not self._depth:
                pos = _SEPARATORS.match(text, pos).end()
                if pos == end:
                    return
                if text[pos] != '{':
                    raise MalformedRecordError(
                        f"expected an object, found {text[pos:pos + 20]!r}", self.line_number)

            closed = self._advance(text, pos)
            if closed < 0:
                self._append(text[pos:] if pos else text)
                return
            self._append(text[pos:closed])
            yield self._complete()
            pos = closed

    def _advance(self, text: str, pos: int) -> int:
        """Scan ``text`` from ``pos``; return the index after the closing brace, or -1."""
        depth = self._depth
        in_string = self._in_string
        skip = -1
        for match in _STRUCTURAL.finditer(text, pos):
            i = match.start()
            if i == skip:
                continue
            ch = text[i]
            if in_string:
                if ch == '"':
                    in_string = False
                elif ch == '\\':
                    skip = i + 1
            elif ch == '"':
                in_string = True
            elif ch == '{' or ch == '[':
                depth += 1
            elif ch == '}' or ch == ']':
                depth -= 1
                if not depth:
                    self._depth = 0
                    self._in_string = False
                    return i + 1
        self._depth = depth
        self._in_string = in_string
        return -1

    def _append(self, piece: str) -> None:
        self._parts.append(piece)
        self._size += len(piece)
        self.guard.check(self._size, self.line_number)

    def _complete(self) -> Dict[str, Any]:
        text = ''.join(self._parts)
        self._parts = []
        self._size = 0
        self.guard.reset()
        try:
            return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
        except json.JSONDecodeError as e:
            raise MalformedRecordError(f"invalid JSON: {e.msg} at char {e.pos}", self.line_number) from e
        except ValueError as e:
            raise MalformedRecordError(f"invalid JSON: {e}", self.line_number) from e
