# -*- coding: utf-8 -*-
"""
Best-effort decoding of a JSON document that is still being streamed.

The model response arrives token by token, so at any tick the buffer is a
prefix of the final document. ``decode_partial`` closes whatever is open at
the point of truncation:

- a complete document (optionally followed by trailing text) decodes exactly
- an unterminated string is closed where the buffer ends; a cut-off escape
  sequence is dropped
- an unterminated array or object keeps the elements/members parsed so far
- an object member is dropped until its key is complete and its value has
  started; a number or literal touching the end of the buffer is dropped
  because it may still grow ("12" -> "123", "tr" -> "true")
- an empty buffer, leading prose before any ``{`` or ``[``, or content that is
  malformed rather than truncated decodes to ``None`` ("no data yet")

Because only values that can still change are left partial (strings and
containers) or dropped (numbers, literals, member keys), a scalar that decoded
completely from one prefix decodes to the same value from every longer prefix.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from .logger_config import logger

_MISSING = object()

_WHITESPACE = " \t\n\r"
_CODE_FENCE_RE = re.compile(r"^```(?:json|JSON)?[ \t]*\r?\n?")
_STRING_RUN_RE = re.compile(r'[^"\\]+')
_NUMBER_RUN_RE = re.compile(r"[-+0-9.eE]+")
_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][-+]?[0-9]+)?")
_LITERALS = (("true", True), ("false", False), ("null", None))
_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class _MalformedJSON(ValueError):
    """Raised when the buffer is invalid at a position before its end."""

    def __init__(self, message: str, pos: int):
        super().__init__(f"{message} at position {pos}")
        self.pos = pos


class _PartialParser:
    """Recursive-descent parser that reports truncation instead of failing.

    Every ``_parse_*`` method returns ``(value, closed)``. ``closed`` is False
    once the end of the buffer was reached inside the value, at which point
    every enclosing container stops parsing and closes itself. ``value`` is
    ``_MISSING`` when nothing usable was parsed.
    """

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.pos = 0

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _at_end(self) -> bool:
        return self.pos >= self.length

    def parse_value(self) -> Tuple[Any, bool]:
        self._skip_whitespace()
        if self._at_end():
            return _MISSING, False

        ch = self.text[self.pos]
        if ch == "{":
            return self._parse_object()
        if ch == "[":
            return self._parse_array()
        if ch == '"':
            return self._parse_string()
        if ch == "-" or ch.isdigit():
            return self._parse_number()
        if ch in "tfn":
            return self._parse_literal()
        raise _MalformedJSON(f"Unexpected character {ch!r}", self.pos)

    def _parse_object(self) -> Tuple[Dict[str, Any], bool]:
        self.pos += 1  # consume "{"
        result: Dict[str, Any] = {}
        first = True
        while True:
            self._skip_whitespace()
            if self._at_end():
                return result, False
            if self.text[self.pos] == "}":
                self.pos += 1
                return result, True

            if not first:
                if self.text[self.pos] != ",":
                    raise _MalformedJSON("Expected ',' or '}'", self.pos)
                self.pos += 1
                self._skip_whitespace()
                if self._at_end():
                    return result, False
                if self.text[self.pos] == "}":
                    continue

            if self.text[self.pos] != '"':
                raise _MalformedJSON("Expected object key", self.pos)
            key, closed = self._parse_string()
            if not closed:
                return result, False

            self._skip_whitespace()
            if self._at_end():
                return result, False
            if self.text[self.pos] != ":":
                raise _MalformedJSON("Expected ':'", self.pos)
            self.pos += 1

            value, closed = self.parse_value()
            if value is not _MISSING:
                result[key] = value
            if not closed:
                return result, False
            first = False

    def _parse_array(self) -> Tuple[List[Any], bool]:
        self.pos += 1  # consume "["
        result: List[Any] = []
        first = True
        while True:
            self._skip_whitespace()
            if self._at_end():
                return result, False
            if self.text[self.pos] == "]":
                self.pos += 1
                return result, True

            if not first:
                if self.text[self.pos] != ",":
                    raise _MalformedJSON("Expected ',' or ']'", self.pos)
                self.pos += 1
                self._skip_whitespace()
                if self._at_end():
                    return result, False
                if self.text[self.pos] == "]":
                    continue

            value, closed = self.parse_value()
            if value is not _MISSING:
                result.append(value)
            if not closed:
                return result, False
            first = False

    def _parse_string(self) -> Tuple[str, bool]:
        self.pos += 1  # consume opening quote
        parts: List[str] = []
        text = self.text
        while self.pos < self.length:
            run = _STRING_RUN_RE.match(text, self.pos)
            if run:
                parts.append(run.group())
                self.pos = run.end()
                continue

            ch = text[self.pos]
            if ch == '"':
                self.pos += 1
                return "".join(parts), True

            # Backslash escape
            if self.pos + 1 >= self.length:
                self.pos = self.length
                return "".join(parts), False
            esc = text[self.pos + 1]
            if esc in _SIMPLE_ESCAPES:
                parts.append(_SIMPLE_ESCAPES[esc])
                self.pos += 2
                continue
            if esc != "u":
                raise _MalformedJSON(f"Invalid escape \\{esc}", self.pos)

            code = self._read_unicode_escape(self.pos)
            if code is None:
                self.pos = self.length
                return "".join(parts), False
            self.pos += 6
            if 0xD800 <= code <= 0xDBFF and text.startswith("\\u", self.pos):
                low = self._read_unicode_escape(self.pos)
                if low is None:
                    self.pos = self.length
                    return "".join(parts), False
                if 0xDC00 <= low <= 0xDFFF:
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    self.pos += 6
            elif 0xD800 <= code <= 0xDBFF and text[self.pos :] in ("", "\\"):
                # The low surrogate has not arrived yet
                self.pos = self.length
                return "".join(parts), False
            parts.append(chr(code))

        return "".join(parts), False

    def _read_unicode_escape(self, start: int) -> Optional[int]:
        """Return the code point of ``\\uXXXX`` at ``start``, or None if cut off."""
        digits = self.text[start + 2 : start + 6]
        if len(digits) < 4:
            if all(c in "0123456789abcdefABCDEF" for c in digits):
                return None
            raise _MalformedJSON("Invalid \\u escape", start)
        try:
            return int(digits, 16)
        except ValueError:
            raise _MalformedJSON("Invalid \\u escape", start) from None

    def _parse_number(self) -> Tuple[Any, bool]:
        run = _NUMBER_RUN_RE.match(self.text, self.pos)
        end = run.end() if run else self.pos
        if end >= self.length:
            self.pos = self.length
            return _MISSING, False

        literal = self.text[self.pos : end]
        if not _NUMBER_RE.fullmatch(literal):
            raise _MalformedJSON(f"Invalid number {literal!r}", self.pos)
        self.pos = end
        return json.loads(literal), True

    def _parse_literal(self) -> Tuple[Any, bool]:
        remaining = self.text[self.pos : self.pos + 5]
        for word, value in _LITERALS:
            if remaining.startswith(word):
                self.pos += len(word)
                return value, True
            if self.pos + len(remaining) >= self.length and word.startswith(remaining):
                self.pos = self.length
                return _MISSING, False
        raise _MalformedJSON(f"Invalid literal {remaining!r}", self.pos)


def strip_code_fence(text: str) -> str:
    """Drop surrounding whitespace and a leading markdown code fence."""
    stripped = text.lstrip()
    match = _CODE_FENCE_RE.match(stripped)
    if match:
        stripped = stripped[match.end() :].lstrip()
    return stripped


def decode_partial(text: Optional[str]) -> Any:
    """Decode a possibly truncated JSON buffer into a best-effort value.

    Args:
        text: The accumulated buffer (any prefix of a JSON document).

    Returns:
        The decoded value, or None when the buffer holds no usable data yet.
    """
    if not text:
        return None

    candidate = strip_code_fence(text)
    if not candidate:
        return None

    try:
        try:
            value, _ = json.JSONDecoder().raw_decode(candidate)
            return value
        except json.JSONDecodeError:
            pass

        if candidate[0] not in "{[":
            return None

        value, _ = _PartialParser(candidate).parse_value()
    except _MalformedJSON as e:
        logger.debug(f"[PartialJSON] Buffer is not recoverable yet: {e}")
        return None
    except RecursionError:
        logger.debug("[PartialJSON] Buffer nests deeper than the recursion limit")
        return None

    if value is _MISSING:
        return None
    return value
