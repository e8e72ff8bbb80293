"""Low-level text scanning for Notion API JSON responses.

Provides the primitives every extractor is built on: brace matching,
quoted-key lookup and string-value reading. All functions work directly on
the raw response text using offsets and never build a parse tree.

Known limitation: with the default ``skip_strings=False`` the brace matcher
counts braces inside string values too, and ``locate_key`` will match a key
literal that happens to appear inside an unrelated string value. Notion
payloads rarely put such characters next to the scanned keys, but callers
handling arbitrary user text should pass ``skip_strings=True``.
"""

import json
import logging
from typing import Iterator

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}

_decoder = json.JSONDecoder(strict=False)


def find_matching_brace(text: str, open_pos: int, *, skip_strings: bool = False) -> int | None:
    """Find the position of the closing brace matching the one at open_pos.

    Works for ``{``/``}`` and ``[``/``]`` pairs, picked from the character
    at ``open_pos``.

    Args:
        text: Raw JSON text.
        open_pos: Offset of the opening ``{`` or ``[``.
        skip_strings: Ignore brackets inside quoted string literals.

    Returns:
        Offset of the matching close, or None if the text ends first
        (truncated input) or open_pos is not an opening bracket.
    """
    if open_pos < 0 or open_pos >= len(text):
        return None
    opener = text[open_pos]
    closer = _CLOSERS.get(opener)
    if closer is None:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(open_pos, len(text)):
        char = text[i]
        if skip_strings:
            if escaped:
                escaped = False
                continue
            if in_string:
                if char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
                continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return i
    return None


def locate_key(text: str, key: str, start: int = 0) -> int | None:
    """Find the next occurrence of a quoted key at or after start.

    Args:
        text: Raw JSON text.
        key: Key name without quotes (e.g. "Name").
        start: Offset to start searching from.

    Returns:
        Offset of the opening quote of the key, or None.
    """
    pos = text.find(f'"{key}"', max(start, 0))
    return pos if pos >= 0 else None


def locate_key_within(text: str, key: str, anchor: int, max_distance: int) -> int | None:
    """Find a quoted key no further than max_distance past anchor.

    A hit beyond the window is treated as absent even when it exists, so a
    lookup never reads a same-named key from a later sibling block.
    """
    pos = locate_key(text, key, anchor)
    if pos is None or pos - anchor > max_distance:
        return None
    return pos


def skip_whitespace(text: str, pos: int) -> int:
    """Return the first offset at or after pos that is not whitespace."""
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def value_start(text: str, key_pos: int, key: str) -> int | None:
    """Find where the value of the key found at key_pos begins.

    Skips the quoted key and the first colon after it.

    Returns:
        Offset of the first non-whitespace character of the value, or None.
    """
    colon = text.find(":", key_pos + len(key) + 2)
    if colon < 0:
        return None
    pos = skip_whitespace(text, colon + 1)
    return pos if pos < len(text) else None


def find_string_end(text: str, quote_pos: int) -> int | None:
    """Find the closing quote of the string literal opened at quote_pos.

    Backslash escapes are honoured, so ``\\"`` does not end the string.
    """
    i = quote_pos + 1
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            return i
        i += 1
    return None


def unescape_json_string(raw: str) -> str:
    """Decode JSON escape sequences in the body of a string literal.

    Handles the standard escapes (``\\"``, ``\\\\``, ``\\n``, ``\\uXXXX`` ...).
    Malformed escapes leave the raw text unchanged.
    """
    if "\\" not in raw:
        return raw
    try:
        return _decoder.decode(f'"{raw}"')
    except ValueError:
        logger.debug(f"Could not unescape string, keeping raw text: {raw[:50]!r}")
        return raw


def read_string_at(text: str, pos: int) -> str | None:
    """Read the string literal starting at pos, or None if there is none."""
    if pos >= len(text) or text[pos] != '"':
        return None
    end = find_string_end(text, pos)
    if end is None:
        return None
    return unescape_json_string(text[pos + 1:end])


def extract_string_value(text: str, key: str, start: int = 0) -> str | None:
    """Extract the string value following the first occurrence of key.

    Example:
        >>> extract_string_value('{"id":"abc-123"}', "id")
        'abc-123'

    Args:
        text: Raw JSON text.
        key: Key name without quotes.
        start: Offset to start searching for the key.

    Returns:
        The decoded string, or None if the key is missing, the value is not
        a string (null, number, object) or the string is unterminated.
    """
    key_pos = locate_key(text, key, start)
    if key_pos is None:
        return None
    pos = value_start(text, key_pos, key)
    if pos is None:
        return None
    return read_string_at(text, pos)


def iter_string_values(text: str, key: str, start: int = 0, end: int | None = None) -> Iterator[str]:
    """Yield every string value of key between start and end, in order.

    Non-string values are skipped.
    """
    segment = text[start:end]
    pos = 0
    while True:
        key_pos = locate_key(segment, key, pos)
        if key_pos is None:
            return
        value_pos = value_start(segment, key_pos, key)
        if value_pos is not None:
            value = read_string_at(segment, value_pos)
            if value is not None:
                yield value
        pos = key_pos + len(key) + 2


def find_key_value(text: str, key: str, value: str, start: int = 0) -> int | None:
    """Find ``"key":"value"`` allowing whitespace around the colon.

    Returns:
        Offset of the key's opening quote, or None.
    """
    pos = start
    while True:
        key_pos = locate_key(text, key, pos)
        if key_pos is None:
            return None
        colon = skip_whitespace(text, key_pos + len(key) + 2)
        if colon < len(text) and text[colon] == ":":
            if text.startswith(f'"{value}"', skip_whitespace(text, colon + 1)):
                return key_pos
        pos = key_pos + 1
