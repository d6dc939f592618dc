import logging
import re

from .gcode_block import Block, Word, INTEGER_LETTERS

logger = logging.getLogger(__name__)

WHITESPACE = b' \t\r\n'

INTEGER_PATTERN = re.compile(rb'[+-]?[0-9]+')
FLOAT_PATTERN = re.compile(rb'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')

_INTEGER_CODES = frozenset(ord(c) for letter in INTEGER_LETTERS for c in (letter, letter.lower()))
_LINE_NUMBER_CODES = frozenset(b'Nn')


class GCodeParseError(Exception):
    """Base error for G-code parsing"""


class MalformedBlockError(GCodeParseError):
    """A line with a letter that has no usable number after it"""

    def __init__(self, message, offset=None):
        self.message = message
        self.offset = offset
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)


def next_dark(buffer, length, start):
    """Offset of the next non-whitespace byte, or `length` if none"""
    for i in range(start, length):
        if buffer[i] not in WHITESPACE:
            return i
    return length


def _as_buffer(buffer, length):
    if isinstance(buffer, str):
        buffer = buffer.encode('utf-8')
    elif isinstance(buffer, (bytearray, memoryview)):
        buffer = bytes(buffer)
    if length is None:
        length = len(buffer)
    if length < 0 or length > len(buffer):
        raise ValueError(f"length {length} outside buffer of {len(buffer)} bytes")
    return buffer, length


def parse_block(buffer, length=None):
    """Parse one line of G-code.

    Returns None when the first `length` bytes hold nothing but
    whitespace. Raises MalformedBlockError when a word letter is not
    followed by a number.
    """
    buffer, length = _as_buffer(buffer, length)

    i = next_dark(buffer, length, 0)
    if i == length:
        return None

    delete_flag = False
    line_number = 0
    words = []

    if buffer[i] == ord('/'):
        delete_flag = True
        i = next_dark(buffer, length, i + 1)

    if i < length and buffer[i] in _LINE_NUMBER_CODES and i + 1 < length:
        start = next_dark(buffer, length, i + 1)
        match = INTEGER_PATTERN.match(buffer, start, length)
        if match:
            line_number = int(match.group())
            i = next_dark(buffer, length, match.end())
        else:
            i = start

    while i < length:
        code = buffer[i]
        if not buffer[i:i + 1].isalpha():
            raise MalformedBlockError(f"Unexpected character {chr(code)!r}", i)
        letter = chr(code)

        i = next_dark(buffer, length, i + 1)
        if i == length:
            raise MalformedBlockError(f"Missing value for {letter}", i)

        if code in _INTEGER_CODES:
            match = INTEGER_PATTERN.match(buffer, i, length)
            convert = int
        else:
            match = FLOAT_PATTERN.match(buffer, i, length)
            convert = float
        if not match:
            raise MalformedBlockError(f"Invalid value for {letter}", i)

        words.append(Word(letter, convert(match.group())))
        i = next_dark(buffer, length, match.end())

    return Block(delete_flag, line_number, words)


class GCodeParser:
    def __init__(self):
        self.malformed_count = 0

    def parse_line(self, line, length=None):
        """Parse a line, returning None for blank or malformed input"""
        try:
            return parse_block(line, length)
        except MalformedBlockError as e:
            self.malformed_count += 1
            logger.debug(f"Could not parse {line!r}: {e}")
            return None
