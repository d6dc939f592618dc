import logging
import sys
from pathlib import Path

from .gcode_parser import parse_block, MalformedBlockError

logger = logging.getLogger(__name__)

STDIN_PATH = '-'
COMMENT_MARKER = b';'


class GCodeManager:
    """Reads G-code lines from a file or standard input"""

    def __init__(self, source=STDIN_PATH):
        self.source = source
        self.stream = None
        self.current_line_number = 0
        self.malformed_count = 0
        self._owns_stream = False

    @property
    def is_stdin(self):
        return str(self.source) == STDIN_PATH

    def open(self):
        if self.stream is not None:
            return self
        if self.is_stdin:
            self.stream = sys.stdin.buffer
            self._owns_stream = False
            logger.info("Reading G-code from standard input")
        else:
            path = Path(self.source)
            self.stream = open(path, 'rb')
            self._owns_stream = True
            logger.info(f"Reading G-code from {path}")
        self.current_line_number = 0
        self.malformed_count = 0
        return self

    def close(self):
        if self.stream is not None and self._owns_stream:
            self.stream.close()
        self.stream = None
        self._owns_stream = False

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def lines(self):
        """Yield (raw_line, block) for each line that carries a command.

        Blank and comment-only lines are skipped. The block is parsed from
        the text before any `;` comment and is None when that text could
        not be parsed; raw_line is the whole line.
        """
        if self.stream is None:
            self.open()

        for raw in self.stream:
            self.current_line_number += 1
            raw = raw.rstrip(b'\r\n')
            command = raw.split(COMMENT_MARKER, 1)[0]
            try:
                block = parse_block(command)
            except MalformedBlockError as e:
                self.malformed_count += 1
                logger.warning(f"Line {self.current_line_number}: {e}")
                yield raw.decode('utf-8', errors='replace'), None
                continue

            if block is None:
                continue
            yield raw.decode('utf-8', errors='replace'), block

    @property
    def progress(self):
        return self.current_line_number
