from .gcode_block import Block, Word
from .gcode_parser import GCodeParser, GCodeParseError, MalformedBlockError, next_dark, parse_block
from .gcode_manager import GCodeManager

__all__ = ['Block', 'Word', 'GCodeParser', 'GCodeParseError', 'MalformedBlockError',
           'next_dark', 'parse_block', 'GCodeManager']
