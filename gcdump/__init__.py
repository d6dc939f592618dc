from .gcode import Block, Word, GCodeParser, MalformedBlockError, parse_block

__version__ = '0.1.0'

__all__ = ['Block', 'Word', 'GCodeParser', 'MalformedBlockError', 'parse_block']
