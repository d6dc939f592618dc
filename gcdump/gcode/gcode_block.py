from decimal import Decimal

INTEGER_LETTERS = ('G', 'M')


def format_value(value):
    """Shortest text that reads back as the same value, never in exponent form"""
    if isinstance(value, int):
        return str(value)
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text == '-0':
        return '0'
    return text


class Word:
    def __init__(self, letter, value):
        self.letter = letter
        self.value = value

    def to_gcode(self):
        return f"{self.letter}{format_value(self.value)}"

    def __eq__(self, other):
        if not isinstance(other, Word):
            return NotImplemented
        return (self.letter == other.letter
                and type(self.value) is type(other.value)
                and self.value == other.value)

    def __repr__(self):
        return f"Word({self.letter!r}, {self.value!r})"


class Block:
    """One parsed line of G-code.

    `next` is left for callers that chain blocks together; the parser
    never touches it and it is ignored when comparing blocks.
    """

    def __init__(self, delete_flag=False, line_number=0, words=None):
        self.delete_flag = delete_flag
        self.line_number = line_number
        self.words = words if words is not None else []
        self.next = None

    def to_gcode(self):
        parts = []
        if self.line_number:
            parts.append(f"N{self.line_number}")
        parts.extend(word.to_gcode() for word in self.words)
        text = ' '.join(parts)
        return '/' + text if self.delete_flag else text

    def to_dict(self):
        return {
            "delete": self.delete_flag,
            "line": self.line_number,
            "words": [[word.letter, word.value] for word in self.words]
        }

    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return (self.delete_flag == other.delete_flag
                and self.line_number == other.line_number
                and self.words == other.words)

    def __len__(self):
        return len(self.words)

    def __iter__(self):
        return iter(self.words)

    def __repr__(self):
        return (f"Block(delete_flag={self.delete_flag!r}, "
                f"line_number={self.line_number!r}, words={self.words!r})")
