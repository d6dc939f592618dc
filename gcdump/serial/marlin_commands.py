import re
from enum import Enum


class MarlinCommands:
    # sent as "N0 M110" so the next line is N1
    RESET_LINE_NUMBERS = "M110"

    @staticmethod
    def checksum(text):
        """XOR of every byte in the line, as RepRap firmware expects"""
        value = 0
        for byte in text.encode('ascii', errors='replace'):
            value ^= byte
        return value

    @staticmethod
    def strip_comment(text):
        """Command text without its `;` comment, which firmware discards"""
        return text.split(';', 1)[0].strip()

    @staticmethod
    def frame(line_number, text):
        body = f"N{line_number} {text}"
        return f"{body}*{MarlinCommands.checksum(body)}"


class ReplyKind(Enum):
    OK = "ok"
    RESEND = "resend"
    HARDWARE_FAULT = "hardware_fault"
    ERROR = "error"
    INFO = "info"
    UNKNOWN = "unknown"


class MarlinResponses:
    OK = "ok"
    ERROR = "error:"
    HARDWARE_FAULT = "!!"
    INFO_PREFIXES = ("t:", "echo:", "start", "//", "wait", "busy:")


RESEND_PATTERN = re.compile(r'^(?:rs|resend:?)\s*N?:?\s*(\d+)', re.IGNORECASE)


def classify_reply(text):
    """Return (ReplyKind, resend line number or None) for a device reply"""
    reply = text.strip()
    lowered = reply.lower()

    match = RESEND_PATTERN.match(reply)
    if match:
        return ReplyKind.RESEND, int(match.group(1))
    if lowered.startswith(MarlinResponses.OK):
        return ReplyKind.OK, None
    if lowered.startswith(MarlinResponses.HARDWARE_FAULT):
        return ReplyKind.HARDWARE_FAULT, None
    if lowered.startswith(MarlinResponses.ERROR):
        return ReplyKind.ERROR, None
    if not reply or lowered.startswith(MarlinResponses.INFO_PREFIXES):
        return ReplyKind.INFO, None
    return ReplyKind.UNKNOWN, None
