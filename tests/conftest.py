"""Shared fixtures: a scripted stand-in for a pyserial port."""

import pytest

from gcdump.serial import serial_manager


class FakeSerial:
    """Records writes and answers each one through a responder.

    The responder gets the decoded line (without newline) and returns the
    reply lines to queue; by default every line is acknowledged with "ok".
    """

    def __init__(self, port, baudrate, timeout=None, responder=None):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.responder = responder or (lambda line: ["ok"])
        self.written = []
        self.pending = []
        self.reads = 0
        self.closed = False

    def write(self, data):
        line = data.decode('ascii').rstrip('\n')
        self.written.append(line)
        self.pending.extend(self.responder(line))
        return len(data)

    def readline(self):
        self.reads += 1
        if not self.pending:
            return b''
        return f"{self.pending.pop(0)}\n".encode('ascii')

    def close(self):
        self.closed = True


@pytest.fixture
def fake_serial(monkeypatch):
    """Patch serial.Serial; returns a holder exposing the opened port.

    Set `holder.responder` before connecting to script replies.
    """

    class Holder:
        responder = None
        port = None

    holder = Holder()

    def factory(port, baudrate, timeout=None):
        holder.port = FakeSerial(port, baudrate, timeout, responder=holder.responder)
        return holder.port

    monkeypatch.setattr(serial_manager.serial, 'Serial', factory)
    return holder


def _marlin_reply(line):
    command = line.split(';', 1)[0].strip()
    if not command:
        return []
    if command.startswith('N') and '*' not in command:
        number = command[1:].split()[0]
        return ["Error:No Checksum with line number, Last Line: 0", f"Resend: {number}", "ok"]
    return ["ok"]


@pytest.fixture
def marlin_responder():
    """Answers like Marlin: comments are dropped, an empty command gets no
    reply, and a numbered line without a checksum is asked for again."""
    return _marlin_reply
