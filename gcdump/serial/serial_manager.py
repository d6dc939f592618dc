import serial
import logging
from collections import OrderedDict
from threading import Lock
from serial.tools import list_ports

from .marlin_commands import MarlinCommands, ReplyKind, classify_reply

logger = logging.getLogger(__name__)

PROTOCOL_SIMPLE = 'simple'
PROTOCOL_FIVED = 'fived'
PROTOCOLS = (PROTOCOL_SIMPLE, PROTOCOL_FIVED)

DEFAULT_BAUDRATE = 19200
# readline timeouts in a row before giving up on an acknowledgment
MAX_SILENT_READS = 60
# resend requests for one line before the link is considered broken
MAX_RESENDS = 5


class DeviceError(Exception):
    """Error talking to the device"""


class HardwareFaultError(DeviceError):
    pass


class UncachedResendError(DeviceError):
    def __init__(self, line_number):
        self.line_number = line_number
        super().__init__(f"Device requested resend of line {line_number}, which is no longer cached")


def guess_port():
    """First serial port the system reports, or None"""
    ports = [p.device for p in list_ports.comports()]
    if not ports:
        return None
    logger.debug(f"Available serial ports: {ports}")
    return ports[0]


class SerialManager:
    def __init__(self, port=None, baudrate=DEFAULT_BAUDRATE, protocol=PROTOCOL_SIMPLE,
                 cache_size=32, max_unconfirmed=0, timeout=1, simulate=False,
                 on_send=None, on_receive=None):
        if protocol not in PROTOCOLS:
            raise ValueError(f"Unknown protocol: {protocol}")
        self.port = port
        self.baudrate = baudrate
        self.protocol = protocol
        self.cache_size = cache_size
        self.max_unconfirmed = max_unconfirmed
        self.timeout = timeout
        self.simulation_mode = simulate
        self.on_send = on_send
        self.on_receive = on_receive
        self.serial_conn = None
        self.lock = Lock()
        self.line_number = 0
        self.unconfirmed = 0
        self.sent_lines = OrderedDict()
        self.resend_counts = {}

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_connected(self):
        return self.simulation_mode or self.serial_conn is not None

    def connect(self):
        if self.simulation_mode:
            logger.info("Simulation mode - no device will be opened")
            return True
        try:
            self.serial_conn = serial.Serial(
                self.port,
                self.baudrate,
                timeout=self.timeout
            )
        except serial.SerialException as e:
            raise DeviceError(f"Error opening connection to machine on port {self.port}: {e}") from e
        logger.info(f"Serial connection established on {self.port} at {self.baudrate} baud")

        self.line_number = 0
        self.unconfirmed = 0
        self.sent_lines.clear()
        self.resend_counts.clear()
        if self.protocol == PROTOCOL_FIVED:
            self.send_line(MarlinCommands.RESET_LINE_NUMBERS, line_number=0)
        return True

    def close(self):
        """Close the serial connection"""
        if self.serial_conn:
            self.serial_conn.close()
            self.serial_conn = None
            logger.info("Serial connection closed")

    def send_line(self, text, line_number=None):
        """Send one line of G-code and wait for acknowledgments as needed"""
        with self.lock:
            if not self.is_connected:
                raise DeviceError("Serial connection not established")

            text = MarlinCommands.strip_comment(text)
            if not text:
                logger.debug("Skipping line with no command")
                return

            if self.protocol == PROTOCOL_FIVED:
                if line_number is None:
                    self.line_number += 1
                    line_number = self.line_number
                else:
                    self.line_number = line_number
                text = MarlinCommands.frame(line_number, text)
                self._cache(line_number, text)

            self._write(text)
            if self.simulation_mode:
                return

            self.unconfirmed += 1
            while self.unconfirmed > self.max_unconfirmed:
                self._handle_reply()

    def flush(self):
        """Wait until every sent line has been acknowledged"""
        with self.lock:
            if self.simulation_mode:
                return
            while self.unconfirmed > 0:
                self._handle_reply()

    def _resend_from(self, line_number):
        """Re-send a requested line and every line after it"""
        if line_number not in self.sent_lines:
            raise UncachedResendError(line_number)
        count = self.resend_counts.get(line_number, 0) + 1
        if count > MAX_RESENDS:
            raise DeviceError(f"Device rejected line {line_number} {MAX_RESENDS} times, giving up")
        self.resend_counts[line_number] = count
        for number in range(line_number, self.line_number + 1):
            text = self.sent_lines.get(number)
            if text is None:
                raise UncachedResendError(number)
            logger.info(f"Resending line {number}")
            self._write(text)
            self.unconfirmed += 1

    def _cache(self, line_number, text):
        self.sent_lines[line_number] = text
        self.sent_lines.move_to_end(line_number)
        while len(self.sent_lines) > self.cache_size:
            evicted, _ = self.sent_lines.popitem(last=False)
            self.resend_counts.pop(evicted, None)

    def _write(self, text):
        if self.on_send:
            self.on_send(text)
        if self.simulation_mode:
            logger.debug(f"Simulation mode - Command sent: {text}")
            return
        logger.debug(f"Sending: {text}")
        self.serial_conn.write(f"{text}\n".encode('ascii', errors='replace'))

    def _read_reply(self):
        for _ in range(MAX_SILENT_READS):
            raw = self.serial_conn.readline()
            if raw:
                return raw.decode('ascii', errors='replace').strip()
        raise DeviceError(f"No reply from device after {MAX_SILENT_READS} reads")

    def _handle_reply(self):
        reply = self._read_reply()
        logger.debug(f"Received: {reply}")
        if self.on_receive:
            self.on_receive(reply)

        kind, resend_line = classify_reply(reply)
        if kind == ReplyKind.OK:
            self.unconfirmed = max(0, self.unconfirmed - 1)
        elif kind == ReplyKind.RESEND:
            self._resend_from(resend_line)
        elif kind == ReplyKind.HARDWARE_FAULT:
            raise HardwareFaultError(f"Hardware fault: {reply}")
        elif kind == ReplyKind.ERROR:
            logger.error(f"Device reported: {reply}")
        elif kind == ReplyKind.UNKNOWN:
            logger.warning(f"Received an unknown reply from the device: {reply}")
        return kind
