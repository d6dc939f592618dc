from .serial_manager import (SerialManager, DeviceError, HardwareFaultError,
                             UncachedResendError, guess_port, PROTOCOL_SIMPLE, PROTOCOL_FIVED)
from .marlin_commands import MarlinCommands, ReplyKind, classify_reply

__all__ = ['SerialManager', 'DeviceError', 'HardwareFaultError', 'UncachedResendError',
           'guess_port', 'PROTOCOL_SIMPLE', 'PROTOCOL_FIVED',
           'MarlinCommands', 'ReplyKind', 'classify_reply']
