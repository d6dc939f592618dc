import argparse
import logging
import sys

from gcdump.gcode import GCodeManager
from gcdump.serial import SerialManager, DeviceError, guess_port, PROTOCOL_FIVED
from gcdump.utils import ConfigManager, setup_logger

logger = logging.getLogger('gcdump')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='gcdump',
        description='Send a G-code file to a RepRap-style machine over a serial line.'
    )
    parser.add_argument('port', nargs='?', help='Serial port; autodetected when omitted')
    parser.add_argument('-s', '--speed', type=int, help='Serial line speed (default 19200)')
    parser.add_argument('-5', dest='fived', action='store_true',
                        help='Use the 5D protocol (numbered, checksummed lines)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='No output unless an error occurs')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print debug info and all serial I/O')
    parser.add_argument('-c', '--strip', action='store_true',
                        help='Filter out non-meaningful characters before sending')
    parser.add_argument('-u', '--max-unconfirmed', type=int,
                        help='Maximum number of lines to send without receipt confirmation')
    parser.add_argument('-f', '--file', default='-',
                        help='G-code file to dump; "-" reads standard input')
    parser.add_argument('-n', '--dry-run', action='store_true',
                        help='Parse and echo lines without opening a device')
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--log-file', help='Write a rotating log file')
    return parser.parse_args(argv)


def echo(text):
    print(text, flush=True)


def dump(serial_manager, gcode_manager, strip=False):
    """Send every line of the source, returning the number sent"""
    sent = 0
    dropped = 0
    for raw_line, block in gcode_manager.lines():
        if block is not None:
            logger.debug(f"Parsed: {block.to_dict()}")
        if strip:
            if block is None:
                dropped += 1
                logger.warning(f"Dropping unparsable line {gcode_manager.current_line_number}: {raw_line}")
                continue
            text = block.to_gcode()
        else:
            text = raw_line.strip()
        if not text:
            continue
        serial_manager.send_line(text)
        sent += 1
    if dropped:
        logger.warning(f"{dropped} line(s) dropped while stripping")
    return sent


def main(argv=None):
    args = parse_args(argv)
    config = ConfigManager(args.config)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    setup_logger(
        'gcdump',
        log_file=args.log_file or config.get('logging.log_file'),
        error_log_file=config.get('logging.error_log_file'),
        level=level
    )

    speed = args.speed or config.get('serial.baudrate')
    protocol = PROTOCOL_FIVED if args.fived else config.get('serial.protocol')
    max_unconfirmed = args.max_unconfirmed
    if max_unconfirmed is None:
        max_unconfirmed = config.get('serial.max_unconfirmed', 0)

    port = args.port or config.get('serial.port')
    if not port and not args.dry_run:
        port = guess_port()
        if port is None:
            logger.error("Unable to autodetect a serial port. Please specify one explicitly.")
            return 1

    logger.debug(f"Serial port: {port}")
    logger.debug(f"Line speed: {speed}")
    logger.debug(f"Gcode file: {args.file}")

    serial_manager = SerialManager(
        port=port,
        baudrate=speed,
        protocol=protocol,
        cache_size=config.get('serial.cache_size', 32),
        max_unconfirmed=max_unconfirmed,
        timeout=config.get('serial.timeout', 1),
        simulate=args.dry_run,
        on_send=echo if args.verbose or args.dry_run else None,
        on_receive=None if args.quiet else echo
    )

    try:
        with serial_manager:
            try:
                gcode_manager = GCodeManager(args.file).open()
            except OSError as e:
                logger.error(f'Unable to open gcode file "{args.file}": {e}')
                return 1

            with gcode_manager:
                sent = dump(serial_manager, gcode_manager, strip=args.strip)
                serial_manager.flush()
    except DeviceError as e:
        logger.error(f"{e}. Aborting.")
        return 1

    if gcode_manager.malformed_count:
        logger.warning(f"{gcode_manager.malformed_count} line(s) could not be parsed")
    logger.info(f"Successfully completed! {sent} line(s) sent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
