import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from socket import socket, AF_INET, SOCK_STREAM, SOL_SOCKET, SO_REUSEADDR, SOMAXCONN, timeout

from time_liar import adjust, wire
from time_liar.adjust import Clock, local_now
from time_liar.offsets import OffsetError, OffsetStore

HOST = '0.0.0.0'
PORT = 37
MAX_PORT = 65535
WORKERS = 32
ACCEPT_TIMEOUT = 0.5
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

log = logging.getLogger(__name__)


class Arguments:
    """
    Command line of the server: where to listen and where the offset files are.
    """

    def __init__(self, argv=None):
        self.host, self.port, self.offsets, self.workers, self.log_level = self._parse_args(argv)

    @staticmethod
    def _parse_args(argv) -> tuple[str, int, str, int, str]:
        """
        :return: Tuple(host, port, offsets directory, workers, log level)
        """
        parser = argparse.ArgumentParser(description='RFC 868 time server with per-client offsets')
        parser.add_argument('--host', type=str, dest='host', default=HOST, help='address to listen on')
        parser.add_argument('--port', type=int, dest='port', default=PORT, help='TCP port, 37 by default')
        parser.add_argument('--offsets', type=str, dest='offsets', default='.',
                            help='directory with offset files named after client IP addresses')
        parser.add_argument('--workers', type=int, dest='workers', default=WORKERS,
                            help='connections served at the same time')
        parser.add_argument('--log-level', type=str.upper, dest='log_level', default='INFO', choices=LOG_LEVELS)
        arguments = parser.parse_args(argv)
        if not 0 <= arguments.port <= MAX_PORT:
            print(f'Port must be between 0 and {MAX_PORT}', file=sys.stderr)
            sys.exit(2)
        if arguments.workers < 1:
            print('There must be at least one worker', file=sys.stderr)
            sys.exit(2)
        if not os.path.isdir(arguments.offsets):
            print(f'Offsets directory {arguments.offsets} does not exist', file=sys.stderr)
            sys.exit(2)
        return arguments.host, arguments.port, arguments.offsets, arguments.workers, arguments.log_level


class TimeServer:
    def __init__(self, offsets: OffsetStore, clock: Clock = local_now,
                 host: str = HOST, port: int = PORT, workers: int = WORKERS):
        self.offsets = offsets
        self.clock = clock
        self.workers = workers
        self.server = socket(AF_INET, SOCK_STREAM)
        try:
            self.server.setsockopt(SOL_SOCKET, SO_REUSEADDR, 1)
            self.server.bind((host, port))
            self.server.listen(SOMAXCONN)
        except OSError:
            self.server.close()
            raise
        self.server.settimeout(ACCEPT_TIMEOUT)
        self._running = True

    @property
    def address(self) -> tuple[str, int]:
        return self.server.getsockname()

    def start(self):
        host, port = self.address
        log.info(f'Time server listening on {host}:{port}')
        try:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                while self._running:
                    conn = self.accept()
                    if conn is not None:
                        pool.submit(self.handle, conn)
        finally:
            self.server.close()

    def stop(self):
        self._running = False

    def accept(self):
        try:
            conn, _ = self.server.accept()
            return conn
        except timeout:
            return None
        except OSError as e:
            if self._running:
                log.error(f'Accept failed: {e}')
            return None

    def handle(self, conn):
        """
        Serve one connection: 4 bytes of (wrong) time, or nothing at all
        if the client has no usable offset file. Always closes conn.
        """
        try:
            address = conn.getpeername()[0]
            log.info(f'Accepted connection from {address}')
            conn.sendall(self.get_wrong_time(address))
        except OffsetError as e:
            log.error(f'Failed to get offset ({e}), closing connection')
        except OSError as e:
            log.error(f'Connection failed: {e}')
        finally:
            conn.close()

    def get_wrong_time(self, address: str) -> bytes:
        spec = self.offsets.lookup(address)
        return wire.encode(adjust.apply(spec, self.clock()))


def setup_logging(level: str = 'INFO'):
    out = logging.StreamHandler(sys.stdout)
    out.addFilter(lambda record: record.levelno < logging.WARNING)
    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[out, err])


def main(argv=None):
    args = Arguments(argv)
    setup_logging(args.log_level)
    log.info('Time server starting')
    try:
        server = TimeServer(OffsetStore(args.offsets), host=args.host, port=args.port, workers=args.workers)
    except OSError as e:
        log.error(f'Cannot listen on {args.host}:{args.port}: {e}')
        sys.exit(1)
    try:
        server.start()
    except KeyboardInterrupt:
        log.info('Exit.')


if __name__ == '__main__':
    main()
