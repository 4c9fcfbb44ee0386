import argparse
import datetime
from socket import socket, AF_INET, SOCK_STREAM

from time_liar import wire

HOST = 'localhost'
PORT = 37
TIMEOUT = 5.0


class TimeClient:
    def __init__(self, host: str = HOST, port: int = PORT, timeout: float = TIMEOUT):
        self.address = (host, port)
        self.timeout = timeout

    def request(self) -> int:
        """
        Read the RFC 868 time from the server.
        :return: seconds since 1900-01-01, as sent
        :raises ConnectionError: server closed without sending a full answer
        """
        data = b''
        with socket(AF_INET, SOCK_STREAM) as tcp_socket:
            tcp_socket.settimeout(self.timeout)
            tcp_socket.connect(self.address)
            while True:
                chunk = tcp_socket.recv(wire.SIZE)
                if not chunk:
                    break
                data += chunk
        if len(data) != wire.SIZE:
            raise ConnectionError(f'server sent {len(data)} bytes instead of {wire.SIZE}')
        return wire.decode(data)


def main(argv=None):
    parser = argparse.ArgumentParser(description='ask an RFC 868 server for the time')
    parser.add_argument('--host', type=str, default=HOST)
    parser.add_argument('--port', type=int, default=PORT)
    parser.add_argument('--timeout', type=float, default=TIMEOUT)
    args = parser.parse_args(argv)
    try:
        value = TimeClient(args.host, args.port, args.timeout).request()
    except OSError as e:
        print(f'No time from {args.host}: {e}')
        return 1
    moment = datetime.datetime.fromtimestamp(wire.to_unix(value), tz=datetime.timezone.utc)
    print(f'{value} ({moment:%Y-%m-%d %H:%M:%S} UTC)')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
