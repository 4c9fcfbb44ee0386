import logging
import os
import re
from typing import NamedTuple

ADD = '+'
SUBTRACT = '-'
FIX = 'fix'
OPERATIONS = (ADD, SUBTRACT, FIX)
FIELDS = ('year', 'month', 'day', 'hour', 'minute', 'second')

_INTEGER = re.compile(r'[+-]?[0-9]+')

log = logging.getLogger(__name__)


class OffsetError(Exception):
    def __init__(self, address: str, message: str):
        super().__init__(message)
        self.address = address


class NotFoundOrUnreadable(OffsetError):
    def __init__(self, address: str, cause: OSError):
        super().__init__(address, f'no readable offset file for {address}: {cause}')
        self.cause = cause


class MalformedOffsetFile(OffsetError):
    pass


class FieldAdjustment(NamedTuple):
    operation: str
    value: int

    def apply(self, current: int) -> int:
        """
        Apply the directive to one calendar field.
        Unknown operations leave the field as it is.
        """
        if self.operation == ADD:
            return current + self.value
        if self.operation == SUBTRACT:
            return current - self.value
        if self.operation == FIX:
            return self.value
        return current


class OffsetSpec(NamedTuple):
    year: FieldAdjustment
    month: FieldAdjustment
    day: FieldAdjustment
    hour: FieldAdjustment
    minute: FieldAdjustment
    second: FieldAdjustment


def parse_offsets(text: str, address: str = '') -> OffsetSpec:
    """
    Parse the twelve tokens of an offset file.
    :param text: file contents, e.g. '+ 0 - 1 fix 13 + 0 + 0 + 0'
    :param address: used only in error messages
    :return: OffsetSpec
    """
    tokens = text.split()
    if len(tokens) != 2 * len(FIELDS):
        raise MalformedOffsetFile(address, f'expected {2 * len(FIELDS)} tokens, got {len(tokens)}')
    adjustments = []
    for i, field in enumerate(FIELDS):
        operation, value = tokens[2 * i], tokens[2 * i + 1]
        if not _INTEGER.fullmatch(value):
            raise MalformedOffsetFile(address, f'{field} value {value!r} is not an integer')
        if operation not in OPERATIONS:
            log.warning(f'{address}: unknown {field} operation {operation!r}, field left unchanged')
        adjustments.append(FieldAdjustment(operation, int(value)))
    return OffsetSpec(*adjustments)


class OffsetStore:
    """
    Offset files live in one directory, each named after the IP address it applies to.
    Nothing is cached: every lookup reads the file again.
    """

    def __init__(self, directory: str = '.'):
        self.directory = directory

    def path(self, address: str) -> str:
        return os.path.join(self.directory, address)

    def lookup(self, address: str) -> OffsetSpec:
        """
        :param address: dotted IPv4 address of the peer, without the port
        :return: OffsetSpec
        :raises NotFoundOrUnreadable: file is missing or cannot be read
        :raises MalformedOffsetFile: contents do not hold 12 valid tokens
        """
        try:
            with open(self.path(address), encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise MalformedOffsetFile(address, f'offset file for {address} is not text: {e}') from e
        except OSError as e:
            raise NotFoundOrUnreadable(address, e) from e
        return parse_offsets(text, address)
