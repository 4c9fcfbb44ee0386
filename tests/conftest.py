import pytest

from time_liar.adjust import CalendarTime
from time_liar.offsets import OffsetStore

NOW = CalendarTime(2024, 3, 15, 12, 30, 45)


@pytest.fixture
def offsets_dir(tmp_path):
    def write(address, text):
        (tmp_path / address).write_text(text, encoding='utf-8')
    write.path = tmp_path
    return write


@pytest.fixture
def store(offsets_dir):
    return OffsetStore(str(offsets_dir.path))


@pytest.fixture
def now():
    return NOW
