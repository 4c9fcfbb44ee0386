import os

import pytest

from time_liar.offsets import (ADD, FIX, SUBTRACT, FieldAdjustment, MalformedOffsetFile, NotFoundOrUnreadable,
                               OffsetError, OffsetSpec, parse_offsets)


def test_parse_all_fields_in_order():
    spec = parse_offsets('+ 1 - 2 fix 3 + -4 - +5 fix 0\n')
    assert spec == OffsetSpec(
        FieldAdjustment(ADD, 1),
        FieldAdjustment(SUBTRACT, 2),
        FieldAdjustment(FIX, 3),
        FieldAdjustment(ADD, -4),
        FieldAdjustment(SUBTRACT, 5),
        FieldAdjustment(FIX, 0),
    )


def test_parse_accepts_any_whitespace():
    spec = parse_offsets('fix 2000\n fix 1\tfix 1\n\nfix 0 fix 0\r\nfix 0')
    assert spec.year == FieldAdjustment(FIX, 2000)
    assert spec.second == FieldAdjustment(FIX, 0)


def test_six_tokens_is_malformed():
    with pytest.raises(MalformedOffsetFile):
        parse_offsets('+ 0 + 0 + 0')


def test_trailing_tokens_are_malformed():
    with pytest.raises(MalformedOffsetFile):
        parse_offsets('+ 0 + 0 + 0 + 0 + 0 + 0 + 0')


@pytest.mark.parametrize('value', ['x', '1.5', '0x10', '+', '1_000', '--1'])
def test_bad_integer_is_malformed(value):
    tokens = ['+', '0'] * 6
    tokens[7] = value
    with pytest.raises(MalformedOffsetFile):
        parse_offsets(' '.join(tokens))


def test_unknown_operation_is_kept(caplog):
    spec = parse_offsets('FIX 1 + 0 + 0 + 0 + 0 + 0', '10.0.0.1')
    assert spec.year == FieldAdjustment('FIX', 1)
    assert spec.year.apply(2024) == 2024
    assert 'unknown year operation' in caplog.text


@pytest.mark.parametrize('adjustment, expected', [
    (FieldAdjustment(ADD, 5), 15),
    (FieldAdjustment(SUBTRACT, 5), 5),
    (FieldAdjustment(FIX, 5), 5),
    (FieldAdjustment(ADD, -20), -10),
    (FieldAdjustment('*', 5), 10),
])
def test_field_adjustment(adjustment, expected):
    assert adjustment.apply(10) == expected


def test_lookup_reads_file_named_after_address(store, offsets_dir):
    offsets_dir('192.168.1.7', '+ 1 + 0 + 0 + 0 + 0 - 30')
    spec = store.lookup('192.168.1.7')
    assert spec.year == FieldAdjustment(ADD, 1)
    assert spec.second == FieldAdjustment(SUBTRACT, 30)


def test_lookup_rereads_file_each_time(store, offsets_dir):
    offsets_dir('10.0.0.2', '+ 1 + 0 + 0 + 0 + 0 + 0')
    assert store.lookup('10.0.0.2').year.value == 1
    offsets_dir('10.0.0.2', '+ 2 + 0 + 0 + 0 + 0 + 0')
    assert store.lookup('10.0.0.2').year.value == 2


def test_lookup_missing_file(store):
    with pytest.raises(NotFoundOrUnreadable) as info:
        store.lookup('10.0.0.5')
    assert info.value.address == '10.0.0.5'
    assert isinstance(info.value.cause, FileNotFoundError)
    assert isinstance(info.value, OffsetError)


def test_lookup_directory_is_unreadable(store, offsets_dir):
    os.mkdir(offsets_dir.path / '10.0.0.6')
    with pytest.raises(NotFoundOrUnreadable):
        store.lookup('10.0.0.6')


def test_lookup_malformed_file(store, offsets_dir):
    offsets_dir('10.0.0.7', '+ 0 + 0 + 0')
    with pytest.raises(MalformedOffsetFile) as info:
        store.lookup('10.0.0.7')
    assert info.value.address == '10.0.0.7'


def test_lookup_binary_file(store, offsets_dir):
    (offsets_dir.path / '10.0.0.8').write_bytes(b'\xff\xfe\x00')
    with pytest.raises(MalformedOffsetFile):
        store.lookup('10.0.0.8')
