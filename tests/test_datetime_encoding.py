import struct
from datetime import date, datetime, time, timedelta, timezone

import pytest

from tdswire.datetime_encoding import (
    convert_date,
    convert_datetime,
    convert_datetime2,
    convert_datetime_offset,
    convert_small_datetime,
    convert_time,
    time_byte_length,
)


def _date_bytes(d: date) -> bytes:
    return (d.toordinal() - 1).to_bytes(3, "little")


def _micros_of_day(t: time) -> int:
    return ((t.hour * 60 + t.minute) * 60 + t.second) * 1_000_000 + t.microsecond


@pytest.mark.parametrize(
    "scale, expected",
    [(0, 3), (1, 3), (2, 3), (3, 4), (4, 4), (5, 5), (6, 5), (7, 5)],
)
def test_time_byte_length(scale, expected):
    assert time_byte_length(scale) == expected


def test_date_zero_is_year_one():
    assert convert_date(b"\x00\x00\x00") == date(1, 1, 1)


@pytest.mark.parametrize("d", [date(1970, 1, 1), date(2024, 2, 29), date(9999, 12, 31)])
def test_date_round_trip(d):
    assert convert_date(_date_bytes(d)) == d


def test_date_too_short():
    with pytest.raises(ValueError):
        convert_date(b"\x01\x02")


@pytest.mark.parametrize("t", [time(0, 0), time(13, 45, 7, 123456), time(23, 59, 59, 999999)])
def test_time_round_trip_scale7(t):
    ticks = _micros_of_day(t) * 10
    assert convert_time(ticks.to_bytes(5, "little"), 7) == t


def test_time_reads_only_scale_bytes():
    base = (12345).to_bytes(3, "little")
    assert convert_time(base + b"\x7f", 2) == convert_time(base, 2)


def test_time_out_of_range():
    with pytest.raises(ValueError):
        convert_time(b"\xff" * 5, 7)


def test_datetime_zero_is_1900():
    assert convert_datetime(bytes(8)) == datetime(1900, 1, 1)


@pytest.mark.parametrize(
    "target",
    [datetime(1970, 1, 1), datetime(2001, 9, 9, 1, 46, 40), datetime(1850, 6, 1, 12, 0, 3)],
)
def test_datetime_round_trip(target):
    delta = target - datetime(1900, 1, 1)
    days = delta.days
    ticks = delta.seconds * 300
    assert convert_datetime(struct.pack("<ii", days, ticks)) == target


def test_datetime_ticks_are_one_three_hundredth_second():
    one_second = convert_datetime(struct.pack("<ii", 0, 300))
    assert one_second - convert_datetime(bytes(8)) == timedelta(seconds=1)


def test_datetime2_round_trip():
    target = datetime(2023, 7, 14, 8, 30, 15, 250000)
    ticks = _micros_of_day(target.time()) * 10
    data = ticks.to_bytes(5, "little") + _date_bytes(target.date())
    assert convert_datetime2(data, 7) == target


def test_datetime2_scale_selects_time_width():
    d = date(2000, 1, 1)
    data = (0).to_bytes(3, "little") + _date_bytes(d)
    assert convert_datetime2(data, 0) == datetime(2000, 1, 1)


def test_small_datetime_round_trip():
    target = datetime(2010, 3, 4, 17, 25)
    days = (target.date() - date(1900, 1, 1)).days
    minutes = target.hour * 60 + target.minute
    assert convert_small_datetime(struct.pack("<HH", days, minutes)) == target


def test_small_datetime_too_short():
    with pytest.raises(ValueError):
        convert_small_datetime(b"\x00\x00\x00")


def test_datetime_offset_scale7_is_utc():
    target = datetime(2022, 12, 31, 23, 59, 58, 100000, tzinfo=timezone.utc)
    ticks = _micros_of_day(target.time()) * 10
    data = ticks.to_bytes(5, "little") + _date_bytes(target.date()) + b"\x00\x00"
    result = convert_datetime_offset(data, 7)
    assert result == target
    assert result.tzinfo == timezone.utc


def test_datetime_offset_scale3_uses_milliseconds():
    target = datetime(2015, 5, 5, 5, 5, 5, 5000, tzinfo=timezone.utc)
    ticks = _micros_of_day(target.time()) // 1000
    data = ticks.to_bytes(4, "little") + _date_bytes(target.date()) + b"\x00\x00"
    assert convert_datetime_offset(data, 3) == target


def test_datetime_offset_ignores_offset_bytes():
    body = (36_000_000_000).to_bytes(5, "little") + _date_bytes(date(2020, 1, 1))
    plain = convert_datetime_offset(body + struct.pack("<h", 0), 7)
    shifted = convert_datetime_offset(body + struct.pack("<h", -300), 7)
    assert plain == shifted


def test_datetime_offset_too_short():
    with pytest.raises(ValueError):
        convert_datetime_offset(bytes(9), 7)