import pytest

from emtelemetry import codec


def test_int16_le_reads_negative_temperature_pair():
    assert codec.read_int16_le([0x9C, 0xFF]) == -100
    assert codec.read_uint16_le([0x9C, 0xFF]) == 0xFF9C


def test_int16_le_positive_range():
    assert codec.read_int16_le(bytes([0xFF, 0x7F])) == 32767
    assert codec.read_int16_le(bytes([0x00, 0x80])) == -32768


def test_uint16_be():
    assert codec.read_uint16_be([0x01, 0x23]) == 0x0123


def test_readers_ignore_trailing_bytes():
    assert codec.read_uint16_le(bytes([0x01, 0x00, 0xFF])) == 1


@pytest.mark.parametrize("reader", [codec.read_uint16_le, codec.read_int16_le, codec.read_uint16_be])
def test_short_slice_raises_truncated(reader):
    with pytest.raises(codec.TruncatedPayload) as excinfo:
        reader(b"\x01")
    assert excinfo.value.needed == 2
    assert excinfo.value.got == 1
    assert isinstance(excinfo.value, ValueError)


def test_bcd_decoding():
    assert codec.bcd2_to_decimal(0x23) == 23
    assert codec.bcd2_to_decimal(0x99) == 99
    assert codec.bcd2_to_decimal(0x00) == 0


@pytest.mark.parametrize("value", [0x0A, 0x2F, 0xA0, 0xF9])
def test_malformed_bcd_is_zero(value):
    assert codec.bcd2_to_decimal(value) == 0


def test_version_from_bcd():
    assert codec.bcd22_to_version(0x0123) == pytest.approx(1.23)
    assert codec.read_version(bytes([0x01, 0x23])) == pytest.approx(1.23)
    assert codec.read_version(bytes([0x02, 0x10])) == pytest.approx(2.10)


def test_hex_helpers():
    assert codec.encode_hex(0x05) == "05"
    assert codec.encode_hex(0xAB) == "ab"
    assert codec.read_hex_bytes(bytes([0x61, 0x36, 0xC1])) == "61-36-c1"
    assert codec.read_hex_bytes(bytes([0x61, 0x36, 0xC1]), 2) == "61-36"
    assert codec.read_hex_bytes(b"") == ""


def test_hex_bytes_short_slice():
    with pytest.raises(codec.TruncatedPayload):
        codec.read_hex_bytes(bytes([0x01, 0x02]), 8)
