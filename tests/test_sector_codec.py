import struct

import pytest

from td0scan import error
from td0scan.codec import sector


def test_raw_is_verbatim() -> None:
    dat = bytes(range(256)) * 2
    assert sector.decode(sector.Method.RAW, dat, 512) == dat


def test_repeat_single_token() -> None:
    blk = struct.pack("<H", 64) + b"\xe5\xf6"
    out = sector.decode(sector.Method.REPEAT, blk, 128)
    assert len(out) == 64 * 2
    assert out == b"\xe5\xf6" * 64


def test_repeat_several_tokens() -> None:
    blk = struct.pack("<H", 32) + b"AB" + struct.pack("<H", 32) + b"CD"
    assert sector.decode(sector.Method.REPEAT, blk, 128) == b"AB" * 32 + b"CD" * 32


def test_rle_literal_block_copied_once() -> None:
    assert sector.decode(sector.Method.RLE, bytes.fromhex("00 04 aa bb cc dd"), 4) == (
        b"\xaa\xbb\xcc\xdd"
    )


def test_rle_literal_against_larger_sector_is_length_mismatch() -> None:
    with pytest.raises(error.LengthMismatch, match="decoded 4 bytes"):
        sector.decode(sector.Method.RLE, bytes.fromhex("00 04 aa bb cc dd"), 256)


def test_rle_repeated_block() -> None:
    blk = bytes([2, 3]) + b"\x01\x02\x03\x04"
    assert sector.decode(sector.Method.RLE, blk, 12) == b"\x01\x02\x03\x04" * 3


def test_rle_mixed_tokens() -> None:
    blk = bytes([0, 3]) + b"xyz" + bytes([1, 0x7e]) + b"\xe5\xe5" + bytes([0, 1]) + b"!"
    out = sector.decode(sector.Method.RLE, blk, 256)
    assert out == b"xyz" + b"\xe5" * 252 + b"!"


def test_unpack_uses_first_byte_as_method() -> None:
    payload = b"\x01" + struct.pack("<H", 256) + b"\x00\x00"
    assert sector.unpack(payload, 512) == bytes(512)


def test_unknown_method() -> None:
    with pytest.raises(error.UnknownEncodingMethod, match="method 3"):
        sector.unpack(b"\x03" + bytes(128), 128)


def test_empty_payload() -> None:
    with pytest.raises(error.LengthMismatch, match="empty"):
        sector.unpack(b"", 128)


def test_short_raw_is_not_padded() -> None:
    with pytest.raises(error.LengthMismatch):
        sector.decode(sector.Method.RAW, bytes(100), 128)


def test_long_raw_is_not_truncated() -> None:
    with pytest.raises(error.LengthMismatch):
        sector.decode(sector.Method.RAW, bytes(129), 128)


def test_runaway_expansion_stops_early() -> None:
    blk = (struct.pack("<H", 0xFFFF) + b"\x00\x00") * 1000
    with pytest.raises(error.LengthMismatch, match="beyond sector size"):
        sector.decode(sector.Method.REPEAT, blk, 512)


def test_trailing_odd_byte_is_length_mismatch() -> None:
    blk = struct.pack("<H", 64) + b"ab" + b"\x00"
    with pytest.raises(error.LengthMismatch, match="inside a token at offset 4"):
        sector.decode(sector.Method.REPEAT, blk, 128)


def test_repeat_short_pattern_is_not_applied() -> None:
    # 63 * "AB" plus a one-byte pattern repeated twice would land on 128.
    blk = struct.pack("<H", 63) + b"AB" + struct.pack("<H", 2) + b"X"
    with pytest.raises(error.LengthMismatch, match="inside a token"):
        sector.decode(sector.Method.REPEAT, blk, 128)


def test_rle_short_literal_is_not_applied() -> None:
    # The literal claims 8 bytes but only 4 remain; 124 + 4 would land on 128.
    blk = bytes([1, 0x3E]) + b"AB" + bytes([0, 8]) + b"WXYZ"
    with pytest.raises(error.LengthMismatch, match="inside a token at offset 4"):
        sector.decode(sector.Method.RLE, blk, 128)


def test_rle_short_repeated_block_is_not_applied() -> None:
    blk = bytes([0, 2]) + b"ab" + bytes([2, 3]) + b"\x01\x02"
    with pytest.raises(error.LengthMismatch, match="inside a token"):
        sector.decode(sector.Method.RLE, blk, 8)


def test_rle_lone_token_byte() -> None:
    blk = bytes([0, 4]) + b"abcd" + b"\x00"
    with pytest.raises(error.LengthMismatch, match="inside a token at offset 6"):
        sector.decode(sector.Method.RLE, blk, 4)
