# td0scan/codec/sector.py
#
# TeleDisk per-sector data block encodings.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Callable, Dict

import struct

from td0scan import error

class Method:
    RAW     = 0
    REPEAT  = 1
    RLE     = 2

NAMES = { Method.RAW: 'raw', Method.REPEAT: 'repeat', Method.RLE: 'rle' }

def _check_overrun(out: bytearray, size: int) -> None:
    error.check(len(out) <= size,
                'TD0: data block expands beyond sector size %d' % size,
                error.LengthMismatch)

def _check_token(blk: bytes, o: int, n: int) -> None:
    error.check(o + n <= len(blk),
                'TD0: data block ends inside a token at offset %d' % o,
                error.LengthMismatch)

def decode_raw(blk: bytes, size: int) -> bytes:
    return bytes(blk)

def decode_repeat(blk: bytes, size: int) -> bytes:
    """Tokens of <count:u16le><pattern:2 bytes>."""
    o, out = 0, bytearray()
    while o < len(blk):
        _check_token(blk, o, 4)
        c, = struct.unpack('<H', blk[o:o+2])
        out += blk[o+2:o+4] * c
        o += 4
        _check_overrun(out, size)
    return bytes(out)

def decode_rle(blk: bytes, size: int) -> bytes:
    """Tokens of <a><b>: a == 0 is a b-byte literal, otherwise a 2a-byte
    block repeated b times."""
    o, out = 0, bytearray()
    while o < len(blk):
        _check_token(blk, o, 2)
        c, n = blk[o], blk[o+1]
        if c == 0:
            _check_token(blk, o, 2 + n)
            out += blk[o+2:o+2+n]
            o += 2 + n
        else:
            _check_token(blk, o, 2 + c*2)
            out += blk[o+2:o+2+c*2] * n
            o += 2 + c*2
        _check_overrun(out, size)
    return bytes(out)

decoders: Dict[int, Callable[[bytes, int], bytes]] = {
    Method.RAW: decode_raw,
    Method.REPEAT: decode_repeat,
    Method.RLE: decode_rle,
}

def decode(method: int, blk: bytes, size: int) -> bytes:
    if method not in decoders:
        raise error.UnknownEncodingMethod(
            'TD0: unknown sector encoding method %d' % method)
    dat = decoders[method](blk, size)
    error.check(len(dat) == size,
                'TD0: decoded %d bytes, sector size is %d' % (len(dat), size),
                error.LengthMismatch)
    return dat

def unpack(payload: bytes, size: int) -> bytes:
    """Decode a data block whose first byte selects the method."""
    error.check(len(payload) >= 1, 'TD0: empty data block',
                error.LengthMismatch)
    return decode(payload[0], payload[1:], size)

# Local variables:
# python-indent: 4
# End:
