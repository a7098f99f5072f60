# td0scan/fs/fat.py
#
# Recognise FAT (MS-DOS) 32-byte directory entries in raw sector data.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Optional

import datetime, struct

SLOT_LEN = 32

# First name byte values with a special meaning.
MARK_FREE    = 0x00
MARK_E5_NAME = 0x05
MARK_DOT     = 0x2e
MARK_DELETED = 0xe5
MARKERS = (MARK_FREE, MARK_E5_NAME, MARK_DOT, MARK_DELETED)

RESERVED_NONZERO_MAX = 2

ATTRS = [ (0x01, 'R'), (0x02, 'H'), (0x04, 'S'),
          (0x08, 'V'), (0x10, 'D'), (0x20, 'A') ]


def low7(b: int) -> int:
    return b & 0x7f

def is_printable(b: int) -> bool:
    return 0x20 <= b <= 0x7e

def is_fat_marker(b: int) -> bool:
    return b in MARKERS

def is_fat_first_byte(b: int) -> bool:
    return is_fat_marker(b) or is_printable(b)

def is_printable_7bit(dat: bytes) -> bool:
    return all(is_printable(low7(b)) for b in dat)

def count_nonzero(dat: bytes) -> int:
    return sum(1 for b in dat if b != 0)


class FatFields:
    """Raw field split of a 32-byte slot under the FAT layout."""

    def __init__(self, slot: bytes) -> None:
        (self.name, self.ext, self.attr, self.reserved, self.time,
         self.date, self.cluster, self.size) = struct.unpack(
             '<8s3sB10sHHHI', slot)

    @property
    def name_ext(self) -> bytes:
        return self.name + self.ext


def name_is_plausible(f: FatFields) -> bool:
    nx = f.name_ext
    return is_fat_first_byte(nx[0]) and is_printable_7bit(nx[1:])

def reserved_is_quiet(f: FatFields, limit: int) -> bool:
    return count_nonzero(f.reserved) <= limit


def _text(dat: bytes) -> str:
    return bytes(low7(b) for b in dat).decode('ascii').rstrip(' ')


class FatEntry:

    kind = 'FAT'

    def __init__(self, offset: int, f: FatFields) -> None:
        self.offset = offset
        self.marker = f.name[0]
        if self.marker in (MARK_DELETED, MARK_E5_NAME):
            self.name = '?' + _text(f.name[1:])
        elif self.marker == MARK_FREE:
            self.name = _text(f.name[1:])
        else:
            self.name = _text(f.name)
        self.ext = _text(f.ext)
        self.attr = f.attr
        self.reserved = f.reserved
        self.time = f.time
        self.date = f.date
        self.cluster = f.cluster
        self.size = f.size

    @property
    def status(self) -> str:
        return { MARK_FREE: 'free',
                 MARK_E5_NAME: 'e5-name',
                 MARK_DOT: 'dot',
                 MARK_DELETED: 'deleted' }.get(self.marker, 'active')

    @property
    def attr_str(self) -> str:
        return ''.join(c if self.attr & m else '-' for m, c in ATTRS)

    @property
    def timestamp(self) -> Optional[datetime.datetime]:
        try:
            return datetime.datetime(
                1980 + (self.date >> 9), (self.date >> 5) & 15,
                self.date & 31, self.time >> 11, (self.time >> 5) & 63,
                (self.time & 31) * 2)
        except ValueError:
            return None

    def __str__(self):
        ts = self.timestamp
        return ('FAT  %-8s %-3s attr %02x %s clus %d size %d%s %s'
                % (self.name, self.ext, self.attr, self.attr_str,
                   self.cluster, self.size,
                   '' if ts is None else ' ' + str(ts), self.status))


def recognise(slot: bytes, offset: int = 0,
              reserved_limit: int = RESERVED_NONZERO_MAX
) -> Optional[FatEntry]:
    f = FatFields(slot)
    if not name_is_plausible(f):
        return None
    if not reserved_is_quiet(f, reserved_limit):
        return None
    return FatEntry(offset, f)

# Local variables:
# python-indent: 4
# End:
