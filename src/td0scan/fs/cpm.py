# td0scan/fs/cpm.py
#
# Recognise CP/M 32-byte directory entries in raw sector data.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Optional, Tuple

import struct

from .fat import low7, is_printable_7bit

SLOT_LEN = 32

STATUS_ACTIVE  = 0x00
STATUS_ERASED  = 0xe5
STATUS_80      = 0x80
STATUSES = (STATUS_ACTIVE, STATUS_ERASED, STATUS_80)

MAX_RECORD_COUNT = 128


def is_cpm_status(b: int) -> bool:
    return b in STATUSES

def high_bit(b: int) -> bool:
    return (b & 0x80) != 0

def is_erased_filler(status: int, name_ext: bytes) -> bool:
    """A freshly formatted directory: 0xE5 everywhere."""
    return status == STATUS_ERASED and all(b == 0xe5 for b in name_ext)


class CpmFields:
    """Raw field split of a 32-byte slot under the CP/M layout."""

    def __init__(self, slot: bytes) -> None:
        (self.status, self.name, self.ext, self.ex, self.s1, self.s2,
         self.rc, self.al) = struct.unpack('<B8s3s4B16s', slot)

    @property
    def name_ext(self) -> bytes:
        return self.name + self.ext


def name_is_plausible(f: CpmFields) -> bool:
    return is_printable_7bit(f.name_ext)

def extent_is_plausible(f: CpmFields, max_rc: int) -> bool:
    return f.s1 == 0 and f.s2 == 0 and f.rc <= max_rc


def _text(dat: bytes) -> str:
    return bytes(low7(b) for b in dat).decode('ascii').rstrip(' ')


class CpmEntry:

    kind = 'CP/M'

    def __init__(self, offset: int, f: CpmFields) -> None:
        self.offset = offset
        self.status = f.status
        self.name = _text(f.name)
        self.ext = _text(f.ext)
        # Attribute bits ride in the high bit of each name character.
        self.flags: Tuple[bool, ...] = tuple(high_bit(b) for b in f.name_ext)
        self.ex, self.s1, self.s2, self.rc = f.ex, f.s1, f.s2, f.rc
        self.al = f.al

    @property
    def read_only(self) -> bool:
        return self.flags[8]

    @property
    def system(self) -> bool:
        return self.flags[9]

    @property
    def archived(self) -> bool:
        return self.flags[10]

    @property
    def user(self) -> Optional[int]:
        return self.status if self.status < 32 else None

    @property
    def erased(self) -> bool:
        return self.status == STATUS_ERASED

    @property
    def blocks(self):
        return [b for b in self.al if b != 0]

    @property
    def flags_str(self) -> str:
        return ''.join(c if x else '-' for c, x in
                       zip('RSA', (self.read_only, self.system,
                                   self.archived)))

    def __str__(self):
        who = 'erased' if self.erased else (
            'u%d' % self.user if self.user is not None
            else 'st %02x' % self.status)
        return ('CP/M %-8s %-3s %s %s ex %d rc %d al %s'
                % (self.name, self.ext, who, self.flags_str, self.ex,
                   self.rc, self.al.hex(' ')))


def recognise(slot: bytes, offset: int = 0,
              max_rc: int = MAX_RECORD_COUNT) -> Optional[CpmEntry]:
    f = CpmFields(slot)
    if not is_cpm_status(f.status):
        return None
    if not name_is_plausible(f):
        return None
    if is_erased_filler(f.status, f.name_ext):
        return None
    if not extent_is_plausible(f, max_rc):
        return None
    return CpmEntry(offset, f)

# Local variables:
# python-indent: 4
# End:
