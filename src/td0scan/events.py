# td0scan/events.py
#
# Structured records produced while scanning one TD0 stream.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Optional

from td0scan.image.td0 import (ImageHeader, CommentHeader, TrackHeader,
                               SectorHeader)
from td0scan.fs.classify import Entry, Unclassified

class Event:
    terminal = False

class ImageOpened(Event):
    def __init__(self, header: ImageHeader,
                 comment: Optional[CommentHeader]) -> None:
        self.header = header
        self.comment = comment

class ImageSkipped(Event):
    terminal = True
    def __init__(self, signature: bytes, reason: str) -> None:
        self.signature = signature
        self.reason = reason

class Notice(Event):
    def __init__(self, message: str) -> None:
        self.message = message

class Track(Event):
    def __init__(self, header: TrackHeader) -> None:
        self.header = header

class Sector(Event):
    def __init__(self, header: SectorHeader, payload_length: Optional[int],
                 method: Optional[int]) -> None:
        self.header = header
        self.payload_length = payload_length
        self.method = method

class SectorFailed(Event):
    def __init__(self, header: SectorHeader, reason: str) -> None:
        self.header = header
        self.reason = reason

class DirectoryEntry(Event):
    def __init__(self, sector: SectorHeader, entry: Entry) -> None:
        self.sector = sector
        self.entry = entry

class UnclassifiedSlot(Event):
    def __init__(self, sector: SectorHeader, slot: Unclassified) -> None:
        self.sector = sector
        self.slot = slot

    @property
    def offset(self) -> int:
        return self.slot.offset

    @property
    def raw(self) -> bytes:
        return self.slot.raw

class StreamEnded(Event):
    terminal = True
    def __init__(self, trailing: bytes) -> None:
        self.trailing = trailing

    @property
    def trailing_byte_count(self) -> int:
        return len(self.trailing)

class StreamFailed(Event):
    terminal = True
    def __init__(self, reason: str) -> None:
        self.reason = reason

# Local variables:
# python-indent: 4
# End:
