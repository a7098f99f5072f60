# td0scan/image/td0.py
#
# TeleDisk image headers and the track/sector record walker.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import BinaryIO, Iterator, Optional, Tuple, Union

import datetime, struct
from enum import Enum

from td0scan import error

SIG_NORMAL   = b'TD'
SIG_ADVANCED = b'td'

IMAGE_HEADER_LEN   = 12
COMMENT_HEADER_LEN = 10
TRACK_HEADER_LEN   = 4
SECTOR_HEADER_LEN  = 6

END_OF_TRACKS = 255

DEFAULT_TRAILING_PROBE = 64


def read_upto(f: BinaryIO, n: int) -> bytes:
    """Read up to @n bytes, retrying short reads until EOF."""
    dat = bytearray()
    while len(dat) < n:
        x = f.read(n - len(dat))
        if not x:
            break
        dat += x
    return bytes(dat)

def read_exact(f: BinaryIO, n: int, what: str) -> bytes:
    dat = read_upto(f, n)
    error.check(len(dat) == n,
                'TD0: truncated %s: wanted %d bytes, got %d'
                % (what, n, len(dat)),
                error.TruncatedStream)
    return dat


class ImageHeader:

    def __init__(self, dat: bytes) -> None:
        (self.signature, self.sequence, self.check_sequence, self.version,
         self.data_rate, self.drive_type, self.stepping, self.dos_flag,
         self.sides, self.crc) = struct.unpack('<2s8BH', dat)

    @property
    def is_valid(self) -> bool:
        return self.signature == SIG_NORMAL

    @property
    def is_advanced(self) -> bool:
        return self.signature == SIG_ADVANCED

    @property
    def has_comment(self) -> bool:
        return (self.stepping & 0x80) == 0x80

    @property
    def step_rate(self) -> int:
        return self.stepping & 0x7f

    @property
    def version_str(self) -> str:
        return '%d.%d' % (self.version >> 4, self.version & 15)

    # data_rate[7] = global FM flag
    @property
    def is_fm(self) -> bool:
        return (self.data_rate >> 7) == 1

    @property
    def rate_kbps(self) -> Optional[int]:
        rate = self.data_rate & 127
        return [250, 300, 500][rate] if rate <= 2 else None

    @property
    def signature_str(self) -> str:
        return self.signature.decode('latin-1')

    def __str__(self):
        return ("%s seq %02x ver %02x rate %02x type %02x oh %s step %02x "
                "dos %02x sides %02x"
                % (self.signature_str, self.sequence, self.version,
                   self.data_rate, self.drive_type,
                   'O' if self.has_comment else '-', self.step_rate,
                   self.dos_flag, self.sides))


class CommentHeader:

    def __init__(self, dat: bytes) -> None:
        (self.crc, self.length, self.year, self.month, self.day,
         self.hour, self.minute, self.second) = struct.unpack('<2H6B', dat)
        self.text = ''
        self.text_error: Optional[error.InvalidCommentText] = None

    @property
    def created(self) -> Optional[datetime.datetime]:
        # Month is stored zero-based.
        try:
            return datetime.datetime(self.year + 1900, self.month + 1,
                                     self.day, self.hour, self.minute,
                                     self.second)
        except ValueError:
            return None

    @property
    def created_str(self) -> str:
        created = self.created
        if created is None:
            return ('<bad date %d/%d/%d %d:%d:%d>'
                    % (self.day, self.month + 1, self.year + 1900,
                       self.hour, self.minute, self.second))
        return str(created)

    @property
    def lines(self):
        return [x for x in self.text.split('\x00') if x]

    @property
    def text_valid(self) -> bool:
        return self.text_error is None

    def set_text(self, dat: bytes) -> None:
        self.text = dat.decode('utf-8', errors='replace')
        try:
            dat.decode('utf-8')
        except UnicodeDecodeError as err:
            self.text_error = error.InvalidCommentText(
                'TD0: comment text is not valid UTF-8 (%s): '
                'invalid bytes replaced' % err.reason)


class TrackHeader:

    def __init__(self, dat: bytes) -> None:
        # A truncated end-of-tracks record reads as zero cyl/head.
        self.nsec, self.cyl, self.head = (dat + bytes(3))[:3]
        self.crc = dat[3] if len(dat) > 3 else None

    @property
    def is_end(self) -> bool:
        return self.nsec == END_OF_TRACKS

    def __str__(self):
        return '[n%d c%3d h%d]' % (self.nsec, self.cyl, self.head)


class SectorHeader:

    def __init__(self, dat: bytes) -> None:
        (self.cyl, self.head, self.sec, self.n, self.flags,
         self.crc) = struct.unpack('6B', dat)

    @property
    def size(self) -> int:
        return 128 << self.n

    # Flags bit 4: sector not allocated by DOS. Bit 5: no data (ID only).
    @property
    def has_data(self) -> bool:
        return not (self.flags & 0x30)

    def __str__(self):
        return ('[c%3d h%d s%d z%d f%02x]'
                % (self.cyl, self.head, self.sec, self.size, self.flags))


class SectorRecord:
    """A sector header plus its raw (still compressed) data block."""

    def __init__(self, track: TrackHeader, header: SectorHeader,
                 payload: Optional[bytes]) -> None:
        self.track = track
        self.header = header
        self.payload = payload

    def __iter__(self):
        return iter((self.track, self.header, self.payload))


def read_headers(f: BinaryIO) -> Tuple[ImageHeader, Optional[CommentHeader]]:
    """Parse the image header and, if flagged, the comment block.

    Raises NotATD0Image for anything but a plain 'TD' signature, having
    consumed only the 12 image header bytes.
    """
    header = ImageHeader(read_exact(f, IMAGE_HEADER_LEN, 'image header'))
    if header.is_advanced:
        raise error.NotATD0Image(
            'TD0: advanced compression (signature td) is not supported',
            header.signature)
    if not header.is_valid:
        raise error.NotATD0Image(
            'TD0: bad file signature %r' % header.signature,
            header.signature)

    comment = None
    if header.has_comment:
        comment = CommentHeader(
            read_exact(f, COMMENT_HEADER_LEN, 'comment header'))
        comment.set_text(read_exact(f, comment.length, 'comment text'))

    return header, comment


class WalkState(Enum):
    AwaitingTrack, AwaitingSector, Terminated = range(3)


class TD0Walker:
    """Walk the track/sector stream following the image headers.

    The stream has no index: each record's position is only known once
    every earlier record has been consumed, so the walk is strictly
    sequential.
    """

    def __init__(self, f: BinaryIO, skip_dataless: bool = False,
                 trailing_probe: int = DEFAULT_TRAILING_PROBE) -> None:
        self.f = f
        self.skip_dataless = skip_dataless
        self.trailing_probe = trailing_probe
        self.state = WalkState.AwaitingTrack
        self.remaining = 0
        self.trailing: Optional[bytes] = None

    def _read_track_header(self) -> TrackHeader:
        dat = read_exact(self.f, 1, 'track header')
        if dat[0] == END_OF_TRACKS:
            # Some writers truncate the terminating record.
            dat += read_upto(self.f, TRACK_HEADER_LEN - 1)
        else:
            dat += read_exact(self.f, TRACK_HEADER_LEN - 1, 'track header')
        return TrackHeader(dat)

    def _read_payload(self) -> bytes:
        dlen, = struct.unpack('<H', read_exact(self.f, 2, 'data length'))
        return read_exact(self.f, dlen, 'data block')

    def records(self) -> Iterator[Union[TrackHeader, SectorRecord]]:
        while self.state is not WalkState.Terminated:
            track = self._read_track_header()
            if track.is_end:
                self.state = WalkState.Terminated
                self.trailing = read_upto(self.f, self.trailing_probe)
                break
            yield track
            self.state = WalkState.AwaitingSector
            self.remaining = track.nsec
            while self.remaining > 0:
                header = SectorHeader(
                    read_exact(self.f, SECTOR_HEADER_LEN, 'sector header'))
                payload = None
                if header.has_data or not self.skip_dataless:
                    payload = self._read_payload()
                self.remaining -= 1
                yield SectorRecord(track, header, payload)
            self.state = WalkState.AwaitingTrack

    def walk(self) -> Iterator[Tuple[TrackHeader, SectorHeader,
                                     Optional[bytes]]]:
        for rec in self.records():
            if isinstance(rec, SectorRecord):
                yield rec.track, rec.header, rec.payload


# Local variables:
# python-indent: 4
# End:
