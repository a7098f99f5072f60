# td0scan/report.py
#
# Render scan events as text lines.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Iterable, Iterator, List, Optional, TextIO

import sys

from td0scan import events
from td0scan.codec.sector import NAMES as METHOD_NAMES
from td0scan.fs.classify import Unclassified

def hexdump(dat: bytes, base: int = 0, width: int = 16) -> Iterator[str]:
    for o in range(0, len(dat), width):
        chunk = dat[o:o+width]
        asc = ''.join(chr(b) if 0x20 <= b <= 0x7e else '.' for b in chunk)
        yield '%04x  %-*s |%s|' % (base + o, width*3 - 1, chunk.hex(' '), asc)

def slot_line(slot: Unclassified, addr: Optional[str] = None) -> str:
    if slot.ambiguous:
        what = 'ambiguous: ' + ', '.join(slot.matches)
    else:
        what = 'unrecognised'
    if addr is None:
        addr = '%04x' % slot.offset
    return '%s ??   %s' % (addr, what)


class Report:

    def __init__(self, out: Optional[TextIO] = None,
                 dump: str = 'ambiguous') -> None:
        self.out = out
        self.dump = dump

    def want_dump(self, slot: Unclassified) -> bool:
        if self.dump == 'all':
            return True
        return self.dump == 'ambiguous' and slot.any_match

    def lines(self, kind: str, path: str,
              evs: Iterable[events.Event]) -> Iterator[str]:
        for e in evs:
            if isinstance(e, events.ImageOpened):
                yield '%s : %s - %s' % (kind, e.header, path)
                c = e.comment
                if c is not None:
                    yield '    %s : %d' % (c.created_str, c.length)
                    for l in c.lines:
                        yield '    %s : %s' % (c.created_str, l)
            elif isinstance(e, events.ImageSkipped):
                yield '%s : ** SKIPPED: %s - %s' % (kind, e.reason, path)
            elif isinstance(e, events.Notice):
                yield '    ** %s' % e.message
            elif isinstance(e, events.Track):
                yield '    %s' % e.header
            elif isinstance(e, events.Sector):
                s = '      %s' % e.header
                if e.payload_length is None:
                    s += ' no data'
                else:
                    s += ' %s %d' % (METHOD_NAMES.get(e.method, '?')
                                     if e.method is not None else '-',
                                     e.payload_length)
                yield s
            elif isinstance(e, events.SectorFailed):
                yield '        ** %s' % e.reason
            elif isinstance(e, events.DirectoryEntry):
                yield '        %04x %s' % (e.entry.offset, e.entry)
            elif isinstance(e, events.UnclassifiedSlot):
                if self.want_dump(e.slot):
                    yield '        ' + slot_line(e.slot)
                    for l in hexdump(e.raw, e.offset):
                        yield '          ' + l
            elif isinstance(e, events.StreamEnded):
                if e.trailing_byte_count == 0:
                    yield '    EOF'
                else:
                    yield ('    Read %d more bytes: %s'
                           % (e.trailing_byte_count, e.trailing.hex(' ')))
            elif isinstance(e, events.StreamFailed):
                yield '%s : ** FATAL ERROR: %s - %s' % (kind, e.reason, path)

    def emit(self, kind: str, path: str,
             evs: Iterable[events.Event]) -> None:
        out = self.out if self.out is not None else sys.stdout
        for l in self.lines(kind, path, evs):
            print(l, file=out)

    def summary(self, evs: List[events.Event]) -> str:
        n = { 'tracks': 0, 'sectors': 0, 'entries': 0, 'failed': 0 }
        for e in evs:
            if isinstance(e, events.Track):
                n['tracks'] += 1
            elif isinstance(e, events.Sector):
                n['sectors'] += 1
            elif isinstance(e, events.DirectoryEntry):
                n['entries'] += 1
            elif isinstance(e, events.SectorFailed):
                n['failed'] += 1
        return ('%(tracks)d tracks, %(sectors)d sectors, '
                '%(entries)d directory entries, %(failed)d bad sectors' % n)

# Local variables:
# python-indent: 4
# End:
