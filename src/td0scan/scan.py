# td0scan/scan.py
#
# Drive the header decoder, walker, decompressor and classifier over one
# TD0 stream, turning every outcome into an event.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import BinaryIO, Iterable, Iterator, List, Optional, Tuple

from td0scan import error, events
from td0scan.codec import sector as sector_codec
from td0scan.config import ScanConfig
from td0scan.containers import ContainerErrors, Source, find_sources
from td0scan.fs.classify import Unclassified, classify_sector
from td0scan.image.td0 import (TD0Walker, TrackHeader, SectorRecord,
                               read_headers)

# Reading an archive member can also fail in these ways.
OpenErrors = ContainerErrors + (NotImplementedError, RuntimeError)


def _sector_events(rec: SectorRecord, config: ScanConfig,
                   classify: bool) -> Iterator[events.Event]:
    payload = rec.payload
    yield events.Sector(rec.header,
                        None if payload is None else len(payload),
                        payload[0] if payload else None)
    if payload is None or not classify:
        return
    try:
        dat = sector_codec.unpack(payload, rec.header.size)
    except (error.LengthMismatch, error.UnknownEncodingMethod) as err:
        yield events.SectorFailed(rec.header, str(err))
        return
    for result in classify_sector(dat, config):
        if isinstance(result, Unclassified):
            yield events.UnclassifiedSlot(rec.header, result)
        else:
            yield events.DirectoryEntry(rec.header, result)

def _walk_events(f: BinaryIO, config: ScanConfig) -> Iterator[events.Event]:
    header, comment = read_headers(f)
    yield events.ImageOpened(header, comment)
    if comment is not None and comment.text_error is not None:
        yield events.Notice(str(comment.text_error))

    walker = TD0Walker(f, skip_dataless=config.skip_dataless_sectors,
                       trailing_probe=config.trailing_probe)
    first = True
    for rec in walker.records():
        if isinstance(rec, TrackHeader):
            yield events.Track(rec)
            continue
        classify = (config.classify == 'all'
                    or (config.classify == 'first' and first))
        first = False
        yield from _sector_events(rec, config, classify)

    assert walker.trailing is not None
    yield events.StreamEnded(walker.trailing)

def scan_stream(f: BinaryIO,
                config: Optional[ScanConfig] = None) -> Iterator[events.Event]:
    """Yield the events for one TD0 stream.

    Exactly one terminal event (ImageSkipped, StreamEnded or StreamFailed)
    ends the sequence. Errors never escape: they belong to this stream
    alone.
    """
    if config is None:
        config = ScanConfig()
    try:
        yield from _walk_events(f, config)
    except error.NotATD0Image as err:
        yield events.ImageSkipped(err.signature, str(err))
    except error.Fatal as err:
        yield events.StreamFailed(str(err))
    except OpenErrors as err:
        yield events.StreamFailed('read error: %s' % err)

def scan_source(source: Source,
                config: Optional[ScanConfig] = None) -> List[events.Event]:
    if source.error is not None:
        return [ events.StreamFailed(source.error) ]
    try:
        with source.open() as f:
            return list(scan_stream(f, config))
    except OpenErrors as err:
        return [ events.StreamFailed('cannot open: %s' % err) ]

def scan_paths(paths: Iterable[str], config: Optional[ScanConfig] = None
) -> Iterator[Tuple[Source, List[events.Event]]]:
    for path in paths:
        for source in find_sources(path):
            yield source, scan_source(source, config)

# Local variables:
# python-indent: 4
# End:
