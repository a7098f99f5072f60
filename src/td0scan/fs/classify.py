# td0scan/fs/classify.py
#
# Split sector data into 32-byte slots and decide what each slot holds.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Iterator, Optional, Tuple, Union

from td0scan.config import ScanConfig
from . import cpm, fat

SLOT_LEN = 32


class Unclassified:
    """A slot that neither recognizer, or both, accepted."""

    kind = 'unclassified'

    def __init__(self, offset: int, raw: bytes,
                 matches: Tuple[str, ...]) -> None:
        self.offset = offset
        self.raw = raw
        self.matches = matches

    @property
    def ambiguous(self) -> bool:
        return len(self.matches) > 1

    @property
    def any_match(self) -> bool:
        return len(self.matches) > 0


Entry = Union[fat.FatEntry, cpm.CpmEntry]
Result = Union[fat.FatEntry, cpm.CpmEntry, Unclassified]


def classify_slot(slot: bytes, offset: int = 0,
                  config: Optional[ScanConfig] = None) -> Result:
    if config is None:
        config = ScanConfig()
    candidates = [
        fat.recognise(slot, offset, config.fat_reserved_nonzero_max),
        cpm.recognise(slot, offset, config.cpm_max_record_count) ]
    matches = [x for x in candidates if x is not None]
    if len(matches) == 1:
        return matches[0]
    return Unclassified(offset, bytes(slot), tuple(x.kind for x in matches))

def slots(dat: bytes) -> Iterator[Tuple[int, bytes]]:
    # A trailing partial slot is not classified.
    for off in range(0, len(dat) - SLOT_LEN + 1, SLOT_LEN):
        yield off, dat[off:off+SLOT_LEN]

def classify_sector(dat: bytes,
                    config: Optional[ScanConfig] = None) -> Iterator[Result]:
    for off, slot in slots(dat):
        yield classify_slot(slot, off, config)

# Local variables:
# python-indent: 4
# End:
