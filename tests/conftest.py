from __future__ import annotations

import importlib.util
import struct
import sys
from pathlib import Path


def repo_src_path() -> Path:
    """Return the repository's ``src`` directory."""

    return Path(__file__).resolve().parents[1] / "src"


def _ensure_repo_on_path() -> None:
    if importlib.util.find_spec("td0scan") is None:
        sys.path.insert(0, str(repo_src_path()))


_ensure_repo_on_path()


# Byte builders for hand-made TD0 streams. CRC fields are left at zero:
# nothing in the scanner checks them.

SCENARIO_HEADER = bytes.fromhex("54 44 00 00 15 00 00 00 00 02 00 00")


def image_header(
    sig: bytes = b"TD",
    version: int = 0x15,
    data_rate: int = 0,
    drive_type: int = 0,
    stepping: int = 0,
    dos: int = 0,
    sides: int = 2,
) -> bytes:
    return struct.pack(
        "<2s8BH", sig, 0, 0, version, data_rate, drive_type, stepping, dos, sides, 0
    )


def comment_block(
    text: bytes,
    year: int = 90,
    month: int = 4,
    day: int = 1,
    hour: int = 12,
    minute: int = 0,
    second: int = 0,
    length: int | None = None,
) -> bytes:
    if length is None:
        length = len(text)
    return struct.pack("<2H6B", 0, length, year, month, day, hour, minute, second) + text


def track_header(nsec: int, cyl: int = 0, head: int = 0) -> bytes:
    return bytes([nsec, cyl, head, 0])


END_OF_TRACKS = track_header(255)


def sector_header(
    cyl: int = 0, head: int = 0, sec: int = 1, n: int = 1, flags: int = 0
) -> bytes:
    return bytes([cyl, head, sec, n, flags, 0])


def data_block(payload: bytes) -> bytes:
    return struct.pack("<H", len(payload)) + payload


def raw_sector(dat: bytes, **kwargs) -> bytes:
    """Sector header plus a method-0 data block holding @dat verbatim."""

    return sector_header(**kwargs) + data_block(b"\x00" + dat)


def fat_slot(
    name: bytes = b"COMMAND ",
    ext: bytes = b"COM",
    attr: int = 0x20,
    reserved: bytes = bytes(10),
    time: int = 0,
    date: int = 0,
    cluster: int = 2,
    size: int = 25307,
) -> bytes:
    return struct.pack("<8s3sB10sHHHI", name, ext, attr, reserved, time, date, cluster, size)


def cpm_slot(
    status: int = 0,
    name: bytes = b"STAT    ",
    ext: bytes = b"COM",
    ex: int = 0,
    s1: int = 0,
    s2: int = 0,
    rc: int = 0x22,
    al: bytes = bytes(range(2, 18)),
) -> bytes:
    return struct.pack("<B8s3s4B16s", status, name, ext, ex, s1, s2, rc, al)


# Fits both layouts: status/marker 0x00, printable name, all-zero tail.
AMBIGUOUS_SLOT = cpm_slot(name=b"FILE    ", ext=b"TXT", rc=0, al=bytes(16))

FILLER_SLOT = b"\xe5" * 32
