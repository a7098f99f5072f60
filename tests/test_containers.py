import gzip
import io
import os
import tarfile
import zipfile
from pathlib import Path

import pytest

from conftest import END_OF_TRACKS, SCENARIO_HEADER, fat_slot, raw_sector, track_header
from td0scan import events
from td0scan.containers import Kind, container_kind, find_sources, gunzipped_name
from td0scan.scan import scan_paths, scan_source

IMAGE = (
    SCENARIO_HEADER
    + track_header(1)
    + raw_sector(fat_slot() + b"\xe5" * 224)
    + END_OF_TRACKS
)


def _tar_gz(path: Path, members: dict) -> None:
    with tarfile.open(path, "w:gz") as tf:
        for name, dat in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(dat)
            tf.addfile(info, io.BytesIO(dat))


def test_plain_file(tmp_path: Path) -> None:
    (tmp_path / "DISK1.TD0").write_bytes(IMAGE)
    (tmp_path / "notes.txt").write_text("not an image")

    sources = list(find_sources(str(tmp_path)))
    assert [(s.kind, Path(s.name).name) for s in sources] == [(Kind.FILE, "DISK1.TD0")]
    assert sources[0].container is None


def test_zip_members(tmp_path: Path) -> None:
    path = tmp_path / "set.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("a.td0", IMAGE)
        zf.writestr("readme.txt", "hello")
        zf.writestr("sub/b.TD0", IMAGE)

    found = [(s.kind, s.name, s.path, scan_source(s)) for s in find_sources(str(path))]
    assert [f[:2] for f in found] == [(Kind.ZIP, "a.td0"), (Kind.ZIP, "sub/b.TD0")]
    assert found[0][2] == "%s / a.td0" % path
    for *_, evs in found:
        assert isinstance(evs[-1], events.StreamEnded)
        assert any(isinstance(e, events.DirectoryEntry) for e in evs)


def test_tarball_members(tmp_path: Path) -> None:
    path = tmp_path / "set.tgz"
    _tar_gz(path, {"x/one.td0": IMAGE, "x/two.bin": b"zz"})

    assert container_kind(str(path)) == Kind.TARBALL
    found = [(s.kind, s.name, scan_source(s)) for s in find_sources(str(path))]
    assert [f[:2] for f in found] == [(Kind.TARBALL, "x/one.td0")]
    assert isinstance(found[0][2][-1], events.StreamEnded)


def test_gzipped_image(tmp_path: Path) -> None:
    path = tmp_path / "disk.td0.gz"
    path.write_bytes(gzip.compress(IMAGE))

    (source,) = find_sources(str(path))
    assert source.kind == Kind.GZIP
    assert source.name == "disk.td0"
    evs = scan_source(source)
    assert isinstance(evs[0], events.ImageOpened)
    assert isinstance(evs[-1], events.StreamEnded)


def test_gunzipped_name() -> None:
    assert gunzipped_name("DISK.TD0.GZ") == "DISK.TD0"
    assert gunzipped_name("set.tgz") == "set.tar"
    assert gunzipped_name("disk.td0") == "disk.td0"


def test_corrupt_zip_reported(tmp_path: Path) -> None:
    path = tmp_path / "broken.zip"
    path.write_bytes(b"PK\x03\x04 this is not really a zip")

    (source,) = find_sources(str(path))
    assert source.error is not None
    (ev,) = scan_source(source)
    assert isinstance(ev, events.StreamFailed)


def test_one_bad_image_does_not_stop_scan(tmp_path: Path) -> None:
    (tmp_path / "a.td0").write_bytes(IMAGE[:20])
    (tmp_path / "b.td0").write_bytes(b"td" + bytes(10))
    (tmp_path / "c.td0").write_bytes(IMAGE)

    results = list(scan_paths([str(tmp_path)]))
    names = [Path(s.name).name for s, _ in results]
    assert names == ["a.td0", "b.td0", "c.td0"]
    terminals = [type(evs[-1]) for _, evs in results]
    assert terminals == [events.StreamFailed, events.ImageSkipped, events.StreamEnded]


def test_directory_walk_is_sorted(tmp_path: Path) -> None:
    for d in ("b", "a"):
        (tmp_path / d).mkdir()
        (tmp_path / d / "img.td0").write_bytes(IMAGE)

    names = [Path(s.name).parent.name for s in find_sources(str(tmp_path))]
    assert names == ["a", "b"]


def test_zip_suffix_without_magic(tmp_path: Path) -> None:
    path = tmp_path / "disks.pkzip"
    path.write_bytes(b"not a zip at all")
    assert container_kind(str(path)) == Kind.ZIP

    (source,) = find_sources(str(path))
    assert source.error is not None
    (ev,) = scan_source(source)
    assert isinstance(ev, events.StreamFailed)


def test_gzip_suffix_is_not_zip(tmp_path: Path) -> None:
    path = tmp_path / "disk.td0.gzip"
    path.write_bytes(gzip.compress(IMAGE))
    assert container_kind(str(path)) == Kind.GZIP


def test_unlistable_directory_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "img.td0").write_bytes(IMAGE)
    locked = tmp_path / "locked"
    locked.mkdir()

    real_scandir = os.scandir

    def scandir(path="."):
        if os.fspath(path) == str(locked):
            raise PermissionError(13, "Permission denied", str(locked))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    sources = list(find_sources(str(tmp_path)))

    assert [Path(s.name).name for s in sources if s.error is None] == ["img.td0"]
    (failed,) = [s for s in sources if s.error is not None]
    assert failed.name == str(locked)
    (ev,) = scan_source(failed)
    assert isinstance(ev, events.StreamFailed)
    assert "cannot list directory" in ev.reason
    assert "Permission denied" in ev.reason
