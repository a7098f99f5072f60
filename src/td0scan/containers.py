# td0scan/containers.py
#
# Locate TD0 images on disk: plain files, Zip members, tarball members and
# single gzip'd images.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import BinaryIO, Callable, ContextManager, Iterator, List, Optional

import contextlib, gzip, os, tarfile, zipfile, zlib

ZIP_MAGIC = b'PK\x03\x04'
GZIP_MAGIC = b'\x1f\x8b'

TD0_SUFFIX = '.td0'
GZIP_SUFFIXES = ('.tgz', '.gz', '.gzip')

# Errors raised by the standard archive readers on damaged input.
ContainerErrors = (OSError, EOFError, zlib.error,
                   zipfile.BadZipFile, tarfile.TarError)

class Kind:
    FILE    = 'F'
    ZIP     = 'Z'
    TARBALL = 'T'
    GZIP    = 'G'


class Source:
    """One candidate TD0 stream.

    Sources yielded from inside an archive are only valid until the next
    source is requested: open and scan each before moving on.
    """

    def __init__(self, kind: str, container: Optional[str], name: str,
                 opener: Optional[Callable[[], ContextManager[BinaryIO]]],
                 error: Optional[str] = None) -> None:
        self.kind = kind
        self.container = container
        self.name = name
        self.opener = opener
        self.error = error

    @property
    def path(self) -> str:
        if self.container is None:
            return self.name
        return '%s / %s' % (self.container, self.name)

    def open(self) -> ContextManager[BinaryIO]:
        assert self.opener is not None
        return self.opener()

    def __str__(self):
        return '%s : %s' % (self.kind, self.path)


def is_td0_name(name: str) -> bool:
    return name.lower().endswith(TD0_SUFFIX)

def gunzipped_name(name: str) -> str:
    lname = name.lower()
    if lname.endswith('.tgz'):
        return name[:-4] + '.tar'
    for sfx in GZIP_SUFFIXES:
        if lname.endswith(sfx):
            return name[:-len(sfx)]
    return name

def read_magic(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read(4)

def container_kind(path: str, magic: Optional[bytes] = None) -> Optional[str]:
    """Decide how to open @path, or None if it holds no TD0 candidate."""
    name = os.path.basename(path).lower()
    if magic is None:
        magic = read_magic(path)
    has_gzip = name.endswith(GZIP_SUFFIXES) or magic[:2] == GZIP_MAGIC
    # Any 'zip' suffix (.zip, .pkzip) except the gzip one.
    has_zip = name.endswith('zip') and not name.endswith(GZIP_SUFFIXES)
    if has_zip or magic == ZIP_MAGIC:
        return Kind.ZIP
    if has_gzip or name.endswith('.tar'):
        if tarfile.is_tarfile(path):
            return Kind.TARBALL
        if magic[:2] == GZIP_MAGIC and is_td0_name(gunzipped_name(name)):
            return Kind.GZIP
    if is_td0_name(name):
        return Kind.FILE
    return None


def _zip_sources(path: str, container: str) -> Iterator[Source]:
    with zipfile.ZipFile(path) as zf:
        for info in zf.infolist():
            if info.is_dir() or not is_td0_name(info.filename):
                continue
            yield Source(Kind.ZIP, container, info.filename,
                         lambda info=info: zf.open(info))

def _tar_sources(path: str, container: str) -> Iterator[Source]:
    with tarfile.open(path, 'r:*') as tf:
        for member in tf:
            if not member.isfile() or not is_td0_name(member.name):
                continue
            yield Source(Kind.TARBALL, container, member.name,
                         lambda member=member: contextlib.closing(
                             tf.extractfile(member)))

def file_sources(path: str) -> Iterator[Source]:
    name = os.path.basename(path)
    try:
        kind = container_kind(path)
    except ContainerErrors as err:
        yield Source(Kind.FILE, None, path, None, error=str(err))
        return
    if kind is None:
        return
    if kind == Kind.FILE:
        yield Source(kind, None, path, lambda: open(path, 'rb'))
    elif kind == Kind.GZIP:
        yield Source(kind, path, gunzipped_name(name),
                     lambda: gzip.open(path, 'rb'))
    else:
        walker = _zip_sources if kind == Kind.ZIP else _tar_sources
        try:
            yield from walker(path, path)
        except ContainerErrors as err:
            yield Source(kind, None, path, None, error=str(err))

def _walk_failures(errors: List[OSError]) -> Iterator[Source]:
    while errors:
        err = errors.pop(0)
        yield Source(Kind.FILE, None, err.filename or '?', None,
                     error='cannot list directory: %s' % err)

def find_sources(path: str) -> Iterator[Source]:
    """Yield every TD0 candidate under @path (a file or a directory)."""
    if not os.path.isdir(path):
        yield from file_sources(path)
        return
    errors: List[OSError] = []
    for root, dirs, files in os.walk(path, onerror=errors.append):
        yield from _walk_failures(errors)
        dirs.sort()
        for f in sorted(files):
            yield from file_sources(os.path.join(root, f))
    yield from _walk_failures(errors)

# Local variables:
# python-indent: 4
# End:
