"""Resource discovery under a namespace, across directory and archive mounts.

A namespace such as ``com.example.pkg`` may be mounted by several search-path
entries at once: a plain directory holding ``com/example/pkg`` and any number
of zip archives with entries below ``com/example/pkg/``. ``ResourceScanner``
visits all of them, in search-path order, and reports every regular file as
a ``Resource``.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, TypeVar, Union
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

from .classpath import PathEntry, is_archive, search_path_entries
from .errors import MalformedLocationError, ResourceIOError
from .resource import Resource, canonical_name, remove_trailing_slash

log = logging.getLogger(__name__)

R = TypeVar("R")

FILE_SCHEME = "file"
ZIP_SCHEME = "zip"
ARCHIVE_SEPARATOR = "!/"


def namespace_path(namespace: str) -> str:
    """``com.example.pkg`` or ``com\\example\\pkg`` -> ``com/example/pkg``."""
    parts = namespace.replace(".", "/").replace("\\", "/").split("/")
    return "/".join(p for p in parts if p)


def _file_uri_to_path(uri: str) -> Path:
    try:
        parts = urlsplit(uri)
    except ValueError as e:
        raise MalformedLocationError(uri, str(e)) from e
    if parts.scheme != FILE_SCHEME or parts.netloc not in ("", "localhost") or not parts.path:
        raise MalformedLocationError(uri, "expected an absolute file URI")
    return Path(url2pathname(parts.path))


@dataclass(frozen=True)
class DirectoryMount:
    """A namespace exposed by a directory on disk."""

    root: Path
    base: str

    @classmethod
    def from_location(cls, location: str, prefix: str) -> "DirectoryMount":
        root = _file_uri_to_path(location)
        depth = len([p for p in prefix.split("/") if p])
        base = Path(*root.parts[: len(root.parts) - depth]) if depth else root
        return cls(root=root, base=remove_trailing_slash(str(base)))

    def walk(self) -> Iterator[Resource]:
        try:
            for file in _walk_dir(self.root):
                path = str(file)
                yield Resource("file:" + path, canonical_name(path[len(self.base):]))
        except OSError as e:
            raise ResourceIOError(f"Failed to walk {self.root}: {e}") from e


@dataclass(frozen=True)
class ArchiveMount:
    """A namespace exposed by entries inside a zip archive.

    The archive is opened for the duration of a single ``walk``.
    """

    archive: Path
    base: str
    inner: str

    @classmethod
    def from_location(cls, location: str, prefix: str) -> "ArchiveMount":
        rest = location[len(ZIP_SCHEME) + 1:]
        archive_uri, sep, inner = rest.partition(ARCHIVE_SEPARATOR)
        if not sep:
            raise MalformedLocationError(location, f"missing '{ARCHIVE_SEPARATOR}' separator")
        return cls(
            archive=_file_uri_to_path(archive_uri),
            base=f"{ZIP_SCHEME}:{archive_uri}!",
            inner=unquote(inner).strip("/"),
        )

    def walk(self) -> Iterator[Resource]:
        try:
            with zipfile.ZipFile(self.archive) as zf:
                root = zipfile.Path(zf, at=f"{self.inner}/" if self.inner else "")
                for entry in _walk_zip(root):
                    yield Resource(self.base, canonical_name(entry.at))
        except (OSError, zipfile.BadZipFile) as e:
            raise ResourceIOError(f"Failed to read archive {self.archive}: {e}") from e


Mount = Union[DirectoryMount, ArchiveMount]


def mount_for(location: str, prefix: str) -> Mount:
    """Pick the mount variant for ``location`` by its scheme."""
    scheme, sep, _ = location.partition(":")
    if not sep:
        raise MalformedLocationError(location, "missing scheme")
    if scheme == FILE_SCHEME:
        return DirectoryMount.from_location(location, prefix)
    if scheme == ZIP_SCHEME:
        return ArchiveMount.from_location(location, prefix)
    raise MalformedLocationError(location, f"unsupported scheme '{scheme}'")


def _walk_dir(path: Path) -> Iterator[Path]:
    for child in sorted(path.iterdir(), key=lambda p: p.name):
        if child.is_dir():
            if not child.is_symlink():
                yield from _walk_dir(child)
        elif child.is_file():
            yield child


def _walk_zip(node: zipfile.Path) -> Iterator[zipfile.Path]:
    for child in sorted(node.iterdir(), key=lambda p: p.name):
        if child.is_dir():
            yield from _walk_zip(child)
        elif child.is_file():
            yield child


def _archive_exposes(archive: Path, prefix: str) -> bool:
    with zipfile.ZipFile(archive) as zf:
        if not prefix:
            return bool(zf.namelist())
        return any(name.startswith(prefix + "/") for name in zf.namelist())


class ResourceScanner:
    """Enumerate every resource below ``base_package``.

    ``search_path`` lists directories and zip archives to look in; it
    defaults to ``sys.path`` as it stands when ``scan`` is called.
    """

    def __init__(self, base_package: str, search_path: Optional[Iterable[PathEntry]] = None) -> None:
        self.base_package = base_package
        self.search_path = list(search_path) if search_path is not None else None

    @property
    def prefix(self) -> str:
        return namespace_path(self.base_package)

    def mounts(self) -> List[str]:
        """Return the location of every mount exposing the namespace, in search order."""
        prefix = self.prefix
        found: List[str] = []
        try:
            for entry in search_path_entries(self.search_path):
                if entry.is_dir():
                    candidate = entry / prefix if prefix else entry
                    if candidate.is_dir():
                        found.append(candidate.as_uri())
                elif is_archive(entry) and _archive_exposes(entry, prefix):
                    found.append(f"{ZIP_SCHEME}:{entry.as_uri()}{ARCHIVE_SEPARATOR}{prefix}")
        except (OSError, zipfile.BadZipFile) as e:
            raise ResourceIOError(f"Failed to enumerate mounts for {self.base_package}: {e}") from e
        return found

    def iter_resources(self) -> Iterator[Resource]:
        prefix = self.prefix
        for location in self.mounts():
            log.info("scan path: %s", location)
            for res in mount_for(location, prefix).walk():
                log.debug("found resource: %s", res)
                yield res

    def scan(self, mapper: Callable[[Resource], Optional[R]]) -> List[R]:
        """Apply ``mapper`` to each resource and collect the non-None results."""
        collector: List[R] = []
        for res in self.iter_resources():
            r = mapper(res)
            if r is not None:
                collector.append(r)
        return collector


def module_name(resource: Resource) -> Optional[str]:
    """Map ``pkg/sub/mod.py`` to ``pkg.sub.mod``; None for non-module files."""
    name = resource.name
    if not name.endswith(".py"):
        return None
    parts = name[: -len(".py")].split("/")
    if parts[-1] == "__init__":
        parts = parts[:-1]
    if not parts or not all(p.isidentifier() for p in parts):
        return None
    return ".".join(parts)
