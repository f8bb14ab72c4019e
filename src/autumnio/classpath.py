"""Search-path lookup of single resources, in directories and zip archives."""

from __future__ import annotations

import logging
import os
import sys
import zipfile
from pathlib import Path
from typing import IO, Callable, Iterable, List, Optional, TypeVar, Union

from .errors import ResourceIOError, ResourceNotFoundError
from .resource import remove_leading_slash

log = logging.getLogger(__name__)

T = TypeVar("T")
PathEntry = Union[str, "os.PathLike[str]"]


def search_path_entries(search_path: Optional[Iterable[PathEntry]] = None) -> List[Path]:
    """Return absolute search-path entries, defaulting to ``sys.path``.

    An empty entry means the current directory, as it does on ``sys.path``.
    """
    entries = sys.path if search_path is None else search_path
    return [Path(os.path.abspath(os.fspath(e) or os.curdir)) for e in entries]


def is_archive(path: Path) -> bool:
    return path.is_file() and zipfile.is_zipfile(path)


def open_resource(
    path: str,
    callback: Callable[[IO[bytes]], T],
    search_path: Optional[Iterable[PathEntry]] = None,
) -> T:
    """Open the first resource named ``path`` and hand its stream to ``callback``.

    The stream is closed once ``callback`` returns.
    """
    path = remove_leading_slash(path.replace("\\", "/"))
    try:
        for entry in search_path_entries(search_path):
            if entry.is_dir():
                candidate = entry / path
                if path and candidate.is_file():
                    log.debug("reading %s", candidate)
                    with candidate.open("rb") as stream:
                        return callback(stream)
            elif is_archive(entry):
                with zipfile.ZipFile(entry) as zf:
                    try:
                        info = zf.getinfo(path)
                    except KeyError:
                        continue
                    if info.is_dir():
                        continue
                    log.debug("reading %s!/%s", entry, path)
                    with zf.open(info) as stream:
                        return callback(stream)
    except (OSError, zipfile.BadZipFile) as e:
        raise ResourceIOError(f"Failed to read resource {path}: {e}") from e
    raise ResourceNotFoundError(path)


def read_bytes(path: str, search_path: Optional[Iterable[PathEntry]] = None) -> bytes:
    return open_resource(path, lambda stream: stream.read(), search_path)


def read_text(
    path: str,
    encoding: str = "utf-8",
    search_path: Optional[Iterable[PathEntry]] = None,
) -> str:
    return read_bytes(path, search_path).decode(encoding)
