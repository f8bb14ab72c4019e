from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Resource:
    """A file found under a scanned namespace.

    ``location`` says where the bytes live: ``file:<absolute path>`` for a
    directory mount, or the archive base (``zip:file:///...!``) for an archive
    mount. ``name`` is the ``/``-separated path relative to the mount base.
    """

    location: str
    name: str


def remove_leading_slash(s: str) -> str:
    if s.startswith("/") or s.startswith("\\"):
        s = s[1:]
    return s


def remove_trailing_slash(s: str) -> str:
    if s.endswith("/") or s.endswith("\\"):
        s = s[:-1]
    return s


def canonical_name(s: str) -> str:
    return remove_leading_slash(s.replace("\\", "/"))
