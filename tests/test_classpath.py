from __future__ import annotations

from pathlib import Path

import pytest

from autumnio import classpath
from autumnio.errors import ResourceIOError, ResourceNotFoundError


def test_read_text_from_directory(class_dir: Path):
    text = classpath.read_text("/com/example/pkg/app.yaml", search_path=[class_dir])
    assert text == "app:\n  title: Demo\n"


def test_read_from_archive(archive: Path):
    assert classpath.read_bytes("org/vendor/lib.txt", search_path=[archive]) == b"vendor"


def test_first_entry_wins(class_dir: Path, archive: Path):
    path = "com/example/pkg/sub1/sub1.txt"
    assert classpath.read_text(path, search_path=[archive, class_dir]) == "sub1 in zip"
    assert classpath.read_text(path, search_path=[class_dir, archive]) == "sub1"


def test_open_resource_closes_stream(class_dir: Path):
    streams = []

    def callback(stream):
        streams.append(stream)
        return stream.read(3)

    assert classpath.open_resource("com/example/pkg/sub1/sub1.txt", callback, [class_dir]) == b"sub"
    assert streams[0].closed


def test_missing_resource(class_dir: Path, archive: Path):
    with pytest.raises(ResourceNotFoundError) as exc:
        classpath.read_text("com/example/pkg/nope.txt", search_path=[class_dir, archive])
    assert isinstance(exc.value, ResourceIOError)
    assert exc.value.path == "com/example/pkg/nope.txt"


def test_directories_are_not_resources(class_dir: Path, archive: Path):
    with pytest.raises(ResourceNotFoundError):
        classpath.read_bytes("com/example/pkg/", search_path=[archive])
    with pytest.raises(ResourceNotFoundError):
        classpath.read_bytes("com/example/pkg/sub1", search_path=[class_dir])


def test_callback_io_error_is_wrapped(class_dir: Path):
    def callback(_stream):
        raise OSError("disk gone")

    with pytest.raises(ResourceIOError) as exc:
        classpath.open_resource("com/example/pkg/app.yaml", callback, [class_dir])
    assert "disk gone" in str(exc.value.__cause__)


def test_empty_entry_means_current_directory(class_dir: Path, monkeypatch):
    monkeypatch.chdir(class_dir)
    assert classpath.read_text("com/example/other/ignored.txt", search_path=[""]) == "other"
