from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

DIR_FILES = {
    "com/example/pkg/app.yaml": "app:\n  title: Demo\n",
    "com/example/pkg/component.py": "class Component: ...\n",
    "com/example/pkg/__init__.py": "",
    "com/example/pkg/sub1/sub1.txt": "sub1",
    "com/example/pkg/sub1/sub2/sub2.txt": "sub2",
    "com/example/pkg/sub1/sub2/sub3/sub3.txt": "sub3",
    "com/example/other/ignored.txt": "other",
}

ZIP_FILES = {
    "com/example/pkg/shared.txt": "from zip",
    "com/example/pkg/sub1/sub1.txt": "sub1 in zip",
    "com/example/pkg/plugins/plugin.py": "PLUGIN = True\n",
    "org/vendor/lib.txt": "vendor",
}


@pytest.fixture
def class_dir(tmp_path: Path) -> Path:
    root = tmp_path / "classes"
    for name, content in DIR_FILES.items():
        p = root / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content)
    (root / "com/example/pkg/empty").mkdir()
    return root


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    path = tmp_path / "lib.zip"
    with zipfile.ZipFile(path, "w") as zf:
        # explicit directory entries for only part of the tree
        zf.writestr("com/example/pkg/", "")
        for name, content in ZIP_FILES.items():
            zf.writestr(name, content)
    return path
