"""Shared pytest setup.

Puts `src/` first on `sys.path` so the suite exercises the working-tree
`trackjs` package even when an older copy is installed in the environment.
"""

from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    src_dir = str(Path(__file__).resolve().parents[1] / "src")
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)
