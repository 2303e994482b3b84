from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from local_store import LocalStore


@pytest.fixture
def store() -> LocalStore:
    return LocalStore.in_memory()


@pytest.fixture
def durable_store(tmp_path: Path) -> Iterator[LocalStore]:
    opened = LocalStore.open(tmp_path / "talbot-data")
    yield opened
    opened.close()
