from __future__ import annotations

import pytest
import pytest_asyncio

from fitx.db import Store
from fitx.migrations import ensure_schema
from fitx.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        cache_dir=tmp_path / "cache",
        backup_dir=tmp_path / "backups",
        _env_file=None,
    )


@pytest_asyncio.fixture
async def bare_store(settings):
    """Store handle on a file that has not been migrated yet."""
    store = Store(settings)
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def store(bare_store):
    await ensure_schema(bare_store)
    return bare_store
