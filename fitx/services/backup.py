"""Whole-store backup and restore.

The store file is the unit of transfer. Export takes a consistent
snapshot of it with SQLite's online backup into a staging path and hands
that copy to a transport. Import replaces the live file with the given
one without validating it, so an incompatible backup only shows up when
later queries fail.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Protocol, Union
from urllib.parse import unquote, urlparse

import aiosqlite
import httpx

from ..db import Store
from ..errors import ExportError, FitxError, NotFoundError, ReplaceError, TransportError
from ..settings import Settings
from .drive_client import DriveClient, DriveFile

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, path: Path) -> Any: ...


class DirectoryTransport:
    """Share target that is just another directory (SD card, synced folder)."""

    def __init__(self, target_dir: Union[str, Path]) -> None:
        self.target_dir = Path(target_dir)

    async def send(self, path: Path) -> Path:
        self.target_dir.mkdir(parents=True, exist_ok=True)
        dest = self.target_dir / path.name
        await asyncio.to_thread(shutil.copy2, path, dest)
        return dest


def _drive(token: str, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> DriveClient:
    return DriveClient(
        token,
        api_url=settings.drive_api_url,
        upload_url=settings.drive_upload_url,
        timeout=settings.drive_timeout,
        transport=transport,
    )


class DriveTransport:
    def __init__(self, token: str, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.token = token
        self.settings = settings
        self._transport = transport

    async def send(self, path: Path) -> DriveFile:
        async with _drive(self.token, self.settings, self._transport) as client:
            return await client.upload_file(path, path.name, self.settings.backup_mime_type)


@dataclass
class ExportResult:
    path: Path
    handoff: Any = None


def _source_path(source: Union[str, Path]) -> Path:
    if isinstance(source, str) and source.startswith("file:"):
        return Path(unquote(urlparse(source).path))
    return Path(source)


def _sidecars(db_path: Path) -> List[Path]:
    return [db_path.with_name(db_path.name + suffix) for suffix in ("-wal", "-shm", "-journal")]


async def _snapshot(db_path: Path, dest: Path) -> None:
    # Copies every committed page, including those still in the WAL.
    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".part")
    partial.unlink(missing_ok=True)
    try:
        async with aiosqlite.connect(db_path) as source, aiosqlite.connect(partial, check_same_thread=False) as target:
            await source.backup(target)
        os.replace(partial, dest)
    finally:
        partial.unlink(missing_ok=True)


def _replace(source: Path, db_path: Path) -> None:
    staging = db_path.with_name(db_path.name + ".restore")
    try:
        shutil.copyfile(source, staging)
        for stale in _sidecars(db_path):
            stale.unlink(missing_ok=True)
        os.replace(staging, db_path)
    finally:
        staging.unlink(missing_ok=True)


class BackupEngine:
    def __init__(self, store: Store, settings: Optional[Settings] = None) -> None:
        self.store = store
        self.settings = settings or store.settings

    def backup_filename(self, day: Optional[date] = None) -> str:
        return f"{self.settings.backup_prefix}_{(day or date.today()).isoformat()}.db"

    async def export_store(self, transport: Optional[Transport] = None) -> ExportResult:
        """Snapshot the store into the cache dir, then pass the copy to ``transport``."""
        db_path = self.store.path
        logger.info("[fitx] export: locating store at %s", db_path)
        if not self.store.exists():
            listing = sorted(p.name for p in db_path.parent.iterdir()) if db_path.parent.is_dir() else []
            logger.error("[fitx] export: store file missing; %s contains %s", db_path.parent, listing)
            raise NotFoundError(f"Database file not found at {db_path}")

        dest = Path(self.settings.cache_dir) / self.backup_filename()
        async with self.store.maintenance:
            try:
                await _snapshot(db_path, dest)
            except (OSError, aiosqlite.Error) as e:
                logger.error("[fitx] export: copy to %s failed: %s", dest, e)
                raise ExportError(f"could not stage backup at {dest}: {e}") from e
        logger.info("[fitx] export: staged %s", dest)

        if transport is None:
            return ExportResult(dest)
        try:
            handoff = await transport.send(dest)
        except FitxError:
            raise
        except Exception as e:
            logger.error("[fitx] export: handoff failed: %s", e)
            raise TransportError(str(e)) from e
        logger.info("[fitx] export: handed off %s", dest.name)
        return ExportResult(dest, handoff)

    async def import_store(self, source: Union[str, Path]) -> Path:
        """Replace the live store file with ``source``. Contents are not validated."""
        src = _source_path(source)
        if not src.is_file():
            raise NotFoundError(f"backup file not found: {source}")

        db_path = self.store.path
        async with self.store.maintenance:
            try:
                db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ReplaceError(f"could not create {db_path.parent}: {e}") from e
            await self.store.dispose()
            try:
                await asyncio.to_thread(_replace, src, db_path)
            except OSError as e:
                logger.error("[fitx] import: replacing %s failed: %s", db_path, e)
                raise ReplaceError(f"could not replace store with {src}: {e}") from e
        logger.info("[fitx] import: restored store from %s", src)
        return db_path

    async def list_cloud_backups(self, token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[DriveFile]:
        async with _drive(token, self.settings, transport) as client:
            return await client.list_files(self.settings.backup_prefix)

    async def restore_from_cloud(
        self,
        token: str,
        file_id: str,
        file_name: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Path:
        dest = Path(self.settings.cache_dir) / Path(file_name).name
        async with _drive(token, self.settings, transport) as client:
            await client.download_file(file_id, dest)
        return await self.import_store(dest)

