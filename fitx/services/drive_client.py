from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from ..errors import TransportError
from ..settings import get_settings

logger = logging.getLogger(__name__)


class DriveFile(BaseModel):
    id: str
    name: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    created_time: Optional[datetime] = Field(default=None, alias="createdTime")


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"{fallback} (HTTP {resp.status_code})"
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return err["message"]
    return f"{fallback} (HTTP {resp.status_code})"


class DriveClient:
    """Google Drive v3 calls used for backups. Token acquisition is the caller's job."""

    def __init__(
        self,
        token: str,
        api_url: Optional[str] = None,
        upload_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.api_url = (api_url or settings.drive_api_url).rstrip("/")
        self.upload_url = (upload_url or settings.drive_upload_url).rstrip("/")
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=settings.drive_timeout if timeout is None else timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DriveClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def upload_file(self, local_path: Path, remote_name: str, mime_type: str) -> DriveFile:
        metadata = {"name": remote_name, "mimeType": mime_type}
        content = await asyncio.to_thread(Path(local_path).read_bytes)
        boundary = uuid.uuid4().hex
        body = b"".join([
            f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode(),
            json.dumps(metadata).encode(),
            f"\r\n--{boundary}\r\nContent-Type: {mime_type}\r\n\r\n".encode(),
            content,
            f"\r\n--{boundary}--\r\n".encode(),
        ])
        try:
            resp = await self._client.post(
                f"{self.upload_url}/files",
                params={"uploadType": "multipart", "fields": "id,name,mimeType,createdTime"},
                content=body,
                headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"drive upload failed: {e}") from e
        if resp.is_error:
            raise TransportError(_error_message(resp, "Failed to upload to Drive"))
        uploaded = DriveFile.model_validate(resp.json())
        logger.info("[fitx] drive: uploaded %s as %s", remote_name, uploaded.id)
        return uploaded

    async def list_files(self, name_pattern: str) -> List[DriveFile]:
        params: Dict[str, Any] = {
            "q": f"name contains '{_quote(name_pattern)}' and trashed = false",
            "fields": "files(id, name, mimeType, createdTime)",
            "orderBy": "createdTime desc",
        }
        try:
            resp = await self._client.get(f"{self.api_url}/files", params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"drive list failed: {e}") from e
        if resp.is_error:
            raise TransportError(_error_message(resp, "Failed to list backups"))
        files = [DriveFile.model_validate(f) for f in resp.json().get("files") or []]
        logger.info("[fitx] drive: %d backup(s) matching %r", len(files), name_pattern)
        return files

    async def download_file(self, file_id: str, dest_path: Path) -> Path:
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with self._client.stream("GET", f"{self.api_url}/files/{file_id}", params={"alt": "media"}) as resp:
                if resp.status_code != 200:
                    await resp.aread()
                    raise TransportError(_error_message(resp, "Failed to download file from Drive"))
                with open(dest_path, "wb") as fh:
                    async for chunk in resp.aiter_bytes():
                        fh.write(chunk)
        except httpx.HTTPError as e:
            dest_path.unlink(missing_ok=True)
            raise TransportError(f"drive download failed: {e}") from e
        logger.info("[fitx] drive: downloaded %s to %s", file_id, dest_path)
        return dest_path


def _quote(value: str) -> str:
    # Drive query strings are single-quoted; escape backslash and quote.
    return value.replace("\\", "\\\\").replace("'", "\\'")


async def upload(token: str, local_path: Path, remote_name: str, mime_type: str,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> DriveFile:
    client = DriveClient(token, transport=transport)
    try:
        return await client.upload_file(local_path, remote_name, mime_type)
    finally:
        await client.close()


async def list_backups(token: str, name_pattern: Optional[str] = None,
                       transport: Optional[httpx.AsyncBaseTransport] = None) -> List[DriveFile]:
    client = DriveClient(token, transport=transport)
    try:
        return await client.list_files(name_pattern or get_settings().backup_prefix)
    finally:
        await client.close()


async def download(token: str, file_id: str, dest_path: Path,
                   transport: Optional[httpx.AsyncBaseTransport] = None) -> Path:
    client = DriveClient(token, transport=transport)
    try:
        return await client.download_file(file_id, dest_path)
    finally:
        await client.close()
