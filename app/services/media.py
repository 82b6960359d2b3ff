"""Upload profile media (avatar, cover image) to the external media host."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaAsset:
    """A file hosted by the media service."""

    url: str
    public_id: str | None = None


def remove_local_file(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temporary upload %s: %s", path, e)


class MediaUploader:
    """
    Client for the media hosting service.

    upload() never raises for upload failures: it returns None so callers can
    turn a failed upload into their own error. The local file is removed after
    every attempt.
    """

    def __init__(
        self,
        upload_url: str | None,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.upload_url = upload_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> MediaUploader:
        api_key = settings.MEDIA_API_KEY.get_secret_value() if settings.MEDIA_API_KEY else None
        return cls(
            upload_url=settings.MEDIA_UPLOAD_URL,
            api_key=api_key,
            timeout=settings.MEDIA_REQUEST_TIMEOUT_SEC,
        )

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def upload(self, local_path: str | os.PathLike[str] | None) -> MediaAsset | None:
        """Upload one local file; return the hosted asset or None on any failure."""
        if not local_path:
            return None
        path = Path(local_path)
        try:
            if not self.upload_url:
                logger.error("Media upload skipped: MEDIA_UPLOAD_URL is not configured")
                return None
            return await self._post(path)
        finally:
            remove_local_file(path)

    async def _post(self, path: Path) -> MediaAsset | None:
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error("Media upload failed: cannot read %s: %s", path.name, e)
            return None

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                resp = await client.post(
                    self.upload_url,
                    files={"file": (path.name, content)},
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                logger.error(
                    "Media upload failed",
                    extra={"file_name": path.name, "reason": str(e)[:200]},
                )
                return None

        if resp.status_code >= 400:
            logger.error(
                "Media upload failed",
                extra={"file_name": path.name, "status_code": resp.status_code},
            )
            return None
        try:
            body = resp.json()
        except ValueError:
            logger.error("Media upload returned a non-JSON body", extra={"file_name": path.name})
            return None
        if not isinstance(body, dict):
            body = {}
        url = body.get("secure_url") or body.get("url")
        if not url:
            logger.error("Media upload response missing url", extra={"file_name": path.name})
            return None
        logger.info("Media uploaded", extra={"file_name": path.name})
        return MediaAsset(url=url, public_id=body.get("public_id"))
