"""
Media upload service for a Cloudinary-compatible API.

Uploads a locally staged file and returns its hosted URL. The local file
is removed whether or not the upload succeeds.
"""

import asyncio
import hashlib
import logging
import time
from pathlib import Path
from typing import Optional, Dict, Any

import httpx

logger = logging.getLogger(__name__)


class MediaUploader:
    """
    Uploads images to a Cloudinary-compatible endpoint using signed requests.
    """

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        upload_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize MediaUploader.

        Args:
            cloud_name: Cloudinary cloud name
            api_key: Cloudinary API key
            api_secret: Cloudinary API secret (used for request signing)
            upload_url: Base URL of the upload API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._upload_url = upload_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

        if not self.is_configured:
            logger.warning("Cloudinary credentials not set; media uploads will fail")

    @property
    def is_configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    def _sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 signature over the sorted parameters followed by the secret."""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self._api_secret}".encode("utf-8")).hexdigest()

    async def upload(self, local_path: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Upload a local file.

        Args:
            local_path: Path of the staged file

        Returns:
            dict with ``url`` (and ``public_id`` when reported), or None if
            there is nothing to upload or the upload failed
        """
        if not local_path:
            return None

        path = Path(local_path)
        try:
            if not path.is_file():
                logger.warning(f"Upload skipped, file not found: {path.name}")
                return None

            if not self.is_configured:
                logger.error("Upload failed: media storage is not configured")
                return None

            params = {"timestamp": int(time.time())}
            data = {
                **params,
                "api_key": self._api_key,
                "signature": self._sign(params),
            }
            endpoint = f"{self._upload_url}/{self._cloud_name}/auto/upload"
            content = await asyncio.to_thread(path.read_bytes)

            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    endpoint,
                    data=data,
                    files={"file": (path.name, content)},
                )
                response.raise_for_status()
                body = response.json()

            url = body.get("secure_url") or body.get("url")
            if not url:
                logger.error(f"Upload response for {path.name} has no URL")
                return None

            logger.info(f"Uploaded {path.name}")
            return {"url": url, "public_id": body.get("public_id")}

        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error(f"Upload failed for {path.name}: {e}")
            return None
        finally:
            path.unlink(missing_ok=True)
