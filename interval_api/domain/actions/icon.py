"""
Icon proxy

Serves a creator's profile image with permissive CORS so action clients on
other origins can render it. Any failure degrades to the fallback icon.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httpx
from fastapi.responses import Response

from ...config import IMAGE_FETCH_TIMEOUT, PUBLIC_DIR
from ..slots.service import SlotService
from .settings import ActionSettings

logger = logging.getLogger(__name__)

ICON_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Max-Age": "86400",
    "Cache-Control": "public, max-age=300",
}

LOCAL_CONTENT_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class IconProxy:
    def __init__(
        self,
        slots: SlotService,
        http_client: httpx.AsyncClient,
        settings: ActionSettings,
        public_dir: str = PUBLIC_DIR,
        timeout: float = IMAGE_FETCH_TIMEOUT,
    ):
        self.slots = slots
        self.http_client = http_client
        self.settings = settings
        self.public_dir = Path(public_dir)
        self.timeout = timeout

    def preflight(self) -> Response:
        return Response(status_code=204, headers=ICON_HEADERS)

    async def serve(self, slot_id: Optional[str]) -> Response:
        if not slot_id:
            return await self.serve_fallback()

        try:
            slot = self.slots.get_slot(slot_id)
            image = (slot.creator.profile_image_url or "").strip() if slot else ""
            if not image:
                return await self.serve_fallback()

            if image.startswith("http://") or image.startswith("https://"):
                response = await self._fetch(image, default_type="image/png")
            else:
                response = self._read_local(image)
        except Exception as e:
            logger.warning(f"⚠️ Icon for slot {slot_id} could not be resolved: {e}")
            response = None

        return response or await self.serve_fallback()

    async def serve_fallback(self) -> Response:
        response = await self._fetch(self.settings.icon_fallback, default_type="image/x-icon")
        if response is None:
            return Response(status_code=404, headers=ICON_HEADERS)
        return response

    async def _fetch(self, url: str, default_type: str) -> Optional[Response]:
        try:
            upstream = await self.http_client.get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Image fetch failed for {url}: {e}")
            return None
        if upstream.status_code != 200:
            logger.warning(f"⚠️ Image fetch for {url} returned HTTP {upstream.status_code}")
            return None
        content_type = upstream.headers.get("content-type") or default_type
        return Response(
            content=upstream.content,
            media_type=content_type,
            headers=ICON_HEADERS,
        )

    def _read_local(self, relative: str) -> Optional[Response]:
        root = self.public_dir.resolve()
        path = (root / relative.lstrip("/")).resolve()
        if root not in path.parents:
            logger.warning(f"⚠️ Rejected icon path outside public dir: {relative}")
            return None
        if not path.is_file():
            return None

        ext = path.suffix.lower()
        content_type = LOCAL_CONTENT_TYPES.get(ext) or mimetypes.guess_type(path.name)[0] or "image/jpeg"
        return Response(content=path.read_bytes(), media_type=content_type, headers=ICON_HEADERS)
