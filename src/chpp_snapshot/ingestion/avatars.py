from __future__ import annotations

import logging
from collections.abc import Sequence
from io import BytesIO
from urllib.parse import urljoin

import httpx
from PIL import Image

from chpp_snapshot.core.config import settings
from chpp_snapshot.ingestion.providers.base.client import BaseHttpClient
from chpp_snapshot.ingestion.providers.base.errors import (
    ProviderRequestError,
    ProviderResponseError,
)
from chpp_snapshot.ingestion.providers.base.types import AvatarLayer

logger = logging.getLogger(__name__)


class AvatarFetcher:
    """
    Downloads avatar images.

    CHPP returns image paths relative to the Hattrick site (`/Img/...`); absolute
    URLs are fetched as given. Failures are logged and yield None so one missing
    image never fails an endpoint.

    Layered avatars are downloaded layer by layer and composited into a PNG; a
    layer that cannot be downloaded or decoded is left out.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.avatar_base_url).rstrip("/")
        self.client = BaseHttpClient(
            base_url=self.base_url,
            timeout_s=settings.http_timeout_s,
            connect_timeout_s=settings.http_connect_timeout_s,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> AvatarFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def resolve(self, url: str) -> str:
        if url.startswith("/"):
            return urljoin(self.base_url + "/", url.lstrip("/"))
        return url

    def fetch(self, url: str) -> bytes | None:
        target = self.resolve(url)
        try:
            resp = self.client.request("GET", target)
            content_type = resp.headers.get("content-type", "")
            if content_type and not content_type.startswith("image/"):
                raise ProviderResponseError(
                    f"Unexpected content type {content_type!r} for {target}"
                )
            if not resp.content:
                raise ProviderResponseError(f"Empty avatar image at {target}")
        except (ProviderRequestError, ProviderResponseError) as e:
            logger.warning("Avatar download failed for %s: %s", target, e)
            return None
        return resp.content

    def composite(self, layers: Sequence[AvatarLayer]) -> bytes | None:
        canvas: Image.Image | None = None
        for layer in layers:
            blob = self.fetch(layer.image)
            if blob is None:
                continue
            try:
                img = Image.open(BytesIO(blob)).convert("RGBA")
            except OSError as e:
                logger.warning("Cannot decode avatar layer %s: %s", layer.image, e)
                continue

            if canvas is None:
                canvas = img
                continue
            canvas.alpha_composite(
                img,
                dest=(max(layer.x, 0), max(layer.y, 0)),
                source=(max(-layer.x, 0), max(-layer.y, 0)),
            )

        if canvas is None:
            return None
        out = BytesIO()
        canvas.save(out, format="PNG")
        return out.getvalue()
