from __future__ import annotations

from io import BytesIO

import httpx
import pytest
from PIL import Image

from chpp_snapshot.ingestion.avatars import AvatarFetcher
from chpp_snapshot.ingestion.providers.base.client import BaseHttpClient
from chpp_snapshot.ingestion.providers.base.errors import ProviderRateLimited, ProviderRequestError
from chpp_snapshot.ingestion.providers.base.types import AvatarLayer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _png(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})


def test_relative_avatar_paths_resolve_against_site() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return _png(request)

    fetcher = AvatarFetcher(
        base_url="https://www.hattrick.org", transport=httpx.MockTransport(handler)
    )

    assert fetcher.fetch("/Img/Avatar/backgrounds/card1.png") == b"\x89PNG"
    assert fetcher.fetch("https://res.hattrick.org/faces/f1.png") == b"\x89PNG"
    assert seen == [
        "https://www.hattrick.org/Img/Avatar/backgrounds/card1.png",
        "https://res.hattrick.org/faces/f1.png",
    ]


def test_failed_download_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with AvatarFetcher(transport=httpx.MockTransport(handler)) as fetcher:
        assert fetcher.fetch("/Img/Avatar/nope.png") is None


def test_non_image_response_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, text="<html>login</html>", headers={"content-type": "text/html"}
        )

    with AvatarFetcher(transport=httpx.MockTransport(handler)) as fetcher:
        assert fetcher.fetch("/Img/Avatar/x.png") is None


def test_http_client_maps_status_codes_to_provider_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/busy"):
            return httpx.Response(429)
        return httpx.Response(500)

    http = BaseHttpClient(
        base_url="https://chpp.hattrick.org", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ProviderRateLimited):
        http.request("GET", "/busy")
    with pytest.raises(ProviderRequestError):
        http.request("GET", "/broken")


def _solid(size: tuple[int, int], color: tuple[int, int, int, int]) -> bytes:
    out = BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


def _layer_server(images: dict[str, bytes]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        blob = images.get(request.url.path)
        if blob is None:
            return httpx.Response(404)
        return httpx.Response(200, content=blob, headers={"content-type": "image/png"})

    return httpx.MockTransport(handler)


def test_layers_are_composited_onto_the_first_layer() -> None:
    transport = _layer_server(
        {
            "/Img/Avatar/backgrounds/bg.png": _solid((4, 4), RED),
            "/Img/Avatar/faces/face.png": _solid((2, 2), BLUE),
            "/Img/Avatar/broken.png": b"not a png",
        }
    )
    layers = [
        AvatarLayer("/Img/Avatar/backgrounds/bg.png"),
        AvatarLayer("/Img/Avatar/missing.png", 0, 0),
        AvatarLayer("/Img/Avatar/broken.png", 0, 0),
        AvatarLayer("/Img/Avatar/faces/face.png", 1, 1),
    ]

    with AvatarFetcher(transport=transport) as fetcher:
        blob = fetcher.composite(layers)

    assert blob is not None
    img = Image.open(BytesIO(blob))
    assert img.format == "PNG"
    assert img.size == (4, 4)
    assert img.getpixel((0, 0)) == RED
    assert img.getpixel((1, 1)) == BLUE
    assert img.getpixel((2, 2)) == BLUE
    assert img.getpixel((3, 3)) == RED


def test_layer_hanging_off_the_canvas_is_clipped() -> None:
    transport = _layer_server(
        {
            "/Img/bg.png": _solid((3, 3), RED),
            "/Img/corner.png": _solid((2, 2), BLUE),
        }
    )
    layers = [AvatarLayer("/Img/bg.png"), AvatarLayer("/Img/corner.png", -1, -1)]

    with AvatarFetcher(transport=transport) as fetcher:
        img = Image.open(BytesIO(fetcher.composite(layers)))

    assert img.size == (3, 3)
    assert img.getpixel((0, 0)) == BLUE
    assert img.getpixel((1, 1)) == RED


def test_no_usable_layer_yields_none() -> None:
    with AvatarFetcher(transport=_layer_server({})) as fetcher:
        assert fetcher.composite([AvatarLayer("/Img/a.png"), AvatarLayer("/Img/b.png")]) is None
        assert fetcher.composite([]) is None
