"""
Unit tests for the icon proxy's local-file handling.
"""

import asyncio
from dataclasses import replace

import pytest

from interval_api.domain.actions.icon import ICON_HEADERS, IconProxy
from interval_api.domain.slots.service import SlotService
from interval_api.models import Creator
from tests.conftest import new_wallet


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "public"
    (root / "avatars").mkdir(parents=True)
    (root / "avatars" / "alice.webp").write_bytes(b"RIFF-webp")
    (root / "avatars" / "bob.jpg").write_bytes(b"\xff\xd8jpeg")
    (tmp_path / "secret.png").write_bytes(b"not for you")
    return root


@pytest.fixture
def proxy_for(db, settings, http_client, public_dir, make_slot):
    """Build a proxy plus a slot whose creator has the given image"""

    def _build(image):
        owner = Creator(wallet=new_wallet(), username="imaged", profile_image_url=image)
        db.add(owner)
        db.commit()
        slot = make_slot(owner=owner)
        return IconProxy(SlotService(db), http_client, settings, public_dir=str(public_dir)), slot

    return _build


class TestIconProxy:
    def test_local_webp(self, proxy_for):
        proxy, slot = proxy_for("/avatars/alice.webp")
        response = asyncio.run(proxy.serve(slot.id))

        assert response.status_code == 200
        assert response.body == b"RIFF-webp"
        assert response.headers["content-type"] == "image/webp"
        assert response.headers["access-control-allow-origin"] == "*"

    def test_local_jpeg(self, proxy_for):
        proxy, slot = proxy_for("avatars/bob.jpg")
        response = asyncio.run(proxy.serve(slot.id))
        assert response.headers["content-type"] == "image/jpeg"

    def test_path_traversal_falls_back(self, proxy_for):
        proxy, slot = proxy_for("../secret.png")
        response = asyncio.run(proxy.serve(slot.id))
        assert response.body == b"ICO-fallback"

    def test_missing_local_file_falls_back(self, proxy_for):
        proxy, slot = proxy_for("/avatars/nobody.png")
        response = asyncio.run(proxy.serve(slot.id))
        assert response.body == b"ICO-fallback"
        assert response.headers["content-type"] == "image/x-icon"

    def test_unreachable_fallback_is_404(self, db, settings, http_client, public_dir):
        broken = replace(settings, icon_fallback="https://down.example.com/favicon.ico")
        proxy = IconProxy(SlotService(db), http_client, broken, public_dir=str(public_dir))

        response = asyncio.run(proxy.serve(None))
        assert response.status_code == 404

    def test_preflight(self, db, settings, http_client):
        response = IconProxy(SlotService(db), http_client, settings).preflight()
        assert response.status_code == 204
        assert response.headers["access-control-allow-methods"] == ICON_HEADERS["Access-Control-Allow-Methods"]
