"""Tests for the catalog HTTP client and API."""

from unittest.mock import patch

import httpx
import pytest

from cavectl_core import CatalogAPI, CatalogApiError, Game
from cavectl_core.catalog_http import CatalogHttp


def make_api(handler):
    return CatalogAPI(
        api_key="test-key",
        base_url="https://catalog.test",
        transport=httpx.MockTransport(handler),
    )


class TestCatalogHttp:
    """Test error handling in the transport layer."""

    def test_bearer_auth(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"ok": True})

        with CatalogHttp("test-key", base_url="https://catalog.test",
                         transport=httpx.MockTransport(handler)) as http:
            assert http.get("/ping") == {"ok": True}

        assert seen["auth"] == "Bearer test-key"

    def test_http_error(self):
        def handler(request):
            return httpx.Response(404, json={"errors": ["not found"]})

        with make_api(handler) as api:
            with pytest.raises(CatalogApiError) as exc_info:
                api.get_game(42)

        assert exc_info.value.status_code == 404
        assert "not found" in str(exc_info.value)

    def test_errors_in_ok_response(self):
        def handler(request):
            return httpx.Response(200, json={"errors": ["invalid key"]})

        with make_api(handler) as api:
            with pytest.raises(CatalogApiError, match="invalid key"):
                api.get_game(42)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with make_api(handler) as api:
            with pytest.raises(CatalogApiError) as exc_info:
                api.get_game(42)

        assert exc_info.value.status_code == 0

    @patch("cavectl_core.catalog_http.time.sleep")
    def test_rate_limited_retry(self, sleep):
        responses = iter([
            httpx.Response(429),
            httpx.Response(200, json={"game": {"id": 42}}),
        ])

        with make_api(lambda request: next(responses)) as api:
            game = api.get_game(42)

        assert game.id == 42
        sleep.assert_called_once()

    def test_missing_key_rejected(self):
        with pytest.raises(ValueError):
            CatalogAPI(api_key="")


class TestCatalogAPI:
    """Test response parsing."""

    def test_get_game(self):
        def handler(request):
            assert request.url.path == "/games/42"
            return httpx.Response(200, json={"game": {
                "id": 42, "title": "Overland", "url": "https://studio.example.com/overland",
            }})

        with make_api(handler) as api:
            game = api.get_game(42)

        assert game.title == "Overland"
        assert game.url == "https://studio.example.com/overland"

    def test_malformed_game(self):
        with make_api(lambda request: httpx.Response(200, json={"nope": 1})) as api:
            with pytest.raises(CatalogApiError, match="Malformed"):
                api.get_game(42)

    def test_download_key_sent(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"uploads": []})

        with make_api(handler) as api:
            api.list_game_uploads(42, {"download_key_id": 5})

        assert seen["params"] == {"download_key_id": "5"}

    def test_list_uploads(self):
        def handler(request):
            return httpx.Response(200, json={"uploads": [
                {"id": 1, "filename": "a.zip", "size": 10, "platforms": {"linux": "all"},
                 "build": {"id": 11, "user_version": "1.0"}},
                {"id": 2, "filename": "b.zip", "storage": "external"},
            ]})

        with make_api(handler) as api:
            uploads = api.list_game_uploads(42)

        assert [u.id for u in uploads] == [1, 2]
        assert uploads[0].platforms == ["linux"]
        assert uploads[0].build.id == 11
        assert uploads[1].storage == "external"

    def test_filtered_uploads(self):
        def handler(request):
            return httpx.Response(200, json={"uploads": [
                {"id": 1, "platforms": {"windows": "all"}},
                {"id": 2, "platforms": {"linux": "all"}},
            ]})

        with make_api(handler) as api:
            result = api.get_filtered_uploads(Game(id=42), None, "linux")

        assert [u.id for u in result.uploads] == [2]
        assert len(result.initial_uploads) == 2
        assert result.had_wrong_platform

    def test_get_profile(self):
        def handler(request):
            assert request.url.path == "/profile"
            return httpx.Response(200, json={"user": {"username": "ada"}})

        with make_api(handler) as api:
            assert api.get_profile() == {"username": "ada"}
