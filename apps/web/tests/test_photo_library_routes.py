"""Login, photo library page and logout flows over HTTP."""

from __future__ import annotations

import asyncio
import json
import os
import unittest

import httpx
from fastapi.testclient import TestClient

from photolibrary.core.config import get_settings
from photolibrary.main import create_app
from photolibrary.routes.dependencies import get_http_client

ALBUMS_URI = "https://photos.test/v1/albums"
PHOTOS_URI = "https://photos.test/v1/mediaItems:search"
LOGOUT_URI = "https://idp.test/logout"


class _RecordingResourceServer:
    def __init__(self, *, albums=None, media_items=None, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self._albums = albums if albums is not None else []
        self._media_items = media_items if media_items is not None else []
        self._status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._status_code >= 400:
            return httpx.Response(self._status_code, json={"error": {"message": "backend exploded"}})
        if request.url.path.endswith("/albums"):
            return httpx.Response(200, json={"albums": self._albums})
        return httpx.Response(200, json={"mediaItems": self._media_items})


async def _close_clients(*clients: httpx.AsyncClient) -> None:
    for client in clients:
        await client.aclose()


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "PHOTOLIBRARY_AUTH_PROVIDER",
        "PHOTOLIBRARY_SESSION_SECRET",
        "PHOTOLIBRARY_ALBUMS_URI",
        "PHOTOLIBRARY_PHOTOS_URI",
        "PHOTOLIBRARY_LOGOUT_URI",
        "PHOTOLIBRARY_AUTHORIZER",
        "PHOTOLIBRARY_HTTP_TIMEOUT_SECONDS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["PHOTOLIBRARY_AUTH_PROVIDER"] = "mock"
        os.environ["PHOTOLIBRARY_SESSION_SECRET"] = "test-session-secret"
        os.environ["PHOTOLIBRARY_ALBUMS_URI"] = ALBUMS_URI
        os.environ["PHOTOLIBRARY_PHOTOS_URI"] = PHOTOS_URI
        os.environ["PHOTOLIBRARY_LOGOUT_URI"] = LOGOUT_URI
        os.environ["PHOTOLIBRARY_AUTHORIZER"] = "Google Accounts"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class PhotoLibraryRouteTests(_SettingsEnvCase):
    def _client_with_server(self, server: _RecordingResourceServer) -> TestClient:
        app = create_app()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(server))
        app.dependency_overrides[get_http_client] = lambda: http_client
        self.addCleanup(lambda: asyncio.run(_close_clients(app.state.http_client, http_client)))
        return TestClient(app)

    def _login(self, client: TestClient, code: str = "test:ada:ada@example.com") -> None:
        response = client.get(f"/login/oauth2/code/google?code={code}", follow_redirects=False)
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "http://testserver/")

    def test_pages_without_session_redirect_to_login(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())

        for path in ("/", "/photolibrary/albums", "/photolibrary/pics?id=a1", "/photolibrary/logout"):
            with self.subTest(path=path):
                response = client.get(path, follow_redirects=False)
                self.assertEqual(response.status_code, 302)
                self.assertEqual(response.headers["location"], "http://testserver/login")

    def test_login_round_trip_lands_on_welcome_page(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())

        response = client.get("/login?login_hint=ada")

        self.assertEqual(response.status_code, 200)
        self.assertIn("Welcome, Ada", response.text)
        self.assertIn("Google Accounts", response.text)
        self.assertIn("/images/person.svg", response.text)

    def test_login_saves_authorized_client_for_principal(self) -> None:
        server = _RecordingResourceServer()
        client = self._client_with_server(server)

        self._login(client)

        stored = client.app.state.authorized_clients.find_authorized_client("google", "ada")
        self.assertIsNotNone(stored)
        assert stored is not None
        self.assertEqual(stored.access_token, "mock-access-ada")

    def test_album_listing_renders_albums_from_resource_server(self) -> None:
        server = _RecordingResourceServer(albums=[{"id": "a1", "title": "Lisbon Trip"}, {"id": "a2", "title": "Pets"}])
        client = self._client_with_server(server)
        self._login(client)

        response = client.get("/photolibrary/albums")

        self.assertEqual(response.status_code, 200)
        self.assertIn("Lisbon Trip", response.text)
        self.assertIn("/photolibrary/pics?id=a1", response.text)
        self.assertLess(response.text.index("Lisbon Trip"), response.text.index("Pets"))
        self.assertIn("ada@example.com", response.text)
        self.assertEqual(len(server.requests), 1)
        self.assertEqual(server.requests[0].method, "GET")
        self.assertEqual(server.requests[0].headers["Authorization"], "Bearer mock-access-ada")

    def test_photo_listing_posts_album_id_and_renders_media(self) -> None:
        server = _RecordingResourceServer(
            media_items=[{"id": "p1", "baseUrl": "https://lh3.test/p1", "filename": "beach.jpg"}]
        )
        client = self._client_with_server(server)
        self._login(client)

        response = client.get("/photolibrary/pics", params={"id": "a1"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("https://lh3.test/p1=w400-h400", response.text)
        self.assertIn("beach.jpg", response.text)
        self.assertEqual(len(server.requests), 1)
        self.assertEqual(server.requests[0].method, "POST")
        self.assertEqual(str(server.requests[0].url), PHOTOS_URI)
        self.assertEqual(json.loads(server.requests[0].content), {"albumId": "a1"})

    def test_photo_listing_without_album_id_renders_bad_request(self) -> None:
        server = _RecordingResourceServer()
        client = self._client_with_server(server)
        self._login(client)

        response = client.get("/photolibrary/pics")

        self.assertEqual(response.status_code, 400)
        self.assertIn("album id is required", response.text)
        self.assertEqual(server.requests, [])

    def test_missing_authorized_client_clears_session_and_redirects_home(self) -> None:
        server = _RecordingResourceServer(albums=[{"id": "a1"}])
        client = self._client_with_server(server)
        self._login(client)
        client.app.state.authorized_clients.remove_authorized_client("google", "ada")

        albums = client.get("/photolibrary/albums", follow_redirects=False)
        photos = client.get("/photolibrary/pics?id=a1", follow_redirects=False)

        self.assertEqual(albums.status_code, 302)
        self.assertEqual(albums.headers["location"], "http://testserver/")
        self.assertEqual(server.requests, [])

        # The session was discarded by the first redirect.
        self.assertEqual(photos.status_code, 302)
        self.assertEqual(photos.headers["location"], "http://testserver/login")
        home = client.get("/", follow_redirects=False)
        self.assertEqual(home.headers["location"], "http://testserver/login")

    def test_upstream_failure_renders_generic_error_page(self) -> None:
        server = _RecordingResourceServer(status_code=500)
        client = self._client_with_server(server)
        self._login(client)

        response = client.get("/photolibrary/albums")

        self.assertEqual(response.status_code, 502)
        self.assertIn("photo library is unavailable", response.text)
        self.assertNotIn("backend exploded", response.text)
        self.assertEqual(len(server.requests), 1)

    def test_logout_clears_session_and_redirects_to_provider_logout(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())
        self._login(client)

        response = client.get("/photolibrary/logout", follow_redirects=False)

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], f"{LOGOUT_URI}?id_token_hint=mock-id-token-ada")
        self.assertIsNone(client.app.state.authorized_clients.find_authorized_client("google", "ada"))
        home = client.get("/", follow_redirects=False)
        self.assertEqual(home.headers["location"], "http://testserver/login")

    def test_callback_for_unknown_registration_returns_no_leak_404(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())

        response = client.get("/login/oauth2/code/okta?code=test:ada", follow_redirects=False)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"code": "RESOURCE_NOT_FOUND", "message": "Resource not found"})

    def test_rejected_authorization_code_returns_401_without_side_effects(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())
        store = client.app.state.authorized_clients

        response = client.get("/login/oauth2/code/google?code=not-a-valid-code", follow_redirects=False)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertEqual(store.write_count, 0)
        home = client.get("/", follow_redirects=False)
        self.assertEqual(home.headers["location"], "http://testserver/login")

    def test_default_picture_is_served(self) -> None:
        client = self._client_with_server(_RecordingResourceServer())

        response = client.get("/images/person.svg")

        self.assertEqual(response.status_code, 200)
        self.assertIn("<svg", response.text)


class SharedHttpClientTests(_SettingsEnvCase):
    def test_outbound_timeout_comes_from_settings(self) -> None:
        os.environ["PHOTOLIBRARY_HTTP_TIMEOUT_SECONDS"] = "3.5"
        get_settings.cache_clear()

        app = create_app()
        with TestClient(app):
            self.assertEqual(app.state.http_client.timeout, httpx.Timeout(3.5))

    def test_default_outbound_timeout_is_bounded(self) -> None:
        app = create_app()
        with TestClient(app):
            timeout = app.state.http_client.timeout
            self.assertEqual(timeout, httpx.Timeout(10.0))
            for value in (timeout.connect, timeout.read, timeout.write, timeout.pool):
                self.assertIsNotNone(value)

    def test_shared_client_is_closed_on_shutdown(self) -> None:
        app = create_app()

        with TestClient(app):
            self.assertFalse(app.state.http_client.is_closed)

        self.assertTrue(app.state.http_client.is_closed)
