"""
Unit tests per il gateway REST.

Il backend è simulato con httpx.MockTransport: ogni handler riceve la
richiesta reale costruita dal client.
"""

import base64

import httpx
import pytest

from invoiceme.core.exceptions import (
    AuthorizationError,
    HttpError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
)


class TestAuthorizationHeader:

    async def test_basic_header_on_authenticated_calls(self, make_gateway):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["path"] = request.url.path
            return httpx.Response(200, json=[])

        async with make_gateway(handler) as gateway:
            assert await gateway.get("/invoices") == []

        expected = base64.b64encode(b"admin:secret").decode("ascii")
        assert seen["auth"] == f"Basic {expected}"
        assert seen["path"] == "/api/invoices"

    async def test_public_calls_carry_no_credentials(self, make_gateway):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"ok": True})

        async with make_gateway(handler) as gateway:
            await gateway.get("/invoices/payment-link/abc", authenticated=False)

        assert seen["auth"] is None

    async def test_no_header_without_credentials(self, make_gateway, session):
        session.logout()
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        async with make_gateway(handler) as gateway:
            await gateway.get("/invoices")

        assert seen["auth"] is None

    async def test_json_body_and_params(self, make_gateway):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["query"] = dict(request.url.params)
            seen["body"] = request.content
            seen["content_type"] = request.headers.get("Content-Type")
            return httpx.Response(201, json={"id": "1"})

        async with make_gateway(handler) as gateway:
            result = await gateway.post("/reminders/send", {"a": 1}, params={"type": "X"})

        assert result == {"id": "1"}
        assert seen["query"] == {"type": "X"}
        assert seen["body"] == b'{"a":1}' or seen["body"] == b'{"a": 1}'
        assert seen["content_type"] == "application/json"


class TestResponseDecoding:

    async def test_empty_body_is_none(self, make_gateway):
        async with make_gateway(lambda request: httpx.Response(204)) as gateway:
            assert await gateway.delete("/customers/1") is None

    async def test_text_body(self, make_gateway):
        async with make_gateway(lambda request: httpx.Response(200, text="pong")) as gateway:
            assert await gateway.get("/ping") == "pong"


class TestUnauthorized:

    async def test_401_outside_login_expires_session(self, make_gateway, session, navigator):
        async with make_gateway(lambda request: httpx.Response(401)) as gateway:
            with pytest.raises(SessionExpiredError):
                await gateway.get("/invoices")

        assert session.is_authenticated() is False
        assert session.current_user() is None
        assert navigator.current_path == "/login"
        # Niente resta sul disco
        assert session._store.read() == {}

    async def test_401_on_login_view_does_not_redirect(self, make_gateway, session, navigator):
        navigator.push("/login")
        history_before = list(navigator.history)

        async with make_gateway(
            lambda request: httpx.Response(401, json={"message": "Credenziali errate"})
        ) as gateway:
            with pytest.raises(HttpError) as exc_info:
                await gateway.get("/invoices")

        assert not isinstance(exc_info.value, SessionExpiredError)
        assert exc_info.value.status == 401
        assert exc_info.value.detail == "Credenziali errate"
        assert navigator.history == history_before
        assert session.is_authenticated() is True

    async def test_401_on_unauthenticated_call_is_a_plain_error(self, make_gateway, navigator):
        async with make_gateway(lambda request: httpx.Response(401)) as gateway:
            with pytest.raises(HttpError) as exc_info:
                await gateway.get("/invoices/payment-link/x", authenticated=False)

        assert exc_info.value.status == 401
        assert navigator.current_path == "/invoices"


class TestErrorMapping:

    async def test_network_error(self, make_gateway):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_gateway(handler) as gateway:
            with pytest.raises(NetworkError) as exc_info:
                await gateway.get("/invoices")

        assert exc_info.value.extra == {"method": "GET", "path": "/invoices"}

    async def test_404(self, make_gateway):
        async with make_gateway(
            lambda request: httpx.Response(404, json={"message": "Invoice not found"})
        ) as gateway:
            with pytest.raises(NotFoundError) as exc_info:
                await gateway.get("/invoices/missing")

        assert exc_info.value.status == 404
        assert exc_info.value.detail == "Invoice not found"

    async def test_403(self, make_gateway, navigator):
        async with make_gateway(lambda request: httpx.Response(403)) as gateway:
            with pytest.raises(AuthorizationError):
                await gateway.delete("/customers/1")

        assert navigator.current_path == "/invoices"

    async def test_500_keeps_body(self, make_gateway):
        async with make_gateway(
            lambda request: httpx.Response(500, text="Internal Server Error")
        ) as gateway:
            with pytest.raises(HttpError) as exc_info:
                await gateway.put("/invoices/1", {"notes": "x"})

        assert exc_info.value.status == 500
        assert exc_info.value.body == "Internal Server Error"
        assert exc_info.value.detail == "Internal Server Error"
