"""Tests for the public CrptApi client."""

import json
import threading
from datetime import date
from unittest.mock import patch

import httpx
import pytest

from crpt_api import CrptApi, Document, Product, TimeUnit
from crpt_api.adapters.transport.httpx_transport import HttpxTransport
from crpt_api.core.config import ClientSettings
from crpt_api.core.errors import ValidationAppError

URL = "https://registry.test/api/v3/lk/documents/create"


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _document() -> Document:
    return Document(
        doc_id="doc-1",
        owner_inn="7701234567",
        production_date=date(2021, 1, 23),
        products=[Product(tnved_code="6401", uit_code="010463")],
    )


class TestConstruction:
    """Construction validates the rate window before building anything."""

    @pytest.mark.parametrize(
        ("time_unit", "request_limit"),
        [
            (TimeUnit.NANOSECONDS, 5),
            (TimeUnit.SECONDS, 0),
            (TimeUnit.SECONDS, -1),
        ],
    )
    def test_invalid_arguments_raise(self, time_unit: TimeUnit, request_limit: int) -> None:
        with patch("crpt_api.services.crpt_api.create_transport") as mock_create:
            with pytest.raises(ValidationAppError):
                CrptApi(time_unit, request_limit)

        mock_create.assert_not_called()

    def test_window_is_exposed(self) -> None:
        with CrptApi(TimeUnit.MINUTES, 6, transport=_transport(lambda r: httpx.Response(200))) as api:
            assert api.window.min_interval_ns == 10_000_000_000

    def test_transport_is_built_from_settings_when_omitted(self) -> None:
        settings = ClientSettings(base_url=URL, http_timeout_seconds=3.0)

        api = CrptApi(TimeUnit.SECONDS, 1, client_settings=settings)
        try:
            transport = api._dispatcher.transport
            assert isinstance(transport, HttpxTransport)
            assert transport.url == URL
            assert transport.timeout_seconds == 3.0
        finally:
            api.close()


class TestPostDocument:
    """post_document returns the registry status or the failure status."""

    def test_posts_serialized_document_with_signature_header(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201)

        with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(handler)) as api:
            status = api.post_document(_document(), "signed-by-me")

        assert status == 201
        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["X-signature"] == "signed-by-me"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content)
        assert body["doc_id"] == "doc-1"
        assert body["production_date"] == "2021-01-23"
        assert body["products"][0]["tnved_code"] == "6401"

    def test_non_success_status_is_returned_as_is(self) -> None:
        with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(lambda r: httpx.Response(503))) as api:
            assert api.post_document(_document(), "sig") == 503

    def test_network_failure_returns_400(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(handler)) as api:
            assert api.post_document(_document(), "sig") == 400

    def test_timeout_returns_400(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(handler)) as api:
            assert api.post_document(_document(), "sig") == 400

    def test_unserializable_document_returns_400_without_sending(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(handler)) as api:
            assert api.post_document({"doc_id": "not-a-model"}, "sig") == 400  # type: ignore[arg-type]

        assert calls == []

    def test_failure_status_is_configurable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        settings = ClientSettings(base_url=URL, failure_status=499)
        with CrptApi(
            TimeUnit.SECONDS, 5, client_settings=settings, transport=_transport(handler)
        ) as api:
            assert api.post_document(_document(), "sig") == 499

    def test_one_failing_caller_does_not_affect_others(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.headers["X-signature"] == "broken":
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200)

        signatures = ["ok-1", "broken", "ok-2", "ok-3"]
        statuses: dict[str, int] = {}

        with CrptApi(TimeUnit.SECONDS, 50, transport=_transport(handler)) as api:

            def _call(signature: str) -> None:
                statuses[signature] = api.post_document(_document(), signature)

            threads = [threading.Thread(target=_call, args=(sig,)) for sig in signatures]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10)

        assert statuses == {"ok-1": 200, "broken": 400, "ok-2": 200, "ok-3": 200}


@pytest.mark.asyncio
async def test_apost_document_returns_status() -> None:
    with CrptApi(TimeUnit.SECONDS, 5, transport=_transport(lambda r: httpx.Response(200))) as api:
        status = await api.apost_document(_document(), "sig")

    assert status == 200
