"""Tests for the fact fetchers."""

import httpx
import pytest

from pawfacts.facts import (
    CAT_FACT_URL,
    DOG_IMAGE_URL,
    FactFetcher,
    FactKind,
    FailureKind,
    FetcherConfig,
    FetchResult,
    parse_cat_fact,
    parse_dog_image,
)


def make_fetcher(handler) -> FactFetcher:
    return FactFetcher(transport=httpx.MockTransport(handler))


class TestFetchResult:
    def test_success(self):
        result = FetchResult.success("v")
        assert result.ok is True
        assert result.value == "v"
        assert result.error is None
        assert result.failure is None

    def test_transport_error(self):
        result = FetchResult.transport_error("boom")
        assert result.ok is False
        assert result.failure is FailureKind.TRANSPORT

    def test_shape_error(self):
        result = FetchResult.shape_error("bad")
        assert result.ok is False
        assert result.failure is FailureKind.SHAPE


class TestParseDogImage:
    def test_valid(self):
        result = parse_dog_image({"message": "https://images.dog.ceo/a.jpg", "status": "success"})
        assert result.value == "https://images.dog.ceo/a.jpg"

    def test_status_not_success(self):
        result = parse_dog_image({"message": "https://images.dog.ceo/a.jpg", "status": "error"})
        assert result.ok is False
        assert result.error == "Dog API did not return success status."

    def test_missing_status(self):
        result = parse_dog_image({"message": "https://images.dog.ceo/a.jpg"})
        assert result.failure is FailureKind.SHAPE

    def test_missing_message(self):
        result = parse_dog_image({"status": "success"})
        assert result.failure is FailureKind.SHAPE

    def test_non_string_message(self):
        result = parse_dog_image({"message": ["a", "b"], "status": "success"})
        assert result.failure is FailureKind.SHAPE

    def test_not_an_object(self):
        result = parse_dog_image(["success"])
        assert result.failure is FailureKind.SHAPE


class TestParseCatFact:
    def test_valid(self):
        result = parse_cat_fact({"fact": "Cats sleep 70% of their lives.", "length": 30})
        assert result.value == "Cats sleep 70% of their lives."

    def test_missing_fact(self):
        result = parse_cat_fact({"length": 30})
        assert result.failure is FailureKind.SHAPE

    def test_empty_fact(self):
        result = parse_cat_fact({"fact": ""})
        assert result.failure is FailureKind.SHAPE

    def test_not_an_object(self):
        result = parse_cat_fact("Cats sleep a lot")
        assert result.failure is FailureKind.SHAPE


class TestFetcherConfig:
    def test_defaults(self):
        config = FetcherConfig()
        assert config.url_for(FactKind.DOG_IMAGE) == DOG_IMAGE_URL
        assert config.url_for(FactKind.CAT_FACT) == CAT_FACT_URL

    def test_override(self):
        config = FetcherConfig(cat_url="http://cats.test/fact")
        assert config.url_for(FactKind.CAT_FACT) == "http://cats.test/fact"


@pytest.mark.asyncio
class TestFetch:
    async def test_dog_image_success(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(
                200, json={"message": "http://example.com/dog.jpg", "status": "success"}
            )

        result = await make_fetcher(handler).fetch(FactKind.DOG_IMAGE)

        assert result.ok is True
        assert result.value == "http://example.com/dog.jpg"
        assert seen == [DOG_IMAGE_URL]

    async def test_cat_fact_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(200, json={"fact": "Cats purr.", "length": 10})

        result = await make_fetcher(handler).fetch(FactKind.CAT_FACT)

        assert result.value == "Cats purr."

    async def test_single_request_per_fetch(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        await make_fetcher(handler).fetch(FactKind.CAT_FACT)

        assert calls == 1

    async def test_http_error_status(self):
        result = await make_fetcher(lambda request: httpx.Response(500)).fetch(FactKind.DOG_IMAGE)

        assert result.ok is False
        assert result.failure is FailureKind.TRANSPORT
        assert result.error == "HTTP error! status: 500"

    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        result = await make_fetcher(handler).fetch(FactKind.CAT_FACT)

        assert result.failure is FailureKind.SHAPE
        assert "JSON" in result.error

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_fetcher(handler).fetch(FactKind.DOG_IMAGE)

        assert result.failure is FailureKind.TRANSPORT
        assert "connection refused" in result.error

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        result = await make_fetcher(handler).fetch(FactKind.CAT_FACT)

        assert result.failure is FailureKind.TRANSPORT
        assert "timed out" in result.error

    async def test_uses_configured_url(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"fact": "x"})

        fetcher = FactFetcher(
            FetcherConfig(cat_url="http://cats.test/fact"),
            transport=httpx.MockTransport(handler),
        )
        await fetcher.fetch(FactKind.CAT_FACT)

        assert seen == ["http://cats.test/fact"]

    async def test_malformed_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request should be sent")

        fetcher = FactFetcher(FetcherConfig(dog_url="http://[::1"), transport=httpx.MockTransport(handler))
        result = await fetcher.fetch(FactKind.DOG_IMAGE)

        assert result.ok is False
        assert result.failure is FailureKind.TRANSPORT
        assert "http://[::1" in result.error

    async def test_unsupported_scheme(self):
        fetcher = FactFetcher(FetcherConfig(cat_url="ftp://cats.test/fact"))
        result = await fetcher.fetch(FactKind.CAT_FACT)

        assert result.failure is FailureKind.TRANSPORT
