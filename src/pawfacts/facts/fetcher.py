"""Single-shot fetchers for the dog image and cat fact APIs."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import httpx

from .models import FactKind

DOG_IMAGE_URL = "https://dog.ceo/api/breeds/image/random"
CAT_FACT_URL = "https://catfact.ninja/fact"


class FailureKind(Enum):
    """Why a fetch did not produce a fact."""

    TRANSPORT = "transport"
    SHAPE = "shape"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch: a value or an error, never both."""

    value: str | None = None
    error: str | None = None
    failure: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def success(cls, value: str) -> "FetchResult":
        return cls(value=value)

    @classmethod
    def transport_error(cls, message: str) -> "FetchResult":
        return cls(error=message, failure=FailureKind.TRANSPORT)

    @classmethod
    def shape_error(cls, message: str) -> "FetchResult":
        return cls(error=message, failure=FailureKind.SHAPE)


def parse_dog_image(data: Any) -> FetchResult:
    """Extract the image URL from a dog.ceo response body."""
    if not isinstance(data, dict):
        return FetchResult.shape_error("Dog API returned a non-object payload.")

    if data.get("status") != "success":
        return FetchResult.shape_error("Dog API did not return success status.")

    url = data.get("message")
    if not isinstance(url, str) or not url:
        return FetchResult.shape_error("Dog API response has no image URL.")

    return FetchResult.success(url)


def parse_cat_fact(data: Any) -> FetchResult:
    """Extract the fact text from a catfact.ninja response body."""
    if not isinstance(data, dict):
        return FetchResult.shape_error("Cat fact API returned a non-object payload.")

    fact = data.get("fact")
    if not isinstance(fact, str) or not fact:
        return FetchResult.shape_error("Cat fact API response has no fact.")

    return FetchResult.success(fact)


@dataclass
class FetcherConfig:
    """Endpoints for each fact kind."""

    dog_url: str = DOG_IMAGE_URL
    cat_url: str = CAT_FACT_URL

    def url_for(self, kind: FactKind) -> str:
        return self.dog_url if kind is FactKind.DOG_IMAGE else self.cat_url


PARSERS: dict[FactKind, Callable[[Any], FetchResult]] = {
    FactKind.DOG_IMAGE: parse_dog_image,
    FactKind.CAT_FACT: parse_cat_fact,
}


class FactFetcher:
    """Performs one GET per call and validates the response shape."""

    def __init__(
        self,
        config: FetcherConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or FetcherConfig()
        self._transport = transport

    async def fetch(self, kind: FactKind) -> FetchResult:
        """Fetch one fact of the given kind.

        Transport and payload problems are returned as failed results,
        never raised.
        """
        url = self.config.url_for(kind)

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            return FetchResult.transport_error(f"Request to {url} timed out")
        except httpx.RequestError as e:
            return FetchResult.transport_error(f"Request failed: {e}")
        except httpx.InvalidURL as e:
            # Raised while building the request, outside RequestError
            return FetchResult.transport_error(f"Invalid URL {url!r}: {e}")

        if not response.is_success:
            return FetchResult.transport_error(f"HTTP error! status: {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            return FetchResult.shape_error("Response body is not valid JSON.")

        return PARSERS[kind](data)
