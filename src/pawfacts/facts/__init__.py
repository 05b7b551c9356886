"""Fact kinds, fetchers and the fetch-and-remember action handlers."""

from .actions import ActionOutcome, FactActionHandler
from .fetcher import (
    CAT_FACT_URL,
    DOG_IMAGE_URL,
    FactFetcher,
    FailureKind,
    FetcherConfig,
    FetchResult,
    parse_cat_fact,
    parse_dog_image,
)
from .models import FactKind, FactStore

__all__ = [
    "ActionOutcome",
    "CAT_FACT_URL",
    "DOG_IMAGE_URL",
    "FactActionHandler",
    "FactFetcher",
    "FactKind",
    "FactStore",
    "FailureKind",
    "FetchResult",
    "FetcherConfig",
    "parse_cat_fact",
    "parse_dog_image",
]
