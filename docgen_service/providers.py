"""Fake-data providers for generated cost estimates.

``FakerProvider`` is backed by the Faker library. ``BuiltinProvider`` yields
the same shapes from a seeded ``random.Random`` for environments where
realistic data is unwanted or reproducibility matters. The provider is
chosen once at startup from ``DOCGEN_FAKE_DATA``.
"""

from __future__ import annotations

import datetime as dt
import logging
import random
from abc import ABC, abstractmethod

from faker import Faker

from docgen_service.config import config

logger = logging.getLogger(__name__)

_provider: FakeDataProvider | None = None


class FakeDataProvider(ABC):
    name = "abstract"

    @abstractmethod
    def product_name(self) -> str: ...

    @abstractmethod
    def price(self) -> float: ...

    @abstractmethod
    def person_name(self) -> str: ...

    @abstractmethod
    def job_title(self) -> str: ...

    @abstractmethod
    def company_name(self) -> str: ...

    @abstractmethod
    def recent_date(self) -> dt.date: ...

    @abstractmethod
    def random_int(self, minimum: int, maximum: int) -> int:
        """Inclusive on both ends."""

    @abstractmethod
    def sentence(self) -> str: ...


class FakerProvider(FakeDataProvider):
    name = "faker"

    def __init__(self, locale: str = "en_US", seed: int | None = None) -> None:
        self._fake = Faker(locale)
        if seed is not None:
            self._fake.seed_instance(seed)

    def product_name(self) -> str:
        return self._fake.catch_phrase()

    def price(self) -> float:
        return self._fake.random_int(min=100, max=10000) / 100

    def person_name(self) -> str:
        return self._fake.name()

    def job_title(self) -> str:
        return self._fake.job()

    def company_name(self) -> str:
        return self._fake.company()

    def recent_date(self) -> dt.date:
        return self._fake.date_between(start_date="-30d", end_date="today")

    def random_int(self, minimum: int, maximum: int) -> int:
        return self._fake.random_int(min=minimum, max=maximum)

    def sentence(self) -> str:
        return self._fake.sentence()


class BuiltinProvider(FakeDataProvider):
    name = "builtin"

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def product_name(self) -> str:
        return f"Product {self._rng.randint(0, 9999)}"

    def price(self) -> float:
        return self._rng.randint(100, 10000) / 100

    def person_name(self) -> str:
        return f"Name {self._rng.randint(0, 9999)}"

    def job_title(self) -> str:
        return "Job Title"

    def company_name(self) -> str:
        return f"Company {self._rng.randint(0, 9999)}"

    def recent_date(self) -> dt.date:
        return dt.date.today() - dt.timedelta(days=self._rng.randint(0, 30))

    def random_int(self, minimum: int, maximum: int) -> int:
        return self._rng.randint(minimum, maximum)

    def sentence(self) -> str:
        return "Lorem ipsum dolor sit amet."


def build_provider(kind: str, seed: int | None = None, locale: str = "en_US") -> FakeDataProvider:
    if kind == BuiltinProvider.name:
        return BuiltinProvider(seed=seed)
    if kind != FakerProvider.name:
        logger.warning("Unknown fake data provider %r, using faker", kind)
    return FakerProvider(locale=locale, seed=seed)


def init_provider() -> FakeDataProvider:
    """Select the process-wide provider from configuration."""
    global _provider
    if _provider is not None:
        return _provider

    _provider = build_provider(config.fake_data, seed=config.fake_seed, locale=config.faker_locale)
    logger.info("Fake data provider: %s (seed=%s)", _provider.name, config.fake_seed)
    return _provider


def get_provider() -> FakeDataProvider:
    """Return the configured provider (initializes on first call)."""
    if _provider is None:
        return init_provider()
    return _provider
