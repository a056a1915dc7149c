import logging

import pytest

from mykbus.types import ScrapeContext


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("mykbus.tests")


@pytest.fixture
def ctx(logger: logging.Logger) -> ScrapeContext:
    return ScrapeContext(logger)
