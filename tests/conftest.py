"""Shared pytest configuration."""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def silence_logger():
    """Drop loguru output during tests."""
    logger.remove()
    logger.add(lambda msg: None)
    yield
