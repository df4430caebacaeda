"""Shared fixtures for sparkpod test suite."""

from __future__ import annotations

import pytest

from sparkpod.config import JobConfig
from sparkpod.spark import ResolvedIdentity


def make_config(**overrides) -> JobConfig:
    """Create a JobConfig with sensible defaults for testing.

    This is the canonical config factory for tests. Prefer this over
    hand-building dicts so that new required fields are handled in one place.
    """
    base: dict = {
        "app_name": "spark-test",
        "image": "spark-driver:latest",
    }
    base.update(overrides)
    return JobConfig(**base)


def make_identity(**overrides) -> ResolvedIdentity:
    """Create a ResolvedIdentity with fixed, deterministic values."""
    base: dict = {
        "resource_name_prefix": "spark",
        "app_id": "spark-app-id",
    }
    base.update(overrides)
    return ResolvedIdentity(**base)


@pytest.fixture
def default_config() -> JobConfig:
    """A default JobConfig for tests that don't care about specifics."""
    return make_config()


@pytest.fixture
def identity() -> ResolvedIdentity:
    """Identity with prefix 'spark' and app id 'spark-app-id'."""
    return make_identity()
