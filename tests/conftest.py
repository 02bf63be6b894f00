"""Shared test fixtures."""
from __future__ import annotations

import pytest

from openshift_build_sdk.cluster.mock import MockCluster
from openshift_build_sdk.core.config import GlobalConfig


class Console:
    """Collects console output instead of printing it."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, message: str) -> None:
        self.lines.append(message)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def mock_cluster() -> MockCluster:
    return MockCluster()


@pytest.fixture
def console() -> Console:
    return Console()


@pytest.fixture
def fast_config() -> GlobalConfig:
    return GlobalConfig(build_wait=2.0, poll_interval=0.01)
