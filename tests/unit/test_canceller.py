"""Tests for build/canceller.py."""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import Console
from openshift_build_sdk.build.canceller import BuildCanceller, CancellationSignal
from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.cluster.mock import MockCluster
from openshift_build_sdk.core.constants import BuildStatus
from openshift_build_sdk.core.exceptions import AuthenticationError, ClusterError
from openshift_build_sdk.core.types import Build

API = "https://api.example:6443"


def _canceller(mock_cluster: MockCluster, console: Console) -> tuple[BuildCanceller, list[tuple[str, str | None]]]:
    factory_calls: list[tuple[str, str | None]] = []

    def _factory(api_url: str, token: str | None) -> ClusterClient:
        factory_calls.append((api_url, token))
        return mock_cluster

    return BuildCanceller(_factory, console=console), factory_calls


# ---------------------------------------------------------------------------
# BuildCanceller
# ---------------------------------------------------------------------------


async def test_cancels_active_builds(mock_cluster: MockCluster, console: Console) -> None:
    mock_cluster.add_build(
        Build(name="app-build-1", namespace="ci", build_config="app-build", status=BuildStatus.RUNNING)
    )
    canceller, factory_calls = _canceller(mock_cluster, console)

    await canceller.cancel(API, "ci", "sha256~token", False, "app-build")

    assert factory_calls == [(API, "sha256~token")]
    assert mock_cluster.calls_for("cancel_build") == [{"name": "app-build-1", "namespace": "ci"}]
    assert "Cancelled build(s): app-build-1" in console.text


async def test_reports_when_nothing_to_cancel(mock_cluster: MockCluster, console: Console) -> None:
    mock_cluster.add_build(
        Build(name="app-build-1", namespace="ci", build_config="app-build", status=BuildStatus.COMPLETE)
    )
    canceller, _ = _canceller(mock_cluster, console)

    await canceller.cancel(API, "ci", None, False, "app-build")

    mock_cluster.assert_not_called("cancel_build")
    assert 'No active builds found for build config "app-build"' in console.text


async def test_remote_failure_is_reported_not_raised(
    mock_cluster: MockCluster, console: Console
) -> None:
    mock_cluster.register("list_builds", ClusterError("api unavailable", status_code=503))
    canceller, _ = _canceller(mock_cluster, console)

    await canceller.cancel(API, "ci", None, False, "app-build")

    assert "Unable to cancel builds" in console.text
    assert "api unavailable" in console.text


async def test_client_factory_failure_is_reported_not_raised(console: Console) -> None:
    def _factory(api_url: str, token: str | None) -> ClusterClient:
        raise AuthenticationError("token expired", status_code=401)

    await BuildCanceller(_factory, console=console).cancel(API, "ci", "bad", True, "app-build")

    assert "token expired" in console.text


async def test_verbose_names_endpoint(mock_cluster: MockCluster, console: Console) -> None:
    canceller, _ = _canceller(mock_cluster, console)
    await canceller.cancel(API, "ci", None, True, "app-build")
    assert API in console.lines[-1]


# ---------------------------------------------------------------------------
# CancellationSignal
# ---------------------------------------------------------------------------


async def test_signal_fires_exactly_once() -> None:
    handler = AsyncMock()
    signal = CancellationSignal(handler)

    assert await signal.fire() is True
    assert await signal.fire() is False
    await signal()

    handler.assert_awaited_once()
    assert signal.fired


async def test_signal_marked_fired_even_if_handler_raises() -> None:
    handler = AsyncMock(side_effect=RuntimeError("handler bug"))
    signal = CancellationSignal(handler)

    with pytest.raises(RuntimeError):
        await signal.fire()

    assert signal.fired
    assert await signal.fire() is False
