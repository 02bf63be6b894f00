"""Tests for build/verifier.py."""
from __future__ import annotations

import asyncio
import time

import pytest

from conftest import Console
from openshift_build_sdk.build.verifier import BuildVerifier
from openshift_build_sdk.cluster.mock import MockCluster
from openshift_build_sdk.core.constants import BuildStatus
from openshift_build_sdk.core.exceptions import ClusterError
from openshift_build_sdk.core.types import Build, WaitWindow

BUILD = "app-build-1"


@pytest.fixture
def verifier(mock_cluster: MockCluster, console: Console) -> BuildVerifier:
    return BuildVerifier(mock_cluster, console=console, poll_interval=0.01)


def _add(mock_cluster: MockCluster, status: BuildStatus | str) -> None:
    mock_cluster.add_build(
        Build(name=BUILD, namespace="ci", build_config="app-build", status=status)
    )


async def test_complete_passes(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.COMPLETE)
    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", False) is True
    assert "successfully" in console.text
    mock_cluster.assert_not_called("check_triggered_deployments")


@pytest.mark.parametrize("status", [BuildStatus.FAILED, BuildStatus.ERROR, BuildStatus.CANCELLED])
async def test_bad_terminal_status_fails(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier, status: BuildStatus
) -> None:
    _add(mock_cluster, status)
    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", False) is False
    assert f"[{status}]" in console.text


async def test_unfinished_at_deadline_times_out(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.RUNNING)
    started = time.monotonic()

    ok = await verifier.verify(WaitWindow(max_wait=0.1), BUILD, "ci", False)

    assert ok is False
    assert time.monotonic() - started < 1.0
    assert "has not completed within 0.1 seconds" in console.text
    assert "[Running]" in console.text


async def test_settles_on_late_final_status(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.RUNNING)
    asyncio.get_running_loop().call_later(
        0.03, mock_cluster.emit_build_status, BUILD, "ci", BuildStatus.COMPLETE
    )

    assert await verifier.verify(WaitWindow(max_wait=2.0), BUILD, "ci", False) is True


async def test_vanished_build_fails(console: Console, verifier: BuildVerifier) -> None:
    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", False) is False
    assert "could not be read for verification" in console.text


async def test_remote_error_fails(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    mock_cluster.register("get_build", ClusterError("api unavailable", status_code=503))
    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", False) is False
    assert "api unavailable" in console.text


# ---------------------------------------------------------------------------
# Deployment check
# ---------------------------------------------------------------------------


async def test_deployments_triggered_passes(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.COMPLETE)

    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", True) is True

    assert mock_cluster.calls_for("check_triggered_deployments") == [
        {"build_config": "app-build", "build_id": BUILD, "namespace": "ci"}
    ]
    assert "deployments were triggered" in console.text


async def test_deployments_not_triggered_fails(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.COMPLETE)
    mock_cluster.register("check_triggered_deployments", False)

    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", True) is False
    assert "no deployment was triggered" in console.text


async def test_deployment_check_error_fails(
    mock_cluster: MockCluster, console: Console, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.COMPLETE)
    mock_cluster.register("check_triggered_deployments", ClusterError("forbidden"))

    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", True) is False
    assert "no deployment was triggered" in console.text


async def test_deployment_check_skipped_for_failed_build(
    mock_cluster: MockCluster, verifier: BuildVerifier
) -> None:
    _add(mock_cluster, BuildStatus.FAILED)
    assert await verifier.verify(WaitWindow(max_wait=1.0), BUILD, "ci", True) is False
    mock_cluster.assert_not_called("check_triggered_deployments")
