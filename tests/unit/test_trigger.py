"""Tests for build/trigger.py."""
from __future__ import annotations

from openshift_build_sdk.build.trigger import BuildTrigger, applicable_env
from openshift_build_sdk.cluster.mock import MockCluster
from openshift_build_sdk.core.config import BuildStepConfig
from openshift_build_sdk.core.types import (
    Build,
    BuildConfig,
    BuildConfigRef,
    BuildRef,
    BuildRequest,
    NameValuePair,
    TriggerRequest,
)

JOB_URL = "https://jenkins.example/job/app/42/"


def _step(**kwargs: object) -> BuildStepConfig:
    return BuildStepConfig(namespace="ci", bld_cfg="app-build", **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# applicable_env
# ---------------------------------------------------------------------------


def test_applicable_env_trims_and_skips_blank_names() -> None:
    env = [
        NameValuePair(name="  MODE ", value="release"),
        NameValuePair(name="   ", value="ignored"),
        NameValuePair(name="", value="ignored"),
        NameValuePair(name="EMPTY", value=""),
    ]
    assert applicable_env(env) == [
        NameValuePair(name="MODE", value="release"),
        NameValuePair(name="EMPTY", value=""),
    ]


# ---------------------------------------------------------------------------
# build_request
# ---------------------------------------------------------------------------


def test_request_from_build_config_carries_commit_and_cause(mock_cluster: MockCluster) -> None:
    trigger = BuildTrigger(mock_cluster, _step(commit_id="${SHA}"))
    request = trigger.build_request(
        BuildConfig(name="app-build", namespace="ci"),
        None,
        {"SHA": "abc123", "BUILD_URL": JOB_URL},
    )
    assert request is not None
    assert request.ref == BuildConfigRef(name="app-build", namespace="ci")
    assert request.commit_id == "abc123"
    assert request.cause == f"Pipeline job URI: {JOB_URL}"


def test_request_from_previous_build_has_no_commit(mock_cluster: MockCluster) -> None:
    trigger = BuildTrigger(mock_cluster, _step(commit_id="abc123"))
    request = trigger.build_request(
        None, Build(name="app-build-3", namespace="ci"), {}
    )
    assert request is not None
    assert request.ref == BuildRef(name="app-build-3", namespace="ci")
    assert request.commit_id is None
    assert request.cause == "Pipeline job URI: "


def test_request_prefers_build_config(mock_cluster: MockCluster) -> None:
    trigger = BuildTrigger(mock_cluster, _step())
    request = trigger.build_request(
        BuildConfig(name="app-build", namespace="ci"),
        Build(name="app-build-3", namespace="ci"),
        {},
    )
    assert request is not None
    assert isinstance(request.ref, BuildConfigRef)


def test_request_none_without_target(mock_cluster: MockCluster) -> None:
    assert BuildTrigger(mock_cluster, _step()).build_request(None, None, {}) is None


# ---------------------------------------------------------------------------
# start / trigger
# ---------------------------------------------------------------------------


async def test_start_instantiates_build_config(mock_cluster: MockCluster) -> None:
    mock_cluster.add_build_config("app-build", "ci")
    step = _step(
        commit_id="abc123",
        env=[NameValuePair(name=" MODE ", value="${BUILD_MODE}"), NameValuePair(name=" ")],
    )

    build = await BuildTrigger(mock_cluster, step).start(
        BuildConfig(name="app-build", namespace="ci"), None, {"BUILD_MODE": "release", "BUILD_URL": JOB_URL}
    )

    assert build is not None
    assert build.name == "app-build-1"
    sent: TriggerRequest = mock_cluster.calls_for("trigger_build")[0]["request"]
    assert sent.commit_id == "abc123"
    assert sent.causes == [f"Pipeline job URI: {JOB_URL}"]
    assert sent.env == [NameValuePair(name="MODE", value="release")]


async def test_start_reruns_previous_build(mock_cluster: MockCluster) -> None:
    previous = mock_cluster.add_build(
        Build(name="app-build-3", namespace="ci", build_config="app-build")
    )

    build = await BuildTrigger(mock_cluster, _step()).start(None, previous, {})

    assert build is not None
    sent: TriggerRequest = mock_cluster.calls_for("trigger_build")[0]["request"]
    assert sent.ref == BuildRef(name="app-build-3", namespace="ci")


async def test_start_without_target_does_not_call_cluster(mock_cluster: MockCluster) -> None:
    assert await BuildTrigger(mock_cluster, _step()).start(None, None, {}) is None
    mock_cluster.assert_not_called("trigger_build")


async def test_trigger_drops_commit_for_existing_build(mock_cluster: MockCluster) -> None:
    mock_cluster.add_build(Build(name="app-build-3", namespace="ci", build_config="app-build"))
    request = BuildRequest(
        namespace="ci", existing_build_name="app-build-3", commit_id="abc123"
    )

    await BuildTrigger(mock_cluster, _step()).trigger(request)

    sent: TriggerRequest = mock_cluster.calls_for("trigger_build")[0]["request"]
    assert sent.commit_id is None


async def test_trigger_returns_none_when_cluster_creates_nothing(mock_cluster: MockCluster) -> None:
    mock_cluster.register("trigger_build", None)
    request = BuildRequest(namespace="ci", build_config_name="app-build")
    assert await BuildTrigger(mock_cluster, _step()).trigger(request) is None
