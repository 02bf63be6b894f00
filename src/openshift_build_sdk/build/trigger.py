"""Start a build from a build-config, or re-run an existing build."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.core.config import BuildStepConfig
from openshift_build_sdk.core.constants import BUILD_URL_ENV_KEY, CAUSE_PREFIX
from openshift_build_sdk.core.types import (
    Build,
    BuildConfig,
    BuildConfigRef,
    BuildRequest,
    NameValuePair,
    TriggerRequest,
)

logger = structlog.get_logger(__name__)


def applicable_env(env: list[NameValuePair]) -> list[NameValuePair]:
    """Trim names and drop entries whose name is blank."""
    result: list[NameValuePair] = []
    for pair in env:
        name = pair.name.strip()
        if name:
            result.append(NameValuePair(name=name, value=pair.value))
    return result


class BuildTrigger:
    """Starts builds for one step configuration.

    No retries happen here; a failing cluster call raises
    :class:`~openshift_build_sdk.core.exceptions.ClusterError` to the caller.
    """

    def __init__(self, client: ClusterClient, step: BuildStepConfig) -> None:
        self._client = client
        self._step = step

    def __repr__(self) -> str:
        return f"BuildTrigger(bld_cfg={self._step.bld_cfg!r})"

    def build_request(
        self,
        build_config: BuildConfig | None,
        previous_build: Build | None,
        overrides: Mapping[str, str],
    ) -> BuildRequest | None:
        """Describe what :meth:`start` would trigger, or ``None`` if nothing can be."""
        cause = CAUSE_PREFIX + overrides.get(BUILD_URL_ENV_KEY, "")
        env = self._step.resolved_env(overrides)
        if build_config is not None:
            return BuildRequest(
                namespace=build_config.namespace,
                build_config_name=build_config.name,
                commit_id=self._step.get_commit_id(overrides) or None,
                env=env,
                cause=cause,
            )
        if previous_build is not None:
            return BuildRequest(
                namespace=previous_build.namespace,
                existing_build_name=previous_build.name,
                env=env,
                cause=cause,
            )
        return None

    async def start(
        self,
        build_config: BuildConfig | None,
        previous_build: Build | None,
        overrides: Mapping[str, str],
    ) -> Build | None:
        """Trigger from *build_config* if given, else re-run *previous_build*.

        Returns ``None`` when neither is given or the cluster created nothing.
        """
        request = self.build_request(build_config, previous_build, overrides)
        if request is None:
            logger.warning("build_trigger_skipped", reason="no build config or build")
            return None
        return await self.trigger(request)

    async def trigger(self, request: BuildRequest) -> Build | None:
        ref = request.ref
        payload = TriggerRequest(
            ref=ref,
            # A commit id only applies when instantiating from a build-config.
            commit_id=request.commit_id if isinstance(ref, BuildConfigRef) else None,
            causes=[request.cause],
            env=applicable_env(request.env),
        )
        build = await self._client.trigger_build(payload)
        logger.info(
            "build_triggered",
            kind=ref.kind,
            target=ref.name,
            namespace=ref.namespace,
            build_id=build.name if build is not None else None,
            env_count=len(payload.env),
        )
        return build
