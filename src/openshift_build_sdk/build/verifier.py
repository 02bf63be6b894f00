"""Classify the final state of a build."""

from __future__ import annotations

import structlog

from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.core.constants import DISPLAY_NAME, BuildStatus, Messages
from openshift_build_sdk.core.types import Build, ConsoleSink, WaitWindow
from openshift_build_sdk.utils.async_helpers import consume_until, poll_every

logger = structlog.get_logger(__name__)


class BuildVerifier:
    """Turn a build's status into the step's pass/fail verdict.

    The build is re-read until it is terminal or the run's window closes, so
    a watch that missed the final event still yields the right answer. Only
    ``Complete`` passes; with ``check_deps`` the build's deployments must
    also have been triggered. Every failure prints its own message and
    returns ``False``; nothing but cancellation is raised.
    """

    def __init__(
        self,
        client: ClusterClient,
        *,
        console: ConsoleSink = print,
        poll_interval: float = 1.0,
        step_name: str = DISPLAY_NAME,
    ) -> None:
        self._client = client
        self._console = console
        self._poll_interval = poll_interval
        self._step_name = step_name

    async def verify(
        self,
        window: WaitWindow,
        build_id: str,
        namespace: str,
        check_deps: bool,
    ) -> bool:
        try:
            build = await self._settle(build_id, namespace, window)
        except Exception as exc:  # noqa: BLE001
            logger.warning("build_verify_failed", build_id=build_id, error=str(exc))
            self._print(Messages.EXIT_REMOTE_ERROR, error=exc)
            return False

        if build is None:
            self._print(Messages.EXIT_BUILD_VANISHED, build_id=build_id)
            return False
        if not build.is_finished:
            self._print(
                Messages.EXIT_BUILD_TIMEOUT,
                build_id=build_id,
                wait=window.max_wait,
                status=build.status,
            )
            return False
        if build.status != BuildStatus.COMPLETE:
            self._print(Messages.EXIT_BUILD_BAD, build_id=build_id, status=build.status)
            return False

        if not check_deps:
            self._print(Messages.EXIT_BUILD_GOOD, build_id=build_id)
            return True

        try:
            triggered = await self._client.check_triggered_deployments(
                build.build_config or "", build_id, namespace
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("deployment_check_failed", build_id=build_id, error=str(exc))
            triggered = False
        if not triggered:
            self._print(Messages.EXIT_DEPLOY_NOT_TRIGGERED, build_id=build_id)
            return False
        self._print(Messages.EXIT_BUILD_GOOD_DEPLOY, build_id=build_id)
        return True

    async def _settle(
        self, build_id: str, namespace: str, window: WaitWindow
    ) -> Build | None:
        latest = await self._client.get_build(build_id, namespace)
        if latest is None or latest.is_finished or window.expired():
            return latest

        async def _fetch() -> Build | None:
            return await self._client.get_build(build_id, namespace)

        def _settled(build: Build | None) -> bool:
            nonlocal latest
            latest = build
            return build is None or build.is_finished

        await consume_until(
            poll_every(_fetch, self._poll_interval), window.deadline, _settled
        )
        return latest

    def _print(self, template: str, **values: object) -> None:
        self._console(template.format(step=self._step_name, **values))
