"""Find the pod that executes a build.

Pod listings lag behind the trigger call, so the build pod is polled for
at a fixed interval until it shows up or the run's window closes.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from openshift_build_sdk.cluster.base import ClusterProtocol
from openshift_build_sdk.core.types import ConsoleSink, Pod, WaitWindow
from openshift_build_sdk.utils.async_helpers import consume_until, poll_every

logger = structlog.get_logger(__name__)


class PodLocator:
    def __init__(
        self,
        client: ClusterProtocol,
        *,
        poll_interval: float = 1.0,
        verbose: bool = False,
        console: ConsoleSink = print,
    ) -> None:
        self._client = client
        self._poll_interval = poll_interval
        self._verbose = verbose
        self._console = console

    async def locate(
        self,
        build_id: str,
        namespace: str,
        window: WaitWindow,
        on_interrupt: Callable[[], Awaitable[None]] | None = None,
    ) -> Pod | None:
        """Return the first pod whose name starts with *build_id*.

        Returns ``None`` when no such pod is listed before ``window.deadline``.
        On interruption *on_interrupt* is awaited and the
        :class:`asyncio.CancelledError` re-raised.
        """
        polls = 0
        found: Pod | None = None

        async def _list() -> list[Pod]:
            nonlocal polls
            polls += 1
            return await self._client.list_pods(namespace)

        def _match(pods: list[Pod]) -> bool:
            nonlocal found
            found = self._find(pods, build_id)
            return found is not None

        try:
            await consume_until(
                poll_every(_list, self._poll_interval), window.deadline, _match
            )
        except asyncio.CancelledError:
            logger.info("pod_locate_interrupted", build_id=build_id, polls=polls)
            if on_interrupt is not None:
                await on_interrupt()
            raise

        if found is None:
            logger.warning("pod_not_found", build_id=build_id, polls=polls)
            return None
        logger.info("pod_located", build_id=build_id, pod=found.name, polls=polls)
        return found

    def _find(self, pods: list[Pod], build_id: str) -> Pod | None:
        for pod in pods:
            if self._verbose:
                self._console(f"\nOpenShiftBuilder found pod {pod.name}")
            if pod.belongs_to(build_id):
                return pod
        return None
