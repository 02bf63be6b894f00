"""Block until a build reaches a terminal status or the run's window closes."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.core.constants import ChangeType, ResourceKind
from openshift_build_sdk.core.types import Build, ConsoleSink, Pod, WaitWindow
from openshift_build_sdk.utils.async_helpers import OneShotGate
from openshift_build_sdk.watch.handle import WatchHandle
from openshift_build_sdk.watch.pod_log import PodLogWatcher
from openshift_build_sdk.watch.resource import ResourceWatcher

logger = structlog.get_logger(__name__)


class WaitCoordinator:
    """Combine the build watch, the pod log stream and the deadline.

    Args:
        client: Cluster client used for the watch and the log.
        console: Sink for the pod log and verbose progress text.
        verbose: Echo every observed build status to the console.
        poll_interval: Cadence for the log watcher's "is the pod scheduled" poll.
        reconnect_delay: Pause before re-establishing a dropped build watch.
        on_complete: Called once with the first terminal build snapshot.
    """

    def __init__(
        self,
        client: ClusterClient,
        *,
        console: ConsoleSink = print,
        verbose: bool = False,
        poll_interval: float = 1.0,
        reconnect_delay: float = 1.0,
        on_complete: Callable[[Build], None] | None = None,
    ) -> None:
        self._client = client
        self._console = console
        self._verbose = verbose
        self._poll_interval = poll_interval
        self._reconnect_delay = reconnect_delay
        self._on_complete = on_complete

    async def wait_for_completion(
        self,
        pod: Pod,
        build_id: str,
        namespace: str,
        window: WaitWindow,
        follow: bool,
        on_interrupt: Callable[[], Awaitable[None]] | None = None,
    ) -> bool:
        """Wait for *build_id* to finish.

        Returns:
            ``True`` if a terminal status was observed before
            ``window.deadline``, ``False`` if the deadline passed first.

        Raises:
            WatchError: If the build watch cannot be established.
            asyncio.CancelledError: On interruption, after *on_interrupt* ran.
        """
        gate = OneShotGate()

        def _on_event(resource: Build | Pod, change: ChangeType) -> None:
            if not isinstance(resource, Build) or resource.name != build_id:
                return
            if self._verbose:
                self._console(f"\nOpenShiftBuilder bld state:  {resource.status}")
            if resource.is_finished and gate.release():
                logger.info("build_finished", build_id=build_id, status=str(resource.status))
                if self._on_complete is not None:
                    self._on_complete(resource)

        log_handle: WatchHandle | None = None
        build_handle: WatchHandle | None = None
        try:
            log_handle = await self._start_log_watch(pod, follow, window)
            build_handle = await ResourceWatcher(
                self._client,
                namespace,
                ResourceKind.BUILD,
                _on_event,
                window=window,
                reconnect_delay=self._reconnect_delay,
            ).watch()

            completed = await gate.wait_until(window.deadline)
            if not completed:
                logger.warning("build_wait_deadline", build_id=build_id, max_wait=window.max_wait)
            return completed
        except asyncio.CancelledError:
            logger.info("build_wait_interrupted", build_id=build_id)
            if on_interrupt is not None:
                await on_interrupt()
            raise
        finally:
            await self._stop(build_handle)
            await self._stop(log_handle)

    async def _start_log_watch(
        self, pod: Pod, follow: bool, window: WaitWindow
    ) -> WatchHandle | None:
        try:
            return await PodLogWatcher(
                self._client,
                pod,
                follow,
                window,
                console=self._console,
                poll_interval=self._poll_interval,
            ).watch()
        except Exception as exc:  # noqa: BLE001
            logger.warning("pod_log_watch_failed", pod=pod.name, error=str(exc))
            return None

    @staticmethod
    async def _stop(handle: WatchHandle | None) -> None:
        if handle is None:
            return
        try:
            await handle.stop()
        except Exception as exc:  # noqa: BLE001
            logger.warning("watch_stop_failed", watch=handle.name, error=str(exc))
