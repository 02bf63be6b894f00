"""Copy a build pod's log to the console."""

from __future__ import annotations

import asyncio

import structlog

from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.core.constants import Messages, PodPhase
from openshift_build_sdk.core.types import ConsoleSink, Pod, WaitWindow
from openshift_build_sdk.utils.async_helpers import consume_until, poll_every
from openshift_build_sdk.watch.handle import WatchHandle

logger = structlog.get_logger(__name__)


class PodLogWatcher:
    """Stream (``follow=True``) or snapshot (``follow=False``) a pod log.

    The cluster rejects log requests for pods still in the ``Pending`` phase,
    so the pod is polled until it is scheduled before the log is opened.
    Every failure is soft: it is logged, noted once on the console, and the
    watcher finishes without affecting the build outcome.
    """

    def __init__(
        self,
        client: ClusterClient,
        pod: Pod,
        follow: bool,
        window: WaitWindow,
        *,
        console: ConsoleSink = print,
        poll_interval: float = 1.0,
    ) -> None:
        self._client = client
        self._pod = pod
        self._follow = follow
        self._window = window
        self._console = console
        self._poll_interval = poll_interval
        self.lines_written = 0

    def __repr__(self) -> str:
        return f"PodLogWatcher(pod={self._pod.name!r}, follow={self._follow})"

    async def watch(self) -> WatchHandle:
        task = asyncio.create_task(self._run(), name=f"log-{self._pod.name}")
        return WatchHandle(task, f"log/{self._pod.name}")

    async def _run(self) -> None:
        try:
            if not await self._wait_until_scheduled():
                logger.info("pod_log_skipped", pod=self._pod.name, reason="still pending")
                return
            lines = await self._client.pod_log(
                self._pod.name, self._pod.namespace, follow=self._follow
            )
            await consume_until(lines, self._window.deadline, self._write)
        except Exception as exc:  # noqa: BLE001
            logger.warning("pod_log_unavailable", pod=self._pod.name, error=str(exc))
            self._console(Messages.LOG_UNAVAILABLE.format(pod=self._pod.name, error=exc))
            return
        logger.debug("pod_log_finished", pod=self._pod.name, lines=self.lines_written)

    def _write(self, line: str) -> bool:
        self._console(line.rstrip("\n"))
        self.lines_written += 1
        return False

    async def _wait_until_scheduled(self) -> bool:
        if self._pod.phase != PodPhase.PENDING:
            return True

        async def _fetch() -> Pod | None:
            return await self._client.get_pod(self._pod.name, self._pod.namespace)

        def _scheduled(pod: Pod | None) -> bool:
            return pod is not None and pod.phase != PodPhase.PENDING

        scheduled = await consume_until(
            poll_every(_fetch, self._poll_interval), self._window.deadline, _scheduled
        )
        return scheduled is not None
