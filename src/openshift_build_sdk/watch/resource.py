"""Callback-per-event subscription to cluster resource changes."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable

import structlog

from openshift_build_sdk.cluster.base import ClusterProtocol
from openshift_build_sdk.core.constants import ChangeType, ResourceKind
from openshift_build_sdk.core.exceptions import WatchError
from openshift_build_sdk.core.types import Build, Pod, ResourceEvent, WaitWindow
from openshift_build_sdk.utils.async_helpers import consume_until
from openshift_build_sdk.watch.handle import WatchHandle

logger = structlog.get_logger(__name__)

EventCallback = Callable[[Build | Pod, ChangeType], None]


class ResourceWatcher:
    """Deliver every change of *kind* in *namespace* to *on_event*.

    Events arrive on a background task until the handle is stopped or the
    window closes. When the server ends the stream early the watch is
    re-established after ``reconnect_delay`` seconds.

    Example::

        handle = await ResourceWatcher(client, "demo", ResourceKind.BUILD, on_event).watch()
        ...
        await handle.stop()
    """

    def __init__(
        self,
        client: ClusterProtocol,
        namespace: str,
        kind: ResourceKind,
        on_event: EventCallback,
        *,
        window: WaitWindow | None = None,
        reconnect_delay: float = 1.0,
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._kind = kind
        self._on_event = on_event
        self._window = window
        self._reconnect_delay = reconnect_delay
        self.events_received = 0

    def __repr__(self) -> str:
        return f"ResourceWatcher(kind={self._kind!r}, namespace={self._namespace!r})"

    async def watch(self) -> WatchHandle:
        """Subscribe and start delivering events.

        Raises:
            WatchError: If the initial subscription cannot be established.
        """
        source = await self._subscribe()
        task = asyncio.create_task(
            self._pump(source), name=f"watch-{self._kind}-{self._namespace}"
        )
        return WatchHandle(task, f"{self._kind}/{self._namespace}")

    async def _subscribe(self) -> AsyncIterator[ResourceEvent]:
        try:
            source = await self._client.watch(self._kind, self._namespace)
        except WatchError:
            raise
        except Exception as exc:
            raise WatchError(
                f"Unable to watch {self._kind} in {self._namespace}: {exc}",
                details={"kind": str(self._kind), "namespace": self._namespace},
            ) from exc
        logger.debug("watch_subscribed", kind=str(self._kind), namespace=self._namespace)
        return source

    def _deliver(self, event: ResourceEvent) -> bool:
        self.events_received += 1
        try:
            self._on_event(event.resource, event.change)
        except Exception:  # noqa: BLE001
            logger.exception(
                "watch_callback_failed", kind=str(self._kind), resource=event.resource.name
            )
        return False

    async def _pump(self, source: AsyncIterator[ResourceEvent] | None) -> None:
        deadline = self._window.deadline if self._window is not None else None
        while True:
            if source is not None:
                try:
                    await consume_until(source, deadline, self._deliver)
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "watch_stream_failed", kind=str(self._kind), error=str(exc)
                    )
            if self._window is not None and self._window.expired():
                return
            await asyncio.sleep(self._reconnect_delay)
            try:
                source = await self._subscribe()
            except WatchError as exc:
                logger.warning("watch_resubscribe_failed", error=str(exc))
                source = None
