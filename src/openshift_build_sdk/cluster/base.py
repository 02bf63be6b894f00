from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Protocol, runtime_checkable

import structlog

from openshift_build_sdk.core.constants import ResourceKind
from openshift_build_sdk.core.types import (
    Build,
    BuildConfig,
    Pod,
    ResourceEvent,
    TriggerRequest,
)

logger = structlog.get_logger(__name__)


@runtime_checkable
class ClusterProtocol(Protocol):
    """Structural type for any cluster client.

    Components accept this Protocol so they work with any backend
    (a REST client, :class:`~openshift_build_sdk.cluster.mock.MockCluster`, ...)
    without importing concrete classes.
    """

    async def get_build(self, name: str, namespace: str) -> Build | None: ...

    async def list_pods(self, namespace: str) -> list[Pod]: ...

    async def watch(
        self, kind: ResourceKind, namespace: str
    ) -> AsyncIterator[ResourceEvent]: ...


class ClusterClient(ABC):
    """Abstract base for cluster API clients.

    Subclasses implement the primitives; the facade methods at the bottom are
    built only from those primitives.

    Error contract: primitives raise
    :class:`~openshift_build_sdk.core.exceptions.ClusterError` (or a subclass)
    for remote failures and return ``None`` for "not found" lookups.
    """

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def get_build_config(self, name: str, namespace: str) -> BuildConfig | None: ...

    @abstractmethod
    async def get_build(self, name: str, namespace: str) -> Build | None: ...

    @abstractmethod
    async def list_builds(self, namespace: str) -> list[Build]: ...

    @abstractmethod
    async def get_pod(self, name: str, namespace: str) -> Pod | None: ...

    @abstractmethod
    async def list_pods(self, namespace: str) -> list[Pod]: ...

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def trigger_build(self, request: TriggerRequest) -> Build | None:
        """Instantiate a build-config or clone an existing build.

        Returns ``None`` when the target offers no trigger capability.
        """

    @abstractmethod
    async def annotate_build(
        self, name: str, namespace: str, annotations: dict[str, str]
    ) -> Build: ...

    @abstractmethod
    async def cancel_build(self, name: str, namespace: str) -> Build: ...

    # ------------------------------------------------------------------ #
    # Streams
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def watch(
        self, kind: ResourceKind, namespace: str
    ) -> AsyncIterator[ResourceEvent]:
        """Subscribe to change notifications for *kind* in *namespace*.

        Awaiting this establishes the subscription (and raises on failure);
        the returned iterator then yields events until closed.
        """

    @abstractmethod
    async def pod_log(
        self, name: str, namespace: str, *, follow: bool = False
    ) -> AsyncIterator[str]:
        """Open the log of pod *name*; yields lines.

        With ``follow=False`` the iterator ends after the current log
        snapshot. With ``follow=True`` it keeps yielding until the pod exits.
        """

    @abstractmethod
    async def check_triggered_deployments(
        self, build_config: str, build_id: str, namespace: str
    ) -> bool:
        """Return ``True`` when the build's image triggered its deployments."""

    # ------------------------------------------------------------------ #
    # Facade
    # ------------------------------------------------------------------ #

    async def builds_for_config(self, build_config: str, namespace: str) -> list[Build]:
        """All builds in *namespace* produced by *build_config*."""
        return [
            b for b in await self.list_builds(namespace) if b.build_config == build_config
        ]

    async def cancel_builds_for_config(
        self, build_config: str, namespace: str
    ) -> list[Build]:
        """Cancel every unfinished build of *build_config*.

        Returns the builds the cluster accepted the cancel for.
        """
        cancelled: list[Build] = []
        for build in await self.builds_for_config(build_config, namespace):
            if build.is_finished:
                continue
            cancelled.append(await self.cancel_build(build.name, namespace))
            logger.info("build_cancel_requested", build=build.name, namespace=namespace)
        return cancelled


ClientFactory = Callable[[str, str | None], ClusterClient]
"""Builds a client for ``(api_url, auth_token)``."""
