from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, AsyncIterator, Callable

from openshift_build_sdk.cluster.base import ClusterClient
from openshift_build_sdk.core.constants import BuildStatus, ChangeType, PodPhase, ResourceKind
from openshift_build_sdk.core.exceptions import LogStreamError, ResourceNotFoundError
from openshift_build_sdk.core.types import (
    Build,
    BuildConfig,
    BuildConfigRef,
    Pod,
    ResourceEvent,
    TriggerRequest,
)


class MockCluster(ClusterClient):
    """In-memory cluster for testing.

    Usage::

        mock = MockCluster()
        mock.add_build_config("app-build", "demo")
        mock.register("list_pods", lambda ns: [])              # dynamic response
        mock.register("watch", WatchError("forbidden"))        # raise on call

        build = await mock.trigger_build(TriggerRequest(ref=BuildConfigRef(...)))
        mock.emit_build_status(build.name, build.namespace, BuildStatus.COMPLETE)

    Every primitive call is recorded in :attr:`calls` as ``(method, params)``.
    A registered response replaces the in-memory behaviour for that method: an
    exception instance is raised, a callable is called with the positional
    arguments, anything else is returned as-is.
    """

    def __init__(self) -> None:
        self._responses: dict[str, Any] = {}
        self._build_configs: dict[tuple[str, str], BuildConfig] = {}
        self._builds: dict[tuple[str, str], Build] = {}
        self._pods: dict[tuple[str, str], Pod] = {}
        self._logs: dict[str, list[str]] = {}
        self._log_done: dict[str, asyncio.Event] = {}
        self._queues: dict[ResourceKind, asyncio.Queue[ResourceEvent | None]] = {}
        self._counters: dict[str, int] = defaultdict(int)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    # ------------------------------------------------------------------ #
    # Registration helpers
    # ------------------------------------------------------------------ #

    def register(
        self,
        method: str,
        response: Any | Callable[..., Any] | BaseException,
    ) -> None:
        """Register a static value, a callable, or an exception to raise."""
        self._responses[method] = response

    def add_build_config(self, name: str, namespace: str) -> BuildConfig:
        bc = BuildConfig(name=name, namespace=namespace)
        self._build_configs[(namespace, name)] = bc
        return bc

    def add_build(self, build: Build) -> Build:
        self._builds[(build.namespace, build.name)] = build
        return build

    def add_pod(self, pod: Pod) -> Pod:
        self._pods[(pod.namespace, pod.name)] = pod
        return pod

    def set_log(self, pod_name: str, lines: list[str], *, still_running: bool = False) -> None:
        """Set the log of *pod_name*; ``still_running`` keeps a follow stream open."""
        self._logs[pod_name] = list(lines)
        done = asyncio.Event()
        if not still_running:
            done.set()
        self._log_done[pod_name] = done

    def finish_log(self, pod_name: str) -> None:
        """End any follow stream on *pod_name*."""
        if pod_name in self._log_done:
            self._log_done[pod_name].set()

    def emit_event(self, event: ResourceEvent) -> None:
        """Push an event into the watch queue for its kind."""
        self._queue(event.kind).put_nowait(event)

    def emit_build_status(
        self, name: str, namespace: str, status: BuildStatus | str
    ) -> Build:
        """Update the stored build and notify watchers of the change."""
        current = self._builds.get((namespace, name)) or Build(name=name, namespace=namespace)
        updated = current.model_copy(update={"status": status})
        self._builds[(namespace, name)] = updated
        self.emit_event(
            ResourceEvent(kind=ResourceKind.BUILD, change=ChangeType.MODIFIED, resource=updated)
        )
        return updated

    def close_stream(self, kind: ResourceKind = ResourceKind.BUILD) -> None:
        """Signal end of the watch stream for *kind*."""
        self._queue(kind).put_nowait(None)

    def _queue(self, kind: ResourceKind) -> asyncio.Queue[ResourceEvent | None]:
        if kind not in self._queues:
            self._queues[kind] = asyncio.Queue()
        return self._queues[kind]

    def _record(self, method: str, **params: Any) -> tuple[bool, Any]:
        self.calls.append((method, params))
        if method not in self._responses:
            return False, None
        response = self._responses[method]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return True, response(*params.values())
        return True, response

    # ------------------------------------------------------------------ #
    # ClusterClient implementation
    # ------------------------------------------------------------------ #

    async def get_build_config(self, name: str, namespace: str) -> BuildConfig | None:
        handled, result = self._record("get_build_config", name=name, namespace=namespace)
        if handled:
            return result
        return self._build_configs.get((namespace, name))

    async def get_build(self, name: str, namespace: str) -> Build | None:
        handled, result = self._record("get_build", name=name, namespace=namespace)
        if handled:
            return result
        return self._builds.get((namespace, name))

    async def list_builds(self, namespace: str) -> list[Build]:
        handled, result = self._record("list_builds", namespace=namespace)
        if handled:
            return list(result)
        return [b for (ns, _), b in self._builds.items() if ns == namespace]

    async def get_pod(self, name: str, namespace: str) -> Pod | None:
        handled, result = self._record("get_pod", name=name, namespace=namespace)
        if handled:
            return result
        return self._pods.get((namespace, name))

    async def list_pods(self, namespace: str) -> list[Pod]:
        handled, result = self._record("list_pods", namespace=namespace)
        if handled:
            return list(result)
        return [p for (ns, _), p in self._pods.items() if ns == namespace]

    async def trigger_build(self, request: TriggerRequest) -> Build | None:
        handled, result = self._record("trigger_build", request=request)
        if handled:
            return result
        ref = request.ref
        if isinstance(ref, BuildConfigRef):
            if (ref.namespace, ref.name) not in self._build_configs:
                return None
            config_name = ref.name
        else:
            previous = self._builds.get((ref.namespace, ref.name))
            if previous is None:
                return None
            config_name = previous.build_config or ref.name
        self._counters[config_name] += 1
        build = Build(
            name=f"{config_name}-{self._counters[config_name]}",
            namespace=ref.namespace,
            status=BuildStatus.NEW,
            build_config=config_name,
        )
        return self.add_build(build)

    async def annotate_build(
        self, name: str, namespace: str, annotations: dict[str, str]
    ) -> Build:
        handled, result = self._record(
            "annotate_build", name=name, namespace=namespace, annotations=annotations
        )
        if handled:
            return result
        build = self._builds.get((namespace, name))
        if build is None:
            raise ResourceNotFoundError(f"build {namespace}/{name} not found", code="NOT_FOUND")
        updated = build.model_copy(
            update={"annotations": {**build.annotations, **annotations}}
        )
        return self.add_build(updated)

    async def cancel_build(self, name: str, namespace: str) -> Build:
        handled, result = self._record("cancel_build", name=name, namespace=namespace)
        if handled:
            return result
        if (namespace, name) not in self._builds:
            raise ResourceNotFoundError(f"build {namespace}/{name} not found", code="NOT_FOUND")
        return self.emit_build_status(name, namespace, BuildStatus.CANCELLED)

    async def watch(
        self, kind: ResourceKind, namespace: str
    ) -> AsyncIterator[ResourceEvent]:
        handled, result = self._record("watch", kind=kind, namespace=namespace)
        if handled:
            return result
        return self._stream_events(kind, namespace)

    async def _stream_events(
        self, kind: ResourceKind, namespace: str
    ) -> AsyncIterator[ResourceEvent]:
        queue = self._queue(kind)
        while True:
            event = await queue.get()
            if event is None:
                break
            if event.resource.namespace == namespace:
                yield event

    async def pod_log(
        self, name: str, namespace: str, *, follow: bool = False
    ) -> AsyncIterator[str]:
        handled, result = self._record("pod_log", name=name, namespace=namespace, follow=follow)
        if handled:
            return result
        pod = self._pods.get((namespace, name))
        if pod is not None and pod.phase == PodPhase.PENDING:
            raise LogStreamError(
                f"container in pod {name} is waiting to start", status_code=400
            )
        return self._stream_log(name, follow)

    async def _stream_log(self, name: str, follow: bool) -> AsyncIterator[str]:
        for line in self._logs.get(name, []):
            yield line
        if follow and name in self._log_done:
            await self._log_done[name].wait()

    async def check_triggered_deployments(
        self, build_config: str, build_id: str, namespace: str
    ) -> bool:
        handled, result = self._record(
            "check_triggered_deployments",
            build_config=build_config,
            build_id=build_id,
            namespace=namespace,
        )
        if handled:
            return bool(result)
        return True

    # ------------------------------------------------------------------ #
    # Test helpers
    # ------------------------------------------------------------------ #

    def assert_called(self, method: str) -> None:
        methods = [c[0] for c in self.calls]
        assert method in methods, f"Expected call to '{method}', got: {methods}"

    def assert_not_called(self, method: str) -> None:
        methods = [c[0] for c in self.calls]
        assert method not in methods, f"Unexpected call to '{method}': {self.calls}"

    def call_count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def calls_for(self, method: str) -> list[dict[str, Any]]:
        return [params for m, params in self.calls if m == method]

    def reset(self) -> None:
        self.calls.clear()
        self._responses.clear()
        for queue in self._queues.values():
            while not queue.empty():
                queue.get_nowait()
