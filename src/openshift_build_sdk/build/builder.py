"""The "trigger OpenShift build" step: trigger, find the pod, wait, verify."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from functools import partial

import structlog

from openshift_build_sdk.build.canceller import BuildCanceller, CancellationSignal
from openshift_build_sdk.build.coordinator import WaitCoordinator
from openshift_build_sdk.build.locator import PodLocator
from openshift_build_sdk.build.trigger import BuildTrigger
from openshift_build_sdk.build.verifier import BuildVerifier
from openshift_build_sdk.cluster.base import ClientFactory, ClusterClient
from openshift_build_sdk.core.config import BuildStepConfig, GlobalConfig
from openshift_build_sdk.core.constants import (
    BUILD_URI_ANNOTATION,
    BUILD_URL_ENV_KEY,
    DISPLAY_NAME,
    Messages,
    RunState,
)
from openshift_build_sdk.core.exceptions import OpenShiftBuildError, WatchError
from openshift_build_sdk.core.types import Build, BuildRun, ConsoleSink, WaitWindow
from openshift_build_sdk.utils.async_helpers import run_sync
from openshift_build_sdk.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


class OpenShiftBuilder:
    """Trigger a build and observe it to a pass/fail verdict.

    One instance holds the statically configured step; every call to
    :meth:`core_logic` is an independent run with its own overrides, wait
    window, watchers and cancellation signal.

    Usage::

        builder = OpenShiftBuilder(
            BuildStepConfig(bld_cfg="${BLD_CFG}", namespace="ci", show_build_logs="true"),
            client_factory=make_client,
        )
        ok = await builder.core_logic({"BLD_CFG": "frontend", "BUILD_URL": job_url})

    Only interruption (:class:`asyncio.CancelledError`) is raised, and only
    after a best-effort cancel of the remote build. Every other failure is
    printed to the console and returned as ``False``.
    """

    def __init__(
        self,
        step: BuildStepConfig,
        client_factory: ClientFactory,
        *,
        global_config: GlobalConfig | None = None,
        console: ConsoleSink = print,
    ) -> None:
        self._step = step
        self._client_factory = client_factory
        self._global = global_config or GlobalConfig()
        self._console = console
        self._canceller = BuildCanceller(client_factory, console=console)

    @classmethod
    def from_env(
        cls, client_factory: ClientFactory, *, console: ConsoleSink = print
    ) -> OpenShiftBuilder:
        """Build a step from ``OPENSHIFT_*`` environment variables and configure logging."""
        global_config = GlobalConfig.from_env()
        configure_logging(global_config.log_level, json=global_config.log_json)
        return cls(
            BuildStepConfig.from_env(),
            client_factory,
            global_config=global_config,
            console=console,
        )

    def __repr__(self) -> str:
        return f"OpenShiftBuilder(bld_cfg={self._step.bld_cfg!r}, namespace={self._step.namespace!r})"

    async def core_logic(self, overrides: Mapping[str, str] | None = None) -> bool:
        """Run the step once; ``True`` when the build completed successfully."""
        run = await self.execute(overrides)
        return run.succeeded

    def core_logic_sync(self, overrides: Mapping[str, str] | None = None) -> bool:
        """Blocking variant of :meth:`core_logic` for synchronous pipelines."""
        return run_sync(self.core_logic(overrides))

    async def execute(self, overrides: Mapping[str, str] | None = None) -> BuildRun:
        """Run the step once and return the run record."""
        resolved: dict[str, str] = dict(overrides or {})
        run = BuildRun()
        namespace = self._step.get_namespace(resolved)
        bld_cfg = self._step.get_bld_cfg(resolved)
        self._console(
            Messages.START_BUILD.format(step=DISPLAY_NAME, bld_cfg=bld_cfg, namespace=namespace)
        )
        try:
            return await self._execute(run, resolved, namespace, bld_cfg)
        except OpenShiftBuildError as exc:
            logger.warning("build_run_failed", bld_cfg=bld_cfg, error=str(exc), state=str(run.state))
            self._console(Messages.EXIT_REMOTE_ERROR.format(step=DISPLAY_NAME, error=exc))
            return self._finish(run, False)
        except Exception as exc:  # noqa: BLE001
            logger.exception("build_run_error", bld_cfg=bld_cfg, state=str(run.state))
            self._console(Messages.EXIT_REMOTE_ERROR.format(step=DISPLAY_NAME, error=exc))
            return self._finish(run, False)

    async def _execute(
        self,
        run: BuildRun,
        overrides: dict[str, str],
        namespace: str,
        bld_cfg: str,
    ) -> BuildRun:
        step = self._step
        verbose = step.is_verbose(overrides)
        follow = step.follow_logs(overrides)
        check_deps = step.check_deployments(overrides)
        api_url = step.get_api_url(overrides)
        token = step.get_auth_token(overrides)
        if verbose:
            self._console(f"\nOpenShiftBuilder logger follow {follow}")

        client = self._client_factory(api_url, token)

        build_name = step.get_build_name(overrides)
        build_config = None
        previous_build = None
        if build_name and build_name.strip():
            previous_build = await client.get_build(build_name.strip(), namespace)
        else:
            build_config = await client.get_build_config(bld_cfg, namespace)
        if verbose:
            self._console(
                f"\nOpenShiftBuilder build config retrieved {build_config} buildName {build_name}"
            )
        if build_config is None and previous_build is None:
            self._console(Messages.EXIT_NO_BUILD_CONFIG.format(step=DISPLAY_NAME, bld_cfg=bld_cfg))
            return self._finish(run, False)

        signal = CancellationSignal(
            partial(self._canceller.cancel, api_url, namespace, token, verbose, bld_cfg)
        )
        try:
            build = await BuildTrigger(client, step).start(build_config, previous_build, overrides)
            if build is None:
                self._console(Messages.EXIT_NO_BUILD_OBJ.format(step=DISPLAY_NAME))
                return self._finish(run, False)
            run.build_id = build.name
            self._transition(run, RunState.TRIGGERED)

            await self._annotate(client, build, overrides, verbose)
            template = Messages.WAITING_ON_BUILD_PLUS_DEPLOY if check_deps else Messages.WAITING_ON_BUILD
            self._console(template.format(build_id=build.name))

            run.window = WaitWindow(
                max_wait=step.get_timeout(overrides, self._global, self._console)
            )
            with structlog.contextvars.bound_contextvars(build_id=build.name, namespace=namespace):
                return await self._observe(
                    run, client, build.name, namespace, follow, check_deps, verbose, signal
                )
        except asyncio.CancelledError:
            await signal.fire()
            raise

    async def _observe(
        self,
        run: BuildRun,
        client: ClusterClient,
        build_id: str,
        namespace: str,
        follow: bool,
        check_deps: bool,
        verbose: bool,
        signal: CancellationSignal,
    ) -> BuildRun:
        window = run.window
        assert window is not None  # for mypy
        interval = self._global.poll_interval

        self._transition(run, RunState.LOCATING_POD)
        if verbose:
            self._console(f"\n OpenShiftBuilder looking for build {build_id}")
        pod = await PodLocator(
            client, poll_interval=interval, verbose=verbose, console=self._console
        ).locate(build_id, namespace, window, on_interrupt=signal)
        if pod is None:
            self._console(Messages.EXIT_NO_POD_OBJ.format(step=DISPLAY_NAME, build_id=build_id))
            return self._finish(run, False)
        run.pod_name = pod.name
        if verbose:
            self._console(f"\nOpenShiftBuilder found build pod {pod.name}")

        self._transition(run, RunState.WAITING)
        coordinator = WaitCoordinator(
            client,
            console=self._console,
            verbose=verbose,
            poll_interval=interval,
            reconnect_delay=interval,
            on_complete=lambda b: run.details.update(final_status=str(b.status)),
        )
        try:
            completed = await coordinator.wait_for_completion(
                pod, build_id, namespace, window, follow, on_interrupt=signal
            )
        except WatchError as exc:
            self._console(
                Messages.EXIT_WATCH_FAILED.format(step=DISPLAY_NAME, build_id=build_id, error=exc)
            )
            return self._finish(run, False)
        run.details["completed"] = completed

        self._transition(run, RunState.VERIFYING)
        verifier = BuildVerifier(client, console=self._console, poll_interval=interval)
        ok = await verifier.verify(window, build_id, namespace, check_deps)
        return self._finish(run, ok)

    async def _annotate(
        self,
        client: ClusterClient,
        build: Build,
        overrides: Mapping[str, str],
        verbose: bool,
    ) -> None:
        job_url = overrides.get(BUILD_URL_ENV_KEY)
        if not job_url:
            return
        try:
            await client.annotate_build(build.name, build.namespace, {BUILD_URI_ANNOTATION: job_url})
        except Exception as exc:  # noqa: BLE001
            logger.warning("build_annotate_failed", build_id=build.name, error=str(exc))
            if verbose:
                self._console(f"\nOpenShiftBuilder unable to annotate build {build.name}: {exc}")

    @staticmethod
    def _transition(run: BuildRun, state: RunState) -> None:
        logger.debug("build_run_state", build_id=run.build_id, old=str(run.state), new=str(state))
        run.transition(state)

    @staticmethod
    def _finish(run: BuildRun, ok: bool) -> BuildRun:
        run.transition(RunState.SUCCEEDED if ok else RunState.FAILED)
        logger.info("build_run_finished", build_id=run.build_id, state=str(run.state))
        return run
