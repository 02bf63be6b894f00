"""Best-effort remote cancellation for interrupted runs."""

from __future__ import annotations

from typing import Awaitable, Callable

import structlog

from openshift_build_sdk.cluster.base import ClientFactory
from openshift_build_sdk.core.constants import CANCEL_DISPLAY_NAME, Messages
from openshift_build_sdk.core.types import ConsoleSink

logger = structlog.get_logger(__name__)


class BuildCanceller:
    """Cancels the active build(s) of a build-config.

    A fresh client is created from the same endpoint and token the run used,
    so cancellation does not depend on the state of the interrupted run's
    client. No build id is needed: every unfinished build of the build-config
    is cancelled.

    Failures are logged and reported on the console but never raised; the
    interruption that caused the cancel is what the caller must see.
    """

    def __init__(self, client_factory: ClientFactory, console: ConsoleSink = print) -> None:
        self._client_factory = client_factory
        self._console = console

    async def cancel(
        self,
        api_url: str,
        namespace: str,
        token: str | None,
        verbose: bool,
        build_config_name: str,
    ) -> None:
        self._console(
            Messages.CANCEL_START.format(
                step=CANCEL_DISPLAY_NAME, bld_cfg=build_config_name, namespace=namespace
            )
        )
        try:
            client = self._client_factory(api_url, token)
            cancelled = await client.cancel_builds_for_config(build_config_name, namespace)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "build_cancel_failed",
                bld_cfg=build_config_name,
                namespace=namespace,
                error=str(exc),
            )
            self._console(Messages.CANCEL_FAILED.format(bld_cfg=build_config_name, error=exc))
            return

        names = [b.name for b in cancelled]
        if names:
            self._console(Messages.CANCEL_DONE.format(builds=", ".join(names)))
        else:
            self._console(Messages.CANCEL_NONE.format(bld_cfg=build_config_name))
        if verbose:
            self._console(f"\nOpenShiftBuildCanceller cancelled {names} via {api_url}")
        logger.info("builds_cancelled", bld_cfg=build_config_name, builds=names)


class CancellationSignal:
    """Runs the cancellation handler at most once per orchestration run.

    Both suspension points of a run (pod polling and the completion wait)
    hold the same signal, so whichever sees the interruption first cancels
    and any later :meth:`fire` is a no-op.
    """

    def __init__(self, handler: Callable[[], Awaitable[None]]) -> None:
        self._handler = handler
        self._fired = False

    def __repr__(self) -> str:
        return f"CancellationSignal(fired={self._fired})"

    @property
    def fired(self) -> bool:
        return self._fired

    async def fire(self) -> bool:
        """Invoke the handler unless already fired; ``True`` if it ran now."""
        if self._fired:
            return False
        self._fired = True
        await self._handler()
        return True

    async def __call__(self) -> None:
        await self.fire()
