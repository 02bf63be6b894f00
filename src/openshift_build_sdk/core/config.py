from __future__ import annotations

import math
import os
from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

from openshift_build_sdk.core.constants import Messages, TimeUnit
from openshift_build_sdk.core.overrides import get_override
from openshift_build_sdk.core.types import NameValuePair

_UNIT_SECONDS: dict[str, float] = {
    TimeUnit.MILLI: 0.001,
    TimeUnit.SEC: 1.0,
    TimeUnit.MIN: 60.0,
}


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _resolve_name(name: str, overrides: Mapping[str, str] | None) -> str:
    # Env names are literal unless written as a parameter reference.
    if name.strip().startswith("$"):
        return get_override(name, overrides) or ""
    return name


class GlobalConfig(BaseModel):
    """Process-wide defaults, passed explicitly into each builder."""

    build_wait: float = Field(default=900.0, gt=0)
    """Default seconds to wait for a build when the step sets no wait time."""
    poll_interval: float = Field(default=1.0, gt=0)
    """Seconds between pod-list and status polls."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True
    """Render structured logs as JSON lines; ``False`` for the console renderer."""

    @classmethod
    def from_env(cls) -> GlobalConfig:
        """Create a :class:`GlobalConfig` from ``OPENSHIFT_*`` environment variables.

        * ``OPENSHIFT_BUILD_WAIT`` → ``build_wait`` (seconds)
        * ``OPENSHIFT_POLL_INTERVAL`` → ``poll_interval`` (seconds)
        * ``OPENSHIFT_LOG_LEVEL`` → ``log_level`` (``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``)
        * ``OPENSHIFT_LOG_JSON`` → ``log_json`` (``false`` selects the console renderer)
        """
        kwargs: dict[str, Any] = {}
        build_wait = os.environ.get("OPENSHIFT_BUILD_WAIT")
        if build_wait:
            kwargs["build_wait"] = float(build_wait)
        poll_interval = os.environ.get("OPENSHIFT_POLL_INTERVAL")
        if poll_interval:
            kwargs["poll_interval"] = float(poll_interval)
        log_level = os.environ.get("OPENSHIFT_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()
        log_json = os.environ.get("OPENSHIFT_LOG_JSON")
        if log_json:
            kwargs["log_json"] = _as_bool(log_json)
        return cls(**kwargs)


class BuildStepConfig(BaseModel):
    """Statically configured fields of a "trigger build" step.

    Every field is a string so it may hold a parameter reference that is
    resolved per run with :func:`~openshift_build_sdk.core.overrides.get_override`.
    """

    api_url: str = "https://openshift.default.svc.cluster.local"
    namespace: str = "test"
    auth_token: str | None = None
    verbose: str = "false"
    bld_cfg: str = "frontend"
    build_name: str | None = None
    commit_id: str | None = None
    show_build_logs: str = "false"
    check_for_triggered_deployments: str = "false"
    wait_time: str | None = None
    wait_unit: TimeUnit = TimeUnit.MILLI
    env: list[NameValuePair] = Field(default_factory=list)

    # ------------------------------------------------------------------ #
    # Resolved accessors
    # ------------------------------------------------------------------ #

    def resolve(self, field: str, overrides: Mapping[str, str] | None) -> str | None:
        return get_override(getattr(self, field), overrides)

    def get_api_url(self, overrides: Mapping[str, str] | None) -> str:
        return self.resolve("api_url", overrides) or self.api_url

    def get_namespace(self, overrides: Mapping[str, str] | None) -> str:
        return self.resolve("namespace", overrides) or self.namespace

    def get_auth_token(self, overrides: Mapping[str, str] | None) -> str | None:
        return self.resolve("auth_token", overrides)

    def get_bld_cfg(self, overrides: Mapping[str, str] | None) -> str:
        return self.resolve("bld_cfg", overrides) or self.bld_cfg

    def get_build_name(self, overrides: Mapping[str, str] | None) -> str | None:
        return self.resolve("build_name", overrides)

    def get_commit_id(self, overrides: Mapping[str, str] | None) -> str | None:
        return self.resolve("commit_id", overrides)

    def is_verbose(self, overrides: Mapping[str, str] | None) -> bool:
        return _as_bool(self.resolve("verbose", overrides))

    def follow_logs(self, overrides: Mapping[str, str] | None) -> bool:
        return _as_bool(self.resolve("show_build_logs", overrides))

    def check_deployments(self, overrides: Mapping[str, str] | None) -> bool:
        return _as_bool(self.resolve("check_for_triggered_deployments", overrides))

    def resolved_env(self, overrides: Mapping[str, str] | None) -> list[NameValuePair]:
        return [
            NameValuePair(
                name=_resolve_name(pair.name, overrides),
                value=get_override(pair.value, overrides) or "",
            )
            for pair in self.env
        ]

    def get_timeout(
        self,
        overrides: Mapping[str, str] | None,
        global_config: GlobalConfig,
        console: Callable[[str], None] | None = None,
    ) -> float:
        """Return the build wait in seconds.

        Falls back to ``global_config.build_wait`` when no wait time is set or
        it is not a finite, non-negative number.
        """
        wait_time = self.resolve("wait_time", overrides)
        if not wait_time or not wait_time.strip():
            return global_config.build_wait
        try:
            amount = float(wait_time.strip())
        except ValueError:
            amount = math.nan
        if not math.isfinite(amount) or amount < 0:
            if console is not None:
                console(
                    Messages.BAD_TIMEOUT.format(
                        wait_time=wait_time, default=global_config.build_wait
                    )
                )
            return global_config.build_wait
        return amount * _UNIT_SECONDS[self.wait_unit]

    @classmethod
    def from_env(cls) -> BuildStepConfig:
        """Create a :class:`BuildStepConfig` from ``OPENSHIFT_*`` environment variables.

        Reads (all optional): ``OPENSHIFT_API_URL``, ``OPENSHIFT_NAMESPACE``,
        ``OPENSHIFT_AUTH_TOKEN``, ``OPENSHIFT_BUILD_CONFIG``,
        ``OPENSHIFT_VERBOSE``. Unset or empty variables keep their defaults.
        """
        mapping = {
            "OPENSHIFT_API_URL": "api_url",
            "OPENSHIFT_NAMESPACE": "namespace",
            "OPENSHIFT_AUTH_TOKEN": "auth_token",
            "OPENSHIFT_BUILD_CONFIG": "bld_cfg",
            "OPENSHIFT_VERBOSE": "verbose",
        }
        kwargs: dict[str, Any] = {}
        for env_name, field in mapping.items():
            value = os.environ.get(env_name)
            if value:
                kwargs[field] = value
        return cls(**kwargs)
