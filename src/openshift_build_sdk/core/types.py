from __future__ import annotations

import time
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, Field, model_validator

from openshift_build_sdk.core.constants import (
    BuildStatus,
    ChangeType,
    PodPhase,
    ResourceKind,
    RunState,
    is_build_finished,
)


ConsoleSink = Callable[[str], None]
"""Where operator-facing progress text is written (default ``print``)."""


class NameValuePair(BaseModel):
    name: str
    value: str = ""


class BuildConfig(BaseModel):
    name: str
    namespace: str


class Build(BaseModel):
    """Read-only snapshot of a remote build.

    ``status`` keeps unrecognised strings as-is so a newer cluster can report
    phases this SDK does not know about.
    """

    name: str
    namespace: str
    status: BuildStatus | str = BuildStatus.NEW
    build_config: str | None = None
    annotations: dict[str, str] = Field(default_factory=dict)

    @property
    def is_finished(self) -> bool:
        return is_build_finished(self.status)


class Pod(BaseModel):
    name: str
    namespace: str
    phase: PodPhase | str = PodPhase.PENDING
    owner: str | None = None

    def belongs_to(self, build_id: str) -> bool:
        """Build pods are named after the build they execute."""
        return self.name.startswith(build_id)


class ResourceEvent(BaseModel):
    kind: ResourceKind
    change: ChangeType = ChangeType.MODIFIED
    resource: Build | Pod


# ------------------------------------------------------------------ #
# Trigger targets
# ------------------------------------------------------------------ #


class BuildConfigRef(BaseModel):
    kind: Literal["BuildConfig"] = "BuildConfig"
    name: str
    namespace: str


class BuildRef(BaseModel):
    kind: Literal["Build"] = "Build"
    name: str
    namespace: str


TriggerRef = Annotated[Union[BuildConfigRef, BuildRef], Field(discriminator="kind")]


class TriggerRequest(BaseModel):
    """Everything the cluster needs to start (or restart) one build."""

    ref: TriggerRef
    commit_id: str | None = None
    causes: list[str] = Field(default_factory=list)
    env: list[NameValuePair] = Field(default_factory=list)


class BuildRequest(BaseModel):
    """What the caller asked for: a build-config to start or a build to re-run.

    Exactly one of ``build_config_name`` / ``existing_build_name`` is set.
    """

    namespace: str
    build_config_name: str | None = None
    existing_build_name: str | None = None
    commit_id: str | None = None
    env: list[NameValuePair] = Field(default_factory=list)
    cause: str = ""

    @model_validator(mode="after")
    def _exactly_one_target(self) -> BuildRequest:
        if bool(self.build_config_name) == bool(self.existing_build_name):
            raise ValueError(
                "exactly one of build_config_name or existing_build_name must be set"
            )
        return self

    @property
    def ref(self) -> BuildConfigRef | BuildRef:
        if self.build_config_name:
            return BuildConfigRef(name=self.build_config_name, namespace=self.namespace)
        assert self.existing_build_name is not None  # for mypy
        return BuildRef(name=self.existing_build_name, namespace=self.namespace)


# ------------------------------------------------------------------ #
# Run bookkeeping
# ------------------------------------------------------------------ #


class WaitWindow(BaseModel):
    """Absolute time budget for one run, measured on ``time.monotonic()``.

    Every blocking step derives its bound from :attr:`deadline`; the window is
    created once and never extended.
    """

    start: float = Field(default_factory=time.monotonic)
    max_wait: float = Field(..., ge=0.0)

    model_config = {"frozen": True}

    @property
    def deadline(self) -> float:
        return self.start + self.max_wait

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.deadline


class BuildRun(BaseModel):
    """State of a single orchestration run, private to that run."""

    state: RunState = RunState.IDLE
    build_id: str | None = None
    pod_name: str | None = None
    window: WaitWindow | None = None
    history: list[RunState] = Field(default_factory=lambda: [RunState.IDLE])
    details: dict[str, Any] = Field(default_factory=dict)

    def transition(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.SUCCEEDED
