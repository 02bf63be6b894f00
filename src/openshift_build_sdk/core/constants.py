from __future__ import annotations

from enum import StrEnum


class BuildStatus(StrEnum):
    NEW = "New"
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"
    CANCELLED = "Cancelled"


TERMINAL_BUILD_STATUSES: frozenset[str] = frozenset(
    {
        BuildStatus.COMPLETE,
        BuildStatus.FAILED,
        BuildStatus.ERROR,
        BuildStatus.CANCELLED,
    }
)


def is_build_finished(status: str | None) -> bool:
    """Return ``True`` when *status* is one no further transition leaves."""
    return status is not None and status in TERMINAL_BUILD_STATUSES


class PodPhase(StrEnum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ResourceKind(StrEnum):
    BUILD = "Build"
    BUILD_CONFIG = "BuildConfig"
    POD = "Pod"


class ChangeType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class RunState(StrEnum):
    IDLE = "idle"
    TRIGGERED = "triggered"
    LOCATING_POD = "locating_pod"
    WAITING = "waiting"
    VERIFYING = "verifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TimeUnit(StrEnum):
    MILLI = "milli"
    SEC = "sec"
    MIN = "min"


# Override keys supplied by the calling pipeline
BUILD_URL_ENV_KEY = "BUILD_URL"

BUILD_URI_ANNOTATION = "openshift.io/jenkins-build-uri"
CAUSE_PREFIX = "Pipeline job URI: "

DISPLAY_NAME = "Trigger OpenShift Build"
CANCEL_DISPLAY_NAME = "Cancel OpenShift Builds"


class Messages:
    """Operator-facing console text, one entry per outcome."""

    START_BUILD = (
        '\n\nStarting the "{step}" step with build config "{bld_cfg}" '
        'from the project "{namespace}".'
    )
    WAITING_ON_BUILD = '  Started build "{build_id}" and waiting for build completion ...'
    WAITING_ON_BUILD_PLUS_DEPLOY = (
        '  Started build "{build_id}" and waiting for build completion '
        "followed by a new deployment ..."
    )
    EXIT_NO_BUILD_CONFIG = (
        '\n\nExiting "{step}" unsuccessfully; the build config "{bld_cfg}" '
        "could not be read."
    )
    EXIT_NO_BUILD_OBJ = '\n\nExiting "{step}" unsuccessfully; a build could not be started.'
    EXIT_NO_POD_OBJ = (
        '\n\nExiting "{step}" unsuccessfully; no pod found for build "{build_id}".'
    )
    EXIT_WATCH_FAILED = (
        '\n\nExiting "{step}" unsuccessfully; could not watch build "{build_id}": {error}'
    )
    EXIT_REMOTE_ERROR = '\n\nExiting "{step}" unsuccessfully; remote call failed: {error}'
    EXIT_BUILD_GOOD = '\n\nExiting "{step}" successfully; build "{build_id}" has completed.'
    EXIT_BUILD_GOOD_DEPLOY = (
        '\n\nExiting "{step}" successfully; build "{build_id}" has completed '
        "and its deployments were triggered."
    )
    EXIT_BUILD_BAD = (
        '\n\nExiting "{step}" unsuccessfully; build "{build_id}" has completed '
        'with status:  [{status}].'
    )
    EXIT_BUILD_TIMEOUT = (
        '\n\nExiting "{step}" unsuccessfully; build "{build_id}" has not completed '
        "within {wait:.1f} seconds; current status:  [{status}]."
    )
    EXIT_BUILD_VANISHED = (
        '\n\nExiting "{step}" unsuccessfully; build "{build_id}" could not be read '
        "for verification."
    )
    EXIT_DEPLOY_NOT_TRIGGERED = (
        '\n\nExiting "{step}" unsuccessfully; build "{build_id}" completed '
        "but no deployment was triggered."
    )
    BAD_TIMEOUT = (
        '\n  The wait time "{wait_time}" is not a non-negative number; using the default of '
        "{default:.1f} seconds."
    )
    LOG_UNAVAILABLE = "\n  Build logs for pod \"{pod}\" are unavailable: {error}"
    CANCEL_START = '\n\nStarting "{step}" for build config "{bld_cfg}" in project "{namespace}".'
    CANCEL_DONE = '  Cancelled build(s): {builds}'
    CANCEL_NONE = '  No active builds found for build config "{bld_cfg}".'
    CANCEL_FAILED = '  Unable to cancel builds for build config "{bld_cfg}": {error}'
