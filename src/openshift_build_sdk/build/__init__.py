"""Build orchestration: trigger, locate, wait, cancel, verify."""

from openshift_build_sdk.build.builder import OpenShiftBuilder
from openshift_build_sdk.build.canceller import BuildCanceller, CancellationSignal
from openshift_build_sdk.build.coordinator import WaitCoordinator
from openshift_build_sdk.build.locator import PodLocator
from openshift_build_sdk.build.trigger import BuildTrigger
from openshift_build_sdk.build.verifier import BuildVerifier

__all__ = [
    "BuildCanceller",
    "BuildTrigger",
    "BuildVerifier",
    "CancellationSignal",
    "OpenShiftBuilder",
    "PodLocator",
    "WaitCoordinator",
]
