"""openshift-build-sdk: trigger OpenShift builds and wait them out."""

from openshift_build_sdk.__version__ import __version__

from openshift_build_sdk.build import (
    BuildCanceller,
    BuildTrigger,
    BuildVerifier,
    CancellationSignal,
    OpenShiftBuilder,
    PodLocator,
    WaitCoordinator,
)
from openshift_build_sdk.cluster import ClientFactory, ClusterClient, ClusterProtocol, MockCluster
from openshift_build_sdk.core.config import BuildStepConfig, GlobalConfig
from openshift_build_sdk.core.constants import (
    BuildStatus,
    ChangeType,
    PodPhase,
    ResourceKind,
    RunState,
    TimeUnit,
)
from openshift_build_sdk.core.exceptions import (
    AuthenticationError,
    ClusterError,
    LogStreamError,
    OpenShiftBuildError,
    ResourceNotFoundError,
    WatchError,
)
from openshift_build_sdk.core.overrides import get_override
from openshift_build_sdk.core.types import (
    Build,
    BuildConfig,
    BuildConfigRef,
    BuildRef,
    BuildRequest,
    BuildRun,
    NameValuePair,
    Pod,
    ResourceEvent,
    TriggerRequest,
    WaitWindow,
)
from openshift_build_sdk.watch import PodLogWatcher, ResourceWatcher, WatchHandle

__all__ = [
    "__version__",
    # Orchestration
    "OpenShiftBuilder",
    "BuildTrigger",
    "PodLocator",
    "WaitCoordinator",
    "BuildCanceller",
    "CancellationSignal",
    "BuildVerifier",
    # Watchers
    "ResourceWatcher",
    "PodLogWatcher",
    "WatchHandle",
    # Cluster
    "ClusterClient",
    "ClusterProtocol",
    "ClientFactory",
    "MockCluster",
    # Config
    "BuildStepConfig",
    "GlobalConfig",
    "get_override",
    # Constants
    "BuildStatus",
    "ChangeType",
    "PodPhase",
    "ResourceKind",
    "RunState",
    "TimeUnit",
    # Types
    "Build",
    "BuildConfig",
    "BuildConfigRef",
    "BuildRef",
    "BuildRequest",
    "BuildRun",
    "NameValuePair",
    "Pod",
    "ResourceEvent",
    "TriggerRequest",
    "WaitWindow",
    # Exceptions
    "OpenShiftBuildError",
    "ClusterError",
    "ResourceNotFoundError",
    "AuthenticationError",
    "WatchError",
    "LogStreamError",
]
