"""Background listeners: resource watches and pod log streams."""

from openshift_build_sdk.watch.handle import WatchHandle
from openshift_build_sdk.watch.pod_log import PodLogWatcher
from openshift_build_sdk.watch.resource import ResourceWatcher

__all__ = [
    "PodLogWatcher",
    "ResourceWatcher",
    "WatchHandle",
]
