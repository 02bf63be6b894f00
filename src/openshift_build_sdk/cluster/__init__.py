"""Cluster API client interface and the in-memory test double."""

from openshift_build_sdk.cluster.base import ClientFactory, ClusterClient, ClusterProtocol
from openshift_build_sdk.cluster.mock import MockCluster

__all__ = [
    "ClientFactory",
    "ClusterClient",
    "ClusterProtocol",
    "MockCluster",
]
