from __future__ import annotations

from typing import Any


class OpenShiftBuildError(Exception):
    """Base exception for all openshift-build-sdk errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"NOT_FOUND"``).
        details: Arbitrary key/value context about the error.
        status_code: HTTP-style status code when the error originates from
            a cluster API response (``None`` when not applicable).
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.status_code = status_code


class ClusterError(OpenShiftBuildError): ...


class WatchError(OpenShiftBuildError): ...


class LogStreamError(OpenShiftBuildError): ...


class ResourceNotFoundError(ClusterError):
    """The cluster API answered 404 for a named resource."""


class AuthenticationError(ClusterError):
    """Authentication / authorisation failure (HTTP 401/403).

    The caller must fix the token before another run can succeed.
    """
