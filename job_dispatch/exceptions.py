from __future__ import annotations


class DispatchError(Exception):
    """Base class for errors that abort a dispatch."""


class SourceNotFoundError(DispatchError):
    """The named source workload does not exist."""

    def __init__(self, kind: str, name: str, namespace: str):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        super().__init__(f"{kind} `{name}` not found in namespace `{namespace}`")


class EmptySourceListError(DispatchError):
    """There is no candidate workload to choose from."""

    def __init__(self, kind: str, namespace: str):
        self.kind = kind
        self.namespace = namespace
        super().__init__(f"No {kind} found in namespace `{namespace}`")


class InvalidSourceError(DispatchError):
    ...


class InvalidJobNameError(DispatchError, ValueError):
    ...


class InvalidOverrideError(DispatchError, ValueError):
    ...


class SubmitError(DispatchError):
    """The API server refused to create the job."""

    def __init__(self, name: str, namespace: str, status: int | None, reason: str):
        self.name = name
        self.namespace = namespace
        self.status = status
        self.reason = reason
        super().__init__(
            f"Failed to create job `{name}` in namespace `{namespace}` "
            f"({status}): {reason}"
        )


class SubmitConflictError(SubmitError):
    ...


class SubmitRejectedError(SubmitError):
    ...


class UserCancelledError(DispatchError):
    ...
