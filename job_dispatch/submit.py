from __future__ import annotations

import json

from kubernetes.client.exceptions import ApiException

from kubernetes import client as k8s_client  # type: ignore
from job_dispatch import log
from job_dispatch.exceptions import SubmitConflictError, SubmitRejectedError
from job_dispatch.orchestrator import Orchestrator

logger = log.get_logger("job_dispatch")


def _get_reason(exc: ApiException) -> str:
    if exc.body:
        try:
            status = json.loads(exc.body)
        except (TypeError, ValueError):
            return str(exc.body)
        if isinstance(status, dict) and status.get("message"):
            return status["message"]
        return str(exc.body)
    return exc.reason or str(exc)


def submit_job(orchestrator: Orchestrator, job: k8s_client.V1Job) -> k8s_client.V1Job:
    """
    Create ``job``. A single attempt is made; API failures are raised as
    :class:`SubmitConflictError` (already exists) or :class:`SubmitRejectedError`.
    """
    name = job.metadata.name
    namespace = job.metadata.namespace
    try:
        created = orchestrator.create_job(job, namespace)
    except ApiException as exc:
        if exc.status == 409:
            raise SubmitConflictError(name, namespace, exc.status, _get_reason(exc)) from exc
        raise SubmitRejectedError(name, namespace, exc.status, _get_reason(exc)) from exc

    logger.info(
        f"Created job `{created.metadata.name}` in `{created.metadata.namespace}` "
        f"(uid: {created.metadata.uid})"
    )
    return created
