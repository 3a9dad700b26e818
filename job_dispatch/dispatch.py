"""
Resolve a source workload, derive a job from it and submit or render the job.
"""

from __future__ import annotations

from typing import Dict, Optional

import attrs

from kubernetes import client as k8s_client  # type: ignore
from job_dispatch import constants, log
from job_dispatch.common.user_input import NonInteractivePrompter, Prompter
from job_dispatch.env import merge_env, prompt_overrides
from job_dispatch.job import (
    build_job,
    get_job_name,
    get_target_env,
    prompt_resource_limits,
    render_job,
    select_container,
)
from job_dispatch.orchestrator import Orchestrator
from job_dispatch.source import WorkloadKind, resolve_source
from job_dispatch.submit import submit_job

logger = log.get_logger("job_dispatch")


@attrs.frozen
class DispatchRequest:
    kind: WorkloadKind = WorkloadKind.CRONJOB
    namespace: str = constants.DEFAULT_NAMESPACE
    name: Optional[str] = None
    tag: str = constants.DEFAULT_TAG
    overrides: Dict[str, str] = attrs.field(factory=dict)
    dry_run: bool = False
    interactive: bool = False
    container: Optional[str] = None
    target_namespace: Optional[str] = None
    backoff_limit: Optional[int] = None
    resource_limits: Dict[str, str] = attrs.field(factory=dict)


@attrs.frozen
class DispatchResult:
    job: k8s_client.V1Job
    rendered: Optional[str] = None
    submitted: bool = False


def dispatch(
    orchestrator: Orchestrator,
    request: DispatchRequest,
    prompter: Optional[Prompter] = None,
) -> DispatchResult:
    if prompter is None or not request.interactive:
        prompter = NonInteractivePrompter()

    source = resolve_source(
        orchestrator,
        kind=request.kind,
        namespace=request.namespace,
        name=request.name,
        prompter=prompter,
    )

    # fail on a bad name before asking anything
    get_job_name(source, request.tag)
    container = request.container
    if request.interactive and container is None:
        container = select_container(prompter, source)
    base_env = get_target_env(source, container)
    overrides = dict(request.overrides)
    resource_limits = dict(request.resource_limits)
    if request.interactive:
        overrides = prompt_overrides(prompter, base_env, overrides)
        resource_limits = prompt_resource_limits(prompter, source, container, resource_limits)

    env = merge_env(base_env, overrides)
    job = build_job(
        source,
        env=env,
        tag=request.tag,
        namespace=request.target_namespace,
        container=container,
        backoff_limit=request.backoff_limit,
        resource_limits=resource_limits,
    )

    if request.dry_run:
        logger.info(f"Dry run, job `{job.metadata.name}` is not submitted.")
        return DispatchResult(job=job, rendered=render_job(job))

    created = submit_job(orchestrator, job)
    return DispatchResult(job=created, submitted=True)
