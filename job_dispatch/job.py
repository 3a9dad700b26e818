"""
Helpers for building a one-shot k8s job from a source workload.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

import yaml

from kubernetes import client as k8s_client  # type: ignore
from job_dispatch import constants, log
from job_dispatch.common.user_input import Prompter
from job_dispatch.exceptions import (
    InvalidJobNameError,
    InvalidOverrideError,
    InvalidSourceError,
)
from job_dispatch.source import WorkloadKind, WorkloadTemplate

logger = log.get_logger("job_dispatch")

JOB_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
QUANTITY_RE = re.compile(
    r"^\+?(\d+(\.\d*)?|\.\d+)(Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E|[eE][+-]?\d+)?$"
)
LIMIT_RESOURCES = ("cpu", "memory")


def get_job_name(source: WorkloadTemplate, tag: str) -> str:
    origin = f"derived from {source.kind.value} `{source.name}` in namespace `{source.namespace}`"
    if not tag:
        raise InvalidJobNameError(f"The tag of the job {origin} must not be empty")
    name = f"{source.name}-{tag}"
    if len(name) > constants.MAX_JOB_NAME_LENGTH:
        raise InvalidJobNameError(
            f"Job name `{name}` {origin} is {len(name)} characters long, "
            f"the limit is {constants.MAX_JOB_NAME_LENGTH}"
        )
    if not JOB_NAME_RE.match(name):
        raise InvalidJobNameError(
            f"Job name `{name}` {origin} must consist of lower case alphanumeric "
            "characters or '-', and must start and end with an alphanumeric character"
        )
    return name


def _strip_controller_labels(meta: Optional[k8s_client.V1ObjectMeta]) -> None:
    if meta is None or not meta.labels:
        return
    for key in constants.CONTROLLER_LABELS:
        meta.labels.pop(key, None)


def _get_target_container(
    pod_spec: k8s_client.V1PodSpec, container: Optional[str], source: WorkloadTemplate
) -> k8s_client.V1Container:
    if container is None:
        return pod_spec.containers[0]
    for candidate in pod_spec.containers:
        if candidate.name == container:
            return candidate
    raise InvalidSourceError(
        f"{source.kind.value} `{source.name}` has no container `{container}`; "
        f"available: {[e.name for e in pod_spec.containers]}"
    )


def _get_pod_spec(source: WorkloadTemplate) -> k8s_client.V1PodSpec:
    pod_spec = source.get_job_template().spec.template.spec
    if pod_spec is None or not pod_spec.containers:
        raise InvalidSourceError(f"{source.kind.value} `{source.name}` declares no container")
    return pod_spec


def get_target_env(
    source: WorkloadTemplate, container: Optional[str] = None
) -> list[k8s_client.V1EnvVar]:
    """Declared env of the container the overrides apply to."""
    pod_spec = _get_pod_spec(source)
    return list(_get_target_container(pod_spec, container, source).env or [])


def select_container(prompter: Prompter, source: WorkloadTemplate) -> Optional[str]:
    """
    Ask which container the overrides apply to. Returns ``None`` (the first
    container) when there is nothing to choose from.
    """
    names = [e.name for e in _get_pod_spec(source).containers]
    if len(names) < 2:
        return None
    idx = prompter.select_one(
        f"Select the container of {source.kind.value} `{source.name}` to override", names
    )
    return names[idx]


def prompt_resource_limits(
    prompter: Prompter,
    source: WorkloadTemplate,
    container: Optional[str] = None,
    resource_limits: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Ask for the cpu and memory limits not already in ``resource_limits``. The
    current limit is the default; an empty or unchanged answer keeps it.
    """
    result = dict(resource_limits or {})
    target = _get_target_container(_get_pod_spec(source), container, source)
    current = dict((target.resources.limits if target.resources else None) or {})
    for resource in LIMIT_RESOURCES:
        if resource in result:
            continue
        default = current.get(resource)
        answer = prompter.read_line(f"{resource.capitalize()} limit", default=default)
        if answer and answer != default:
            result[resource] = answer
    return result


def _update_resource_limits(
    container: k8s_client.V1Container, resource_limits: Dict[str, str]
) -> None:
    for resource, quantity in resource_limits.items():
        if not QUANTITY_RE.match(quantity):
            raise InvalidOverrideError(
                f"`{quantity}` is not a valid quantity for the {resource} limit"
            )
    if container.resources is None:
        container.resources = k8s_client.V1ResourceRequirements()
    limits = dict(container.resources.limits or {})
    limits.update(resource_limits)
    container.resources.limits = limits


def _normalize_restart_policy(pod_spec: k8s_client.V1PodSpec, source: WorkloadTemplate) -> None:
    if pod_spec.restart_policy in constants.ONE_SHOT_RESTART_POLICIES:
        return
    msg = (
        f"Restart policy `{pod_spec.restart_policy}` of {source.kind.value} "
        f"`{source.name}` cannot be used by a job, using "
        f"`{constants.DEFAULT_RESTART_POLICY}`."
    )
    # deployments always declare `Always`
    if source.kind is WorkloadKind.DEPLOYMENT:
        logger.info(msg)
    else:
        logger.warning(msg)
    pod_spec.restart_policy = constants.DEFAULT_RESTART_POLICY


def get_provenance(source: WorkloadTemplate) -> tuple[Dict[str, str], Dict[str, str]]:
    labels = {
        constants.LABEL_MANAGED_BY: constants.MANAGED_BY,
        constants.LABEL_SOURCE_KIND: source.kind.value.lower(),
        constants.LABEL_SOURCE_NAME: source.name,
    }
    annotations = {constants.ANNOTATION_SOURCE: f"{source.kind.value}/{source.name}"}
    if source.kind is WorkloadKind.CRONJOB:
        annotations[constants.ANNOTATION_CRONJOB_INSTANTIATE] = "manual"
    return labels, annotations


def build_job(
    source: WorkloadTemplate,
    env: Optional[Sequence[k8s_client.V1EnvVar]] = None,
    tag: str = constants.DEFAULT_TAG,
    namespace: Optional[str] = None,
    container: Optional[str] = None,
    backoff_limit: Optional[int] = None,
    resource_limits: Optional[Dict[str, str]] = None,
) -> k8s_client.V1Job:
    """
    Derive a job from ``source``.

    :param source: The workload whose pod template is copied.
    :param env: Replaces the env list of the target container. ``None`` keeps the
        declared one.
    :param tag: Suffix of the job name, ``<source name>-<tag>``.
    :param namespace: Namespace of the job. Defaults to the source namespace.
    :param container: Name of the container ``env`` and ``resource_limits`` apply to.
        Defaults to the first container.
    :param backoff_limit: Overrides the source ``backoffLimit``.
    :param resource_limits: Merged into the target container's resource limits.
    """
    name = get_job_name(source, tag)
    namespace = namespace or source.namespace

    job_template = source.get_job_template()
    job_spec = job_template.spec
    pod_template = job_spec.template
    pod_spec = pod_template.spec
    if pod_spec is None or not pod_spec.containers:
        raise InvalidSourceError(f"{source.kind.value} `{source.name}` declares no container")

    target = _get_target_container(pod_spec, container, source)
    if env is not None:
        target.env = list(env) or None
    if resource_limits:
        _update_resource_limits(target, resource_limits)

    _normalize_restart_policy(pod_spec, source)

    job_spec.selector = None
    job_spec.manual_selector = None
    _strip_controller_labels(pod_template.metadata)
    if backoff_limit is not None:
        job_spec.backoff_limit = backoff_limit
    elif job_spec.backoff_limit is None:
        job_spec.backoff_limit = constants.DEFAULT_BACKOFF_LIMIT

    template_meta = job_template.metadata or k8s_client.V1ObjectMeta()
    _strip_controller_labels(template_meta)
    labels, annotations = get_provenance(source)
    meta = k8s_client.V1ObjectMeta(
        name=name,
        namespace=namespace,
        labels={**(template_meta.labels or {}), **labels},
        annotations={**(template_meta.annotations or {}), **annotations},
    )
    logger.debug(f"Built job `{name}` from {source.kind.value} `{source.name}`")
    return k8s_client.V1Job(api_version="batch/v1", kind="Job", metadata=meta, spec=job_spec)


def render_job(job: k8s_client.V1Job) -> str:
    body = k8s_client.ApiClient().sanitize_for_serialization(job)
    return yaml.safe_dump(body, default_flow_style=False, sort_keys=False)
