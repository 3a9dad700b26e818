"""
Source workloads a job can be derived from, and how to find them.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Callable, ClassVar, Dict, List, Optional, Type

import attrs

from kubernetes import client as k8s_client  # type: ignore
from job_dispatch import log
from job_dispatch.common.user_input import NonInteractivePrompter, Prompter
from job_dispatch.exceptions import EmptySourceListError, InvalidSourceError
from job_dispatch.orchestrator import Orchestrator

logger = log.get_logger("job_dispatch")


class WorkloadKind(Enum):
    CRONJOB = "CronJob"
    DEPLOYMENT = "Deployment"


@attrs.frozen
class WorkloadTemplate:
    """
    A fetched source object. ``obj`` is never modified; every call to
    :meth:`get_job_template` returns an independent copy.
    """

    name: str
    namespace: str
    obj: object
    kind: ClassVar[WorkloadKind]

    def get_job_template(self) -> k8s_client.V1JobTemplateSpec:
        raise NotImplementedError


@attrs.frozen
class CronJobTemplate(WorkloadTemplate):
    kind: ClassVar[WorkloadKind] = WorkloadKind.CRONJOB

    def get_job_template(self) -> k8s_client.V1JobTemplateSpec:
        spec = self.obj.spec  # type: ignore[attr-defined]
        if spec is None or spec.job_template is None or spec.job_template.spec is None:
            raise InvalidSourceError(f"CronJob `{self.name}` has no job template")
        return copy.deepcopy(spec.job_template)


@attrs.frozen
class DeploymentTemplate(WorkloadTemplate):
    kind: ClassVar[WorkloadKind] = WorkloadKind.DEPLOYMENT

    def get_job_template(self) -> k8s_client.V1JobTemplateSpec:
        spec = self.obj.spec  # type: ignore[attr-defined]
        if spec is None or spec.template is None:
            raise InvalidSourceError(f"Deployment `{self.name}` has no pod template")
        pod_template = copy.deepcopy(spec.template)
        return k8s_client.V1JobTemplateSpec(
            metadata=copy.deepcopy(pod_template.metadata),
            spec=k8s_client.V1JobSpec(template=pod_template),
        )


@attrs.frozen
class _KindHandler:
    template_cls: Type[WorkloadTemplate]
    get_one: Callable[[Orchestrator, str, str], object]
    get_all: Callable[[Orchestrator, str], List]


KIND_HANDLERS: Dict[WorkloadKind, _KindHandler] = {
    WorkloadKind.CRONJOB: _KindHandler(
        template_cls=CronJobTemplate,
        get_one=lambda orchestrator, name, namespace: orchestrator.get_cronjob(name, namespace),
        get_all=lambda orchestrator, namespace: orchestrator.list_cronjobs(namespace),
    ),
    WorkloadKind.DEPLOYMENT: _KindHandler(
        template_cls=DeploymentTemplate,
        get_one=lambda orchestrator, name, namespace: orchestrator.get_deployment(name, namespace),
        get_all=lambda orchestrator, namespace: orchestrator.list_deployments(namespace),
    ),
}


def list_source_names(orchestrator: Orchestrator, kind: WorkloadKind, namespace: str) -> List[str]:
    items = KIND_HANDLERS[kind].get_all(orchestrator, namespace)
    return sorted(item.metadata.name for item in items if item.metadata and item.metadata.name)


def resolve_source(
    orchestrator: Orchestrator,
    kind: WorkloadKind,
    namespace: str,
    name: Optional[str] = None,
    prompter: Optional[Prompter] = None,
) -> WorkloadTemplate:
    """
    Fetch the source workload ``name`` of the given ``kind``.

    Without a name, the candidates in ``namespace`` are listed: a single candidate
    is selected without asking, several are offered through ``prompter``.
    """
    handler = KIND_HANDLERS[kind]
    if name is None:
        candidates = list_source_names(orchestrator, kind, namespace)
        if not candidates:
            raise EmptySourceListError(kind.value, namespace)
        if len(candidates) == 1:
            name = candidates[0]
            logger.info(f"Using the only {kind.value} in `{namespace}`: `{name}`")
        else:
            prompter = prompter or NonInteractivePrompter()
            idx = prompter.select_one(
                f"Select the {kind.value} to use as the base of the job", candidates
            )
            name = candidates[idx]

    obj = handler.get_one(orchestrator, name, namespace)
    logger.debug(f"Fetched {kind.value} `{name}` from `{namespace}`")
    return handler.template_cls(name=name, namespace=namespace, obj=obj)
