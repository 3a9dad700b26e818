# pylint: disable=invalid-name
"""Common testing utilities."""
from __future__ import annotations

import copy
import json
from typing import Optional, Sequence

from kubernetes.client.exceptions import ApiException

from kubernetes import client as k8s_client
from job_dispatch.exceptions import SourceNotFoundError, UserCancelledError


def make_container(
    name: str = "example-container",
    env: Optional[dict] = None,
    env_vars: Optional[list] = None,
    resources: Optional[k8s_client.V1ResourceRequirements] = None,
) -> k8s_client.V1Container:
    if env_vars is None and env is not None:
        env_vars = [k8s_client.V1EnvVar(name=k, value=v) for k, v in env.items()]
    return k8s_client.V1Container(
        name=name,
        image="alpine:3.17",
        command=["/bin/sh", "-c", "echo Hello, World! && echo $MY_ENV_VAR"],
        env=env_vars,
        resources=resources,
    )


def make_cronjob(
    name: str = "example-cronjob",
    namespace: str = "default",
    containers: Optional[Sequence[k8s_client.V1Container]] = None,
    restart_policy: Optional[str] = "OnFailure",
    labels: Optional[dict] = None,
    backoff_limit: Optional[int] = None,
) -> k8s_client.V1CronJob:
    containers = containers or [make_container(env={"MY_ENV_VAR": "foo"})]
    pod_spec = k8s_client.V1PodSpec(containers=list(containers), restart_policy=restart_policy)
    job_spec = k8s_client.V1JobSpec(
        template=k8s_client.V1PodTemplateSpec(spec=pod_spec),
        backoff_limit=backoff_limit,
    )
    return k8s_client.V1CronJob(
        api_version="batch/v1",
        kind="CronJob",
        metadata=k8s_client.V1ObjectMeta(name=name, namespace=namespace),
        spec=k8s_client.V1CronJobSpec(
            schedule="0 */6 * * *",
            job_template=k8s_client.V1JobTemplateSpec(
                metadata=k8s_client.V1ObjectMeta(labels=labels),
                spec=job_spec,
            ),
        ),
    )


def make_deployment(
    name: str = "example-deployment",
    namespace: str = "default",
    containers: Optional[Sequence[k8s_client.V1Container]] = None,
) -> k8s_client.V1Deployment:
    containers = containers or [make_container(env={"MY_ENV_VAR": "foo"})]
    labels = {"app": name}
    return k8s_client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=k8s_client.V1ObjectMeta(name=name, namespace=namespace),
        spec=k8s_client.V1DeploymentSpec(
            replicas=2,
            selector=k8s_client.V1LabelSelector(match_labels=labels),
            template=k8s_client.V1PodTemplateSpec(
                metadata=k8s_client.V1ObjectMeta(labels=labels),
                spec=k8s_client.V1PodSpec(containers=list(containers), restart_policy="Always"),
            ),
        ),
    )


def make_api_exception(status: int, reason: str, message: str) -> ApiException:
    exc = ApiException(status=status, reason=reason)
    exc.body = json.dumps({"kind": "Status", "status": "Failure", "message": message})
    return exc


class FakeOrchestrator:
    """In-memory stand-in for :class:`job_dispatch.orchestrator.KubeOrchestrator`."""

    def __init__(self, cronjobs=(), deployments=(), jobs=(), create_error=None):
        self.cronjobs = list(cronjobs)
        self.deployments = list(deployments)
        self.jobs = list(jobs)
        self.create_error = create_error
        self.created: list[k8s_client.V1Job] = []
        self.calls: list[str] = []

    @staticmethod
    def _find(objs, kind, name, namespace):
        for obj in objs:
            if obj.metadata.name == name and obj.metadata.namespace == namespace:
                return obj
        raise SourceNotFoundError(kind, name, namespace)

    def get_cronjob(self, name, namespace):
        self.calls.append("get_cronjob")
        return self._find(self.cronjobs, "CronJob", name, namespace)

    def list_cronjobs(self, namespace):
        self.calls.append("list_cronjobs")
        return [e for e in self.cronjobs if e.metadata.namespace == namespace]

    def get_deployment(self, name, namespace):
        self.calls.append("get_deployment")
        return self._find(self.deployments, "Deployment", name, namespace)

    def list_deployments(self, namespace):
        self.calls.append("list_deployments")
        return [e for e in self.deployments if e.metadata.namespace == namespace]

    def create_job(self, job, namespace):
        self.calls.append("create_job")
        if self.create_error is not None:
            raise self.create_error
        for existing in self.jobs:
            if existing.metadata.name == job.metadata.name:
                raise make_api_exception(
                    409,
                    "Conflict",
                    f'jobs.batch "{job.metadata.name}" already exists',
                )
        created = copy.deepcopy(job)
        created.metadata.namespace = namespace
        created.metadata.uid = f"uid-{len(self.jobs)}"
        self.jobs.append(created)
        self.created.append(created)
        return created


class ScriptedPrompter:
    """Prompter replaying canned answers. Missing lines are answered with ``""``."""

    def __init__(self, selections=(), lines=()):
        self.selections = list(selections)
        self.lines = list(lines)
        self.select_calls: list[tuple[str, list[str]]] = []
        self.read_calls: list[tuple[str, Optional[str]]] = []

    def select_one(self, label, options):
        self.select_calls.append((label, list(options)))
        if not self.selections:
            raise UserCancelledError("No scripted selection left")
        return self.selections.pop(0)

    def read_line(self, label, default=None):
        self.read_calls.append((label, default))
        if not self.lines:
            return ""
        return self.lines.pop(0)
