"""
Narrow interface over the Kubernetes API used by the dispatch flow.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from kubernetes.client.exceptions import ApiException

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config  # type: ignore
from job_dispatch import log
from job_dispatch.exceptions import SourceNotFoundError

logger = log.get_logger("job_dispatch")


class Orchestrator(Protocol):
    def get_cronjob(self, name: str, namespace: str) -> k8s_client.V1CronJob:
        ...

    def list_cronjobs(self, namespace: str) -> List[k8s_client.V1CronJob]:
        ...

    def get_deployment(self, name: str, namespace: str) -> k8s_client.V1Deployment:
        ...

    def list_deployments(self, namespace: str) -> List[k8s_client.V1Deployment]:
        ...

    def create_job(self, job: k8s_client.V1Job, namespace: str) -> k8s_client.V1Job:
        ...


def load_configuration(
    context: Optional[str] = None, config_file: Optional[str] = None
) -> k8s_client.ApiClient:
    """
    Build an API client from the kubeconfig, or from the service account when
    running inside a pod without one.
    """
    try:
        return k8s_config.new_client_from_config(config_file=config_file, context=context)
    except k8s_config.ConfigException:
        if context is not None or config_file is not None:
            raise
        logger.debug("No kubeconfig found, using in-cluster configuration.")
        configuration = k8s_client.Configuration()
        k8s_config.load_incluster_config(client_configuration=configuration)
        return k8s_client.ApiClient(configuration=configuration)


class KubeOrchestrator:
    def __init__(self, api_client: Optional[k8s_client.ApiClient] = None):
        self.api_client = api_client or load_configuration()
        self.batch_v1_api = k8s_client.BatchV1Api(self.api_client)
        self.apps_v1_api = k8s_client.AppsV1Api(self.api_client)

    @classmethod
    def from_kubeconfig(
        cls, context: Optional[str] = None, config_file: Optional[str] = None
    ) -> KubeOrchestrator:
        return cls(load_configuration(context=context, config_file=config_file))

    def get_cronjob(self, name: str, namespace: str) -> k8s_client.V1CronJob:
        try:
            return self.batch_v1_api.read_namespaced_cron_job(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                raise SourceNotFoundError("CronJob", name, namespace) from exc
            raise

    def list_cronjobs(self, namespace: str) -> List[k8s_client.V1CronJob]:
        return self.batch_v1_api.list_namespaced_cron_job(namespace=namespace).items

    def get_deployment(self, name: str, namespace: str) -> k8s_client.V1Deployment:
        try:
            return self.apps_v1_api.read_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                raise SourceNotFoundError("Deployment", name, namespace) from exc
            raise

    def list_deployments(self, namespace: str) -> List[k8s_client.V1Deployment]:
        return self.apps_v1_api.list_namespaced_deployment(namespace=namespace).items

    def create_job(self, job: k8s_client.V1Job, namespace: str) -> k8s_client.V1Job:
        logger.info(f"Creating k8s job `{job.metadata.name}`")
        return self.batch_v1_api.create_namespaced_job(namespace=namespace, body=job)
