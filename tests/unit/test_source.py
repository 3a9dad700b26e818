# pylint: disable=redefined-outer-name
import pytest

from job_dispatch.exceptions import (
    EmptySourceListError,
    InvalidSourceError,
    SourceNotFoundError,
    UserCancelledError,
)
from job_dispatch.source import (
    CronJobTemplate,
    DeploymentTemplate,
    WorkloadKind,
    list_source_names,
    resolve_source,
)

from .helpers import FakeOrchestrator, ScriptedPrompter, make_cronjob, make_deployment


def test_resolve_by_name(orchestrator):
    source = resolve_source(orchestrator, WorkloadKind.CRONJOB, "default", "example-cronjob")
    assert isinstance(source, CronJobTemplate)
    assert source.kind is WorkloadKind.CRONJOB
    assert source.name == "example-cronjob"
    assert source.namespace == "default"
    assert orchestrator.calls == ["get_cronjob"]


def test_resolve_deployment_by_name(orchestrator):
    source = resolve_source(
        orchestrator, WorkloadKind.DEPLOYMENT, "default", "example-deployment"
    )
    assert isinstance(source, DeploymentTemplate)
    assert source.kind is WorkloadKind.DEPLOYMENT


def test_resolve_not_found(orchestrator):
    with pytest.raises(SourceNotFoundError) as e:
        resolve_source(orchestrator, WorkloadKind.CRONJOB, "default", "missing")
    assert e.value.kind == "CronJob"
    assert e.value.namespace == "default"
    assert "missing" in str(e.value)


def test_resolve_empty_list_does_not_prompt():
    prompter = ScriptedPrompter(selections=[0])
    with pytest.raises(EmptySourceListError):
        resolve_source(FakeOrchestrator(), WorkloadKind.CRONJOB, "default", prompter=prompter)
    assert not prompter.select_calls


def test_resolve_single_candidate_selected_silently(orchestrator):
    prompter = ScriptedPrompter()
    source = resolve_source(orchestrator, WorkloadKind.CRONJOB, "default", prompter=prompter)
    assert source.name == "example-cronjob"
    assert not prompter.select_calls
    assert orchestrator.calls == ["list_cronjobs", "get_cronjob"]


def test_resolve_prompts_with_sorted_candidates():
    orchestrator = FakeOrchestrator(
        cronjobs=[make_cronjob("zeta"), make_cronjob("alpha"), make_cronjob("other", "ns2")]
        + [make_cronjob("mid")]
    )
    prompter = ScriptedPrompter(selections=[1])

    source = resolve_source(orchestrator, WorkloadKind.CRONJOB, "default", prompter=prompter)

    assert prompter.select_calls[0][1] == ["alpha", "mid", "zeta"]
    assert source.name == "mid"


def test_resolve_selection_cancelled():
    orchestrator = FakeOrchestrator(cronjobs=[make_cronjob("a"), make_cronjob("b")])
    with pytest.raises(UserCancelledError):
        resolve_source(orchestrator, WorkloadKind.CRONJOB, "default", prompter=ScriptedPrompter())


def test_resolve_without_prompter_is_non_interactive():
    orchestrator = FakeOrchestrator(deployments=[make_deployment("a"), make_deployment("b")])
    with pytest.raises(UserCancelledError):
        resolve_source(orchestrator, WorkloadKind.DEPLOYMENT, "default")


def test_list_source_names_filters_namespace():
    orchestrator = FakeOrchestrator(cronjobs=[make_cronjob("b"), make_cronjob("a", "other")])
    assert list_source_names(orchestrator, WorkloadKind.CRONJOB, "default") == ["b"]


def test_cronjob_template_is_a_copy(cronjob):
    source = CronJobTemplate(name="example-cronjob", namespace="default", obj=cronjob)
    template = source.get_job_template()
    template.spec.template.spec.containers[0].env = []
    assert cronjob.spec.job_template.spec.template.spec.containers[0].env[0].value == "foo"
    assert source.get_job_template() == cronjob.spec.job_template


def test_deployment_template(deployment):
    source = DeploymentTemplate(name="example-deployment", namespace="default", obj=deployment)
    template = source.get_job_template()
    assert template.spec.template == deployment.spec.template
    assert template.spec.template is not deployment.spec.template
    assert template.metadata.labels == {"app": "example-deployment"}


def test_source_without_template(cronjob):
    cronjob.spec.job_template.spec = None
    source = CronJobTemplate(name="example-cronjob", namespace="default", obj=cronjob)
    with pytest.raises(InvalidSourceError):
        source.get_job_template()
