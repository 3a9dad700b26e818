# pylint: disable=redefined-outer-name
import pytest

from .helpers import FakeOrchestrator, make_cronjob, make_deployment


@pytest.fixture
def cronjob():
    return make_cronjob()


@pytest.fixture
def deployment():
    return make_deployment()


@pytest.fixture
def orchestrator(cronjob, deployment):
    return FakeOrchestrator(cronjobs=[cronjob], deployments=[deployment])
