"""Dispatch one-shot Kubernetes jobs from cronjob and deployment specs."""
from . import log, constants, exceptions
from .log import get_logger

from .dispatch import DispatchRequest, DispatchResult, dispatch
from .source import WorkloadKind
