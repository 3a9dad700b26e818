"""
Environment variable overrides for derived jobs.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from kubernetes import client as k8s_client  # type: ignore
from job_dispatch import log
from job_dispatch.common.user_input import Prompter
from job_dispatch.exceptions import InvalidOverrideError

logger = log.get_logger("job_dispatch")

OVERRIDE_SEPARATOR = "="
ENV_NAME_RE = re.compile(r"^[-._a-zA-Z][-._a-zA-Z0-9]*$")


def parse_override(text: str) -> Tuple[str, str]:
    """
    Parse a ``NAME=value`` assignment. Everything after the first ``=`` is the
    value, verbatim.
    """
    name, sep, value = text.partition(OVERRIDE_SEPARATOR)
    if not sep:
        raise InvalidOverrideError(
            f"Environment override `{text}` should respect the format: NAME=VALUE"
        )
    if not ENV_NAME_RE.match(name):
        raise InvalidOverrideError(f"`{name}` is not a valid environment variable name")
    return name, value


def parse_overrides(items: Iterable[str]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for item in items:
        name, value = parse_override(item)
        result[name] = value
    return result


def _reference_kind(value_from: k8s_client.V1EnvVarSource) -> str:
    for attr_name, kind in (
        ("config_map_key_ref", "configMapKeyRef"),
        ("secret_key_ref", "secretKeyRef"),
        ("field_ref", "fieldRef"),
        ("resource_field_ref", "resourceFieldRef"),
    ):
        if getattr(value_from, attr_name, None) is not None:
            return kind
    return "valueFrom"


def effective_env(base: Sequence[k8s_client.V1EnvVar]) -> List[k8s_client.V1EnvVar]:
    """
    Collapse names declared more than once in ``base``. The entry stays at the
    position of the first declaration and carries the last declaration, which is
    the one the kubelet uses.
    """
    last: Dict[str, k8s_client.V1EnvVar] = {}
    for env in base:
        if env.name in last:
            logger.warning(
                f"Env `{env.name}` is declared more than once, keeping the last declaration"
            )
        last[env.name] = env
    return list(last.values())


def replaced_references(
    base: Sequence[k8s_client.V1EnvVar], overrides: Mapping[str, str]
) -> List[str]:
    """Names of ``base`` entries whose ``valueFrom`` reference an override discards."""
    return [
        env.name
        for env in effective_env(base)
        if env.value_from is not None and env.name in overrides
    ]


def merge_env(
    base: Sequence[k8s_client.V1EnvVar], overrides: Mapping[str, str]
) -> List[k8s_client.V1EnvVar]:
    """
    Apply literal ``overrides`` to ``base``.

    Entries keep their original order; an overridden entry keeps its position and
    becomes a literal, even if it was a ``valueFrom`` reference. Overrides for names
    absent from ``base`` are appended in the order they were supplied. Neither input
    is modified.
    """
    result: List[k8s_client.V1EnvVar] = []
    seen = set()
    for env in effective_env(base):
        seen.add(env.name)

        if env.name not in overrides:
            result.append(
                k8s_client.V1EnvVar(name=env.name, value=env.value, value_from=env.value_from)
            )
            continue

        if env.value_from is not None:
            logger.warning(
                f"Env `{env.name}` was set from a {_reference_kind(env.value_from)}; "
                "the reference is discarded in favor of the literal override."
            )
        result.append(k8s_client.V1EnvVar(name=env.name, value=overrides[env.name]))

    for name, value in overrides.items():
        if name not in seen:
            result.append(k8s_client.V1EnvVar(name=name, value=value))
    return result


def prompt_overrides(
    prompter: Prompter,
    base: Sequence[k8s_client.V1EnvVar],
    overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Ask for values interactively and return ``overrides`` extended with the answers.

    Declared literal entries are offered with their current value as default. Then
    additional names are asked for until an empty name is entered. An empty answer
    (or the unchanged default) never produces an override: to set an empty string,
    pass ``NAME=`` on the command line.
    """
    result = dict(overrides or {})
    for env in effective_env(base):
        if env.value_from is not None or env.name in result:
            continue
        current = env.value or ""
        answer = prompter.read_line(f"Env for {env.name}", default=current)
        if answer and answer != current:
            result[env.name] = answer

    while True:
        name = prompter.read_line("Additional env name (empty to finish)")
        if not name:
            break
        if not ENV_NAME_RE.match(name):
            logger.warning(f"`{name}` is not a valid environment variable name, skipping")
            continue
        value = prompter.read_line(f"Value for {name}")
        if value:
            result[name] = value
    return result
