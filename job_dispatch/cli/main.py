import sys
from typing import Optional

import click
from kubernetes.client.exceptions import ApiException
from kubernetes.config import ConfigException  # type: ignore
from rich.console import Console
from urllib3.exceptions import HTTPError

from job_dispatch import constants, log
from job_dispatch.common.user_input import NonInteractivePrompter, RichPrompter
from job_dispatch.dispatch import DispatchRequest, dispatch
from job_dispatch.env import parse_overrides
from job_dispatch.exceptions import DispatchError
from job_dispatch.orchestrator import KubeOrchestrator
from job_dispatch.source import WorkloadKind

logger = log.get_logger("job_dispatch")

console = Console(stderr=True)

VERBOSITY_MAP = {
    0: "INFO",
    1: "DEBUG",
}


@click.command()
@click.argument("overrides", nargs=-1, type=str, metavar="[NAME=VALUE]...")
@click.option(
    "--name",
    "-n",
    type=str,
    default=None,
    help="Name of the cronjob (or deployment) used as the source of the job. "
    "When omitted, the available ones are listed for selection.",
)
@click.option(
    "--namespace",
    "-N",
    type=str,
    default=constants.DEFAULT_NAMESPACE,
    show_default=True,
    envvar="JOB_DISPATCH_NAMESPACE",
    help="Namespace of the source object.",
)
@click.option(
    "--tag",
    "-t",
    type=str,
    default=constants.DEFAULT_TAG,
    show_default=True,
    envvar="JOB_DISPATCH_TAG",
    help="Suffix of the job name: `<source name>-<tag>`.",
)
@click.option("--dry-run", "-d", is_flag=True, help="Print the job instead of creating it.")
@click.option(
    "--deployment",
    is_flag=True,
    help="Use a deployment spec instead of a cronjob spec as the source of the job.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the dry run result to this path.",
)
@click.option("--backoff-limit", "-b", type=click.IntRange(min=0), default=None)
@click.option(
    "--container",
    "-c",
    type=str,
    default=None,
    help="Container the overrides apply to. Defaults to the first container.",
)
@click.option(
    "--target-namespace",
    type=str,
    default=None,
    help="Namespace of the job. Defaults to the namespace of the source.",
)
@click.option("--cpu-limit", type=str, default=None, help="CPU limit of the container.")
@click.option("--memory-limit", type=str, default=None, help="Memory limit of the container.")
@click.option(
    "--interactive/--no-interactive",
    "-i/-I",
    default=None,
    help="Prompt for the source and env values. Defaults to whether stdin is a terminal.",
)
@click.option("--context", type=str, default=None, help="Kubeconfig context to use.")
@click.option(
    "--kubeconfig", type=click.Path(dir_okay=False), default=None, help="Kubeconfig path."
)
@click.option("-v", "--verbose", count=True, help="Enable debug output.")
def cli(  # pylint: disable=too-many-arguments, too-many-locals
    overrides: tuple[str, ...],
    name: Optional[str],
    namespace: str,
    tag: str,
    dry_run: bool,
    deployment: bool,
    output: Optional[str],
    backoff_limit: Optional[int],
    container: Optional[str],
    target_namespace: Optional[str],
    cpu_limit: Optional[str],
    memory_limit: Optional[str],
    interactive: Optional[bool],
    context: Optional[str],
    kubeconfig: Optional[str],
    verbose: int,
):
    """
    Dispatch a one-shot job from a cronjob (or deployment) spec.

    Extra NAME=VALUE arguments set literal environment variables on the job.
    """
    log.set_verbosity(VERBOSITY_MAP[min(verbose, 1)])

    if output is not None and not dry_run:
        raise click.UsageError("`--output` can only be used with `--dry-run`.")
    if interactive is None:
        interactive = sys.stdin.isatty()

    resource_limits = {}
    if cpu_limit is not None:
        resource_limits["cpu"] = cpu_limit
    if memory_limit is not None:
        resource_limits["memory"] = memory_limit

    try:
        request = DispatchRequest(
            kind=WorkloadKind.DEPLOYMENT if deployment else WorkloadKind.CRONJOB,
            namespace=namespace,
            name=name,
            tag=tag,
            overrides=parse_overrides(overrides),
            dry_run=dry_run,
            interactive=interactive,
            container=container,
            target_namespace=target_namespace,
            backoff_limit=backoff_limit,
            resource_limits=resource_limits,
        )
        orchestrator = KubeOrchestrator.from_kubeconfig(context=context, config_file=kubeconfig)
        prompter = RichPrompter() if interactive else NonInteractivePrompter()
        result = dispatch(orchestrator, request, prompter)
    except ConfigException as e:
        raise click.ClickException(f"Unable to load the cluster configuration: {e}") from e
    except ApiException as e:
        raise click.ClickException(f"Kubernetes API error ({e.status}): {e.reason}") from e
    except HTTPError as e:
        raise click.ClickException(f"Unable to reach the cluster: {e}") from e
    except DispatchError as e:
        logger.debug("Dispatch failed", exc_info=True)
        raise click.ClickException(str(e)) from e

    if result.rendered is not None:
        if output is not None:
            with open(output, "w", encoding="utf-8") as f:
                f.write(result.rendered)
            console.print(f"Dry run result written to `{output}`", style="green")
        else:
            console.print(
                f"Dry run result for job [bold]{result.job.metadata.name}[/bold]",
                style="magenta",
            )
            click.echo(result.rendered)
        return

    console.print(
        f"✅ Job [bold]{result.job.metadata.name}[/bold] created "
        f"in `{result.job.metadata.namespace}`",
        style="green",
    )
