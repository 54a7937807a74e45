"""CLI entry point for asana-sync."""

import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any

import click
import structlog

from asana_sync.config.inputs import ActionInputs
from asana_sync.config.settings import RunnerSettings
from asana_sync.engine.dispatcher import Dispatcher
from asana_sync.engine.extractor import ReferenceExtractor
from asana_sync.engine.orchestrator import ActionOrchestrator
from asana_sync.enums import ActionName
from asana_sync.exceptions import ConfigurationError
from asana_sync.models.domain import ActionResult, event_context_from_payload
from asana_sync.providers.factory import create_source_control, create_work_tracker
from asana_sync.utils.logging_config import configure_logging
from asana_sync.utils.workflow_commands import report_failure, set_outputs

log = structlog.get_logger(__name__)


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: ASANA_SYNC_LOG_LEVEL or INFO)")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """asana-sync: keep Asana tasks in step with GitHub activity."""
    settings = RunnerSettings()
    configure_logging(log_level or settings.log_level)
    ctx.obj = {"settings": settings}


@cli.command()
@click.option(
    "--inputs-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML file with action inputs (environment INPUT_* values take precedence)",
)
@click.option("--event-path", default=None, help="Event payload JSON (default: GITHUB_EVENT_PATH)")
@click.pass_context
def run(ctx: click.Context, inputs_file: str | None, event_path: str | None) -> None:
    """Run the action selected by the ``action`` input."""
    settings: RunnerSettings = ctx.obj["settings"]
    if event_path:
        settings = settings.model_copy(update={"github_event_path": event_path})

    try:
        inputs = ActionInputs.from_environ()
        if inputs_file:
            inputs = ActionInputs.from_yaml(inputs_file).merged(inputs)
        payload = settings.load_event_payload()
        result = asyncio.run(execute_action(settings, inputs, payload))
    except ConfigurationError as e:
        report_failure(e.message)
        log.debug("run_configuration_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        report_failure(f"Unexpected error: {e}")
        log.error("run_unexpected", exc_info=True)
        sys.exit(1)

    set_outputs(result.outputs, settings.github_output)
    if result.error:
        report_failure(result.error)
        sys.exit(1)


@cli.command()
@click.argument("text", required=False)
@click.option("--trigger-phrase", default="", help="Phrase that must precede each task link")
@click.option("--host", default=None, help="Host of task links (default: app.asana.com)")
@click.pass_context
def extract(ctx: click.Context, text: str | None, trigger_phrase: str, host: str | None) -> None:
    """Print the task references found in TEXT (or stdin) as JSON lines."""
    settings: RunnerSettings = ctx.obj["settings"]
    if text is None:
        text = sys.stdin.read()

    extractor = ReferenceExtractor(host or settings.reference_host)
    for reference in extractor.extract(text, trigger_phrase):
        click.echo(json.dumps(asdict(reference)))


async def execute_action(
    settings: RunnerSettings,
    inputs: ActionInputs,
    payload: dict[str, Any],
) -> ActionResult:
    """Resolve the action, build only the clients it needs and run it to completion.

    Raises:
        ConfigurationError: Unknown action or missing required input
    """
    name = inputs.require("action")
    action = ActionName.parse(name)
    log.info("calling", action=str(action), event_name=settings.github_event_name)
    context = event_context_from_payload(payload)

    work = create_work_tracker(inputs, settings) if action.needs_work_tracker else None
    scm = (
        create_source_control(inputs, settings, token_required=action is ActionName.GET_LATEST_RELEASE)
        if action.needs_source_control
        else None
    )

    if work is not None:
        await work.connect()
    if scm is not None:
        await scm.connect()

    try:
        orchestrator = ActionOrchestrator(
            work=work,
            scm=scm,
            extractor=ReferenceExtractor(settings.reference_host),
        )
        return await Dispatcher(orchestrator).dispatch_name(name, inputs, context)
    finally:
        if work is not None:
            await work.disconnect()
        if scm is not None:
            await scm.disconnect()


if __name__ == "__main__":
    cli()
