"""
Helpers for talking back to the Actions runner.

Step outputs are appended to the file named by ``GITHUB_OUTPUT``; failures are
reported with an ``::error::`` workflow command so they show up as annotations.
"""

import uuid
from pathlib import Path

import click
import structlog

log = structlog.get_logger(__name__)


def _format_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    # Multi-line values use the heredoc form
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def set_output(name: str, value: str, output_file: str | None) -> None:
    """Publish a step output.

    Args:
        name: Output name as declared in action.yml
        value: Output value
        output_file: Path from ``GITHUB_OUTPUT``; when None the output is echoed
    """
    log.info("set_output", name=name, value=value)
    if not output_file:
        click.echo(f"{name}={value}")
        return
    with open(Path(output_file), "a", encoding="utf-8") as f:
        f.write(_format_output(name, value))


def set_outputs(outputs: dict[str, str], output_file: str | None) -> None:
    for name, value in outputs.items():
        set_output(name, value, output_file)


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def report_failure(message: str) -> None:
    """Emit an error annotation for the step."""
    click.echo(f"::error::{_escape_data(message)}")
