__all__ = ["label_color", "description_color", "render_status_line"]

import click

from healthprobe.common import format_duration
from healthprobe.lib import HealthLabel, HealthCheckResult, ProbeOutcome

_LABEL_COLORS = {
    HealthLabel.up: "green",
    HealthLabel.unhealthy: "yellow",
    HealthLabel.down: "red",
}

# labels are padded so that the columns after them line up
_LABEL_WIDTH = max(len(label.value) for label in HealthLabel)


def label_color(label: HealthLabel) -> str:
    return _LABEL_COLORS[label]


def description_color(outcome: ProbeOutcome) -> str:
    return "red" if outcome.failed else "green"


def render_status_line(result: HealthCheckResult, url_path: str) -> str:
    """
    Render a health check result into a single status line.
    The line is styled with ANSI escape codes which `click.echo` strips if the output doesn't support them.

    Args:
        result: health check result to render
        url_path: path component of the probed URL

    Returns:
        status line of the form `<LABEL> <timestamp> <path>: <description> (<elapsed>)`
    """
    outcome = result.outcome
    label = click.style(result.label.value.ljust(_LABEL_WIDTH), fg=label_color(result.label))
    description = click.style(outcome.description, fg=description_color(outcome))

    return f"{label} {outcome.timestamp} {url_path}: {description} ({format_duration(outcome.elapsed)})"
