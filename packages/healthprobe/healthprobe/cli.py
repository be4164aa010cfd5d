import logging

import click

from healthprobe import lib, __version__
from healthprobe.common import validate_url, url_path_of
from healthprobe.model import HealthCheckConfig
from healthprobe.render import render_status_line


def _validate_url_param(_ctx: click.Context, _param: click.Parameter, value: str) -> str:
    try:
        return validate_url(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.command()
@click.argument("url", callback=_validate_url_param)
@click.option(
    "-d", "--delay", type=click.IntRange(min=0), default=15, show_default=True,
    help="seconds between health check calls"
)
@click.option(
    "-f", "--failure-threshold", type=click.IntRange(min=1), default=3, show_default=True,
    help="consecutive failures before marking the service as down"
)
@click.option(
    "-t", "--timeout", type=click.IntRange(min=1), default=10, show_default=True,
    help="seconds until a health check request times out"
)
@click.option(
    "--color/--no-color", default=None,
    help="force or disable colored output  [default: color if writing to a terminal]"
)
@click.option(
    "-v", "--verbose", is_flag=True, default=False,
    help="log debug information to stderr"
)
@click.version_option(version=__version__)
def app(url: str, delay: int, failure_threshold: int, timeout: int, color: bool | None, verbose: bool):
    """
    Emulate a Kubernetes liveness probe against an HTTP endpoint.

    URL is the absolute URL to send GET requests to. A status line is printed for every request.
    The service is UP after a successful request, UNHEALTHY after a failed request and DOWN once
    the amount of consecutive failed requests reaches the failure threshold.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = HealthCheckConfig(
        url=url,
        delay_secs=delay,
        failure_threshold=failure_threshold,
        timeout_secs=timeout,
    )

    try:
        client = lib.build_client(config.timeout_secs)
    except lib.ClientConstructionError as e:
        click.echo(str(e), err=True)
        raise click.exceptions.Exit(1)

    url_path = url_path_of(config.url)

    with client:
        for result in lib.iter_health_checks(client, config):
            click.echo(render_status_line(result, url_path), color=color)


def run_cli():
    app(max_content_width=120)


if __name__ == "__main__":
    run_cli()
