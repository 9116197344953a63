from pathlib import Path

import click

from tcx_toolkit.clients import GarminClient, MapMyWalkClient
from tcx_toolkit.config import Config
from tcx_toolkit.exceptions import (
    AuthError,
    ExportError,
    InputError,
    ListingError,
    ServiceConnectionError,
)
from tcx_toolkit.logger import setup_logging
from tcx_toolkit.models import Credentials, DateSelector, ProxyConfig
from tcx_toolkit.services.download import DownloadService, ExportFailurePolicy


_DOWNLOAD_OPTIONS = [
    click.option('-u', '--user', envvar='TCX_USER', help='Account user name or email'),
    click.option('-p', '--password', envvar='TCX_PASSWORD', help='Account password'),
    click.option('-P', '--proxy', envvar='TCX_PROXY', help='HTTP proxy as host:port'),
    click.option('-d', '--dir', 'save_dir', type=click.Path(file_okay=False),
                 help='Directory to save TCX files'),
    click.option('--on-export-error', 'on_export_error',
                 type=click.Choice([p.value for p in ExportFailurePolicy], case_sensitive=False),
                 default=Config.EXPORT_FAILURE_POLICY, show_default=True,
                 help='Stop the run or skip the activity when an export cannot be read'),
    click.option('-v', '--verbose', is_flag=True, help='Log progress to stderr'),
    click.argument('yyyymmdd', metavar='YYYYMM[DD]', required=False),
]


class DownloadCommand(click.Command):
    """Reports usage mistakes on stdout with exit status 1, like other input errors."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            click.echo(f"Error: {e.format_message()}")
            ctx.exit(1)


def download_options(func):
    """Options shared by every platform command."""
    for option in reversed(_DOWNLOAD_OPTIONS):
        func = option(func)
    return click.pass_context(func)


def _missing_arguments(user, password, yyyymmdd) -> list:
    errors = []
    if not user:
        errors.append("Error: '-u, --user' missing value.")
    if not password:
        errors.append("Error: '-p, --password' missing value.")
    if not yyyymmdd:
        errors.append("Error: 'yyyymm[dd]' missing.")
    return errors


def run_download(ctx, client_cls, user, password, proxy, save_dir, on_export_error, verbose, yyyymmdd):
    """Validate arguments, then download one period of TCX files."""
    setup_logging("DEBUG" if verbose else None)

    errors = _missing_arguments(user, password, yyyymmdd)
    if errors:
        click.echo("\n".join(errors))
        ctx.exit(1)

    try:
        selector = DateSelector.parse(yyyymmdd)
        proxy_config = ProxyConfig.parse(proxy) if proxy else None
        policy = ExportFailurePolicy.parse(on_export_error)
    except InputError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    save_directory = Path(save_dir or client_cls.default_dir)
    save_directory.mkdir(parents=True, exist_ok=True)

    client = client_cls(proxy=proxy_config)
    service = DownloadService(client, policy=policy, report=click.echo)
    try:
        service.download(Credentials(user, password), selector, save_directory)
    except ServiceConnectionError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)
    except AuthError as e:
        click.echo(f"Error: {client.service} login failed.")
        if e.reason and verbose:
            click.echo(f"  {e.reason}")
        ctx.exit(1)
    except (ListingError, ExportError) as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)


@click.group()
def cli():
    """Download TCX files from Garmin Connect and MapMyWalk."""
    pass


@cli.command(cls=DownloadCommand)
@download_options
def garmin(ctx, **kwargs):
    """Download TCX files of a month or day from connect.garmin.com."""
    run_download(ctx, GarminClient, **kwargs)


@cli.command(cls=DownloadCommand)
@download_options
def mapmywalk(ctx, **kwargs):
    """Download TCX files of a month or day from mapmywalk.com."""
    run_download(ctx, MapMyWalkClient, **kwargs)


def garmin_main():
    """Entry point for tcx-garmin."""
    garmin(prog_name='tcx-garmin')


def mapmywalk_main():
    """Entry point for tcx-mapmywalk."""
    mapmywalk(prog_name='tcx-mapmywalk')


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
