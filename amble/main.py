"""
amble - Main Entry Point
Find files under a directory that were accessed, created or modified recently.
"""
import logging
import sys

import click
from colorama import Fore, Style, just_fix_windows_console

from . import __version__
from .config import MIN_DAYS, resolve_config
from .errors import ConfigError
from .reporter import Reporter
from .scanner import NO_CRITERIA_MESSAGE, find_matching
from .utils import default_thread_count, format_elapsed, format_window


def setup_logging(verbose: bool, debug: bool):
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(levelname)s %(name)s: %(message)s")


def use_color(stream, no_color: bool) -> bool:
    """Color a stream only when it is a terminal and color was not disabled"""
    return not no_color and stream.isatty()


@click.command()
@click.argument('path', default='.', type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option('--days', '-d',
              help='Report entries newer than this many days (fractions allowed)',
              default=8.0,
              show_default=True,
              type=click.FloatRange(min=MIN_DAYS, min_open=True))
@click.option('--access', '-a', is_flag=True, help='Match on access time')
@click.option('--create', '-c', is_flag=True, help='Match on creation time (where supported)')
@click.option('--modify', '-m', is_flag=True, help='Match on modification time')
@click.option('--skip', '-s', multiple=True,
              help='Directory or file name to skip (exact match, repeatable)')
@click.option('--hidden/--no-hidden', default=False,
              help='Include hidden files (names starting with ".")')
@click.option('--threads', '-t',
              help='Number of scanning threads',
              default=None,
              type=click.IntRange(min=1))
@click.option('--sync', 'sequential', is_flag=True,
              help='Scan on a single thread, reporting in directory order')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.option('--progress', is_flag=True, help='Show a progress counter on stderr')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--debug', is_flag=True, help='Debug logging')
@click.version_option(__version__, prog_name='amble')
def main(path, days, access, create, modify, skip, hidden, threads, sequential,
         no_color, progress, verbose, debug):
    """
    amble - list recently touched files.

    Walks PATH and prints every file whose access, creation or modification
    time falls within the last DAYS days, followed by flags showing which
    timestamps matched (a, c, m). With none of -a/-c/-m, all three are checked.
    """
    just_fix_windows_console()
    setup_logging(verbose, debug)

    if not (access or create or modify):
        access = create = modify = True

    try:
        config = resolve_config(
            path,
            days=days,
            access=access,
            create=create,
            modify=modify,
            ignore_hidden=not hidden,
            skip=skip,
            threads=threads,
        )
    except ConfigError as e:
        raise click.UsageError(e.message)

    if not config.has_criteria:
        click.echo(NO_CRITERIA_MESSAGE)
        return

    if verbose:
        mode = 'sequential' if sequential else f"{config.threads or default_thread_count()} threads"
        click.echo(f"{Fore.CYAN}Scanning {config.root} for entries newer than "
                   f"{format_window(config.days)} ({mode}){Style.RESET_ALL}", err=True)

    reporter = Reporter(
        out=sys.stdout,
        err=sys.stderr,
        color=use_color(sys.stdout, no_color),
        err_color=use_color(sys.stderr, no_color),
        progress=progress,
    )

    try:
        stats = find_matching(config, parallel=not sequential, reporter=reporter)
    except KeyboardInterrupt:
        click.echo(f"\n{Fore.YELLOW}Scan interrupted by user.{Style.RESET_ALL}", err=True)
        sys.exit(130)

    if verbose:
        summary = stats.as_dict()
        click.echo(f"{Fore.GREEN}{summary['matches']} matches, {summary['errors']} errors, "
                   f"{summary['files_evaluated']} files checked, {summary['pruned']} skipped "
                   f"in {format_elapsed(summary['elapsed'])}{Style.RESET_ALL}", err=True)
