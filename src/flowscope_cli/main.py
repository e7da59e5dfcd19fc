"""
flowscope CLI - main entry point.
"""
from typing import Optional

import click

from utils.logging_config import setup_logger, verbosity_to_level

from .ads import ads
from .metrics import metrics
from .tiara import tiara


@click.group()
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write logs to this file")
def cli(verbose: int, log_file: Optional[str]):
    """flowscope - ad tracking and traffic metrics for captured HTTP flows."""
    setup_logger(level=verbosity_to_level(verbose), log_file=log_file)


cli.add_command(ads)
cli.add_command(tiara)
cli.add_command(metrics)

if __name__ == "__main__":
    cli()
