"""Reporting of rejected operations on the command line."""

import logging
from typing import NoReturn

import click

from passbook.domain.errors import BalanceConflictError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: ValueError) -> NoReturn:
    """Print a rejected operation to stderr and exit with status 1.

    ``error`` is a DomainError or a ValueError raised while parsing input.
    A balance conflict means another write reached the account first; nothing
    was saved and the command can be run again.
    """
    logger.debug("Command rejected: %s", error, exc_info=error)
    message = f"Error: {error}"
    if isinstance(error, BalanceConflictError):
        message += " Nothing was saved; run the command again."
    click.echo(message, err=True)
    ctx.exit(1)
