"""Recipient management commands."""

import click
from passbook.cli.account_resolution import resolve_account_or_exit, resolve_optional_account_or_exit
from passbook.cli.error_handling import handle_domain_error
from passbook.domain.account import AccountService
from passbook.domain.enums import RESERVED_RECIPIENT_TYPES, RecipientType
from passbook.domain.errors import NotFoundError
from passbook.domain.recipient import RecipientService

USER_RECIPIENT_TYPES = [t.value for t in RecipientType if t not in RESERVED_RECIPIENT_TYPES]


@click.group()
def recipient_group():
    """Manage recipients (payees and payers)."""
    pass


@recipient_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--account", required=True, help="Account name or ID the recipient belongs to")
@click.option(
    "--type",
    "recipient_type",
    type=click.Choice(USER_RECIPIENT_TYPES, case_sensitive=False),
    default=RecipientType.CUSTOMER.value,
    show_default=True,
)
@click.option("--bank-account", "bank_account_no", help="Recipient bank account number")
@click.option("--ifsc", "ifsc_code", help="IFSC code")
@click.option("--contact", "contact_person", help="Contact person")
@click.option("--phone", help="Phone number")
@click.option("--email", help="Email address")
@click.option("--address", help="Postal address")
@click.option("--gst", "gst_number", help="GST registration number")
@click.option("--notes", help="Notes")
@click.pass_context
def create_recipient(ctx, name: str, account: str, recipient_type: str, **contact: str | None):
    """Create a recipient for an account.

    Examples:
        passbook recipient create "Acme Traders" --account "HDFC Current" --type supplier
        passbook recipient create "Acme Traders" --account HDFC --gst 27AAACA1234A1Z5
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        recipient_id = RecipientService(db).create_recipient(
            name=name,
            recipient_type=recipient_type.lower(),
            account_id=account_id,
            **{k: v for k, v in contact.items() if v is not None},
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created recipient '{name}' (ID: {recipient_id})")


@recipient_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--type", "recipient_type", type=click.Choice(USER_RECIPIENT_TYPES, case_sensitive=False))
@click.option("--transfer-targets", is_flag=True, help="List the other accounts money can be transferred to")
@click.pass_context
def list_recipients(ctx, account: str | None, recipient_type: str | None, transfer_targets: bool):
    """List recipients.

    Without --type, --account is required and every recipient of that account
    is listed. With --type, --account narrows the list to one account.
    """
    db = ctx.obj["db"]
    service = RecipientService(db)
    account_id = resolve_optional_account_or_exit(ctx, AccountService(db), account)

    if account_id is None and (transfer_targets or recipient_type is None):
        raise click.UsageError("--account is required unless --type is given")
    try:
        if transfer_targets:
            recipients = service.list_transfer_targets(account_id)
        elif recipient_type is not None:
            recipients = service.list_recipients_by_type(recipient_type.lower(), account_id)
        else:
            recipients = service.list_recipients_for_account(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not recipients:
        click.echo("No recipients found.")
        return

    click.echo("\nRecipients:")
    click.echo("-" * 60)
    for r in recipients:
        line = f"ID: {r.id:3d} | {r.name:25s} | {r.recipient_type.value}"
        if r.gst_number:
            line += f" | GST {r.gst_number}"
        click.echo(line)


@recipient_group.command("lookup")
@click.option("--gst", "gst_number", required=True, help="GST registration number")
@click.pass_context
def lookup_recipient(ctx, gst_number: str) -> None:
    """Find the recipient registered under a GST number."""
    recipient = RecipientService(ctx.obj["db"]).find_by_gst_number(gst_number)
    if recipient is None:
        handle_domain_error(ctx, NotFoundError(f"No recipient with GST number {gst_number.strip().upper()}"))

    click.echo(f"ID: {recipient.id}")
    click.echo(f"Name: {recipient.name}")
    click.echo(f"Type: {recipient.recipient_type.value}")
    click.echo(f"Account: {recipient.account_id}")
    for label, value in (
        ("GST number", recipient.gst_number),
        ("Address", recipient.address),
        ("Contact", recipient.contact_person),
        ("Phone", recipient.phone),
        ("Email", recipient.email),
    ):
        if value:
            click.echo(f"{label}: {value}")


@recipient_group.command("delete")
@click.argument("recipient_id", type=int)
@click.pass_context
def delete_recipient(ctx, recipient_id: int) -> None:
    """Delete a recipient that no transaction uses."""
    db = ctx.obj["db"]
    try:
        RecipientService(db).delete_recipient(recipient_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted recipient {recipient_id}")


def register_commands(cli):
    """Register recipient commands with main CLI."""
    cli.add_command(recipient_group, name="recipient")
