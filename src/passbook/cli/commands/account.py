"""Account management commands."""

import click
from passbook.cli.account_resolution import resolve_account_or_exit
from passbook.cli.error_handling import handle_domain_error
from passbook.domain.account import AccountService
from passbook.domain.enums import AccountType
from passbook.domain.transaction import TransactionService
from passbook.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.CURRENT.value,
    show_default=True,
    help="Account classification",
)
@click.option("--opening-balance", default="0", help="Opening balance (e.g., 10000 or ₹10,000.00)")
@click.option("--bank", help="Bank name")
@click.option("--number", "account_number", help="Account number (must be unique)")
@click.option("--notes", help="Notes")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    opening_balance: str,
    bank: str | None,
    account_number: str | None,
    notes: str | None,
):
    """Create a new account.

    Examples:
        passbook account create "HDFC Current" --type current --opening-balance 10000
        passbook account create "Petty Cash" --type cash
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid opening balance: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            name=name,
            account_type=account_type.lower(),
            opening_balance=balance,
            bank_name=bank,
            account_number=account_number,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their current balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type.value:8s} | "
            f"Balance: {acc.current_balance:>14,.2f} | Bank: {acc.bank_name or '-'}"
        )


@account_group.command("balance")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_balance(ctx, account: str) -> None:
    """Show the current balance of an account.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    account_obj = service.get_account(account_id)
    pending = service.get_pending_transaction_count(account_id)
    click.echo(f"Account: {account_obj.name} (ID: {account_id})")
    click.echo(f"Opening balance: {account_obj.opening_balance:,.2f}")
    click.echo(f"Current balance: {service.get_current_balance(account_id):,.2f}")
    click.echo(f"Pending transactions: {pending}")


@account_group.command("stats")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_stats(ctx, account: str) -> None:
    """Show completed credit/debit totals for an account."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        stats = TransactionService(db).get_account_stats(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total credits: {stats.total_credits:,.2f}")
    for type_name, amount in sorted(stats.credits_by_type.items()):
        click.echo(f"  {type_name:<22} {amount:>14,.2f}")
    click.echo(f"Total debits:  {stats.total_debits:,.2f}")
    for type_name, amount in sorted(stats.debits_by_type.items()):
        click.echo(f"  {type_name:<22} {amount:>14,.2f}")
    click.echo(f"Completed: {stats.completed_count} | Pending: {stats.pending_count}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--bank", help="New bank name (optional)")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, bank: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.
    NEW_NAME is the new name for the account.

    Examples:
        passbook account rename "HDFC" "HDFC Current"
        passbook account rename 1 "Main Account" --bank "HDFC Bank"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.rename_account(account_id=account_id, name=new_name, bank_name=bank)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account to '{new_name}'")
    if bank is not None:
        click.echo(f"Bank name updated to '{bank}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def delete_account(ctx, account: str) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if no transaction belongs to it or
    transfers money into it.

    Examples:
        passbook account delete "Petty Cash"
        passbook account delete 1
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    # Confirm deletion
    if not click.confirm(f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
