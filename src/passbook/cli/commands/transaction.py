"""Transaction management commands."""

import json

import click
from passbook.cli.account_resolution import resolve_account_or_exit, resolve_optional_account_or_exit
from passbook.cli.date_filters import resolve_date_range
from passbook.cli.detail_options import build_details, details_from_mapping, format_details
from passbook.cli.error_handling import handle_domain_error
from passbook.domain.account import AccountService
from passbook.domain.entities import Transaction, TransactionPayload, TransactionUpdate
from passbook.domain.enums import TransactionDirection, TransactionStatus
from passbook.domain.rules import TYPE_RULES, LEGACY_TYPE_ALIASES, normalize_type
from passbook.domain.transaction import TransactionService
from passbook.utils.account_resolver import resolve_account
from passbook.utils.amount_parser import parse_amount, parse_positive_amount
from passbook.utils.date_parser import PERIODS, parse_optional_date

USER_TYPES = [t.value for t, rule in TYPE_RULES.items() if not rule.system_only]
TYPE_CHOICES = USER_TYPES + sorted(LEGACY_TYPE_ALIASES)
STATUS_CHOICES = [s.value for s in TransactionStatus]

DETAIL_HELP = (
    "Detail field as key=value (repeatable), e.g. cheque_number=000123, "
    "issue_date=2024-05-01, transfer_mode=neft"
)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def _format_amount(txn: Transaction) -> str:
    sign = "+" if txn.direction is TransactionDirection.CREDIT else "-"
    return f"{sign}{txn.amount:,.2f}"


@transaction_group.command("add")
@click.option(
    "--type", "transaction_type", required=True, type=click.Choice(TYPE_CHOICES, case_sensitive=False)
)
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Transaction amount (positive, e.g. 2500 or ₹2,500.00)")
@click.option(
    "--status", default="pending", show_default=True, type=click.Choice(STATUS_CHOICES, case_sensitive=False)
)
@click.option("--recipient", "recipient_id", type=int, help="Recipient ID")
@click.option("--to-account", help="Destination account name or ID (account transfers)")
@click.option("--date", "txn_date", help="Transaction date (defaults to today)")
@click.option("--description", help="Transaction description")
@click.option("--detail", "details", multiple=True, help=DETAIL_HELP)
@click.option("--dry-run", is_flag=True, help="Check the transaction without saving it")
@click.pass_context
def add_transaction(
    ctx,
    transaction_type: str,
    account: str,
    amount: str,
    status: str,
    recipient_id: int | None,
    to_account: str | None,
    txn_date: str | None,
    description: str | None,
    details: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Add a transaction.

    With --dry-run every check runs (including the funds check) but nothing
    is saved.

    Examples:
        passbook transaction add --type cash_deposit --account HDFC --amount 2000 \\
            --status deposited --detail deposit_date=today
        passbook transaction add --type cheque_given --account HDFC --amount 3000 \\
            --recipient 4 --detail cheque_number=CHQ-001 --detail due_date=2024-06-01
        passbook transaction add --type account_transfer --account HDFC --to-account ICICI \\
            --amount 500 --status transferred --detail transfer_date=today
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    service = TransactionService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    to_account_id = resolve_optional_account_or_exit(ctx, account_service, to_account)

    try:
        canonical_type = normalize_type(transaction_type)
        payload = TransactionPayload(
            transaction_type=canonical_type,
            amount=parse_positive_amount(amount),
            account_id=account_id,
            status=status,
            recipient_id=recipient_id,
            to_account_id=to_account_id,
            description=description,
            transaction_date=parse_optional_date(txn_date),
            details=build_details(canonical_type, details),
        )
        if dry_run:
            checked = service.validate_transaction(payload)
        else:
            txn = service.create_transaction(payload)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if dry_run:
        click.echo(
            f"Transaction data is valid: {checked.transaction_type.value} "
            f"{checked.amount:,.2f} ({checked.status.value}). Nothing was saved."
        )
        return

    click.echo(f"Created transaction {txn.id}: {txn.transaction_type.value} {_format_amount(txn)} ({txn.status.value})")
    account_obj = account_service.get_account(account_id)
    click.echo(f"Balance of '{account_obj.name}': {account_obj.current_balance:,.2f}")


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int) -> None:
    """Show a transaction with its detail record."""
    db = ctx.obj["db"]
    try:
        txn = TransactionService(db).get_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    click.echo(f"Transaction ID: {txn.id}")
    click.echo(f"  Type: {txn.transaction_type.value} ({txn.direction.value})")
    click.echo(f"  Status: {txn.status.value}")
    click.echo(f"  Date: {txn.transaction_date}")
    click.echo(f"  Amount: {_format_amount(txn)}")
    click.echo(f"  Account: {accounts.get(txn.account_id, 'Unknown')} (ID: {txn.account_id})")
    if txn.to_account_id is not None:
        click.echo(f"  To account: {accounts.get(txn.to_account_id, 'Unknown')} (ID: {txn.to_account_id})")
    if txn.recipient_id is not None:
        click.echo(f"  Recipient ID: {txn.recipient_id}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")
    if txn.parent_transaction_id is not None:
        click.echo(f"  Created automatically for transaction {txn.parent_transaction_id}")
    for line in format_details(txn.details):
        click.echo(f"  {line}")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--type", "transaction_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.option("--status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
@click.option("--direction", type=click.Choice([d.value for d in TransactionDirection], case_sensitive=False))
@click.option("--all", "include_hidden", is_flag=True, help="Include pending incoming transfers")
@click.option(
    "--period",
    type=click.Choice(list(PERIODS), case_sensitive=False),
    help="Named period; fy is the April to March financial year",
)
@click.option("--start-date", help="First date to include (e.g. 2024-04-01, 01/04/2024, 'last month')")
@click.option("--end-date", help="Last date to include")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    transaction_type: str | None,
    status: str | None,
    direction: str | None,
    include_hidden: bool,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
):
    """View transactions with optional filters.

    Account can be specified by name or ID. Incoming account transfers that
    are still pending are hidden unless --all is given.
    """
    start, end = resolve_date_range(period, start_date, end_date)

    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    account_id = resolve_optional_account_or_exit(ctx, account_service, account)

    try:
        transactions = service.list_transactions(
            account_id=account_id,
            transaction_type=transaction_type,
            direction=TransactionDirection(direction.lower()) if direction else None,
            status=TransactionStatus(status.lower()) if status else None,
            start_date=start,
            end_date=end,
            include_hidden=include_hidden,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_table(transactions, account_service)


def _print_table(transactions: list[Transaction], account_service: AccountService) -> None:
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<20} {'Status':<12} {'Amount':>14}  {'Account':<20} {'Description':<20}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {str(txn.transaction_date):<12} {txn.transaction_type.value:<20} "
            f"{txn.status.value:<12} {_format_amount(txn):>14}  "
            f"{accounts.get(txn.account_id, 'Unknown')[:20]:<20} {(txn.description or '')[:20]:<20}"
        )


@transaction_group.command("status")
@click.argument("transaction_id", type=int)
@click.argument("status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
@click.pass_context
def set_status(ctx, transaction_id: int, status: str) -> None:
    """Move a transaction to a new status.

    Examples:
        passbook transaction status 12 cleared
    """
    db = ctx.obj["db"]
    try:
        txn = TransactionService(db).update_status(transaction_id, status)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} is now {txn.status.value}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--amount", help="New amount")
@click.option("--status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
@click.option("--recipient", "recipient_id", type=int, help="New recipient ID")
@click.option("--clear-recipient", is_flag=True, help="Remove the recipient")
@click.option("--to-account", help="New destination account (account transfers)")
@click.option("--date", "txn_date", help="New transaction date")
@click.option("--description", help="New description")
@click.option("--detail", "details", multiple=True, help=DETAIL_HELP)
@click.option(
    "--clear-detail", "clear_details", multiple=True, help="Detail field to remove (repeatable), e.g. settlement_date"
)
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    amount: str | None,
    status: str | None,
    recipient_id: int | None,
    clear_recipient: bool,
    to_account: str | None,
    txn_date: str | None,
    description: str | None,
    details: tuple[str, ...],
    clear_details: tuple[str, ...],
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Detail fields given with
    --detail are merged into the stored detail record; fields named with
    --clear-detail are removed from it.

    Examples:
        passbook transaction update 7 --amount 3500
        passbook transaction update 7 --status cleared --detail cleared_date=today
        passbook transaction update 9 --status pending --clear-detail settlement_date
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    to_account_id = resolve_optional_account_or_exit(ctx, AccountService(db), to_account)

    try:
        existing = service.get_transaction(transaction_id)
        changes = TransactionUpdate(
            amount=parse_positive_amount(amount) if amount is not None else None,
            status=status,
            recipient_id=recipient_id,
            to_account_id=to_account_id,
            description=description,
            transaction_date=parse_optional_date(txn_date),
            details=build_details(existing.transaction_type, details, partial=True),
            clear_recipient=clear_recipient,
            clear_detail_fields=frozenset(name.strip().lower().replace("-", "_") for name in clear_details),
        )
        service.update_transaction(transaction_id, changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction and undo its effect on the balance.

    Examples:
        passbook transaction delete 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    try:
        transaction_service.get_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    # Confirm deletion
    if not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("search")
@click.argument("text", required=False)
@click.option("--min-amount", help="Smallest amount to include")
@click.option("--max-amount", help="Largest amount to include")
@click.option("--account", help="Account name or ID")
@click.option("--all", "include_hidden", is_flag=True, help="Include pending incoming transfers")
@click.pass_context
def search_transactions(
    ctx,
    text: str | None,
    min_amount: str | None,
    max_amount: str | None,
    account: str | None,
    include_hidden: bool,
) -> None:
    """Search transactions by description, account or recipient name.

    Examples:
        passbook transaction search acme
        passbook transaction search --min-amount 10000 --max-amount 50000
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    account_id = resolve_optional_account_or_exit(ctx, account_service, account)

    try:
        transactions = TransactionService(db).search_transactions(
            text=text,
            min_amount=parse_amount(min_amount) if min_amount is not None else None,
            max_amount=parse_amount(max_amount) if max_amount is not None else None,
            account_id=account_id,
            include_hidden=include_hidden,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_table(transactions, account_service)


@transaction_group.command("summary")
@click.pass_context
def show_summary(ctx) -> None:
    """Show totals across all accounts."""
    summary = TransactionService(ctx.obj["db"]).get_summary()

    click.echo(f"Transactions: {summary.total_transactions}")
    click.echo(f"Completed: {summary.completed_count} | Pending: {summary.pending_count}")
    click.echo(f"Total credits: {summary.total_credits:,.2f}")
    click.echo(f"Total debits:  {summary.total_debits:,.2f}")
    click.echo(f"Net:           {summary.net_amount:,.2f}")
    if summary.by_type:
        click.echo("By type:")
        for type_name, totals in sorted(summary.by_type.items()):
            click.echo(f"  {type_name:<22} {totals.count:>5}  {totals.amount:>14,.2f}")


def _payload_from_item(account_service: AccountService, item: dict) -> TransactionPayload:
    if not isinstance(item, dict):
        raise ValueError("Expected an object")
    missing = [key for key in ("type", "account", "amount") if item.get(key) in (None, "")]
    if missing:
        raise ValueError(f"Missing field(s): {', '.join(missing)}")

    transaction_type = normalize_type(item["type"])
    to_account = item.get("to_account")
    txn_date = item.get("date")
    details = item.get("details") or {}
    if not isinstance(details, dict):
        raise ValueError("details must be an object")
    return TransactionPayload(
        transaction_type=transaction_type,
        amount=parse_positive_amount(str(item["amount"])),
        account_id=resolve_account(account_service, item["account"]),
        status=item.get("status") or TransactionStatus.PENDING,
        recipient_id=item.get("recipient_id"),
        to_account_id=resolve_account(account_service, to_account) if to_account is not None else None,
        description=item.get("description"),
        transaction_date=parse_optional_date(str(txn_date)) if txn_date is not None else None,
        details=details_from_mapping(transaction_type, details),
    )


@transaction_group.command("bulk")
@click.argument("source", type=click.File("r"))
@click.pass_context
def bulk_create(ctx, source) -> None:
    """Create transactions from a JSON file.

    SOURCE holds a list of objects with the keys type, account, amount and
    optionally status, recipient_id, to_account, date, description and
    details (an object of detail fields). Use - to read standard input.
    Every item is parsed before anything is saved; each item is then saved
    on its own, so one rejected item does not stop the rest.

    Example item:
        {"type": "cash_deposit", "account": "HDFC Current", "amount": "2000",
         "status": "deposited", "details": {"deposit_date": "2024-06-01"}}
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)

    try:
        items = json.load(source)
    except ValueError as e:
        handle_domain_error(ctx, ValueError(f"Invalid JSON in {source.name}: {e}"))
    if not isinstance(items, list):
        handle_domain_error(ctx, ValueError("Expected a JSON list of transactions"))

    payloads = []
    for index, item in enumerate(items):
        try:
            payloads.append(_payload_from_item(account_service, item))
        except ValueError as e:
            handle_domain_error(ctx, ValueError(f"Item {index}: {e}"))

    result = TransactionService(db).create_transactions(payloads)

    click.echo(f"Created {len(result.created)} transaction(s), {len(result.failed)} rejected")
    for failure in result.failed:
        click.echo(f"  Item {failure.index}: {failure.error}", err=True)
    if result.failed:
        ctx.exit(1)


@transaction_group.command("statuses")
@click.argument("transaction_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.pass_context
def list_statuses(ctx, transaction_type: str) -> None:
    """List the statuses a transaction type can take."""
    db = ctx.obj["db"]
    statuses = TransactionService(db).get_valid_statuses_for_type(transaction_type)
    canonical = normalize_type(transaction_type)
    click.echo(f"Statuses for {canonical.value}:")
    for status in statuses:
        marker = " (completes)" if status is TYPE_RULES[canonical].completion_status else ""
        click.echo(f"  {status.value}{marker}")


@transaction_group.command("reconcile")
@click.pass_context
def reconcile(ctx) -> None:
    """Repair the receiving side of account transfers."""
    db = ctx.obj["db"]
    try:
        repaired = TransactionService(db).reconcile_transfers()
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reconciled account transfers: {repaired} receiver(s) repaired")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
