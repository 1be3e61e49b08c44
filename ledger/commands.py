import click
from flask.cli import with_appcontext

from ledger.services.recurring_transaction import process_recurring_transactions
from ledger.utils.exceptions import StoreUnavailable


@click.command("process-recurring")
@click.option(
    "--as-of",
    "as_of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Run date (YYYY-MM-DD), defaults to today.",
)
@with_appcontext
def process_recurring_command(as_of):
    """Generate due occurrences of recurring transactions."""
    try:
        report = process_recurring_transactions(as_of=as_of.date() if as_of else None)
    except StoreUnavailable as e:
        click.echo(f"Aborted: {e.message}", err=True)
        raise SystemExit(2)

    click.echo(
        f"{len(report.generated)} occurrences generated, "
        f"{len(report.terminated)} series terminated, "
        f"{len(report.failures)} failed"
    )
    for failure in report.failures:
        click.echo(f"  {failure['id']}: {failure['error']}", err=True)

    if report.failures:
        raise SystemExit(1)


def register_commands(app):
    app.cli.add_command(process_recurring_command)
