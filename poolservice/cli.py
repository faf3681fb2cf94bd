# poolservice/cli.py

import click
from flask.cli import with_appcontext

from poolservice import db
from poolservice.estimates.utils import apply_totals
from poolservice.models import Estimate


@click.group('estimates')
def estimates_cli():
    """Estimate maintenance commands."""


@estimates_cli.command('recalc')
@click.option('--dry-run', is_flag=True, help='Report changes without saving.')
@with_appcontext
def recalc(dry_run):
    """Recompute stored totals from each estimate's line items."""
    changed = 0
    for est in Estimate.query.order_by(Estimate.estimate_number):
        before = (est.subtotal_cents, est.tax_amount_cents, est.total_cents)
        totals = apply_totals(est)
        after = (totals['subtotal_cents'], totals['tax_amount_cents'], totals['total_cents'])
        if before != after:
            changed += 1
            click.echo(f'{est.estimate_number}: {before[2]} -> {after[2]}')
    if dry_run:
        db.session.rollback()
    else:
        db.session.commit()
    click.echo(f'{changed} estimate(s) updated' + (' (dry run)' if dry_run else ''))
