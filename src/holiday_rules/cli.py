"""
Command line viewer for holiday definitions.

Loads one or more YAML definition files and either lists the holidays of a date or
renders a month / a full year with holidays in brackets.
"""

from __future__ import annotations

import sys
import logging
from calendar import monthrange
from datetime import date, datetime
from typing import List, Optional, Sequence

import click

from . import HolidayError, Holidays


MONTHS = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

WEEKDAYS = ['Mo', 'Tu', 'We', 'Th', 'Fr', 'Sa', 'Su']


def render_month(hol: Holidays, regions: Sequence[str], year: int, month: int, print_year: bool = False) -> str:
    """
    Render a single month, holidays shown in brackets.

    Args:
        hol: Holidays service holding the loaded rules
        regions: Regions to query
        year: Year to render
        month: Month to render (1-12)
        print_year: Whether to include year in title

    Returns:
        String representation of the month
    """
    lines = []

    title = MONTHS[month - 1]
    if print_year:
        title += f' {year}'
    lines.append(f'{title:^28}'.rstrip())

    # Each day column is 4 characters wide
    lines.append(''.join(f' {day} ' for day in WEEKDAYS).rstrip())

    last_day = monthrange(year, month)[1]
    current_line = ' ' * (4 * date(year, month, 1).weekday())

    for day in range(1, last_day + 1):
        d = date(year, month, day)
        if hol.on(d, *regions):
            current_line += f'[{day:2}]'
        else:
            current_line += f' {day:2} '

        if d.weekday() == 6:
            lines.append(current_line.rstrip())
            current_line = ''

    if current_line:
        lines.append(current_line.rstrip())

    return '\n'.join(lines)


def concat_months(month_strings: List[str], width: int = 28) -> str:
    """Concatenate multiple month strings horizontally."""
    as_lines = [s.splitlines() for s in month_strings]
    max_lines = max(len(lines) for lines in as_lines)

    for lines in as_lines:
        lines.extend([''] * (max_lines - len(lines)))

    rows = []
    for row_parts in zip(*as_lines):
        rows.append('   '.join(part.ljust(width) for part in row_parts))

    return '\n'.join(row.rstrip() for row in rows)


def render_year(hol: Holidays, regions: Sequence[str], year: int) -> str:
    """Render a full year, 3 months per row."""
    month_rows = []
    for row in range(4):
        month_rows.append([render_month(hol, regions, year, row * 3 + col + 1) for col in range(3)])

    output = [f'{year:^88}'.rstrip()]
    output.append('\n\n'.join(concat_months(ms, 28) for ms in month_rows))
    return '\n'.join(output)


def render_list(hol: Holidays, regions: Sequence[str], start: date, end: date) -> str:
    lines = []
    for d, match in hol.between(start, end, *regions):
        lines.append(f'{d.isoformat()}  {match.name}  ({", ".join(match.regions)})')
    return '\n'.join(lines)


@click.command()
@click.argument('year', type=int, required=False)
@click.argument('month', type=click.IntRange(1, 12), required=False)
@click.option('-d', '--definitions', 'definitions', multiple=True, required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='YAML holiday definition file (repeatable)')
@click.option('-r', '--region', 'regions', multiple=True,
              help='Region to query (repeatable, default: any)')
@click.option('--on', 'on_date', type=str, default=None,
              help='List the holidays of a single date (YYYY-MM-DD)')
@click.option('--strict', is_flag=True, default=False,
              help='Fail on rules referencing unknown functions instead of skipping them')
@click.option('-v', '--verbose', count=True, help='Increase log verbosity (-v info, -vv debug)')
def main(year: Optional[int], month: Optional[int], definitions: tuple, regions: tuple,
         on_date: Optional[str], strict: bool, verbose: int):
    """
    Show holidays from YAML definition files.

    Holidays are shown in brackets [like this], followed by their names.

    Examples:

        # Holidays of a single date
        holidays -d us.yaml -r us --on 2026-11-26

        # November 2026
        holidays -d us.yaml -r us 2026 11

        # Full year, two definition files, two regions
        holidays -d us.yaml -d ca.yaml -r us -r ca 2026
    """
    level = logging.WARNING - 10 * min(verbose, 2)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    hol = Holidays.default(strict=strict)
    regions = regions or ('any',)

    try:
        for path in definitions:
            hol.load_file(path)

        if on_date is not None:
            matches = hol.on(on_date, *regions)
            if not matches:
                click.echo('No holidays.')
            for match in matches:
                click.echo(f'{match.name}  ({", ".join(match.regions)})')
            return

        if year is None:
            year = datetime.now().year

        if month is not None:
            output = render_month(hol, regions, year, month, print_year=True)
            start, end = date(year, month, 1), date(year, month, monthrange(year, month)[1])
        else:
            output = render_year(hol, regions, year)
            start, end = date(year, 1, 1), date(year, 12, 31)

        click.echo(output)
        listing = render_list(hol, regions, start, end)
        if listing:
            click.echo('')
            click.echo(listing)

    except (HolidayError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
