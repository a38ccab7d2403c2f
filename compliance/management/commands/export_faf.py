"""
Management command: Export the FTA Audit File (FAF).
CSV to stdout by default; --format xlsx requires --output.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from compliance.exceptions import ComplianceError
from compliance.export_utils import render_faf_excel
from compliance.services.faf_export import FAFExportFilters, convert_faf_to_csv, generate_faf_export


def _date_arg(value):
    if value is None:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise CommandError(f"Invalid date (expected YYYY-MM-DD): {value}")
    return parsed


class Command(BaseCommand):
    help = "Export bookings, product sales, loyalty cards, invoices and transactions as an FTA Audit File."

    def add_arguments(self, parser):
        parser.add_argument("--start-date", help="First day to include (YYYY-MM-DD)")
        parser.add_argument("--end-date", help="Last day to include (YYYY-MM-DD)")
        parser.add_argument("--spa-id", type=int, help="Restrict to one spa")
        parser.add_argument("--format", choices=("csv", "xlsx"), default="csv")
        parser.add_argument("--output", help="File to write; CSV goes to stdout when omitted")

    def handle(self, *args, **options):
        filters = FAFExportFilters(
            start_date=_date_arg(options.get("start_date")),
            end_date=_date_arg(options.get("end_date")),
            spa_id=options.get("spa_id"),
        )
        output = options.get("output")
        if options["format"] == "xlsx" and not output:
            raise CommandError("--output is required for xlsx")

        try:
            records = generate_faf_export(filters)
        except ComplianceError as e:
            raise CommandError(f"FAF export failed: {e}") from e

        if options["format"] == "xlsx":
            with open(output, "wb") as fh:
                fh.write(render_faf_excel(records))
        elif output:
            with open(output, "w", encoding="utf-8", newline="") as fh:
                fh.write(convert_faf_to_csv(records))
        else:
            self.stdout.write(convert_faf_to_csv(records))
            return

        self.stdout.write(self.style.SUCCESS(f"Wrote {len(records)} records to {output}"))
