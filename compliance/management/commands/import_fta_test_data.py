"""
Management command: Import FTA certification test data.
Reads a JSON file (array or {"transactions": [...]}) or the built-in sample set.
"""

import json
import sys

from django.core.management.base import BaseCommand, CommandError

from compliance.services.test_data_import import generate_sample_test_data, import_fta_test_data, import_from_json


class Command(BaseCommand):
    help = "Import FTA test transactions, computing VAT and persisting each entry."

    def add_arguments(self, parser):
        parser.add_argument("path", nargs="?", help="JSON file to import, or - for stdin")
        parser.add_argument(
            "--sample",
            action="store_true",
            help="Import the built-in sample transactions instead of a file",
        )

    def handle(self, *args, **options):
        path = options.get("path")
        if options["sample"]:
            result = import_fta_test_data(generate_sample_test_data())
        elif not path:
            raise CommandError("Give a JSON file path, - for stdin, or --sample")
        else:
            if path == "-":
                content = sys.stdin.read()
            else:
                try:
                    with open(path, encoding="utf-8") as fh:
                        content = fh.read()
                except OSError as e:
                    raise CommandError(f"Cannot read {path}: {e}") from e
            result = import_from_json(content)

        self.stdout.write(json.dumps(result.as_dict(), indent=2))
        for msg in result.errors:
            self.stderr.write(f"  - {msg}")

        if not result.success:
            raise CommandError(
                f"Import finished with errors: {result.imported} imported, {result.skipped} skipped"
            )
        self.stdout.write(self.style.SUCCESS(
            f"Imported {result.imported} entries ({result.skipped} skipped)."
        ))
