"""
BOM Report Command.

Prints the structure check, cost report and compliance rates of a product
template or of an Excel BOM file, and optionally exports the tree to Excel.
"""

from __future__ import annotations

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from domain.bom.costing import CostThresholds, generate_cost_report
from domain.bom.tree import validate_structure
from domain.compliance.metrics import checks_from_tree, compute_compliance
from domain.shared.exceptions import DomainException
from infrastructure.catalog import default_catalog
from infrastructure.compliance import StaticComplianceLookup
from infrastructure.excel import export_workbook, import_workbook


class Command(BaseCommand):
    help = 'Print structure, cost and compliance report of a BOM template or Excel file'

    def add_arguments(self, parser):
        source = parser.add_mutually_exclusive_group(required=True)
        source.add_argument(
            '--template',
            type=str,
            help='Product template name'
        )
        source.add_argument(
            '--file',
            type=str,
            help='Path to an Excel BOM file'
        )
        source.add_argument(
            '--list',
            action='store_true',
            help='List available product templates'
        )
        parser.add_argument(
            '--fail',
            action='append',
            default=[],
            metavar='PART_ID:CERT,CERT',
            help='Mark a part code non-compliant, e.g. CPU-1260P:RoHS,CE (repeatable)'
        )
        parser.add_argument(
            '--export',
            type=str,
            default='',
            help='Write the tree to this .xlsx path'
        )

    def handle(self, *args, **options):
        catalog = default_catalog()

        if options['list']:
            for template in catalog.list_templates():
                self.stdout.write(f"{template.name} ({template.version}) - {template.description}")
            return

        if options['template']:
            template = catalog.get_template(options['template'])
            if template is None:
                raise CommandError(f"Unknown template '{options['template']}'")
            name, tree = template.name, template.structure
        else:
            path = Path(options['file'])
            if not path.exists():
                raise CommandError(f"File not found: {path}")
            try:
                with path.open('rb') as f:
                    tree = import_workbook(f)
            except DomainException as e:
                raise CommandError(e.message)
            name = path.stem

        self._print_structure(name, tree)
        self._print_cost(tree)
        self._print_compliance(tree, self._parse_failures(options['fail']))

        if options['export']:
            target = Path(options['export'])
            target.write_bytes(export_workbook(tree, name))
            self.stdout.write(self.style.SUCCESS(f"Exported to {target}"))

    def _print_structure(self, name, tree):
        report = validate_structure(tree)
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS(f"BOM: {name}"))
        self.stdout.write("=" * 60)
        self.stdout.write(f"Nodes: {report.node_count}")
        if report.is_valid:
            self.stdout.write(self.style.SUCCESS("Structure: OK"))
        for error in report.errors:
            self.stdout.write(self.style.ERROR(f"Structure: {error}"))

    def _print_cost(self, tree):
        thresholds = CostThresholds.from_mapping(settings.BOM_COST_THRESHOLDS)
        report = generate_cost_report(tree, thresholds)
        breakdown = report.breakdown

        self.stdout.write("")
        self.stdout.write(f"Total cost: {breakdown.total_cost:.2f}")
        self.stdout.write(
            f"Parts: {breakdown.total_parts} "
            f"(active {breakdown.active_parts}, substitutes {breakdown.substitute_parts})"
        )
        self.stdout.write(f"Suppliers: {breakdown.supplier_count}")
        for supplier in breakdown.by_supplier:
            self.stdout.write(f"  {supplier.name:<20} {supplier.total_cost:>12.2f}")

        for warning in report.warnings:
            style = self.style.ERROR if warning.level.value == 'error' else self.style.WARNING
            self.stdout.write(style(f"[{warning.level.value}] {warning.message}"))

        self.stdout.write(f"Health score: {report.health.score} ({report.health.grade})")

    def _parse_failures(self, values):
        failures = {}
        for value in values:
            part_id, _, certifications = value.partition(':')
            failures[part_id.strip()] = [c.strip() for c in certifications.split(',') if c.strip()]
        return failures

    def _print_compliance(self, tree, failures):
        try:
            lookup = StaticComplianceLookup(failures)
        except ValueError as e:
            raise CommandError(f"Unknown certification: {e}")
        report = compute_compliance(checks_from_tree(tree, lookup))

        self.stdout.write("")
        self.stdout.write(
            f"Compliance: {report.compliance_rate:.1f}% "
            f"({report.non_compliant_count} of {report.total_checked} failing) "
            f"- {report.overall_status.value}"
        )
        for rate in report.certifications:
            self.stdout.write(f"  {rate.certification.value:<12} {rate.rate:>6.1f}%")
        for part in report.non_compliant_parts:
            missing = ', '.join(c.value for c in part.missing) or '-'
            self.stdout.write(self.style.WARNING(f"  {part.part_id}: missing {missing}"))
