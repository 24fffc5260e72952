"""
BOM Views.

API views for editing and analysing BOM trees. The API is stateless: every
request carries the tree it works on and every response returns the
resulting tree.
"""

import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from domain.bom.aggregates import BOMDocument
from domain.bom.authoring import NodeDraft
from domain.bom.costing import (
    CostThresholds,
    generate_cost_report,
    row_shares,
    simulate_cost_change,
    total_cost,
    variance_warnings,
)
from domain.bom.substitution import PrimaryEdit
from domain.bom.tree import flatten, normalize, validate_structure
from domain.compliance.entities import ComplianceCheck
from domain.compliance.metrics import checks_from_tree, compute_compliance
from domain.shared.exceptions import ValidationException
from domain.shared.value_objects import Certification, ComplianceStatus, Lifecycle
from infrastructure.catalog import default_catalog
from infrastructure.compliance import StaticComplianceLookup
from infrastructure.excel import (
    export_filename,
    export_workbook,
    import_workbook,
    template_workbook,
)
from ..serializers.bom import (
    AddNodeRequestSerializer,
    ComplianceReportSerializer,
    ComplianceRequestSerializer,
    CostReportSerializer,
    CostRequestSerializer,
    CostSimulationSerializer,
    CostWarningSerializer,
    EditNodeRequestSerializer,
    EditPrimaryRequestSerializer,
    ExportRequestSerializer,
    FlatRowSerializer,
    ImportRequestSerializer,
    NodeCommandSerializer,
    SimulateCostRequestSerializer,
    StructureReportSerializer,
    TreeRequestSerializer,
    tree_to_data,
)

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def xlsx_response(content: bytes, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


class BOMViewSet(viewsets.GenericViewSet):
    """
    ViewSet for BOM trees.

    Endpoints:
    - POST /bom/flatten/ - display rows of a tree
    - POST /bom/normalize/ - normalized tree and its total cost
    - POST /bom/validate/ - structure report
    - POST /bom/toggle-status/ - retire / re-enable a primary part
    - POST /bom/replace/ - replace a primary part with its substitute
    - POST /bom/delete-substitute/ - remove a substitute part
    - POST /bom/edit-primary/ - edit primary part attributes
    - POST /bom/add-node/ - add a node one level below its parent
    - POST /bom/delete-part/ - delete an L6/L7 part line
    - POST /bom/edit-node/ - edit general node fields
    - POST /bom/cost/ - cost report
    - POST /bom/simulate-cost/ - what-if cost change of one line
    - POST /bom/compliance/ - compliance metrics
    - POST /bom/import/ - read a tree from an Excel file
    - POST /bom/export/ - write a tree to an Excel file
    - GET /bom/import-template/ - blank Excel import template
    """

    parser_classes = [JSONParser]

    serializer_classes = {
        'flatten': TreeRequestSerializer,
        'normalize': TreeRequestSerializer,
        'validate': TreeRequestSerializer,
        'toggle_status': NodeCommandSerializer,
        'replace': NodeCommandSerializer,
        'delete_substitute': NodeCommandSerializer,
        'edit_primary': EditPrimaryRequestSerializer,
        'add_node': AddNodeRequestSerializer,
        'delete_part': NodeCommandSerializer,
        'edit_node': EditNodeRequestSerializer,
        'cost': CostRequestSerializer,
        'simulate_cost': SimulateCostRequestSerializer,
        'compliance': ComplianceRequestSerializer,
        'import_bom': ImportRequestSerializer,
        'export': ExportRequestSerializer,
        'default': TreeRequestSerializer,
    }

    def get_serializer_class(self):
        return self.serializer_classes.get(
            self.action,
            self.serializer_classes['default']
        )

    def _validated(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def _document(self, data):
        """Load the request tree into a document; the load event is not reported."""
        document = BOMDocument.from_tree(
            data['tree'],
            strict=data.get('strict', settings.BOM_STRICT_KEYS),
        )
        document.clear_domain_events()
        return document

    def _document_response(self, document):
        return Response({
            'tree': tree_to_data(document.tree),
            'totalCost': document.total_cost,
            'version': document.version,
            'events': [event.to_dict() for event in document.clear_domain_events()],
        })

    # =========================================================================
    # TREE
    # =========================================================================

    @action(detail=False, methods=['post'])
    def flatten(self, request):
        """Get display rows (pre-order) of a tree."""
        tree = normalize(self._validated(request)['tree'])
        rows = FlatRowSerializer(
            flatten(tree).to_list(),
            many=True,
            context={'shares': row_shares(tree)},
        ).data
        return Response({'rows': rows, 'count': len(rows)})

    @action(detail=False, methods=['post'])
    def normalize(self, request):
        """Normalize a tree: levels, keys, default statuses, one substitute per primary."""
        tree = normalize(self._validated(request)['tree'])
        return Response({
            'tree': tree_to_data(tree),
            'totalCost': total_cost(tree),
        })

    @action(detail=False, methods=['post'])
    def validate(self, request):
        """Structure report of the normalized tree."""
        tree = normalize(self._validated(request)['tree'])
        report = validate_structure(tree)
        return Response(StructureReportSerializer(report).data)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    @action(detail=False, methods=['post'], url_path='toggle-status')
    def toggle_status(self, request):
        """Retire a primary part, or put it back in use."""
        data = self._validated(request)
        document = self._document(data)
        document.toggle_status(data['key'])
        return self._document_response(document)

    @action(detail=False, methods=['post'])
    def replace(self, request):
        """Replace a primary part with its substitute (409 on category mismatch)."""
        data = self._validated(request)
        document = self._document(data)
        document.replace_primary(data['key'])
        return self._document_response(document)

    @action(detail=False, methods=['post'], url_path='delete-substitute')
    def delete_substitute(self, request):
        data = self._validated(request)
        document = self._document(data)
        document.delete_substitute(data['key'])
        return self._document_response(document)

    @action(detail=False, methods=['post'], url_path='edit-primary')
    def edit_primary(self, request):
        """Edit part code, quantity, unit and lifecycle of a primary part."""
        data = self._validated(request)
        fields = data['fields']
        edit = PrimaryEdit(
            part_id=fields['part_id'],
            quantity=fields.get('quantity'),
            unit=fields.get('unit') or None,
            lifecycle=Lifecycle.parse(fields.get('lifecycle')),
        )
        document = self._document(data)
        document.edit_primary(data['key'], edit, default_catalog())
        return self._document_response(document)

    @action(detail=False, methods=['post'], url_path='add-node')
    def add_node(self, request):
        """Add a node under `parentKey` (409 under an L7 or a second substitute)."""
        data = self._validated(request)
        fields = data['node']
        draft = NodeDraft(
            title=fields['title'],
            key=fields.get('key') or None,
            part_id=fields.get('part_id'),
            position=fields.get('position'),
            quantity=fields.get('quantity'),
            unit=fields.get('unit'),
            cost=fields.get('cost'),
            supplier=fields.get('supplier'),
            lifecycle=Lifecycle.parse(fields.get('lifecycle')),
        )
        document = self._document(data)
        key = document.add_node(data.get('parent_key') or None, draft)
        response = self._document_response(document)
        response.data['key'] = key
        return response

    @action(detail=False, methods=['post'], url_path='delete-part')
    def delete_part(self, request):
        """Delete a primary or substitute part (409 for assemblies)."""
        data = self._validated(request)
        document = self._document(data)
        document.delete_part(data['key'])
        return self._document_response(document)

    @action(detail=False, methods=['post'], url_path='edit-node')
    def edit_node(self, request):
        data = self._validated(request)
        document = self._document(data)
        document.edit_node(data['key'], dict(data['fields']))
        return self._document_response(document)

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    @action(detail=False, methods=['post'])
    def cost(self, request):
        """Cost breakdown, warnings and health score."""
        data = self._validated(request)
        thresholds = dict(settings.BOM_COST_THRESHOLDS)
        thresholds.update(data.get('thresholds') or {})
        report = generate_cost_report(
            normalize(data['tree']),
            CostThresholds.from_mapping(thresholds),
        )
        return Response(CostReportSerializer(report).data)

    @action(detail=False, methods=['post'], url_path='simulate-cost')
    def simulate_cost(self, request):
        data = self._validated(request)
        simulation = simulate_cost_change(
            normalize(data['tree']),
            data['key'],
            data['cost'],
            data['quantity'],
        )
        thresholds = CostThresholds.from_mapping(settings.BOM_COST_THRESHOLDS)
        payload = CostSimulationSerializer(simulation).data
        payload['warnings'] = CostWarningSerializer(
            variance_warnings(simulation, thresholds), many=True
        ).data
        payload['tree'] = tree_to_data(simulation.tree)
        return Response(payload)

    @action(detail=False, methods=['post'])
    def compliance(self, request):
        """Compliance rates from part verdicts, or from a tree and its failing part codes."""
        data = self._validated(request)
        if 'parts' in data:
            checks = [
                ComplianceCheck(
                    key=part['key'],
                    part_id=part.get('part_id'),
                    title=part.get('title', ''),
                    status=ComplianceStatus(part['status']),
                    missing=frozenset(Certification(value) for value in part.get('missing', [])),
                )
                for part in data['parts']
            ]
        else:
            lookup = StaticComplianceLookup(data.get('non_compliant'))
            checks = checks_from_tree(normalize(data['tree']), lookup)

        report = compute_compliance(checks)
        return Response(ComplianceReportSerializer(report).data)

    # =========================================================================
    # EXCEL
    # =========================================================================

    @action(
        detail=False,
        methods=['post'],
        url_path='import',
        parser_classes=[MultiPartParser, FormParser],
    )
    def import_bom(self, request):
        """Read a tree from an uploaded Excel file."""
        upload = self._validated(request)['file']
        if upload.size > settings.BOM_IMPORT_MAX_SIZE:
            raise ValidationException(
                f"File is larger than {settings.BOM_IMPORT_MAX_SIZE} bytes",
                field='file',
                value=upload.size,
            )

        document = BOMDocument.from_tree(import_workbook(upload), source=upload.name)
        logger.info(f"Imported '{upload.name}': {document.node_count} nodes")
        return Response(
            {
                'tree': tree_to_data(document.tree),
                'totalCost': document.total_cost,
                'events': [event.to_dict() for event in document.clear_domain_events()],
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['post'])
    def export(self, request):
        """Download a tree as an Excel file."""
        data = self._validated(request)
        product_name = data['product_name']
        content = export_workbook(normalize(data['tree']), product_name)
        return xlsx_response(content, export_filename(product_name))

    @action(detail=False, methods=['get'], url_path='import-template')
    def import_template(self, request):
        """Download the blank Excel import template."""
        return xlsx_response(template_workbook(), 'BOM_import_template.xlsx')
