"""
Serializers Package.

All API serializers for BOM Studio.
"""

from .bom import (
    BOMNodeSerializer,
    BOMTreeNodeSerializer,
    FlatRowSerializer,
    StructureReportSerializer,
    TreeRequestSerializer,
    NodeCommandSerializer,
    EditPrimaryRequestSerializer,
    AddNodeRequestSerializer,
    EditNodeRequestSerializer,
    CostRequestSerializer,
    SimulateCostRequestSerializer,
    ExportRequestSerializer,
    ImportRequestSerializer,
    ComplianceRequestSerializer,
    CostReportSerializer,
    CostSimulationSerializer,
    ComplianceReportSerializer,
    tree_to_data,
)

from .catalog import (
    PartInfoSerializer,
    TemplateListSerializer,
    TemplateDetailSerializer,
)
