"""
BOM Serializers.

Serializers for BOM trees (wire format is camelCase), BOM commands and the
cost / compliance reports.
"""

from enum import Enum

from rest_framework import serializers

from domain.bom.entities import BOMNode
from domain.shared.value_objects import (
    BOMLevel,
    Certification,
    ComplianceStatus,
    ItemStatus,
    Lifecycle,
)


class EnumValueField(serializers.ChoiceField):
    """Choice field over an Enum; reads and writes the member values."""

    def __init__(self, enum_class, **kwargs):
        self.enum_class = enum_class
        super().__init__(choices=[member.value for member in enum_class], **kwargs)

    def to_representation(self, value):
        if isinstance(value, Enum):
            return value.value
        return super().to_representation(value)


def _decimal_field(**kwargs):
    return serializers.DecimalField(
        max_digits=20, decimal_places=6, required=False, allow_null=True, **kwargs
    )


# =============================================================================
# TREE
# =============================================================================

class BOMNodeSerializer(serializers.Serializer):
    """
    Serializer for a single BOM node (wire format).

    Level-specific subclasses add `children`; the L7 serializer has none,
    so nothing below L7 is accepted.
    """

    key = serializers.CharField(required=False, allow_blank=True)
    level = serializers.IntegerField(required=False, min_value=0, max_value=6)
    title = serializers.CharField(required=False, allow_blank=True, default='')
    partId = serializers.CharField(source='part_id', required=False, allow_null=True, allow_blank=True)
    position = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = _decimal_field()
    unit = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    cost = _decimal_field()
    supplier = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    lifecycle = EnumValueField(Lifecycle, required=False, allow_null=True, allow_blank=True)
    status = EnumValueField(ItemStatus, required=False, allow_null=True, allow_blank=True)
    parentStatus = EnumValueField(
        ItemStatus, source='parent_status', required=False, allow_null=True, allow_blank=True
    )
    isAlternative = serializers.BooleanField(source='is_alternative', required=False)


def _level_serializer(level: BOMLevel):
    if level is BOMLevel.L7:
        return type('BOMNodeL7Serializer', (BOMNodeSerializer,), {})
    child_class = _level_serializer(BOMLevel.from_index(level.index + 1))
    return type(
        f'BOMNode{level.value}Serializer',
        (BOMNodeSerializer,),
        {'children': child_class(many=True, required=False)},
    )


BOMTreeNodeSerializer = _level_serializer(BOMLevel.L1)


def tree_to_data(tree):
    """Serialize a tree of BOMNode objects to wire data."""
    return BOMTreeNodeSerializer(tree, many=True).data


class FlatRowSerializer(serializers.Serializer):
    """Serializer for a row of the flattened tree."""

    key = serializers.CharField()
    level = serializers.IntegerField()
    levelName = serializers.CharField(source='level_name')
    levelColor = serializers.CharField(source='level_color')
    title = serializers.CharField(source='node.title')
    partId = serializers.CharField(source='node.part_id', allow_null=True)
    position = serializers.CharField(source='node.position', allow_null=True)
    quantity = _decimal_field(source='node.quantity')
    unit = serializers.CharField(source='node.unit', allow_null=True)
    cost = _decimal_field(source='node.cost')
    supplier = serializers.CharField(source='node.supplier', allow_null=True)
    lifecycle = EnumValueField(Lifecycle, source='node.lifecycle', allow_null=True)
    status = EnumValueField(ItemStatus, source='node.status', allow_null=True)
    parentStatus = EnumValueField(ItemStatus, source='parent_status', allow_null=True)
    hasChildren = serializers.BooleanField(source='has_children')
    path = serializers.CharField()
    interactable = serializers.BooleanField()
    costShare = serializers.SerializerMethodField()

    def get_costShare(self, obj):
        """Percentage of the BOM total, from the `shares` context; 0 without it."""
        return self.context.get('shares', {}).get(obj.key, 0)


class StructureReportSerializer(serializers.Serializer):
    nodeCount = serializers.IntegerField(source='node_count')
    valid = serializers.BooleanField(source='is_valid')
    errors = serializers.ListField(child=serializers.CharField())
    hasActivePrimary = serializers.BooleanField(source='has_active_primary')
    levelViolations = serializers.ListField(source='level_violations', child=serializers.CharField())
    excessSubstitutes = serializers.ListField(source='excess_substitutes', child=serializers.CharField())
    parentStatusMismatches = serializers.ListField(
        source='parent_status_mismatches', child=serializers.CharField()
    )
    duplicateKeys = serializers.ListField(source='duplicate_keys', child=serializers.CharField())
    positionConflicts = serializers.ListField(source='position_conflicts', child=serializers.DictField())


# =============================================================================
# COMMANDS
# =============================================================================

class TreeRequestSerializer(serializers.Serializer):
    tree = BOMTreeNodeSerializer(many=True)


class NodeCommandSerializer(TreeRequestSerializer):
    """Command on one node; `strict` rejects unknown keys with 404."""

    key = serializers.CharField()
    strict = serializers.BooleanField(required=False)


class PrimaryEditFieldsSerializer(serializers.Serializer):
    partId = serializers.CharField(source='part_id')
    quantity = serializers.DecimalField(
        max_digits=20, decimal_places=6, required=False, allow_null=True, min_value=0
    )
    unit = serializers.CharField(required=False, allow_null=True)
    lifecycle = EnumValueField(Lifecycle, required=False, allow_null=True)


class EditPrimaryRequestSerializer(NodeCommandSerializer):
    fields = PrimaryEditFieldsSerializer()


class NodeFieldsSerializer(serializers.Serializer):
    """General node fields of the manual build forms; absent fields stay as they are."""

    title = serializers.CharField(required=False, allow_blank=True)
    partId = serializers.CharField(source='part_id', required=False, allow_null=True, allow_blank=True)
    position = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = serializers.DecimalField(
        max_digits=20, decimal_places=6, required=False, allow_null=True, min_value=0
    )
    unit = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    cost = serializers.DecimalField(
        max_digits=20, decimal_places=6, required=False, allow_null=True, min_value=0
    )
    supplier = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    lifecycle = EnumValueField(Lifecycle, required=False, allow_null=True, allow_blank=True)


class NewNodeSerializer(NodeFieldsSerializer):
    key = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField()


class AddNodeRequestSerializer(TreeRequestSerializer):
    """Add `node` under `parentKey`; without a parent key a new unit is added."""

    parentKey = serializers.CharField(source='parent_key', required=False, allow_null=True, allow_blank=True)
    node = NewNodeSerializer()
    strict = serializers.BooleanField(required=False)


class EditNodeRequestSerializer(NodeCommandSerializer):
    fields = NodeFieldsSerializer()


class CostThresholdsSerializer(serializers.Serializer):
    maxTotalCost = serializers.DecimalField(
        source='max_total_cost', max_digits=20, decimal_places=6, required=False
    )
    maxCostPerPart = serializers.DecimalField(
        source='max_cost_per_part', max_digits=20, decimal_places=6, required=False
    )
    maxSubstituteCount = serializers.IntegerField(
        source='max_substitute_count', required=False, min_value=0
    )


class CostRequestSerializer(TreeRequestSerializer):
    thresholds = CostThresholdsSerializer(required=False)


class SimulateCostRequestSerializer(TreeRequestSerializer):
    key = serializers.CharField()
    cost = serializers.DecimalField(max_digits=20, decimal_places=6, allow_null=True)
    quantity = serializers.DecimalField(max_digits=20, decimal_places=6, allow_null=True)


class ExportRequestSerializer(TreeRequestSerializer):
    productName = serializers.CharField(source='product_name', required=False, default='BOM')


class ImportRequestSerializer(serializers.Serializer):
    file = serializers.FileField()


class ComplianceCheckSerializer(serializers.Serializer):
    key = serializers.CharField()
    partId = serializers.CharField(source='part_id', required=False, allow_null=True)
    title = serializers.CharField(required=False, allow_blank=True, default='')
    status = EnumValueField(ComplianceStatus)
    missing = serializers.ListField(
        child=EnumValueField(Certification), required=False, default=list
    )


class ComplianceRequestSerializer(serializers.Serializer):
    """
    Either precomputed `parts` verdicts, or a `tree` plus the missing
    certifications of its non-compliant part codes.
    """

    parts = ComplianceCheckSerializer(many=True, required=False)
    tree = BOMTreeNodeSerializer(many=True, required=False)
    nonCompliant = serializers.DictField(
        source='non_compliant',
        child=serializers.ListField(child=EnumValueField(Certification)),
        required=False,
        default=dict,
    )

    def validate(self, attrs):
        if 'parts' not in attrs and 'tree' not in attrs:
            raise serializers.ValidationError('Provide either "parts" or "tree".')
        return attrs


# =============================================================================
# COST REPORTS
# =============================================================================

class LevelCostSerializer(serializers.Serializer):
    level = EnumValueField(BOMLevel)
    count = serializers.IntegerField()
    activeCount = serializers.IntegerField(source='active_count')
    cost = serializers.DecimalField(max_digits=20, decimal_places=2)
    percentage = serializers.DecimalField(max_digits=7, decimal_places=2)


class SupplierCostSerializer(serializers.Serializer):
    name = serializers.CharField()
    totalCost = serializers.DecimalField(source='total_cost', max_digits=20, decimal_places=2)
    parts = serializers.ListField(child=serializers.CharField())


class CostBreakdownSerializer(serializers.Serializer):
    totalCost = serializers.DecimalField(source='total_cost', max_digits=20, decimal_places=2)
    totalParts = serializers.IntegerField(source='total_parts')
    activeParts = serializers.IntegerField(source='active_parts')
    inactiveParts = serializers.IntegerField(source='inactive_parts')
    substituteParts = serializers.IntegerField(source='substitute_parts')
    activeSubstitutes = serializers.IntegerField(source='active_substitutes')
    supplierCount = serializers.IntegerField(source='supplier_count')
    averageCostPerPart = serializers.DecimalField(
        source='average_cost_per_part', max_digits=20, decimal_places=2
    )
    byLevel = LevelCostSerializer(source='by_level', many=True)
    bySupplier = SupplierCostSerializer(source='by_supplier', many=True)


class CostWarningSerializer(serializers.Serializer):
    type = serializers.CharField()
    level = serializers.CharField(source='level.value')
    message = serializers.CharField()
    details = serializers.ListField(child=serializers.CharField())


class HealthScoreSerializer(serializers.Serializer):
    score = serializers.IntegerField()
    grade = serializers.CharField()


class MissingPartSerializer(serializers.Serializer):
    key = serializers.CharField()
    title = serializers.CharField()
    position = serializers.CharField(allow_null=True)
    status = EnumValueField(ItemStatus, allow_null=True)


class CostReportSerializer(serializers.Serializer):
    totalCost = serializers.DecimalField(source='total_cost', max_digits=20, decimal_places=2)
    breakdown = CostBreakdownSerializer()
    warnings = CostWarningSerializer(many=True)
    health = HealthScoreSerializer()
    missingParts = MissingPartSerializer(source='missing_parts', many=True)
    hasErrors = serializers.BooleanField(source='has_errors')
    hasWarnings = serializers.BooleanField(source='has_warnings')


class CostDifferenceSerializer(serializers.Serializer):
    original = serializers.DecimalField(max_digits=20, decimal_places=2)
    new = serializers.DecimalField(max_digits=20, decimal_places=2)
    difference = serializers.DecimalField(max_digits=20, decimal_places=2)
    percentage = serializers.DecimalField(max_digits=12, decimal_places=2)
    direction = serializers.CharField(source='direction.value')


class CostSimulationSerializer(serializers.Serializer):
    key = serializers.CharField()
    title = serializers.CharField()
    originalLineCost = serializers.DecimalField(source='original_line_cost', max_digits=20, decimal_places=2)
    updatedLineCost = serializers.DecimalField(source='updated_line_cost', max_digits=20, decimal_places=2)
    originalTotalCost = serializers.DecimalField(source='original_total_cost', max_digits=20, decimal_places=2)
    newTotalCost = serializers.DecimalField(source='new_total_cost', max_digits=20, decimal_places=2)
    impact = serializers.DecimalField(max_digits=20, decimal_places=2)
    message = serializers.CharField()
    variance = CostDifferenceSerializer()
    totalDifference = CostDifferenceSerializer(source='total_difference')


# =============================================================================
# COMPLIANCE REPORTS
# =============================================================================

class NonCompliantPartSerializer(serializers.Serializer):
    key = serializers.CharField()
    partId = serializers.CharField(source='part_id', allow_null=True)
    title = serializers.CharField()
    missing = serializers.ListField(child=EnumValueField(Certification))


class CertificationRateSerializer(serializers.Serializer):
    certification = EnumValueField(Certification)
    rate = serializers.FloatField()
    citedBy = serializers.IntegerField(source='cited_by')
    band = serializers.CharField(source='band.value')


class ComplianceReportSerializer(serializers.Serializer):
    totalChecked = serializers.IntegerField(source='total_checked')
    nonCompliantCount = serializers.IntegerField(source='non_compliant_count')
    complianceRate = serializers.FloatField(source='compliance_rate')
    certificationRates = serializers.SerializerMethodField()
    overallStatus = serializers.CharField(source='overall_status.value')
    nonCompliantParts = NonCompliantPartSerializer(source='non_compliant_parts', many=True)
    certifications = CertificationRateSerializer(many=True)

    def get_certificationRates(self, obj):
        return {
            certification.rate_key: rate
            for certification, rate in obj.certification_rates.items()
        }
