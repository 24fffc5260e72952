"""
Catalog Serializers.

Serializers for product templates and catalog parts.
"""

from rest_framework import serializers

from domain.bom.costing import total_cost
from domain.bom.tree import count_nodes, primary_parts
from domain.shared.value_objects import BOMLevel, Lifecycle

from .bom import EnumValueField, tree_to_data


class PartInfoSerializer(serializers.Serializer):
    """Serializer for a catalog part."""

    partId = serializers.CharField(source='part_id')
    title = serializers.CharField()
    category = serializers.CharField()
    cost = serializers.DecimalField(max_digits=20, decimal_places=2, allow_null=True)
    unit = serializers.CharField(allow_null=True)
    supplier = serializers.CharField(allow_null=True)
    lifecycle = EnumValueField(Lifecycle, allow_null=True)
    level = EnumValueField(BOMLevel)
    product = serializers.CharField(allow_null=True)


class TemplateListSerializer(serializers.Serializer):
    """List serializer for product templates."""

    name = serializers.CharField()
    description = serializers.CharField()
    version = serializers.CharField()
    lastUpdated = serializers.CharField(source='last_updated', allow_null=True)
    nodeCount = serializers.SerializerMethodField()
    primaryCount = serializers.SerializerMethodField()
    totalCost = serializers.SerializerMethodField()

    def get_nodeCount(self, obj):
        return count_nodes(obj.structure)

    def get_primaryCount(self, obj):
        return len(primary_parts(obj.structure))

    def get_totalCost(self, obj):
        return total_cost(obj.structure)


class TemplateDetailSerializer(TemplateListSerializer):
    """Detail serializer for product templates, with the tree."""

    structure = serializers.SerializerMethodField()

    def get_structure(self, obj):
        return tree_to_data(obj.structure)
