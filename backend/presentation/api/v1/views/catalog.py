"""
Catalog Views.

Read-only API views for product templates and substitute candidates.
"""

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from domain.bom.substitution import substitute_candidates
from infrastructure.catalog import default_catalog
from ..serializers.catalog import (
    PartInfoSerializer,
    TemplateDetailSerializer,
    TemplateListSerializer,
)


class TemplateViewSet(viewsets.GenericViewSet):
    """
    ViewSet for product templates.

    Endpoints:
    - GET /templates/ - list templates
    - GET /templates/{name}/ - template with its normalized tree
    - GET /templates/candidates/?partId= - parts of the same category
    """

    lookup_field = 'name'
    lookup_value_regex = '[^/]+'

    serializer_classes = {
        'list': TemplateListSerializer,
        'retrieve': TemplateDetailSerializer,
        'candidates': PartInfoSerializer,
        'default': TemplateListSerializer,
    }

    def get_serializer_class(self):
        return self.serializer_classes.get(
            self.action,
            self.serializer_classes['default']
        )

    def list(self, request):
        templates = default_catalog().list_templates()
        serializer = self.get_serializer(templates, many=True)
        return Response(serializer.data)

    def retrieve(self, request, name=None):
        template = default_catalog().get_template(name)
        if template is None:
            raise NotFound(f"Template '{name}' not found")
        return Response(self.get_serializer(template).data)

    @action(detail=False, methods=['get'])
    def candidates(self, request):
        """Parts that may replace `partId` (same category)."""
        part_id = request.query_params.get('partId')
        if not part_id:
            raise ValidationError({'partId': 'This query parameter is required.'})

        parts = substitute_candidates(default_catalog(), part_id)
        return Response(self.get_serializer(parts, many=True).data)
