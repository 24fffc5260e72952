"""
API v1 URL Configuration.

All API endpoints for version 1.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views.bom import BOMViewSet
from .views.catalog import TemplateViewSet

router = DefaultRouter()

# BOM trees
router.register(r'bom', BOMViewSet, basename='bom')

# Catalog
router.register(r'templates', TemplateViewSet, basename='template')

urlpatterns = [
    path('', include(router.urls)),
]
