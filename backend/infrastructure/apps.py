from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    """Registers the BOM management commands."""

    name = 'infrastructure'
    label = 'bom_infrastructure'
    verbose_name = 'BOM Studio infrastructure'
