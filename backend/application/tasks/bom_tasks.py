"""
BOM Tasks.

Celery tasks for BOM-related operations. Tasks receive serialized tree
snapshots (wire format) so they never share state with a request.
"""

from celery import shared_task
from django.utils import timezone
import logging

from domain.shared.exceptions import DomainException

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def validate_bom_structure(self, tree_data: list):
    """
    Validate BOM structure integrity.

    Checks:
    - Every node is one level below its parent
    - At most one substitute per primary part
    - Substitute parent status follows the primary
    - At least one active primary part
    - No duplicate keys or positions
    """
    from domain.bom.tree import normalize, validate_structure
    from domain.bom.costing import total_cost

    try:
        tree = normalize(tree_data)
        report = validate_structure(tree)

        logger.info(f"BOM validation: {report.node_count} nodes, {len(report.errors)} issues found")

        return {
            'node_count': report.node_count,
            'valid': report.is_valid,
            'errors': report.errors,
            'position_conflicts': report.position_conflicts,
            'total_cost': str(total_cost(tree)),
        }

    except (DomainException, TypeError, ValueError) as e:
        logger.error(f"Invalid BOM snapshot: {e}")
        return {'error': str(e)}
    except Exception as e:
        logger.error(f"Error validating BOM: {e}")
        self.retry(exc=e, countdown=60)


@shared_task
def export_bom_to_excel(tree_data: list, product_name: str = ''):
    """
    Export BOM to Excel file.

    Creates Excel file and stores it for download.
    """
    from domain.bom.tree import normalize
    from infrastructure.excel import export_filename, export_workbook
    from django.conf import settings
    import os

    try:
        tree = normalize(tree_data)
        content = export_workbook(tree, product_name)

        # Save file
        export_dir = settings.BOM_EXPORT_DIR
        os.makedirs(export_dir, exist_ok=True)

        stem, extension = os.path.splitext(export_filename(product_name))
        filename = f"{stem}_{timezone.now().strftime('%H%M%S')}{extension}"
        filepath = os.path.join(export_dir, filename)
        with open(filepath, 'wb') as f:
            f.write(content)

        logger.info(f"Exported BOM '{product_name}' to {filename}")

        return {
            'filename': filename,
            'filepath': filepath,
            'download_url': f"{settings.MEDIA_URL}exports/bom/{filename}",
        }

    except (DomainException, TypeError, ValueError, OSError) as e:
        logger.error(f"Error exporting BOM '{product_name}': {e}")
        return {'error': str(e)}


@shared_task
def import_bom_from_excel(file_path: str):
    """
    Import BOM from Excel file.

    Expected columns (first row):
    Level, LevelName, PartId, Position, Quantity, Unit, Cost, Supplier,
    Lifecycle, Status, Type
    """
    from domain.bom.costing import total_cost
    from infrastructure.excel import import_workbook
    from presentation.api.v1.serializers.bom import tree_to_data

    try:
        with open(file_path, 'rb') as f:
            tree = import_workbook(f)

        logger.info(f"Imported BOM from {file_path}: {len(tree)} root node(s)")

        return {
            'tree': tree_to_data(tree),
            'total_cost': str(total_cost(tree)),
        }

    except (DomainException, OSError) as e:
        logger.error(f"Error importing BOM from {file_path}: {e}")
        return {'error': str(e)}
