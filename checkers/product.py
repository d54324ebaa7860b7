"""
Products: only active, published products are audited.
"""

from core.models import ResourceType

from .base import TypeChecker


class ProductChecker(TypeChecker):
    name = "ProductChecker"
    resource_type = ResourceType.PRODUCT
    status_label = "Activo"
    sort_key = "ID"
    filter_query = "status:ACTIVE AND published_status:published"
