"""
Collections: only published collections are audited.
"""

from core.models import ResourceType

from .base import TypeChecker


class CollectionChecker(TypeChecker):
    name = "CollectionChecker"
    resource_type = ResourceType.COLLECTION
    status_label = "Publicada"
    sort_key = "ID"
    filter_query = "published_status:published"
