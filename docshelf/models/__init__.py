from docshelf.models.soft_delete_mixin import SoftDeleteMetadata, SoftDeleteMixin
from docshelf.models.base import BaseDocument, DELETED_AT_PATH, UPDATED_AT_PATH

__all__ = [
    "SoftDeleteMetadata",
    "SoftDeleteMixin",
    "BaseDocument",
    "DELETED_AT_PATH",
    "UPDATED_AT_PATH",
]
