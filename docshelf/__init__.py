"""Soft-delete object-document mapping over MongoDB.

Example usage:

    from docshelf import BaseDocument, init_docshelf

    class Item(BaseDocument):
        name: str

    repo = await init_docshelf("localhost:27017", "shop")
    item = await repo.insert(Item(name="a"), "items")
    await repo.remove({"_id": item.id}, "items")
"""

from docshelf.configs.settings import MongoSettings, Settings
from docshelf.configs.setup import init_docshelf
from docshelf.core.exceptions import DocShelfError, InvalidEntityError, NotFoundError
from docshelf.crud.base import SoftDeleteRepository
from docshelf.databases.mongodb import MongoDB
from docshelf.models import BaseDocument, SoftDeleteMetadata, SoftDeleteMixin
from docshelf.schemas.change_summary import ChangeSummary

__all__ = [
    "MongoSettings",
    "Settings",
    "init_docshelf",
    "DocShelfError",
    "InvalidEntityError",
    "NotFoundError",
    "SoftDeleteRepository",
    "MongoDB",
    "BaseDocument",
    "SoftDeleteMetadata",
    "SoftDeleteMixin",
    "ChangeSummary",
]
