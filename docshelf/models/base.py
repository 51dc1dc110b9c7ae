from typing import Any, Dict, Optional
from beanie import PydanticObjectId
from beanie.odm.utils.encoder import Encoder
from pydantic import ConfigDict, Field

from docshelf.models.soft_delete_mixin import SoftDeleteMixin

# Dotted paths of the metadata fields inside a stored document
UPDATED_AT_PATH = "timestamps.updated_at"
DELETED_AT_PATH = "timestamps.deleted_at"


class BaseDocument(SoftDeleteMixin):
    """Base for every entity handled by the soft-delete repository.

    Subclasses declare their own fields; the repository only relies on ``id``
    and the ``timestamps`` metadata inherited from here. Fields present in the
    stored document but not declared on the model are ignored on load and left
    alone on update.

    Values BSON has no type for (sets, ``Decimal``, enums, ...) are converted
    with beanie's encoder before they reach the driver.
    """

    id: Optional[PydanticObjectId] = Field(default=None, alias="_id", description="Document id")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def _encode(self, **dump_options: Any) -> Dict[str, Any]:
        doc = Encoder(to_db=True).encode(self.model_dump(by_alias=True, **dump_options))
        if "_id" in doc and doc["_id"] is None:
            doc.pop("_id")
        return doc

    def to_document(self) -> Dict[str, Any]:
        """Full BSON-ready representation used on insert"""
        return self._encode()

    def to_patch(self) -> Dict[str, Any]:
        """Fields explicitly set on this instance, without id or metadata"""
        return self._encode(exclude_unset=True, exclude={"id", "timestamps"})

    def to_selector(self) -> Dict[str, Any]:
        """Equality filter built from the explicitly set, non-null fields"""
        return self._encode(exclude_unset=True, exclude_none=True, exclude={"timestamps"})
