from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SoftDeleteMetadata(BaseModel):
    updated_at: Optional[datetime] = Field(
        default=None, description="Last write timestamp"
    )
    deleted_at: Optional[datetime] = Field(
        default=None, description="Deletion timestamp, unset while live"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class SoftDeleteMixin(BaseModel):
    timestamps: SoftDeleteMetadata = Field(
        default_factory=SoftDeleteMetadata, description="Soft delete metadata"
    )

    @property
    def is_deleted(self) -> bool:
        return self.timestamps.is_deleted
