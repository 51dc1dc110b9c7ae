from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChangeSummary(BaseModel):
    """Outcome of a bulk remove"""
    matched: int = Field(0, ge=0, description="Documents matched by the selector")
    updated: int = Field(0, ge=0, description="Documents soft-deleted by this call")
    removed: int = Field(0, ge=0, description="Documents physically removed by this call")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "matched": 5,
                "updated": 3,
                "removed": 0
            }
        }
    )

    @model_validator(mode="after")
    def _check_counts(self) -> "ChangeSummary":
        if self.updated > self.matched or self.removed > self.matched:
            raise ValueError("updated and removed cannot exceed matched")
        return self
