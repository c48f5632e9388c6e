"""Alert data models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from markettracker.security.validators import sanitize_symbol


class AlertType(str, Enum):
    """Direction in which the price must cross the threshold."""

    ABOVE = "above"
    BELOW = "below"


class AlertDraft(BaseModel):
    """User-supplied fields of an alert, before the store assigns identity."""

    symbol: str = Field(..., description="Upstream symbol (sanitized)")
    name: str = Field(..., min_length=1, description="Display name from the symbol tables")
    type: AlertType = Field(..., description="Trigger direction")
    price: float = Field(..., gt=0, description="Threshold price")

    model_config = {"frozen": True}

    @field_validator("symbol", mode="before")
    @classmethod
    def _sanitize(cls, value):
        symbol = sanitize_symbol(value)
        if symbol is None:
            raise ValueError(f"invalid symbol {value!r}")
        return symbol


class Alert(BaseModel):
    """A persisted price alert.

    Field aliases match the JSON layout of the persisted blob
    (``createdAt``, ``triggeredAt``).
    """

    id: int = Field(..., description="Creation-order identifier")
    symbol: str = Field(..., min_length=1, description="Upstream symbol")
    name: str = Field(..., min_length=1, description="Display name")
    type: AlertType = Field(..., description="Trigger direction")
    price: float = Field(..., gt=0, description="Threshold price")
    created_at: datetime = Field(
        default_factory=datetime.now, alias="createdAt", description="Creation timestamp"
    )
    triggered: bool = Field(default=False, description="Whether the alert has fired")
    triggered_at: Optional[datetime] = Field(
        default=None, alias="triggeredAt", description="When the alert fired"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def _check_triggered_at(self) -> "Alert":
        if self.triggered != (self.triggered_at is not None):
            raise ValueError("triggeredAt must be set if and only if triggered is true")
        return self

    def should_trigger(self, current_price: float) -> bool:
        """Check whether ``current_price`` crosses the threshold.

        Both directions are inclusive: an alert fires exactly at its price.
        """
        if self.type is AlertType.ABOVE:
            return current_price >= self.price
        if self.type is AlertType.BELOW:
            return current_price <= self.price
        return False

    def mark_triggered(self, at: datetime) -> "Alert":
        return self.model_copy(update={"triggered": True, "triggered_at": at})

    def rearmed(self) -> "Alert":
        return self.model_copy(update={"triggered": False, "triggered_at": None})

    def to_record(self) -> dict:
        """Serialize to the JSON-compatible record stored in the blob."""
        return self.model_dump(mode="json", by_alias=True)
