"""Pydantic models for calculation requests and responses."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CalculateRequest(BaseModel):
    """Represents a single expression submitted to the calculate endpoint."""

    # Reject numbers or lists where a string is expected
    model_config = ConfigDict(strict=True)

    expression: str = Field(default="", description="Arithmetic expression as a string")


class CalculateResponse(BaseModel):
    """Outcome of one evaluation: exactly one of result or error is set."""

    result: Optional[str] = Field(default=None, description="Result formatted with six fractional digits")
    error: Optional[str] = Field(default=None, description="Reason the expression was rejected")

    @model_validator(mode="after")
    def exactly_one_field(self) -> "CalculateResponse":
        """Ensure a response never carries both or neither of result and error."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' or 'error' must be set")
        return self

    @property
    def succeeded(self) -> bool:
        return self.result is not None
