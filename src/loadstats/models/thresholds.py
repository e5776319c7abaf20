"""
Models for metric thresholds
"""

from pydantic import BaseModel, Field


class Threshold(BaseModel):
    """A threshold rule attached to a metric"""

    source: str = Field(..., description="Threshold expression, e.g. p(95)<500")
    last_failed: bool = Field(
        default=False, description="Whether the last evaluation of this rule failed"
    )
