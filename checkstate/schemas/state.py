"""
Checkstate: Pydantic Request/Response Schemas
===============================================

What:  Models for the JSON that crosses the API boundary.
How:   StateUpdateRequest is decoded strictly from the raw body by the route
       (not by FastAPI's body parsing) so malformed input can be answered
       with the service's own 400 message instead of a 422.
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StateUpdateRequest(BaseModel):
    """
    Body of POST/PUT /api/state.

    Decoding rules:
        - absent or null fields keep their zero values ("" / false), and a
          body that is just `null` decodes to all zero values; presence is
          checked by the route
        - keys match case-insensitively ("MD_ID" fills md_id); when a key
          appears twice the later non-null value wins
        - strict mode rejects wrong JSON types (e.g. "state": "true")
    """

    md_id: str = Field(default="", description="Document identifier")
    check_id: str = Field(default="", description="Checkbox identifier within the document")
    state: bool = Field(default=False, description="True to check, false to uncheck")

    model_config = ConfigDict(strict=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def normalise_keys(cls, data: Any) -> Any:
        """Fold keys to lower case and drop nulls before field validation."""
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data

        folded = {}
        for key, value in data.items():
            if value is None:
                continue
            folded[key.lower()] = value
        return folded


class CheckedStatesResponse(BaseModel):
    """Returned by GET /api/states."""

    checked: List[str] = Field(description="Ids of the checked boxes of the document")


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Storage root status: available or unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
