"""Pydantic base schema utilities for decision service models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for request bodies built locally and sent to the decision service.

    Configures common Pydantic behaviors:
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="forbid"``: Prevent unknown fields from slipping into the model, ensuring strict validation.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )


class WireSchema(BaseModel):
    """
    Base Pydantic model for payloads returned by the decision service.

    Unknown fields are ignored so additions on the server side do not break parsing.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )
