"""Pydantic base schema utilities for ToolMesh-AI models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base Pydantic model for strict internal schemas.

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
    Base Pydantic model for payloads exchanged with callers and LLMs.

    Field names are snake_case in Python and camelCase on the wire
    (``step_id`` <-> ``stepId``). Unknown keys are ignored because plan
    payloads come from a language model and tool definitions may carry
    provider specific metadata.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
