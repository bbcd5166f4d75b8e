"""Decision service DTO models

Pydantic models that define the request contracts for the decision service.
Responses are parsed into the domain models in ``.domain``.

Guidelines:
- Field names are the wire names; do not alias them.
- Build payloads through these models and serialize with ``to_payload()`` so
  optional members (``current_action``, ``action_result``) are omitted rather
  than sent as ``null``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import Field

from .base import BaseSchema


class _RequestDTO(BaseSchema):
    def to_payload(self) -> Dict[str, Any]:
        # Only top-level optional members are dropped; nulls inside environment/state survive.
        data = self.model_dump(mode="json")
        return {k: v for k, v in data.items() if v is not None}


class LocationDTO(BaseSchema):
    """One worker as a location on the agent's map."""

    id: str = Field(..., description="Worker id used as the location key.", examples=["twitter_worker"])
    name: str = Field(..., description="Worker display name.")
    description: str = Field(..., description="What the worker can do.")


class CreateMapRequest(_RequestDTO):
    """Body of ``POST /maps``.

    Examples:
        >>> CreateMapRequest(locations=[LocationDTO(id="w1", name="W", description="d")]).to_payload()
        {'locations': [{'id': 'w1', 'name': 'W', 'description': 'd'}]}
    """

    locations: List[LocationDTO] = Field(default_factory=list)


class CreateAgentRequest(_RequestDTO):
    name: str
    goal: str
    description: str


class ActionResultDTO(BaseSchema):
    """Serialized ``FunctionResult`` reported with the next decision request."""

    action_id: Optional[str] = None
    action_status: str
    feedback_message: str = ""


class ActionRequest(_RequestDTO):
    """Body of ``POST /agents/{agent_id}/actions``."""

    location: str
    map_id: str
    environment: Dict[str, Any] = Field(default_factory=dict)
    functions: List[Dict[str, Any]] = Field(default_factory=list)
    agent_state: Dict[str, Any] = Field(default_factory=dict)
    version: str = "v2"
    current_action: Optional[ActionResultDTO] = None


class SetTaskRequest(_RequestDTO):
    task: str


class TaskActionRequest(_RequestDTO):
    """Body of ``POST /agents/{agent_id}/tasks/{submission_id}/next``."""

    environment: Dict[str, Any] = Field(default_factory=dict)
    functions: List[Dict[str, Any]] = Field(default_factory=list)
    action_result: Optional[ActionResultDTO] = None


class CreateChatRequest(_RequestDTO):
    prompt: str
    partner_id: str
    partner_name: str


class UpdateChatRequest(BaseSchema):
    """Body of ``POST /conversation/{id}/next``; ``state``/``functions`` are sent even when null."""

    message: str
    state: Optional[Dict[str, Any]] = None
    functions: Optional[List[Dict[str, Any]]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ReportFunctionRequest(_RequestDTO):
    fn_id: str
    result: str


class EndChatRequest(BaseSchema):
    message: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def locations_from_workers(workers: Sequence[Any]) -> CreateMapRequest:
    """Build the map registration body from workers (anything with id/name/description)."""
    return CreateMapRequest(
        locations=[LocationDTO(id=w.id, name=w.name, description=w.description) for w in workers]
    )
