from __future__ import annotations

import json
from typing import Any, Dict, List
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fakes import FakeDecisionClient, action

from agent_relay.agent_core.agent import Agent, default_log_sink
from agent_relay.agent_core.errors import (
    AgentNotInitializedError,
    ConfigurationError,
    FunctionNotFoundError,
    WorkerNotFoundError,
)
from agent_relay.agent_core.function import Function, FunctionArg, FunctionResult
from agent_relay.agent_core.worker import Worker
from agent_relay.core.config import Settings
from agent_relay.decision_api.client import DecisionApiClient
from agent_relay.decision_api.client_legacy import LegacyDecisionApiClient
from agent_relay.decision_api.errors import DecisionApiError
from agent_relay.decision_api.models.domain import ActionType


def _check_price() -> Function:
    async def body(args, log):
        return FunctionResult.done("100000")

    return Function(
        name="check_price",
        description="Check a price",
        executable=body,
        args=[FunctionArg("currency", "Currency name")],
    )


def _workers() -> List[Worker]:
    async def market_env():
        return {"market_open": True}

    return [
        Worker(id="market", name="Market", description="Prices", functions=[_check_price()], get_environment=market_env),
        Worker(id="social", name="Social", description="Tweets", functions=[]),
    ]


def _agent(client: Any, **kwargs) -> Agent:
    return Agent(name="trader", goal="trade", description="A trading agent", workers=_workers(), client=client, **kwargs)


def test_agent_requires_workers() -> None:
    with pytest.raises(ConfigurationError):
        Agent(name="a", goal="g", description="d", workers=[], client=FakeDecisionClient())


def test_agent_requires_key_or_client() -> None:
    with patch("agent_relay.agent_core.agent.get_settings", return_value=Settings(_env_file=None, api_key=None)):
        with pytest.raises(ConfigurationError):
            Agent(name="a", goal="g", description="d", workers=_workers())


def test_agent_falls_back_to_configured_key() -> None:
    with patch(
        "agent_relay.agent_core.agent.get_settings", return_value=Settings(_env_file=None, api_key="apt-from-env")
    ):
        agent = Agent(name="a", goal="g", description="d", workers=_workers())

    assert isinstance(agent.client, DecisionApiClient)
    assert agent.client.api_key == "apt-from-env"


@pytest.mark.parametrize("api_key,expected", [("apt-123", DecisionApiClient), ("legacy-123", LegacyDecisionApiClient)])
def test_agent_builds_client_from_key(api_key, expected) -> None:
    agent = Agent(api_key, name="a", goal="g", description="d", workers=_workers())

    assert isinstance(agent.client, expected)


@pytest.mark.asyncio
async def test_init_registers_and_binds_workers() -> None:
    client = FakeDecisionClient()
    agent = _agent(client)

    await agent.init()

    assert (agent.agent_id, agent.map_id) == ("agent-1", "map-1")
    assert client.ops("create_map") == [{"op": "create_map", "workers": ["market", "social"]}]
    assert client.ops("create_agent")[0]["name"] == "trader"
    assert all(w.agent_id == "agent-1" for w in agent.workers)
    assert agent.active_worker_id == "market"


@pytest.mark.asyncio
async def test_step_before_init_raises() -> None:
    agent = _agent(FakeDecisionClient())

    with pytest.raises(AgentNotInitializedError):
        await agent.step()
    with pytest.raises(AgentNotInitializedError):
        await agent.run(0)


def test_get_worker_by_id() -> None:
    agent = _agent(FakeDecisionClient())

    assert agent.get_worker_by_id("social").name == "Social"
    with pytest.raises(WorkerNotFoundError, match="Worker not found: 'nowhere'"):
        agent.get_worker_by_id("nowhere")


@pytest.mark.asyncio
async def test_function_result_is_reported_verbatim_on_next_round() -> None:
    bodies: List[Dict[str, Any]] = []
    replies = [
        {"action_type": "call_function", "action_args": {"fn_id": "act-1", "fn_name": "check_price", "args": {"currency": {"value": "bitcoin"}}}},
        {"action_type": "wait", "action_args": {}},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v2/maps":
            return httpx.Response(200, json={"data": {"id": "map-1"}})
        if path == "/v2/agents":
            return httpx.Response(200, json={"data": {"id": "agent-1"}})
        bodies.append(json.loads(request.content)["data"])
        return httpx.Response(200, json={"data": replies.pop(0)})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    agent = _agent(DecisionApiClient("apt-key", base_url="http://mock/v2", client=http))
    await agent.init()

    assert await agent.step() is ActionType.CALL_FUNCTION
    assert agent.pending_result == {"action_id": "act-1", "action_status": "done", "feedback_message": "100000"}
    assert await agent.step() is ActionType.WAIT

    assert "current_action" not in bodies[0]
    assert bodies[0]["environment"] == {"market_open": True}
    assert bodies[1]["current_action"] == {"action_id": "act-1", "action_status": "done", "feedback_message": "100000"}
    assert agent.pending_result is None


@pytest.mark.asyncio
async def test_pending_result_is_sent_only_once() -> None:
    client = FakeDecisionClient(
        actions=[
            action("call_function", fn_id="act-1", fn_name="check_price"),
            action("go_to", location_id="market"),
            action("wait"),
        ]
    )
    agent = _agent(client)
    await agent.init()

    await agent.step()
    await agent.step()
    await agent.step()

    sent = [c["current_action"] for c in client.ops("get_action")]
    assert sent[0] is None
    assert sent[1]["action_id"] == "act-1"
    assert sent[2] is None


@pytest.mark.asyncio
async def test_run_stops_on_wait_with_heartbeat_between_rounds() -> None:
    client = FakeDecisionClient(actions=[action("call_function", fn_id="act-1", fn_name="check_price"), action("wait")])
    agent = _agent(client)
    await agent.init()

    with patch("agent_relay.agent_core.agent.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await agent.run(5)

    assert len(client.ops("get_action")) == 2
    sleep.assert_awaited_once_with(5)


@pytest.mark.asyncio
async def test_run_uses_configured_heartbeat_by_default() -> None:
    client = FakeDecisionClient(actions=[action("go_to", location_id="social"), action("wait")])
    agent = _agent(client)
    await agent.init()

    with patch(
        "agent_relay.agent_core.agent.get_settings", return_value=Settings(_env_file=None, heartbeat_seconds=0.25)
    ):
        with patch("agent_relay.agent_core.agent.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await agent.run()

    sleep.assert_awaited_once_with(0.25)


@pytest.mark.asyncio
async def test_go_to_changes_active_worker() -> None:
    client = FakeDecisionClient(actions=[action("go_to", location_id="social"), action("wait")])
    agent = _agent(client)
    await agent.init()

    assert await agent.step() is ActionType.GO_TO
    assert agent.active_worker_id == "social"
    await agent.step()

    assert [c["location"] for c in client.ops("get_action")] == ["market", "social"]
    assert client.ops("get_action")[1]["environment"] == {}


@pytest.mark.asyncio
async def test_go_to_unknown_worker_fails_on_next_step() -> None:
    client = FakeDecisionClient(actions=[action("go_to", location_id="nowhere")])
    agent = _agent(client)
    await agent.init()

    await agent.step()

    with pytest.raises(WorkerNotFoundError):
        await agent.step()


@pytest.mark.asyncio
async def test_unhandled_action_types_map_to_unknown() -> None:
    client = FakeDecisionClient(actions=[action("try_to_talk"), action("dance")])
    agent = _agent(client)
    await agent.init()

    assert await agent.step() is ActionType.UNKNOWN
    assert await agent.step() is ActionType.UNKNOWN


@pytest.mark.asyncio
async def test_unknown_function_raises() -> None:
    client = FakeDecisionClient(actions=[action("call_function", fn_id="act-1", fn_name="sell_everything")])
    agent = _agent(client)
    await agent.init()

    with pytest.raises(FunctionNotFoundError):
        await agent.step()
    assert agent.pending_result is None


@pytest.mark.asyncio
async def test_agent_state_provider_is_sent() -> None:
    client = FakeDecisionClient(actions=[action("wait")])

    async def state():
        return {"balance": 42}

    agent = _agent(client, get_agent_state=state)
    await agent.init()
    await agent.step()

    assert client.ops("get_action")[0]["agent_state"] == {"balance": 42}


@pytest.mark.asyncio
async def test_verbose_step_and_custom_sink_reach_workers() -> None:
    client = FakeDecisionClient(actions=[action("call_function", fn_id="act-1", fn_name="check_price")])
    agent = _agent(client)
    await agent.init()

    messages: List[str] = []
    agent.set_logger(lambda a, msg: messages.append(f"{a.name}: {msg}"))
    agent.workers[0].log("from worker")
    await agent.step(verbose=True)

    assert messages == [
        "trader: from worker",
        'trader: Environment State: {"market_open": true}',
        "trader: Agent State: {}",
        "trader: Action State: {}.",
        "trader: Performing function check_price with args {}.",
        "trader: Function status [done]: 100000.",
    ]


def test_default_log_sink_prefixes_agent_name(caplog: pytest.LogCaptureFixture) -> None:
    agent = _agent(FakeDecisionClient())

    with caplog.at_level("INFO", logger="agent_relay.agent_core.agent"):
        default_log_sink(agent, "hello")

    assert "[trader] hello" in caplog.text


@pytest.mark.asyncio
async def test_decision_api_errors_propagate() -> None:
    client = FakeDecisionClient()
    client.get_action = AsyncMock(side_effect=DecisionApiError("boom", status_code=503))
    agent = _agent(client)
    await agent.init()

    with pytest.raises(DecisionApiError) as ei:
        await agent.step()
    assert ei.value.status_code == 503


@pytest.mark.asyncio
async def test_step_propagates_body_exception_and_leaves_slot_empty() -> None:
    async def exploding(args, log):
        raise RuntimeError("exchange down")

    worker = Worker(
        id="market",
        name="Market",
        description="Prices",
        functions=[Function(name="check_price", description="Check a price", executable=exploding)],
    )
    client = FakeDecisionClient(
        actions=[
            action("call_function", fn_id="act-1", fn_name="check_price"),
            action("wait"),
        ]
    )
    agent = Agent(name="trader", goal="trade", description="d", workers=[worker], client=client)
    agent._action_result = FunctionResult.done("earlier").to_payload("act-0")
    await agent.init()

    with pytest.raises(RuntimeError, match="exchange down"):
        await agent.step()

    assert agent.pending_result is None
    await agent.step()
    sent = [c["current_action"] for c in client.ops("get_action")]
    assert sent == [{"action_id": "act-0", "action_status": "done", "feedback_message": "earlier"}, None]


@pytest.mark.asyncio
async def test_aclose_closes_client_built_from_key() -> None:
    agent = Agent("apt-123", name="a", goal="g", description="d", workers=_workers())
    http = agent.client._client

    async with agent:
        pass

    assert http.is_closed is True


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_alone() -> None:
    client = FakeDecisionClient()
    client.aclose = AsyncMock()
    agent = _agent(client)

    await agent.aclose()

    client.aclose.assert_not_awaited()
