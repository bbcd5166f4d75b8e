from __future__ import annotations

from typing import List

import pytest
from fakes import FakeDecisionClient, action

from agent_relay.agent_core.errors import (
    AgentNotInitializedError,
    ConfigurationError,
    FunctionNotFoundError,
)
from agent_relay.agent_core.function import Function, FunctionArg, FunctionResult
from agent_relay.agent_core.worker import Worker
from agent_relay.decision_api.errors import DecisionApiError


def _post_tweet() -> Function:
    async def body(args, log):
        log(f"posting {args['text']}")
        return FunctionResult.done(f"posted: {args['text']}")

    return Function(
        name="post_tweet",
        description="Post a tweet",
        executable=body,
        args=[FunctionArg("text", "Tweet text")],
    )


def _bound_worker(client: FakeDecisionClient, messages: List[str], **kwargs) -> Worker:
    worker = Worker(id="twitter", name="Twitter", description="Posts tweets", functions=[_post_tweet()], **kwargs)
    worker.set_agent_id("agent-1")
    worker.set_logger(messages.append)
    worker.set_client(client)
    return worker


def test_duplicate_function_names_are_rejected() -> None:
    with pytest.raises(ConfigurationError, match="post_tweet"):
        Worker(id="w", name="W", description="d", functions=[_post_tweet(), _post_tweet()])


def test_get_function_unknown_name() -> None:
    worker = Worker(id="twitter", name="Twitter", description="d", functions=[_post_tweet()])

    assert worker.get_function("post_tweet").name == "post_tweet"
    with pytest.raises(FunctionNotFoundError) as ei:
        worker.get_function("like_tweet")
    assert "like_tweet" in str(ei.value)
    assert "twitter" in str(ei.value)


@pytest.mark.asyncio
async def test_step_requires_agent_binding() -> None:
    worker = Worker(id="twitter", name="Twitter", description="d", functions=[_post_tweet()])

    with pytest.raises(AgentNotInitializedError, match="Agent not initialized"):
        await worker.step("sub-1")


@pytest.mark.asyncio
async def test_step_requires_client_binding() -> None:
    worker = Worker(id="twitter", name="Twitter", description="d", functions=[_post_tweet()])
    worker.set_agent_id("agent-1")

    with pytest.raises(AgentNotInitializedError, match="Decision client not initialized"):
        await worker.run_task("post something")


@pytest.mark.asyncio
async def test_environment_defaults_to_empty() -> None:
    worker = Worker(id="twitter", name="Twitter", description="d", functions=[])

    assert await worker.environment() == {}


@pytest.mark.asyncio
async def test_step_executes_function_and_reports_result_next_round() -> None:
    client = FakeDecisionClient(
        task_actions=[
            action("call_function", fn_id="a1", fn_name="post_tweet", args={"text": {"value": "gm"}}),
            action("wait"),
        ]
    )
    messages: List[str] = []

    async def env():
        return {"followers": 10}

    worker = _bound_worker(client, messages, get_environment=env)

    assert await worker.step("sub-1") is True
    assert await worker.step("sub-1") is False

    first, second = client.ops("get_task_action")
    assert first["action_result"] is None
    assert first["environment"] == {"followers": 10}
    assert second["action_result"] == {"action_id": "a1", "action_status": "done", "feedback_message": "posted: gm"}
    assert messages == ["posting gm"]


@pytest.mark.asyncio
async def test_step_verbose_logs_through_sink() -> None:
    client = FakeDecisionClient(
        task_actions=[action("call_function", fn_id="a1", fn_name="post_tweet", args={"text": {"value": "gm"}})]
    )
    messages: List[str] = []
    worker = _bound_worker(client, messages)

    await worker.step("sub-1", verbose=True)

    assert messages == [
        "Environment State: {}",
        'Performing function post_tweet with args {"text": {"value": "gm"}}.',
        "posting gm",
        "Function status: done - posted: gm.",
    ]


@pytest.mark.asyncio
async def test_step_unknown_function_raises() -> None:
    client = FakeDecisionClient(task_actions=[action("call_function", fn_id="a1", fn_name="like_tweet")])
    worker = _bound_worker(client, [])

    with pytest.raises(FunctionNotFoundError):
        await worker.step("sub-1")


@pytest.mark.asyncio
async def test_run_task_steps_until_non_function_action() -> None:
    client = FakeDecisionClient(
        task_actions=[
            action("call_function", fn_id="a1", fn_name="post_tweet", args={"text": {"value": "one"}}),
            action("continue_function", fn_id="a2", fn_name="post_tweet", args={"text": {"value": "two"}}),
            action("go_to", location_id="elsewhere"),
        ]
    )
    messages: List[str] = []
    worker = _bound_worker(client, messages)

    submission_id = await worker.run_task("post twice")

    assert submission_id == "sub-1"
    assert client.ops("set_task") == [{"op": "set_task", "agent_id": "agent-1", "task": "post twice"}]
    assert [c["submission_id"] for c in client.ops("get_task_action")] == ["sub-1", "sub-1", "sub-1"]
    assert client.ops("get_task_action")[2]["action_result"]["action_id"] == "a2"
    assert messages == ["posting one", "posting two"]


@pytest.mark.asyncio
async def test_interrupted_task_result_is_not_reported_for_next_task() -> None:
    client = FakeDecisionClient(
        task_actions=[
            action("call_function", fn_id="A-1", fn_name="post_tweet", args={"text": {"value": "a"}}),
            action("wait"),
        ]
    )
    replay = client.get_task_action
    attempts = {"n": 0}

    async def flaky_get_task_action(*args, **kwargs):
        attempts["n"] += 1
        if attempts["n"] == 2:
            raise DecisionApiError("service unavailable", status_code=503)
        return await replay(*args, **kwargs)

    client.get_task_action = flaky_get_task_action
    worker = _bound_worker(client, [])

    with pytest.raises(DecisionApiError):
        await worker.run_task("task A")
    await worker.run_task("task B")

    first_of_b = client.ops("get_task_action")[-1]
    assert first_of_b["action_result"] is None
