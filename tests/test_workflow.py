import json
from types import SimpleNamespace
from unittest import mock

import pytest

from TicketDraft.agent import AgentResult
from TicketDraft.errors import AgentError, JiraError
from TicketDraft.jira_client import CreatedIssue, JiraClient
from TicketDraft.workflow import TicketRequest, create_ticket

SETTINGS = SimpleNamespace(claude_cli_path="agent", agent_max_turns=7, agent_timeout=None)

STORY = {"summary": "Login page", "description": "# Overview\n\n- email field"}
SUBTASKS = {
    "subtasks": [
        {"summary": "Build form", "description": "Use `Form` component"},
        {"summary": "Wire API", "description": ""},
    ]
}


class FakeRunner:
    def __init__(self, *payloads, exit_code=0):
        self.outputs = [json.dumps(p) if isinstance(p, dict) else p for p in payloads]
        self.exit_code = exit_code
        self.calls = []

    def __call__(self, prompt, options, cli_path):
        self.calls.append((prompt, options, cli_path))
        return AgentResult(stdout=self.outputs.pop(0), stderr="err", exit_code=self.exit_code)


@pytest.fixture
def client():
    fake = mock.Mock(spec=JiraClient)
    fake.create_story.return_value = CreatedIssue(key="PROJ-1", id="1", url="https://x/browse/PROJ-1")
    fake.create_subtask.side_effect = lambda parent, summary, description=None: CreatedIssue(
        key=f"PROJ-{summary[:4]}", url="u"
    )
    return fake


def test_full_flow_creates_story_and_subtasks(client):
    runner = FakeRunner(STORY, SUBTASKS)
    request = TicketRequest(source="https://figma.com/design/abc", epic_key="PROJ-100")
    result = create_ticket(request, SETTINGS, client, runner=runner)

    client.create_story.assert_called_once_with("Login page", STORY["description"], issue_type="Story")
    client.link_to_epic.assert_called_once_with("PROJ-1", "PROJ-100")
    assert result.epic_linked
    assert [issue.key for issue in result.subtasks] == ["PROJ-Buil", "PROJ-Wire"]
    # empty description falls back to the summary
    assert client.create_subtask.call_args_list[1].args == ("PROJ-1", "Wire API", "Wire API")

    story_prompt, story_options, cli_path = runner.calls[0]
    assert "https://figma.com/design/abc" in story_prompt
    assert "PROJ-100" in story_prompt
    assert story_options.plan_mode and story_options.skip_permissions
    assert story_options.max_turns == 7
    assert cli_path == "agent"
    decompose_prompt, decompose_options, _ = runner.calls[1]
    assert "Login page" in decompose_prompt
    assert not decompose_options.plan_mode


def test_skip_decomposition_runs_agent_once(client):
    runner = FakeRunner(STORY)
    request = TicketRequest(source="crash log", source_type="log", issue_type="Bug", skip_decomposition=True)
    result = create_ticket(request, SETTINGS, client, runner=runner)
    assert len(runner.calls) == 1
    assert "crash log" in runner.calls[0][0]
    client.create_story.assert_called_once_with("Login page", STORY["description"], issue_type="Bug")
    client.create_subtask.assert_not_called()
    assert result.subtasks == []


def test_epic_link_failure_is_not_fatal(client):
    client.link_to_epic.side_effect = JiraError("nope", status_code=400)
    request = TicketRequest(source="x", source_type="prompt", epic_key="PROJ-9", skip_decomposition=True)
    result = create_ticket(request, SETTINGS, client, runner=FakeRunner(STORY))
    assert not result.epic_linked
    assert result.story.key == "PROJ-1"


def test_confirm_can_skip_subtasks(client):
    seen = []

    def confirm(index, total, subtask):
        seen.append((index, total))
        return subtask["summary"] != "Build form"

    result = create_ticket(TicketRequest(source="x"), SETTINGS, client, runner=FakeRunner(STORY, SUBTASKS), confirm=confirm)
    assert seen == [(1, 2), (2, 2)]
    assert result.skipped == ["Build form"]
    assert len(result.subtasks) == 1


def test_subtask_failure_is_recorded_and_flow_continues(client):
    client.create_subtask.side_effect = [JiraError("boom"), CreatedIssue(key="PROJ-3", url="u")]
    result = create_ticket(TicketRequest(source="x"), SETTINGS, client, runner=FakeRunner(STORY, SUBTASKS))
    assert result.failed == ["Build form"]
    assert [issue.key for issue in result.subtasks] == ["PROJ-3"]


def test_agent_failure_raises(client):
    with pytest.raises(AgentError, match="status 1"):
        create_ticket(TicketRequest(source="x"), SETTINGS, client, runner=FakeRunner("", exit_code=1))
    client.create_story.assert_not_called()


def test_incomplete_story_payload_raises(client):
    with pytest.raises(AgentError, match="summary and description"):
        create_ticket(TicketRequest(source="x"), SETTINGS, client, runner=FakeRunner({"summary": "only"}))


def test_missing_subtasks_array_raises(client):
    with pytest.raises(AgentError, match="subtasks"):
        create_ticket(TicketRequest(source="x"), SETTINGS, client, runner=FakeRunner(STORY, {"tasks": []}))


def test_unknown_source_type(client):
    with pytest.raises(ValueError):
        create_ticket(TicketRequest(source="x", source_type="email"), SETTINGS, client, runner=FakeRunner(STORY))
