"""Story creation pipeline: agent draft, Jira story, optional subtask breakdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from . import prompts as prompt_library
from .agent import AgentOptions, AgentResult, parse_json_payload, run_agent
from .errors import AgentError, JiraError
from .jira_client import CreatedIssue, JiraClient

logger = logging.getLogger(__name__)

AgentRunner = Callable[[str, AgentOptions, str], AgentResult]
ConfirmSubtask = Callable[[int, int, Dict[str, Any]], bool]


@dataclass(frozen=True)
class TicketRequest:
    source: str
    source_type: str = "figma"
    style: str = "technical"
    issue_type: str = "Story"
    epic_key: Optional[str] = None
    extra_instructions: Optional[str] = None
    skip_decomposition: bool = False


@dataclass
class WorkflowResult:
    story: CreatedIssue
    summary: str
    epic_linked: bool = False
    subtasks: List[CreatedIssue] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def create_ticket(
    request: TicketRequest,
    settings,
    client: JiraClient,
    library: Optional[prompt_library.PromptLibrary] = None,
    runner: AgentRunner = run_agent,
    confirm: Optional[ConfirmSubtask] = None,
) -> WorkflowResult:
    if request.source_type not in prompt_library.SOURCE_TYPES:
        raise ValueError(f"Unknown source type: {request.source_type}")
    library = library or prompt_library.PromptLibrary()

    story_prompt = library.render(
        request.style,
        request.source_type,
        source=request.source,
        epic_context=f"This story will be part of epic: {request.epic_key}" if request.epic_key else "",
        extra_instructions=f"Additional instructions: {request.extra_instructions}"
        if request.extra_instructions
        else "",
    )
    logger.info("Step 1: drafting %s from %s input (%s style)", request.issue_type, request.source_type, request.style)
    story = _ask_agent(story_prompt, settings, runner, plan_mode=True)
    summary = story.get("summary")
    description = story.get("description")
    if not isinstance(summary, str) or not summary.strip() or not isinstance(description, str) or not description:
        raise AgentError("Missing required fields: summary and description")

    logger.info("Creating Jira issue: %s", summary)
    created = client.create_story(summary, description, issue_type=request.issue_type)
    logger.info("Jira issue created: %s", created.url)
    result = WorkflowResult(story=created, summary=summary)

    if request.epic_key:
        try:
            client.link_to_epic(created.key, request.epic_key)
            result.epic_linked = True
            logger.info("Linked %s to epic %s", created.key, request.epic_key)
        except JiraError as exc:
            logger.warning("Failed to link to epic %s: %s", request.epic_key, exc)

    if request.skip_decomposition:
        logger.info("Skipping task decomposition")
        return result

    logger.info("Step 2: decomposing %s into subtasks", created.key)
    decompose_prompt = library.render(
        request.style,
        prompt_library.DECOMPOSITION,
        story_summary=summary,
        story_description=description,
    )
    payload = _ask_agent(decompose_prompt, settings, runner, plan_mode=False)
    subtasks = payload.get("subtasks")
    if not isinstance(subtasks, list):
        raise AgentError("Expected subtasks array in response")
    logger.info("Agent suggested %d subtasks", len(subtasks))

    for index, subtask in enumerate(subtasks, start=1):
        if not isinstance(subtask, dict) or not str(subtask.get("summary") or "").strip():
            logger.warning("Ignoring malformed subtask #%d: %r", index, subtask)
            continue
        subtask_summary = str(subtask["summary"]).strip()
        if confirm is not None and not confirm(index, len(subtasks), subtask):
            result.skipped.append(subtask_summary)
            logger.info("Skipped subtask: %s", subtask_summary)
            continue
        subtask_description = str(subtask.get("description") or "").strip() or subtask_summary
        try:
            issue = client.create_subtask(created.key, subtask_summary, subtask_description)
        except (JiraError, ValueError) as exc:
            result.failed.append(subtask_summary)
            logger.warning("Failed to create subtask %r: %s", subtask_summary, exc)
            continue
        result.subtasks.append(issue)
        logger.info("%s: %s", issue.key, subtask_summary)
    return result


def _ask_agent(prompt: str, settings, runner: AgentRunner, plan_mode: bool) -> Dict[str, Any]:
    options = AgentOptions(
        max_turns=settings.agent_max_turns,
        skip_permissions=True,
        plan_mode=plan_mode,
        timeout=settings.agent_timeout,
    )
    outcome = runner(prompt, options, settings.claude_cli_path)
    if not outcome.ok:
        raise AgentError(f"Agent exited with status {outcome.exit_code}: {outcome.stderr.strip()}")
    logger.debug("Agent output: %s", outcome.stdout)
    return parse_json_payload(outcome.stdout)
