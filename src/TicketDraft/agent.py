"""Wrapper around the AI agent command line tool."""

from __future__ import annotations

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import AgentError

logger = logging.getLogger(__name__)

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
_ISSUE_KEY_RE = re.compile(r"\b([A-Z]+-\d+)\b")


@dataclass(frozen=True)
class AgentOptions:
    max_turns: int = 100
    skip_permissions: bool = False
    plan_mode: bool = False
    timeout: Optional[float] = None


@dataclass(frozen=True)
class AgentResult:
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def build_command(prompt: str, options: AgentOptions, cli_path: str) -> List[str]:
    args = [cli_path]
    if options.plan_mode:
        args.append("-p")
    if options.skip_permissions:
        args.append("--dangerously-skip-permissions")
    args.extend(["--max-turns", str(options.max_turns)])
    args.append(prompt)
    return args


def run_agent(prompt: str, options: AgentOptions, cli_path: str) -> AgentResult:
    command = build_command(prompt, options, cli_path)
    logger.info("Running agent (%s)...", cli_path)
    logger.debug("Agent arguments: %s", command[1:-1])
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=options.timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise AgentError(f"Agent executable not found: {cli_path}") from exc
    except subprocess.TimeoutExpired as exc:
        raise AgentError(f"Agent timed out after {options.timeout} seconds") from exc
    return AgentResult(stdout=completed.stdout or "", stderr=completed.stderr or "", exit_code=completed.returncode)


def parse_json_payload(output: str) -> Dict[str, Any]:
    """Extract the JSON object an agent printed, optionally inside a fenced block."""
    text = output.strip()
    match = _FENCED_JSON_RE.search(text)
    if match:
        text = match.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AgentError(f"Agent output is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise AgentError("Agent output must be a JSON object")
    return data


def extract_jira_url(text: str, domain: str) -> Optional[str]:
    """Find a browse URL for ``domain`` in ``text``, falling back to a bare issue key."""
    url_pattern = re.compile(rf"https://{re.escape(domain)}/browse/([A-Z]+-\d+)", re.IGNORECASE)
    match = url_pattern.search(text)
    if match:
        return match.group(0)
    match = _ISSUE_KEY_RE.search(text)
    if match:
        return f"https://{domain}/browse/{match.group(1)}"
    return None
