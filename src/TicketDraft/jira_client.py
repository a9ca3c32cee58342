"""Jira Cloud REST API v3 client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .errors import JiraError
from .renderer_adf import adf_to_text, text_to_adf

logger = logging.getLogger(__name__)

SUBTASK_ISSUE_TYPE = "Subtask"


@dataclass(frozen=True)
class CreatedIssue:
    key: str
    url: str
    id: str | None = None


@dataclass(frozen=True)
class IssueDetails:
    key: str
    summary: str
    description: str
    issue_type: str
    status: str
    url: str


class JiraClient:
    def __init__(
        self,
        domain: str,
        email: str,
        api_token: str,
        project_key: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.domain = domain
        self.project_key = project_key
        self.timeout = timeout
        self.base_url = f"https://{domain}/rest/api/3"
        self.session = session or requests.Session()
        self.session.auth = (email, api_token)
        self.session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings) -> "JiraClient":
        return cls(
            domain=settings.jira_domain,
            email=settings.jira_email,
            api_token=settings.jira_api_token.get_secret_value(),
            project_key=settings.jira_project_key,
            timeout=settings.jira_timeout,
        )

    def browse_url(self, key: str) -> str:
        return f"https://{self.domain}/browse/{key}"

    def create_story(self, summary: str, description: str, issue_type: str = "Story") -> CreatedIssue:
        fields = {
            "project": {"key": self.project_key},
            "summary": _require_summary(summary),
            "description": text_to_adf(description),
            "issuetype": {"name": issue_type},
        }
        result = self._request("POST", "/issue", {"fields": fields})
        logger.info("Created %s %s", issue_type, result["key"])
        return CreatedIssue(key=result["key"], id=result.get("id"), url=self.browse_url(result["key"]))

    def create_subtask(self, parent_key: str, summary: str, description: Optional[str] = None) -> CreatedIssue:
        fields: Dict[str, Any] = {
            "project": {"key": self.project_key},
            "parent": {"key": parent_key},
            "summary": _require_summary(summary),
            "issuetype": {"name": SUBTASK_ISSUE_TYPE},
        }
        if description:
            fields["description"] = text_to_adf(description)
        result = self._request("POST", "/issue", {"fields": fields})
        logger.info("Created subtask %s under %s", result["key"], parent_key)
        return CreatedIssue(key=result["key"], id=result.get("id"), url=self.browse_url(result["key"]))

    def link_issues(self, inward_issue: str, outward_issue: str, link_type: str = "Relates") -> None:
        self._request(
            "POST",
            "/issueLink",
            {
                "type": {"name": link_type},
                "inwardIssue": {"key": inward_issue},
                "outwardIssue": {"key": outward_issue},
            },
        )

    def link_to_epic(self, story_key: str, epic_key: str) -> None:
        # API v3 attaches an issue to an epic through its parent field
        self._request("PUT", f"/issue/{story_key}", {"fields": {"parent": {"key": epic_key}}})

    def get_issue(self, issue_key: str) -> IssueDetails:
        result = self._request(
            "GET",
            f"/issue/{issue_key}",
            params={"fields": "summary,description,issuetype,status"},
        )
        fields = result.get("fields") or {}
        return IssueDetails(
            key=result["key"],
            summary=fields.get("summary") or "",
            description=adf_to_text(fields.get("description")),
            issue_type=(fields.get("issuetype") or {}).get("name", ""),
            status=(fields.get("status") or {}).get("name", ""),
            url=self.browse_url(result["key"]),
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, json=payload, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise JiraError(f"Jira request failed: {exc}") from exc
        if not response.ok:
            raise JiraError(
                f"Jira API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        if not response.content:
            return {}
        return response.json()


def _require_summary(summary: str) -> str:
    summary = (summary or "").strip()
    if not summary:
        raise ValueError("Issue summary must not be empty")
    return summary
