from __future__ import annotations


class TicketDraftError(Exception):
    """Base class for errors surfaced to the command line."""


class ConfigError(TicketDraftError):
    pass


class AgentError(TicketDraftError):
    pass


class JiraError(TicketDraftError):
    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
