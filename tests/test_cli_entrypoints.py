import json
from unittest import mock

import pytest

from TicketDraft import cli
from TicketDraft.errors import ConfigError
from TicketDraft.jira_client import CreatedIssue
from TicketDraft.workflow import WorkflowResult


def test_convert_prints_adf_json(tmp_path, capsys):
    source = tmp_path / "story.md"
    source.write_text("# Title\n\n- **one**", encoding="utf-8")
    cli.main(["convert", str(source)])
    document = json.loads(capsys.readouterr().out)
    assert document["type"] == "doc"
    assert [node["type"] for node in document["content"]] == ["heading", "bulletList"]


def test_preview_renders_text(tmp_path):
    source = tmp_path / "story.md"
    source.write_text("## Heading\n- item", encoding="utf-8")
    with mock.patch.object(cli, "print_markdown") as printer:
        cli.main(["preview", str(source)])
    assert printer.call_args.args[0] == "## Heading\n- item"


def test_missing_input_file_exits_with_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert", str(tmp_path / "missing.md")])
    assert excinfo.value.code == 1


def test_create_builds_request_from_arguments():
    settings = mock.Mock()
    result = WorkflowResult(story=CreatedIssue(key="PROJ-1", url="https://x/browse/PROJ-1"), summary="S")
    with mock.patch.object(cli, "load_settings", return_value=settings), mock.patch.object(
        cli.JiraClient, "from_settings"
    ) as from_settings, mock.patch.object(cli, "create_ticket", return_value=result) as create:
        cli.main(
            [
                "create",
                "https://figma.com/design/abc",
                "-e",
                "PROJ-100",
                "-s",
                "pm",
                "-t",
                "Task",
                "--skip-decomposition",
                "--confirm",
            ]
        )
    request, passed_settings, client = create.call_args.args
    assert passed_settings is settings
    assert client is from_settings.return_value
    assert request.source == "https://figma.com/design/abc"
    assert request.source_type == "figma"
    assert request.epic_key == "PROJ-100"
    assert request.style == "pm"
    assert request.issue_type == "Task"
    assert request.skip_decomposition
    assert create.call_args.kwargs["confirm"] is cli._confirm_subtask


def test_create_reads_log_from_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", mock.Mock(read=mock.Mock(return_value="Traceback: boom")))
    result = WorkflowResult(story=CreatedIssue(key="PROJ-2", url="u"), summary="S")
    with mock.patch.object(cli, "load_settings"), mock.patch.object(cli.JiraClient, "from_settings"), mock.patch.object(
        cli, "create_ticket", return_value=result
    ) as create:
        cli.main(["create", "-", "--source-type", "log"])
    request = create.call_args.args[0]
    assert request.source == "Traceback: boom"
    assert create.call_args.kwargs["confirm"] is None


def test_configuration_error_exits_with_status_one():
    with mock.patch.object(cli, "load_settings", side_effect=ConfigError("Missing required environment variables")):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["create", "https://figma.com/design/abc"])
    assert excinfo.value.code == 1


def test_invalid_style_is_rejected_by_argparse():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["create", "x", "--style", "fancy"])
    assert excinfo.value.code == 2
