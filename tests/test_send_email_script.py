"""
Smoke tests for scripts/send_email.py (dry-run and failure exit codes).
"""

import importlib.util
from pathlib import Path
from unittest.mock import patch

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "send_email.py"


@pytest.fixture
def script(monkeypatch):
    monkeypatch.setenv("USESEND_API_KEY", "us_script_key")
    spec = importlib.util.spec_from_file_location("send_email_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_dry_run_builds_without_sending(script, tmp_path):
    attachment = tmp_path / "invoice.pdf"
    attachment.write_bytes(b"%PDF")
    with patch("usesend_transport.client.UsesendClient.send_email") as send_email:
        code = script.main(
            [
                "--from", "a@x.com",
                "--to", "b@y.com",
                "--subject", "Hello",
                "--html", "<p>Hi</p>",
                "--attach", str(attachment),
                "--dry-run",
            ]
        )
    assert code == 0
    send_email.assert_not_called()


def test_invalid_input_exits_non_zero(script):
    code = script.main(["--from", "broken", "--to", "b@y.com", "--subject", "s", "--text", "t", "--dry-run"])
    assert code == 1


def test_missing_api_key_exits_with_one_line_error(script, monkeypatch, caplog):
    monkeypatch.delenv("USESEND_API_KEY")
    monkeypatch.chdir(Path(__file__).resolve().parent)
    code = script.main(["--from", "a@x.com", "--to", "b@y.com", "--subject", "s", "--text", "t", "--dry-run"])
    assert code == 2
    assert "USESEND_API_KEY" in caplog.text


def test_build_message_maps_arguments(script):
    args = script.build_parser().parse_args(
        ["--from", "a@x.com", "--to", "b@y.com", "--to", "c@y.com", "--subject", "s", "--text", "t",
         "--attach", "https://example.com/a.pdf"]
    )
    message = script.build_message(args)
    assert message.to == ["b@y.com", "c@y.com"]
    assert message.attachments == [{"path": "https://example.com/a.pdf"}]
