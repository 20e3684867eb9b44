import json
from unittest import mock

import pytest

from gitlab_browser import cli


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("GITLAB_PERSONAL_TOKEN", raising=False)
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.delenv("GITLAB_URL", raising=False)
    return tmp_path


def test_missing_token_exits_before_ui(home, capsys):
    with mock.patch.object(cli, "run_browser") as run_browser:
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])

    assert excinfo.value.code == 1
    assert "GITLAB_PERSONAL_TOKEN" in capsys.readouterr().err
    run_browser.assert_not_called()


def test_valid_config_launches_browser(home, monkeypatch):
    monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "t")
    with mock.patch.object(cli, "run_browser") as run_browser:
        cli.main(["--filter", "al"])

    config, args = run_browser.call_args.args
    assert config.gitlab_url == "https://gitlab.com"
    assert args.filter == "al"


def test_config_command_saves_url(home, capsys):
    cli.main(["config", "--gitlab-url", "https://gitlab.example.com"])

    saved = json.loads((home / ".config" / "gitlab-browser" / "config.json").read_text())
    assert saved["gitlab_url"] == "https://gitlab.example.com"
    assert "Configuration saved" in capsys.readouterr().out


def test_config_show_works_without_token(home, capsys):
    cli.main(["config", "--show"])

    out = capsys.readouterr().out
    assert "Token: Not set" in out


def test_config_show_reports_bad_numeric_setting(home, capsys):
    config_dir = home / ".config" / "gitlab-browser"
    config_dir.mkdir(parents=True)
    (config_dir / "config.json").write_text(json.dumps({"per_page": "lots"}))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["config", "--show"])

    assert excinfo.value.code == 1
    assert "Invalid numeric setting" in capsys.readouterr().err
