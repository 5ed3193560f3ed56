import pytest

from src.app_shell.config import missing_env, validate_ops_rules


def test_missing_env(rules):
    rules.ops.required_env = ["BLOG_SECRET_KEY", "REVALIDATE_TOKEN"]

    assert missing_env(rules, {"BLOG_SECRET_KEY": "x"}) == ["REVALIDATE_TOKEN"]
    assert missing_env(rules, {"BLOG_SECRET_KEY": "x", "REVALIDATE_TOKEN": "y"}) == []


def test_validate_exits_on_missing_required(rules):
    rules.ops.required_env = ["BLOG_SECRET_KEY"]

    with pytest.raises(SystemExit) as exc:
        validate_ops_rules(rules, environ={})
    assert exc.value.code == 1


def test_validate_warns_on_missing_optional_secrets(rules, caplog):
    validate_ops_rules(rules, environ={})

    assert "REVALIDATE_TOKEN is not set" in caplog.text
    assert "BLOG_SECRET_KEY is not set" in caplog.text


def test_validate_quiet_when_configured(rules, caplog):
    caplog.set_level("WARNING")
    validate_ops_rules(rules, environ={"BLOG_SECRET_KEY": "s", "REVALIDATE_TOKEN": "t"})

    assert caplog.text == ""
