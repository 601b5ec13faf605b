import json
import logging

import pytest

from utils.errors import InvalidEnvVar, MissingEnvVar
from utils.logger import JsonFormatter, get_logger
from utils.settings import DEFAULT_SCHEDULED_BODY, DEFAULT_SCHEDULED_TITLE, load_settings


def test_load_settings_defaults():
    settings = load_settings({"API_KEY": "k", "SSM_PARAMETER_PATH": "/expo-push-api"})

    assert settings.api_key == "k"
    assert settings.ssm_parameter_path == "/expo-push-api"
    assert settings.aws_region == "us-east-1"
    assert settings.users_table == "users"
    assert settings.push_token_column == "push_token"
    assert settings.scheduled_title == DEFAULT_SCHEDULED_TITLE
    assert settings.scheduled_body == DEFAULT_SCHEDULED_BODY
    assert settings.provider_token_secret == "expo-access-token"


def test_load_settings_overrides():
    settings = load_settings(
        {
            "API_KEY": "k",
            "SSM_PARAMETER_PATH": "/p",
            "USERS_TABLE": "profiles",
            "PUSH_TOKEN_COLUMN": "expo_push_token",
            "MAX_SEND_WORKERS": "3",
            "SCHEDULED_TITLE": "Reminder",
        }
    )

    assert settings.users_table == "profiles"
    assert settings.push_token_column == "expo_push_token"
    assert settings.max_send_workers == 3
    assert settings.scheduled_title == "Reminder"


def test_load_settings_reports_all_missing():
    with pytest.raises(MissingEnvVar) as exc:
        load_settings({})

    assert "API_KEY" in str(exc.value)
    assert "SSM_PARAMETER_PATH" in str(exc.value)
    assert exc.value.status_code == 500


@pytest.mark.parametrize("value", ["zero", "0", "-2"])
def test_load_settings_rejects_bad_worker_count(value):
    with pytest.raises(InvalidEnvVar) as exc:
        load_settings({"API_KEY": "k", "SSM_PARAMETER_PATH": "/p", "MAX_SEND_WORKERS": value})

    assert exc.value.name == "MAX_SEND_WORKERS"
    assert exc.value.value == value
    assert "Invalid value" in str(exc.value)
    assert exc.value.status_code == 500


def test_settings_are_immutable():
    settings = load_settings({"API_KEY": "k", "SSM_PARAMETER_PATH": "/p"})

    with pytest.raises(AttributeError):
        settings.api_key = "other"


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("push", logging.INFO, __file__, 1, "push.sent", None, None)
    record.count = 3

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "push.sent"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "push"
    assert payload["count"] == 3


def test_get_logger_configures_once():
    first = get_logger("test-once")
    second = get_logger("test-once")

    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False
