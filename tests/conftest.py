import copy
import json
import os

import pytest

from utils.settings import Settings

EVENTS_DIR = os.path.join(os.path.dirname(__file__), "events")

VALID_TOKEN = "ExponentPushToken[abc]"


def load_event(name):
    with open(os.path.join(EVENTS_DIR, name), "r", encoding="utf-8") as f:
        return json.load(f)


class StubTicket:
    def __init__(self, status="ok", error=None, message=None):
        self.status = status
        self.message = message
        self.details = None
        self._error = error

    def validate_response(self):
        if self._error is not None:
            raise self._error(self)


class StubSession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class StubPushClient:
    """Records publish() calls; tokens in ``fail_tokens`` raise instead."""

    def __init__(self, fail_tokens=(), ticket_factory=None):
        self.session = StubSession()
        self.fail_tokens = set(fail_tokens)
        self.ticket_factory = ticket_factory or (lambda msg: StubTicket())
        self.published = []

    def publish(self, message):
        self.published.append(message)
        if message.to in self.fail_tokens:
            raise ConnectionError(f"send failed for {message.to}")
        return self.ticket_factory(message)


class StubQuery:
    def __init__(self, table, rows, error):
        self._table = table
        self._rows = rows
        self._error = error
        self.columns = None

    def select(self, columns):
        self.columns = columns
        return self

    def execute(self):
        if self._error is not None:
            raise self._error
        return type("StubResponse", (), {"data": copy.deepcopy(self._rows)})()


class StubSupabase:
    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.queries = []

    def table(self, name):
        query = StubQuery(name, self.rows, self.error)
        self.queries.append((name, query))
        return query


@pytest.fixture
def settings():
    return Settings(
        api_key="test-api-key",
        ssm_parameter_path="/expo-push-api",
        scheduled_title="25日だよ",
        scheduled_body="パートナーに請求しよう",
        max_send_workers=4,
    )


@pytest.fixture
def secrets():
    from utils.secrets import SecretSet

    return SecretSet(
        {
            "supabase-url": "https://example.supabase.co",
            "supabase-key": "service-role-key",
            "expo-access-token": "expo-token",
        }
    )
