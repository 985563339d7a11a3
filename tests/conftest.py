"""
Pytest configuration and fixtures.

This module configures pytest behavior for different test types:
- Integration tests: Fail on any warnings from the code under test
- Unit tests: Allow warnings

It also provides YouTrack payloads and an in-memory host shared by the tests.
"""

from __future__ import annotations

import copy
import logging
import sys
from typing import TYPE_CHECKING, Any

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

import pytest

from youtrack_copy_context.models import EntityType

if TYPE_CHECKING:
    from collections.abc import Generator

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        if self.test_nodeid not in _integration_test_warnings:
            _integration_test_warnings[self.test_nodeid] = []
        _integration_test_warnings[self.test_nodeid].append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """
    Automatically fail integration tests if any WARNING level logs are emitted from the code under test.

    Integration tests run a whole export session against an in-memory host. A
    clean run must not log warnings; tests for failure paths are unit tests.
    """
    is_integration_test = request.node.get_closest_marker("integration") is not None

    if not is_integration_test:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """
    Hook to check for warnings after test execution and mark test as failed if warnings were detected.
    """
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        test_nodeid = item.nodeid
        warning_records = _integration_test_warnings.get(test_nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]

            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(test_nodeid, None)


ISSUE_PAYLOAD: dict[str, Any] = {
    "id": "2-17",
    "idReadable": "PRJ-1",
    "summary": "Title",
    "description": "d1",
    "reporter": {"login": "ann", "fullName": "Ann"},
    "created": 1705314645000,
    "project": {"shortName": "PRJ", "name": "Project"},
    "tags": [{"name": "backend"}, {"name": "urgent"}],
    "attachments": [
        {
            "id": "80-1",
            "name": "log.txt",
            "url": "https://yt.example.com/api/files/80-1?sign=abc",
            "size": 1536,
            "mimeType": "text/plain",
            "created": 1705314645000,
            "author": {"login": "ann", "fullName": "Ann"},
        }
    ],
    "fields": [
        {"projectCustomField": {"field": {"name": "Priority"}}, "value": {"name": "Major", "$type": "EnumBundleElement"}},
        {"projectCustomField": {"field": {"name": "Estimation"}}, "value": None},
        {"projectCustomField": {"field": {"name": "Fix versions"}}, "value": [{"name": "1.0"}, {"name": "1.1"}]},
    ],
}

ARTICLE_PAYLOAD: dict[str, Any] = {
    "id": "3-5",
    "idReadable": "PRJ-A-5",
    "summary": "How to deploy",
    "content": "Run `make deploy`.",
    "reporter": {"login": "bob"},
    "created": 1705314645000,
    "project": {"shortName": "PRJ", "name": "Project"},
    "tags": [],
    "attachments": [],
}

LINKS_PAYLOAD: list[dict[str, Any]] = [
    {
        "direction": "INWARD",
        "linkType": {"name": "Depend", "targetToSource": "is required for", "sourceToTarget": "depends on"},
        "issues": [{"idReadable": "PRJ-2", "summary": "Other"}],
    },
    {"direction": "OUTWARD", "linkType": {"name": "Relates"}, "issues": []},
]

ACTIVITIES_PAYLOAD: dict[str, Any] = {
    "activities": [
        {
            "author": {"login": "ann", "fullName": "Ann"},
            "timestamp": 1000,
            "category": {"id": "CommentsCategory"},
            "added": [{"text": "hello", "$type": "IssueComment"}],
            "removed": [],
        },
        {
            "author": {"login": "bob"},
            "timestamp": 2000,
            "category": {"id": "IssueUpdatedCategory"},
            "added": [{"text": "not a comment"}],
        },
    ]
}


class FakeHost:
    """In-memory HostAPI returning canned payloads and recording saves."""

    def __init__(
        self,
        *,
        settings: Any = None,  # noqa: ANN401
        template: str = "",
        fail: set[str] | None = None,
    ) -> None:
        self.settings = settings
        self.template = template
        self.fail = fail or set()
        self.saved: list[dict[str, Any]] = []

    @property
    def base_url(self) -> str:
        return "https://yt.example.com"

    def _check(self, name: str) -> None:
        if name in self.fail:
            msg = f"{name} failed"
            raise RuntimeError(msg)

    def fetch_settings(self) -> Any:  # noqa: ANN401
        self._check("fetch_settings")
        return {"settings": self.settings}

    def save_settings(self, payload: dict[str, Any]) -> Any:  # noqa: ANN401
        self._check("save_settings")
        self.saved.append(payload)
        return {"success": True}

    def fetch_entity(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        self._check("fetch_entity")
        payload = ISSUE_PAYLOAD if entity_type is EntityType.ISSUE else ARTICLE_PAYLOAD
        return copy.deepcopy(payload)

    def fetch_links(self, entity_id: str) -> Any:  # noqa: ANN401
        self._check("fetch_links")
        return copy.deepcopy(LINKS_PAYLOAD)

    def fetch_activities(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        self._check("fetch_activities")
        return copy.deepcopy(ACTIVITIES_PAYLOAD)

    def fetch_entity_info(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        self._check("fetch_entity_info")
        return {"result": {"id": entity_id, "url": f"{self.base_url}/issue/{entity_id}", "summary": "Title"}}

    def fetch_template(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        self._check("fetch_template")
        return {"template": self.template}


@pytest.fixture
def issue_payload() -> dict[str, Any]:
    return copy.deepcopy(ISSUE_PAYLOAD)


@pytest.fixture
def article_payload() -> dict[str, Any]:
    return copy.deepcopy(ARTICLE_PAYLOAD)


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()
