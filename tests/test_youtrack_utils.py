"""Tests for the YouTrack REST client and configuration lookup."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from youtrack_copy_context import youtrack_utils as ytu
from youtrack_copy_context.exceptions import HostRequestError
from youtrack_copy_context.models import EntityType
from youtrack_copy_context.utils import InvalidPassPathError


def make_response(status_code: int = 200, payload: Any = None) -> MagicMock:  # noqa: ANN401
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    response.text = "error body"
    return response


def make_client(*responses: MagicMock) -> tuple[ytu.YouTrackClient, MagicMock]:
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    client = ytu.YouTrackClient("https://yt.example.com/", "perm:token", app_name="copy-context", session=session)
    return client, session


@pytest.mark.unit
class TestYouTrackClient:
    def test_headers_and_base_url(self) -> None:
        client, session = make_client()
        assert client.base_url == "https://yt.example.com"
        assert session.headers["Authorization"] == "Bearer perm:token"
        assert session.headers["Accept"] == "application/json"

    def test_fetch_issue_uses_issue_fields(self) -> None:
        client, session = make_client(make_response(payload={"idReadable": "PRJ-1"}))
        assert client.fetch_entity(EntityType.ISSUE, "PRJ-1") == {"idReadable": "PRJ-1"}

        args, kwargs = session.request.call_args
        assert args == ("GET", "https://yt.example.com/api/issues/PRJ-1")
        assert kwargs["params"] == {"fields": ytu.ISSUE_FIELDS}
        assert kwargs["timeout"] == ytu.DEFAULT_TIMEOUT_SECONDS
        assert "description" in ytu.ISSUE_FIELDS
        assert "projectCustomField" in ytu.ISSUE_FIELDS

    def test_fetch_article_uses_article_fields(self) -> None:
        client, session = make_client(make_response(payload={}))
        client.fetch_entity(EntityType.ARTICLE, "PRJ-A-5")

        args, kwargs = session.request.call_args
        assert args == ("GET", "https://yt.example.com/api/articles/PRJ-A-5")
        assert "content" in kwargs["params"]["fields"]
        assert "fields(" not in kwargs["params"]["fields"]

    def test_attachment_urls_become_absolute(self) -> None:
        payload = {"attachments": [{"url": "/api/files/1?sign=x"}, {"url": "https://cdn/f"}, {"url": None}]}
        client, _ = make_client(make_response(payload=payload))
        data = client.fetch_entity(EntityType.ISSUE, "PRJ-1")
        assert [attachment["url"] for attachment in data["attachments"]] == [
            "https://yt.example.com/api/files/1?sign=x",
            "https://cdn/f",
            None,
        ]

    def test_fetch_links(self) -> None:
        client, session = make_client(make_response(payload=[]))
        assert client.fetch_links("PRJ-1") == []
        args, kwargs = session.request.call_args
        assert args[1] == "https://yt.example.com/api/issues/PRJ-1/links"
        assert kwargs["params"] == {"fields": ytu.LINK_FIELDS}

    def test_fetch_activities_requests_comment_categories(self) -> None:
        client, session = make_client(make_response(payload={"activities": []}))
        client.fetch_activities(EntityType.ARTICLE, "PRJ-A-5")
        args, kwargs = session.request.call_args
        assert args[1] == "https://yt.example.com/api/articles/PRJ-A-5/activitiesPage"
        assert "CommentTextCategory" in kwargs["params"]["categories"]
        assert kwargs["params"]["fields"] == ytu.ACTIVITY_FIELDS

    def test_settings_endpoints(self) -> None:
        client, session = make_client(make_response(payload={"settings": None}), make_response(payload={"success": True}))
        assert client.fetch_settings() == {"settings": None}
        assert client.save_settings({"settings": {"id": True}}) == {"success": True}

        get_call, post_call = session.request.call_args_list
        url = "https://yt.example.com/api/extensionEndpoints/copy-context/backend-global/user-settings"
        assert get_call.args == ("GET", url)
        assert post_call.args == ("POST", url)
        assert post_call.kwargs["json"] == {"settings": {"id": True}}

    def test_template_endpoint_is_entity_scoped(self) -> None:
        client, session = make_client(make_response(payload={"template": "{{id}}"}))
        assert client.fetch_template(EntityType.ISSUE, "PRJ-1") == {"template": "{{id}}"}
        assert session.request.call_args.args[1] == (
            "https://yt.example.com/api/issues/PRJ-1/extensionEndpoints/copy-context/backend/get-template"
        )

    def test_entity_info(self) -> None:
        client, _ = make_client(make_response(payload={"idReadable": "PRJ-A-5", "summary": "Deploy"}))
        assert client.fetch_entity_info(EntityType.ARTICLE, "3-5") == {
            "id": "PRJ-A-5",
            "url": "https://yt.example.com/articles/PRJ-A-5",
            "summary": "Deploy",
        }

    def test_entity_info_defaults(self) -> None:
        client, _ = make_client(make_response())
        assert client.fetch_entity_info(EntityType.ISSUE, "PRJ-1") == {
            "id": "PRJ-1",
            "url": "https://yt.example.com/issue/PRJ-1",
            "summary": "",
        }

    def test_http_error_raises(self) -> None:
        client, _ = make_client(make_response(status_code=404, payload={}))
        with pytest.raises(HostRequestError, match="status 404"):
            client.fetch_links("PRJ-1")

    def test_network_error_raises(self) -> None:
        session = MagicMock()
        session.headers = {}
        session.request.side_effect = requests.ConnectionError("refused")
        client = ytu.YouTrackClient("https://yt.example.com", session=session)
        with pytest.raises(HostRequestError, match="refused"):
            client.fetch_settings()

    def test_invalid_json_raises(self) -> None:
        response = make_response(payload={})
        response.json.side_effect = ValueError("bad json")
        client, _ = make_client(response)
        with pytest.raises(HostRequestError, match="invalid JSON"):
            client.fetch_settings()

    def test_entity_id_is_quoted(self) -> None:
        client, session = make_client(make_response(payload={}))
        client.fetch_entity(EntityType.ISSUE, "a/b")
        assert session.request.call_args.args[1] == "https://yt.example.com/api/issues/a%2Fb"


@pytest.mark.unit
class TestConfiguration:
    def test_token_from_pass_path(self) -> None:
        with patch("youtrack_copy_context.youtrack_utils.utils.get_pass_value", return_value="from-pass") as mock_pass:
            assert ytu.get_token("custom/path") == "from-pass"
        mock_pass.assert_called_once_with("custom/path")

    def test_token_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YOUTRACK_TOKEN", "from-env")
        assert ytu.get_token() == "from-env"

    def test_token_from_default_pass_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("YOUTRACK_TOKEN", raising=False)
        with patch("youtrack_copy_context.youtrack_utils.utils.get_pass_value", return_value="default") as mock_pass:
            assert ytu.get_token() == "default"
        mock_pass.assert_called_once_with("youtrack/cli/token")

    def test_no_token_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("YOUTRACK_TOKEN", raising=False)
        with patch(
            "youtrack_copy_context.youtrack_utils.utils.get_pass_value",
            side_effect=InvalidPassPathError("missing"),
        ):
            assert ytu.get_token() is None

    def test_base_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YOUTRACK_URL", "https://yt.example.com/")
        assert ytu.get_base_url() == "https://yt.example.com"
        assert ytu.get_base_url("https://other/") == "https://other"

    def test_missing_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("YOUTRACK_URL", raising=False)
        with pytest.raises(ValueError, match="YOUTRACK_URL"):
            ytu.get_base_url()
