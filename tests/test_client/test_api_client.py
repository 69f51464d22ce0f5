import pytest
import requests
from unittest.mock import MagicMock

from devhub.client.api import DevHubClient
from devhub.schemas.compound import CompoundForm
from devhub.services.error_handler import NetworkError


def make_response(status_code=200, json_data=None, headers=None, reason="OK"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason
    response.headers = headers or {}
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def http():
    session = MagicMock(spec=requests.Session)
    session.cookies = MagicMock()
    return session


@pytest.fixture
def api(http):
    return DevHubClient("http://devhub.test/", timeout=5, http=http)


def test_fetch_compounds_parses_rows(api, http):
    http.request.return_value = make_response(json_data={"compounds": [
        {"id": 1, "name": "DBU", "properties": {"pKa": 24.3}},
        {"id": 2, "name": "TBD", "properties": {}},
    ]})

    compounds = api.fetch_compounds()

    assert [c.name for c in compounds] == ["DBU", "TBD"]
    assert compounds[0].pka == 24.3
    http.request.assert_called_once_with(
        "GET", "http://devhub.test/api/compounds", headers={}, timeout=5)


def test_null_compound_list_is_empty(api, http):
    http.request.return_value = make_response(json_data={"compounds": None})

    assert api.fetch_compounds() == []


def test_session_token_is_sent_as_bearer(api, http):
    http.request.return_value = make_response(json_data={"session": {
        "email": "chemist@example.com",
        "access_token": "token-123",
        "expires_at": "2030-01-01T00:00:00",
    }})
    api.fetch_session()

    http.request.return_value = make_response(json_data={"compounds": []})
    api.fetch_compounds()

    _, kwargs = http.request.call_args
    assert kwargs["headers"] == {"Authorization": "Bearer token-123"}


def test_save_compound_posts_form(api, http):
    http.request.return_value = make_response(json_data={"id": 7, "name": "DBU", "properties": {}})

    saved = api.save_compound(CompoundForm(name="DBU", pKa="24.3"))

    assert saved.id == 7
    args, kwargs = http.request.call_args
    assert args == ("POST", "http://devhub.test/api/compounds")
    assert kwargs["json"]["pKa"] == "24.3"


def test_error_body_becomes_network_error(api, http):
    http.request.return_value = make_response(
        status_code=400, json_data={"error": "Name is required"}, reason="Bad Request")

    with pytest.raises(NetworkError, match="Name is required"):
        api.save_compound(CompoundForm())


def test_error_without_body_uses_status_line(api, http):
    http.request.return_value = make_response(status_code=502, reason="Bad Gateway")

    with pytest.raises(NetworkError, match="502 Bad Gateway"):
        api.fetch_compounds()


def test_transport_failure_becomes_network_error(api, http):
    http.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(NetworkError, match="GET /api/compounds failed"):
        api.fetch_compounds()


def test_oauth_url_reads_redirect(api, http):
    http.request.return_value = make_response(
        status_code=302, headers={"location": "https://accounts.google.com/auth"})

    assert api.oauth_url("google") == "https://accounts.google.com/auth"
    _, kwargs = http.request.call_args
    assert kwargs["allow_redirects"] is False


def test_sign_out_forgets_token(api, http):
    api.access_token = "token-123"
    http.request.return_value = make_response(status_code=301)

    api.sign_out()

    assert api.access_token is None
    http.cookies.clear.assert_called_once_with()
