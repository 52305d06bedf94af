"""Tests for the HTTP client (requests is patched, nothing leaves the process)."""

import json

import pytest
import requests

from gcli.common.config import Profile
from gcli.grafana import api as api_module
from gcli.grafana.api import ORG_HEADER, GrafanaAPI


def make_response(status=200, body=b"", reason="OK"):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    return response


@pytest.fixture
def calls(monkeypatch):
    """Record outgoing requests; tests set calls.response to the reply."""

    class Recorder(list):
        response = make_response(200, {})

    recorder = Recorder()

    def fake_request(method, url, **kwargs):
        recorder.append({"method": method, "url": url, **kwargs})
        return recorder.response

    monkeypatch.setattr(api_module.requests, "request", fake_request)
    return recorder


@pytest.fixture
def profile():
    return Profile(name="local", url="http://localhost:3000/", user="admin", password="secret")


class TestRequest:

    def test_basic_auth_and_url(self, calls, profile):
        GrafanaAPI(profile).request("get", "api/health")

        call = calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "http://localhost:3000/api/health"
        assert call["auth"] == ("admin", "secret")
        assert call["data"] is None

    def test_org_header_when_selected(self, calls, profile):
        GrafanaAPI(profile, org_id="2").list_datasources()
        assert calls[0]["headers"][ORG_HEADER] == "2"

    def test_no_org_header_without_selection(self, calls, profile):
        GrafanaAPI(profile, org_id="").list_datasources()
        assert ORG_HEADER not in calls[0]["headers"]

    def test_org_calls_are_never_scoped(self, calls, profile):
        api = GrafanaAPI(profile, org_id="2")
        calls.response = make_response(200, [])
        api.list_orgs()
        api.create_org("Team C")
        assert all(ORG_HEADER not in call["headers"] for call in calls)

    def test_json_body(self, calls, profile):
        GrafanaAPI(profile).save_dashboard({"dashboard": {"title": "T"}, "overwrite": True})

        call = calls[0]
        assert call["url"].endswith("/api/dashboards/db")
        assert call["headers"]["Content-Type"] == "application/json"
        assert json.loads(call["data"]) == {"dashboard": {"title": "T"}, "overwrite": True}

    def test_empty_body_is_none(self, calls, profile):
        calls.response = make_response(200, b"")
        assert GrafanaAPI(profile).delete_dashboard("abc") is None

    def test_error_carries_status_and_body(self, calls, profile):
        calls.response = make_response(412, b'{"message":"version-mismatch"}', reason="Precondition Failed")

        with pytest.raises(requests.HTTPError) as excinfo:
            GrafanaAPI(profile).save_dashboard({"dashboard": {}})

        message = str(excinfo.value)
        assert "412" in message
        assert "version-mismatch" in message
        assert excinfo.value.response.status_code == 412

    def test_invalid_json_on_success(self, calls, profile):
        calls.response = make_response(200, b"<html>")
        with pytest.raises(ValueError, match="invalid JSON"):
            GrafanaAPI(profile).list_datasources()

    def test_raw_does_not_raise(self, calls, profile):
        calls.response = make_response(500, b"boom", reason="Internal Server Error")
        response = GrafanaAPI(profile).raw("GET", "/api/health")
        assert response.status_code == 500


class TestEndpoints:

    @pytest.mark.parametrize("call, method, path", [
        (lambda api: api.search_dashboards(), "GET", "/api/search?type=dash-db"),
        (lambda api: api.get_dashboard("u1"), "GET", "/api/dashboards/uid/u1"),
        (lambda api: api.get_datasource(4), "GET", "/api/datasources/4"),
        (lambda api: api.update_datasource(4, {}), "PUT", "/api/datasources/4"),
        (lambda api: api.delete_datasource(4), "DELETE", "/api/datasources/4"),
        (lambda api: api.update_org(2, "B"), "PUT", "/api/orgs/2"),
        (lambda api: api.delete_org(2), "DELETE", "/api/orgs/2"),
    ])
    def test_routes(self, calls, profile, call, method, path):
        call(GrafanaAPI(profile))
        assert calls[0]["method"] == method
        assert calls[0]["url"] == "http://localhost:3000" + path
