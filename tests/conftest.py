"""Shared test fixtures."""

import copy

import pytest
import requests

from gcli.common.config import Profile, ProfileStore
from gcli.grafana.datasource import Catalog, DataSource


# ── Sample Data ──────────────────────────────────────────────────────────

DATASOURCES = [
    {"id": 1, "uid": "P1809F7CD0C75ACF3", "name": "Prom", "type": "prometheus", "orgId": 1, "url": "http://prom:9090"},
    {"id": 2, "uid": "LOKI01", "name": "Logs", "type": "loki", "orgId": 1, "url": "http://loki:3100"},
    {"id": 3, "uid": "PROM02", "name": "Prom Staging", "type": "prometheus", "orgId": 1, "url": "http://prom-stg:9090"},
]

DASHBOARD = {
    "id": 42,
    "uid": "abc123",
    "version": 7,
    "title": "Service Overview",
    "templating": {
        "list": [
            {"name": "ds", "type": "datasource", "datasource": "$datasource"},
            {"name": "job", "type": "query", "datasource": {"type": "prometheus", "uid": "P1809F7CD0C75ACF3"}},
        ]
    },
    "panels": [
        {
            "id": 1,
            "title": "Requests",
            "datasource": {"type": "prometheus", "uid": "P1809F7CD0C75ACF3"},
            "targets": [{"refId": "A", "expr": "rate(http_requests_total[5m])",
                         "datasource": {"type": "prometheus", "uid": "P1809F7CD0C75ACF3"}}],
        },
        {
            "id": 2,
            "type": "row",
            "panels": [
                {"id": 3, "title": "Errors", "datasource": "Logs", "description": "see P1809F7CD0C75ACF3"},
                {"id": 4, "title": "Annotations", "datasource": "grafana"},
            ],
        },
    ],
}

TEMPLATE = {
    "__inputs": [
        {"name": "DS_PROM", "label": "Prom", "type": "datasource", "pluginId": "prometheus"},
    ],
    "__requires": [
        {"type": "grafana", "id": "grafana", "name": "Grafana", "version": "1.0.0"},
        {"type": "datasource", "id": "prometheus", "name": "prometheus", "version": "1.0.0"},
    ],
    "title": "Service Overview",
    "panels": [
        {"id": 1, "title": "Requests", "datasource": "${DS_PROM}",
         "targets": [{"refId": "A", "datasource": {"type": "prometheus", "uid": "${DS_PROM}"}}]},
    ],
}


def http_error(status=400, reason="Bad Request", text='{"message":"bad"}'):
    """Build an HTTPError the way GrafanaAPI.request raises it."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = text.encode("utf-8")
    return requests.HTTPError(f"{status} {reason}: {text}", response=response)


class FakeAPI:
    """In-memory stand-in for GrafanaAPI recording every write."""

    def __init__(self, datasources=None, dashboards=None, orgs=None):
        self.datasources = copy.deepcopy(DATASOURCES if datasources is None else datasources)
        self.dashboards = copy.deepcopy(dashboards or {})
        self.orgs = copy.deepcopy(orgs or [{"id": 1, "name": "Main Org."}, {"id": 2, "name": "Team B"}])
        self.saved = []
        self.updated = []
        self.created = []
        self.deleted = []
        self.failures = []

    def _maybe_fail(self):
        if self.failures:
            raise self.failures.pop(0)

    # Dashboards
    def search_dashboards(self):
        return [{"uid": uid, "title": data["dashboard"].get("title"), "tags": []}
                for uid, data in self.dashboards.items()]

    def get_dashboard(self, uid):
        if uid not in self.dashboards:
            raise http_error(404, "Not Found", '{"message":"Dashboard not found"}')
        return copy.deepcopy(self.dashboards[uid])

    def save_dashboard(self, payload):
        self._maybe_fail()
        self.saved.append(copy.deepcopy(payload))
        return {"status": "success", "uid": payload["dashboard"].get("uid", "generated")}

    def delete_dashboard(self, uid):
        self.deleted.append(("dashboard", uid))
        return {"title": uid}

    # Data sources
    def list_datasources(self):
        return copy.deepcopy(self.datasources)

    def get_datasource(self, datasource_id):
        for item in self.datasources:
            if item["id"] == datasource_id:
                return copy.deepcopy(item)
        raise http_error(404, "Not Found", '{"message":"Data source not found"}')

    def create_datasource(self, body):
        self.created.append(copy.deepcopy(body))
        return {"id": 99, "message": "Datasource added", "name": body.get("name")}

    def update_datasource(self, datasource_id, body):
        self._maybe_fail()
        self.updated.append((datasource_id, copy.deepcopy(body)))
        return {"id": datasource_id, "message": "Datasource updated"}

    def delete_datasource(self, datasource_id):
        self.deleted.append(("datasource", datasource_id))
        return {"message": "Data source deleted"}

    # Organizations
    def list_orgs(self):
        return copy.deepcopy(self.orgs)

    def create_org(self, name):
        self.created.append({"org": name})
        return {"orgId": 3, "message": "Organization created"}

    def update_org(self, org_id, name):
        self.updated.append((org_id, {"name": name}))
        return {"message": "Organization updated"}

    def delete_org(self, org_id):
        self.deleted.append(("org", org_id))
        return {"message": "Organization deleted"}


class Answers:
    """Scripted operator answers; records every prompt."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {prompt!r}")
        return self.answers.pop(0)


class ScriptedEditor:
    """Editor replacement: each call applies the next edit function to the file text."""

    def __init__(self, *edits):
        self.edits = list(edits)
        self.seen = []
        self.paths = []

    def __call__(self, path):
        text = path.read_text(encoding="utf-8")
        self.seen.append(text)
        self.paths.append(path)
        edit = self.edits.pop(0)
        path.write_text(edit(text), encoding="utf-8")


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def dashboard():
    return copy.deepcopy(DASHBOARD)


@pytest.fixture
def template():
    return copy.deepcopy(TEMPLATE)


@pytest.fixture
def catalog():
    return Catalog([DataSource.from_dict(item) for item in DATASOURCES])


@pytest.fixture
def fake_api():
    return FakeAPI(dashboards={"abc123": {"dashboard": copy.deepcopy(DASHBOARD),
                                          "meta": {"folderUid": "folder-1"}}})


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "gcli" / "config.yaml"
    monkeypatch.setenv("GCLI_CONFIG_PATH", str(path))
    return path


@pytest.fixture
def store(config_path):
    store = ProfileStore()
    store.save_profile(Profile(name="local", url="http://localhost:3000", user="admin", password="secret"))
    store.set_active("local")
    return store
