"""
Grafana Data Source Operations

Provides the data source catalog used by dashboard templates, plus list,
read, create, update and delete operations.

Example:
    from gcli.grafana.datasource import Catalog
    catalog = Catalog.fetch(api)
    prometheus_sources = catalog.of_type("prometheus")
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api import GrafanaAPI
from .session import EditSession
from .utils import pretty_json, read_json_file

logger = logging.getLogger(__name__)


@dataclass
class DataSource:
    """One entry of GET /api/datasources."""
    uid: str
    id: int
    name: str
    type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataSource":
        return cls(
            uid=data.get("uid", ""),
            id=data.get("id", 0),
            name=data.get("name", ""),
            type=data.get("type", ""),
        )


class Catalog:
    """Data sources visible to the active organization."""

    def __init__(self, sources: List[DataSource]):
        self.sources = list(sources)

    @classmethod
    def fetch(cls, api: GrafanaAPI) -> "Catalog":
        return cls([DataSource.from_dict(item) for item in api.list_datasources()])

    def find(self, reference: str) -> Optional[DataSource]:
        """
        Look up a dashboard reference.

        Matches on uid first; falls back to name for older dashboards that
        bind data sources by name.
        """
        for source in self.sources:
            if source.uid == reference:
                return source
        for source in self.sources:
            if source.name == reference:
                return source
        return None

    def of_type(self, plugin_id: str) -> List[DataSource]:
        """Data sources of one plugin type, in catalog order."""
        return [source for source in self.sources if source.type == plugin_id]

    def resolve_id(self, id_or_name: str) -> int:
        """
        Resolve a data source name or numeric ID string to its numeric ID.

        Raises:
            ValueError: If nothing matches
        """
        for source in self.sources:
            if str(source.id) == str(id_or_name) or source.name == id_or_name:
                return source.id
        raise ValueError(f"datasource {id_or_name} not found")


# =============================================================================
# Operations
# =============================================================================

def list_datasources(api: GrafanaAPI, details: bool = False) -> List[dict]:
    """Print data sources as a table (or raw JSON with details)."""
    items = api.list_datasources()

    if details:
        print(pretty_json(items))
        return items

    print(f"{'ID':<5} {'OrgID':<5} {'Name':<30} {'Type':<15} URL")
    print("-" * 80)
    for item in items:
        print(
            f"{str(item.get('id', '')):<5} {str(item.get('orgId', '')):<5} "
            f"{str(item.get('name', '')):<30} {str(item.get('type', '')):<15} {item.get('url', '')}"
        )
    return items


def read_datasource(api: GrafanaAPI, id_or_name: str) -> Dict[str, Any]:
    datasource_id = Catalog.fetch(api).resolve_id(id_or_name)
    data = api.get_datasource(datasource_id)
    print(pretty_json(data))
    return data


def create_datasource(
    api: GrafanaAPI,
    file: Optional[Path] = None,
    name: Optional[str] = None,
    ds_type: Optional[str] = None,
    url: Optional[str] = None,
    access: str = "proxy",
    basic_auth: bool = False,
) -> Dict[str, Any]:
    """
    Create a data source from a JSON file or from individual fields.

    Raises:
        ValueError: If neither a file nor all of name/type/url/access are given
    """
    if file:
        body = read_json_file(file)
    else:
        if not (name and ds_type and url and access):
            raise ValueError("required flags missing: --name, --type, --url, --access (or use --file)")
        body = {
            "name": name,
            "type": ds_type,
            "url": url,
            "access": access,
            "basicAuth": basic_auth,
        }

    result = api.create_datasource(body)
    logger.info(f"✅ Created data source: {body.get('name')}")
    print(pretty_json(result))
    return result


def update_datasource(
    api: GrafanaAPI,
    id_or_name: Optional[str] = None,
    file: Optional[Path] = None,
    editor=None,
) -> Optional[Dict[str, Any]]:
    """
    Update a data source from a JSON file, or interactively in an editor.

    With a file, the target ID comes from the file's "id" field, falling
    back to id_or_name. Without a file, the current definition is opened in
    an edit session that retries until the server accepts it.

    Returns:
        The server response, or None if the interactive edit was abandoned
    """
    if file:
        body = read_json_file(file)
        datasource_id = body.get("id")
        if datasource_id is not None and not isinstance(datasource_id, int):
            raise ValueError("id in file must be a number")
        if not datasource_id:
            if not id_or_name:
                raise ValueError("cannot determine datasource ID from file or arguments")
            datasource_id = Catalog.fetch(api).resolve_id(id_or_name)

        result = api.update_datasource(datasource_id, body)
        print(pretty_json(result))
        return result

    if not id_or_name:
        raise ValueError("please specify datasource name/ID for interactive update or use --file")

    datasource_id = Catalog.fetch(api).resolve_id(id_or_name)
    current = api.get_datasource(datasource_id)

    session = EditSession(
        pretty_json(current),
        submit=lambda document: api.update_datasource(datasource_id, document),
        editor=editor,
    )
    result = session.run()
    if result is not None:
        print(f"Data source updated successfully.\n{json.dumps(result)}")
    return result


def delete_datasource(api: GrafanaAPI, id_or_name: str) -> None:
    datasource_id = Catalog.fetch(api).resolve_id(id_or_name)
    api.delete_datasource(datasource_id)
    print(f"Data source deleted: {id_or_name} (ID: {datasource_id})")
