"""
Grafana Dashboard Operations

List, read, export, create, update and delete dashboards.

Example:
    # Export a dashboard as a portable template
    template = export_dashboard(api, "abc123")

    # Create a dashboard from a template, choosing data sources interactively
    create_dashboard(api, Path("exported.json"))

    # Edit a dashboard in $EDITOR until the server accepts it
    update_dashboard(api, "abc123")
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api import GrafanaAPI
from .datasource import Catalog
from .references import discover
from .session import EditSession
from .template import INPUTS_KEY, Template, extract, prompt_overrides, resolve
from .utils import Ask, parse_json_object, pretty_json

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "General"


def update_payload(document: Dict[str, Any], folder_uid: Optional[str] = None,
                   overwrite: bool = True) -> Dict[str, Any]:
    """Wrap a dashboard body for POST /api/dashboards/db."""
    payload = {"dashboard": document, "overwrite": overwrite}
    if folder_uid:
        payload["folderUid"] = folder_uid
    return payload


def list_dashboards(api: GrafanaAPI, details: bool = False) -> List[dict]:
    """Print dashboards of the active organization as a table."""
    items = api.search_dashboards()

    if details:
        print(pretty_json(items))
        return items

    print(f"{'UID':<40} {'Title':<30} {'Folder':<20} Tags")
    print("-" * 120)
    for item in items:
        tags = ", ".join(item.get("tags") or [])
        folder = item.get("folderTitle") or DEFAULT_FOLDER
        print(f"{str(item.get('uid', '')):<40} {str(item.get('title', '')):<30} {folder:<20} {tags}")
    return items


def read_dashboard(api: GrafanaAPI, uid: str) -> Dict[str, Any]:
    """Print a dashboard body (without the meta wrapper)."""
    data = api.get_dashboard(uid)
    dashboard = data.get("dashboard", data) if isinstance(data, dict) else data
    print(pretty_json(dashboard))
    return dashboard


def export_dashboard(api: GrafanaAPI, uid: str, skip_unresolved: bool = False) -> Template:
    """
    Export a dashboard as an external template.

    Data source references are discovered, looked up in this instance's
    catalog and replaced with ${DS_...} inputs.

    Args:
        api: API client
        uid: Dashboard UID
        skip_unresolved: Keep references missing from the catalog instead of failing

    Returns:
        Template (its document is what gets printed)

    Raises:
        ValueError: If a reference can't be resolved or input names collide
    """
    data = api.get_dashboard(uid)
    dashboard = data.get("dashboard") if isinstance(data, dict) else None
    if not isinstance(dashboard, dict):
        raise ValueError(f"dashboard {uid}: response has no dashboard object")

    references = discover(dashboard)
    logger.debug(f"Found {len(references)} data source reference(s): {', '.join(sorted(references))}")

    catalog = Catalog.fetch(api)
    template = extract(dashboard, references, catalog.find, skip_unresolved=skip_unresolved)

    print(pretty_json(template.document))
    return template


def delete_dashboard(api: GrafanaAPI, uid: str) -> None:
    api.delete_dashboard(uid)
    print(f"Dashboard deleted: {uid}")


def update_dashboard(api: GrafanaAPI, uid: str, editor=None) -> Optional[Dict[str, Any]]:
    """
    Edit a dashboard interactively and save it.

    The dashboard is reopened in the editor, with the error prepended, until
    the JSON parses and the server accepts it. Saving an empty file cancels.

    Returns:
        Server response, or None if cancelled
    """
    data = api.get_dashboard(uid)
    dashboard = data.get("dashboard", {})
    folder_uid = (data.get("meta") or {}).get("folderUid")

    session = EditSession(
        pretty_json(dashboard),
        submit=lambda document: api.save_dashboard(update_payload(document, folder_uid)),
        editor=editor,
    )
    result = session.run()

    if result is not None:
        print(f"Dashboard updated successfully.\n{json.dumps(result)}")
    return result


def create_dashboard(api: GrafanaAPI, file: Path, ask: Ask = input) -> Dict[str, Any]:
    """
    Create a dashboard from a JSON file.

    Templates (files with __inputs) are resolved against this instance's
    data sources first. The operator may then override title and uid.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: On invalid JSON or unresolvable template inputs
    """
    file = Path(file)
    if not file.exists():
        raise FileNotFoundError(f"File not found: {file}")

    raw = file.read_bytes()
    declared = parse_json_object(raw, source=str(file)).get(INPUTS_KEY)
    catalog = Catalog.fetch(api) if declared else Catalog([])
    document = resolve(raw, catalog, ask=ask)
    document = prompt_overrides(document, ask=ask)

    logger.info(f"Creating dashboard: {document.get('title')}")
    result = api.save_dashboard(update_payload(document, overwrite=False))

    print(f"Dashboard created successfully.\n{json.dumps(result)}")
    return result
