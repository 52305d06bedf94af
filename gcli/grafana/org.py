"""
Grafana Organization Operations

Organizations are server-wide: these calls never carry the organization
header. Organizations can be referenced by numeric ID or by name.

Example:
    from gcli.grafana.org import use_org
    use_org(api, store, "Main Org.")
"""

import logging
from typing import Any, Dict, List

from gcli.common.config import ProfileStore

from .api import GrafanaAPI
from .utils import pretty_json

logger = logging.getLogger(__name__)


def resolve_org_id(api: GrafanaAPI, id_or_name: str) -> int:
    """
    Resolve an organization name or numeric ID string to its ID.

    Raises:
        ValueError: If no organization matches
    """
    for org in api.list_orgs():
        if str(org.get("id")) == str(id_or_name) or org.get("name") == id_or_name:
            return org["id"]
    raise ValueError(f"organization {id_or_name} not found")


def list_orgs(api: GrafanaAPI, details: bool = False) -> List[dict]:
    orgs = api.list_orgs()

    if details:
        print(pretty_json(orgs))
        return orgs

    print(f"{'ID':<5} Name")
    print("-" * 40)
    for org in orgs:
        print(f"{str(org.get('id', '')):<5} {org.get('name', '')}")
    return orgs


def use_org(api: GrafanaAPI, store: ProfileStore, id_or_name: str) -> int:
    """Select an organization for subsequent commands."""
    org_id = resolve_org_id(api, id_or_name)
    store.set_active_org(str(org_id))
    print(f"Active organization set to {id_or_name} (ID: {org_id})")
    return org_id


def create_org(api: GrafanaAPI, name: str) -> Dict[str, Any]:
    if not name:
        raise ValueError("--name is required")
    result = api.create_org(name)
    logger.info(f"✅ Created organization: {name}")
    print(pretty_json(result))
    return result


def delete_org(api: GrafanaAPI, id_or_name: str) -> Dict[str, Any]:
    org_id = resolve_org_id(api, id_or_name)
    result = api.delete_org(org_id)
    print(f"Organization deleted: {id_or_name} (ID: {org_id})")
    return result


def update_org(api: GrafanaAPI, id_or_name: str, new_name: str) -> Dict[str, Any]:
    if not new_name:
        raise ValueError("--name is required")
    org_id = resolve_org_id(api, id_or_name)
    result = api.update_org(org_id, new_name)
    print(f"Organization updated: {id_or_name} -> {new_name} (ID: {org_id})")
    return result
