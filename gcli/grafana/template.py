"""
Portable dashboard templates.

Export turns a dashboard bound to this instance's data sources into a
template that can be imported elsewhere:

    {
      "__inputs":   [{"name": "DS_PROM", "label": "Prom", "type": "datasource", "pluginId": "prometheus"}],
      "__requires": [{"type": "grafana", ...}, {"type": "datasource", "id": "prometheus", ...}],
      "title": "...",
      "panels": [{"datasource": "${DS_PROM}", ...}]
    }

Import reverses it: each input is mapped to a data source chosen by the
operator, placeholders are replaced, and the template metadata is dropped.

Both directions rewrite only datasource bindings (see references.rebind),
never arbitrary text, so identifiers that are substrings of one another or
of unrelated strings are safe.
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from .datasource import Catalog, DataSource
from .references import rebind
from .utils import Ask, choose, confirm, parse_json_object

logger = logging.getLogger(__name__)

INPUTS_KEY = "__inputs"
REQUIRES_KEY = "__requires"
INPUT_TYPE_DATASOURCE = "datasource"
INPUT_PREFIX = "DS_"
PLACEHOLDER_VERSION = "1.0.0"
INSTANCE_FIELDS = ("id", "uid", "version")

GRAFANA_REQUIREMENT = {
    "type": "grafana",
    "id": "grafana",
    "name": "Grafana",
    "version": PLACEHOLDER_VERSION,
}


@dataclass
class TemplateInput:
    name: str
    label: str
    plugin_id: str
    type: str = INPUT_TYPE_DATASOURCE

    def to_dict(self) -> dict:
        return {"name": self.name, "label": self.label, "type": self.type, "pluginId": self.plugin_id}


@dataclass
class TemplateRequirement:
    type: str
    id: str
    name: str
    version: str = PLACEHOLDER_VERSION

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Template:
    """Result of extract(): the export document plus its declarations."""
    document: Dict[str, Any]
    inputs: List[TemplateInput] = field(default_factory=list)
    requirements: List[TemplateRequirement] = field(default_factory=list)


def input_name(display_name: str) -> str:
    """
    Derive a template input name from a data source name.

    Example:
        input_name("My Prometheus (prod)") -> "DS_MY_PROMETHEUS_PROD"
    """
    slug = re.sub(r'[^A-Z0-9]+', '_', display_name.upper()).strip('_')
    return INPUT_PREFIX + slug


def placeholder(name: str) -> str:
    return "${" + name + "}"


# =============================================================================
# Export
# =============================================================================

def extract(
    document: Dict[str, Any],
    references: Iterable[str],
    lookup: Callable[[str], Optional[DataSource]],
    skip_unresolved: bool = False,
) -> Template:
    """
    Convert a dashboard into a portable template.

    Args:
        document: Dashboard body (not mutated)
        references: Concrete data source references found in the document
        lookup: Resolves a reference to its data source (None if unknown)
        skip_unresolved: Leave unknown references in place instead of failing

    Returns:
        Template whose document holds __inputs, __requires and the dashboard
        body without id/uid/version

    Raises:
        ValueError: If a reference is unknown (unless skip_unresolved), or two
            different data sources derive the same input name
    """
    inputs: List[TemplateInput] = []
    requirements = [TemplateRequirement(**GRAFANA_REQUIREMENT)]
    mapping: Dict[str, str] = {}
    owners: Dict[str, DataSource] = {}
    plugins = set()
    unresolved = []

    for reference in sorted(references):
        source = lookup(reference)
        if source is None:
            unresolved.append(reference)
            continue

        name = input_name(source.name)
        owner = owners.get(name)
        if owner is not None and owner.uid != source.uid:
            raise ValueError(
                f"data sources '{owner.name}' and '{source.name}' both map to template input {name}; "
                "rename one of them before exporting"
            )

        mapping[reference] = placeholder(name)
        if owner is not None:
            # Same data source referenced by uid and by name
            continue

        owners[name] = source
        inputs.append(TemplateInput(name=name, label=source.name, plugin_id=source.type))
        if source.type not in plugins:
            plugins.add(source.type)
            requirements.append(TemplateRequirement(type="datasource", id=source.type, name=source.type))

    if unresolved:
        listed = ", ".join(unresolved)
        if not skip_unresolved:
            raise ValueError(f"data source reference(s) not found on this instance: {listed}")
        logger.warning(f"Leaving unresolved data source reference(s) as-is: {listed}")

    body = rebind(document, mapping)
    for key in INSTANCE_FIELDS:
        body.pop(key, None)

    exported = {
        INPUTS_KEY: [item.to_dict() for item in inputs],
        REQUIRES_KEY: [item.to_dict() for item in requirements],
    }
    exported.update(body)

    return Template(document=exported, inputs=inputs, requirements=requirements)


# =============================================================================
# Import
# =============================================================================

def select_datasource(item: Dict[str, Any], catalog: Catalog, ask: Ask = input) -> DataSource:
    """
    Ask the operator which data source should back one template input.

    Raises:
        ValueError: If no data source of the input's plugin type exists
    """
    plugin_id = item.get("pluginId", "")
    candidates = catalog.of_type(plugin_id)
    if not candidates:
        raise ValueError(f"no datasources found for type {plugin_id}")

    print(f"\nSelect datasource for '{item.get('label', '')}' ({item.get('name', '')}, plugin: {plugin_id}):")
    index = choose([f"{source.name} (UID: {source.uid})" for source in candidates], ask=ask)
    return candidates[index]


def collect_mappings(inputs: List[Dict[str, Any]], catalog: Catalog, ask: Ask = input) -> Dict[str, str]:
    """
    Map every declared input's placeholder to a concrete data source uid.

    Raises:
        ValueError: For malformed or unsupported inputs, or missing candidates
    """
    mappings: Dict[str, str] = {}
    for item in inputs:
        if not isinstance(item, dict) or not item.get("name"):
            raise ValueError(f"malformed template input: {item!r}")
        if item.get("type") != INPUT_TYPE_DATASOURCE:
            raise ValueError(f"unsupported template input type '{item.get('type')}' for {item['name']}")

        source = select_datasource(item, catalog, ask=ask)
        mappings[placeholder(item["name"])] = source.uid
    return mappings


def resolve(raw, catalog: Catalog, ask: Ask = input) -> Dict[str, Any]:
    """
    Turn a template (file content) back into a concrete dashboard.

    Args:
        raw: Template file content (bytes or str)
        catalog: Data sources available on the target instance
        ask: Reads one answer from the operator

    Returns:
        Dashboard body with placeholders bound and __inputs/__requires removed

    Raises:
        ValueError: On invalid JSON, unsupported inputs, or missing data sources
    """
    document = parse_json_object(raw, source="dashboard file")
    inputs = document.get(INPUTS_KEY) or []
    if not isinstance(inputs, list):
        raise ValueError(f"{INPUTS_KEY} must be a list")

    if inputs:
        print("This dashboard is an external template and requires datasource mapping.")
        mappings = collect_mappings(inputs, catalog, ask=ask)
        # Every input has a mapping at this point
        document = rebind(document, mappings)

    document.pop(INPUTS_KEY, None)
    document.pop(REQUIRES_KEY, None)
    return document


def prompt_overrides(document: Dict[str, Any], ask: Ask = input) -> Dict[str, Any]:
    """
    Let the operator change the title and uid before creation.

    An empty uid answer removes the uid so the server generates one.
    """
    print()
    if confirm(f"Change title? (current: {document.get('title')})", ask=ask):
        document["title"] = ask("Enter new title: ").strip()

    current_uid = document.get("uid") or "(none, will be auto-generated)"
    if confirm(f"Change UID? (current: {current_uid})", ask=ask):
        new_uid = ask("Enter new UID: ").strip()
        if new_uid:
            document["uid"] = new_uid
        else:
            document.pop("uid", None)

    return document
