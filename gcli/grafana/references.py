"""
Data source references inside dashboard documents.

Panels, queries and templating variables bind to a data source through a
"datasource" field holding either a bare identifier or an object with a
"uid" field:

    {"datasource": "P1809F7CD0C75ACF3"}
    {"datasource": {"type": "prometheus", "uid": "P1809F7CD0C75ACF3"}}

Empty values, the built-in data sources ("grafana", "-- Mixed --",
"-- Dashboard --", "-- Grafana --", "__expr__") and variable references
("$datasource", "${DS_PROM}") are not concrete references.
"""

import copy
from typing import Any, Dict, Optional, Set

from .walker import collect, rewrite

DATASOURCE_KEY = "datasource"
UID_KEY = "uid"
DEFAULT_DATASOURCE = "grafana"
# Built into the server, never listed by /api/datasources
BUILTIN_DATASOURCES = frozenset({
    DEFAULT_DATASOURCE,
    "-- Grafana --",
    "-- Mixed --",
    "-- Dashboard --",
    "__expr__",
})
VARIABLE_SIGIL = "$"


def reference_of(binding: Any) -> Optional[str]:
    """Return the identifier carried by a datasource binding, if any."""
    if isinstance(binding, str):
        return binding
    if isinstance(binding, dict) and isinstance(binding.get(UID_KEY), str):
        return binding[UID_KEY]
    return None


def is_concrete(reference: Optional[str]) -> bool:
    """True for identifiers that name an actual data source."""
    return bool(reference) and reference not in BUILTIN_DATASOURCES and not reference.startswith(VARIABLE_SIGIL)


def discover(document: Any) -> Set[str]:
    """
    Collect the distinct concrete data source references used by a document.

    Every object at any depth is inspected, including panels nested in rows,
    panel targets and templating variables.
    """
    found = set()

    def visit(node):
        if isinstance(node, dict) and DATASOURCE_KEY in node:
            reference = reference_of(node[DATASOURCE_KEY])
            if is_concrete(reference):
                found.add(reference)

    collect(document, visit)
    return found


def rebind(document: Any, mapping: Dict[str, str]) -> Any:
    """
    Return a copy of document with datasource bindings substituted.

    Only the identifier of a "datasource" field is replaced (the string
    itself, or its "uid"), and only when it is a key of mapping. No other
    string in the document is touched.
    """
    def replace(key, node):
        if key != DATASOURCE_KEY:
            return node
        reference = reference_of(node)
        if reference is None or reference not in mapping:
            return node
        if isinstance(node, str):
            return mapping[reference]
        node[UID_KEY] = mapping[reference]
        return node

    return rewrite(copy.deepcopy(document), replace)
