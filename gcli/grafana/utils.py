"""
Grafana shared utilities.

Provides API client construction from the active profile, JSON helpers and
interactive prompts.
"""

import json
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from gcli.common.config import ProfileStore

from .api import GrafanaAPI

Ask = Callable[[str], str]


# =============================================================================
# Environment & Configuration
# =============================================================================

def get_api(store: Optional[ProfileStore] = None, scoped: bool = True) -> GrafanaAPI:
    """
    Build an API client for the active profile and organization.

    Args:
        store: Profile store (defaults to the file at GCLI_CONFIG_PATH / ~/.gcli)
        scoped: Attach the active organization

    Raises:
        ValueError: If no profile is active
    """
    store = store or ProfileStore()
    profile = store.require_active()
    org_id = store.get_active_org() if scoped else None
    return GrafanaAPI(profile, org_id=org_id)


# =============================================================================
# JSON
# =============================================================================

def pretty_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def parse_json_object(raw, source: str = "input") -> dict:
    """
    Parse bytes/str into a JSON object.

    Raises:
        ValueError: If the content is not valid JSON or not an object
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON in {source}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"invalid JSON in {source}: expected an object")
    return data


def read_json_file(path: Path) -> dict:
    """Load a JSON object from a file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return parse_json_object(path.read_bytes(), source=str(path))


# =============================================================================
# Prompts
# =============================================================================

def choose(labels: Sequence[str], ask: Ask = input) -> int:
    """
    Print a numbered list and read a 1-based selection.

    Re-prompts on non-numeric or out-of-range answers until a valid one is
    given.

    Returns:
        The 0-based index of the selected label
    """
    for number, label in enumerate(labels, 1):
        print(f"[{number}] {label}")

    while True:
        answer = ask("Enter number: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(labels):
            return int(answer) - 1
        print("Invalid selection. Please try again.")


def confirm(question: str, ask: Ask = input) -> bool:
    """Ask a [y/N] question; anything but y/yes is no."""
    return ask(f"{question} [y/N]: ").strip().lower() in ("y", "yes")
