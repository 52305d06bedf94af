"""
Grafana Integration

Manage profiles, organizations, data sources and dashboards of a Grafana
instance, including portable dashboard templates.

Usage as CLI:
    python -m gcli.grafana config use local
    python -m gcli.grafana dash read abc123 --external > exported.json
    python -m gcli.grafana dash create --file exported.json
"""

from .cli import main as cli_main

__version__ = '1.0.0'
__all__ = ['cli_main']
