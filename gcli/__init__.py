"""
Grafana Command-Line Tools

A collection of tools for working with Grafana instances:
- common: Profile and organization configuration shared by all commands
- grafana: Organizations, data sources and dashboards (including portable
  dashboard templates and interactive editing)
"""

__version__ = '1.0.0'
