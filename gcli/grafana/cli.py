#!/usr/bin/env python3
"""
CLI entry point for Grafana.

This module provides a unified command-line interface for Grafana operations:
- config: Manage connection profiles
- org: Manage organizations and select the active one
- ds: Manage data sources
- dash: Manage dashboards (export/import templates, interactive editing)
- request: Make a raw API request

Usage:
    python -m gcli.grafana [--debug] <config|org|ds|dash|request> ...
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path

import requests

from gcli.common.config import Profile, ProfileStore

from . import dashboard, datasource, org
from .utils import get_api

# Configure logger
logger = logging.getLogger(__name__)


def run(args, action):
    """Run a command action, reporting failures as one line."""
    try:
        action()
        return 0
    except (ValueError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1
    except requests.HTTPError as e:
        logger.error(f"HTTP {e}")
        if args.debug:
            traceback.print_exc()
        return 1
    except requests.RequestException as e:
        logger.error(f"Connection failed: {e}")
        if args.debug:
            traceback.print_exc()
        return 1
    except Exception as e:
        logger.error(f"Error: {e}")
        if args.debug:
            traceback.print_exc()
        return 1


# =============================================================================
# Config Command Handlers
# =============================================================================

def config_add(args):
    """Execute config add subcommand."""
    def action():
        profile = Profile(name=args.name, url=args.url, user=args.user, password=args.password)
        ProfileStore().save_profile(profile)
        logger.info(f"✅ Saved profile: {args.name}")
    return run(args, action)


def config_list(args):
    def action():
        profiles = ProfileStore().load_all()
        print(json.dumps({name: p.to_dict() for name, p in profiles.items()}, indent=2))
    return run(args, action)


def config_use(args):
    def action():
        ProfileStore().set_active(args.profile)
        logger.info(f"Active profile set to {args.profile}")
    return run(args, action)


# =============================================================================
# Org Command Handlers
# =============================================================================

def org_list(args):
    return run(args, lambda: org.list_orgs(get_api(), details=args.details))


def org_use(args):
    def action():
        store = ProfileStore()
        org.use_org(get_api(store, scoped=False), store, args.org)
    return run(args, action)


def org_create(args):
    return run(args, lambda: org.create_org(get_api(scoped=False), args.name))


def org_rm(args):
    return run(args, lambda: org.delete_org(get_api(scoped=False), args.org))


def org_update(args):
    return run(args, lambda: org.update_org(get_api(scoped=False), args.org, args.name))


# =============================================================================
# Data Source Command Handlers
# =============================================================================

def ds_list(args):
    return run(args, lambda: datasource.list_datasources(get_api(), details=args.details))


def ds_read(args):
    return run(args, lambda: datasource.read_datasource(get_api(), args.datasource))


def ds_create(args):
    def action():
        datasource.create_datasource(
            get_api(),
            file=Path(args.file) if args.file else None,
            name=args.name,
            ds_type=args.type,
            url=args.url,
            access=args.access,
            basic_auth=args.basic_auth,
        )
    return run(args, action)


def ds_update(args):
    def action():
        datasource.update_datasource(
            get_api(),
            id_or_name=args.datasource,
            file=Path(args.file) if args.file else None,
        )
    return run(args, action)


def ds_rm(args):
    return run(args, lambda: datasource.delete_datasource(get_api(), args.datasource))


# =============================================================================
# Dashboard Command Handlers
# =============================================================================

def dash_list(args):
    return run(args, lambda: dashboard.list_dashboards(get_api(), details=args.details))


def dash_read(args):
    """Execute dash read subcommand (plain or --external template export)."""
    def action():
        api = get_api()
        if args.external:
            dashboard.export_dashboard(api, args.uid, skip_unresolved=args.skip_unresolved)
        else:
            dashboard.read_dashboard(api, args.uid)
    return run(args, action)


def dash_rm(args):
    return run(args, lambda: dashboard.delete_dashboard(get_api(), args.uid))


def dash_update(args):
    return run(args, lambda: dashboard.update_dashboard(get_api(), args.uid))


def dash_create(args):
    return run(args, lambda: dashboard.create_dashboard(get_api(), Path(args.file)))


# =============================================================================
# Raw Request
# =============================================================================

def raw_request(args):
    def action():
        response = get_api().raw(args.method, args.path)
        print(f"Status: {response.status_code} {response.reason}")
        print(response.text)
    return run(args, action)


# =============================================================================
# CLI Setup and Routing
# =============================================================================

def setup_config_parser(subparsers, common_parser):
    """Setup config command parsers."""
    config_parser = subparsers.add_parser('config', help='Manage Grafana API configurations')
    config_subparsers = config_parser.add_subparsers(dest='subcommand', help='Config subcommands')

    add_parser = config_subparsers.add_parser('add', parents=[common_parser], help='Add a new Grafana configuration')
    add_parser.add_argument('--name', required=True, help='Profile name')
    add_parser.add_argument('--url', required=True, help='Grafana base URL')
    add_parser.add_argument('--user', required=True, help='Basic auth username')
    add_parser.add_argument('--pass', dest='password', required=True, help='Basic auth password')
    add_parser.set_defaults(func=config_add)

    list_parser = config_subparsers.add_parser('list', parents=[common_parser], help='List saved Grafana configurations')
    list_parser.set_defaults(func=config_list)

    use_parser = config_subparsers.add_parser('use', parents=[common_parser], help='Select a configuration profile to use')
    use_parser.add_argument('profile', help='Profile name')
    use_parser.set_defaults(func=config_use)


def setup_org_parser(subparsers, common_parser):
    """Setup org command parsers."""
    org_parser = subparsers.add_parser('org', help='Manage Grafana organizations')
    org_subparsers = org_parser.add_subparsers(dest='subcommand', help='Org subcommands')

    list_parser = org_subparsers.add_parser('list', parents=[common_parser], help='List organizations')
    list_parser.add_argument('--details', action='store_true', help='Show detailed JSON output')
    list_parser.set_defaults(func=org_list)

    use_parser = org_subparsers.add_parser('use', parents=[common_parser], help='Select an organization for subsequent operations')
    use_parser.add_argument('org', help='Organization ID or name')
    use_parser.set_defaults(func=org_use)

    create_parser = org_subparsers.add_parser('create', parents=[common_parser], help='Create a new organization')
    create_parser.add_argument('--name', required=True, help='Name of the organization to create')
    create_parser.set_defaults(func=org_create)

    rm_parser = org_subparsers.add_parser('rm', parents=[common_parser], help='Delete an organization')
    rm_parser.add_argument('org', help='Organization ID or name')
    rm_parser.set_defaults(func=org_rm)

    update_parser = org_subparsers.add_parser('update', parents=[common_parser], help='Rename an organization')
    update_parser.add_argument('org', help='Organization ID or name')
    update_parser.add_argument('--name', required=True, help='New name of the organization')
    update_parser.set_defaults(func=org_update)


def setup_ds_parser(subparsers, common_parser):
    """Setup ds command parsers."""
    ds_parser = subparsers.add_parser('ds', help='Manage Grafana data sources')
    ds_subparsers = ds_parser.add_subparsers(dest='subcommand', help='Data source subcommands')

    list_parser = ds_subparsers.add_parser('list', parents=[common_parser], help='List data sources')
    list_parser.add_argument('--details', action='store_true', help='Show detailed JSON output')
    list_parser.set_defaults(func=ds_list)

    read_parser = ds_subparsers.add_parser('read', parents=[common_parser], help='Read a data source definition')
    read_parser.add_argument('datasource', help='Data source ID or name')
    read_parser.set_defaults(func=ds_read)

    create_parser = ds_subparsers.add_parser('create', parents=[common_parser], help='Create a new data source')
    create_parser.add_argument('--file', help='JSON file containing data source definition')
    create_parser.add_argument('--name', help='Name of data source')
    create_parser.add_argument('--type', help='Type of data source (e.g., graphite, prometheus)')
    create_parser.add_argument('--url', help='URL of data source')
    create_parser.add_argument('--access', default='proxy', help='Access mode (proxy or direct)')
    create_parser.add_argument('--basic-auth', action='store_true', help='Enable basic auth')
    create_parser.set_defaults(func=ds_create)

    update_parser = ds_subparsers.add_parser(
        'update',
        parents=[common_parser],
        help='Update a data source from a file, or interactively in $EDITOR'
    )
    update_parser.add_argument('datasource', nargs='?', help='Data source ID or name')
    update_parser.add_argument('--file', help='JSON file containing data source update definitions')
    update_parser.set_defaults(func=ds_update)

    rm_parser = ds_subparsers.add_parser('rm', parents=[common_parser], help='Delete a data source')
    rm_parser.add_argument('datasource', help='Data source ID or name')
    rm_parser.set_defaults(func=ds_rm)


def setup_dash_parser(subparsers, common_parser):
    """Setup dash command parsers."""
    dash_parser = subparsers.add_parser('dash', help='Manage Grafana dashboards')
    dash_subparsers = dash_parser.add_subparsers(dest='subcommand', help='Dashboard subcommands')

    list_parser = dash_subparsers.add_parser('list', parents=[common_parser], help='List dashboards')
    list_parser.add_argument('--details', action='store_true', help='Show detailed JSON output')
    list_parser.set_defaults(func=dash_list)

    read_parser = dash_subparsers.add_parser('read', parents=[common_parser], help='Read a dashboard definition')
    read_parser.add_argument('uid', help='Dashboard UID')
    read_parser.add_argument(
        '--external',
        action='store_true',
        help='Export dashboard for sharing (external template with ${DS_...} inputs)'
    )
    read_parser.add_argument(
        '--skip-unresolved',
        action='store_true',
        help='With --external, keep data source references missing from this instance instead of failing'
    )
    read_parser.set_defaults(func=dash_read)

    rm_parser = dash_subparsers.add_parser('rm', parents=[common_parser], help='Delete a dashboard by UID')
    rm_parser.add_argument('uid', help='Dashboard UID')
    rm_parser.set_defaults(func=dash_rm)

    update_parser = dash_subparsers.add_parser(
        'update',
        parents=[common_parser],
        help='Update a dashboard interactively in $EDITOR'
    )
    update_parser.add_argument('uid', help='Dashboard UID')
    update_parser.set_defaults(func=dash_update)

    create_parser = dash_subparsers.add_parser(
        'create',
        parents=[common_parser],
        help='Create a dashboard from a file (templates prompt for data sources)'
    )
    create_parser.add_argument('--file', required=True, help='JSON file containing dashboard definition')
    create_parser.set_defaults(func=dash_create)


def setup_request_parser(subparsers, common_parser):
    request_parser = subparsers.add_parser(
        'request',
        parents=[common_parser],
        help='Make a request to the selected Grafana instance'
    )
    request_parser.add_argument('method', help='HTTP method (GET, POST, ...)')
    request_parser.add_argument('path', help='API path, e.g. /api/health')
    request_parser.set_defaults(func=raw_request)


def main(argv=None):
    """Main CLI entry point."""
    # Setup main parser
    parser = argparse.ArgumentParser(
        prog='gcli',
        description='CLI tool to interact with the Grafana API',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global options
    parser.add_argument('--debug', action='store_true', help='Enable debug output')

    # Common parser for shared arguments (inherited by subcommands)
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--debug', action='store_true', default=argparse.SUPPRESS, help='Enable debug output')

    # Setup subcommands
    subparsers = parser.add_subparsers(dest='command', help='Commands')
    setup_config_parser(subparsers, common_parser)
    setup_org_parser(subparsers, common_parser)
    setup_ds_parser(subparsers, common_parser)
    setup_dash_parser(subparsers, common_parser)
    setup_request_parser(subparsers, common_parser)

    # Parse arguments
    args = parser.parse_args(argv)

    # Show help if no command specified
    if not args.command:
        parser.print_help()
        return 0

    # Configure logging based on debug flag
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(message)s'
    )

    # Execute command
    try:
        if hasattr(args, 'func'):
            return args.func(args)
        else:
            # Subcommand parser exists but no subcommand given
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        logger.warning("\nInterrupted by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
