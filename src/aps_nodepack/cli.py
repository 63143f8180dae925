"""
APS Node Pack CLI - Main entry point.

Provides commands for:
- Describing the node and credential types
- Running the APS Data Management node
- Testing stored credentials
- Building the authorization URL for the 3-legged flow
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from aps_nodepack.observability import setup_logging


def _load_credentials(path: str) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, ValueError) as e:
        raise click.BadParameter(f"Cannot read credentials file: {e}", param_hint="--credentials")
    if not isinstance(data, dict):
        raise click.BadParameter("Credentials file must hold a JSON object", param_hint="--credentials")
    return data


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool):
    """APS Node Pack - Autodesk Platform Services nodes."""
    ctx.ensure_object(dict)
    # Logs go to stderr so stdout stays valid JSON
    setup_logging(sys.stderr)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif quiet:
        logging.getLogger().setLevel(logging.ERROR)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command("describe")
def describe():
    """Print node and credential type definitions as JSON."""
    from aps_nodepack.registry import get_global_registry

    registry = get_global_registry()
    _echo_json({
        "packs": [pack.model_dump() for pack in registry.list_packs()],
        "nodes": [node.model_dump(by_alias=True) for node in registry.list_nodes()],
        "credentials": [cred.model_dump(by_alias=True) for cred in registry.list_credentials()],
    })


@cli.command("run")
@click.argument(
    "operation",
    type=click.Choice(["getHubs", "getProjects", "getTopFolders", "getItems", "getItemVersions"]),
)
@click.option("--hub-id", default="", help="Hub ID (getProjects)")
@click.option("--project-id", default="", help="Project ID (getTopFolders, getItems, getItemVersions)")
@click.option("--folder-id", default="", help="Folder URN (getItems)")
@click.option("--item-id", default="", help="Item URN (getItemVersions)")
@click.option(
    "--auth", "authentication",
    type=click.Choice(["oAuth2", "clientCredentials"]),
    default="oAuth2",
    show_default=True,
    help="Credential type to authenticate with",
)
@click.option("--no-simplify", is_flag=True, help="Return entities as received")
@click.option("--no-split", is_flag=True, help="Return one item wrapping the data array")
@click.option("--continue-on-fail", is_flag=True, help="Emit error items instead of failing")
@click.option(
    "--credentials", "-c", "credentials_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the credential data",
)
def run(
    operation: str,
    hub_id: str,
    project_id: str,
    folder_id: str,
    item_id: str,
    authentication: str,
    no_simplify: bool,
    no_split: bool,
    continue_on_fail: bool,
    credentials_path: str,
):
    """
    Run the APS Data Management node once.

    OPERATION: Data Management operation to perform

    Examples:

        # List hubs with 3-legged credentials
        aps-nodepack run getHubs -c creds.json

        # List a folder's contents with app-only credentials
        aps-nodepack run getItems --project-id b.123 --folder-id urn:... \\
            --auth clientCredentials -c app-creds.json
    """
    from aps_nodepack.node_sdk import NodeOperationError, NodeRunner
    from aps_nodepack.nodes.aps_data_management import CREDENTIAL_BY_AUTHENTICATION

    parameters = {
        "authentication": authentication,
        "operation": operation,
        "hubId": hub_id,
        "projectId": project_id,
        "folderId": folder_id,
        "itemId": item_id,
        "simplify": not no_simplify,
        "splitItems": not no_split,
    }
    credential_type = CREDENTIAL_BY_AUTHENTICATION[authentication]
    credentials = {credential_type: _load_credentials(credentials_path)}

    try:
        output = NodeRunner().run(
            "apsDataManagement",
            parameters=parameters,
            credentials=credentials,
            continue_on_fail=continue_on_fail,
        )
    except NodeOperationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _echo_json(output[0])


@cli.command("test-credential")
@click.argument("credential_type")
@click.option(
    "--credentials", "-c", "credentials_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the credential data",
)
def test_credential(credential_type: str, credentials_path: str):
    """
    Verify credential data against its test request.

    CREDENTIAL_TYPE: e.g. autodeskPlatformServicesOAuth2Api
    """
    from aps_nodepack.registry import get_global_registry

    try:
        credential_class = get_global_registry().get_credential_class(credential_type)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="CREDENTIAL_TYPE")

    result = credential_class(_load_credentials(credentials_path)).test()
    _echo_json(result)
    if not result["success"]:
        sys.exit(1)


@cli.command("authorize-url")
@click.option(
    "--credentials", "-c", "credentials_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with clientId (and optionally scope)",
)
@click.option("--state", required=True, help="Opaque state value echoed back on callback")
@click.option("--redirect-uri", default=None, help="Callback URL (settings value if omitted)")
def authorize_url(credentials_path: str, state: str, redirect_uri: Optional[str]):
    """Print the 3-legged authorization URL."""
    from aps_nodepack.config import get_settings
    from aps_nodepack.credentials import AutodeskPlatformServicesOAuth2ApiCredential

    credential = AutodeskPlatformServicesOAuth2ApiCredential(_load_credentials(credentials_path))
    try:
        url = credential.get_authorization_url(
            state, redirect_uri or get_settings().oauth_callback_url
        )
    except KeyError as e:
        raise click.BadParameter(f"Missing credential field: {e}", param_hint="--credentials")
    click.echo(url)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
