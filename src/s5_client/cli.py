# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/cli.py

"""
S5 Command Line Interface

Thin wrapper around S5Client.
"""

import functools
import json
import sys
from pathlib import Path

import click
import requests

from s5_client import config as config_module
from s5_client.client import S5Client
from s5_client.domain import build_url, extract_domain
from s5_client.errors import S5Error, TransportFailure


def handle_api_error(func):
    """Decorator to catch portal and client errors."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TransportFailure as e:
            if e.status_code is None:
                click.echo(f"Error: Could not reach portal: {e}", err=True)
            else:
                click.echo(f"Error: Portal error ({e.status_code}): {e}", err=True)
            sys.exit(1)
        except S5Error as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        except FileNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        except requests.exceptions.RequestException as e:
            click.echo(f"Error: Network error: {e}", err=True)
            sys.exit(1)
    return wrapper


def _make_client(config_file: Path, portal: str) -> S5Client:
    """Client from the config file, or from --portal alone."""
    if config_file is None and portal:
        return S5Client(portal)
    config = config_module.load_config(config_path=config_file)
    if portal:
        config.portal_url = portal
    return S5Client.from_config(config)


config_option = click.option(
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    help="Config file path (default: ~/.config/s5/config.toml)",
)
portal_option = click.option(
    "--portal",
    help="Portal URL (overrides the config file)",
)


@click.group()
def cli():
    """S5 portal CLI."""
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path), required=True)
@config_option
@portal_option
@click.option("--filename", help="Custom filename to upload the file as")
@handle_api_error
def upload(path: Path, config_file: Path, portal: str, filename: str) -> None:
    """
    Upload a file or directory and print its CID.

    Examples:

        s5 upload /path/to/file --portal https://s5.example.com

        s5 upload /path/to/directory
    """
    client = _make_client(config_file, portal)
    options = {"custom_filename": filename} if filename else {}
    result = client.upload_path(path, **options)
    click.echo(result.cid)


@cli.command()
@click.argument("cid", required=True)
@config_option
@portal_option
@click.option("--subdomain", is_flag=True, help="Put the CID in a subdomain")
@click.option("--download", "as_attachment", is_flag=True, help="Ask the portal to serve as attachment")
@click.option("--path", "sub_path", help="Path to append to the CID")
@handle_api_error
def url(cid: str, config_file: Path, portal: str, subdomain: bool, as_attachment: bool, sub_path: str) -> None:
    """
    Print the portal URL for a CID.
    """
    client = _make_client(config_file, portal)
    click.echo(
        client.get_cid_url(cid, subdomain=subdomain, download=as_attachment, path=sub_path)
    )


@cli.command()
@click.argument("cid", required=True)
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="File to write the content to",
)
@config_option
@portal_option
@handle_api_error
def download(cid: str, output: Path, config_file: Path, portal: str) -> None:
    """
    Download the content of a CID to a file.
    """
    client = _make_client(config_file, portal)
    client.download_file(cid, output)
    click.echo(f"downloaded {cid} to {output}")


@cli.command()
@click.argument("cid", required=True)
@config_option
@portal_option
@handle_api_error
def metadata(cid: str, config_file: Path, portal: str) -> None:
    """
    Print the metadata of a CID as JSON.
    """
    client = _make_client(config_file, portal)
    click.echo(client.get_metadata(cid).to_json())


@cli.group()
def domain():
    """Map domains to portal URLs and back."""
    pass


@domain.command("build")
@click.argument("portal_url")
@click.argument("name")
@handle_api_error
def domain_build(portal_url: str, name: str) -> None:
    """
    Print the full URL of a domain on a portal.

    Example:

        s5 domain build https://portal.example app.hns/dir/file
    """
    click.echo(build_url(portal_url, name))


@domain.command("extract")
@click.argument("portal_url")
@click.argument("full_url")
@handle_api_error
def domain_extract(portal_url: str, full_url: str) -> None:
    """
    Print the domain served at a full portal URL.
    """
    click.echo(extract_domain(portal_url, full_url))


@cli.command("config")
@click.option(
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    help="Config file path (default: ~/.config/s5/config.toml)",
)
@handle_api_error
def show_config(config_file: Path) -> None:
    """
    Validate the config file and print the errors and warnings.
    """
    config = config_module.load_config(config_path=config_file)
    errors, warnings = config.validate()
    click.echo(json.dumps({"portal_url": config.portal_url, "errors": errors, "warnings": warnings}, indent=2))
    if errors:
        sys.exit(1)


if __name__ == "__main__":
    cli()
