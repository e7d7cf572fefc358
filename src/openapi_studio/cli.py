"""CLI entry point for openapi-studio."""

import json
import logging

import click

from openapi_studio.config import StudioSettings
from openapi_studio.history import BODY_METHODS, format_as_curl
from openapi_studio.loader import DocumentLoader
from openapi_studio.parser.base import Document
from openapi_studio.parser.openapi import (
    find_endpoint,
    get_all_response_examples,
    get_example_from_request_body,
    get_request_body_schema,
    list_endpoints,
)
from openapi_studio.request import Credential, RequestSynthesizer
from openapi_studio.schema.display import format_schema
from openapi_studio.security import available_schemes


def _load_doc(source: str) -> Document:
    """Load a document from a file path or URL, or exit with the load error."""
    result = DocumentLoader().load(source)
    if result.document is None:
        raise click.ClickException(result.error or f"Could not load {source}")
    return result.document


def _parse_params(values: tuple[str, ...]) -> dict[str, str]:
    params = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected name=value, got {item!r}", param_hint="--param")
        params[name] = value
    return params


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """OpenAPI Studio: browse an API document and send test requests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command()
@click.argument("doc_source")
def endpoints(doc_source: str):
    """List the operations in a document."""
    document = _load_doc(doc_source)
    eps = list_endpoints(document.raw)
    click.echo(f"{document.title} ({len(eps)} endpoints)")
    for ep in eps:
        lock = " [auth]" if ep.auth_required else ""
        summary = f"  {ep.summary}" if ep.summary else ""
        click.echo(f"{ep.method:<7} {ep.path}{summary}{lock}")


@main.command()
@click.argument("doc_source")
@click.argument("method")
@click.argument("path")
def show(doc_source: str, method: str, path: str):
    """Show schemas, examples and security schemes for one operation."""
    document = _load_doc(doc_source)
    doc = document.raw
    endpoint = find_endpoint(doc, path, method)
    if endpoint is None:
        raise click.ClickException(f"No operation {method.upper()} {path}")

    click.echo(f"{endpoint.method} {endpoint.path}")
    if endpoint.summary:
        click.echo(endpoint.summary)

    if endpoint.parameters:
        click.echo("\nParameters:")
        for p in endpoint.parameters:
            marker = "*" if p.required else ""
            click.echo(f"  {p.name}{marker} ({p.location}): {p.param_type}")

    schemes = available_schemes(endpoint.operation, doc)
    if schemes:
        click.echo("\nSecurity: " + ", ".join(f"{s.name} ({s.type})" for s in schemes))

    body_schema = get_request_body_schema(endpoint.operation, doc)
    if body_schema:
        click.echo("\nRequest body:")
        click.echo(format_schema(body_schema, doc).rstrip())
        click.echo("\nExample:")
        click.echo(json.dumps(get_example_from_request_body(endpoint.operation, doc), indent=2))

    for resp in get_all_response_examples(endpoint.operation, doc):
        click.echo(f"\nResponse {resp.code}: {resp.description}")
        if resp.schema_node:
            click.echo(format_schema(resp.schema_node, doc).rstrip())
            click.echo(json.dumps(resp.example, indent=2))


@main.command()
@click.argument("doc_source")
@click.argument("method")
@click.argument("path")
@click.option("--host", default=None, help="Base URL for the request (default: OPENAPI_STUDIO_SERVICE_HOST).")
@click.option("-p", "--param", "params", multiple=True, help="Parameter value as name=value. Repeatable.")
@click.option("--body", default=None, help="JSON request body. Defaults to the schema example.")
@click.option("--auth", "scheme_name", default=None, help="Security scheme to authenticate with.")
@click.option("--token", default="", help="Bearer / OAuth2 / OpenID Connect token.")
@click.option("--api-key", default="", help="API key value.")
@click.option("--username", default="", help="HTTP basic username.")
@click.option("--password", default="", help="HTTP basic password.")
@click.option("--curl", "show_curl", is_flag=True, help="Also print the request as a curl command.")
def send(
    doc_source: str,
    method: str,
    path: str,
    host: str | None,
    params: tuple[str, ...],
    body: str | None,
    scheme_name: str | None,
    token: str,
    api_key: str,
    username: str,
    password: str,
    show_curl: bool,
):
    """Send one test request and print the response."""
    document = _load_doc(doc_source)
    doc = document.raw
    endpoint = find_endpoint(doc, path, method)
    if endpoint is None:
        raise click.ClickException(f"No operation {method.upper()} {path}")

    host = host or StudioSettings().service_host
    if not host:
        raise click.UsageError("No host given; pass --host or set OPENAPI_STUDIO_SERVICE_HOST.")

    if body is None and endpoint.method in BODY_METHODS:
        example = get_example_from_request_body(endpoint.operation, doc)
        if example is not None:
            body = json.dumps(example)

    credentials = {}
    if scheme_name:
        credentials[scheme_name] = Credential(
            api_key=api_key, username=username, password=password, token=token
        )

    entry = RequestSynthesizer(doc).build_and_send(
        endpoint,
        _parse_params(params),
        scheme_name=scheme_name,
        credentials=credentials,
        base_host=host,
        body_text=body,
    )

    if show_curl:
        click.echo(format_as_curl(entry))
        click.echo()

    if entry.response_error:
        raise click.ClickException(entry.response_error)

    response = entry.response
    click.echo(f"{response.status} {response.status_text}")
    if isinstance(response.body, str):
        click.echo(response.body)
    else:
        click.echo(json.dumps(response.body, indent=2))
