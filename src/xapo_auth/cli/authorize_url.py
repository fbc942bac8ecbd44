from typing import Optional, Tuple

import click

from xapo_auth.cli.utils import configure_logging, load_adapter, output_error, output_result


@click.command(name="authorize-url")
@click.option("--state", help="Opaque state value echoed back on the callback")
@click.option("--scope", "scopes", multiple=True, help="Scope to request (repeatable)")
@click.option("--redirect-uri", help="Override the configured callback URL")
@click.option("--config", "config_path", help="Path to the Xapo config file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def authorize_url(
    state: Optional[str],
    scopes: Tuple[str, ...],
    redirect_uri: Optional[str],
    config_path: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Print the Xapo authorization URL to redirect a user to.

    \b
    Examples:
        xapo-auth authorize-url --state xyz
        xapo-auth authorize-url --scope profile --json-output
    """
    configure_logging(debug)

    try:
        adapter = load_adapter(config_path)
        url = adapter.build_authorize_url(state=state, scopes=scopes, redirect_uri=redirect_uri)
        output_result(url, json_output, debug)
    except Exception as e:
        output_error(e, json_output, debug)
