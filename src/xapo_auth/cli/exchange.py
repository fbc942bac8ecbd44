import asyncio
from typing import Optional

import click

from xapo_auth.cli.utils import configure_logging, load_adapter, output_error, output_result


@click.command(name="exchange")
@click.option("--code", required=True, help="Authorization code received on the callback")
@click.option("--code-verifier", help="PKCE code verifier")
@click.option("--redirect-uri", help="Override the configured callback URL")
@click.option("--config", "config_path", help="Path to the Xapo config file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def exchange(
    code: str,
    code_verifier: Optional[str],
    redirect_uri: Optional[str],
    config_path: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Exchange an authorization code for Xapo tokens.

    \b
    Examples:
        xapo-auth exchange --code abc123
        xapo-auth exchange --code abc123 --json-output
    """
    configure_logging(debug)

    try:
        adapter = load_adapter(config_path)
        grant = asyncio.run(
            adapter.exchange_code(
                code=code, redirect_uri=redirect_uri, code_verifier=code_verifier
            )
        )
        output_result(grant.model_dump(exclude={"raw"}), json_output, debug)
    except Exception as e:
        output_error(e, json_output, debug)
