import asyncio
from typing import Optional

import click

from xapo_auth.cli.utils import configure_logging, load_adapter, output_error, output_result


@click.command(name="profile")
@click.option("--token", required=True, envvar="XAPO_ACCESS_TOKEN", help="Xapo access token")
@click.option("--config", "config_path", help="Path to the Xapo config file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def profile(token: str, config_path: Optional[str], json_output: bool, debug: bool) -> None:
    """Fetch and print the normalized Xapo profile for an access token.

    The token may also be supplied through XAPO_ACCESS_TOKEN.

    \b
    Examples:
        xapo-auth profile --token "$TOKEN"
        xapo-auth profile --token "$TOKEN" --json-output
    """
    configure_logging(debug)

    try:
        adapter = load_adapter(config_path)
        result = asyncio.run(adapter.fetch_profile(token))
        output_result(result.model_dump(exclude={"raw_body"}), json_output, debug)
    except Exception as e:
        output_error(e, json_output, debug)
