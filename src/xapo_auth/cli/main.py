import click

from xapo_auth.cli.authorize_url import authorize_url
from xapo_auth.cli.exchange import exchange
from xapo_auth.cli.profile import profile


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Xapo OAuth adapter CLI"""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(authorize_url)
cli.add_command(exchange)
cli.add_command(profile)
