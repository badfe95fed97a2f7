"""CLI interface for tosan-oauth."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tosan_oauth.config import display_bank_id, get_settings
from tosan_oauth.providers.tosan import TosanStrategy

app = typer.Typer(
    name="tosan-oauth",
    help="Inspect the Tosan OAuth strategy configuration",
)
console = Console()


@app.command("authorize-url")
def authorize_url(
    bank_id: Optional[str] = typer.Option(
        None, "--bank-id", "-b", help="Bank id for this login (defaults to configured)"
    ),
    sandbox: Optional[bool] = typer.Option(
        None, "--sandbox/--no-sandbox", help="Override the configured sandbox flag"
    ),
):
    """
    Print the Tosan authorization URL for the current configuration.
    """
    config = get_settings().tosan_config(sandbox=sandbox)
    strategy = TosanStrategy(config)
    url = strategy.authorization_url(bank_id)

    if config.sandbox:
        console.print(Panel.fit("Sandbox mode", style="yellow"), highlight=False)
    # Plain output so the URL can be piped
    typer.echo(url)


@app.command("config")
def show_config():
    """
    Show the normalized strategy configuration.

    The client secret is masked.
    """
    config = get_settings().tosan_config()

    table = Table(title="Tosan Configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="magenta")

    for name, value in config.model_dump().items():
        if name == "client_secret" and value:
            value = "***"
        elif hasattr(value, "value"):
            value = value.value
        table.add_row(name, str(value))
    table.add_row("display_bank_id", display_bank_id(config.bank_id))

    console.print(table)


if __name__ == "__main__":
    app()
