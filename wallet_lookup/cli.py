"""Command-line interface for the wallet lookup."""

import asyncio
import logging
import os
import sys

# Fix Windows encoding issues
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    try:
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    except Exception:
        pass

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .api.base import APIError
from .config import Config
from .formatting import format_amount, format_sol, short, time_ago
from .lookup import LookupOrchestrator, ValidationError
from .models import LookupResult, NetworkMode
from .preferences import PreferenceStore
from .storage import JSONFileStore


console = Console(force_terminal=True)

EXAMPLE_ADDRESS = "86xCnPeV69n6t3DnyGvkKobf9FdN2H9oiVDdaMpo2MMY"

TOKENS_SHOWN = 5


def print_banner():
    """Print the application banner."""
    banner = (
        "\n[bold cyan]"
        "+-----------------------------------------------------------+\n"
        "|           SOLANA WALLET LOOKUP                            |\n"
        "|     Balance, tokens and recent activity of any address    |\n"
        "+-----------------------------------------------------------+"
        "[/bold cyan]\n"
    )
    console.print(banner)


def network_label(mode: NetworkMode) -> str:
    if mode is NetworkMode.DEV:
        return "[yellow]devnet[/yellow]"
    return "[green]mainnet[/green]"


def display_lookup_result(
    result: LookupResult,
    config: Config,
    preferences: PreferenceStore,
):
    """Display a lookup result as a summary panel plus tables."""
    console.print()

    star = "[yellow]*[/yellow] " if preferences.is_favorite(result.address) else ""
    console.print(Panel(
        f"{star}[bold]{result.address}[/bold]\n"
        f"Balance: [bold green]{format_sol(result.balance)} SOL[/bold green]\n"
        f"Network: {network_label(result.network_mode)}\n"
        f"[dim]{config.explorer_account_url(result.address, result.network_mode)}[/dim]",
        title="Wallet",
        border_style="green",
    ))

    if result.tokens:
        table = Table(title=f"Tokens ({len(result.tokens)})")
        table.add_column("#", style="cyan", width=4)
        table.add_column("Mint", style="green")
        table.add_column("Amount", style="yellow", justify="right")

        for i, holding in enumerate(result.tokens[:TOKENS_SHOWN], 1):
            table.add_row(str(i), holding.mint, format_amount(holding.amount))

        console.print(table)
        if len(result.tokens) > TOKENS_SHOWN:
            console.print(f"[dim]... and {len(result.tokens) - TOKENS_SHOWN} more[/dim]")
    else:
        console.print("[dim]No token holdings.[/dim]")

    if result.activity:
        table = Table(title="Recent Transactions")
        table.add_column("Signature", style="cyan")
        table.add_column("When", width=12)
        table.add_column("OK", width=4)
        table.add_column("Explorer", style="dim")

        for entry in result.activity:
            table.add_row(
                short(entry.signature, 8),
                "pending" if entry.pending else time_ago(entry.occurred_at),
                "[green]Y[/green]" if entry.succeeded else "[red]N[/red]",
                config.explorer_tx_url(entry.signature, result.network_mode),
            )

        console.print(table)
    else:
        console.print("[dim]No recent transactions.[/dim]")


def display_history(preferences: PreferenceStore, limit: int | None = None):
    """Show recent searches, numbered so they can be re-run."""
    history = preferences.search_history
    if not history:
        console.print("[dim]No recent searches.[/dim]")
        return

    shown = history[:limit] if limit is not None else history
    if not shown:
        return

    table = Table(title="Recent Searches")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Address")
    for i, address in enumerate(shown, 1):
        table.add_row(str(i), short(address, 8))
    console.print(table)


def display_favorites(preferences: PreferenceStore):
    """Show favorited addresses."""
    favorites = preferences.favorites
    if not favorites:
        console.print("[dim]No favorites yet.[/dim]")
        return

    table = Table(title=f"Favorites ({len(favorites)})")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Address", style="yellow")
    for i, address in enumerate(favorites, 1):
        table.add_row(str(i), address)
    console.print(table)


async def run_lookup(
    orchestrator: LookupOrchestrator,
    address: str,
) -> LookupResult | None:
    """Run one lookup, reporting errors instead of raising them."""
    try:
        with console.status("[bold]Fetching wallet...[/bold]"):
            result = await orchestrator.lookup(address)
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        return None
    except APIError as e:
        console.print(Panel(str(e), title="Lookup Failed", border_style="red"))
        return None

    display_lookup_result(result, orchestrator.config, orchestrator.preferences)
    return result


INTERACTIVE_HELP = """
[bold]Commands:[/bold]
  <address>   Look up a wallet
  <number>    Re-run a recent search
  e           Try an example address
  f           Toggle favorite for the last wallet
  fav         List favorites
  h           Show recent searches
  clear       Clear search history
  n           Toggle mainnet / devnet
  q           Quit
"""


async def interactive_lookup(orchestrator: LookupOrchestrator):
    """Run the interactive lookup loop."""
    config = orchestrator.config
    preferences = orchestrator.preferences
    current: LookupResult | None = None

    console.print(INTERACTIVE_HELP)

    while True:
        if current is None:
            display_history(preferences, config.history_preview)

        console.print(f"\nNetwork: {network_label(preferences.network_mode)}")
        try:
            command = Prompt.ask("  Address or command").strip()
        except EOFError:
            break

        if command in ("q", "quit", "exit"):
            break
        elif command == "e":
            current = await run_lookup(orchestrator, EXAMPLE_ADDRESS) or current
        elif command == "f":
            if current is None:
                console.print("[red]Look up a wallet first.[/red]")
            elif preferences.toggle_favorite(current.address):
                console.print(f"[yellow]Added {short(current.address, 8)} to favorites.[/yellow]")
            else:
                console.print(f"Removed {short(current.address, 8)} from favorites.")
        elif command == "fav":
            display_favorites(preferences)
        elif command == "h":
            display_history(preferences)
        elif command == "clear":
            preferences.clear_history()
            current = None
            console.print("Search history cleared.")
        elif command == "n":
            mode = preferences.toggle_network_mode()
            current = None
            console.print(f"Switched to {network_label(mode)}.")
        elif command.isdigit():
            history = preferences.search_history
            index = int(command) - 1
            if 0 <= index < len(history):
                current = await run_lookup(orchestrator, history[index]) or current
            else:
                console.print("[red]No such entry in recent searches.[/red]")
        else:
            current = await run_lookup(orchestrator, command) or current

        # Persist before blocking on the next prompt
        await preferences.flush()


USAGE = """
[bold]Usage:[/bold]
  python -m wallet_lookup.cli                      Interactive mode
  python -m wallet_lookup.cli ADDRESS              Look up one wallet
  python -m wallet_lookup.cli --history            Show recent searches
  python -m wallet_lookup.cli --favorites          Show favorites
  python -m wallet_lookup.cli --clear-history      Clear recent searches
  python -m wallet_lookup.cli --network            Show the active network
  python -m wallet_lookup.cli --toggle-network     Switch mainnet / devnet
  python -m wallet_lookup.cli --help               Show this help

[bold]Setup:[/bold]
  Optional .env entries: MAINNET_RPC_URL, DEVNET_RPC_URL, WALLET_LOOKUP_STORAGE
"""


async def run(args: list[str]) -> int:
    """Dispatch command line arguments. Returns the exit code."""
    try:
        config = Config.load()
    except ValueError:
        return 1

    preferences = await PreferenceStore.load(JSONFileStore(config.storage_path))

    async with LookupOrchestrator(preferences, config) as orchestrator:
        try:
            if not args:
                await interactive_lookup(orchestrator)
            elif args[0] == "--history":
                display_history(preferences)
            elif args[0] == "--favorites":
                display_favorites(preferences)
            elif args[0] == "--clear-history":
                preferences.clear_history()
                console.print("Search history cleared.")
            elif args[0] == "--network":
                console.print(f"Network: {network_label(preferences.network_mode)}")
            elif args[0] == "--toggle-network":
                mode = preferences.toggle_network_mode()
                console.print(f"Switched to {network_label(mode)}.")
            elif args[0].startswith("--"):
                console.print(f"[red]Unknown option: {args[0]}[/red]")
                console.print(USAGE)
                return 2
            else:
                if await run_lookup(orchestrator, args[0]) is None:
                    return 1
        finally:
            await preferences.flush()

    return 0


def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    print_banner()

    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        console.print(USAGE)
        return

    try:
        sys.exit(asyncio.run(run(sys.argv[1:])))
    except (KeyboardInterrupt, EOFError):
        console.print("\n[dim]Bye.[/dim]")


if __name__ == "__main__":
    main()
