"""Discord bot for the Solana Wallet Lookup."""

import logging
import os
import sys
from pathlib import Path

import discord
from discord import app_commands
from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).parent / ".env")

from wallet_lookup.api.base import APIError
from wallet_lookup.config import Config
from wallet_lookup.formatting import format_amount, format_sol, short, time_ago
from wallet_lookup.lookup import LookupOrchestrator, ValidationError
from wallet_lookup.models import LookupResult, NetworkMode
from wallet_lookup.preferences import PreferenceStore
from wallet_lookup.storage import JSONFileStore

logger = logging.getLogger("wallet_lookup_bot")


# ---------------------------------------------------------------------------
# Embed builders
# ---------------------------------------------------------------------------

def network_name(mode: NetworkMode) -> str:
    return "devnet" if mode is NetworkMode.DEV else "mainnet"


def build_lookup_embed(result: LookupResult, config: Config, favorite: bool = False) -> discord.Embed:
    """Build a Discord embed from a LookupResult."""
    title = f"{'⭐ ' if favorite else ''}Wallet {short(result.address, 6)}"
    embed = discord.Embed(
        title=title,
        url=config.explorer_account_url(result.address, result.network_mode),
        color=discord.Color.green(),
    )

    embed.add_field(name="Balance", value=f"**{format_sol(result.balance)} SOL**", inline=True)
    embed.add_field(name="Network", value=network_name(result.network_mode), inline=True)
    embed.add_field(name="Address", value=f"`{result.address}`", inline=False)

    if result.tokens:
        lines = [
            f"{short(t.mint, 6)}  {format_amount(t.amount)}"
            for t in result.tokens[:5]
        ]
        if len(result.tokens) > 5:
            lines.append(f"... and {len(result.tokens) - 5} more")
        embed.add_field(
            name=f"Tokens ({len(result.tokens)})",
            value="```\n" + "\n".join(lines) + "\n```",
            inline=False,
        )
    else:
        embed.add_field(name="Tokens", value="No token holdings.", inline=False)

    if result.activity:
        lines = []
        for entry in result.activity:
            when = "pending" if entry.pending else time_ago(entry.occurred_at)
            mark = "Y" if entry.succeeded else "N"
            url = config.explorer_tx_url(entry.signature, result.network_mode)
            lines.append(f"{mark} [{short(entry.signature, 6)}]({url}) {when}")
        embed.add_field(name="Recent Transactions", value="\n".join(lines), inline=False)
    else:
        embed.add_field(name="Recent Transactions", value="None.", inline=False)

    return embed


def build_list_embed(title: str, addresses: tuple[str, ...], empty: str) -> discord.Embed:
    """Build an embed listing addresses."""
    embed = discord.Embed(title=title, color=discord.Color.blurple())
    if addresses:
        embed.description = "```\n" + "\n".join(
            f"{i}. {a}" for i, a in enumerate(addresses, 1)
        ) + "\n```"
    else:
        embed.description = empty
    return embed


def build_error_embed(message: str, title: str = "Error") -> discord.Embed:
    return discord.Embed(
        title=title,
        description=f"```\n{message[:3900]}\n```",
        color=discord.Color.red(),
    )


# ---------------------------------------------------------------------------
# Bot setup
# ---------------------------------------------------------------------------

class WalletLookupBot(discord.Client):
    def __init__(self):
        intents = discord.Intents.default()
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)
        self.config = Config.load()
        self.preferences: PreferenceStore | None = None
        self.orchestrator: LookupOrchestrator | None = None

    async def setup_hook(self):
        self.preferences = await PreferenceStore.load(JSONFileStore(self.config.storage_path))
        self.orchestrator = LookupOrchestrator(self.preferences, self.config)

        guild_id = os.getenv("DISCORD_GUILD_ID")
        if guild_id:
            guild = discord.Object(id=int(guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info("Slash commands synced to guild %s", guild_id)
        else:
            await self.tree.sync()
            logger.info("Slash commands synced globally (may take up to 1 hour to propagate)")

    async def on_ready(self):
        logger.info("Logged in as %s (ID: %s)", self.user, self.user.id)

    async def close(self):
        if self.orchestrator:
            await self.orchestrator.aclose()
        if self.preferences:
            await self.preferences.flush()
        await super().close()


bot = WalletLookupBot()


# ---------------------------------------------------------------------------
# Slash commands
# ---------------------------------------------------------------------------

@bot.tree.command(name="lookup", description="Show balance, tokens and recent transactions of a wallet")
@app_commands.describe(address="Solana wallet address")
async def cmd_lookup(interaction: discord.Interaction, address: str):
    await interaction.response.defer()

    try:
        result = await bot.orchestrator.lookup(address)
    except ValidationError as e:
        await interaction.followup.send(embed=build_error_embed(str(e), title="Invalid Address"))
        return
    except APIError as e:
        logger.warning("Lookup of %s failed: %s", address, e)
        await interaction.followup.send(embed=build_error_embed(str(e), title="Lookup Failed"))
        return
    except Exception as e:
        logger.exception("Error in /lookup")
        await interaction.followup.send(embed=build_error_embed(str(e)))
        return

    embed = build_lookup_embed(result, bot.config, bot.preferences.is_favorite(result.address))
    await interaction.followup.send(embed=embed)


@bot.tree.command(name="history", description="Show recent searches")
async def cmd_history(interaction: discord.Interaction):
    embed = build_list_embed(
        "Recent Searches", bot.preferences.search_history, "No recent searches."
    )
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name="clear_history", description="Clear recent searches")
async def cmd_clear_history(interaction: discord.Interaction):
    bot.preferences.clear_history()
    await interaction.response.send_message("Search history cleared.")


@bot.tree.command(name="favorite", description="Add a wallet to favorites")
@app_commands.describe(address="Solana wallet address")
async def cmd_favorite(interaction: discord.Interaction, address: str):
    address = address.strip()
    if not address:
        await interaction.response.send_message(embed=build_error_embed("Please enter a Solana address"))
        return
    bot.preferences.add_favorite(address)
    await interaction.response.send_message(f"Added `{address}` to favorites.")


@bot.tree.command(name="unfavorite", description="Remove a wallet from favorites")
@app_commands.describe(address="Solana wallet address")
async def cmd_unfavorite(interaction: discord.Interaction, address: str):
    address = address.strip()
    if not bot.preferences.is_favorite(address):
        await interaction.response.send_message(f"`{address}` is not a favorite.")
        return
    bot.preferences.remove_favorite(address)
    await interaction.response.send_message(f"Removed `{address}` from favorites.")


@bot.tree.command(name="favorites", description="Show favorite wallets")
async def cmd_favorites(interaction: discord.Interaction):
    embed = build_list_embed("Favorites", bot.preferences.favorites, "No favorites yet.")
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name="network", description="Switch between mainnet and devnet")
async def cmd_network(interaction: discord.Interaction):
    mode = bot.preferences.toggle_network_mode()
    await interaction.response.send_message(f"Now querying **{network_name(mode)}**.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("ERROR: DISCORD_BOT_TOKEN not set in .env file")
        print("Get a bot token at https://discord.com/developers/applications")
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    bot.run(token)


if __name__ == "__main__":
    main()
