"""Configuration management for the wallet lookup."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .models import NetworkMode


# Load .env file from project root
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
_config_path = _project_root / "config.json"

load_dotenv(_env_path)

# Defaults (used when config.json / env vars are missing or incomplete)
_DEFAULTS = {
    "mainnet_rpc_url": "https://api.mainnet-beta.solana.com",
    "devnet_rpc_url": "https://api.devnet.solana.com",
    "storage_path": "~/.wallet_lookup/storage.json",
    "rpc_timeout": 30.0,         # seconds, per HTTP request
    "explorer_url": "https://solscan.io",
    "history_preview": 5,        # recent searches shown by the CLI
}


def _load_config_json() -> dict:
    """Load config.json from project root. Returns empty dict if missing."""
    if not _config_path.exists():
        return {}
    try:
        with open(_config_path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        print(f"[WARN] Could not parse config.json: {e}  -- using defaults")
        return {}


@dataclass
class Config:
    """Application configuration."""
    # RPC endpoints per network mode
    mainnet_rpc_url: str = _DEFAULTS["mainnet_rpc_url"]
    devnet_rpc_url: str = _DEFAULTS["devnet_rpc_url"]

    # Where preferences are persisted
    storage_path: Path = Path(_DEFAULTS["storage_path"]).expanduser()

    rpc_timeout: float = _DEFAULTS["rpc_timeout"]
    explorer_url: str = _DEFAULTS["explorer_url"]
    history_preview: int = _DEFAULTS["history_preview"]

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from .env + config.json."""
        user_cfg = _load_config_json()

        rpc_timeout = float(user_cfg.get("rpc_timeout", _DEFAULTS["rpc_timeout"]))
        if rpc_timeout <= 0:
            raise ValueError(
                f"rpc_timeout must be a positive number of seconds, got {rpc_timeout}"
            )

        history_preview = int(user_cfg.get(
            "history_preview", _DEFAULTS["history_preview"]
        ))

        storage_path = os.getenv("WALLET_LOOKUP_STORAGE") or _DEFAULTS["storage_path"]

        return cls(
            mainnet_rpc_url=os.getenv("MAINNET_RPC_URL") or _DEFAULTS["mainnet_rpc_url"],
            devnet_rpc_url=os.getenv("DEVNET_RPC_URL") or _DEFAULTS["devnet_rpc_url"],
            storage_path=Path(storage_path).expanduser(),
            rpc_timeout=rpc_timeout,
            explorer_url=str(user_cfg.get("explorer_url", _DEFAULTS["explorer_url"])).rstrip("/"),
            history_preview=max(0, history_preview),
        )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, with helpful error messages."""
        try:
            return cls.from_env()
        except ValueError as e:
            print(f"\n[ERROR] Configuration Error:\n{e}\n")
            print("Check config.json in the project root:")
            print('  "rpc_timeout"      seconds per RPC request (> 0)')
            print('  "history_preview"  recent searches to show')
            print('  "explorer_url"     block explorer base URL\n')
            raise

    def rpc_url_for(self, mode: NetworkMode) -> str:
        """RPC endpoint backing the given network mode."""
        if mode is NetworkMode.DEV:
            return self.devnet_rpc_url
        return self.mainnet_rpc_url

    def _explorer_suffix(self, mode: NetworkMode) -> str:
        return "?cluster=devnet" if mode is NetworkMode.DEV else ""

    def explorer_tx_url(self, signature: str, mode: NetworkMode = NetworkMode.MAIN) -> str:
        return f"{self.explorer_url}/tx/{signature}{self._explorer_suffix(mode)}"

    def explorer_account_url(self, address: str, mode: NetworkMode = NetworkMode.MAIN) -> str:
        return f"{self.explorer_url}/account/{address}{self._explorer_suffix(mode)}"


def get_config() -> Config:
    """Get the application configuration (singleton pattern)."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


_config: Config | None = None
