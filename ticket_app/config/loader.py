"""Account configuration loader with layered parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    AccountConfig,
    AccountPolicy,
    LeaksConfig,
    ReauthConfig,
    TicketSelection,
    get_default_account,
)
from .validation import ConfigValidator

ACCOUNTS_FILE = "accounts.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages account configuration loading with layered precedence."""

    config_dir: Path
    filename: str = ACCOUNTS_FILE

    @classmethod
    def create(cls, config_dir: Optional[Path] = None,
               filename: str = ACCOUNTS_FILE) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(config_dir=Path(config_dir), filename=filename)

    @property
    def accounts_file(self) -> Path:
        return self.config_dir / self.filename

    def _load_file(self) -> dict[str, Any]:
        if not self.accounts_file.exists():
            return {}

        with open(self.accounts_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return data or {}

    def list_accounts(self) -> list[str]:
        """Login ids declared in the accounts file."""
        return [str(k) for k in (self._load_file().get("accounts") or {})]

    def merge_config(
        self,
        login_id: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with layered precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Per-account section
        3. File-level ``defaults`` section
        4. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(get_default_account(login_id))

        data = self._load_file()
        config = self._deep_merge(config, data.get("defaults") or {})

        account_config = (data.get("accounts") or {}).get(login_id) or {}
        config = self._deep_merge(config, account_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        config["login_id"] = login_id
        return config

    def load_account(
        self,
        login_id: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> AccountConfig:
        """Load, validate and type one account's configuration."""
        config = self.merge_config(login_id, overrides)

        errors = ConfigValidator.validate_config(config)
        if errors:
            details = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            raise ConfigurationError(
                f"Invalid configuration for account {login_id}: " + "; ".join(details),
                errors=errors,
                context={"login_id": login_id, "file": str(self.accounts_file)}
            )

        try:
            return build_account_config(config)
        except TypeError as e:
            # Unknown keys surface as unexpected dataclass arguments
            raise ConfigurationError(
                f"Unknown configuration key for account {login_id}: {e}",
                context={"login_id": login_id, "file": str(self.accounts_file)}
            ) from e

    def _dataclass_to_dict(self, obj: Any) -> Any:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                result[field_name] = self._dataclass_to_dict(getattr(obj, field_name))
            return result
        if isinstance(obj, (frozenset, tuple)):
            return list(obj)
        return obj

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def build_account_config(config: dict[str, Any]) -> AccountConfig:
    """Turn a merged, validated configuration dict into typed dataclasses."""
    policy_data = dict(config.get("policy") or {})
    leaks_data = dict(policy_data.pop("leaks", None) or {})
    leaks_data["eligible_grades"] = frozenset(leaks_data.get("eligible_grades") or ())

    ticket_data = dict(config.get("ticket") or {})
    ticket_data["ticket_id"] = str(ticket_data.get("ticket_id", ""))

    reauth_data = dict(config.get("reauth") or {})
    reauth_data["command"] = tuple(reauth_data.get("command") or ())

    return AccountConfig(
        login_id=str(config["login_id"]),
        remark=str(config.get("remark") or ""),
        ticket=TicketSelection(**ticket_data),
        policy=AccountPolicy(leaks=LeaksConfig(**leaks_data), **policy_data),
        reauth=ReauthConfig(**reauth_data),
        gateway=config.get("gateway"),
        gateway_options=dict(config.get("gateway_options") or {}),
    )
