"""Tests for the command-line scripts."""

import importlib.util
import signal
import sys
import time
import types
from pathlib import Path

import orjson
import pytest

from ticket_app.gateway import (
    ApiGateway,
    Catalog,
    Identity,
    OrderDraft,
    PerformRef,
    SessionTiers,
    Tier,
    parse_envelope,
    receipt_from_envelope,
)

SCRIPTS_DIR = Path(__file__).parent.parent.parent / "scripts"

ACCOUNTS_YAML = """
defaults:
  gateway: "ticket_app_script_gateways:create"
  policy:
    retry_burst_size: 1

accounts:
  "13800000000":
    ticket:
      ticket_id: "T1"
    gateway_options:
      succeed: true
  "13900000000":
    ticket:
      ticket_id: "T1"
    gateway_options:
      succeed: false
  "13700000000":
    ticket:
      ticket_id: ""
"""


def _load_script(name: str) -> types.ModuleType:
    spec = importlib.util.spec_from_file_location(f"script_{name}", SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class InstantGateway(ApiGateway):
    """Gateway for a sale that opened a minute ago."""

    def __init__(self, account):
        self.succeed = account.gateway_options.get("succeed", False)

    def fetch_identity(self):
        return Identity(nickname="tester")

    def fetch_catalog(self, ticket_id):
        return Catalog(ticket_id=ticket_id, name="Summer Tour",
                       sell_start_ms=int(time.time() * 1000) - 60_000,
                       sessions=(PerformRef("P1", "Night 1"),))

    def fetch_session_tiers(self, ticket_id, perform_id):
        return SessionTiers(perform_id=perform_id,
                            tiers=(Tier("I1", "S1", "Floor", salable=True),))

    def build_order(self, item_id, sku_id, count):
        return OrderDraft(item_id=item_id, sku_id=sku_id, buy_count=count)

    def submit_order(self, draft):
        ret = "SUCCESS::调用成功" if self.succeed else "F-10000::sold out"
        body = orjson.dumps({"api": "mtop.trade.order.create", "ret": [ret], "data": {}})
        return receipt_from_envelope(parse_envelope(body))


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "accounts.yaml").write_text(ACCOUNTS_YAML, encoding="utf-8")

    module = types.ModuleType("ticket_app_script_gateways")
    module.create = InstantGateway
    monkeypatch.setitem(sys.modules, module.__name__, module)
    return tmp_path


@pytest.fixture
def run_account(monkeypatch):
    script = _load_script("run_account")
    handlers = {}
    monkeypatch.setattr(signal, "signal", lambda signum, handler: handlers.setdefault(signum, handler))
    script.installed_handlers = handlers
    return script


class TestRunAccount:
    """Test suite for the account runner."""

    def test_success_exit_code(self, run_account, config_dir: Path) -> None:
        """Test the exit code after a placed order."""
        code = run_account.main(["13800000000", "--config-dir", str(config_dir)])

        assert code == 0
        assert signal.SIGINT in run_account.installed_handlers

    def test_not_acquired_exit_code(self, run_account, config_dir: Path) -> None:
        """Test the exit code when no ticket was acquired."""
        assert run_account.main(["13900000000", "--config-dir", str(config_dir)]) == 1

    def test_invalid_account_exit_code(self, run_account, config_dir: Path) -> None:
        """Test the exit code for an invalid account."""
        assert run_account.main(["13700000000", "--config-dir", str(config_dir)]) == 2


class TestValidateConfig:
    """Test suite for the configuration validation script."""

    def test_reports_invalid_account(self, config_dir: Path) -> None:
        """Test that an invalid account fails validation."""
        script = _load_script("validate_config")
        assert script.main(config_dir) == 1

    def test_all_valid(self, tmp_path: Path) -> None:
        """Test a file where every account is valid."""
        (tmp_path / "accounts.yaml").write_text(
            'accounts:\n  "13800000000":\n    ticket:\n      ticket_id: "T1"\n',
            encoding="utf-8"
        )
        script = _load_script("validate_config")
        assert script.main(tmp_path) == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a directory without an accounts file."""
        script = _load_script("validate_config")
        assert script.main(tmp_path) == 1
