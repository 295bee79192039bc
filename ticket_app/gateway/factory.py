"""Resolve the configured gateway factory for an account."""

import importlib
from typing import Callable

from ..config.defaults import AccountConfig
from ..errors import ConfigurationError
from .base import ApiGateway


def resolve_factory(reference: str) -> Callable[[AccountConfig], ApiGateway]:
    """
    Import a ``module:callable`` reference.

    Raises:
        ConfigurationError: If the module or attribute cannot be loaded
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Gateway reference must be 'module:callable', got {reference!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import gateway module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationError(f"Gateway factory {reference!r} is not callable")

    return factory


def create_gateway(account: AccountConfig) -> ApiGateway:
    """Build the gateway configured for ``account``."""
    if not account.gateway:
        raise ConfigurationError(
            f"No gateway configured for account {account.login_id}",
            context={"login_id": account.login_id}
        )

    gateway = resolve_factory(account.gateway)(account)
    if not isinstance(gateway, ApiGateway):
        raise ConfigurationError(
            f"Gateway factory {account.gateway!r} returned {type(gateway).__name__}, "
            "expected an ApiGateway"
        )
    return gateway
