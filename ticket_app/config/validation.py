"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates account configuration dictionaries."""

    NON_NEGATIVE_POLICY_FIELDS = (
        "retry_base_interval_ms",
        "early_submit_lead_ms",
        "priority_purchase_lead_ms",
        "sale_open_override_ms",
        "submit_delay_ms",
    )

    @staticmethod
    def validate_policy(params: dict[str, Any]) -> list[ValidationError]:
        """Validate account policy parameters."""
        errors = []

        for name in ("retry_burst_size", "retry_cycle_ms", "poll_interval_ms"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        for name in ConfigValidator.NON_NEGATIVE_POLICY_FIELDS:
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative integer",
                        value=value
                    ))

        if "leaks" in params:
            leaks = params["leaks"]
            if not isinstance(leaks, dict):
                errors.append(ValidationError(
                    field="leaks",
                    message="Must be a mapping",
                    value=leaks
                ))
            else:
                errors.extend(ConfigValidator.validate_leaks(leaks))

        return errors

    @staticmethod
    def validate_leaks(params: dict[str, Any]) -> list[ValidationError]:
        """Validate inventory polling parameters."""
        errors = []

        for name in ("attempts", "interval_ms", "override_buy_count", "grace_period_ms"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 0:
                    errors.append(ValidationError(
                        field=f"leaks.{name}",
                        message="Must be a non-negative integer",
                        value=value
                    ))

        if "eligible_grades" in params:
            value = params["eligible_grades"]
            if not isinstance(value, (list, tuple, set, frozenset)) or not all(
                _is_int(v) and v >= 1 for v in value
            ):
                errors.append(ValidationError(
                    field="leaks.eligible_grades",
                    message="Must be a list of 1-based tier indices",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_ticket(params: dict[str, Any]) -> list[ValidationError]:
        """Validate ticket selection parameters."""
        errors = []

        ticket_id = params.get("ticket_id")
        if not ticket_id or not isinstance(ticket_id, (str, int)):
            errors.append(ValidationError(
                field="ticket.ticket_id",
                message="Ticket id is required",
                value=ticket_id
            ))

        for name in ("buy_count", "session_index", "grade_index"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 1:
                    errors.append(ValidationError(
                        field=f"ticket.{name}",
                        message="Must be an integer >= 1",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_reauth(params: dict[str, Any]) -> list[ValidationError]:
        """Validate re-authentication helper parameters."""
        errors = []

        if params.get("enabled"):
            command = params.get("command")
            if not isinstance(command, (list, tuple)) or not command:
                errors.append(ValidationError(
                    field="reauth.command",
                    message="Must be a non-empty argv list when reauth is enabled",
                    value=command
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged account configuration."""
        errors = []

        errors.extend(ConfigValidator.validate_ticket(config.get("ticket", {})))

        if "policy" in config:
            errors.extend(ConfigValidator.validate_policy(config["policy"]))

        if "reauth" in config:
            errors.extend(ConfigValidator.validate_reauth(config["reauth"]))

        gateway = config.get("gateway")
        if gateway is not None and (not isinstance(gateway, str) or ":" not in gateway):
            errors.append(ValidationError(
                field="gateway",
                message="Must be a 'module:callable' reference",
                value=gateway
            ))

        return errors
