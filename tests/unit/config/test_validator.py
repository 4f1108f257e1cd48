"""Tests for provider configuration validation."""

from __future__ import annotations

import pytest

from status_notifier.config.exceptions import ConfigValidationError
from status_notifier.config.models.base import RetryPolicy
from status_notifier.config.models.providers import (
    ApiKeyAuth,
    CustomProviderConfig,
    EmailProviderConfig,
    MSTeamsProviderConfig,
    PagerDutyProviderConfig,
    SlackProviderConfig,
    WebhookProviderConfig,
)
from status_notifier.config.validator import (
    ConfigBatchFailure,
    ConfigIssue,
    ConfigValidator,
    validate_provider_config,
    validate_provider_configs,
)
from status_notifier.notifications.registry import ProviderRegistry
from status_notifier.types.models import (
    ErrorCode,
    EventKind,
    NotificationFailure,
    NotificationSuccess,
    Severity,
)

# Test fixtures and helpers

SLACK_URL = "https://hooks.slack.com/services/T000/B000/XXXXXXXX"


def _slack(**overrides: object) -> dict[str, object]:
    return {"id": "ops-slack", "type": "slack", "webhook_url": SLACK_URL, **overrides}


def _issues(result: object) -> tuple[ConfigIssue, ...]:
    assert isinstance(result, NotificationFailure)
    cause = result.error.cause
    assert isinstance(cause, tuple)
    return cause  # pyright: ignore[reportUnknownVariableType]


@pytest.fixture
def validator() -> ConfigValidator:
    """Validator with an empty environment."""
    return ConfigValidator(environ={})


class TestValidateSingle:
    """ConfigValidator.validate behavior."""

    def test_valid_config_gets_defaults(self, validator: ConfigValidator) -> None:
        """Optional fields receive their documented defaults."""
        result = validator.validate(_slack())

        assert isinstance(result, NotificationSuccess)
        config = result.data
        assert isinstance(config, SlackProviderConfig)
        assert config.enabled is True
        assert config.timeout_ms == 10000
        assert config.min_severity is Severity.MINOR
        assert config.event_filter == []
        assert config.retry == RetryPolicy()
        assert config.retry.max_attempts == 3
        assert config.retry.initial_delay_ms == 1000
        assert config.retry.backoff_multiplier == 2.0
        assert config.retry.max_delay_ms == 30000
        assert config.rate_limit.max_notifications == 60
        assert config.rate_limit.period_ms == 60000

    def test_camel_case_keys_are_accepted(self, validator: ConfigValidator) -> None:
        """Keys may be given in camelCase."""
        result = validator.validate(
            {
                "id": "ops-slack",
                "type": "slack",
                "webhookUrl": SLACK_URL,
                "minSeverity": "major",
                "eventFilter": ["incident.opened"],
                "retry": {"maxAttempts": 5},
            }
        )

        assert isinstance(result, NotificationSuccess)
        assert result.data.min_severity is Severity.MAJOR
        assert result.data.event_filter == [EventKind.INCIDENT_OPENED]
        assert result.data.retry.max_attempts == 5

    def test_non_mapping_is_rejected(self, validator: ConfigValidator) -> None:
        """Anything but a mapping fails with a root-level issue."""
        result = validator.validate(["not", "a", "mapping"])

        issues = _issues(result)
        assert isinstance(result, NotificationFailure)
        assert result.error.code == ErrorCode.CONFIGURATION_ERROR
        assert result.error.provider_id == "<unknown>"
        assert issues[0].field == "<root>"

    def test_missing_type_is_reported(self, validator: ConfigValidator) -> None:
        """type is required before model dispatch."""
        issues = _issues(validator.validate({"id": "x"}))

        assert [issue.field for issue in issues] == ["type"]

    def test_all_issues_are_listed(self, validator: ConfigValidator) -> None:
        """Every invalid field appears in the failure message."""
        result = validator.validate(
            _slack(webhook_url="http://insecure.example.com", timeout_ms=50)
        )

        issues = _issues(result)
        fields = {issue.field for issue in issues}
        assert fields == {"webhook_url", "timeout_ms"}
        assert isinstance(result, NotificationFailure)
        assert result.error.message.startswith("Invalid configuration for provider 'ops-slack': ")
        assert "webhook_url: " in result.error.message
        assert result.error.retryable is False

    def test_unknown_keys_are_rejected(self, validator: ConfigValidator) -> None:
        """Typos in field names do not pass silently."""
        issues = _issues(validator.validate(_slack(webhok_url="x")))

        assert any(issue.field == "webhok_url" for issue in issues)

    def test_retry_max_delay_below_initial_is_rejected(self, validator: ConfigValidator) -> None:
        """max_delay_ms must be >= initial_delay_ms."""
        result = validator.validate(
            _slack(retry={"initial_delay_ms": 5000, "max_delay_ms": 1000})
        )

        assert isinstance(result, NotificationFailure)
        assert "max_delay_ms" in result.error.message

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("timeout_ms", 99),
            ("timeout_ms", 120001),
            ("retry", {"max_attempts": 0}),
            ("retry", {"max_attempts": 11}),
            ("retry", {"backoff_multiplier": 0.5}),
            ("rate_limit", {"max_notifications": 0}),
            ("min_severity", "urgent"),
            ("event_filter", ["incident.exploded"]),
        ],
    )
    def test_out_of_range_base_fields(
        self, validator: ConfigValidator, field: str, value: object
    ) -> None:
        """Shared numeric bounds and enums are enforced."""
        assert validator.validate(_slack(**{field: value})).success is False

    def test_unknown_type_without_registry_uses_custom_model(
        self, validator: ConfigValidator
    ) -> None:
        """Extra keys are kept for types without a dedicated model."""
        result = validator.validate({"id": "c", "type": "sms", "phone": "+100000"})

        assert isinstance(result, NotificationSuccess)
        assert isinstance(result.data, CustomProviderConfig)
        assert result.data.option("phone") == "+100000"

    def test_unknown_type_with_registry_is_rejected(self) -> None:
        """A registry limits accepted types and lists them."""
        validator = ConfigValidator(ProviderRegistry.with_builtins(), environ={})

        result = validator.validate({"id": "c", "type": "sms"})

        assert isinstance(result, NotificationFailure)
        assert "Unknown provider type 'sms'" in result.error.message
        assert "slack" in result.error.message

    def test_registry_model_is_used_for_registered_type(self) -> None:
        """A model registered with the type validates its entries."""
        registry = ProviderRegistry()
        registry.register("hook", lambda: lambda **_: None, config_model=WebhookProviderConfig)  # pyright: ignore[reportUnknownLambdaType, reportArgumentType]
        validator = ConfigValidator(registry, environ={})

        result = validator.validate({"id": "h", "type": "hook", "url": "https://example.com/in"})

        assert result.success is False


class TestSecrets:
    """env: references in secret fields."""

    def test_env_reference_is_resolved(self) -> None:
        """The variable's value replaces the reference."""
        validator = ConfigValidator(environ={"SLACK_HOOK": SLACK_URL})

        result = validator.validate(_slack(webhook_url="env:SLACK_HOOK"))

        assert isinstance(result, NotificationSuccess)
        assert result.data.webhook_url == SLACK_URL  # pyright: ignore[reportAttributeAccessIssue]

    def test_missing_variable_names_it(self, validator: ConfigValidator) -> None:
        """An unset variable fails validation and is named in the message."""
        result = validator.validate(_slack(webhook_url="env:SLACK_HOOK"))

        assert isinstance(result, NotificationFailure)
        assert "SLACK_HOOK" in result.error.message
        assert "webhook_url" in result.error.message

    def test_empty_variable_is_rejected(self) -> None:
        """Blank values count as missing."""
        validator = ConfigValidator(environ={"KEY": "  "})

        result = validator.validate(
            {"id": "pd", "type": "pagerduty", "integration_key": "env:KEY"}
        )

        assert result.success is False


class TestProviderModels:
    """Type-specific rules."""

    def test_email_requires_recipient(self, validator: ConfigValidator) -> None:
        """to must contain at least one address."""
        result = validator.validate(
            {
                "id": "mail",
                "type": "email",
                "smtp": {"host": "smtp.example.com", "port": 587},
                "from": "status@example.com",
                "to": [],
            }
        )

        assert isinstance(result, NotificationFailure)
        assert "to" in {issue.field for issue in _issues(result)}

    def test_email_accepts_pass_alias_and_defaults_prefix(self, validator: ConfigValidator) -> None:
        """SMTP password may be given as 'pass'."""
        result = validator.validate(
            {
                "id": "mail",
                "type": "email",
                "smtp": {
                    "host": "smtp.example.com",
                    "port": 465,
                    "secure": True,
                    "auth": {"user": "status", "pass": "hunter2hunter2"},
                },
                "from": "status@example.com",
                "to": ["ops@example.com"],
            }
        )

        assert isinstance(result, NotificationSuccess)
        config = result.data
        assert isinstance(config, EmailProviderConfig)
        assert config.subject_prefix == "[Status]"
        assert config.smtp.auth is not None
        assert config.smtp.auth.password == "hunter2hunter2"

    def test_email_rejects_invalid_address(self, validator: ConfigValidator) -> None:
        """Addresses are checked."""
        result = validator.validate(
            {
                "id": "mail",
                "type": "email",
                "smtp": {"host": "smtp.example.com", "port": 25},
                "from": "not-an-address",
                "to": ["ops@example.com"],
            }
        )

        assert result.success is False

    def test_webhook_without_url_names_url(self, validator: ConfigValidator) -> None:
        """A webhook entry lacking its URL is rejected with an issue on ``url``."""
        result = validator.validate({"id": "h", "type": "webhook"})

        assert isinstance(result, NotificationFailure)
        assert result.error.code == ErrorCode.CONFIGURATION_ERROR
        assert "url" in result.error.message
        assert [issue.field for issue in _issues(result)] == ["url"]

    def test_api_key_auth_requires_header_name(self, validator: ConfigValidator) -> None:
        """api-key authentication needs a header name."""
        base = {"id": "hook", "type": "webhook", "url": "https://example.com/in"}

        missing = validator.validate(
            {**base, "authentication": {"type": "api-key", "token": "abcdef"}}
        )
        present = validator.validate(
            {
                **base,
                "authentication": {"type": "api-key", "token": "abcdef", "header_name": "X-Key"},
            }
        )

        assert missing.success is False
        assert isinstance(present, NotificationSuccess)
        assert isinstance(present.data, WebhookProviderConfig)
        assert isinstance(present.data.authentication, ApiKeyAuth)

    def test_webhook_method_is_normalized(self, validator: ConfigValidator) -> None:
        """Methods are upper-cased; GET is not allowed."""
        base = {"id": "hook", "type": "webhook", "url": "https://example.com/in"}

        put = validator.validate({**base, "method": "put"})
        get = validator.validate({**base, "method": "GET"})

        assert isinstance(put, NotificationSuccess)
        assert put.data.method == "PUT"  # pyright: ignore[reportAttributeAccessIssue]
        assert get.success is False

    def test_pagerduty_defaults(self, validator: ConfigValidator) -> None:
        """Severity map defaults to critical/error/warning."""
        result = validator.validate(
            {"id": "pd", "type": "pagerduty", "integration_key": "R0UTINGKEY"}
        )

        assert isinstance(result, NotificationSuccess)
        config = result.data
        assert isinstance(config, PagerDutyProviderConfig)
        assert (config.severity.critical, config.severity.major, config.severity.minor) == (
            "critical",
            "error",
            "warning",
        )

    def test_msteams_colors_must_be_hex(self, validator: ConfigValidator) -> None:
        """Theme colors use #RRGGBB."""
        base = {
            "id": "teams",
            "type": "msteams",
            "webhook_url": "https://example.webhook.office.com/webhookb2/abc",
        }

        good = validator.validate({**base, "theme_color": {"critical": "#ff0000"}})
        bad = validator.validate({**base, "theme_color": {"critical": "red"}})

        assert isinstance(good, NotificationSuccess)
        assert isinstance(good.data, MSTeamsProviderConfig)
        assert good.data.theme_color.critical == "#FF0000"
        assert bad.success is False


class TestValidateMany:
    """Batch validation."""

    def test_all_valid_preserves_order(self, validator: ConfigValidator) -> None:
        """Every entry comes back in input order."""
        result = validator.validate_many(
            [_slack(id="a"), _slack(id="b"), {"id": "c", "type": "sms"}]
        )

        assert isinstance(result, NotificationSuccess)
        assert [config.id for config in result.data] == ["a", "b", "c"]

    def test_every_invalid_entry_is_reported_with_index(self, validator: ConfigValidator) -> None:
        """No entry is dropped and indexes match the input."""
        result = validator.validate_many(
            [_slack(id="a"), {"id": "b"}, _slack(id="c", timeout_ms=1), "junk"]
        )

        assert isinstance(result, ConfigBatchFailure)
        assert result.success is False
        assert [err.index for err in result.errors] == [1, 2, 3]

    def test_duplicate_ids_are_reported_on_later_entries(self, validator: ConfigValidator) -> None:
        """The first occurrence stays valid."""
        result = validator.validate_many([_slack(id="a"), _slack(id="a")])

        assert isinstance(result, ConfigBatchFailure)
        assert [err.index for err in result.errors] == [1]
        assert result.errors[0].issues[0].code == "duplicate_id"

    def test_ensure_valid_raises_with_errors(self, validator: ConfigValidator) -> None:
        """ensure_valid turns a batch failure into ConfigValidationError."""
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = validator.ensure_valid([_slack(id="a"), {"id": "b"}])

        assert [err.index for err in exc_info.value.errors] == [1]
        assert exc_info.value.context["validation_errors"][0]["index"] == 1


class TestModuleFunctions:
    """Convenience wrappers."""

    def test_validate_provider_config(self) -> None:
        """Uses the built-in models."""
        result = validate_provider_config(_slack(), environ={})

        assert isinstance(result, NotificationSuccess)
        assert isinstance(result.data, SlackProviderConfig)

    def test_validate_provider_configs(self) -> None:
        """Batch wrapper reports failures."""
        result = validate_provider_configs([_slack(), {"id": "x"}], environ={})

        assert isinstance(result, ConfigBatchFailure)
