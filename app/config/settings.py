"""Typed runtime settings with dotenv support and startup validation."""

import json
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_INSTRUCTION = (
    "Analyze the messages and write a short summary of them. "
    "Conclude with the overall tone and emotional mood of the people asking."
)


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the weekly feedback report service.

    Environment variable names map directly to field names in uppercase.
    Example: `feedback_base_url` reads from `FEEDBACK_BASE_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root logging level name.
        service_account_id: Service account used as assertion issuer.
        service_account_key_id: Authorized key identifier sent as `kid`.
        service_account_private_key: PEM-encoded RSA private key of the authorized key.
        iam_token_url: IAM token issuance endpoint.
        iam_request_timeout_seconds: IAM token request timeout.
        feedback_base_url: Internal feedback API base URL.
        feedback_jwt_secret: Shared secret signing internal feedback API tokens.
        feedback_jwt_ttl_seconds: Lifetime of internal feedback API tokens.
        feedback_request_timeout_seconds: Feedback API request timeout.
        llm_completion_url: Foundation model completion endpoint.
        llm_folder_id: Cloud folder identifier.
        llm_model: Model name within the folder.
        llm_instruction: System instruction for summarization.
        llm_temperature: Completion sampling temperature.
        llm_max_tokens: Completion token budget.
        llm_request_timeout_seconds: Completion request timeout.
        smtp_host: SMTP server host.
        smtp_port: SMTP implicit-TLS port.
        smtp_password: SMTP login password for `email_from`.
        smtp_timeout_seconds: SMTP socket timeout.
        email_from: Sender address and SMTP login.
        email_to: Static recipient list.
        email_subject: Report email subject.
        report_window_days: Feedback window length ending at run time.
        scheduler_enabled: Whether the API process runs the weekly scheduler.
        schedule_weekday: Fire weekday, Monday is 0.
        schedule_hour: Fire hour.
        schedule_minute: Fire minute.
        schedule_timezone: IANA timezone of the schedule.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = Field(default="INFO")

    service_account_id: str = Field(min_length=1)
    service_account_key_id: str = Field(min_length=1)
    service_account_private_key: str = Field(min_length=1)
    iam_token_url: str = Field(default="https://iam.api.cloud.yandex.net/iam/v1/tokens")
    iam_request_timeout_seconds: float = Field(default=10.0, gt=0)

    feedback_base_url: str = Field(min_length=1)
    feedback_jwt_secret: str = Field(min_length=1)
    feedback_jwt_ttl_seconds: int = Field(default=60, ge=1)
    feedback_request_timeout_seconds: float = Field(default=10.0, gt=0)

    llm_completion_url: str = Field(default="https://llm.api.cloud.yandex.net/foundationModels/v1/completion")
    llm_folder_id: str = Field(min_length=1)
    llm_model: str = Field(default="yandexgpt-32k/rc")
    llm_instruction: str = Field(default=_DEFAULT_INSTRUCTION)
    llm_temperature: float = Field(default=0.1, ge=0, le=1)
    llm_max_tokens: int = Field(default=32000, ge=1)
    llm_request_timeout_seconds: float = Field(default=60.0, gt=0)

    smtp_host: str = Field(default="smtp.yandex.ru")
    smtp_port: int = Field(default=465, ge=1, le=65535)
    smtp_password: str = Field(default="")
    smtp_timeout_seconds: float = Field(default=30.0, gt=0)
    email_from: str = Field(min_length=1)
    email_to: Annotated[list[str], NoDecode] = Field(min_length=1)
    email_subject: str = Field(default="Weekly feedback report")

    report_window_days: int = Field(default=7, ge=1)
    scheduler_enabled: bool = Field(default=True)
    schedule_weekday: int = Field(default=5, ge=0, le=6)
    schedule_hour: int = Field(default=0, ge=0, le=23)
    schedule_minute: int = Field(default=0, ge=0, le=59)
    schedule_timezone: str = Field(default="UTC")

    @field_validator(
        "service_account_id",
        "service_account_key_id",
        "feedback_base_url",
        "feedback_jwt_secret",
        "llm_folder_id",
        "llm_model",
        "email_from",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("service_account_private_key")
    @classmethod
    def _validate_private_key(cls, value: str) -> str:
        # dotenv files usually carry the PEM on one line with escaped newlines
        normalized_value = value.replace("\\n", "\n").strip()
        if not normalized_value:
            raise ValueError("value must not be blank")
        return normalized_value

    @field_validator("email_to", mode="before")
    @classmethod
    def _validate_email_to(cls, value: object) -> object:
        if isinstance(value, str):
            stripped_value = value.strip()
            if stripped_value.startswith("["):
                return json.loads(stripped_value)
            return [address.strip() for address in stripped_value.split(",") if address.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    @field_validator("schedule_timezone")
    @classmethod
    def _validate_schedule_timezone(cls, value: str) -> str:
        normalized_value = value.strip()
        try:
            ZoneInfo(normalized_value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"unknown schedule_timezone={value}") from error
        return normalized_value


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
