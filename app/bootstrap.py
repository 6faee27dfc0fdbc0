"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from app.adapters import (
    CompletionSummarizer,
    FeedbackApiClient,
    IamTokenCache,
    IamTokenExchanger,
    InternalJwtTokenProvider,
    ServiceAccountAssertionSigner,
    SmtpMailer,
)
from app.api import create_api_application
from app.config import AppSettings, config_load_settings
from app.domain import EmailDetail
from app.jobs import WeeklyReportConfig, WeeklyReportOrchestrator, WeeklyReportScheduler


def bootstrap_create_token_cache(settings: AppSettings) -> IamTokenCache:
    """Build IAM token cache backed by the service account key.

    Args:
        settings: Validated runtime settings.

    Returns:
        IamTokenCache: Empty token cache.

    Raises:
        ValueError: Raised when key material settings are blank.
    """

    signer = ServiceAccountAssertionSigner(
        service_account_id=settings.service_account_id,
        key_id=settings.service_account_key_id,
        private_key=settings.service_account_private_key,
        audience=settings.iam_token_url,
    )
    exchanger = IamTokenExchanger(
        token_url=settings.iam_token_url,
        request_timeout_seconds=settings.iam_request_timeout_seconds,
    )
    return IamTokenCache(signer=signer, exchanger=exchanger)


def bootstrap_create_report_orchestrator(
    settings: AppSettings,
    token_cache: IamTokenCache | None = None,
) -> WeeklyReportOrchestrator:
    """Build weekly report orchestrator with concrete adapters.

    Args:
        settings: Validated runtime settings.
        token_cache: Optional shared IAM token cache.

    Returns:
        WeeklyReportOrchestrator: Fully wired orchestrator instance.

    Raises:
        ValueError: Raised when adapter configuration is invalid.
    """

    resolved_token_cache = token_cache or bootstrap_create_token_cache(settings)
    feedback_source = FeedbackApiClient(
        base_url=settings.feedback_base_url,
        token_provider=InternalJwtTokenProvider(
            secret=settings.feedback_jwt_secret,
            ttl_seconds=settings.feedback_jwt_ttl_seconds,
        ),
        request_timeout_seconds=settings.feedback_request_timeout_seconds,
    )
    summarizer = CompletionSummarizer(
        folder_id=settings.llm_folder_id,
        model=settings.llm_model,
        instruction=settings.llm_instruction,
        token_provider=resolved_token_cache,
        completion_url=settings.llm_completion_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        request_timeout_seconds=settings.llm_request_timeout_seconds,
    )
    mailer = SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_from,
        password=settings.smtp_password,
        timeout_seconds=settings.smtp_timeout_seconds,
    )
    return WeeklyReportOrchestrator(
        feedback_source=feedback_source,
        summarizer=summarizer,
        mailer=mailer,
        config=WeeklyReportConfig(
            email_detail=EmailDetail(
                to=tuple(settings.email_to),
                sender=settings.email_from,
                subject=settings.email_subject,
            ),
            window_days=settings.report_window_days,
        ),
    )


def bootstrap_create_scheduler(
    settings: AppSettings,
    orchestrator: WeeklyReportOrchestrator,
) -> WeeklyReportScheduler:
    """Build weekly scheduler for the given orchestrator.

    Args:
        settings: Validated runtime settings.
        orchestrator: Report orchestrator fired by the scheduler.

    Returns:
        WeeklyReportScheduler: Scheduler that is not started yet.

    Raises:
        ValueError: Raised when schedule settings are invalid.
    """

    return WeeklyReportScheduler(
        orchestrator=orchestrator,
        weekday=settings.schedule_weekday,
        hour=settings.schedule_hour,
        minute=settings.schedule_minute,
        schedule_timezone=settings.schedule_timezone,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    token_cache = bootstrap_create_token_cache(resolved_settings)
    orchestrator = bootstrap_create_report_orchestrator(resolved_settings, token_cache=token_cache)
    scheduler = None
    if resolved_settings.scheduler_enabled:
        scheduler = bootstrap_create_scheduler(resolved_settings, orchestrator)
    return create_api_application(
        settings=resolved_settings,
        report_orchestrator=orchestrator,
        token_provider=token_cache,
        scheduler=scheduler,
    )
