"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service,
the standalone weekly scheduler, or a single report run.
"""

import argparse
import logging

import uvicorn

from app.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_report_orchestrator,
    bootstrap_create_scheduler,
)
from app.config import config_configure_logging, config_load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when a `report-run` run fails.
    """

    argument_parser = argparse.ArgumentParser(description="Weekly feedback report runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "report-run", "scheduler"),
        help="Runtime command: `api` starts server with the weekly scheduler, `report-run` runs one "
        "report now, `scheduler` runs the weekly scheduler without HTTP",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "report-run":
        orchestrator = bootstrap_create_report_orchestrator(settings)
        execution_result = orchestrator.job_run_weekly_report()
        if execution_result.status != "success":
            raise SystemExit(1)
        return

    if parsed_arguments.command == "scheduler":
        scheduler = bootstrap_create_scheduler(settings, bootstrap_create_report_orchestrator(settings))
        try:
            scheduler.scheduler_run_forever()
        except KeyboardInterrupt:
            logger.info("Weekly report scheduler interrupted")
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
