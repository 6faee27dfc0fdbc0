"""Domain models used across application layer boundaries."""

from .models import AccessToken, EmailDetail, FeedbackItem, ServiceAssertion
from .timeline import domain_build_stage_event
from .timestamps import domain_format_utc_timestamp, domain_parse_utc_timestamp

__all__ = [
	"AccessToken",
	"EmailDetail",
	"FeedbackItem",
	"ServiceAssertion",
	"domain_build_stage_event",
	"domain_format_utc_timestamp",
	"domain_parse_utc_timestamp",
]
