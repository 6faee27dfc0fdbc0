"""Adapter layer package for external integration boundaries."""

from .assertion_signer import (
	ServiceAccountAssertionSigner,
	adapter_build_service_assertion,
	adapter_sign_service_account_assertion,
)
from .error_classifier import adapter_classify_error
from .errors import (
	ClassifiedError,
	ErrorKind,
	FeedbackFetchError,
	MailDeliveryError,
	ReportAdapterError,
	SigningError,
	SummarizationError,
	TokenExchangeError,
)
from .feedback_api import FeedbackApiClient
from .interfaces import (
	AccessTokenProviderPort,
	AssertionSignerPort,
	BearerTokenProviderPort,
	FeedbackSourcePort,
	MailerPort,
	SummarizerPort,
	TokenExchangerPort,
)
from .internal_token import InternalJwtTokenProvider
from .mailer import SmtpMailer
from .summarizer import CompletionSummarizer
from .token_cache import IamTokenCache
from .token_exchanger import IamTokenExchanger

__all__ = [
	"AccessTokenProviderPort",
	"AssertionSignerPort",
	"BearerTokenProviderPort",
	"ClassifiedError",
	"CompletionSummarizer",
	"ErrorKind",
	"FeedbackApiClient",
	"FeedbackFetchError",
	"FeedbackSourcePort",
	"IamTokenCache",
	"IamTokenExchanger",
	"InternalJwtTokenProvider",
	"MailDeliveryError",
	"MailerPort",
	"ReportAdapterError",
	"ServiceAccountAssertionSigner",
	"SigningError",
	"SmtpMailer",
	"SummarizationError",
	"SummarizerPort",
	"TokenExchangeError",
	"TokenExchangerPort",
	"adapter_build_service_assertion",
	"adapter_classify_error",
	"adapter_sign_service_account_assertion",
]
