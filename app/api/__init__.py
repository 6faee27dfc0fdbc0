"""HTTP surface of the report service: health, manual trigger and last-run views."""

from .application import create_api_application

__all__ = ["create_api_application"]
