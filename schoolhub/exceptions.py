"""Custom exceptions for the SchoolHub client."""

from typing import Dict, Optional


class SchoolHubError(Exception):
	"""Base exception for SchoolHub errors."""
	pass


class SchoolHubConnectionError(SchoolHubError):
	"""Connection to the SchoolHub API failed."""
	pass


class SchoolHubDataError(SchoolHubError):
	"""Response envelope missing, malformed or not JSON."""
	pass


class SchoolHubAPIError(SchoolHubError):
	"""The server rejected the request.

	The server supplied message is kept verbatim so callers can show it
	as is.
	"""

	def __init__(self, message: str, status: Optional[int] = None):
		super().__init__(message)
		self.message = message
		self.status = status


class SchoolHubAuthError(SchoolHubAPIError):
	"""Token missing, expired or not allowed to access the resource."""
	pass


class SchoolHubValidationError(SchoolHubError):
	"""Payload failed client-side validation.

	``errors`` maps a dotted field path to a human readable message.
	"""

	def __init__(self, errors: Dict[str, str]):
		self.errors = dict(errors)
		summary = "; ".join(f"{field}: {msg}" for field, msg in sorted(self.errors.items()))
		super().__init__(f"Validation failed - {summary}" if summary else "Validation failed")
