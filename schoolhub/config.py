"""Settings loaded from the environment and an optional ``.env`` file."""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
	CONF_BASE_URL,
	CONF_LIST_STALE,
	CONF_STATS_STALE,
	CONF_TIMEOUT,
	CONF_TOKEN,
	DEFAULT_BASE_URL,
	DEFAULT_LIST_STALE_TIME,
	DEFAULT_STATS_STALE_TIME,
	DEFAULT_TIMEOUT_SECONDS,
)
from .validation import validate

_LOGGER = logging.getLogger(__name__)

SETTINGS_SCHEMA = vol.Schema(
	{
		vol.Required(CONF_BASE_URL, default=DEFAULT_BASE_URL): vol.All(str, vol.Url(msg="Base URL must be a valid URL")),
		vol.Optional(CONF_TOKEN, default=None): vol.Any(None, str),
		vol.Required(CONF_TIMEOUT, default=DEFAULT_TIMEOUT_SECONDS): vol.All(
			vol.Coerce(float), vol.Range(min=0, min_included=False, msg="Timeout must be positive"),
		),
		vol.Required(CONF_LIST_STALE, default=DEFAULT_LIST_STALE_TIME.total_seconds()): vol.All(
			vol.Coerce(float), vol.Range(min=0, msg="Stale time cannot be negative"),
		),
		vol.Required(CONF_STATS_STALE, default=DEFAULT_STATS_STALE_TIME.total_seconds()): vol.All(
			vol.Coerce(float), vol.Range(min=0, msg="Stale time cannot be negative"),
		),
	},
	extra=vol.REMOVE_EXTRA,
)


@dataclass
class SchoolHubSettings:
	base_url: str = DEFAULT_BASE_URL
	token: Optional[str] = None
	timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
	list_stale_seconds: float = DEFAULT_LIST_STALE_TIME.total_seconds()
	stats_stale_seconds: float = DEFAULT_STATS_STALE_TIME.total_seconds()

	@property
	def list_stale_time(self) -> timedelta:
		return timedelta(seconds=self.list_stale_seconds)

	@property
	def stats_stale_time(self) -> timedelta:
		return timedelta(seconds=self.stats_stale_seconds)


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> SchoolHubSettings:
	"""Build settings from ``env`` (defaults to ``os.environ``).

	When reading ``os.environ`` a ``.env`` file is loaded first; variables
	already set in the environment take precedence over the file.

	Raises:
		SchoolHubValidationError: A value is present but invalid.
	"""
	if env is None:
		load_dotenv(dotenv_path)
		env = os.environ
	raw = {key: value for key, value in env.items() if value != ""}
	values = validate(SETTINGS_SCHEMA, raw)
	base_url = values[CONF_BASE_URL].rstrip("/")
	if not values[CONF_TOKEN]:
		_LOGGER.debug("No API token configured; requests are sent unauthenticated")
	return SchoolHubSettings(
		base_url=base_url,
		token=values[CONF_TOKEN],
		timeout_seconds=values[CONF_TIMEOUT],
		list_stale_seconds=values[CONF_LIST_STALE],
		stats_stale_seconds=values[CONF_STATS_STALE],
	)
