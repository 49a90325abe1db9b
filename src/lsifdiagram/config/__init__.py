"""Configuration for lsif-diagram."""

from lsifdiagram.config.config_loader import ConfigError, ConfigFileNotFoundError, ConfigLoader, ConfigParsingError
from lsifdiagram.config.config_schema import (
	AppConfigSchema,
	ModelSchema,
	MonikerSchema,
	NamingSchema,
	ViewsSchema,
)

__all__ = [
	"AppConfigSchema",
	"ConfigError",
	"ConfigFileNotFoundError",
	"ConfigLoader",
	"ConfigParsingError",
	"ModelSchema",
	"MonikerSchema",
	"NamingSchema",
	"ViewsSchema",
]
