"""
Configuration service for loading and validating pinning settings.
"""
import os
import configparser
from typing import Optional, Dict, Any
import logging

from ..models.config import Config, ConfigValidationError, ConfigValidationResult


class ConfigService:
    """Service for loading and validating configuration."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def load_config(self, config_path: str, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Load configuration from a property file.

        Args:
            config_path: Path to the configuration file
            overrides: Values taking precedence over the file, keyed like the file

        Returns:
            Config object with loaded settings

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid or has validation errors
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        config_data = self._load_config_file(config_path)
        if overrides:
            config_data.update(overrides)

        return self._build_config(config_data)

    def load_from_values(self, values: Dict[str, Any]) -> Config:
        """Build configuration without a file, e.g. from command line arguments."""
        return self._build_config(dict(values))

    def _build_config(self, config_data: Dict[str, Any]) -> Config:
        config = self._create_config_from_data(config_data)

        validation_result = self.validate_config(config)

        if validation_result.has_errors():
            error_summary = validation_result.get_error_summary()
            raise ValueError(f"Configuration validation failed:\n{error_summary}")

        if validation_result.has_warnings():
            warning_summary = validation_result.get_error_summary()
            self.logger.warning(f"Configuration warnings:\n{warning_summary}")

        return config

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration data from file."""
        config_parser = configparser.ConfigParser()

        try:
            config_parser.read(config_path)
        except configparser.Error as e:
            raise ValueError(f"Failed to parse configuration file: {e}")

        # Flatten to section.key
        config_data = {}
        for section in config_parser.sections():
            for key, value in config_parser.items(section):
                config_data[f"{section}.{key}"] = value

        for key, value in config_parser.defaults().items():
            if key not in config_data:
                config_data[key] = value

        return config_data

    def _create_config_from_data(self, config_data: Dict[str, Any]) -> Config:
        """Create Config object from configuration data."""
        config_mapping = {
            # Pin settings
            "pin.pem_path": ("pem_path", str),
            "pem_path": ("pem_path", str),
            "pin.ignore_expired_pinned_cert": ("ignore_expired_pinned_cert", bool),
            "ignore_expired_pinned_cert": ("ignore_expired_pinned_cert", bool),

            # Connection settings
            "connection.host": ("host", str),
            "host": ("host", str),
            "connection.port": ("port", int),
            "port": ("port", int),
            "connection.timeout_seconds": ("timeout_seconds", int),
            "timeout_seconds": ("timeout_seconds", int),

            # Application settings
            "app.log_level": ("log_level", str),
            "log_level": ("log_level", str),
            "app.log_file_path": ("log_file_path", str),
            "log_file_path": ("log_file_path", str),
        }

        config_kwargs = {}

        for config_key, raw_value in config_data.items():
            if config_key in config_mapping and raw_value is not None:
                field_name, field_type = config_mapping[config_key]
                try:
                    if field_type == bool:
                        value = self._parse_bool(raw_value)
                    elif field_type == int:
                        value = int(raw_value)
                    else:
                        value = str(raw_value)

                    config_kwargs[field_name] = value
                except (ValueError, TypeError) as e:
                    raise ValueError(f"Invalid value for {config_key}: {raw_value} ({e})")

        return Config(**config_kwargs)

    def _parse_bool(self, value: Any) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "on", "enabled")
        return bool(value)

    def validate_config(self, config: Config) -> ConfigValidationResult:
        """
        Validate configuration settings.

        Args:
            config: Configuration object to validate

        Returns:
            ConfigValidationResult with validation results
        """
        errors = []
        warnings = []

        if not config.pem_path:
            errors.append(ConfigValidationError(
                "pem_path",
                "A PEM file with the certificate chain to pin is required"
            ))
        elif not os.path.exists(config.pem_path):
            errors.append(ConfigValidationError(
                "pem_path",
                f"Certificate file not found: {config.pem_path}"
            ))

        if not config.host:
            warnings.append(ConfigValidationError(
                "host",
                "No host configured, only the chain can be inspected",
                "warning"
            ))

        if config.ignore_expired_pinned_cert:
            warnings.append(ConfigValidationError(
                "ignore_expired_pinned_cert",
                "An expired pinned certificate will be accepted",
                "warning"
            ))

        if config.log_file_path:
            log_dir = os.path.dirname(config.log_file_path)
            if log_dir and not os.path.exists(log_dir):
                warnings.append(ConfigValidationError(
                    "log_file_path",
                    f"Log directory does not exist: {log_dir}",
                    "warning"
                ))

        if config.timeout_seconds > 120:
            warnings.append(ConfigValidationError(
                "timeout_seconds",
                "Handshake timeout over 2 minutes",
                "warning"
            ))

        return ConfigValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    def create_default_config_file(self, config_path: str) -> None:
        """
        Create a default configuration file with example settings.

        Args:
            config_path: Path where to create the config file
        """
        config_content = """# Certificate Pinning Configuration File

[pin]
pem_path = certs/pinned_chain.pem
ignore_expired_pinned_cert = false

[connection]
host =
port = 443
timeout_seconds = 10

[app]
log_level = INFO
log_file_path = logs/certpin.log
"""

        config_dir = os.path.dirname(config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(config_path, 'w') as f:
            f.write(config_content)

        self.logger.info(f"Created default configuration file: {config_path}")
