# =============================================================================
# Configuration Management
# =============================================================================
# Loading and saving SMTP transport settings.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/sendhawk/config.toml (default: ~/.config/sendhawk/)
#
# Example config.toml:
#
#   [smtp]
#   host = "smtp.example.com"
#   port = 587
#   username = "user@example.com"
#   auth_method = "PLAIN"        # or "CRAM-MD5"
#   security = "starttls"        # or "ssl" (implicit TLS, usually port 465)
#   timeout = 30.0               # optional, seconds; omitted = wait forever
#
# IMPORTANT: passwords are NOT stored in the config file. They are read from
# the system keyring at send time (or passed in directly by the caller):
#
#   keyring set sendhawk user@example.com
#
# The process environment controls one more setting: APP_ENV=development
# turns off TLS certificate verification for local test servers.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import keyring
import tomli_w  # For writing TOML (tomllib is read-only)

# Application identifier used in XDG paths and as the default keyring service
APP_NAME = "sendhawk"

DEVELOPMENT_ENV_VAR = "APP_ENV"

AUTH_METHODS = ("PLAIN", "CRAM-MD5")
SECURITY_MODES = ("ssl", "starttls")


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for SendHawk.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/sendhawk/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def is_development() -> bool:
    """
    True when APP_ENV=development.

    In development mode the SMTP transport skips certificate verification,
    which is what self-signed local servers need. Never set it in production.
    """
    return os.environ.get(DEVELOPMENT_ENV_VAR, "").strip().lower() == "development"


@dataclass
class SMTPConfig:
    """
    Connection settings for SMTPTransport.

    Nothing here is validated against the server. A wrong host or bad
    credentials only show up when a send is attempted.

    Attributes:
        host: SMTP server hostname (e.g., "smtp.example.com").
        port: Server port. Standard ports:
              - 465 for implicit TLS ("ssl")
              - 587 for STARTTLS ("starttls")
              - 25 for server-to-server relay
        username: Login name. Empty together with an empty password means
                  the server is used without authentication.
        password: Login password. Never written by save(); if empty,
                  resolve_password() looks it up in the keyring.
        auth_method: "PLAIN" or "CRAM-MD5".
        security: "ssl" (implicit TLS) or "starttls" (upgrade when offered).
        timeout: Per-operation timeout in seconds. None = no deadline.
        keyring_service: Service name for the keyring lookup.
    """
    host: str = ""
    port: int = 587                     # Default to STARTTLS port
    username: str = ""
    password: str = ""
    auth_method: str = "PLAIN"          # "PLAIN" or "CRAM-MD5"
    security: str = "starttls"          # "ssl" or "starttls"
    timeout: float | None = None        # None = wait forever
    keyring_service: str = APP_NAME

    def __post_init__(self) -> None:
        self.auth_method = self.auth_method.upper()
        self.security = self.security.lower()
        if self.auth_method not in AUTH_METHODS:
            raise ConfigError(
                f"Unknown auth_method {self.auth_method!r}, expected one of {', '.join(AUTH_METHODS)}"
            )
        if self.security not in SECURITY_MODES:
            raise ConfigError(
                f"Unknown security {self.security!r}, expected one of {', '.join(SECURITY_MODES)}"
            )

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the default config file."""
        return get_xdg_config_home() / "config.toml"

    def resolve_password(self) -> str:
        """
        Returns the password to log in with.

        Uses the configured password if set, otherwise asks the system
        keyring for (keyring_service, username). Returns "" if neither has
        one; the server will then reject the login.
        """
        if self.password:
            return self.password
        if not self.username:
            return ""
        return keyring.get_password(self.keyring_service, self.username) or ""

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "SMTPConfig":
        """
        Load configuration from a TOML file.

        Args:
            path: File to read. Defaults to config_file_path().

        Returns:
            Loaded SMTPConfig, or defaults if the file doesn't exist.

        Raises:
            ConfigError: If the file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to a TOML file (without the password).

        Creates the parent directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SMTPConfig":
        """Create an SMTPConfig from parsed TOML."""
        smtp = data.get("smtp", {})
        if not isinstance(smtp, dict):
            raise ConfigError("Invalid config file: [smtp] must be a table")

        timeout = smtp.get("timeout")
        try:
            return cls(
                host=str(smtp.get("host", "")),
                port=int(smtp.get("port", 587)),
                username=str(smtp.get("username", "")),
                auth_method=str(smtp.get("auth_method", "PLAIN")),
                security=str(smtp.get("security", "starttls")),
                timeout=float(timeout) if timeout is not None else None,
                keyring_service=str(smtp.get("keyring_service", APP_NAME)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config file: {e}") from e

    def _to_dict(self) -> dict[str, Any]:
        """Convert to a dict for TOML serialization."""
        smtp: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "auth_method": self.auth_method,
            "security": self.security,
            "keyring_service": self.keyring_service,
        }
        # TOML has no null
        if self.timeout is not None:
            smtp["timeout"] = self.timeout
        return {"smtp": smtp}

    def __repr__(self) -> str:
        return (
            f"SMTPConfig(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, auth_method={self.auth_method!r}, "
            f"security={self.security!r})"
        )


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass
