"""Runtime configuration of the calculator service."""
import ipaddress
import os
from typing import Any, Dict, Mapping, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, field_validator

ENV_PREFIX = "CALCULATOR_"


def build_url(host: Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address], port: int, path: str) -> str:
    """
    Build the http URL of an endpoint.

    IPv6 literals are wrapped in brackets, e.g. ``http://[::1]:8080/api/v1/calculate``.

    :param host: Server IP address
    :param int port: Server TCP port
    :param str path: Absolute endpoint path
    :return: Endpoint URL
    :rtype: str
    :raises ValueError: If host is not an IP address
    """
    ip = ipaddress.ip_address(str(host))
    # httpx only accepts an IPv6 host in its bracketed form
    netloc_host = f"[{ip}]" if ip.version == 6 else str(ip)
    return str(httpx.URL(scheme="http", host=netloc_host, port=port, path=path))


class ServiceConfig(BaseModel):
    """
    Settings shared by the HTTP server, the batch client and the CLI.

    Values come from keyword arguments or from ``CALCULATOR_*`` environment variables.
    """

    # Make the Pydantic instance immutable (read-only), so a running server
    # cannot see its network or evaluation settings change underneath it.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, ge=1, le=65535, description="Server TCP port")
    api_path: str = Field(default="/api/v1/calculate", description="Path of the calculate endpoint")
    max_depth: int = Field(default=100, ge=1, le=250, description="Maximum parenthesis nesting")
    report_division_by_zero: bool = Field(
        default=True, description="Report division by zero with its own message instead of the generic one"
    )
    log_level: str = Field(default="INFO", description="Logging level name")

    @property
    def url(self) -> str:
        return build_url(self.host, self.port, self.api_path)

    @field_validator("api_path")
    def api_path_must_be_absolute(cls, v: str) -> str:
        """Ensure the endpoint path starts with a slash."""
        if not v.startswith("/"):
            raise ValueError("api_path must start with '/'")
        return v

    @field_validator("log_level")
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ServiceConfig":
        """
        Build a configuration from ``CALCULATOR_*`` environment variables.

        Explicit keyword overrides win over the environment.

        :param environ: Mapping to read instead of ``os.environ``
        :return: Validated configuration
        :rtype: ServiceConfig
        :raises pydantic.ValidationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
