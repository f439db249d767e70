"""Configuration module for the request queue.

This module provides two configuration classes:

- QueueConfig carries the four middleware stages of a queue engine along
  with its name and JSON detection pattern.
- TransportConfig carries the settings of the default httpx transport.

Example:
    Basic usage with defaults:

        >>> config = QueueConfig()
        >>> config.name
        'default'

    Plugging middleware in:

        >>> def add_auth(request):
        ...     request["headers"]["authorization"] = "Bearer token"
        ...     return request
        >>> config = QueueConfig(name="billing", request_middleware=add_auth)

    Loading transport settings from environment:

        >>> import os
        >>> os.environ['FETCH_QUEUE_TIMEOUT_SECONDS'] = '10'
        >>> TransportConfig.from_env().timeout_seconds
        10.0
"""

import os
import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, field_validator

from fetch_queue.core.middleware import (
    default_error,
    default_post_action,
    default_request,
    default_response,
)


class QueueConfig(BaseModel):
    """Configuration for a queue engine.

    This immutable configuration replaces any implicit shared state: every
    middleware stage the engine runs is read from here at construction.

    Attributes:
        name: Queue name used in log events and metric labels.
        request_middleware: ``(descriptor) -> descriptor | None``. Returning
            None or False skips the exchange for this cycle.
        response_middleware: ``(payload, descriptor) -> Any``. Its result
            resolves the caller's future.
        error_middleware: ``(error, descriptor) -> Any``. Its result rejects
            the caller's future.
        post_action_middleware: ``(error, result, descriptor) -> None``.
            Raising keeps the request at the head of the queue for a retry.
        json_content_type: Regular expression matched against the response
            content-type to decide whether the body is decoded as JSON.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    name: str = Field(
        default="default",
        description="Queue name used in logs and metric labels",
    )
    request_middleware: Callable[..., Any] = Field(
        default=default_request,
        description="Request stage: (descriptor) -> descriptor | None",
    )
    response_middleware: Callable[..., Any] = Field(
        default=default_response,
        description="Response stage: (payload, descriptor) -> Any",
    )
    error_middleware: Callable[..., Any] = Field(
        default=default_error,
        description="Error stage: (error, descriptor) -> Any",
    )
    post_action_middleware: Callable[..., Any] = Field(
        default=default_post_action,
        description="Post-action stage: (error, result, descriptor) -> None, raise to nack",
    )
    json_content_type: str = Field(
        default=r"application/json",
        description="Regex matched against content-type to trigger JSON decoding",
    )

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank queue names.

        Raises:
            ValueError: If the name is empty or whitespace.
        """
        if not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()

    @field_validator("json_content_type")
    @classmethod
    def validate_json_content_type(cls, v: str) -> str:
        """Ensure the content-type pattern compiles.

        Raises:
            ValueError: If the pattern is not a valid regular expression.
        """
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"json_content_type is not a valid regex: {e}") from e
        return v

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "QueueConfig":
        """Create configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values.

        Returns:
            QueueConfig instance populated from the dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)


class TransportConfig(BaseModel):
    """Configuration for the default httpx transport.

    Attributes:
        timeout_seconds: Timeout applied to every exchange. Must be greater
            than 0 and at most 300. Default is 30.
        follow_redirects: Whether redirects are followed. Default is True.
        base_url: Prefix for relative request urls. Default is empty.
        default_headers: Headers sent with every request.

    Example:
        >>> config = TransportConfig(timeout_seconds=5, base_url="https://api.example.com")
        >>> config.timeout_seconds
        5.0
    """

    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout in seconds for one exchange (0-300]",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects",
    )
    base_url: str = Field(
        default="",
        description="Base URL for relative request urls",
    )
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request",
    )

    model_config = {"frozen": True}

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout_seconds(cls, v: float) -> float:
        """Validate timeout is within acceptable range.

        Raises:
            ValueError: If timeout is not in (0, 300].
        """
        if not (0 < v <= 300):
            raise ValueError(f"timeout_seconds must be greater than 0 and at most 300, got {v}")
        return v

    @classmethod
    def from_env(cls, prefix: str = "FETCH_QUEUE_") -> "TransportConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, e.g.
        ``FETCH_QUEUE_TIMEOUT_SECONDS``. ``default_headers`` is read as a
        comma-separated list of ``name=value`` pairs.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            TransportConfig instance populated from environment variables.
        """
        config_dict: dict[str, Any] = {}

        for field_name in ("timeout_seconds", "follow_redirects", "base_url"):
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is not None:
                config_dict[field_name] = env_value

        raw_headers = os.environ.get(f"{prefix}DEFAULT_HEADERS")
        if raw_headers:
            headers: dict[str, str] = {}
            for pair in raw_headers.split(","):
                name, sep, value = pair.partition("=")
                if not sep:
                    raise ValueError(f"Invalid header pair in {prefix}DEFAULT_HEADERS: {pair!r}")
                headers[name.strip()] = value.strip()
            config_dict["default_headers"] = headers

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "TransportConfig":
        """Create configuration from a dictionary."""
        return cls(**config_dict)
