"""
Lab configuration.

Settings come from the process environment, optionally seeded from a `.env`
file in the working directory (the convention used throughout the labs):

    AZURE_OPENAI_ENDPOINT=https://<resource>.openai.azure.us/
    AZURE_OPENAI_KEY=<key>
    AZURE_OPENAI_DEPLOYMENT=gpt-4o-mini
    AZURE_OPENAI_EMBEDDING_DEPLOYMENT=text-embedding-ada-002

`AZURE_OPENAI_API_KEY` is accepted as an alias for `AZURE_OPENAI_KEY`.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .console import log_error, log_warning
from .errors import ConfigurationError

DEFAULT_CHAT_DEPLOYMENT = "gpt-4o-mini"
DEFAULT_EMBEDDING_DEPLOYMENT = "text-embedding-ada-002"
DEFAULT_API_VERSION = "2024-06-01"
DEFAULT_OUTPUT_DIR = "lab_output"
DEFAULT_TIMEOUT_SECONDS = 60.0

GOVERNMENT_HOST_SUFFIXES = (".openai.azure.us",)


@dataclass(frozen=True)
class LabSettings:
    endpoint: str
    api_key: str
    chat_deployment: str = DEFAULT_CHAT_DEPLOYMENT
    embedding_deployment: str = DEFAULT_EMBEDDING_DEPLOYMENT
    api_version: str = DEFAULT_API_VERSION
    tavily_api_key: Optional[str] = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_government(self) -> bool:
        return is_government_endpoint(self.endpoint)

    def redacted(self) -> dict:
        """Settings as a dict that is safe to print."""
        key = self.api_key
        masked = f"{key[:4]}…{key[-2:]}" if len(key) > 8 else "****"
        return {
            "endpoint": self.endpoint,
            "api_key": masked,
            "chat_deployment": self.chat_deployment,
            "embedding_deployment": self.embedding_deployment,
            "api_version": self.api_version,
            "tavily": "configured" if self.tavily_api_key else "not configured",
            "output_dir": self.output_dir,
            "timeout_seconds": self.timeout_seconds,
            "government_cloud": self.is_government,
        }


def _host(url: str) -> str:
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return (parsed.hostname or "").lower()


def is_government_endpoint(url: str) -> bool:
    """True when `url` points at an Azure Government OpenAI resource."""
    host = _host(url or "")
    return any(host.endswith(suffix) for suffix in GOVERNMENT_HOST_SUFFIXES)


def _lookup(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        val = (env.get(name) or "").strip()
        if val:
            return val
    return ""


def load_settings(env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> LabSettings:
    """Build `LabSettings` from `env` (defaults to `os.environ`).

    Every missing required variable is reported before raising, so a reader
    can fix the `.env` file in one pass.
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    endpoint = _lookup(env, "AZURE_OPENAI_ENDPOINT")
    api_key = _lookup(env, "AZURE_OPENAI_KEY", "AZURE_OPENAI_API_KEY")

    missing = []
    if not endpoint:
        missing.append("AZURE_OPENAI_ENDPOINT")
    if not api_key:
        missing.append("AZURE_OPENAI_KEY")
    if missing:
        for var in missing:
            log_error(f"Missing environment variable: {var}")
        raise ConfigurationError(
            "Missing environment variables: " + ", ".join(missing), missing=missing
        )

    if not _host(endpoint):
        raise ConfigurationError(f"AZURE_OPENAI_ENDPOINT is not a valid URL: {endpoint!r}")

    raw_timeout = _lookup(env, "LAB_TIMEOUT_SECONDS")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        raise ConfigurationError(f"LAB_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}")
    if timeout <= 0:
        raise ConfigurationError("LAB_TIMEOUT_SECONDS must be positive")

    settings = LabSettings(
        endpoint=endpoint,
        api_key=api_key,
        chat_deployment=_lookup(env, "AZURE_OPENAI_DEPLOYMENT") or DEFAULT_CHAT_DEPLOYMENT,
        embedding_deployment=_lookup(env, "AZURE_OPENAI_EMBEDDING_DEPLOYMENT") or DEFAULT_EMBEDDING_DEPLOYMENT,
        api_version=_lookup(env, "AZURE_OPENAI_API_VERSION") or DEFAULT_API_VERSION,
        tavily_api_key=_lookup(env, "TAVILY_API_KEY") or None,
        output_dir=_lookup(env, "LAB_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        timeout_seconds=timeout,
    )

    if not settings.is_government:
        log_warning(
            f"Endpoint {endpoint} is not an Azure Government host (*.openai.azure.us); continuing anyway."
        )
    return settings
