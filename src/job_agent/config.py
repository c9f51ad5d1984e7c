"""
Settings
========

Operator settings for the agent: LLM credentials, search key, server and
export options.

Sources, lowest precedence first:
    1. YAML settings file (``--config settings.yaml``)
    2. ``.secrets/`` directory, one file per key, loaded into the environment
    3. Environment variables

Secrets are stored in:
    .secrets/llm_key          -> LLM_API_KEY
    .secrets/serpapi_key      -> SERPAPI_API_KEY
    .secrets/openrouter_key   -> OPENROUTER_API_KEY
    .secrets/groq_key         -> GROQ_API_KEY

Usage:
    from job_agent.config import Settings

    settings = Settings.load("settings.yaml")
    registry.configure(settings.to_provider_config())
"""

import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .providers.registry import DEFAULT_TIMEOUT, ProviderConfig, ProviderKind

logger = logging.getLogger(__name__)

# Mapping of secret file names to environment variable names
SECRET_MAPPINGS = {
    "llm_key": "LLM_API_KEY",
    "serpapi_key": "SERPAPI_API_KEY",
    "openrouter_key": "OPENROUTER_API_KEY",
    "groq_key": "GROQ_API_KEY",
}

# Environment variable -> Settings field
ENV_MAPPINGS = {
    "LLM_API_KEY": "api_key",
    "LLM_PROVIDER_URL": "base_url",
    "LLM_PROVIDER_KIND": "provider_kind",
    "LLM_MODEL": "model",
    "LLM_TEMPERATURE": "temperature",
    "LLM_MAX_TOKENS": "max_tokens",
    "LLM_TIMEOUT": "timeout",
    "SERPAPI_API_KEY": "serpapi_key",
    "OPENROUTER_API_KEY": "openrouter_key",
    "GROQ_API_KEY": "groq_key",
    "JOB_AGENT_DOWNLOADS": "downloads_dir",
    "PORT": "port",
}


def find_secrets_dir() -> Optional[Path]:
    """
    Find the .secrets directory.

    Looks in the current working directory, then the user's home.
    """
    for candidate in (Path.cwd() / ".secrets", Path.home() / ".secrets"):
        if candidate.is_dir():
            return candidate
    return None


def load_secrets(secrets_dir: Optional[Path] = None, override: bool = False) -> Dict[str, str]:
    """
    Load secrets from a .secrets/ directory into environment variables.

    Args:
        secrets_dir: Path to secrets directory (auto-detected if None)
        override: Whether to override existing environment variables

    Returns:
        Dict of loaded secrets (env var -> value)
    """
    if secrets_dir is None:
        secrets_dir = find_secrets_dir()

    if secrets_dir is None:
        logger.debug("No .secrets directory found")
        return {}

    loaded = {}
    for filename, env_var in SECRET_MAPPINGS.items():
        secret_file = Path(secrets_dir) / filename
        if not secret_file.exists():
            continue

        if env_var in os.environ and not override:
            logger.debug(f"{env_var} already set, skipping")
            continue

        secret_value = secret_file.read_text().strip()
        if secret_value:
            os.environ[env_var] = secret_value
            loaded[env_var] = secret_value
            logger.info(f"Loaded {env_var} from {filename}")
        else:
            logger.warning(f"{secret_file} is empty")

    return loaded


@dataclass
class Settings:
    """Operator settings."""
    api_key: str = ""
    base_url: Optional[str] = None
    provider_kind: str = ProviderKind.AUTO.value
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = DEFAULT_TIMEOUT
    serpapi_key: str = ""
    openrouter_key: str = ""
    groq_key: str = ""
    variant: str = "single"
    downloads_dir: str = "public/downloads"
    host: str = "0.0.0.0"
    port: int = 3000
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        settings = cls(**values, extra=extra)
        settings._coerce()
        return settings

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Settings":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file must contain a mapping: {path}")
        return cls.from_dict(data)

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        secrets_dir: Optional[Path] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "Settings":
        """Merge the YAML file, .secrets/ and the environment."""
        settings = cls.from_yaml(path) if path else cls()
        if environ is None:
            load_secrets(secrets_dir)
            environ = dict(os.environ)
        settings.apply_env(environ)
        return settings

    def apply_env(self, environ: Dict[str, str]) -> None:
        for env_var, attr in ENV_MAPPINGS.items():
            value = environ.get(env_var)
            if value:
                setattr(self, attr, value)
        self._coerce()

    def _coerce(self) -> None:
        self.temperature = float(self.temperature)
        self.timeout = float(self.timeout)
        self.port = int(self.port)
        if self.max_tokens is not None:
            self.max_tokens = int(self.max_tokens)

    def credentials(self) -> Dict[str, str]:
        creds = {}
        if self.openrouter_key:
            creds["openrouter"] = self.openrouter_key
        if self.groq_key:
            creds["groq"] = self.groq_key
        return creds

    def to_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            api_key=self.api_key,
            base_url=self.base_url or None,
            provider_kind=ProviderKind.parse(self.provider_kind),
            model=self.model or None,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            credentials=self.credentials(),
        )

    def has_llm_credentials(self) -> bool:
        return bool(self.api_key or self.credentials())
