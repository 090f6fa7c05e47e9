"""Configuration management for Hookflow.

Configuration Priority Chain (highest to lowest):
1. Explicit arguments passed to ``load_config`` callers
2. Environment variables (HOOKFLOW_LOG_LEVEL, HOOKFLOW_TYPE_RESOLVER_URL, etc.)
3. Config file (.hookflowrc, hookflow.toml)
4. Built-in defaults

Config files are searched hierarchically:
1. Current directory
2. Parent directories (up to root)
3. User home directory (~/.hookflowrc or ~/.config/hookflow.toml)

Environment Variable Names:
- HOOKFLOW_LOG_LEVEL
- HOOKFLOW_LOG_FORMAT
- HOOKFLOW_LOG_FILE
- HOOKFLOW_TYPE_RESOLVER_URL
- HOOKFLOW_TYPE_RESOLVER_TIMEOUT
- HOOKFLOW_TYPE_RESOLVER_BATCH (true/false)
- HOOKFLOW_EXTERNAL_PREFIXES (comma-separated)

Example .hookflowrc (YAML):
```yaml
analysis:
  external_call_prefixes:
    - "api."
    - "billing."

type_resolver:
  enabled: true
  endpoint: http://localhost:7391
  timeout: 2.0

logging:
  level: INFO
  format: human
```

Example hookflow.toml:
```toml
[analysis]
external_call_prefixes = ["api.", "billing."]

[type_resolver]
enabled = true
endpoint = "${HOOKFLOW_TYPE_RESOLVER_URL}"

[logging]
level = "DEBUG"
format = "json"
file = "logs/hookflow.log"
```
"""

import json
import os
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli

from hookflow.exceptions import ConfigError
from hookflow.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_FILE_NAME = ".hookflowrc"
TOML_FILE_NAME = "hookflow.toml"

DEFAULT_EXTERNAL_CALL_PREFIXES = [
    "api.",
    "logger.",
    "analytics.",
    "fetch.",
    "axios.",
    "http.",
    "service.",
    "client.",
]

DEFAULT_BUILTIN_EXCLUSIONS = [
    "console.log",
    "console.error",
    "console.warn",
    "Math.",
    "Object.",
    "Array.",
    "String.",
    "Number.",
    "Date.",
    "JSON.",
]


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "human"  # "human" or "json"
    file: Optional[str] = None


@dataclass
class AnalysisConfig:
    """Reference extraction and traversal settings."""
    external_call_prefixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXTERNAL_CALL_PREFIXES)
    )
    builtin_exclusions: List[str] = field(
        default_factory=lambda: list(DEFAULT_BUILTIN_EXCLUSIONS)
    )
    ref_suffixes: List[str] = field(default_factory=lambda: ["Ref", "ref"])
    max_depth: int = 200


@dataclass
class TypeResolverConfig:
    """External type-resolution service settings."""
    enabled: bool = False
    endpoint: Optional[str] = None
    timeout: float = 2.0
    batch: bool = True


@dataclass
class HookflowConfig:
    """Complete Hookflow configuration."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    type_resolver: TypeResolverConfig = field(default_factory=TypeResolverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HookflowConfig":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            HookflowConfig instance

        Raises:
            ConfigError: If a section contains unknown keys
        """
        data = _expand_env_vars(data or {})

        try:
            return cls(
                analysis=AnalysisConfig(**data.get("analysis", {})),
                type_resolver=TypeResolverConfig(**data.get("type_resolver", {})),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "analysis": asdict(self.analysis),
            "type_resolver": asdict(self.type_resolver),
            "logging": asdict(self.logging),
        }

    def merge(self, other: "HookflowConfig") -> "HookflowConfig":
        """Merge with another config (other takes precedence).

        Args:
            other: Config to merge with

        Returns:
            New merged config
        """
        merged_dict = self.to_dict()
        for section, values in other.to_dict().items():
            merged_dict.setdefault(section, {}).update(values)
        return HookflowConfig.from_dict(merged_dict)


def _expand_env_vars(data: Union[Dict, list, str, Any]) -> Any:
    """Recursively expand ${VAR} and $VAR references in config data."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = re.compile(r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)')

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return pattern.sub(replace_var, data)
    else:
        return data


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find config file using hierarchical search.

    Looks for ``.hookflowrc`` then ``hookflow.toml`` in start_dir and each
    parent, then in the user's home directory.

    Args:
        start_dir: Starting directory for search (default: current directory)

    Returns:
        Path to config file, or None if not found
    """
    current = Path.cwd() if start_dir is None else Path(start_dir).resolve()

    while True:
        for name in (CONFIG_FILE_NAME, TOML_FILE_NAME):
            candidate = current / name
            if candidate.is_file():
                logger.info(f"Found config file: {candidate}")
                return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    home = Path.home()
    for candidate in (home / CONFIG_FILE_NAME, home / ".config" / TOML_FILE_NAME):
        if candidate.is_file():
            logger.info(f"Found config file: {candidate}")
            return candidate

    logger.debug("No config file found")
    return None


def load_config_file(file_path: Path) -> Dict[str, Any]:
    """Load configuration from file.

    Supports ``.hookflowrc`` (YAML or JSON), ``*.yaml``/``*.yml``/``*.json``
    and ``*.toml``.

    Raises:
        ConfigError: If file cannot be parsed or format not supported
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise ConfigError(f"Config file not found: {file_path}")

    try:
        content = file_path.read_text()
    except OSError as e:
        raise ConfigError(f"Failed to read config file {file_path}: {e}") from e

    if file_path.name == CONFIG_FILE_NAME or file_path.suffix in (".yaml", ".yml", ".json"):
        if file_path.suffix == ".json":
            try:
                return json.loads(content) or {}
            except json.JSONDecodeError as e:
                raise ConfigError(f"Failed to parse JSON config {file_path}: {e}") from e
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {file_path} as YAML or JSON: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config file {file_path} must contain a mapping")
        logger.debug(f"Loaded YAML config from {file_path}")
        return data or {}

    if file_path.suffix == ".toml":
        try:
            data = tomli.loads(content)
        except Exception as e:
            raise ConfigError(f"Failed to parse TOML config {file_path}: {e}") from e
        logger.debug(f"Loaded TOML config from {file_path}")
        return data

    raise ConfigError(f"Unsupported config file format: {file_path}")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config_from_env() -> Dict[str, Any]:
    """Load configuration from HOOKFLOW_* environment variables."""
    config: Dict[str, Any] = {}

    logging_section = {}
    if level := os.getenv("HOOKFLOW_LOG_LEVEL"):
        logging_section["level"] = level.upper()
    if log_format := os.getenv("HOOKFLOW_LOG_FORMAT"):
        logging_section["format"] = log_format
    if log_file := os.getenv("HOOKFLOW_LOG_FILE"):
        logging_section["file"] = log_file
    if logging_section:
        config["logging"] = logging_section

    resolver = {}
    if url := os.getenv("HOOKFLOW_TYPE_RESOLVER_URL"):
        resolver["endpoint"] = url
        resolver["enabled"] = True
    if timeout := os.getenv("HOOKFLOW_TYPE_RESOLVER_TIMEOUT"):
        try:
            resolver["timeout"] = float(timeout)
        except ValueError:
            logger.warning(f"Invalid HOOKFLOW_TYPE_RESOLVER_TIMEOUT value: {timeout}")
    if batch := os.getenv("HOOKFLOW_TYPE_RESOLVER_BATCH"):
        resolver["batch"] = _parse_bool(batch)
    if resolver:
        config["type_resolver"] = resolver

    if prefixes := os.getenv("HOOKFLOW_EXTERNAL_PREFIXES"):
        config["analysis"] = {
            "external_call_prefixes": [p.strip() for p in prefixes.split(",") if p.strip()]
        }

    return config


def _deep_merge_dicts(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries (base is not modified)."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    search_path: Optional[Path] = None,
    use_env: bool = True,
    overrides: Optional[Dict[str, Any]] = None,
) -> HookflowConfig:
    """Load Hookflow configuration with fallback chain.

    Args:
        config_file: Explicit path to config file (optional)
        search_path: Starting directory for hierarchical search (default: current dir)
        use_env: Whether to load from environment variables (default: True)
        overrides: Explicit values, nested like the config file; these win

    Returns:
        HookflowConfig instance with merged configuration

    Raises:
        ConfigError: If specified config file cannot be loaded
    """
    merged_data: Dict[str, Any] = {}

    config_path = Path(config_file) if config_file else find_config_file(search_path)
    if config_path:
        file_data = load_config_file(config_path)
        logger.info(f"Loaded configuration from {config_path}")
        merged_data = _deep_merge_dicts(merged_data, file_data)

    if use_env:
        env_data = load_config_from_env()
        if env_data:
            logger.debug("Loaded configuration from environment variables")
            merged_data = _deep_merge_dicts(merged_data, env_data)

    if overrides:
        merged_data = _deep_merge_dicts(merged_data, overrides)

    return HookflowConfig.from_dict(merged_data)


def validate_config(config: HookflowConfig) -> List[str]:
    """Return a list of human readable problems with a config (empty if valid)."""
    problems = []
    valid_levels = {level.value for level in LogLevel}
    if config.logging.level.upper() not in valid_levels:
        problems.append(
            f"logging.level must be one of {sorted(valid_levels)}, got {config.logging.level!r}"
        )
    if config.logging.format not in ("human", "json"):
        problems.append(f"logging.format must be 'human' or 'json', got {config.logging.format!r}")
    if config.type_resolver.enabled and not config.type_resolver.endpoint:
        problems.append("type_resolver.enabled requires type_resolver.endpoint")
    if config.type_resolver.timeout <= 0:
        problems.append("type_resolver.timeout must be positive")
    if config.analysis.max_depth < 1:
        problems.append("analysis.max_depth must be at least 1")
    return problems
