"""Scanner settings for scannerkit.

Settings are Sonar analysis properties collected from, lowest precedence first:

1. Defaults and detection ($SONAR_USER_HOME, detected OS and architecture)
2. A YAML file (``scannerkit.yaml``) with a top-level ``properties`` mapping
3. ``-D key=value`` properties from the command line

Example scannerkit.yaml::

    properties:
      sonar.host.url: https://sonarqube.example.com
      sonar.scanner.skipJreProvisioning: false
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from scannerkit.core.directory import get_sonar_user_home
from scannerkit.core.exceptions import ConfigError
from scannerkit.core.platform import detect_platform

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "scannerkit.yaml"

HOST_URL = "sonar.host.url"
TOKEN = "sonar.token"
LOGIN = "sonar.login"
USER_HOME = "sonar.userHome"
JAVA_EXE_PATH = "sonar.scanner.javaExePath"
SKIP_JRE_PROVISIONING = "sonar.scanner.skipJreProvisioning"
OPERATING_SYSTEM = "sonar.scanner.os"
ARCHITECTURE = "sonar.scanner.arch"
HTTP_TIMEOUT = "sonar.http.timeout"

KNOWN_PROPERTIES = (
    HOST_URL,
    TOKEN,
    LOGIN,
    USER_HOME,
    JAVA_EXE_PATH,
    SKIP_JRE_PROVISIONING,
    OPERATING_SYSTEM,
    ARCHITECTURE,
    HTTP_TIMEOUT,
)


@dataclass
class ScannerSettings:
    """Settings that drive JRE provisioning."""

    host_url: str = "http://localhost:9000"
    token: Optional[str] = None
    user_home: Path = field(default_factory=get_sonar_user_home)
    java_exe_path: str = ""
    skip_jre_provisioning: bool = False
    operating_system: str = ""
    architecture: str = ""
    http_timeout: int = 30


def parse_properties(definitions: Optional[Iterable[str]]) -> Dict[str, str]:
    """
    Parse ``key=value`` strings as given to ``-D``.

    Raises:
        ConfigError: If an entry has no '=' or an empty key
    """
    properties = {}
    for definition in definitions or []:
        key, sep, value = definition.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(
                f"Invalid property '{definition}', expected the form key=value"
            )
        properties[key] = value.strip()
    return properties


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load the ``properties`` mapping from a YAML configuration file.

    Args:
        config_path: Path to scannerkit.yaml

    Returns:
        Property mapping (empty if the file has no properties)

    Raises:
        ConfigError: If the file is missing or malformed
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ConfigError("'properties' must be a mapping of property names to values")

    for key in properties:
        if key not in KNOWN_PROPERTIES:
            logger.debug(f"Ignoring unknown property '{key}' in {config_path}")
    return properties


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text in ("false", ""):
        return False
    raise ConfigError(f"Property '{key}' must be 'true' or 'false', got '{value}'")


def _as_int(key: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Property '{key}' must be an integer, got '{value}'")
    if number <= 0:
        raise ConfigError(f"Property '{key}' must be positive, got '{value}'")
    return number


def load_settings(
    config_file: Optional[Path] = None,
    properties: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ScannerSettings:
    """
    Build settings from defaults, a config file and explicit properties.

    Args:
        config_file: YAML file to read. If None, ./scannerkit.yaml is used when present.
        properties: Properties that override everything else (e.g. from -D)
        environ: Environment for $SONAR_USER_HOME (default: os.environ)

    Returns:
        ScannerSettings

    Raises:
        ConfigError: If any source is invalid
    """
    merged: Dict[str, Any] = {}

    if config_file is None:
        default_config = Path.cwd() / DEFAULT_CONFIG_FILE
        if default_config.exists():
            config_file = default_config
    if config_file is not None:
        merged.update(load_config_file(Path(config_file)))

    merged.update(properties or {})

    detected = detect_platform()
    settings = ScannerSettings(
        user_home=get_sonar_user_home(environ),
        operating_system=detected.os,
        architecture=detected.arch,
    )

    if merged.get(HOST_URL):
        settings.host_url = str(merged[HOST_URL]).rstrip("/")
    token = merged.get(TOKEN) or merged.get(LOGIN)
    if token:
        settings.token = str(token)
    if merged.get(USER_HOME):
        settings.user_home = Path(str(merged[USER_HOME]))
    if JAVA_EXE_PATH in merged:
        settings.java_exe_path = str(merged[JAVA_EXE_PATH] or "")
    if SKIP_JRE_PROVISIONING in merged:
        settings.skip_jre_provisioning = _as_bool(
            SKIP_JRE_PROVISIONING, merged[SKIP_JRE_PROVISIONING]
        )
    # An explicitly empty os/arch disables detection
    if OPERATING_SYSTEM in merged:
        settings.operating_system = str(merged[OPERATING_SYSTEM] or "")
    if ARCHITECTURE in merged:
        settings.architecture = str(merged[ARCHITECTURE] or "")
    if HTTP_TIMEOUT in merged:
        settings.http_timeout = _as_int(HTTP_TIMEOUT, merged[HTTP_TIMEOUT])

    logger.debug(
        f"Loaded settings for {settings.host_url} "
        f"({settings.operating_system or '?'}-{settings.architecture or '?'})"
    )
    return settings


__all__ = [
    "ScannerSettings",
    "parse_properties",
    "load_config_file",
    "load_settings",
    "DEFAULT_CONFIG_FILE",
    "KNOWN_PROPERTIES",
]
