"""Credential resolution for Gitea/GitLab-compatible issue trackers.

Credentials are gathered from, in precedence order:

1. GITLAB_PERSONAL_TOKEN: comma-separated ``token`` or ``host:token`` entries
2. $XDG_CONFIG_HOME/snitch/gitlab.ini (when XDG_CONFIG_HOME is set)
3. ~/.config/snitch/gitlab.ini (only when XDG_CONFIG_HOME is unset)
4. ~/.snitch/gitlab.ini (always)

Records are never merged or deduplicated. Lookups take the first record
whose host matches, so earlier sources shadow later ones.
"""

from __future__ import annotations

import configparser
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from snitch.config import DEFAULT_HOST, TOKEN_ENV_VAR, CredentialEnvironment

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "gitlab.ini"
TOKEN_KEY = "personal_token"
ENV_SOURCE = "env"


class CredentialError(Exception):
    """Base exception for credential resolution errors."""


class CredentialParseError(CredentialError):
    """A raw credential string could not be parsed."""

    def __init__(self, raw: str) -> None:
        super().__init__("Could not parse credential entry, expected 'token' or 'host:token'")
        self.raw = raw


class HomeResolutionError(CredentialError):
    """The current user's home directory could not be determined."""


@dataclass(frozen=True)
class CredentialRecord:
    """Access token for one tracker host.

    Attributes:
        host: Bare hostname of the tracker (e.g. "gitea.example.com").
        token: Personal access token, empty if the source provided none.
        source: Where the record was read from ("env" or a file path).
    """

    host: str
    token: str
    source: str = field(default=ENV_SOURCE, compare=False)

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return f"CredentialRecord(host={self.host!r}, source={self.source!r})"


# =============================================================================
# Parsing
# =============================================================================


def parse_credential(
    raw: str,
    default_host: str = DEFAULT_HOST,
    source: str = ENV_SOURCE,
) -> CredentialRecord:
    """Parse a ``token`` or ``host:token`` string.

    Args:
        raw: Raw credential string.
        default_host: Host used when ``raw`` carries no host.
        source: Source label stored on the record.

    Returns:
        The parsed CredentialRecord.

    Raises:
        CredentialParseError: If ``raw`` has more than one ':' or an empty host.
    """
    parts = raw.split(":")

    if len(parts) == 1:
        return CredentialRecord(host=default_host, token=parts[0], source=source)
    if len(parts) == 2 and parts[0]:
        return CredentialRecord(host=parts[0], token=parts[1], source=source)

    raise CredentialParseError(raw)


def credential_from_section(name: str, section: Mapping[str, str], source: str) -> CredentialRecord:
    """Build a record from one INI section: section name is the host."""
    return CredentialRecord(host=name, token=section.get(TOKEN_KEY, ""), source=source)


def credentials_from_file(path: Path) -> list[CredentialRecord]:
    """Read every host section of an INI credentials file.

    Keys before the first section header belong to the reserved default
    section, which never produces a record. Repeated sections are merged
    and a repeated key keeps its last value.

    Args:
        path: Path to the INI file.

    Returns:
        Records in file order. Empty if the file can't be read or parsed.
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        text = path.read_text(encoding="utf-8-sig")
        parser.read_string(f"[{parser.default_section}]\n{text}", source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        logger.warning(f"Skipping unreadable credentials file {path}: {e}")
        return []

    records = [credential_from_section(name, parser[name], source=str(path)) for name in parser.sections()]
    logger.debug(f"Read {len(records)} credential(s) from {path}")
    return records


def credentials_from_env(value: str, default_host: str = DEFAULT_HOST) -> list[CredentialRecord]:
    """Parse the comma-separated GITLAB_PERSONAL_TOKEN value.

    Malformed entries are logged and skipped; the remaining entries are
    still returned.
    """
    records: list[CredentialRecord] = []
    for index, entry in enumerate(value.split(","), start=1):
        entry = entry.strip()
        if not entry:
            continue
        try:
            records.append(parse_credential(entry, default_host=default_host))
        except CredentialParseError as e:
            logger.warning(f"Skipping {TOKEN_ENV_VAR} entry {index}: {e}")
    return records


# =============================================================================
# Resolution
# =============================================================================


def resolve_home(env: CredentialEnvironment) -> Path:
    """Return the home directory from ``env`` or the OS.

    Raises:
        HomeResolutionError: If the OS can't tell us where home is.
    """
    if env.home is not None:
        return env.home
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeResolutionError(f"Could not determine home directory: {e}") from e


def credential_file_paths(env: CredentialEnvironment, home: Path) -> list[Path]:
    """Candidate credential files in precedence order (existence not checked)."""
    paths: list[Path] = []
    if env.xdg_config_home is not None:
        paths.append(env.xdg_config_home / "snitch" / CONFIG_FILE_NAME)
    else:
        paths.append(home / ".config" / "snitch" / CONFIG_FILE_NAME)
    paths.append(home / ".snitch" / CONFIG_FILE_NAME)
    return paths


def resolve_credentials(env: CredentialEnvironment, default_host: str = DEFAULT_HOST) -> list[CredentialRecord]:
    """Collect credentials from every source in precedence order.

    Args:
        env: Environment snapshot (see CredentialEnvironment.from_environ).
        default_host: Host assigned to bare tokens.

    Returns:
        All records, environment first, then each existing file in turn.

    Raises:
        HomeResolutionError: If the home directory can't be resolved.
    """
    home = resolve_home(env)

    credentials = credentials_from_env(env.personal_tokens, default_host=default_host)

    for path in credential_file_paths(env, home):
        if path.is_file():
            credentials.extend(credentials_from_file(path))
        else:
            logger.debug(f"No credentials file at {path}")

    return credentials
