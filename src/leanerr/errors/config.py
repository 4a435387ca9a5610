from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union
import os
import uuid

import yaml


class ConfigError(ValueError):
    """Raised when runtime configuration is missing or invalid."""


_CONFIG_FILES = ("leanerr.yaml", ".leanerr.yaml")


def load_config(root: Path) -> dict[str, Any]:
    """
    Load leanerr config from a project root if present.

    Search order:
    1) ``leanerr.yaml``
    2) ``.leanerr.yaml``
    """

    for filename in _CONFIG_FILES:
        config_path = root / filename
        if not config_path.exists():
            continue
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as error:
            raise ConfigError(f"Could not parse {config_path}: {error}") from error
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the top level.")
        return data
    return {}


def _parse_bool(raw: str) -> bool:
    return raw.strip() not in ("0", "false", "False", "no", "")


def _parse_indent(raw: str) -> Union[int, str, None]:
    value = raw.strip("\n")
    if value == "":
        return None
    if value.strip().isdigit():
        return int(value.strip())
    return value.replace("\\t", "\t")


@dataclass(frozen=True)
class TraceConfig:
    """
    Configuration for lean trace rendering.

    Parameters
    ----------
    hide_internal_frames
        Drop frames from the runtime, installed packages, code outside the working
        directory and leanerr itself.
    meta_indent
        ``indent`` for ``json.dumps`` of mapping/sequence meta. ``None`` renders
        compact JSON.
    frame_separator
        Joins frame groups of one segment and the line numbers inside a group.
    chain_separator
        Joins the segments of a causal chain.
    max_chain_depth
        Maximum number of prior contexts rendered after the failure itself.
        ``None`` renders the whole chain.
    unknown_marker
        Stands in for a missing file name or line number.
    dependency_dir, dependency_token
        Path segment collapsed in rendered locations, and its replacement.
    env_prefix
        Prefix of the environment variables read by ``from_env``.

    Usage example
    -------------
        cfg = TraceConfig(hide_internal_frames=True, meta_indent=2)
    """

    hide_internal_frames: bool = False
    meta_indent: Union[int, str, None] = None
    frame_separator: str = " < "
    chain_separator: str = " << "
    max_chain_depth: Optional[int] = None
    unknown_marker: str = "?"
    dependency_dir: str = "site-packages"
    dependency_token: str = "$"

    env_prefix: str = field(default="LEANERR_", repr=False)

    def __post_init__(self) -> None:
        for name in ("frame_separator", "chain_separator", "unknown_marker", "dependency_dir"):
            value = getattr(self, name)
            if not isinstance(value, str) or value == "":
                raise ConfigError(f"{name} must be a non-empty string, got {value!r}")
        if self.max_chain_depth is not None:
            if isinstance(self.max_chain_depth, bool) or not isinstance(self.max_chain_depth, int):
                raise ConfigError(f"max_chain_depth must be an integer, got {self.max_chain_depth!r}")
            if self.max_chain_depth < 0:
                raise ConfigError("max_chain_depth must be >= 0")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, default: Optional["TraceConfig"] = None) -> "TraceConfig":
        """
        Create config from a mapping, e.g. the ``trace`` section of ``leanerr.yaml``.

        Unknown keys raise ConfigError; missing keys keep the value of `default`.

        Usage example
        -------------
            cfg = TraceConfig.from_mapping(load_config(Path.cwd()).get("trace", {}))
        """
        base = default if default is not None else cls()
        if not isinstance(data, Mapping):
            raise ConfigError(f"trace config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown trace config keys: {', '.join(unknown)}")
        if "hide_internal_frames" in data and not isinstance(data["hide_internal_frames"], bool):
            raise ConfigError("hide_internal_frames must be a boolean")
        values = {f.name: getattr(base, f.name) for f in fields(cls)}
        values.update(data)
        return cls(**values)

    @classmethod
    def from_env(cls, *, default: Optional["TraceConfig"] = None) -> "TraceConfig":
        """
        Create config from environment variables.

        Supported variables (prefix controlled by env_prefix on `default`):
        - <PFX>HIDE_INTERNAL: "1"/"0"
        - <PFX>META_INDENT: integer or literal indent string ("\\t" allowed)
        - <PFX>FRAME_SEPARATOR, <PFX>CHAIN_SEPARATOR: separator text
        - <PFX>MAX_CHAIN_DEPTH: integer

        Unparseable values keep the value of `default`.

        Usage example
        -------------
            cfg = TraceConfig.from_env(default=TraceConfig(hide_internal_frames=True))
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        hide_raw = os.getenv(f"{pfx}HIDE_INTERNAL")
        hide = base.hide_internal_frames if hide_raw is None else _parse_bool(hide_raw)

        indent_raw = os.getenv(f"{pfx}META_INDENT")
        meta_indent = base.meta_indent if indent_raw is None else _parse_indent(indent_raw)

        frame_separator = os.getenv(f"{pfx}FRAME_SEPARATOR") or base.frame_separator
        chain_separator = os.getenv(f"{pfx}CHAIN_SEPARATOR") or base.chain_separator

        depth_raw = os.getenv(f"{pfx}MAX_CHAIN_DEPTH", "")
        max_chain_depth = base.max_chain_depth
        if depth_raw.strip():
            try:
                max_chain_depth = int(depth_raw)
            except ValueError:
                max_chain_depth = base.max_chain_depth
            if max_chain_depth is not None and max_chain_depth < 0:
                max_chain_depth = base.max_chain_depth

        return cls(
            hide_internal_frames=hide,
            meta_indent=meta_indent,
            frame_separator=frame_separator,
            chain_separator=chain_separator,
            max_chain_depth=max_chain_depth,
            unknown_marker=base.unknown_marker,
            dependency_dir=base.dependency_dir,
            dependency_token=base.dependency_token,
            env_prefix=pfx,
        )

    @classmethod
    def load(cls, root: Path, *, default: Optional["TraceConfig"] = None) -> "TraceConfig":
        """Read the ``trace`` section of the project config file, then apply environment overrides."""
        section = load_config(root).get("trace") or {}
        return cls.from_env(default=cls.from_mapping(section, default=default))


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for leanerr's diagnostic logging.

    Parameters
    ----------
    log_dir
        Directory for the plain-text log file. ``None`` logs to the console only.
    run_id
        Identifier written into every file log line. If "auto", a UUID4 is generated.
    console_level
        Logging level for console output.
    file_level
        Logging level for file output.
    rich_tracebacks
        Let the console handler render Python tracebacks with Rich.

    Usage example
    -------------
        cfg = LoggingConfig(log_dir=Path("logs"), console_level=logging.WARNING)
    """

    log_dir: Optional[Path] = None
    run_id: str = "auto"

    console_level: int = 20  # logging.INFO
    file_level: int = 10  # logging.DEBUG

    rich_tracebacks: bool = False

    env_prefix: str = field(default="LEANERR_", repr=False)

    def resolved_run_id(self) -> str:
        """Return a non-auto run id."""
        if self.run_id != "auto":
            return self.run_id
        return uuid.uuid4().hex[:10]

    @classmethod
    def from_env(cls, *, default: Optional["LoggingConfig"] = None) -> "LoggingConfig":
        """
        Create config from environment variables.

        Supported variables:
        - <PFX>LOG_DIR: path
        - <PFX>RUN_ID: run identifier
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        log_dir_raw = os.getenv(f"{pfx}LOG_DIR", "").strip()
        log_dir = Path(log_dir_raw) if log_dir_raw else base.log_dir

        return cls(
            log_dir=log_dir,
            run_id=os.getenv(f"{pfx}RUN_ID", base.run_id),
            console_level=base.console_level,
            file_level=base.file_level,
            rich_tracebacks=base.rich_tracebacks,
            env_prefix=pfx,
        )
