"""InvoiceSettings: one frozen object for everything a command needs to know.

Sources, highest priority first:

1. CLI flags (passed to :meth:`InvoiceSettings.from_cli`)
2. ``INVOICECTL_*`` env vars, ``__`` for nested keys
   (``INVOICECTL_REGISTRY__OWNER``)
3. ``invoicectl.toml``
4. Section model defaults
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from invoicectl.config.discovery import locate_config, read_config
from invoicectl.config.models import ClockConfig, RegistryConfig

# Parsed TOML for the settings object currently being built.
_toml_data: ContextVar[dict[str, Any] | None] = ContextVar("_toml_data", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over an already-parsed ``invoicectl.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class InvoiceSettings(BaseSettings):
    """Resolved configuration for one ``invoicectl`` invocation.

    Attributes:
        data_root: Base directory for a relative ledger path.
        config_path: The TOML file in use, or None.
        caller: Identity acting on this invocation (``--as``).
    """

    model_config = {
        "frozen": True,
        "env_prefix": "INVOICECTL_",
        "env_nested_delimiter": "__",
    }

    data_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    caller: str | None = None

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    clock: ClockConfig = Field(default_factory=ClockConfig)

    @property
    def database_path(self) -> Path:
        """Absolute path of the ledger database."""
        path = Path(self.registry.database).expanduser()
        return path if path.is_absolute() else self.data_root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_data.get() or {}),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        data_root: Path | None = None,
        **cli_flags: Any,
    ) -> InvoiceSettings:
        """Build settings for a CLI invocation.

        Flags passed as None are dropped so they do not mask env vars or
        TOML values.
        """
        location = locate_config(config_path, data_root=data_root)
        overrides = {key: value for key, value in cli_flags.items() if value is not None}

        token = _toml_data.set(read_config(location.path))
        try:
            return cls(
                data_root=location.data_root,
                config_path=location.path,
                **overrides,
            )
        finally:
            _toml_data.reset(token)
