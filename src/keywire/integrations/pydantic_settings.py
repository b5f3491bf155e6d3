"""Register ``pydantic-settings`` models as dependencies.

Requires the ``pydantic-settings`` extra.

Examples:
    .. code-block:: python

        class DatabaseSettings(BaseSettings):
            model_config = SettingsConfigDict(env_prefix="DB_")

            url: str = "sqlite://"


        add_settings(services, "settings:database", DatabaseSettings)
        url = services.resolve("settings:database").url

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic_settings import BaseSettings

from keywire.exceptions import KeywireInvalidRegistrationError

if TYPE_CHECKING:
    from keywire.collection import ServiceCollection
    from keywire.container import ServiceContainer

SettingsT = TypeVar("SettingsT", bound=BaseSettings)


def is_settings_class(candidate: object) -> bool:
    """Return true when candidate subclasses ``pydantic_settings.BaseSettings``."""
    return isinstance(candidate, type) and issubclass(candidate, BaseSettings)


def add_settings(
    services: ServiceCollection,
    key: str,
    settings_type: type[SettingsT],
    **overrides: Any,
) -> ServiceCollection:
    """Register ``settings_type`` under ``key``, loaded once from the environment.

    Keyword ``overrides`` are passed to the settings constructor and take
    precedence over environment values.

    Raises:
        KeywireInvalidRegistrationError: If ``settings_type`` is not a
            ``BaseSettings`` subclass.

    """
    if not is_settings_class(settings_type):
        msg = f"{settings_type!r} is not a pydantic_settings.BaseSettings subclass"
        raise KeywireInvalidRegistrationError(msg)

    def factory(_container: ServiceContainer) -> SettingsT:
        return settings_type(**overrides)

    return services.register(key, factory)
