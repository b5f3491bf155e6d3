import pytest
from pydantic_settings import BaseSettings, SettingsConfigDict

from keywire import KeywireInvalidRegistrationError, ServiceCollection
from keywire.integrations.pydantic_settings import add_settings, is_settings_class


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KEYWIRE_TEST_DB_")

    url: str = "sqlite://"
    pool_size: int = 5


def test_is_settings_class() -> None:
    assert is_settings_class(DatabaseSettings)
    assert not is_settings_class(DatabaseSettings())
    assert not is_settings_class(int)


def test_settings_are_loaded_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWIRE_TEST_DB_URL", "postgres://db")
    services = ServiceCollection()

    add_settings(services, "settings:database", DatabaseSettings)

    settings = services.build_container().get("settings:database")
    assert settings.url == "postgres://db"
    assert settings.pool_size == 5


def test_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWIRE_TEST_DB_POOL_SIZE", "10")
    services = ServiceCollection()

    add_settings(services, "settings:database", DatabaseSettings, pool_size=20)

    assert services.build_container().get("settings:database").pool_size == 20


def test_settings_are_cached_per_container() -> None:
    services = add_settings(ServiceCollection(), "settings:database", DatabaseSettings)
    container = services.build_container()

    assert container.get("settings:database") is container.get("settings:database")


def test_settings_can_be_read_while_registering() -> None:
    services = ServiceCollection()
    add_settings(services, "settings:database", DatabaseSettings)

    url = services.resolve("settings:database").url
    services.register("url", url)

    assert services.build_container().get("url") == "sqlite://"


def test_rejects_non_settings_types() -> None:
    class NotSettings:
        pass

    with pytest.raises(KeywireInvalidRegistrationError):
        add_settings(ServiceCollection(), "settings", NotSettings)  # type: ignore[type-var]
