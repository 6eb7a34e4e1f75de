"""Shared fixtures for toggle-handler tests."""

import pytest

from togglehandler.config import ToggleHandlerConfig
from togglehandler.definitions import ToggleRecord


REGISTRY_TEXT = '''package com.example.toggles

sealed class Toggle(
    val name: String,
    val isRemoteConfigurable: Boolean = false,
    val activationDate: String = "",
    val activationVersion: String = "",
    val deprecationDate: String = "",
    val description: String = "",
) {
    data object None : Toggle(name = "none")

    data object SearchMigration : Toggle(
        name = "search_migration",
        isRemoteConfigurable = true,
        activationDate = "01/02/2024",
        activationVersion = "13.6.0",
        deprecationDate = "01/08/2024",
        description = "IMASD-100 Migrate search"
    )

    data object NewOnboarding : Toggle(
        name = "new_onboarding",
        isRemoteConfigurable = false,
        activationDate = "",
        activationVersion = "",
        deprecationDate = "",
        description = "Información desconocida"
    )
}
'''

DOC_TEXT = '''package com.example.toggles

data class ToggleDoc(
    val toggle: Toggle,
    val jiraTask: String,
    val description: String,
    val isRemoteConfigurable: Boolean,
    val activationDate: String,
    val activationVersion: String,
    val deprecationDate: String,
)

val toggleDocumentation = listOf(
    ToggleDoc(
        toggle = Toggle.SearchMigration,
        jiraTask = "IMASD-100",
        description = "Migrate search (phase 1)",
        isRemoteConfigurable = true,
        activationDate = "01/02/2024",
        activationVersion = "13.6.0",
        deprecationDate = "01/08/2024",
    ),
)
'''

SERVICE_EXTENSIONS_TEXT = '''package com.example.toggles

import com.example.di.DI

fun isSearchMigrationEnabled(): Boolean = DI.serviceProvider.remoteService.isToggled(Toggle.SearchMigration)
'''

REMOTE_SETTINGS_TEXT = '''package com.example.toggles

object RemoteSettingsDefaults {
    fun remoteSettingsDefaults() = mapOf(
        Toggle.SearchMigration.name to false,
        Toggle.NewOnboarding.name to false
    )
}
'''

EMPTY_REMOTE_SETTINGS_TEXT = '''package com.example.toggles

object RemoteSettingsDefaults {
    fun remoteSettingsDefaults() = mapOf()
}
'''

TOGGLE_DIR = "app/src/main/kotlin/com/example/toggles"


@pytest.fixture
def registry_text():
    return REGISTRY_TEXT


@pytest.fixture
def doc_text():
    return DOC_TEXT


@pytest.fixture
def service_extensions_text():
    return SERVICE_EXTENSIONS_TEXT


@pytest.fixture
def remote_settings_text():
    return REMOTE_SETTINGS_TEXT


@pytest.fixture
def record():
    """Factory for ToggleRecord objects."""
    def _create(name="FooBar", **kwargs):
        return ToggleRecord(name=name, **kwargs)
    return _create


@pytest.fixture
def project(tmp_path):
    """Kotlin project with all four target files under one package dir."""
    toggle_dir = tmp_path / TOGGLE_DIR
    toggle_dir.mkdir(parents=True)
    (toggle_dir / "Toggle.kt").write_text(REGISTRY_TEXT, encoding="utf-8")
    (toggle_dir / "ToggleDoc.kt").write_text(DOC_TEXT, encoding="utf-8")
    (toggle_dir / "ServiceExtensions.kt").write_text(SERVICE_EXTENSIONS_TEXT, encoding="utf-8")
    (toggle_dir / "RemoteSettingsDefaults.kt").write_text(REMOTE_SETTINGS_TEXT, encoding="utf-8")
    return tmp_path


@pytest.fixture
def toggle_dir(project):
    return project / TOGGLE_DIR


@pytest.fixture
def config(project):
    return ToggleHandlerConfig(project_root=project)


@pytest.fixture
def empty_remote_settings_text():
    return EMPTY_REMOTE_SETTINGS_TEXT
