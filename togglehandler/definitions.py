"""Toggle record and the fixed set of target files.

>>> to_snake_case("AsyncSearchActivityMigration")
'async_search_activity_migration'
>>> TargetFileKind.from_file_name("Toggle.kt")
<TargetFileKind.REGISTRY: 'registry'>
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

UNKNOWN_DESCRIPTION = "Información desconocida"

# Registry entry that exists only as a default and is never offered for deletion
SENTINEL_TOGGLE = "None"

DATE_FORMAT = "%d/%m/%Y"

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


class TargetFileKind(str, Enum):
    """The four kinds of file a toggle lives in, in edit order."""

    REGISTRY = "registry"
    DOCUMENTATION = "documentation"
    SERVICE_EXTENSIONS = "service_extensions"
    REMOTE_SETTINGS_DEFAULTS = "remote_settings_defaults"

    @property
    def file_name(self) -> str:
        return TARGET_FILES[self]

    @classmethod
    def from_file_name(cls, file_name: str) -> Optional["TargetFileKind"]:
        for kind, name in TARGET_FILES.items():
            if name == file_name:
                return kind
        return None


TARGET_FILES = {
    TargetFileKind.REGISTRY: "Toggle.kt",
    TargetFileKind.DOCUMENTATION: "ToggleDoc.kt",
    TargetFileKind.SERVICE_EXTENSIONS: "ServiceExtensions.kt",
    TargetFileKind.REMOTE_SETTINGS_DEFAULTS: "RemoteSettingsDefaults.kt",
}


def to_snake_case(name: str) -> str:
    """Convert a PascalCase toggle name to the registry's stored name.

    Underscores only go in where a lowercase letter is followed by an
    uppercase one, so acronyms collapse.

    >>> to_snake_case("FooBar")
    'foo_bar'
    >>> to_snake_case("ABTest")
    'abtest'
    >>> to_snake_case("Search2Results")
    'search2results'
    """
    return _CAMEL_BOUNDARY.sub(r"\1_\2", name).lower()


@dataclass(frozen=True)
class ToggleRecord:
    """Everything needed to create (or, with just a name, delete) a toggle."""

    name: str
    jira_task: str = ""
    description: str = ""
    is_remotely_configurable: bool = False
    activation_date: str = ""
    activation_version: str = ""
    deprecation_date: str = ""

    @property
    def snake_case_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def full_description(self) -> str:
        """Description as written into the registry.

        >>> ToggleRecord("A", jira_task="IMASD-1", description="Migrate").full_description
        'IMASD-1 Migrate'
        >>> ToggleRecord("A").full_description
        'Información desconocida'
        """
        combined = " ".join(part for part in (self.jira_task, self.description) if part)
        return combined or UNKNOWN_DESCRIPTION

    @property
    def accessor_name(self) -> str:
        return f"is{self.name}Enabled"

    @property
    def remote_key(self) -> str:
        return f"Toggle.{self.name}.name"
