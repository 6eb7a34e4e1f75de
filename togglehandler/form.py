"""
Toggle metadata form.

Collects the fields of a new toggle, either from CLI options or
interactively, and turns them into a ``ToggleRecord``. Dates and the
activation version only mean something for remotely configurable
toggles; for the rest they are dropped whatever they contain.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

import click

from togglehandler.definitions import DATE_FORMAT, ToggleRecord

NAME_HINT = "AsyncSearchActivityMigration"
JIRA_HINT = "IMASD-45809"
VERSION_HINT = "13.6.0"


def format_date(value: Optional[date]) -> str:
    """Render a date the way the registry stores it.

    >>> format_date(date(2024, 3, 7))
    '07/03/2024'
    >>> format_date(None)
    ''
    """
    return value.strftime(DATE_FORMAT) if value else ""


@dataclass
class ToggleForm:
    name: str = ""
    jira_task: str = ""
    description: str = ""
    remotely_configurable: bool = False
    activation_date: Optional[date] = None
    activation_version: str = ""
    deprecation_date: Optional[date] = None

    def to_record(self) -> ToggleRecord:
        """Trim text fields and drop remote-only fields when not remote.

        Unset dates on a remote toggle default to today.

        >>> form = ToggleForm(" FooBar ", activation_version="1.0", activation_date=date(2024, 1, 1))
        >>> record = form.to_record()
        >>> record.name, record.activation_date, record.activation_version
        ('FooBar', '', '')
        """
        remote = self.remotely_configurable
        return ToggleRecord(
            name=self.name.strip(),
            jira_task=self.jira_task.strip(),
            description=self.description.strip(),
            is_remotely_configurable=remote,
            activation_date=format_date(self.activation_date or date.today()) if remote else "",
            activation_version=self.activation_version.strip() if remote else "",
            deprecation_date=format_date(self.deprecation_date or date.today()) if remote else "",
        )


def _prompt_date(label: str, current: Optional[date]) -> date:
    value = click.prompt(
        label,
        default=format_date(current or date.today()),
        type=click.DateTime(formats=[DATE_FORMAT]),
    )
    return value.date()


def prompt_toggle_form(form: Optional[ToggleForm] = None) -> ToggleForm:
    """Ask for every field, using ``form`` for defaults.

    Dates and version are only asked for once the toggle is marked as
    remotely configurable.
    """
    form = form or ToggleForm()
    name = click.prompt(f"Toggle name (e.g. {NAME_HINT})", default=form.name or None)
    jira_task = click.prompt(f"Jira task (e.g. {JIRA_HINT})", default=form.jira_task, show_default=False)
    description = click.prompt("Description", default=form.description, show_default=False)
    remote = click.confirm("Toggle is remotely configurable", default=form.remotely_configurable)

    form = replace(form, name=name, jira_task=jira_task, description=description,
                   remotely_configurable=remote)
    if not remote:
        return form

    return replace(
        form,
        activation_date=_prompt_date("Activation date", form.activation_date),
        activation_version=click.prompt(
            f"Activation version (e.g. {VERSION_HINT})",
            default=form.activation_version,
            show_default=False,
        ),
        deprecation_date=_prompt_date("Deprecation date", form.deprecation_date),
    )
