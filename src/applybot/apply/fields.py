"""Typed form fields produced by the classifier and the answers given to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from applybot.apply.driver import Locator


class FieldKind(str, Enum):
    TEXT = "TEXT"
    NUMERIC = "NUMERIC"
    SELECT = "SELECT"
    RADIO = "RADIO"
    CHECKBOX = "CHECKBOX"

    @property
    def has_options(self) -> bool:
        return self in (FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX)


@dataclass(frozen=True)
class Option:
    label: str
    locator: Locator = field(compare=False, repr=False)
    required: bool = False


@dataclass(frozen=True)
class Field:
    """One question of the current wizard step.

    Labels are not unique and neither are option labels; the locators are what
    the wizard acts on.
    """

    label: str
    kind: FieldKind
    locator: Locator = field(compare=False, repr=False)
    required: bool = False
    options: tuple[Option, ...] = ()

    @property
    def key(self) -> str:
        """First line of the label. LinkedIn repeats some labels ("City\\nCity")."""
        return self.label.splitlines()[0].strip() if self.label else ""

    @property
    def option_labels(self) -> list[str]:
        return [o.label for o in self.options]


class _Unclassifiable:
    """Sentinel returned for form units that are decorative or unsupported."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNCLASSIFIABLE"


UNCLASSIFIABLE = _Unclassifiable()

Classification = Union[Field, _Unclassifiable]


@dataclass(frozen=True)
class Answer:
    """Resolved value for one field.

    ``value`` carries text for TEXT/NUMERIC fields, ``option`` the chosen
    choice for the others. ``autocomplete`` marks controls that only accept a
    picked suggestion after typing.
    """

    field: Field
    value: str = ""
    option: Option | None = None
    autocomplete: bool = False
    source: str = "llm"
