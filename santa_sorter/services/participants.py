from __future__ import annotations

from dataclasses import dataclass, field


def normalize_name(name: str) -> str:
    if name is None:
        raise ValueError("Name is required.")
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Name cannot be empty/whitespace.")
    return trimmed


def name_key(name: str) -> str:
    return normalize_name(name).casefold()


@dataclass(frozen=True)
class Participant:
    """Identity of a person taking part in a draw.

    Two participants are the same entity when their names match after trimming
    and case folding; the display name is carried along but never compared.
    """

    key: str
    name: str = field(compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", name_key(self.key))

    @classmethod
    def from_name(cls, name: str) -> "Participant":
        display = normalize_name(name)
        return cls(key=display.casefold(), name=display)

    def __str__(self) -> str:
        return self.name
