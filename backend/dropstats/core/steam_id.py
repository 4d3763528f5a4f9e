"""SteamID value type.

A SteamID packs four fields into an unsigned 64-bit integer::

    universe (8 bits) | account type (4 bits) | instance (20 bits) | account id (32 bits)

Three textual notations are accepted:

- Steam2, the legacy ``STEAM_X:Y:Z`` form where the account id is ``Z * 2 + Y``
- Steam3, the bracketed ``[U:1:account_id]`` form (optionally with an instance)
- Steam64, the plain decimal integer

The Steam3 form is canonical: it is what the stats tables use as primary key.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from pydantic_core import core_schema

from .exceptions import InvalidSteamIDFormat, SteamIDError, SteamIDOutOfRange

ACCOUNT_ID_MAX = 0xFFFFFFFF
INSTANCE_MAX = 0xFFFFF
ACCOUNT_TYPE_MAX = 0xF
UNIVERSE_MAX = 0xFF
STEAM64_MAX = 0xFFFFFFFFFFFFFFFF

_STEAM2_PATTERN = re.compile(r"^STEAM_(\d+):([01]):(\d+)$", re.IGNORECASE | re.ASCII)
_STEAM3_PATTERN = re.compile(r"^\[([A-Za-z]):(\d+):(\d+)(?::(\d+))?\]$", re.ASCII)
_STEAM64_PATTERN = re.compile(r"^\d+$", re.ASCII)


class Universe(IntEnum):
    """Steam universes."""

    INVALID = 0
    PUBLIC = 1
    BETA = 2
    INTERNAL = 3
    DEV = 4


class AccountType(IntEnum):
    """Steam account types."""

    INVALID = 0
    INDIVIDUAL = 1
    MULTISEAT = 2
    GAME_SERVER = 3
    ANON_GAME_SERVER = 4
    PENDING = 5
    CONTENT_SERVER = 6
    CLAN = 7
    CHAT = 8
    P2P_SUPER_SEEDER = 9
    ANON_USER = 10


# P2P super seeders have no Steam3 letter
_TYPE_LETTERS = {
    AccountType.INVALID: "I",
    AccountType.INDIVIDUAL: "U",
    AccountType.MULTISEAT: "M",
    AccountType.GAME_SERVER: "G",
    AccountType.ANON_GAME_SERVER: "A",
    AccountType.PENDING: "P",
    AccountType.CONTENT_SERVER: "C",
    AccountType.CLAN: "g",
    AccountType.CHAT: "T",
    AccountType.ANON_USER: "a",
}
_LETTER_TYPES = {letter: account_type for account_type, letter in _TYPE_LETTERS.items()}

# Desktop instance
DEFAULT_INDIVIDUAL_INSTANCE = 1


def _default_instance(account_type: int) -> int:
    return DEFAULT_INDIVIDUAL_INSTANCE if account_type == AccountType.INDIVIDUAL else 0


@dataclass(frozen=True)
class SteamID:
    """Immutable SteamID, compared and hashed by its 64-bit value."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidSteamIDFormat(
                f"SteamID value must be an integer, got {type(self.value).__name__}"
            )
        if not 0 <= self.value <= STEAM64_MAX:
            raise SteamIDOutOfRange(
                "SteamID value does not fit in 64 bits", value=str(self.value)
            )

    @classmethod
    def from_parts(
        cls,
        account_id: int,
        universe: int = Universe.PUBLIC,
        account_type: int = AccountType.INDIVIDUAL,
        instance: int | None = None,
    ) -> "SteamID":
        """Pack the individual fields into a SteamID."""
        if instance is None:
            instance = _default_instance(account_type)
        if not 0 <= account_id <= ACCOUNT_ID_MAX:
            raise SteamIDOutOfRange(
                "Account id does not fit in 32 bits", value=str(account_id)
            )
        if not 0 <= instance <= INSTANCE_MAX:
            raise SteamIDOutOfRange(
                "Instance does not fit in 20 bits", value=str(instance)
            )
        if not 0 <= account_type <= ACCOUNT_TYPE_MAX:
            raise SteamIDOutOfRange(
                "Account type does not fit in 4 bits", value=str(account_type)
            )
        if not 0 <= universe <= UNIVERSE_MAX:
            raise SteamIDOutOfRange(
                "Universe does not fit in 8 bits", value=str(universe)
            )
        return cls(
            (int(universe) << 56)
            | (int(account_type) << 52)
            | (instance << 32)
            | account_id
        )

    @classmethod
    def from_steam64(cls, value: int) -> "SteamID":
        return cls(value)

    @classmethod
    def parse(cls, text: str) -> "SteamID":
        """Parse any of the Steam2, Steam3 or Steam64 notations.

        :param text: User supplied identifier
        :returns: Parsed SteamID
        :raises InvalidSteamIDFormat: If no notation matches
        :raises SteamIDOutOfRange: If a component does not fit its bit field
        """
        if not isinstance(text, str):
            raise InvalidSteamIDFormat("SteamID must be given as text")
        candidate = text.strip()

        match = _STEAM3_PATTERN.match(candidate)
        if match:
            return cls._from_steam3_match(match, text)

        match = _STEAM2_PATTERN.match(candidate)
        if match:
            return cls._from_steam2_match(match, text)

        if _STEAM64_PATTERN.match(candidate):
            value = int(candidate)
            if value > STEAM64_MAX:
                raise SteamIDOutOfRange(
                    "Steam64 id does not fit in 64 bits", value=text
                )
            steam_id = cls(value)
            if steam_id.account_type not in _TYPE_LETTERS:
                raise InvalidSteamIDFormat(
                    "Steam64 id has an unknown account type", value=text
                )
            return steam_id

        raise InvalidSteamIDFormat(f"Invalid SteamID: {text!r}", value=text)

    @classmethod
    def _from_steam3_match(cls, match: re.Match, text: str) -> "SteamID":
        letter, universe, account_id, instance = match.groups()
        account_type = _LETTER_TYPES.get(letter)
        if account_type is None:
            raise InvalidSteamIDFormat(
                f"Unknown Steam3 account type {letter!r}", value=text
            )
        return cls.from_parts(
            account_id=int(account_id),
            universe=int(universe),
            account_type=account_type,
            instance=int(instance) if instance is not None else None,
        )

    @classmethod
    def _from_steam2_match(cls, match: re.Match, text: str) -> "SteamID":
        universe, low_bit, high_bits = (int(group) for group in match.groups())
        # STEAM_0 predates the universe field and means the public universe
        if universe == Universe.INVALID:
            universe = Universe.PUBLIC
        return cls.from_parts(
            account_id=int(high_bits) * 2 + low_bit,
            universe=universe,
            account_type=AccountType.INDIVIDUAL,
        )

    @property
    def account_id(self) -> int:
        return self.value & ACCOUNT_ID_MAX

    @property
    def instance(self) -> int:
        return (self.value >> 32) & INSTANCE_MAX

    @property
    def account_type(self) -> int:
        return (self.value >> 52) & ACCOUNT_TYPE_MAX

    @property
    def universe(self) -> int:
        return (self.value >> 56) & UNIVERSE_MAX

    def steam3(self) -> str:
        """Canonical ``[U:1:account_id]`` form."""
        letter = _TYPE_LETTERS.get(self.account_type, "I")
        rendered = f"[{letter}:{self.universe}:{self.account_id}"
        if self.instance != _default_instance(self.account_type):
            rendered += f":{self.instance}"
        return rendered + "]"

    def steam2(self) -> str:
        """Legacy ``STEAM_X:Y:Z`` form."""
        account_id = self.account_id
        return f"STEAM_{self.universe}:{account_id & 1}:{account_id >> 1}"

    def steam64(self) -> int:
        return self.value

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.steam3()

    def __repr__(self) -> str:
        return f"SteamID({self.steam3()})"

    @classmethod
    def _coerce(cls, value: Any) -> "SteamID":
        if isinstance(value, SteamID):
            return value
        try:
            if isinstance(value, int) and not isinstance(value, bool):
                return cls.from_steam64(value)
            if isinstance(value, str):
                return cls.parse(value)
        except SteamIDError as e:
            raise ValueError(e.message) from e
        raise ValueError(f"Cannot build a SteamID from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda steam_id: steam_id.steam3()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any) -> dict:
        return {"type": "string", "examples": ["[U:1:64229260]"]}
