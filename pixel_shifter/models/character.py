"""Character attribute models."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    """Character gender options."""

    male = "Male"
    female = "Female"


class Race(str, Enum):
    """Preset races."""

    human = "Human"
    dwarf = "Dwarf"
    elf = "Elf"
    orc = "Orc"
    beastkin = "Beastkin"
    slime = "Slime"


class CharacterClass(str, Enum):
    """Preset character classes."""

    warrior = "Warrior"
    rogue = "Rogue"
    paladin = "Paladin"
    archer = "Archer"
    monk = "Monk"
    cleric = "Cleric"


class Armor(str, Enum):
    """Preset armor types."""

    plate = "Plate"
    leather = "Leather"
    robes = "Robes"
    chainmail = "Chainmail"
    rags = "Rags"


class Weapon(str, Enum):
    """Preset weapons."""

    sword = "Sword"
    axe = "Axe"
    bow = "Bow"
    staff = "Staff"
    dagger = "Dagger"
    war_hammer = "War Hammer"
    spear = "Spear"
    crossbow = "Crossbow"


RANGED_WEAPONS: frozenset[str] = frozenset({Weapon.bow.value, Weapon.crossbow.value})


def is_ranged_weapon(weapon: str) -> bool:
    """Return True when the weapon fires projectiles (bow-like attack poses)."""
    return weapon in RANGED_WEAPONS


class CharacterSpec(BaseModel):
    """Resolved character attributes sent to the generation model."""

    model_config = ConfigDict(frozen=True)

    gender: str = Field(..., min_length=1)
    race: str = Field(..., min_length=1)
    character_class: str = Field(..., min_length=1)
    armor: str = Field(..., min_length=1)
    weapon: str = Field(..., min_length=1)

    @property
    def is_ranged(self) -> bool:
        return is_ranged_weapon(self.weapon)


class CharacterSelection(BaseModel):
    """Operator form state: a preset per attribute plus optional free-text overrides.

    A non-blank override wins over the preset. Gender has no override.
    """

    gender: Gender = Gender.male
    race: Race = Race.human
    custom_race: Optional[str] = Field(default=None, max_length=100)
    character_class: CharacterClass = CharacterClass.warrior
    custom_class: Optional[str] = Field(default=None, max_length=100)
    armor: Armor = Armor.plate
    custom_armor: Optional[str] = Field(default=None, max_length=100)
    weapon: Weapon = Weapon.sword
    custom_weapon: Optional[str] = Field(default=None, max_length=100)

    def resolve(self) -> CharacterSpec:
        """Collapse presets and overrides into a CharacterSpec."""
        return CharacterSpec(
            gender=self.gender.value,
            race=_pick(self.custom_race, self.race.value),
            character_class=_pick(self.custom_class, self.character_class.value),
            armor=_pick(self.custom_armor, self.armor.value),
            weapon=_pick(self.custom_weapon, self.weapon.value),
        )


def _pick(override: Optional[str], preset: str) -> str:
    if override and override.strip():
        return override.strip()
    return preset


class CharacterOptions(BaseModel):
    """Option lists offered to the operator."""

    genders: list[str]
    races: list[str]
    classes: list[str]
    armors: list[str]
    weapons: list[str]
    ranged_weapons: list[str]


def character_options() -> CharacterOptions:
    return CharacterOptions(
        genders=[g.value for g in Gender],
        races=[r.value for r in Race],
        classes=[c.value for c in CharacterClass],
        armors=[a.value for a in Armor],
        weapons=[w.value for w in Weapon],
        ranged_weapons=sorted(RANGED_WEAPONS),
    )
