"""Tests for character attribute models."""
import pytest
from pydantic import ValidationError

from pixel_shifter.models.character import (
    CharacterSelection,
    CharacterSpec,
    Weapon,
    character_options,
    is_ranged_weapon,
)


class TestCharacterSelection:
    def test_defaults_resolve_to_human_warrior(self) -> None:
        spec = CharacterSelection().resolve()
        assert spec == CharacterSpec(
            gender="Male",
            race="Human",
            character_class="Warrior",
            armor="Plate",
            weapon="Sword",
        )

    def test_overrides_win_over_presets(self) -> None:
        selection = CharacterSelection(
            race="Elf",
            custom_race="Half-Giant",
            custom_class="Bard",
            custom_armor="Dragon Scale",
            custom_weapon="Lute",
        )
        spec = selection.resolve()
        assert spec.race == "Half-Giant"
        assert spec.character_class == "Bard"
        assert spec.armor == "Dragon Scale"
        assert spec.weapon == "Lute"

    def test_blank_override_falls_back_to_preset(self) -> None:
        spec = CharacterSelection(race="Orc", custom_race="   ").resolve()
        assert spec.race == "Orc"

    def test_override_is_trimmed(self) -> None:
        spec = CharacterSelection(custom_weapon="  Halberd ").resolve()
        assert spec.weapon == "Halberd"

    def test_unknown_preset_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CharacterSelection(race="Dragon")  # type: ignore[arg-type]

    def test_gender_has_no_override(self) -> None:
        assert "custom_gender" not in CharacterSelection.model_fields


class TestCharacterSpec:
    def test_is_immutable(self) -> None:
        spec = CharacterSelection().resolve()
        with pytest.raises(ValidationError):
            spec.weapon = "Bow"  # type: ignore[misc]

    def test_empty_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CharacterSpec(gender="Male", race="", character_class="Monk", armor="Robes", weapon="Staff")

    @pytest.mark.parametrize("weapon", ["Bow", "Crossbow"])
    def test_ranged_weapons(self, weapon: str) -> None:
        assert CharacterSelection(weapon=weapon).resolve().is_ranged  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "weapon", [w.value for w in Weapon if w not in (Weapon.bow, Weapon.crossbow)]
    )
    def test_melee_weapons(self, weapon: str) -> None:
        assert not CharacterSelection(weapon=weapon).resolve().is_ranged  # type: ignore[arg-type]

    def test_custom_weapon_is_melee(self) -> None:
        assert not is_ranged_weapon("Longbow")


def test_options_list_every_preset() -> None:
    options = character_options()
    assert options.genders == ["Male", "Female"]
    assert options.races == ["Human", "Dwarf", "Elf", "Orc", "Beastkin", "Slime"]
    assert options.classes == ["Warrior", "Rogue", "Paladin", "Archer", "Monk", "Cleric"]
    assert options.armors == ["Plate", "Leather", "Robes", "Chainmail", "Rags"]
    assert "War Hammer" in options.weapons
    assert options.ranged_weapons == ["Bow", "Crossbow"]
