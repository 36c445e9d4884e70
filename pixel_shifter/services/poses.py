"""Pose catalog: view/action templates for the sprite sheet."""
from typing import Optional

from pixel_shifter.models.character import is_ranged_weapon
from pixel_shifter.models.image import PoseDescriptor

_YES_NO = "Answer YES or NO."

_PAIN_FACE = 'Expression: Eyes tightly closed in a "> <" shape (pain expression).'
_UNSTEADY = "Stance: Unsteady, stumbling."

# (id, label, prompt suffix, verification question)
_STATIC_POSES: list[tuple[str, str, str, str]] = [
    # Idle views
    (
        "front",
        "Front",
        "standing idle pose, full front facing view, symmetrical",
        "Is the character facing forward?",
    ),
    (
        "left",
        "Left",
        "standing idle pose, side profile facing LEFT, body turned left",
        "Is the character facing LEFT?",
    ),
    (
        "right",
        "Right",
        "standing idle pose, side profile facing RIGHT, body turned right",
        "Is the character facing RIGHT?",
    ),
    (
        "back",
        "Back",
        "standing idle pose, full back view, facing away",
        "Is the character facing away?",
    ),
    # Under hit
    (
        "hit-front",
        "Hit (Front)",
        'full front view. The character is crouched low in an "under hit" or taking '
        "damage pose. The body is compacted, knees bent deeply. The weapon is held "
        "horizontally very low across the shins and knees in a defensive manner. "
        f"{_PAIN_FACE} {_UNSTEADY}",
        "Is the character crouched low facing forward with a pain expression?",
    ),
    (
        "hit-left",
        "Hit (Left)",
        'left side profile view, facing left. Crouched low in an "under hit" pose, '
        "hunched slightly over. The weapon is held horizontally very low along the "
        f"left side, just above the ground. {_PAIN_FACE} {_UNSTEADY}",
        "Is the character crouched low facing LEFT with a pain expression?",
    ),
    (
        "hit-right",
        "Hit (Right)",
        'right side profile view, facing right. Crouched low in an "under hit" pose, '
        "hunched slightly over. The weapon is held horizontally very low along the "
        f"right side, just above the ground. {_PAIN_FACE} {_UNSTEADY}",
        "Is the character crouched low facing RIGHT with a pain expression?",
    ),
    (
        "hit-back",
        "Hit (Back)",
        'full back view, facing away from the camera. Crouched low in an "under hit" '
        "pose. The weapon is held horizontally low across the back of the calves or "
        f"heels. {_UNSTEADY}",
        "Is the character crouched low facing AWAY?",
    ),
    # Walk cycle
    (
        "walk-f-r",
        "Walk - Right Foot (Front)",
        "walking pose, front view. Right leg lifted high and stepping forward towards "
        "the camera (shoe sole visible). Left leg firmly on ground behind.",
        "Is the character facing forward with the RIGHT leg lifted or stepping forward?",
    ),
    (
        "walk-f-l",
        "Walk - Left Foot (Front)",
        "walking pose, front view. Left leg lifted high and stepping forward towards "
        "the camera (shoe sole visible). Right leg firmly on ground behind.",
        "Is the character facing forward with the LEFT leg lifted or stepping forward?",
    ),
    (
        "walk-side-l",
        "Walk (Left)",
        "walking pose, profile view facing LEFT",
        "Is facing LEFT and walking?",
    ),
    (
        "walk-side-r",
        "Walk (Right)",
        "walking pose, profile view facing RIGHT",
        "Is facing RIGHT and walking?",
    ),
    # Half kneel
    (
        "kneel-front",
        "Kneel (Front)",
        "full front view, high kneeling pose (half-kneeling). One knee on the ground, "
        "the other knee up. Torso upright. Weapon held ready.",
        "Is the character kneeling facing forward?",
    ),
    (
        "kneel-left",
        "Kneel (Left)",
        "left side profile view, facing left. High kneeling pose (half-kneeling). "
        "One knee on the ground, upright posture.",
        "Is the character kneeling facing LEFT?",
    ),
    (
        "kneel-right",
        "Kneel (Right)",
        "right side profile view, facing right. High kneeling pose (half-kneeling). "
        "One knee on the ground, upright posture.",
        "Is the character kneeling facing RIGHT?",
    ),
    (
        "kneel-back",
        "Kneel (Back)",
        "full back view, facing away from the camera. High kneeling pose "
        "(half-kneeling). One knee on the ground.",
        "Is the character kneeling facing away (showing back)?",
    ),
]

def _melee_attacks() -> list[tuple[str, str, str, str]]:
    return [
        (
            "at-p1-f",
            "Attack - Raise (Front)",
            "front view, weapon held high above head with both hands, ready to swing "
            "down in a powerful slash. No energy effects.",
            "Is the character holding a weapon high above their head?",
        ),
        (
            "at-p2-f",
            "Attack - Slash (Front)",
            "front view, dynamic action pose. Right leg lunging forward. Middle of a "
            "horizontal weapon swing generating a massive, jagged, white crescent-shaped "
            "shockwave slash effect.",
            "Is there a visible large crescent slash effect?",
        ),
        (
            "at-p1-l",
            "Attack - Raise (Left)",
            "facing LEFT, weapon raised high above head, poised to swing down in a chop. "
            "No energy effects.",
            "Is the character facing LEFT with weapon raised high?",
        ),
        (
            "at-p2-l",
            "Attack - Slash (Left)",
            "facing LEFT, horizontal swing. A massive, sharp, curved white energy "
            "shockwave/slash effect extending widely to the LEFT.",
            "Is there a large curved slash effect extending to the LEFT?",
        ),
        (
            "at-p1-r",
            "Attack - Raise (Right)",
            "facing RIGHT, weapon raised high above head, poised to swing down in a chop. "
            "No energy effects.",
            "Is the character facing RIGHT with weapon raised high?",
        ),
        (
            "at-p2-r",
            "Attack - Slash (Right)",
            "facing RIGHT, horizontal swing. A massive, sharp, curved white energy "
            "shockwave/slash effect extending widely to the RIGHT.",
            "Is there a large curved slash effect extending to the RIGHT?",
        ),
        (
            "at-p1-b",
            "Attack - Raise (Back)",
            "facing BACK, weapon held high above head, ready to swing down in a slash. "
            "No energy effects.",
            "Is the character facing BACK with weapon raised high?",
        ),
        (
            "at-p2-b",
            "Attack - Slash (Back)",
            "facing BACK, horizontal swing. A wide, sweeping white shockwave slash "
            "effect visible following the weapon's swing path.",
            "Is there an attack wave visible while the character faces away?",
        ),
    ]


def _ranged_attacks(weapon: str) -> list[tuple[str, str, str, str]]:
    return [
        (
            "at-p1-f",
            "Attack - Draw (Front)",
            f"front view, holding {weapon} with both hands, pulling back the "
            "string/mechanism to full draw, aiming directly at camera. Tension in the "
            "pose. Ready to fire.",
            "Is the character aiming a bow or crossbow?",
        ),
        (
            "at-p2-f",
            "Attack - Fire (Front)",
            f"front view, dynamic action pose. Releasing the {weapon}, firing a "
            "projectile forward towards the camera. Recoil from the shot. Slight wind "
            "effect line.",
            "Is the character firing a projectile?",
        ),
        (
            "at-p1-l",
            "Attack - Draw (Left)",
            f"facing LEFT, holding {weapon}, string/mechanism pulled back to full draw, "
            "aiming straight LEFT.",
            "Is the character aiming LEFT?",
        ),
        (
            "at-p2-l",
            "Attack - Fire (Left)",
            f"facing LEFT, action pose. Firing the {weapon} to the LEFT. Projectile "
            "flying left with a motion trail.",
            "Is the character firing a projectile to the LEFT?",
        ),
        (
            "at-p1-r",
            "Attack - Draw (Right)",
            f"facing RIGHT, holding {weapon}, string/mechanism pulled back to full draw, "
            "aiming straight RIGHT.",
            "Is the character aiming RIGHT?",
        ),
        (
            "at-p2-r",
            "Attack - Fire (Right)",
            f"facing RIGHT, action pose. Firing the {weapon} to the RIGHT. Projectile "
            "flying right with a motion trail.",
            "Is the character firing a projectile to the RIGHT?",
        ),
        (
            "at-p1-b",
            "Attack - Draw (Back)",
            f"facing BACK, holding {weapon}, string/mechanism pulled back, aiming away "
            "from camera.",
            "Is the character facing AWAY and aiming?",
        ),
        (
            "at-p2-b",
            "Attack - Fire (Back)",
            f"facing BACK, action pose. Firing the {weapon} away from camera. Recoil "
            "visible.",
            "Is the character firing a projectile away from the viewer?",
        ),
    ]


def build_pose_catalog(weapon: str) -> list[PoseDescriptor]:
    """Return every pose for a character holding `weapon`.

    Attack poses switch between draw/fire phrasing for ranged weapons and
    raise/slash phrasing for everything else.
    """
    attacks = _ranged_attacks(weapon) if is_ranged_weapon(weapon) else _melee_attacks()
    return [
        PoseDescriptor(
            id=pose_id,
            label=label,
            prompt_suffix=suffix,
            verification_criterion=f"{question} {_YES_NO}",
        )
        for pose_id, label, suffix, question in _STATIC_POSES + attacks
    ]


def find_pose(poses: list[PoseDescriptor], pose_id: str) -> Optional[PoseDescriptor]:
    return next((p for p in poses if p.id == pose_id), None)
