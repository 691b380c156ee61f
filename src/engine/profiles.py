"""Profile edits.

Only fields present in the update change. Role-specific sections apply to the
matching role only, and a missing section is created from defaults.
"""

from dataclasses import replace
from typing import Any

from src.engine.exceptions import InvalidInputError
from src.models.user import InvestorProfile, PhysicianProfile, UserProfile, UserRole

CONTACT_FIELDS = ("phone", "avatar_url")


def apply_profile_update(
    profile: UserProfile,
    changes: dict[str, Any],
    physician: dict[str, Any] | None = None,
    investor: dict[str, Any] | None = None,
) -> UserProfile:
    """Return ``profile`` with ``changes`` and the role section edits applied.

    ``changes`` may hold ``name``, ``phone`` and ``avatar_url``.
    """
    role = profile.user.role
    if physician and role != UserRole.PHYSICIAN:
        raise InvalidInputError(f"A {role.value.lower()} account has no physician profile")
    if investor and role != UserRole.INVESTOR:
        raise InvalidInputError(f"A {role.value.lower()} account has no investor profile")

    unknown = set(changes) - {"name", *CONTACT_FIELDS}
    if unknown:
        raise InvalidInputError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    updated = profile
    if "name" in changes:
        updated = replace(updated, user=replace(updated.user, name=changes["name"]))
    contact = {k: changes[k] for k in CONTACT_FIELDS if k in changes}
    if contact:
        updated = replace(updated, **contact)

    if physician:
        base = updated.physician_profile or PhysicianProfile()
        updated = replace(updated, physician_profile=replace(base, **physician))
    if investor:
        base = updated.investor_profile or InvestorProfile()
        updated = replace(updated, investor_profile=replace(base, **investor))
    return updated
