from enum import Enum
from typing import Optional


def get_description(member: Enum) -> Optional[str]:
    """
    Return the human readable description of an enum member, or None.

    Looks for a ``description`` attribute on the member first, then for a
    ``__descriptions__`` mapping on the enum class keyed by member name.
    """
    description = getattr(member, "description", None)
    if isinstance(description, str):
        return description

    descriptions = getattr(type(member), "__descriptions__", None)
    if isinstance(descriptions, dict):
        return descriptions.get(member.name)
    return None
