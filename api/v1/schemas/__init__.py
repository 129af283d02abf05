"""Re-export individual schema modules for easy imports."""

from .user import Credentials, TokenOut, UserOut
from .profile import (
    ProfileIn,
    ProfileOut,
    ProfileBundle,
    RestrictionsIn,
    RestrictionOut,
    DislikedIn,
)
from .meal import GenerateIn, GenerateOut, MealOut, MealList, MealStatusIn, MealEnvelope

__all__ = [
    "Credentials",
    "TokenOut",
    "UserOut",
    "ProfileIn",
    "ProfileOut",
    "ProfileBundle",
    "RestrictionsIn",
    "RestrictionOut",
    "DislikedIn",
    "GenerateIn",
    "GenerateOut",
    "MealOut",
    "MealList",
    "MealStatusIn",
    "MealEnvelope",
]
