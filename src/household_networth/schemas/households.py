"""Household, membership, profile and onboarding schemas."""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BeforeValidator, Field, field_validator

from household_networth.db.models import HouseholdRole
from household_networth.schemas.base import CamelModel, require_text

DEFAULT_PROFILE_COLOR = "#3b82f6"
COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
MAX_FAMILY_MEMBERS = 10


def _household_name(value: str | None) -> str:
    return require_text(
        value, "Name is required", 100, "Name must be at most 100 characters"
    )


def _household_description(value: str | None) -> str | None:
    if value is None:
        return None
    if len(value) > 500:
        raise ValueError("Description must be at most 500 characters")
    return value


def _assignable_role(value: HouseholdRole) -> HouseholdRole:
    if value is HouseholdRole.OWNER:
        raise ValueError("Role must be admin or member")
    return value


HouseholdName = Annotated[str, BeforeValidator(_household_name)]
HouseholdDescription = Annotated[str | None, AfterValidator(_household_description)]
AssignableRole = Annotated[HouseholdRole, AfterValidator(_assignable_role)]


class HouseholdCreate(CamelModel):
    name: HouseholdName
    description: HouseholdDescription = None


class HouseholdUpdate(CamelModel):
    name: str | None = None
    description: HouseholdDescription = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        return None if value is None else _household_name(value)


class HouseholdOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class HouseholdWithRole(HouseholdOut):
    role: HouseholdRole


class MemberOut(CamelModel):
    id: str
    profile_id: str
    name: str
    image: str | None = None
    color: str
    role: HouseholdRole
    has_user: bool
    joined_at: datetime


class HouseholdDetail(HouseholdWithRole):
    members: list[MemberOut]


class MemberAdd(CamelModel):
    profile_id: str
    role: AssignableRole = HouseholdRole.MEMBER


class MemberRoleUpdate(CamelModel):
    role: AssignableRole


class ProfileCreate(CamelModel):
    name: str
    image: str | None = None
    color: str = Field(default=DEFAULT_PROFILE_COLOR, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str:
        return require_text(value, "Name is required", 100, "Name must be at most 100 characters")


class ProfileUpdate(CamelModel):
    name: str | None = None
    image: str | None = None
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return require_text(value, "Name cannot be empty", 100, "Name must be at most 100 characters")

    @field_validator("image")
    @classmethod
    def _image(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.startswith("https://") or len(value) > 500:
            raise ValueError("Image URL must use HTTPS")
        return value


class ProfileOut(CamelModel):
    id: str
    name: str
    image: str | None = None
    color: str
    has_user: bool


class FamilyMemberIn(CamelModel):
    name: str
    color: str = Field(default=DEFAULT_PROFILE_COLOR, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str:
        return require_text(value, "Family member name is required", 100)


class OnboardingIn(CamelModel):
    profile_name: str
    profile_color: str = Field(default=DEFAULT_PROFILE_COLOR, pattern=COLOR_PATTERN)
    household_name: str
    family_members: list[FamilyMemberIn] = Field(default_factory=list)

    @field_validator("profile_name", mode="before")
    @classmethod
    def _profile_name(cls, value: str | None) -> str:
        return require_text(value, "Profile name is required", 100)

    @field_validator("household_name", mode="before")
    @classmethod
    def _household_name(cls, value: str | None) -> str:
        return require_text(value, "Household name is required", 100)

    @field_validator("family_members")
    @classmethod
    def _family_size(cls, value: list[FamilyMemberIn]) -> list[FamilyMemberIn]:
        if len(value) > MAX_FAMILY_MEMBERS:
            raise ValueError(f"At most {MAX_FAMILY_MEMBERS} family members")
        return value


class MigratedRecords(CamelModel):
    stock_accounts: int = 0
    pension_accounts: int = 0
    misc_assets: int = 0


class OnboardingOut(CamelModel):
    profile: ProfileOut
    household: HouseholdOut
    family_members: list[ProfileOut]
    migrated: MigratedRecords
