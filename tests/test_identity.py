"""Tests for identity resolution and caller context."""
import asyncio
from dataclasses import replace
from datetime import timedelta

import pytest

from household_networth.config import Settings, parse_email_list
from household_networth.core.exceptions import (NeedsOnboardingError,
                                                UnauthenticatedError)
from household_networth.db import (Household, HouseholdMember, HouseholdRole,
                                   Profile)
from household_networth.services.identity import (DEV_USER_EMAIL,
                                                  IdentityResolver,
                                                  bearer_token)

from conftest import (ALICE, BOB, FakeIdentityProvider, context_for,
                      make_household, make_member)


@pytest.fixture
def resolver(settings, identity_provider) -> IdentityResolver:
    return IdentityResolver(settings, identity_provider)


class TestBearerToken:
    @pytest.mark.parametrize(
        "header, token",
        [
            ("Bearer abc", "abc"),
            ("bearer  abc ", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            (None, None),
        ],
    )
    def test_parse(self, header, token):
        assert bearer_token(header) == token


class TestIdentityResolver:
    def test_allowed_email_upserts_user(self, storage, resolver):
        user = asyncio.run(resolver.resolve(storage, f"Bearer {ALICE}"))
        again = asyncio.run(resolver.resolve(storage, f"Bearer {ALICE}"))

        assert user.email == ALICE
        assert again.id == user.id

    def test_email_is_matched_case_insensitively(self, storage, resolver, identity_provider):
        identity_provider.register("tok", "Alice@Example.COM", "Alice")

        user = asyncio.run(resolver.resolve(storage, "Bearer tok"))

        assert user.email == ALICE

    def test_missing_header_is_rejected(self, storage, resolver):
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, None))

    def test_unknown_token_is_rejected(self, storage, resolver):
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, "Bearer not-a-token"))

    def test_identity_without_email_is_rejected(self, storage, resolver, identity_provider):
        identity_provider.register("anon", None)
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, "Bearer anon"))

    def test_email_outside_allow_list_is_rejected(self, storage, resolver):
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, "Bearer mallory@example.com"))
        assert storage.find_user_by_email("mallory@example.com") is None

    def test_empty_allow_list_admits_nobody(self, storage, settings):
        resolver = IdentityResolver(
            replace(settings, allowed_emails=frozenset()), FakeIdentityProvider()
        )
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, f"Bearer {ALICE}"))

    def test_dev_bypass_returns_one_dev_user(self, storage, settings):
        resolver = IdentityResolver(replace(settings, skip_auth=True), FakeIdentityProvider())

        first = asyncio.run(resolver.resolve(storage, None))
        second = asyncio.run(resolver.resolve(storage, "Bearer whatever"))

        assert resolver.dev_mode
        assert first.email == DEV_USER_EMAIL
        assert second.id == first.id

    def test_dev_bypass_ignored_in_production(self, storage, settings):
        resolver = IdentityResolver(
            replace(settings, skip_auth=True, environment="production"), FakeIdentityProvider()
        )

        assert not resolver.dev_mode
        with pytest.raises(UnauthenticatedError):
            asyncio.run(resolver.resolve(storage, None))


class TestSettings:
    def test_allow_list_parsing(self):
        assert parse_email_list(" A@x.com, ,b@y.com ") == frozenset({"a@x.com", "b@y.com"})
        assert parse_email_list(None) == frozenset()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("SKIP_AUTH", "true")
        monkeypatch.setenv("ALLOWED_EMAILS", ALICE)
        monkeypatch.setenv("QUOTE_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.is_production
        assert not settings.dev_auth_enabled
        assert settings.allowed_emails == frozenset({ALICE})
        assert settings.quote_ttl_seconds == 60
        assert settings.log_level == "DEBUG"


class TestHouseholdDirectory:
    def test_user_without_profile_needs_onboarding(self, storage):
        user = storage.get_or_create_user(ALICE)
        with pytest.raises(NeedsOnboardingError, match="Profile not found"):
            context_for(storage, user)

    def test_profile_without_household_needs_onboarding(self, storage):
        user = storage.get_or_create_user(ALICE)
        storage.add(Profile(name="Alice", user_id=user.id))
        with pytest.raises(NeedsOnboardingError, match="No household found"):
            context_for(storage, user)

    def test_default_household_is_earliest_joined(self, storage):
        user, profile, home = make_household(storage, ALICE, "Home")
        cabin = storage.add(Household(name="Cabin"))
        membership = storage.membership(home.id, profile.id)
        storage.add(
            HouseholdMember(
                household_id=cabin.id,
                profile_id=profile.id,
                role=HouseholdRole.ADMIN,
                joined_at=membership.joined_at + timedelta(days=1),
            )
        )

        context = context_for(storage, user)

        assert context.household_id == home.id
        assert [h.name for h in context.households] == ["Home", "Cabin"]
        assert context.role is HouseholdRole.OWNER

    def test_requested_household_selects_active(self, storage):
        user, profile, _ = make_household(storage, ALICE, "Home")
        _, _, other = make_household(storage, BOB, "Other")
        storage.add(
            HouseholdMember(household_id=other.id, profile_id=profile.id, role=HouseholdRole.MEMBER)
        )

        context = context_for(storage, user, other.id)

        assert context.household_id == other.id
        assert context.role is HouseholdRole.MEMBER
        assert not context.capabilities.can_manage_members
        assert profile.id in context.household_profile_ids
        assert len(context.household_profiles) == 2

    def test_foreign_household_request_falls_back_to_default(self, storage):
        user, _, home = make_household(storage, ALICE)
        _, _, other = make_household(storage, BOB, "Other")

        context = context_for(storage, user, other.id)

        assert context.household_id == home.id

    def test_roster_marks_tracked_profiles(self, storage):
        user, _, home = make_household(storage, ALICE)
        make_member(storage, home, "Kid")

        roster = {p.name: p for p in context_for(storage, user).household_profiles}

        assert roster["Alice"].has_user
        assert not roster["Kid"].has_user
