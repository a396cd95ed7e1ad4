"""Pytest configuration and shared fixtures for the household net-worth tests.

Every test gets its own SQLite database file, a container whose price and
identity providers are replaced by in-memory fakes, and factories that seed
users, households and records without going through HTTP.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from household_networth.config import Settings
from household_networth.container import Container, init_container
from household_networth.core.exceptions import UpstreamUnavailableError
from household_networth.db import (Household, HouseholdMember, HouseholdRole,
                                   MiscAsset, MiscAssetType, PensionAccount,
                                   Profile, StockAccount, StockHolding,
                                   Storage, User, init_db, session_scope)
from household_networth.main import create_app
from household_networth.providers.core import (ExternalIdentity,
                                               IdentityProviderABC,
                                               PriceProviderABC)
from household_networth.schemas.market import ProviderQuote, SymbolMatch
from household_networth.services.directory import Context, HouseholdDirectory

ALICE = "alice@example.com"
BOB = "bob@example.com"
CAROL = "carol@example.com"


# =============================================================================
# Fake providers
# =============================================================================


class FakePriceProvider(PriceProviderABC):
    """Prices from a dict; unknown symbols raise UpstreamUnavailableError."""

    name = "fake"

    def __init__(self, prices: dict[str, str] | None = None) -> None:
        self.prices = {k: Decimal(v) for k, v in (prices or {}).items()}
        self.calls: list[str] = []
        self.searches: list[str] = []
        self.closed = False

    async def get_quote(self, symbol: str) -> ProviderQuote:
        self.calls.append(symbol)
        if symbol not in self.prices:
            raise UpstreamUnavailableError(symbol, "no price")
        return ProviderQuote(symbol=symbol, price=self.prices[symbol], provider=self.name)

    async def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        self.searches.append(query)
        matches = [
            SymbolMatch(symbol=sym, name=f"{sym} Inc.")
            for sym in sorted(self.prices)
            if query.upper() in sym
        ]
        return matches[:limit]

    async def close(self) -> None:
        self.closed = True


class FakeIdentityProvider(IdentityProviderABC):
    """Token -> identity lookup; the token "<email>" maps to that email."""

    def __init__(self) -> None:
        self.identities: dict[str, ExternalIdentity] = {}

    def register(self, token: str, email: str | None, name: str | None = None) -> None:
        self.identities[token] = ExternalIdentity(email=email, name=name)

    async def get_identity(self, token: str) -> ExternalIdentity | None:
        if token in self.identities:
            return self.identities[token]
        if "@" in token:
            return ExternalIdentity(email=token, name=token.split("@")[0].title())
        return None


# =============================================================================
# Application fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Development settings with a per-test SQLite file and a fixed allow-list."""
    return Settings(
        environment="development",
        allowed_emails=frozenset({ALICE, BOB, CAROL}),
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        cron_secret="cron-secret",
    )


@pytest.fixture
def price_provider() -> FakePriceProvider:
    return FakePriceProvider({"AAPL": "175", "MSFT": "400", "GOOG": "140"})


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


def build_container(
    settings: Settings,
    price_provider: PriceProviderABC,
    identity_provider: IdentityProviderABC,
) -> Container:
    container = init_container(settings)
    container.price_provider.override(providers.Object(price_provider))
    container.identity_provider.override(providers.Object(identity_provider))
    init_db(container.engine())
    return container


@pytest.fixture
def container(settings, price_provider, identity_provider) -> Container:
    return build_container(settings, price_provider, identity_provider)


@pytest.fixture
def client(container) -> Iterator[TestClient]:
    """TestClient running the app lifespan; server errors come back as responses."""
    with TestClient(create_app(container), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def production_client(settings, price_provider, identity_provider) -> Iterator[TestClient]:
    container = build_container(
        replace(settings, environment="production"), price_provider, identity_provider
    )
    with TestClient(create_app(container), raise_server_exceptions=False) as test_client:
        yield test_client


def auth(email: str, household_id: str | None = None) -> dict[str, str]:
    """Request headers authenticating as email (the fake provider accepts emails as tokens)."""
    headers = {"Authorization": f"Bearer {email}"}
    if household_id:
        headers["X-Household-Id"] = household_id
    return headers


# =============================================================================
# Storage and data factories
# =============================================================================


@pytest.fixture
def storage_scope(container):
    """Open a committed unit of work on the test database."""

    @contextmanager
    def _scope() -> Iterator[Storage]:
        with session_scope(container.engine()) as session:
            yield Storage(session)

    return _scope


@pytest.fixture
def storage(storage_scope) -> Iterator[Storage]:
    with storage_scope() as store:
        yield store


def make_member(
    storage: Storage,
    household: Household,
    name: str,
    role: HouseholdRole = HouseholdRole.MEMBER,
    user: User | None = None,
) -> Profile:
    profile = storage.add(Profile(name=name, user_id=user.id if user else None))
    storage.add(HouseholdMember(household_id=household.id, profile_id=profile.id, role=role))
    return profile


def make_household(
    storage: Storage, email: str, name: str = "Home"
) -> tuple[User, Profile, Household]:
    """A user with a profile that owns a fresh household."""
    user = storage.get_or_create_user(email, email.split("@")[0].title())
    household = storage.add(Household(name=name))
    profile = make_member(storage, household, user.name, HouseholdRole.OWNER, user)
    return user, profile, household


def make_stock_account(
    storage: Storage,
    owners: list[Profile],
    holdings: dict[str, tuple[str, str]] | None = None,
    name: str = "Brokerage",
    user: User | None = None,
) -> StockAccount:
    """Stock account with holdings given as symbol -> (quantity, avg cost)."""
    account = storage.add(StockAccount(name=name, user_id=user.id if user else None))
    storage.add_owners(StockAccount, account.id, [p.id for p in owners])
    for symbol, (quantity, cost) in (holdings or {}).items():
        storage.add(
            StockHolding(
                account_id=account.id,
                symbol=symbol,
                quantity=Decimal(quantity),
                avg_cost_basis=Decimal(cost),
            )
        )
    return account


def make_pension(
    storage: Storage, owners: list[Profile], value: str, user: User | None = None
) -> PensionAccount:
    account = storage.add(
        PensionAccount(
            provider_name="Migdal",
            account_name="Main",
            current_value=Decimal(value),
            user_id=user.id if user else None,
        )
    )
    storage.add_owners(PensionAccount, account.id, [p.id for p in owners])
    return account


def make_asset(
    storage: Storage,
    user: User,
    owners: list[Profile],
    asset_type: MiscAssetType,
    value: str,
    name: str = "Asset",
) -> MiscAsset:
    asset = storage.add(
        MiscAsset(type=asset_type, name=name, current_value=Decimal(value), user_id=user.id)
    )
    storage.add_owners(MiscAsset, asset.id, [p.id for p in owners])
    return asset


def context_for(storage: Storage, user: User, household_id: str | None = None) -> Context:
    return HouseholdDirectory().resolve_context(storage, user, household_id)


def onboard(client, email: str, household: str = "Home", family: tuple[str, ...] = ()) -> dict:
    """Complete onboarding over HTTP and return the response data."""
    response = client.post(
        "/onboarding",
        json={
            "profileName": email.split("@")[0].title(),
            "householdName": household,
            "familyMembers": [{"name": name} for name in family],
        },
        headers=auth(email),
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]
