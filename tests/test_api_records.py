"""Endpoint tests: stock accounts, pension accounts, misc assets, owners and the dashboard."""
import pytest

from household_networth.db import MiscAsset, StockAccount

from conftest import ALICE, BOB, auth, onboard


@pytest.fixture
def alice(client) -> dict:
    return onboard(client, ALICE, "Home", ("Kid",))


def create_account(client, email=ALICE, **body) -> dict:
    response = client.post("/accounts", json={"name": "Brokerage", **body}, headers=auth(email))
    assert response.status_code == 200, response.text
    return response.json()["data"]


def add_holding(client, account_id, symbol, quantity, cost, email=ALICE):
    return client.post(
        f"/accounts/{account_id}/holdings",
        json={"symbol": symbol, "quantity": quantity, "avgCostBasis": cost},
        headers=auth(email),
    )


DEPOSIT = {
    "depositDate": "2026-03-10",
    "salaryMonth": "2026-02-01",
    "amount": 1500,
    "employer": "Acme",
}


def create_asset(client, email=ALICE, **body):
    return client.post("/assets/items", json=body, headers=auth(email))


def create_pension(client, email=ALICE) -> str:
    response = client.post(
        "/pension/accounts",
        json={"providerName": "Migdal", "accountName": "Main", "currentValue": 50000},
        headers=auth(email),
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["id"]


def add_deposit(client, account_id, email=ALICE, **overrides):
    return client.post(
        f"/pension/accounts/{account_id}/deposits",
        json={**DEPOSIT, **overrides},
        headers=auth(email),
    )


class TestStockAccounts:
    def test_create_defaults_to_caller_as_owner(self, client, alice):
        account = create_account(client, currency="xyz")

        assert account["currency"] == "USD"
        assert [o["id"] for o in account["owners"]] == [alice["profile"]["id"]]
        assert account["holdings"] == []
        assert account["totalValue"] == 0

    def test_holdings_are_valued_with_prices(self, client, alice):
        account = create_account(client)
        add_holding(client, account["id"], "aapl", 10, 150)
        add_holding(client, account["id"], "UNKNOWN", 100, 50)

        data = client.get(f"/accounts/{account['id']}", headers=auth(ALICE)).json()["data"]
        holdings = {h["symbol"]: h for h in data["holdings"]}

        assert holdings["AAPL"]["currentPrice"] == 175.0
        assert holdings["AAPL"]["value"] == 1750.0
        assert holdings["AAPL"]["gainPercent"] == 16.67
        assert holdings["UNKNOWN"]["value"] == 0
        assert holdings["UNKNOWN"]["priceError"]
        assert data["totalValue"] == 1750.0
        assert data["totalGain"] == -4750.0

    def test_duplicate_symbol_conflicts(self, client, alice):
        account = create_account(client)
        add_holding(client, account["id"], "MSFT", 1, 300)

        response = add_holding(client, account["id"], "msft", 2, 310)

        assert response.status_code == 409
        assert response.json()["error"] == "Holding for MSFT already exists in this account"

    def test_holding_validation(self, client, alice):
        account = create_account(client)

        response = add_holding(client, account["id"], "AAPL", 0, 150)

        assert response.status_code == 400
        assert response.json()["error"] == "Quantity must be a positive number"

    def test_update_and_delete_holding(self, client, alice):
        account = create_account(client)
        holding = add_holding(client, account["id"], "GOOG", 1, 100).json()["data"]
        url = f"/accounts/{account['id']}/holdings/{holding['id']}"

        updated = client.put(url, json={"quantity": 3}, headers=auth(ALICE))
        deleted = client.delete(url, headers=auth(ALICE))
        again = client.delete(url, headers=auth(ALICE))

        assert updated.json()["data"]["quantity"] == 3.0
        assert deleted.status_code == 200
        assert again.status_code == 404
        assert again.json()["error"] == "Holding not found"

    def test_other_household_sees_not_found(self, client, alice):
        account = create_account(client)
        onboard(client, BOB)

        read = client.get(f"/accounts/{account['id']}", headers=auth(BOB))
        write = client.put(f"/accounts/{account['id']}", json={"name": "x"}, headers=auth(BOB))
        listed = client.get("/accounts", headers=auth(BOB)).json()["data"]

        assert read.status_code == write.status_code == 404
        assert read.json()["error"] == "Account not found"
        assert listed == []

    def test_family_profile_owner_shares_account(self, client, alice):
        """An account owned only by a tracked profile is visible to the whole household."""
        kid_id = alice["familyMembers"][0]["id"]
        account = create_account(client, ownerIds=[kid_id])

        listed = client.get("/accounts", headers=auth(ALICE)).json()["data"]

        assert [a["id"] for a in listed] == [account["id"]]
        assert [o["name"] for o in listed[0]["owners"]] == ["Kid"]

    def test_malformed_ids(self, client, alice):
        account = create_account(client)

        bad_account = client.get("/accounts/123", headers=auth(ALICE))
        bad_holding = client.delete(f"/accounts/{account['id']}/holdings/zz", headers=auth(ALICE))

        assert bad_account.status_code == 400
        assert bad_account.json()["error"] == "Invalid ID format"
        assert bad_holding.status_code == 400
        assert bad_holding.json()["error"] == "Invalid holding ID format"

    def test_delete_account(self, client, alice, storage_scope):
        account = create_account(client)
        add_holding(client, account["id"], "AAPL", 1, 1)

        response = client.delete(f"/accounts/{account['id']}", headers=auth(ALICE))

        assert response.status_code == 200
        with storage_scope() as storage:
            assert storage.get(StockAccount, account["id"]) is None
            assert storage.holdings_for(account["id"]) == []
            assert storage.owner_ids(StockAccount, account["id"]) == []


class TestOwners:
    def test_replace_owners(self, client, alice):
        account = create_account(client)
        kid_id = alice["familyMembers"][0]["id"]
        url = f"/accounts/{account['id']}/owners"

        response = client.put(
            url, json={"profileIds": [kid_id, alice["profile"]["id"], kid_id]}, headers=auth(ALICE)
        )
        owners = client.get(url, headers=auth(ALICE)).json()["data"]

        assert response.status_code == 200
        assert [o["id"] for o in response.json()["data"]] == [kid_id, alice["profile"]["id"]]
        assert {o["id"] for o in owners} == {kid_id, alice["profile"]["id"]}

    def test_empty_owner_set_rejected_without_mutation(self, client, alice, storage_scope):
        account = create_account(client)

        response = client.put(
            f"/accounts/{account['id']}/owners", json={"profileIds": []}, headers=auth(ALICE)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid data"
        with storage_scope() as storage:
            assert storage.owner_ids(StockAccount, account["id"]) == [alice["profile"]["id"]]

    def test_profile_outside_household_rejected(self, client, alice, storage_scope):
        account = create_account(client)
        bob_profile = onboard(client, BOB)["profile"]["id"]

        response = client.put(
            f"/accounts/{account['id']}/owners",
            json={"profileIds": [bob_profile]},
            headers=auth(ALICE),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Some profiles are not in your household"
        with storage_scope() as storage:
            assert storage.owner_ids(StockAccount, account["id"]) == [alice["profile"]["id"]]

    def test_create_with_foreign_owner_rejected(self, client, alice):
        bob_profile = onboard(client, BOB)["profile"]["id"]

        response = client.post(
            "/accounts", json={"name": "x", "ownerIds": [bob_profile]}, headers=auth(ALICE)
        )

        assert response.status_code == 400


class TestPension:
    def test_create_and_deposit(self, client, alice):
        created = client.post(
            "/pension/accounts",
            json={
                "type": "hishtalmut",
                "providerName": "Migdal",
                "accountName": "Main",
                "currentValue": 50000,
                "feeFromTotal": 0.5,
            },
            headers=auth(ALICE),
        )
        account_id = created.json()["data"]["id"]

        deposit = client.post(
            f"/pension/accounts/{account_id}/deposits",
            json={
                "depositDate": "2026-03-10T00:00:00Z",
                "salaryMonth": "2026-02-01",
                "amount": 1500,
                "employer": "Acme",
            },
            headers=auth(ALICE),
        )
        data = client.get(f"/pension/accounts/{account_id}", headers=auth(ALICE)).json()["data"]

        assert created.status_code == 200
        assert deposit.status_code == 200
        assert deposit.json()["data"]["depositDate"] == "2026-03-10"
        assert data["type"] == "hishtalmut"
        assert data["currentValue"] == 50000.0
        assert [d["amount"] for d in data["deposits"]] == [1500.0]

    def test_edit_and_delete_deposit(self, client, alice):
        account_id = create_pension(client)
        deposit_id = add_deposit(client, account_id).json()["data"]["id"]

        updated = client.put(
            f"/pension/deposits/{deposit_id}",
            json={"amount": 1750, "employer": " Globex "},
            headers=auth(ALICE),
        )
        fetched = client.get(f"/pension/deposits/{deposit_id}", headers=auth(ALICE))
        deleted = client.delete(f"/pension/deposits/{deposit_id}", headers=auth(ALICE))
        gone = client.get(f"/pension/deposits/{deposit_id}", headers=auth(ALICE))
        account = client.get(f"/pension/accounts/{account_id}", headers=auth(ALICE)).json()["data"]

        assert updated.status_code == 200
        assert fetched.json()["data"]["amount"] == 1750.0
        assert fetched.json()["data"]["employer"] == "Globex"
        assert fetched.json()["data"]["accountId"] == account_id
        assert fetched.json()["data"]["salaryMonth"] == "2026-02-01"
        assert deleted.json() == {"success": True, "data": None}
        assert gone.status_code == 404
        assert gone.json()["error"] == "Deposit not found"
        assert account["deposits"] == []

    def test_deposit_update_validation(self, client, alice):
        deposit_id = add_deposit(client, create_pension(client)).json()["data"]["id"]

        response = client.put(
            f"/pension/deposits/{deposit_id}", json={"amount": 0}, headers=auth(ALICE)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Amount must be a positive number"

    def test_other_household_cannot_reach_deposit(self, client, alice):
        deposit_id = add_deposit(client, create_pension(client)).json()["data"]["id"]
        onboard(client, BOB)

        read = client.get(f"/pension/deposits/{deposit_id}", headers=auth(BOB))
        write = client.delete(f"/pension/deposits/{deposit_id}", headers=auth(BOB))
        still_there = client.get(f"/pension/deposits/{deposit_id}", headers=auth(ALICE))

        assert read.status_code == 404
        assert write.status_code == 404
        assert write.json()["error"] == "Deposit not found"
        assert still_there.status_code == 200

    def test_bulk_import(self, client, alice):
        account_id = create_pension(client)

        response = client.post(
            "/pension/deposits/bulk",
            json={"accountId": account_id, "deposits": [DEPOSIT, {**DEPOSIT, "amount": 900}]},
            headers=auth(ALICE),
        )
        account = client.get(f"/pension/accounts/{account_id}", headers=auth(ALICE)).json()["data"]

        assert response.status_code == 200
        assert [d["amount"] for d in response.json()["data"]] == [1500.0, 900.0]
        assert sorted(d["amount"] for d in account["deposits"]) == [900.0, 1500.0]

    def test_bulk_import_is_all_or_nothing(self, client, alice):
        account_id = create_pension(client)

        response = client.post(
            "/pension/deposits/bulk",
            json={"accountId": account_id, "deposits": [DEPOSIT, {**DEPOSIT, "amount": -1}]},
            headers=auth(ALICE),
        )
        account = client.get(f"/pension/accounts/{account_id}", headers=auth(ALICE)).json()["data"]

        assert response.status_code == 400
        assert response.json()["error"] == "Amount must be a positive number"
        assert account["deposits"] == []

    @pytest.mark.parametrize(
        "deposits, error",
        [
            ([], "At least one deposit is required"),
            ([DEPOSIT] * 101, "Maximum 100 deposits allowed per request"),
        ],
    )
    def test_bulk_import_size_limits(self, client, alice, deposits, error):
        response = client.post(
            "/pension/deposits/bulk",
            json={"accountId": create_pension(client), "deposits": deposits},
            headers=auth(ALICE),
        )

        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_bulk_import_into_foreign_account(self, client, alice):
        account_id = create_pension(client)
        onboard(client, BOB)

        response = client.post(
            "/pension/deposits/bulk",
            json={"accountId": account_id, "deposits": [DEPOSIT]},
            headers=auth(BOB),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Pension account not found"

    def test_fee_out_of_range(self, client, alice):
        response = client.post(
            "/pension/accounts",
            json={"providerName": "A", "accountName": "B", "currentValue": 1, "feeFromDeposit": 101},
            headers=auth(ALICE),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Fee from deposit must be a percentage between 0 and 100"


class TestMiscAssets:
    def test_loan_is_stored_negative(self, client, alice, storage_scope):
        response = create_asset(
            client, type="loan", name="Car loan", currentValue=5000, monthlyPayment=300,
            monthlyDeposit=50,
        )
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["currentValue"] == -5000.0
        assert data["monthlyPayment"] == 300.0
        assert data["monthlyDeposit"] is None

    def test_update_keeps_liability_sign(self, client, alice):
        asset_id = create_asset(
            client, type="mortgage", name="Home", currentValue=-100000, monthlyPayment=2000
        ).json()["data"]["id"]

        response = client.put(
            f"/assets/items/{asset_id}", json={"currentValue": 90000}, headers=auth(ALICE)
        )

        assert response.json()["data"]["currentValue"] == -90000.0

    def test_deposit_fields_follow_type(self, client, alice):
        savings = create_asset(
            client, type="child_savings", name="Kid fund", currentValue=1000,
            monthlyDeposit=50, monthlyPayment=10,
        ).json()["data"]

        assert savings["monthlyDeposit"] == 50.0
        assert savings["monthlyPayment"] is None

    @pytest.mark.parametrize("asset_type", ["bank_deposit", "child_savings"])
    def test_non_liability_value_keeps_its_sign(self, client, alice, asset_type):
        positive = create_asset(client, type=asset_type, name="Up", currentValue=2500).json()
        negative = create_asset(client, type=asset_type, name="Down", currentValue=-300).json()

        assert positive["data"]["currentValue"] == 2500.0
        assert negative["data"]["currentValue"] == -300.0

    def test_liability_requires_monthly_payment(self, client, alice):
        response = create_asset(client, type="loan", name="Loan", currentValue=100)

        assert response.status_code == 400
        assert response.json()["error"] == "Monthly payment is required for loans and mortgages"

    def test_unknown_type(self, client, alice):
        response = create_asset(client, type="crypto", name="x", currentValue=1)

        assert response.status_code == 400
        assert response.json()["error"].startswith("Type must be one of")

    def test_list_with_totals(self, client, alice):
        create_asset(client, type="bank_deposit", name="Savings", currentValue=10000)
        create_asset(client, type="loan", name="Loan", currentValue=5000, monthlyPayment=100)

        data = client.get("/assets/items", headers=auth(ALICE)).json()["data"]

        assert len(data["items"]) == 2
        assert data["summary"] == {
            "totalAssets": 10000.0,
            "totalLiabilities": 5000.0,
            "netValue": 5000.0,
            "itemsCount": 2,
        }

    def test_assets_are_private_to_creator(self, client, alice, storage_scope):
        asset_id = create_asset(
            client, type="bank_deposit", name="Savings", currentValue=1
        ).json()["data"]["id"]
        home_id = alice["household"]["id"]
        bob_profile = onboard(client, BOB)["profile"]["id"]
        client.post(
            f"/households/{home_id}/members", json={"profileId": bob_profile}, headers=auth(ALICE)
        )

        response = client.get(f"/assets/items/{asset_id}", headers=auth(BOB, home_id))
        deleted = client.delete(f"/assets/items/{asset_id}", headers=auth(ALICE))

        assert response.status_code == 404
        assert response.json()["error"] == "Asset not found"
        assert deleted.status_code == 200
        with storage_scope() as storage:
            assert storage.get(MiscAsset, asset_id) is None


class TestDashboard:
    def test_net_worth_scenario(self, client, alice):
        account = create_account(client)
        add_holding(client, account["id"], "AAPL", 10, 150)
        client.post(
            "/pension/accounts",
            json={"providerName": "Migdal", "accountName": "Main", "currentValue": 50000},
            headers=auth(ALICE),
        )
        create_asset(client, type="bank_deposit", name="Savings", currentValue=10000)
        create_asset(client, type="loan", name="Loan", currentValue=5000, monthlyPayment=100)

        response = client.get("/dashboard", headers=auth(ALICE))
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["netWorth"] == 56750.0
        assert data["portfolio"] == {
            "totalValue": 1750.0,
            "totalCostBasis": 1500.0,
            "totalGain": 250.0,
            "totalGainPercent": 16.67,
            "holdingsCount": 1,
        }
        assert data["pension"] == {"totalValue": 50000.0, "accountsCount": 1}
        assert data["assets"]["totalLiabilities"] == 5000.0

    def test_unpriced_symbol_does_not_fail(self, client, alice):
        account = create_account(client)
        add_holding(client, account["id"], "UNKNOWN", 100, 50)

        data = client.get("/dashboard", headers=auth(ALICE)).json()["data"]

        assert data["portfolio"]["totalValue"] == 0
        assert data["portfolio"]["totalGain"] == -5000.0
        assert data["portfolio"]["holdingsCount"] == 1
        assert data["netWorth"] == 0

    def test_history_after_snapshot(self, client, alice):
        create_asset(client, type="bank_deposit", name="Savings", currentValue=10)

        assert client.get("/dashboard/history", headers=auth(ALICE)).json()["data"] == []
        client.get("/cron/create-snapshot")
        client.get("/cron/create-snapshot")
        history = client.get("/dashboard/history", headers=auth(ALICE)).json()["data"]

        assert len(history) == 2
        assert history[0]["date"] <= history[1]["date"]
        assert history[-1]["netWorth"] == 10.0

    def test_dashboard_matches_snapshot_for_every_member(self, client, alice):
        home_id = alice["household"]["id"]
        bob_profile = onboard(client, BOB)["profile"]["id"]
        client.post(
            f"/households/{home_id}/members", json={"profileId": bob_profile}, headers=auth(ALICE)
        )
        create_asset(client, BOB, type="bank_deposit", name="Bob savings", currentValue=10000)
        client.get("/cron/create-snapshot")

        alice_view = client.get("/dashboard", headers=auth(ALICE, home_id)).json()["data"]
        bob_view = client.get("/dashboard", headers=auth(BOB, home_id)).json()["data"]
        history = client.get("/dashboard/history", headers=auth(ALICE, home_id)).json()["data"]

        assert alice_view["netWorth"] == bob_view["netWorth"] == 10000.0
        assert history[-1]["netWorth"] == alice_view["netWorth"]
