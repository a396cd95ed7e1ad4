"""API routers.

Includes routes for:
- /context - caller profile, memberships and active household
- /dashboard - net worth and snapshot history
- /households - household and member administration
- /profiles, /onboarding - household profiles and first-run setup
- /accounts - stock accounts and holdings
- /pension/accounts, /pension/deposits - pension accounts and deposits
- /assets/items - deposits, savings, loans and mortgages
- /stocks - prices and symbol search
- /cron - scheduled snapshot and price refresh jobs
"""
from household_networth.routers.accounts import router as accounts_router
from household_networth.routers.assets import router as assets_router
from household_networth.routers.context import router as context_router
from household_networth.routers.cron import router as cron_router
from household_networth.routers.dashboard import router as dashboard_router
from household_networth.routers.households import router as households_router
from household_networth.routers.pension import deposits_router
from household_networth.routers.pension import router as pension_router
from household_networth.routers.profiles import onboarding_router
from household_networth.routers.profiles import router as profiles_router
from household_networth.routers.stocks import router as stocks_router

__all__ = [
    "accounts_router",
    "assets_router",
    "context_router",
    "cron_router",
    "dashboard_router",
    "deposits_router",
    "households_router",
    "onboarding_router",
    "pension_router",
    "profiles_router",
    "stocks_router",
]
