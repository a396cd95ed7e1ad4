"""Caller context: profile, memberships and the active household roster."""
from fastapi import APIRouter

from household_networth.deps import CurrentContext
from household_networth.schemas import ContextOut, Envelope, ok

router = APIRouter(tags=["context"])


@router.get("/context", response_model=Envelope[ContextOut])
def get_context(context: CurrentContext) -> Envelope[ContextOut]:
    """Return the caller's context.

    Pass `householdId` (query) or `X-Household-Id` (header) to select the
    active household; unknown ids fall back to the default membership.
    """
    return ok(context.to_schema())
