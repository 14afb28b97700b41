"""
Ownership validation

Runs before any instruction is built. A rejection aborts the whole
resolution; no partial plan is ever returned.
"""

import logging
from typing import Optional

from solders.pubkey import Pubkey

from ..errors import OffCurveOwnerDisallowed, OwnershipChanged, ResolverError
from ..types import AccountState

logger = logging.getLogger(__name__)


def validate(
    observed: AccountState,
    expected_owner: Pubkey,
    owner_is_off_curve: bool,
    allow_off_curve_owner: bool,
    address: Optional[Pubkey] = None,
) -> Optional[ResolverError]:
    """
    Check the observed account against the expected owner.

    Rules, in order:
    1. off-curve owner without opt-in -> OffCurveOwnerDisallowed
    2. existing account whose owner differs -> OwnershipChanged
    3. otherwise OK

    Args:
        observed: Snapshot of the canonical address
        expected_owner: Owner the caller resolves for
        owner_is_off_curve: Whether expected_owner is a program derived address
        allow_off_curve_owner: Caller opt-in for off-curve owners
        address: Canonical address, for error reporting

    Returns:
        None if the account may be used, otherwise the rejection (not raised)
    """
    if owner_is_off_curve and not allow_off_curve_owner:
        return OffCurveOwnerDisallowed(str(expected_owner))

    if observed.exists and observed.owner != expected_owner:
        # A live read is the only way to see an authority change; the
        # derived address stays the same.
        return OwnershipChanged(
            str(address) if address is not None else "<unknown>",
            str(expected_owner),
            str(observed.owner) if observed.owner is not None else None,
        )

    return None


def ensure_valid(
    observed: AccountState,
    expected_owner: Pubkey,
    owner_is_off_curve: bool,
    allow_off_curve_owner: bool,
    address: Optional[Pubkey] = None,
) -> None:
    """
    Raising form of validate()

    Raises:
        OffCurveOwnerDisallowed: Owner is off-curve and not allowed
        OwnershipChanged: Canonical account is controlled by someone else
    """
    rejection = validate(
        observed,
        expected_owner,
        owner_is_off_curve,
        allow_off_curve_owner,
        address=address,
    )
    if rejection is not None:
        logger.warning(f"Resolution rejected: {rejection}")
        raise rejection
