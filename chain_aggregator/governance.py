"""Tally calculations and governance helpers shared by the chain reducers."""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Iterable, Mapping

from .config import CoinLookupConfig
from .models import Tally
from .numbers import ZERO, divide, format_fraction, parse_chain_int, to_view_denom

PERCENTAGE_PRECISION = 4


def token_weighted_tally(
    coin_lookup: CoinLookupConfig,
    yes: Any,
    no: Any,
    turnout: Any,
    total_issuance: Any,
    abstain: Any = 0,
    veto: Any = 0,
) -> Tally:
    """Tally where every vote weighs its (conviction-adjusted) stake.

    ``total_voted_percentage`` is the fraction ``turnout / total_issuance``
    (not multiplied by 100) rendered with four decimals.
    """
    yes_view = to_view_denom(coin_lookup, yes)
    no_view = to_view_denom(coin_lookup, no)
    abstain_view = to_view_denom(coin_lookup, abstain)
    veto_view = to_view_denom(coin_lookup, veto)
    return Tally(
        yes=yes_view,
        no=no_view,
        abstain=abstain_view,
        veto=veto_view,
        total=yes_view + no_view + abstain_view + veto_view,
        total_voted_percentage=format_fraction(
            divide(turnout, total_issuance), PERCENTAGE_PRECISION
        ),
    )


def membership_weighted_tally(
    ayes: Iterable[str],
    nays: Iterable[str],
    voters: Iterable[str],
    election_members: Mapping[str, Any],
) -> Tally:
    """Council tally: one member, one vote.

    The participation figure divides the roster's total election power by the
    power of those voters that appear in the roster. Voters missing from
    ``election_members`` contribute nothing to the denominator.
    """
    ayes = list(ayes)
    nays = list(nays)
    total_council_power = sum(
        (parse_chain_int(power) for power in election_members.values()), ZERO
    )
    total_voted_power = sum(
        (
            parse_chain_int(election_members[voter])
            for voter in voters
            if voter in election_members
        ),
        ZERO,
    )
    return Tally(
        yes=Decimal(len(ayes)),
        no=Decimal(len(nays)),
        abstain=ZERO,
        veto=ZERO,
        total=Decimal(len(ayes) + len(nays)),
        total_voted_percentage=format_fraction(
            divide(total_council_power, total_voted_power), PERCENTAGE_PRECISION
        ),
    )


def parse_links(links: str | None) -> tuple[dict[str, str], ...]:
    """Governance links are stored as a JSON array of ``{title, url}`` objects."""
    if not links:
        return ()
    return tuple(json.loads(links))
