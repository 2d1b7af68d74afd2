"""Unit tests for tally calculations."""
from __future__ import annotations

from decimal import Decimal

from chain_aggregator.config import CoinLookupConfig
from chain_aggregator.governance import (
    membership_weighted_tally,
    parse_links,
    token_weighted_tally,
)

PLAIN = CoinLookupConfig("unit", "UNIT", Decimal(1))


class TestTokenWeightedTally:
    def test_turnout_fraction(self) -> None:
        tally = token_weighted_tally(
            PLAIN, yes=200, no=100, turnout=300, total_issuance=1000
        )
        assert tally.total_voted_percentage == "0.3000"
        assert tally.yes == 200
        assert tally.no == 100
        assert tally.total == 300

    def test_zero_issuance(self) -> None:
        tally = token_weighted_tally(PLAIN, yes=1, no=0, turnout=1, total_issuance=0)
        assert tally.total_voted_percentage == "0.0000"

    def test_converts_to_view_denom(self) -> None:
        micro = CoinLookupConfig("uatom", "ATOM", Decimal("0.000001"))
        tally = token_weighted_tally(
            micro,
            yes=2_000_000,
            no=1_000_000,
            turnout=3_500_000,
            total_issuance=10_000_000,
            abstain=500_000,
        )
        assert tally.yes == Decimal(2)
        assert tally.abstain == Decimal("0.5")
        assert tally.total == Decimal("3.5")
        assert tally.total_voted_percentage == "0.3500"


class TestMembershipWeightedTally:
    def test_counts_members(self) -> None:
        roster = {"A": 100, "B": 100, "C": 200}
        tally = membership_weighted_tally(["A", "C"], ["B"], ["A", "B", "C"], roster)
        assert tally.yes == 2
        assert tally.no == 1
        assert tally.total == 3
        assert tally.total_voted_percentage == "1.0000"

    def test_voters_outside_roster_are_ignored(self) -> None:
        roster = {"A": 100, "B": 300}
        tally = membership_weighted_tally(["A", "X"], [], ["A", "X"], roster)
        assert tally.total_voted_percentage == "4.0000"

    def test_no_matching_voters(self) -> None:
        tally = membership_weighted_tally(["X"], [], ["X"], {"A": 100})
        assert tally.total_voted_percentage == "0.0000"


class TestParseLinks:
    def test_empty(self) -> None:
        assert parse_links(None) == ()
        assert parse_links("") == ()

    def test_json_array(self) -> None:
        links = parse_links('[{"title": "Forum", "url": "https://f.example"}]')
        assert links == ({"title": "Forum", "url": "https://f.example"},)
