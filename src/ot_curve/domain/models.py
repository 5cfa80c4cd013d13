"""Bonding-curve state — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.ot_common.enums import Outcome


@dataclass
class OutcomeCurve:
    """Linear capped price-vs-supply curve for one outcome.

    Invariant: min_price <= price_at_supply(supply) <= max_price.
    """

    supply: float
    reserve: float  # USD held by the curve; payouts never exceed it
    min_price: float
    max_price: float
    max_supply: float


@dataclass
class CurveState:
    """The two independent curves of a sandbox market (not constrained to sum to 1)."""

    yes: OutcomeCurve
    no: OutcomeCurve

    def for_outcome(self, outcome: str) -> OutcomeCurve:
        return self.yes if outcome == Outcome.YES else self.no


@dataclass
class CurvePrices:
    yes_price: float
    no_price: float
    prob_yes: float
    prob_no: float

