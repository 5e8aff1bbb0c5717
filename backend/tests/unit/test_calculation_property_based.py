"""
Property-based tests for the calculation engine.

These tests verify money invariants that must hold for any input, using
Hypothesis to generate values, rates and rule distributions.
"""
from decimal import Decimal

from hypothesis import assume, given, strategies as st

from services.bonus_rule_service import BonusRuleEngine
from services.calculation_service import calculate_appointment_multi_procedure
from services.card_fee_service import find_card_fee_percentage
from services.manual_net_service import reconcile_manual_net
from shared_types import BonusBaseValue, CardFeeRule, Procedure, Source
from tests.utils import ASSOCIATE, CREDIT, OWNER, PARTNER, bonus_rule, make_input, split_rule


def money(max_value: str = "100000"):
    return st.decimals(
        min_value=Decimal("0"), max_value=Decimal(max_value), places=2,
        allow_nan=False, allow_infinity=False,
    )


def percentage():
    return st.decimals(
        min_value=Decimal("0"), max_value=Decimal("100"), places=2,
        allow_nan=False, allow_infinity=False,
    )


class TestConservation:
    """The split always hands out exactly the net value."""

    @given(
        gross=money(),
        fee=percentage(),
        cost=money("500"),
        owner_pct=percentage(),
        partner_pct=percentage(),
    )
    def test_shares_sum_to_net(self, gross, fee, cost, owner_pct, partner_pct):
        assume(owner_pct + partner_pct <= Decimal("100"))
        associate_pct = Decimal("100") - owner_pct - partner_pct
        rule = split_rule(
            "r1",
            (OWNER.id, str(owner_pct)),
            (PARTNER.id, str(partner_pct)),
            (ASSOCIATE.id, str(associate_pct)),
        )
        procedure = Procedure(id="p1", name="Procedure", fixed_cost=cost)

        result = calculate_appointment_multi_procedure(
            make_input(
                gross_value=str(gross),
                procedures=[procedure],
                professional=PARTNER,
                card_fee_rules=[CardFeeRule(payment_method_id=CREDIT, fee_percentage=fee)],
                split_rules=[rule],
            )
        )

        assert result.owner_final_value + result.professional_final_value == result.net_value
        assert sum(a.amount for a in result.allocations) == result.net_value

    @given(gross=money(), fee=percentage(), tax=percentage(), cost=money("500"))
    def test_net_value_identity(self, gross, fee, tax, cost):
        procedure = Procedure(id="p1", name="Procedure", fixed_cost=cost)

        result = calculate_appointment_multi_procedure(
            make_input(
                gross_value=str(gross),
                procedures=[procedure],
                card_fee_rules=[CardFeeRule(payment_method_id=CREDIT, fee_percentage=fee)],
                default_tax_percentage=str(tax),
            )
        )

        assert result.net_value == gross - result.card_fee_value - result.tax_value - cost
        assert result.tax_value == gross * tax / Decimal("100")


class TestBonusAdditivity:
    """Bonus rules never interact with each other."""

    @given(gross=money(), net=money(), first=percentage(), second=percentage())
    def test_bonus_of_two_rules_is_sum_of_each(self, gross, net, first, second):
        rule_a = bonus_rule("a", str(first))
        rule_b = bonus_rule("b", str(second), base_value=BonusBaseValue.GROSS_VALUE)

        both = BonusRuleEngine.calculate_bonus(gross, net, net, "p1", OWNER.id, [rule_a, rule_b])
        only_a = BonusRuleEngine.calculate_bonus(gross, net, net, "p1", OWNER.id, [rule_a])
        only_b = BonusRuleEngine.calculate_bonus(gross, net, net, "p1", OWNER.id, [rule_b])

        assert both.total_bonus == only_a.total_bonus + only_b.total_bonus


class TestCardFeeBoundaries:
    """Range bounds are inclusive on both edges."""

    @given(low=money(), width=money(), fee=percentage())
    def test_both_edges_match(self, low, width, fee):
        rule = CardFeeRule(payment_method_id=CREDIT, fee_percentage=fee, min_value=low, max_value=low + width)

        assert find_card_fee_percentage(CREDIT, low, [rule]) == fee
        assert find_card_fee_percentage(CREDIT, low + width, [rule]) == fee
        assert find_card_fee_percentage(CREDIT, low + width + Decimal("0.01"), [rule]) == Decimal("0")


class TestManualNetRoundTrip:
    """Without tax, reconciling the forward net recovers the card fee."""

    @given(gross=money(), fee=percentage(), cost=money("500"))
    def test_zero_tax_round_trip(self, gross, fee, cost):
        assume(gross > Decimal("0"))
        procedure = Procedure(id="p1", name="Procedure", fixed_cost=cost)
        calculation_input = make_input(
            gross_value=str(gross),
            procedures=[procedure],
            card_fee_rules=[CardFeeRule(payment_method_id=CREDIT, fee_percentage=fee)],
            source=Source.for_appointment(True),
        )
        forward = calculate_appointment_multi_procedure(calculation_input)

        reconciled = reconcile_manual_net(forward.net_value, calculation_input)

        tolerance = Decimal("0.000001")
        assert abs(reconciled.implied_card_fee_percentage - fee) <= tolerance
        assert abs(reconciled.implied_card_fee_value - forward.card_fee_value) <= tolerance
