"""
Unit tests for the forward calculator.
"""
from decimal import Decimal

from services.calculation_service import (
    calculate_appointment,
    calculate_appointment_multi_procedure,
    resolve_tax_percentage,
    tax_on_gross,
)
from shared_types import CalculationInput, CardFeeRule, Source, SplitPath
from tests.utils import (
    CONSULTATION,
    CREDIT,
    ENDOLASER,
    OWNER,
    PARTNER,
    PIX,
    bonus_rule,
    make_input,
    split_rule,
)


class TestScenarios:
    """Reference scenarios with hand-checked numbers."""

    def test_scenario_1_owner_keeps_everything(self):
        """gross 1000, fee 3%, tax 3%, cost 50, no rules => net 890, all to the owner."""
        result = calculate_appointment_multi_procedure(make_input())

        assert result.card_fee_percentage == Decimal("3")
        assert result.card_fee_value == Decimal("30")
        assert result.value_after_card_fee == Decimal("970")
        assert result.tax_percentage == Decimal("3")
        assert result.tax_value == Decimal("30")
        assert result.value_after_tax == Decimal("940")
        assert result.procedure_cost == Decimal("50")
        assert result.total_procedure_cost == Decimal("50")
        assert result.net_value == Decimal("890")
        assert result.bonus_value == Decimal("0")
        assert result.owner_final_value == Decimal("890")
        assert result.professional_final_value == Decimal("0")
        assert result.professional_share == Decimal("0")
        assert result.used_manual_net is False

    def test_scenario_2_partner_endolaser_legacy_split(self):
        result = calculate_appointment_multi_procedure(
            make_input(procedures=[ENDOLASER], professional=PARTNER)
        )

        assert result.net_value == Decimal("890")
        assert result.owner_final_value == Decimal("445")
        assert result.professional_final_value == Decimal("445")
        assert result.professional_share == Decimal("50")
        assert result.bonus_value == Decimal("0")
        assert result.split_path == SplitPath.LEGACY

    def test_scenario_3_bonus_is_on_top_of_split(self):
        rule = bonus_rule("b1", "1.5", procedure_id=ENDOLASER.id)
        result = calculate_appointment_multi_procedure(
            make_input(procedures=[ENDOLASER], bonus_rules=[rule])
        )

        assert result.net_value == Decimal("890")
        assert result.bonus_value == Decimal("13.35")
        assert result.applied_bonus_rule_ids == ("b1",)
        assert result.owner_final_value + result.professional_final_value == Decimal("890")

    def test_scenario_4_hospital_has_no_tax(self):
        result = calculate_appointment_multi_procedure(
            make_input(source=Source.for_appointment(True))
        )

        assert result.tax_percentage == Decimal("0")
        assert result.tax_value == Decimal("0")
        assert result.net_value == Decimal("920")


class TestPipeline:
    """Test individual steps of the pipeline."""

    def test_tax_is_on_gross_not_on_remainder(self):
        high_fee = CardFeeRule(payment_method_id=CREDIT, fee_percentage=Decimal("10"))
        result = calculate_appointment_multi_procedure(make_input(card_fee_rules=[high_fee]))

        assert result.card_fee_value == Decimal("100")
        assert result.tax_value == Decimal("30")
        assert result.net_value == Decimal("1000") - Decimal("100") - Decimal("30") - Decimal("50")

    def test_unmatched_payment_method_has_no_fee(self):
        result = calculate_appointment_multi_procedure(make_input(payment_method_id=PIX))

        assert result.card_fee_percentage == Decimal("0")
        assert result.card_fee_value == Decimal("0")
        assert result.net_value == Decimal("920")

    def test_hospital_custom_tax(self):
        source = Source(is_hospital=True, custom_tax_percentage=Decimal("5"))
        assert resolve_tax_percentage(source, Decimal("3")) == Decimal("5")
        assert resolve_tax_percentage(Source(is_hospital=True), Decimal("3")) == Decimal("0")
        assert resolve_tax_percentage(Source(is_hospital=False, custom_tax_percentage=Decimal("9")), Decimal("3")) == Decimal("3")

    def test_tax_on_gross(self):
        assert tax_on_gross(Decimal("1000"), Decimal("3")) == Decimal("30")

    def test_single_procedure_matches_multi_procedure(self):
        multi = make_input()
        single = CalculationInput(
            gross_value=multi.gross_value,
            payment_method_id=multi.payment_method_id,
            source=multi.source,
            procedure=CONSULTATION,
            professional=multi.professional,
            card_fee_rules=multi.card_fee_rules,
            default_tax_percentage=multi.default_tax_percentage,
            default_bonus_percentage=multi.default_bonus_percentage,
            owner_professional_id=multi.owner_professional_id,
        )

        assert calculate_appointment(single) == calculate_appointment_multi_procedure(multi)


class TestMultiProcedure:
    """Test appointments with several procedures."""

    def test_costs_are_summed_and_primary_is_reported(self):
        result = calculate_appointment_multi_procedure(make_input(procedures=[CONSULTATION, ENDOLASER]))

        assert result.procedure_cost == Decimal("50")
        assert result.total_procedure_cost == Decimal("100")
        assert result.net_value == Decimal("840")

    def test_bonus_is_summed_per_procedure(self):
        generic = bonus_rule("b1", "1")
        result = calculate_appointment_multi_procedure(
            make_input(procedures=[CONSULTATION, ENDOLASER], bonus_rules=[generic])
        )

        assert result.bonus_value == Decimal("16.80")
        assert result.applied_bonus_rule_ids == ("b1", "b1")

    def test_best_split_rule_across_procedures(self):
        rule = split_rule("r-endo", (OWNER.id, "50"), (PARTNER.id, "50"), procedure_id=ENDOLASER.id)
        result = calculate_appointment_multi_procedure(
            make_input(procedures=[CONSULTATION, ENDOLASER], professional=PARTNER, split_rules=[rule])
        )

        assert result.split_path == SplitPath.CONFIGURED
        assert result.applied_split_rule_id == "r-endo"
        assert result.owner_final_value == Decimal("420")
        assert result.professional_final_value == Decimal("420")

    def test_no_procedures(self):
        result = calculate_appointment_multi_procedure(make_input(procedures=[]))

        assert result.procedure_cost == Decimal("0")
        assert result.total_procedure_cost == Decimal("0")
        assert result.net_value == Decimal("940")


class TestSplitPaths:
    """Test which split path is taken."""

    def test_configured_rule(self):
        rule = split_rule("r1", (OWNER.id, "70"), (PARTNER.id, "30"), professional_id=PARTNER.id)
        result = calculate_appointment_multi_procedure(make_input(professional=PARTNER, split_rules=[rule]))

        assert result.owner_final_value == Decimal("623")
        assert result.professional_final_value == Decimal("267")
        assert result.professional_share == Decimal("30")

    def test_rules_but_no_match_is_all_owner(self):
        rule = split_rule("r1", (PARTNER.id, "100"), procedure_id="unrelated")
        result = calculate_appointment_multi_procedure(make_input(professional=PARTNER, split_rules=[rule]))

        assert result.owner_final_value == Decimal("890")
        assert result.split_path == SplitPath.DEFAULT

    def test_rules_but_no_owner_id_is_all_owner(self):
        rule = split_rule("r1", (PARTNER.id, "100"))
        result = calculate_appointment_multi_procedure(
            make_input(professional=PARTNER, split_rules=[rule], owner_professional_id=None)
        )

        assert result.owner_final_value == Decimal("890")
        assert result.professional_final_value == Decimal("0")
        assert result.split_path == SplitPath.DEFAULT
        assert result.allocations[0].professional_id is None

    def test_invalid_rule_is_all_owner(self):
        rule = split_rule("r1", (OWNER.id, "50"), (PARTNER.id, "47"))
        result = calculate_appointment_multi_procedure(make_input(professional=PARTNER, split_rules=[rule]))

        assert result.owner_final_value == Decimal("890")
        assert result.professional_final_value == Decimal("0")

    def test_bonus_rules_disable_legacy_bonus_but_not_legacy_split(self):
        """Legacy fallbacks are chosen per concern."""
        unrelated_bonus = bonus_rule("b1", "5", procedure_id="unrelated")
        result = calculate_appointment_multi_procedure(
            make_input(procedures=[ENDOLASER], professional=PARTNER, bonus_rules=[unrelated_bonus])
        )

        assert result.bonus_value == Decimal("0")
        assert result.split_path == SplitPath.LEGACY
        assert result.professional_final_value == Decimal("445")


class TestAppointmentFields:
    """Test projection onto stored columns."""

    def test_to_appointment_fields(self):
        result = calculate_appointment_multi_procedure(make_input())
        fields = result.to_appointment_fields()

        assert fields["net_value"] == Decimal("890")
        assert fields["final_value_owner"] == Decimal("890")
        assert fields["final_value_professional"] == Decimal("0")
        assert set(fields) == {
            "card_fee_percentage", "card_fee_value", "tax_percentage", "tax_value",
            "procedure_cost", "total_procedure_cost", "net_value", "bonus_value",
            "professional_share", "final_value_owner", "final_value_professional",
        }
