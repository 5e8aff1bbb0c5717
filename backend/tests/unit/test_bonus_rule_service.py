"""
Unit tests for the bonus rule engine.
"""
from decimal import Decimal

from services.bonus_rule_service import BonusRuleEngine
from shared_types import BonusBaseValue
from tests.utils import bonus_rule


GROSS = Decimal("1000")
NET = Decimal("890")


class TestFindApplicableRules:
    """Test bonus rule matching."""

    def test_null_filters_match_everything(self):
        rule = bonus_rule("b1", "1.5")
        assert BonusRuleEngine.find_applicable_rules("any-proc", "any-prof", [rule]) == [rule]

    def test_filters_must_match(self):
        rule = bonus_rule("b1", "1.5", procedure_id="p1", professional_id="x1")
        assert BonusRuleEngine.find_applicable_rules("p1", "x1", [rule]) == [rule]
        assert BonusRuleEngine.find_applicable_rules("p2", "x1", [rule]) == []
        assert BonusRuleEngine.find_applicable_rules("p1", "x2", [rule]) == []

    def test_inactive_rules_never_match(self):
        rule = bonus_rule("b1", "1.5", is_active=False)
        assert BonusRuleEngine.find_applicable_rules("p1", "x1", [rule]) == []

    def test_ordered_by_specificity(self):
        generic = bonus_rule("generic", "1")
        by_professional = bonus_rule("prof", "1", professional_id="x1")
        by_procedure = bonus_rule("proc", "1", procedure_id="p1")
        both = bonus_rule("both", "1", procedure_id="p1", professional_id="x1")

        rules = BonusRuleEngine.find_applicable_rules("p1", "x1", [generic, by_professional, by_procedure, both])

        assert [r.id for r in rules] == ["both", "proc", "prof", "generic"]


class TestCalculateBonus:
    """Test bonus amounts."""

    def test_net_value_rule(self):
        """1.5% of a net value of 890 is 13.35."""
        rule = bonus_rule("b1", "1.5", procedure_id="p1")
        result = BonusRuleEngine.calculate_bonus(GROSS, NET, NET, "p1", "x1", [rule])

        assert result.total_bonus == Decimal("13.35")
        assert result.applied_rules == (rule,)

    def test_base_values(self):
        gross_rule = bonus_rule("g", "10", base_value=BonusBaseValue.GROSS_VALUE)
        net_rule = bonus_rule("n", "10", base_value=BonusBaseValue.NET_VALUE)
        after_costs_rule = bonus_rule("a", "10", base_value=BonusBaseValue.FINAL_AFTER_COSTS)

        assert BonusRuleEngine.calculate_bonus(GROSS, NET, Decimal("500"), None, None, [gross_rule]).total_bonus == Decimal("100")
        assert BonusRuleEngine.calculate_bonus(GROSS, NET, Decimal("500"), None, None, [net_rule]).total_bonus == Decimal("89")
        assert BonusRuleEngine.calculate_bonus(GROSS, NET, Decimal("500"), None, None, [after_costs_rule]).total_bonus == Decimal("50")

    def test_all_matching_rules_add_up(self):
        rules = [bonus_rule("b1", "1"), bonus_rule("b2", "2", procedure_id="p1")]
        result = BonusRuleEngine.calculate_bonus(GROSS, NET, NET, "p1", "x1", rules)

        assert result.total_bonus == Decimal("26.70")
        assert {r.id for r in result.applied_rules} == {"b1", "b2"}

    def test_non_matching_rule_does_not_change_total(self):
        matching = bonus_rule("b1", "1.5")
        other = bonus_rule("b2", "50", procedure_id="elsewhere")

        alone = BonusRuleEngine.calculate_bonus(GROSS, NET, NET, "p1", "x1", [matching])
        with_other = BonusRuleEngine.calculate_bonus(GROSS, NET, NET, "p1", "x1", [matching, other])

        assert alone.total_bonus == with_other.total_bonus

    def test_no_rules(self):
        result = BonusRuleEngine.calculate_bonus(GROSS, NET, NET, "p1", "x1", [])
        assert result.total_bonus == Decimal("0")
        assert result.applied_rules == ()
