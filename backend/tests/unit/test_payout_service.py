"""
Unit tests for payout summaries.
"""
from datetime import date
from decimal import Decimal

from services.payout_service import summarize_payouts
from shared_types import AppointmentFinancials, Expense, ExpenseResponsibility, RecurrenceType
from tests.utils import ASSOCIATE, OWNER, PARTNER

START = date(2024, 3, 1)
END = date(2024, 3, 31)


def financials(appointment_id, professional, owner, professional_value, bonus="0"):
    return AppointmentFinancials(
        id=appointment_id,
        professional_id=professional.id,
        final_value_owner=Decimal(owner),
        final_value_professional=Decimal(professional_value),
        bonus_value=Decimal(bonus),
        date=date(2024, 3, 15),
    )


APPOINTMENTS = [
    financials("a1", OWNER, "890", "0", bonus="13.35"),
    financials("a2", PARTNER, "445", "445"),
    financials("a3", PARTNER, "0", "900"),
    financials("a4", ASSOCIATE, "300", "200"),
]

RENT = Expense(
    id="rent",
    name="Aluguel",
    amount=Decimal("1000"),
    recurrence_type=RecurrenceType.MONTHLY,
    start_date=date(2024, 1, 1),
    responsibility=(
        ExpenseResponsibility(OWNER.id, Decimal("50")),
        ExpenseResponsibility(PARTNER.id, Decimal("50")),
    ),
)


def payouts_by_id(summary):
    return {payout.professional_id: payout for payout in summary.payouts}


class TestSummarizePayouts:
    """Test who is paid what for a period."""

    def test_owner_receives_owner_share_of_every_appointment(self):
        summary = summarize_payouts(APPOINTMENTS, [OWNER, PARTNER, ASSOCIATE], OWNER.id, [], START, END)
        owner = payouts_by_id(summary)[OWNER.id]

        assert owner.is_owner is True
        assert owner.earnings == Decimal("1635")
        assert owner.appointment_ids == ["a1", "a2", "a4"]

    def test_professionals_receive_their_own_appointments(self):
        summary = summarize_payouts(APPOINTMENTS, [OWNER, PARTNER, ASSOCIATE], OWNER.id, [], START, END)
        payouts = payouts_by_id(summary)

        assert payouts[PARTNER.id].earnings == Decimal("1345")
        assert payouts[PARTNER.id].appointment_ids == ["a2", "a3"]
        assert payouts[ASSOCIATE.id].earnings == Decimal("200")
        assert payouts[ASSOCIATE.id].is_owner is False

    def test_expenses_are_deducted(self):
        summary = summarize_payouts(APPOINTMENTS, [OWNER, PARTNER, ASSOCIATE], OWNER.id, [RENT], START, END)
        payouts = payouts_by_id(summary)

        assert payouts[OWNER.id].expenses.total == Decimal("500")
        assert payouts[OWNER.id].net_after_expenses == Decimal("1135")
        assert payouts[PARTNER.id].net_after_expenses == Decimal("845")
        assert payouts[ASSOCIATE.id].net_after_expenses == Decimal("200")

    def test_bonus_is_reported_separately(self):
        summary = summarize_payouts(APPOINTMENTS, [OWNER, PARTNER], OWNER.id, [], START, END)

        assert summary.total_bonus == Decimal("13.35")
        assert summary.bonus_appointment_ids == ["a1"]

    def test_no_appointments(self):
        summary = summarize_payouts([], [OWNER, PARTNER], OWNER.id, [], START, END)

        assert [p.earnings for p in summary.payouts] == [Decimal("0"), Decimal("0")]
        assert summary.total_bonus == Decimal("0")
