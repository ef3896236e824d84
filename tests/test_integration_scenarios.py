"""
Integration Test Scenarios for the Eleva Commission Engine

End-to-end scenarios through the raw dictionary API, the same payloads the
HTTP layers receive.

Scenario A: Solo Top Expert on the annual plan
Scenario B: Top Expert inside a clinic with a 15% marketing fee
Scenario C: Community Expert on commission with a 25% marketing fee (rejected)
Scenario D: Community Expert qualifying for the annual plan at a low revenue bar
Scenario E: Refund of a clinic booking and the monthly summary

Run with: python -m pytest tests/test_integration_scenarios.py -v
"""

import pytest
from commission_engine import ActorPlan, Booking, CommissionProcessor, OrganizationFeeConfig
from commission_engine.output import OutputBuilder


@pytest.fixture
def processor():
    return CommissionProcessor()


def calc(response, field):
    return response["calculations"][field]["value"]


class TestScenarioA:
    """Solo Top Expert, annual plan, €100.00 booking."""

    def test_split(self, processor):
        result = processor.compute_commission_from_dict({
            "booking": {"gross_amount": 10000, "currency": "eur", "payee_id": "exp_maria", "booking_id": "bk_1"},
            "actor_plan": {"tier": "top", "plan_type": "annual"},
        })

        assert result["status"] == "ok"
        assert calc(result, "platform_fee_rate") == 800
        assert calc(result, "platform_fee_amount") == 800
        assert calc(result, "organization_fee_amount") == 0
        assert calc(result, "payee_net_amount") == 9200

        summary = result["booking_summary"]
        assert summary["currency"] == "EUR"
        assert summary["booking_id"] == "bk_1"
        assert summary["organization_id"] is None
        assert summary["kind"] == "charge"

    def test_descriptions_show_arithmetic(self, processor):
        result = processor.compute_commission_from_dict({
            "booking": {"gross_amount": 10000, "currency": "EUR", "payee_id": "exp_maria"},
            "actor_plan": {"tier": "top", "plan_type": "annual"},
        })

        assert result["calculations"]["platform_fee_amount"]["description"] == "8.00% × EUR 100.00 = EUR 8.00"
        assert result["calculations"]["organization_fee_amount"]["description"] == "No organization for this booking"


class TestScenarioB:
    """Top Expert inside a clinic charging 15% marketing."""

    def test_split(self, processor):
        result = processor.compute_commission_from_dict({
            "booking": {
                "gross_amount": 10000,
                "currency": "EUR",
                "payee_id": "exp_maria",
                "organization_id": "clinic_1",
            },
            "actor_plan": {"tier": "top", "plan_type": "annual"},
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 1500},
        })

        assert result["status"] == "ok"
        assert calc(result, "platform_fee_amount") == 800
        assert calc(result, "organization_fee_rate") == 1500
        assert calc(result, "organization_fee_amount") == 1500
        assert calc(result, "payee_net_amount") == 7700


class TestScenarioC:
    """Community Expert on commission inside a clinic charging 25%."""

    @pytest.fixture
    def payload(self):
        return {
            "booking": {
                "gross_amount": 10000,
                "currency": "EUR",
                "payee_id": "exp_joao",
                "organization_id": "clinic_1",
            },
            "actor_plan": {"tier": "community", "plan_type": "commission"},
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 2500},
        }

    def test_rejected_without_breakdown(self, processor, payload):
        result = processor.compute_commission_from_dict(payload)

        assert result["status"] == "rejected"
        assert "calculations" not in result

    def test_combined_fee_reported(self, processor, payload):
        result = processor.compute_commission_from_dict(payload)

        combined = [v for v in result["violations"] if v["kind"] == "combined_fee_exceeds_maximum"]
        assert combined == [{
            "kind": "combined_fee_exceeds_maximum",
            "message": "Combined fee 45.00% exceeds the maximum 40.00% for payee exp_joao",
            "actual": 4500,
            "maximum": 4000,
            "payee_id": "exp_joao",
        }]

    def test_minimum_share_reported_first(self, processor, payload):
        result = processor.compute_commission_from_dict(payload)

        assert result["error"]["kind"] == "payee_share_below_minimum"
        assert result["error"]["actual"] == 5500
        assert result["error"]["required"] == 6000

    def test_clinic_cannot_raise_fee_to_25_percent(self, processor):
        result = processor.validate_fee_change_from_dict({
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 2500},
            "actor_plans": [
                {"tier": "top", "plan_type": "annual", "payee_id": "exp_maria"},
                {"tier": "community", "plan_type": "commission", "payee_id": "exp_joao"},
            ],
        })

        assert result["status"] == "rejected"
        assert {v["payee_id"] for v in result["violations"]} == {"exp_joao"}

    def test_clinic_can_set_fee_to_20_percent(self, processor):
        result = processor.validate_fee_change_from_dict({
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 2000},
            "actor_plans": [
                {"tier": "top", "plan_type": "annual", "payee_id": "exp_maria"},
                {"tier": "community", "plan_type": "commission", "payee_id": "exp_joao"},
            ],
        })

        assert result == {
            "status": "ok",
            "organization_id": "clinic_1",
            "marketing_fee_rate": 2000,
            "actors_checked": 2,
        }

    def test_fee_outside_settable_range(self, processor):
        result = processor.validate_fee_change_from_dict({
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 500},
            "actor_plans": [],
        })

        assert result["error"]["kind"] == "marketing_fee_out_of_range"
        assert result["error"]["minimum"] == 1000
        assert result["error"]["maximum"] == 2500


class TestScenarioD:
    """Community Expert on commission, custom threshold of €160/month."""

    @pytest.fixture
    def payload(self):
        return {
            "tier": "community",
            "current_plan": "commission",
            "metrics": {
                "months_active": 3,
                "average_monthly_revenue": 20000,
                "completed_bookings_count": 20,
                "average_rating": "4.2",
            },
            "threshold": {
                "min_months_active": 3,
                "min_avg_monthly_revenue": 16000,
                "min_completed_appointments": 15,
                "min_rating": "4.0",
            },
        }

    def test_eligible(self, processor, payload):
        result = processor.evaluate_eligibility_from_dict(payload)

        assert result["status"] == "ok"
        assert result["eligible"] is True
        assert all(result["meets_requirements"].values())
        assert "failed_criteria" not in result

    def test_savings_projection(self, processor, payload):
        savings = processor.evaluate_eligibility_from_dict(payload)["savings"]

        assert savings == {
            "alternate_plan": "annual",
            "projected_annual_revenue": 240000,
            "projected_annual_commissions_at_current_rate": 48000,
            "projected_annual_fee_at_alternate_plan": 49000,
            "projected_annual_commissions_at_alternate_rate": 28800,
            "projected_savings": -29800,
            "savings_percentage": "-62.08",
            "break_even_monthly_revenue": 51042,
        }

    def test_not_eligible_lists_failed_criteria(self, processor, payload):
        payload["metrics"]["months_active"] = 1
        payload["metrics"]["average_rating"] = 3.5

        result = processor.evaluate_eligibility_from_dict(payload)

        assert result["eligible"] is False
        assert "savings" not in result
        assert result["meets_requirements"]["months_active"] is False
        assert result["meets_requirements"]["average_rating"] is False
        assert result["failed_criteria"] == [
            "Need 3 months active (have 1)",
            "Need 4.0+ rating (have 3.5)",
        ]

    def test_malformed_metrics_rejected(self, processor, payload):
        payload["metrics"]["completed_bookings_count"] = -4

        result = processor.evaluate_eligibility_from_dict(payload)

        assert result["status"] == "rejected"
        assert result["error"]["kind"] == "invalid_metrics_input"
        assert result["error"]["field"] == "completed_bookings_count"

    def test_default_threshold_table(self, processor, payload):
        del payload["threshold"]

        result = processor.evaluate_eligibility_from_dict(payload)

        assert result["eligible"] is False
        assert result["requirements"]["min_avg_monthly_revenue"] == 51000


class TestScenarioE:
    """A clinic booking is refunded and the month is summarised."""

    def test_refund_nets_to_zero(self, processor):
        booking_payload = {
            "booking": {
                "gross_amount": 12345,
                "currency": "EUR",
                "payee_id": "exp_maria",
                "organization_id": "clinic_1",
            },
            "actor_plan": {"tier": "community", "plan_type": "monthly"},
            "organization": {"organization_id": "clinic_1", "marketing_fee_rate": 1500},
        }

        charge = processor.compute_commission(
            Booking.from_dict(booking_payload["booking"]),
            ActorPlan.from_dict(booking_payload["actor_plan"]),
            OrganizationFeeConfig.from_dict(booking_payload["organization"]),
        ).unwrap()
        refund = processor.build_reversal(charge)

        summary = OutputBuilder().build_summary(processor.summarize([charge, refund]))

        assert summary == {
            "currency": "EUR",
            "transaction_count": 1,
            "total_gross": 0,
            "total_platform_fees": 0,
            "total_organization_fees": 0,
            "total_payee_net": 0,
        }
