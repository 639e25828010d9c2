from sharethebill.models.bill import BillStatus, BillSummary
from web.serializers import serialize_bill, serialize_summary


class TestSerializeBill:
    def test_amounts_are_decimal_strings(self, sample_bill):
        data = serialize_bill(sample_bill())

        assert data["total_amount"] == "100.00"
        assert [p["amount_owed"] for p in data["participants"]] == ["33.34", "33.33", "33.33"]
        assert data["status"] == "pending"
        assert data["created_at"] == "2026-03-01T12:00:00+00:00"
        assert data["due_date"] is None
        assert "version" not in data


class TestSerializeSummary:
    def test_fields(self):
        data = serialize_summary(
            BillSummary(
                id="b1",
                title="Lunch",
                total_amount=2500,
                your_share=1250,
                status=BillStatus.COLLECTING,
                participant_count=2,
                is_creator=True,
            )
        )
        assert data["your_share"] == "12.50"
        assert data["status"] == "collecting"
        assert data["created_at"] is None
