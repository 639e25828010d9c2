from sharethebill.models.bill import Bill, BillStatus, Participant, ParticipantStatus
from tests.conftest import paid


class TestParticipant:
    def test_label_prefers_display_name(self):
        assert Participant(fid=2, username="bob", display_name="Bob").label == "Bob"
        assert Participant(fid=2, username="bob").label == "bob"
        assert Participant(fid=2).label == "User 2"


class TestBill:
    def test_get_participant(self, sample_bill):
        bill = sample_bill()
        assert bill.get_participant(2).username == "bob"
        assert bill.get_participant(99) is None

    def test_member_fids_creator_first(self, sample_bill):
        bill = sample_bill(creator_fid=3)
        assert bill.member_fids == [3, 1, 2]

    def test_member_fids_creator_not_participant(self, sample_bill):
        assert sample_bill(creator_fid=9).member_fids == [9, 1, 2, 3]

    def test_version_excluded_from_document(self, sample_bill):
        bill = sample_bill(version=4)
        assert "version" not in bill.model_dump()
        assert Bill.model_validate_json(bill.model_dump_json()).version == 0


class TestRecomputeStatus:
    def test_no_payments_is_pending(self, sample_bill):
        assert sample_bill().recompute_status() == BillStatus.PENDING

    def test_some_paid_is_collecting(self, sample_bill):
        bill = sample_bill()
        paid(bill.get_participant(1))
        assert bill.recompute_status() == BillStatus.COLLECTING
        assert bill.has_payments

    def test_all_paid_is_completed(self, sample_bill):
        bill = sample_bill()
        for p in bill.participants:
            paid(p)
        assert bill.all_paid
        assert bill.recompute_status() == BillStatus.COMPLETED

    def test_failed_only_stays_pending(self, sample_bill):
        bill = sample_bill()
        bill.get_participant(2).status = ParticipantStatus.FAILED
        assert bill.recompute_status() == BillStatus.PENDING

    def test_cancelled_is_sticky(self, sample_bill):
        bill = sample_bill(status=BillStatus.CANCELLED)
        for p in bill.participants:
            paid(p)
        assert bill.recompute_status() == BillStatus.CANCELLED

    def test_empty_bill_is_not_completed(self, sample_bill):
        bill = sample_bill(participants=[])
        assert not bill.all_paid
        assert bill.recompute_status() == BillStatus.PENDING
