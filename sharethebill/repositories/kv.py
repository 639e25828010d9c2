from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError
from ulid import ULID

from sharethebill.constants import (
    BILL_KEY_PREFIX,
    BILL_PARTICIPANTS_KEY_PREFIX,
    USER_BILLS_KEY_PREFIX,
    USER_PROFILE_KEY_PREFIX,
    UTC,
)
from sharethebill.errors import PartiallyAppliedError, StorageError
from sharethebill.models.bill import Bill
from sharethebill.models.profile import UserProfile
from sharethebill.repositories.base import BillRepository, ProfileRepository
from sharethebill.store.base import KeyValueStore

logger = logging.getLogger(__name__)


def bill_key(bill_id: str) -> str:
    return f"{BILL_KEY_PREFIX}{bill_id}"


def user_bills_key(fid: int) -> str:
    return f"{USER_BILLS_KEY_PREFIX}{fid}"


def bill_participants_key(bill_id: str) -> str:
    return f"{BILL_PARTICIPANTS_KEY_PREFIX}{bill_id}"


def profile_key(fid: int) -> str:
    return f"{USER_PROFILE_KEY_PREFIX}{fid}"


def _now() -> datetime:
    return datetime.now(UTC)


class KVBillRepository(BillRepository):
    """Bills as JSON documents plus two set indexes.

    ``user_bills:<fid>`` lists bill ids per creator/participant and
    ``bill_participants:<id>`` mirrors the participant fids of a bill. Both are
    written in the same call as the document and undone if a later step fails.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _load(self, bill_id: str) -> Bill | None:
        found = self.store.get_versioned(bill_key(bill_id))
        if found is None:
            return None
        try:
            bill = Bill.model_validate_json(found.value)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt bill document {bill_id}") from exc
        bill.version = found.version
        return bill

    def create(self, bill: Bill) -> Bill:
        if not bill.id:
            bill.id = str(ULID())
        now = _now()
        bill.created_at = bill.created_at or now
        bill.updated_at = now

        undo: list[Callable[[], None]] = []
        try:
            if not self.store.compare_and_set(bill_key(bill.id), bill.model_dump_json(), 0):
                raise StorageError(f"Bill {bill.id} already exists")
            undo.append(lambda: self.store.delete(bill_key(bill.id)))

            for fid in bill.member_fids:
                self.store.add_to_set(user_bills_key(fid), bill.id)
                undo.append(lambda fid=fid: self.store.remove_from_set(user_bills_key(fid), bill.id))

            undo.append(lambda: self.store.delete(bill_participants_key(bill.id)))
            for participant in bill.participants:
                self.store.add_to_set(bill_participants_key(bill.id), str(participant.fid))
        except StorageError as exc:
            logger.error("Bill create failed midway: id=%s, undoing %d step(s)", bill.id, len(undo))
            self._undo(undo, bill.id, exc)
            raise

        bill.version = 1
        logger.debug("Bill document and indexes written: id=%s", bill.id)
        return bill

    @staticmethod
    def _undo(steps: list[Callable[[], None]], bill_id: str, cause: StorageError) -> None:
        for step in reversed(steps):
            try:
                step()
            except StorageError as undo_exc:
                logger.error("Cleanup failed for bill %s: %s", bill_id, undo_exc)
                raise PartiallyAppliedError(f"Bill {bill_id} was partially written: {cause}") from cause

    def get_by_id(self, bill_id: str) -> Bill | None:
        return self._load(bill_id)

    def save(self, bill: Bill) -> bool:
        bill.updated_at = _now()
        if not self.store.compare_and_set(bill_key(bill.id), bill.model_dump_json(), bill.version):
            return False
        bill.version += 1
        return True

    def delete(self, bill: Bill) -> None:
        self.store.delete(bill_key(bill.id))
        try:
            for fid in bill.member_fids:
                self.store.remove_from_set(user_bills_key(fid), bill.id)
            self.store.delete(bill_participants_key(bill.id))
        except StorageError as exc:
            raise PartiallyAppliedError(f"Bill {bill.id} deleted but its indexes were not: {exc}") from exc

    def list_for_user(self, fid: int) -> list[Bill]:
        bills: list[Bill] = []
        for bill_id in sorted(self.store.members_of(user_bills_key(fid))):
            bill = self._load(bill_id)
            if bill is None:
                logger.warning("Dangling index entry: user=%s bill=%s", fid, bill_id)
                continue
            bills.append(bill)
        return bills


class KVProfileRepository(ProfileRepository):
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_by_fid(self, fid: int) -> UserProfile | None:
        raw = self.store.get(profile_key(fid))
        if raw is None:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt profile document for fid {fid}") from exc

    def save(self, profile: UserProfile) -> UserProfile:
        now = _now()
        profile.created_at = profile.created_at or now
        profile.updated_at = now
        self.store.set(profile_key(profile.fid), profile.model_dump_json())
        return profile
