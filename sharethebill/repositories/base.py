from abc import ABC, abstractmethod

from sharethebill.models.bill import Bill
from sharethebill.models.profile import UserProfile


class BillRepository(ABC):
    @abstractmethod
    def create(self, bill: Bill) -> Bill: ...

    @abstractmethod
    def get_by_id(self, bill_id: str) -> Bill | None: ...

    @abstractmethod
    def save(self, bill: Bill) -> bool:
        """Persist a mutated bill if nobody else wrote it since it was read."""
        ...

    @abstractmethod
    def delete(self, bill: Bill) -> None: ...

    @abstractmethod
    def list_for_user(self, fid: int) -> list[Bill]: ...


class ProfileRepository(ABC):
    @abstractmethod
    def get_by_fid(self, fid: int) -> UserProfile | None: ...

    @abstractmethod
    def save(self, profile: UserProfile) -> UserProfile: ...
