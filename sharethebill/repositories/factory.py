from sharethebill.repositories.base import BillRepository, ProfileRepository


def get_bill_repository() -> BillRepository:
    from sharethebill.db import get_connection
    from sharethebill.repositories.kv import KVBillRepository
    from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore

    return KVBillRepository(SQLAlchemyKeyValueStore(get_connection()))


def get_profile_repository() -> ProfileRepository:
    from sharethebill.db import get_connection
    from sharethebill.repositories.kv import KVProfileRepository
    from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore

    return KVProfileRepository(SQLAlchemyKeyValueStore(get_connection()))
