import uuid

import pytest

from conducky.core.errors import RoleNotFound
from conducky.db.models.role import Role
from conducky.domain.enums import ScopeType
from conducky.services.role_catalog import (
    ROLE_LEVELS,
    RoleCatalog,
    get_role_by_id,
    get_role_by_name,
    list_roles,
    role_catalog,
    seed_roles,
)


class TestLookup:
    def test_by_name(self, db):
        role = get_role_by_name(db, "responder")
        assert role.scope == ScopeType.event
        assert role.level == 20

    def test_by_id_matches_by_name(self, db):
        role = get_role_by_name(db, "org_admin")
        assert get_role_by_id(db, role.id) == role

    def test_unknown_name(self, db):
        with pytest.raises(RoleNotFound):
            get_role_by_name(db, "janitor")

    def test_unknown_id(self, db):
        with pytest.raises(RoleNotFound):
            get_role_by_id(db, uuid.uuid4())

    def test_list_most_senior_first(self, db):
        names = [r.name for r in list_roles(db)]
        assert names == [
            "system_admin",
            "org_admin",
            "event_admin",
            "responder",
            "org_viewer",
            "reporter",
        ]

    def test_levels_table(self):
        assert ROLE_LEVELS["system_admin"] > ROLE_LEVELS["org_admin"] > ROLE_LEVELS["event_admin"]


class TestCache:
    def test_snapshot_served_without_query(self, db):
        get_role_by_name(db, "reporter")
        db.query(Role).filter(Role.name == "reporter").update({"level": 99})
        db.commit()
        assert get_role_by_name(db, "reporter").level == 5

    def test_invalidate_rebuilds(self, db):
        get_role_by_name(db, "reporter")
        db.query(Role).filter(Role.name == "reporter").update({"level": 7})
        db.commit()
        role_catalog.invalidate()
        assert get_role_by_name(db, "reporter").level == 7

    def test_empty_catalog_not_cached(self, db):
        catalog = RoleCatalog()
        db.query(Role).delete()
        db.commit()
        with pytest.raises(RoleNotFound):
            catalog.get_role_by_name(db, "reporter")

        seed_roles(db)
        assert catalog.get_role_by_name(db, "reporter").level == 5


class TestSeed:
    def test_seed_is_idempotent(self, db):
        assert seed_roles(db) == 0
        assert db.query(Role).count() == len(ROLE_LEVELS)

    def test_seed_restores_levels(self, db):
        db.query(Role).filter(Role.name == "responder").update({"level": 1})
        db.commit()
        seed_roles(db)
        assert get_role_by_name(db, "responder").level == 20
