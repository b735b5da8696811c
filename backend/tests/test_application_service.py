"""
JobTrail Backend — Application Service Tests
==============================================

What we test:
    ✅ Create / list (active only, newest first)
    ✅ Update overwrites fields and advances updated_at
    ✅ Delete tombstones instead of removing the row
    ✅ Restore revives a tombstone or inserts an unknown record
    ✅ Absent, deleted and foreign records are all "not found"
"""

import pytest

from conftest import application_payload
from jobtrail.exceptions import NotFoundError, ValidationError
from jobtrail.models.application import Application
from jobtrail.schemas.application import ApplicationCreate, ApplicationUpdate
from jobtrail.services.application_service import ApplicationService
from jobtrail.services.sync_service import SyncService
from jobtrail.timestamps import format_timestamp, parse_timestamp


def create_body(app_id: str = "A1", **overrides) -> ApplicationCreate:
    return ApplicationCreate.model_validate(application_payload(app_id, **overrides))


def update_body(**overrides) -> ApplicationUpdate:
    payload = {"company": "Acme", "position": "Staff Engineer", "status": "interview"}
    payload.update(overrides)
    return ApplicationUpdate.model_validate(payload)


async def reload(db, owner_id, app_id="A1") -> Application:
    row = await db.get(Application, (owner_id, app_id))
    await db.refresh(row)
    return row


class TestCreateAndList:

    def setup_method(self):
        self.service = ApplicationService()

    @pytest.mark.asyncio
    async def test_created_record_is_listed(self, db, owner):
        created = await self.service.create(db, owner, create_body("A1"))

        listed = await self.service.list_active(db, owner)

        assert created == "A1"
        assert [r.id for r in listed] == ["A1"]

    @pytest.mark.asyncio
    async def test_list_is_newest_created_first_and_skips_tombstones(self, db, owner):
        await self.service.create(db, owner, create_body("OLD", createdAt="2024-01-01T00:00:00.000Z"))
        await self.service.create(db, owner, create_body("NEW", createdAt="2024-03-01T00:00:00.000Z"))
        await self.service.create(db, owner, create_body("GONE", createdAt="2024-02-01T00:00:00.000Z"))
        await self.service.delete(db, owner, "GONE")

        assert [r.id for r in await self.service.list_active(db, owner)] == ["NEW", "OLD"]

    @pytest.mark.asyncio
    async def test_duplicate_id_is_rejected(self, db, owner):
        await self.service.create(db, owner, create_body("A1"))

        with pytest.raises(ValidationError):
            await self.service.create(db, owner, create_body("A1"))

    @pytest.mark.asyncio
    async def test_same_id_for_other_owner_is_allowed(self, db, owner, other_owner):
        await self.service.create(db, owner, create_body("A1"))

        assert await self.service.create(db, other_owner, create_body("A1")) == "A1"


class TestUpdate:

    def setup_method(self):
        self.service = ApplicationService()

    @pytest.mark.asyncio
    async def test_update_overwrites_fields(self, db, owner):
        await self.service.create(db, owner, create_body("A1", notes="old"))

        record = await self.service.update(db, owner, "A1", update_body(notes=None, url=""))

        assert record.status == "interview"
        assert record.position == "Staff Engineer"
        assert record.notes is None
        assert record.url is None

    @pytest.mark.asyncio
    async def test_client_timestamp_is_used_when_later(self, db, owner):
        await self.service.create(db, owner, create_body("A1", updatedAt="2024-01-01T00:00:00.000Z"))

        record = await self.service.update(
            db, owner, "A1", update_body(updatedAt="2024-05-05T05:05:05.005Z")
        )

        assert format_timestamp(record.updated_at) == "2024-05-05T05:05:05.005Z"

    @pytest.mark.asyncio
    async def test_stale_client_timestamp_still_advances(self, db, owner):
        """The result must win against the previous value in a later sync."""
        await self.service.create(db, owner, create_body("A1", updatedAt="2099-01-01T00:00:00.000Z"))

        record = await self.service.update(
            db, owner, "A1", update_body(updatedAt="2024-01-01T00:00:00.000Z")
        )

        assert format_timestamp(record.updated_at) == "2099-01-01T00:00:00.001Z"

    @pytest.mark.asyncio
    async def test_update_of_deleted_or_foreign_record_is_not_found(self, db, owner, other_owner):
        await self.service.create(db, owner, create_body("A1"))
        await self.service.delete(db, owner, "A1")
        await self.service.create(db, other_owner, create_body("B1"))

        with pytest.raises(NotFoundError):
            await self.service.update(db, owner, "A1", update_body())
        with pytest.raises(NotFoundError):
            await self.service.update(db, owner, "B1", update_body())
        with pytest.raises(NotFoundError):
            await self.service.update(db, owner, "missing", update_body())


class TestDeleteAndRestore:

    def setup_method(self):
        self.service = ApplicationService()

    @pytest.mark.asyncio
    async def test_delete_keeps_row_as_tombstone(self, db, owner):
        await self.service.create(db, owner, create_body("A1", updatedAt="2024-01-01T00:00:00.000Z"))

        await self.service.delete(db, owner, "A1")

        row = await reload(db, owner)
        assert row.deleted_at is not None
        assert row.company == "Acme"
        assert format_timestamp(row.updated_at) > "2024-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_delete_is_visible_to_sync(self, db, owner):
        await self.service.create(db, owner, create_body("A1", updatedAt="2024-01-01T00:00:00.000Z"))
        await self.service.delete(db, owner, "A1")

        pulled = await SyncService().pull(db, owner, parse_timestamp("2024-01-01T00:00:00.000Z"))

        assert [r.id for r in pulled.applications] == ["A1"]
        assert pulled.applications[0].deleted_at is not None

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, db, owner):
        await self.service.create(db, owner, create_body("A1"))
        await self.service.delete(db, owner, "A1")

        with pytest.raises(NotFoundError):
            await self.service.delete(db, owner, "A1")

    @pytest.mark.asyncio
    async def test_restore_clears_tombstone_and_advances(self, db, owner):
        await self.service.create(db, owner, create_body("A1"))
        await self.service.delete(db, owner, "A1")
        deleted_at = format_timestamp((await reload(db, owner)).updated_at)

        record = await self.service.restore(db, owner, create_body("A1"))

        assert record.deleted_at is None
        assert format_timestamp(record.updated_at) > deleted_at
        assert [r.id for r in await self.service.list_active(db, owner)] == ["A1"]

    @pytest.mark.asyncio
    async def test_restore_inserts_unknown_record(self, db, owner):
        record = await self.service.restore(db, owner, create_body("NEW", company="Initech"))

        assert record.company == "Initech"
        assert [r.id for r in await self.service.list_active(db, owner)] == ["NEW"]
