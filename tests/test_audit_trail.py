"""Audit trail tests."""

import pytest

from academy_core.models import RegistrationHistoryEntry, RegistrationStatus
from academy_core.services.audit_trail import AuditTrail, replay_status
from tests.conftest import ADMIN_ID


def entry(old, new, entry_id=1):
    return RegistrationHistoryEntry(id=entry_id, enrollment_id=1, old_status=old, new_status=new, changed_by=ADMIN_ID)


def test_replay_of_empty_history_is_pending():
    assert replay_status([]) == RegistrationStatus.PENDING


def test_replay_follows_the_chain():
    history = [
        entry(RegistrationStatus.PENDING, RegistrationStatus.VALIDATED, 1),
        entry(RegistrationStatus.VALIDATED, RegistrationStatus.PAID, 2),
    ]
    assert replay_status(history) == RegistrationStatus.PAID


def test_replay_detects_a_gap():
    history = [
        entry(RegistrationStatus.PENDING, RegistrationStatus.VALIDATED, 1),
        entry(RegistrationStatus.PAID, RegistrationStatus.FINISHED, 2),
    ]
    with pytest.raises(ValueError):
        replay_status(history)


async def test_record_is_discarded_with_the_transaction(db, seed):
    enrollment_id = (await seed.enrollment(await seed.student(), await seed.course())).id
    trail = AuditTrail(db)

    await trail.record(enrollment_id, RegistrationStatus.PENDING, RegistrationStatus.VALIDATED, ADMIN_ID)
    await db.rollback()
    assert await trail.entries(enrollment_id) == []

    await trail.record(enrollment_id, RegistrationStatus.PENDING, RegistrationStatus.VALIDATED, ADMIN_ID)
    await db.commit()
    entries = await trail.entries(enrollment_id)
    assert len(entries) == 1
    assert entries[0].changed_by == ADMIN_ID
