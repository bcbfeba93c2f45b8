"""Team service rules, driven directly on an AsyncSession."""

import uuid

import pytest

from app.core.errors import Conflict, InvalidOperation, NotFound
from app.modules.teams.models import TeamRole
from app.modules.teams.repository import TeamMemberRepository
from app.modules.teams.schemas import TeamCreate, TeamFilter, TeamUpdate
from app.modules.teams.service import TeamService


async def test_create_seeds_creator_as_admin(session, make_user):
    alice = await make_user("alice")
    team = await TeamService(session).create(TeamCreate(name="Eng", description="Engineering"), alice.id)

    assert team.name == "Eng"
    assert len(team.members) == 1
    assert team.members[0].user_id == alice.id
    assert team.members[0].role == TeamRole.ADMIN
    assert team.members[0].user.username == "alice"


async def test_create_adds_known_member_ids_once(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")

    payload = TeamCreate(name="Eng", member_ids=[bob.id, bob.id, alice.id, uuid.uuid4(), carol.id])
    team = await TeamService(session).create(payload, alice.id)

    roles = {m.user_id: m.role for m in team.members}
    assert roles == {alice.id: TeamRole.ADMIN, bob.id: TeamRole.MEMBER, carol.id: TeamRole.MEMBER}


async def test_create_duplicate_name_conflicts(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    original = await service.create(TeamCreate(name="Eng", description="first"), alice.id)
    # the failed insert rolls the session back, expiring loaded objects
    original_id, alice_id, bob_id = original.id, alice.id, bob.id

    with pytest.raises(Conflict):
        await service.create(TeamCreate(name="Eng", description="second"), bob_id)

    existing = await service.find_one(original_id)
    assert existing.description == "first"
    assert [m.user_id for m in existing.members] == [alice_id]


async def test_names_are_case_sensitive(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    await service.create(TeamCreate(name="Eng"), alice.id)

    other = await service.create(TeamCreate(name="eng"), alice.id)
    assert other.name == "eng"


async def test_find_all_only_returns_member_teams(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    await service.create(TeamCreate(name="Eng"), alice.id)
    await service.create(TeamCreate(name="Ops"), bob.id)
    shared = await service.create(TeamCreate(name="Shared", member_ids=[bob.id]), alice.id)

    page = await service.find_all(TeamFilter(), bob.id)
    names = sorted(t.name for t in page.data)
    assert names == ["Ops", "Shared"]
    assert page.meta.total == 2
    assert shared.id in {t.id for t in page.data}


async def test_find_all_search_and_pagination(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    for i in range(5):
        await service.create(TeamCreate(name=f"squad-{i}", description="backend" if i % 2 else "frontend"), alice.id)

    page = await service.find_all(TeamFilter(page=1, limit=2), alice.id)
    assert len(page.data) == 2
    assert page.meta.total == 5
    assert page.meta.page == 1
    assert page.meta.limit == 2
    assert page.meta.total_pages == 3

    found = await service.find_all(TeamFilter(search="backend"), alice.id)
    assert sorted(t.name for t in found.data) == ["squad-1", "squad-3"]

    by_name = await service.find_all(TeamFilter(search="squad-4"), alice.id)
    assert [t.name for t in by_name.data] == ["squad-4"]


async def test_find_one_missing(session):
    with pytest.raises(NotFound):
        await TeamService(session).find_one(uuid.uuid4())


async def test_update_rename_conflict_and_self_rename(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)
    await service.create(TeamCreate(name="Ops"), alice.id)
    eng_id = eng.id

    with pytest.raises(Conflict):
        await service.update(eng_id, TeamUpdate(name="Ops"))

    same = await service.update(eng_id, TeamUpdate(name="Eng", icon="gear"))
    assert same.name == "Eng"
    assert same.icon == "gear"


async def test_update_missing_team(session):
    with pytest.raises(NotFound):
        await TeamService(session).update(uuid.uuid4(), TeamUpdate(name="x"))


async def test_delete_team(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)
    eng_id = eng.id

    result = await service.delete(eng_id)
    assert result == {"message": "Team deleted successfully"}
    assert not await service.is_team_member(eng_id, alice.id)
    with pytest.raises(NotFound):
        await service.find_one(eng_id)
    with pytest.raises(NotFound):
        await service.delete(eng_id)


async def test_add_member(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)

    member = await service.add_member(eng.id, bob.id)
    assert member.role == TeamRole.MEMBER
    assert member.user.email == "bob@example.com"

    with pytest.raises(Conflict):
        await service.add_member(eng.id, bob.id)
    with pytest.raises(NotFound):
        await service.add_member(eng.id, uuid.uuid4())
    with pytest.raises(NotFound):
        await service.add_member(uuid.uuid4(), bob.id)


async def test_remove_last_admin_is_refused(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)

    with pytest.raises(InvalidOperation):
        await service.remove_member(eng.id, alice.id, alice.id)

    assert await service.is_team_admin(eng.id, alice.id)
    assert await TeamMemberRepository(session).count_admins(eng.id) == 1


async def test_remove_member(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)

    assert await service.remove_member(eng.id, bob.id, alice.id) == {"message": "Member removed successfully"}
    assert not await service.is_team_member(eng.id, bob.id)
    with pytest.raises(NotFound):
        await service.remove_member(eng.id, bob.id, alice.id)


async def test_remove_admin_when_another_admin_exists(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)
    await service.add_member(eng.id, bob.id, TeamRole.ADMIN)

    await service.remove_member(eng.id, alice.id, bob.id)
    assert await TeamMemberRepository(session).count_admins(eng.id) == 1
    assert await service.is_team_admin(eng.id, bob.id)


async def test_demote_last_admin_is_refused(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)

    with pytest.raises(InvalidOperation):
        await service.update_member_role(eng.id, alice.id, TeamRole.MEMBER)
    assert await service.is_team_admin(eng.id, alice.id)


async def test_update_member_role(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)

    promoted = await service.update_member_role(eng.id, bob.id, TeamRole.ADMIN)
    assert promoted.role == TeamRole.ADMIN
    assert promoted.user.username == "bob"

    demoted = await service.update_member_role(eng.id, alice.id, TeamRole.MEMBER)
    assert demoted.role == TeamRole.MEMBER
    assert await TeamMemberRepository(session).count_admins(eng.id) == 1

    with pytest.raises(NotFound):
        await service.update_member_role(eng.id, uuid.uuid4(), TeamRole.ADMIN)
    with pytest.raises(NotFound):
        await service.update_member_role(uuid.uuid4(), bob.id, TeamRole.ADMIN)


async def test_leave_scenario(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)
    await service.add_member(eng.id, bob.id)
    assert len((await service.find_one(eng.id)).members) == 2

    with pytest.raises(InvalidOperation):
        await service.leave(eng.id, alice.id)
    assert await service.is_team_admin(eng.id, alice.id)

    await service.update_member_role(eng.id, bob.id, TeamRole.ADMIN)
    assert await service.leave(eng.id, alice.id) == {"message": "Successfully left the team"}

    team = await service.find_one(eng.id)
    assert [(m.user_id, m.role) for m in team.members] == [(bob.id, TeamRole.ADMIN)]


async def test_leave_not_a_member(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng"), alice.id)

    with pytest.raises(NotFound):
        await service.leave(eng.id, bob.id)
    with pytest.raises(NotFound):
        await service.leave(uuid.uuid4(), alice.id)


async def test_membership_lookups(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)

    assert await service.is_team_admin(eng.id, alice.id)
    assert await service.is_team_member(eng.id, bob.id)
    assert not await service.is_team_admin(eng.id, bob.id)
    assert not await service.is_team_member(eng.id, carol.id)


async def test_update_explicit_null_clears_optional_fields(session, make_user):
    alice = await make_user("alice")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", icon="gear", description="Engineering"), alice.id)

    updated = await service.update(eng.id, TeamUpdate(description=None))
    assert updated.description is None
    assert updated.icon == "gear"

    # a null name is ignored rather than written
    renamed = await service.update(eng.id, TeamUpdate(name=None, icon=None))
    assert renamed.name == "Eng"
    assert renamed.icon is None


async def test_last_admin_row_survives_direct_delete(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    eng = await TeamService(session).create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)
    members = TeamMemberRepository(session)

    assert await members.delete_keeping_admin(eng.id, alice.id) == 0
    assert await members.delete_keeping_admin(eng.id, bob.id) == 1
    assert await members.count_admins(eng.id) == 1
