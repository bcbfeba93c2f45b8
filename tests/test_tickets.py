import uuid

import pytest

from app.core.errors import Forbidden, NotFound
from app.modules.teams.schemas import TeamCreate
from app.modules.teams.service import TeamService
from app.modules.tickets.models import TicketStatus
from app.modules.tickets.schemas import TicketCreate, TicketUpdate
from app.modules.tickets.service import TicketService


@pytest.fixture
async def teams(session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    mallory = await make_user("mallory")
    service = TeamService(session)
    eng = await service.create(TeamCreate(name="Eng", member_ids=[bob.id]), alice.id)
    ops = await service.create(TeamCreate(name="Ops"), mallory.id)
    return {"alice": alice, "bob": bob, "mallory": mallory, "eng": eng, "ops": ops}


async def test_member_creates_ticket_with_default_status(session, teams):
    ticket = await TicketService(session).create_ticket(
        teams["bob"].id, TicketCreate(title="Bug", description="It broke", team_id=teams["eng"].id)
    )
    assert ticket.status == TicketStatus.OPEN
    assert ticket.author_id == teams["bob"].id
    assert ticket.team_id == teams["eng"].id


async def test_explicit_status_is_kept(session, teams):
    ticket = await TicketService(session).create_ticket(
        teams["alice"].id, TicketCreate(title="Chore", status=TicketStatus.IN_PROGRESS, team_id=teams["eng"].id)
    )
    assert ticket.status == TicketStatus.IN_PROGRESS


async def test_non_member_cannot_create_ticket(session, teams):
    with pytest.raises(Forbidden):
        await TicketService(session).create_ticket(
            teams["mallory"].id, TicketCreate(title="Bug", team_id=teams["eng"].id)
        )


async def test_get_tickets_is_scoped_to_member_teams(session, teams):
    service = TicketService(session)
    mine = await service.create_ticket(teams["alice"].id, TicketCreate(title="Eng bug", team_id=teams["eng"].id))
    await service.create_ticket(teams["mallory"].id, TicketCreate(title="Ops bug", team_id=teams["ops"].id))

    bob_tickets = await service.get_tickets(teams["bob"].id)
    assert [t.id for t in bob_tickets] == [mine.id]

    scoped = await service.get_tickets(teams["bob"].id, teams["eng"].id)
    assert [t.title for t in scoped] == ["Eng bug"]

    with pytest.raises(Forbidden):
        await service.get_tickets(teams["bob"].id, teams["ops"].id)


async def test_user_without_teams_sees_nothing(session, teams, make_user):
    loner = await make_user("loner")
    await TicketService(session).create_ticket(teams["alice"].id, TicketCreate(title="Eng bug", team_id=teams["eng"].id))
    assert list(await TicketService(session).get_tickets(loner.id)) == []


async def test_update_and_get_ticket(session, teams):
    service = TicketService(session)
    ticket = await service.create_ticket(teams["alice"].id, TicketCreate(title="Bug", team_id=teams["eng"].id))

    updated = await service.update_ticket(teams["bob"].id, ticket.id, TicketUpdate(status=TicketStatus.RESOLVED))
    assert updated.status == TicketStatus.RESOLVED
    assert updated.title == "Bug"

    fetched = await service.get_ticket(teams["bob"].id, ticket.id)
    assert fetched.status == TicketStatus.RESOLVED

    with pytest.raises(Forbidden):
        await service.get_ticket(teams["mallory"].id, ticket.id)
    with pytest.raises(Forbidden):
        await service.update_ticket(teams["mallory"].id, ticket.id, TicketUpdate(title="pwned"))
    with pytest.raises(NotFound):
        await service.get_ticket(teams["bob"].id, uuid.uuid4())


async def test_only_team_admin_deletes_ticket(session, teams):
    service = TicketService(session)
    ticket = await service.create_ticket(teams["bob"].id, TicketCreate(title="Bug", team_id=teams["eng"].id))
    ticket_id = ticket.id

    with pytest.raises(Forbidden):
        await service.delete_ticket(teams["bob"].id, ticket_id)

    assert await service.delete_ticket(teams["alice"].id, ticket_id) == {"message": "Ticket deleted successfully"}
    with pytest.raises(NotFound):
        await service.get_ticket(teams["alice"].id, ticket_id)


async def test_update_explicit_null_clears_description(session, teams):
    service = TicketService(session)
    ticket = await service.create_ticket(
        teams["alice"].id, TicketCreate(title="Bug", description="It broke", team_id=teams["eng"].id)
    )

    updated = await service.update_ticket(teams["alice"].id, ticket.id, TicketUpdate(description=None, title=None))
    assert updated.description is None
    assert updated.title == "Bug"
    assert updated.status == TicketStatus.OPEN
