import pytest

from expense_tracker.core.exceptions import ConflictError, NotFoundError
from expense_tracker.db import tables
from expense_tracker.models.team import TeamCreate, TeamUpdate
from expense_tracker.services import teams as team_service


def test_team_membership(db, make_user):
    manager = make_user()
    member = make_user()
    team = team_service.create_team(db, TeamCreate(name="Ops", manager_id=manager.id))

    added = team_service.add_team_member(db, team.id, member.id)
    assert added.user_id == member.id
    assert [m.user_id for m in team_service.get_team_members(db, team.id)] == [member.id]

    with pytest.raises(ConflictError):
        team_service.add_team_member(db, team.id, member.id)

    assert team_service.remove_team_member(db, team.id, member.id).success is True
    with pytest.raises(NotFoundError, match="Team membership not found"):
        team_service.remove_team_member(db, team.id, member.id)


def test_create_team_requires_manager(db):
    with pytest.raises(NotFoundError, match="Manager with id 3 not found"):
        team_service.create_team(db, TeamCreate(name="Ghost", manager_id=3))


def test_update_team(db, make_user):
    manager = make_user()
    successor = make_user()
    team = team_service.create_team(db, TeamCreate(name="Ops", manager_id=manager.id))

    updated = team_service.update_team(db, team.id, TeamUpdate(name="Operations", manager_id=successor.id))
    assert updated.name == "Operations"
    assert updated.manager_id == successor.id


def test_delete_team_keeps_expenses(db, make_user, make_expense):
    manager = make_user()
    team = team_service.create_team(db, TeamCreate(name="Ops", manager_id=manager.id))
    expense = make_expense(manager.id, 20, team_id=team.id)

    assert team_service.delete_team(db, team.id).success is True
    assert team_service.get_team_by_id(db, team.id) is None
    db.refresh(expense)
    assert expense.team_id is None
    assert db.get(tables.Expense, expense.id) is not None
