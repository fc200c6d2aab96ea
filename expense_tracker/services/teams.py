import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import ConflictError, NotFoundError
from expense_tracker.db import tables
from expense_tracker.models.team import Team, TeamCreate, TeamMember, TeamUpdate
from expense_tracker.models.user import OperationResult
from expense_tracker.services._helpers import require, write_transaction

logger = logging.getLogger(__name__)


def _membership(db: Session, team_id: int, user_id: int) -> Optional[tables.TeamMember]:
    return db.scalars(
        select(tables.TeamMember).where(
            tables.TeamMember.team_id == team_id,
            tables.TeamMember.user_id == user_id,
        )
    ).first()


def create_team(db: Session, team: TeamCreate) -> Team:
    require(db, tables.User, team.manager_id, "Manager")
    row = tables.Team(name=team.name, description=team.description, manager_id=team.manager_id)
    with write_transaction(db, "Team creation"):
        db.add(row)
    return Team.model_validate(row)


def get_teams(db: Session) -> List[Team]:
    rows = db.scalars(select(tables.Team).order_by(tables.Team.id)).all()
    return [Team.model_validate(row) for row in rows]


def get_team_by_id(db: Session, team_id: int) -> Optional[Team]:
    row = db.get(tables.Team, team_id)
    return Team.model_validate(row) if row else None


def update_team(db: Session, team_id: int, team_update: TeamUpdate) -> Team:
    changes = team_update.model_dump(exclude_unset=True)
    if changes.get("manager_id") is not None:
        require(db, tables.User, changes["manager_id"], "Manager")

    row = require(db, tables.Team, team_id, "Team")
    with write_transaction(db, "Team update"):
        for field, value in changes.items():
            if field == "manager_id" and value is None:
                continue
            setattr(row, field, value)
    return Team.model_validate(row)


def delete_team(db: Session, team_id: int) -> OperationResult:
    """Delete a team; memberships go with it, expenses are kept without a team."""
    row = require(db, tables.Team, team_id, "Team")
    with write_transaction(db, "Team deletion"):
        db.execute(update(tables.Expense).where(tables.Expense.team_id == team_id).values(team_id=None))
        db.delete(row)
    logger.info(f"Deleted team {team_id}")
    return OperationResult(success=True)


def add_team_member(db: Session, team_id: int, user_id: int) -> TeamMember:
    require(db, tables.Team, team_id, "Team")
    require(db, tables.User, user_id, "User")
    if _membership(db, team_id, user_id) is not None:
        raise ConflictError("User is already a team member")

    row = tables.TeamMember(team_id=team_id, user_id=user_id)
    with write_transaction(db, "Adding team member"):
        db.add(row)
    return TeamMember.model_validate(row)


def remove_team_member(db: Session, team_id: int, user_id: int) -> OperationResult:
    membership = _membership(db, team_id, user_id)
    if membership is None:
        raise NotFoundError("Team membership not found")
    with write_transaction(db, "Removing team member"):
        db.delete(membership)
    return OperationResult(success=True)


def get_team_members(db: Session, team_id: int) -> List[TeamMember]:
    require(db, tables.Team, team_id, "Team")
    rows = db.scalars(
        select(tables.TeamMember).where(tables.TeamMember.team_id == team_id).order_by(tables.TeamMember.id)
    ).all()
    return [TeamMember.model_validate(row) for row in rows]
