from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.team import Team, TeamCreate, TeamMember, TeamUpdate
from expense_tracker.models.user import OperationResult
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import teams as team_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.post("/", response_model=Team, status_code=status.HTTP_201_CREATED)
def create_team(team: TeamCreate, db: Session = Depends(get_db)):
    return team_service.create_team(db, team)


@router.get("/", response_model=List[Team])
def list_teams(db: Session = Depends(get_db)):
    return team_service.get_teams(db)


@router.get("/{team_id}", response_model=Team)
def get_team(team_id: int, db: Session = Depends(get_db)):
    team = team_service.get_team_by_id(db, team_id)
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


@router.put("/{team_id}", response_model=Team)
def update_team(team_id: int, team_update: TeamUpdate, db: Session = Depends(get_db)):
    return team_service.update_team(db, team_id, team_update)


@router.delete("/{team_id}", response_model=OperationResult)
def delete_team(team_id: int, db: Session = Depends(get_db)):
    return team_service.delete_team(db, team_id)


@router.get("/{team_id}/members", response_model=List[TeamMember])
def list_members(team_id: int, db: Session = Depends(get_db)):
    return team_service.get_team_members(db, team_id)


@router.post("/{team_id}/members/{user_id}", response_model=TeamMember, status_code=status.HTTP_201_CREATED)
def add_member(team_id: int, user_id: int, db: Session = Depends(get_db)):
    return team_service.add_team_member(db, team_id, user_id)


@router.delete("/{team_id}/members/{user_id}", response_model=OperationResult)
def remove_member(team_id: int, user_id: int, db: Session = Depends(get_db)):
    return team_service.remove_team_member(db, team_id, user_id)
