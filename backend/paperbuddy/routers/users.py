"""User and subject preference endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from paperbuddy.db import get_session
from paperbuddy.models import User
from paperbuddy.schemas import SubjectsUpdate, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


def _user_read(user: User) -> UserRead:
    return UserRead(id=user.id, name=user.name, email=user.email, subjects=[str(subject) for subject in user.subjects], created_at=user.created_at)


def _get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, session: Session = Depends(get_session)) -> UserRead:
    email = payload.email.strip().lower()
    if session.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(name=payload.name.strip(), email=email)
    user.set_subjects(payload.subjects)
    session.add(user)
    session.commit()
    session.refresh(user)
    return _user_read(user)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, session: Session = Depends(get_session)) -> UserRead:
    return _user_read(_get_user_or_404(session, user_id))


@router.get("/{user_id}/subjects", response_model=list[str])
def get_user_subjects(user_id: int, session: Session = Depends(get_session)) -> list[str]:
    return [str(subject) for subject in _get_user_or_404(session, user_id).subjects]


@router.put("/{user_id}/subjects", response_model=list[str])
def update_user_subjects(user_id: int, payload: SubjectsUpdate, session: Session = Depends(get_session)) -> list[str]:
    user = _get_user_or_404(session, user_id)
    subjects = payload.subjects if isinstance(payload.subjects, list) else []
    user.set_subjects([str(subject) for subject in subjects])
    session.add(user)
    session.commit()
    session.refresh(user)
    return [str(subject) for subject in user.subjects]
