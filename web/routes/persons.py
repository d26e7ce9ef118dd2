"""
인물 라우트

/api/persons - 인물 등록/목록/삭제
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.engine import LedgerEngine
from core.session import Session
from web.dependencies import get_engine, require_session
from web.models.requests import PersonCreateRequest

router = APIRouter(prefix="/api/persons", tags=["Persons"])


@router.get("")
async def list_persons(engine: LedgerEngine = Depends(get_engine)) -> list[dict[str, Any]]:
    persons = await engine.persons.list_persons()
    return [p.to_dict() for p in persons]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_person(
    request: PersonCreateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    person = await engine.persons.create_person(request.name, is_self=request.is_self)
    return person.to_dict()


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: str,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> None:
    await engine.persons.delete_person(person_id)
