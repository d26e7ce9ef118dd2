"""
신용카드 라우트

/api/cards - 카드 CRUD, 사용(spend), 결제(pay)
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.engine import LedgerEngine
from core.session import Session
from web.dependencies import get_engine, require_session
from web.models.requests import (
    CardCreateRequest,
    CardPayRequest,
    CardSpendRequest,
    CardUpdateRequest,
)

router = APIRouter(prefix="/api/cards", tags=["Credit Cards"])


@router.get("")
async def list_cards(engine: LedgerEngine = Depends(get_engine)) -> list[dict[str, Any]]:
    """카드 목록 (available_credit 포함)"""
    cards = await engine.cards.list()
    return [c.to_dict() for c in cards]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_card(
    request: CardCreateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    card = await engine.cards.create(
        name=request.name, credit_limit=request.credit_limit, due_day=request.due_day
    )
    return card.to_dict()


@router.get("/{card_id}")
async def get_card(card_id: str, engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    card = await engine.cards.get(card_id)
    return card.to_dict()


@router.put("/{card_id}")
async def update_card(
    card_id: str,
    request: CardUpdateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    card = await engine.cards.update(
        card_id,
        name=request.name,
        credit_limit=request.credit_limit,
        due_day=request.due_day,
    )
    return card.to_dict()


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: str,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> None:
    await engine.cards.delete(card_id)


@router.post("/{card_id}/spend")
async def spend(
    card_id: str,
    request: CardSpendRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """카드 사용 (타인 사용분은 대출 생성)"""
    result = await engine.cards.spend(
        card_id,
        spend_date=request.spend_date,
        description=request.description,
        amount=request.amount,
        owner_name=request.owner_name,
    )
    return {
        "card": result.card.to_dict(),
        "date": result.spend_date.isoformat(),
        "description": result.description,
        "amount": str(result.amount),
        "loan": result.loan.to_dict() if result.loan else None,
    }


@router.post("/{card_id}/pay")
async def pay(
    card_id: str,
    request: CardPayRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """카드 결제 (은행 원장 debit)"""
    result = await engine.cards.pay(
        card_id,
        amount=request.amount,
        bank_id=request.bank_id,
        pay_date=request.pay_date,
    )
    return {
        "card": result.card.to_dict(),
        "entry": result.entry.to_dict(),
        "applied": str(result.applied),
    }
