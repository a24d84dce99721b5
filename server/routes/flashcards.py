"""Flashcard decks with a simple spaced-repetition review schedule."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from docstore import DocumentStore, where
from server.auth import get_current_user_id
from server.dependencies import get_gateway, get_store
from server.envelope import envelope, not_found
from server.schemas import (
    CardInput,
    CardUpdateRequest,
    DeckCreateRequest,
    DeckGenerateRequest,
    DeckUpdateRequest,
    ReviewRequest,
)
from server.services import flashcard_service, progress_service
from server.services.ai import ChatGateway
from server.services.ai.generators import generate_flashcards
from server.services.records import iso, new_id, utc_now

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])


async def _owned(store: DocumentStore, deck_id: str, user_id: str) -> Dict[str, Any]:
    deck = await store.find_one("flashcards", where(id=deck_id, userId=user_id))
    if deck is None:
        raise not_found("Deck")
    return deck


def _card_index(deck: Dict[str, Any], card_id: str) -> int:
    for i, card in enumerate(deck.get("cards") or []):
        if card.get("id") == card_id:
            return i
    raise not_found("Card")


def _new_deck(user_id: str, title: str, subject, topic, cards: List[Dict[str, Any]], **extra) -> Dict[str, Any]:
    ts = iso(utc_now())
    return {
        "id": new_id(),
        "userId": user_id,
        "title": title,
        "subject": subject or "General",
        "topic": topic or "",
        "cards": cards,
        **extra,
        "lastStudied": None,
        "createdAt": ts,
        "updatedAt": ts,
    }


async def _save_cards(store: DocumentStore, deck_id: str, user_id: str, cards, **extra) -> Dict[str, Any]:
    return await store.update("flashcards", where(id=deck_id, userId=user_id), {
        "cards": cards,
        **extra,
        "updatedAt": iso(utc_now()),
    })


@router.get("")
async def list_decks(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    decks = await store.find_many("flashcards", where(userId=user_id))
    decks.sort(key=lambda d: d.get("updatedAt") or "", reverse=True)
    return envelope(
        {"decks": [flashcard_service.deck_summary(d) for d in decks]},
        "Flashcard decks retrieved",
    )


@router.get("/{deck_id}")
async def get_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return envelope({"deck": await _owned(store, deck_id, user_id)}, "Deck retrieved")


@router.post("", status_code=201)
async def create_deck(
    body: DeckCreateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    now = utc_now()
    cards = [flashcard_service.new_card(c.front, c.back, c.tags, now) for c in body.cards]
    deck = _new_deck(user_id, body.title, body.subject, body.topic, cards)
    await store.insert("flashcards", deck)
    return envelope({"deck": deck}, "Deck created")


@router.post("/generate", status_code=201)
async def generate_deck(
    body: DeckGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    model = body.model or gateway.default_model
    generated = await generate_flashcards(gateway, body.topic, body.count, model)
    now = utc_now()
    cards = [
        flashcard_service.new_card(str(c["front"]), str(c["back"]), c.get("tags"), now)
        for c in generated
        if isinstance(c, dict) and c.get("front") and c.get("back")
    ]
    deck = _new_deck(
        user_id,
        body.title or f"{body.topic} Flashcards",
        body.subject,
        body.topic,
        cards,
        generated=True,
        model=model,
    )
    await store.insert("flashcards", deck)
    return envelope({"deck": deck}, "Flashcards generated")


@router.post("/{deck_id}/cards", status_code=201)
async def add_card(
    deck_id: str,
    body: CardInput,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deck = await _owned(store, deck_id, user_id)
    card = flashcard_service.new_card(body.front, body.back, body.tags, utc_now())
    await _save_cards(store, deck_id, user_id, list(deck.get("cards") or []) + [card])
    return envelope({"card": card}, "Card added")


@router.put("/{deck_id}/cards/{card_id}")
async def update_card(
    deck_id: str,
    card_id: str,
    body: CardUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deck = await _owned(store, deck_id, user_id)
    index = _card_index(deck, card_id)
    cards = list(deck["cards"])
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    cards[index] = {**cards[index], **changes}
    await _save_cards(store, deck_id, user_id, cards)
    return envelope({"card": cards[index]}, "Card updated")


@router.delete("/{deck_id}/cards/{card_id}")
async def delete_card(
    deck_id: str,
    card_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deck = await _owned(store, deck_id, user_id)
    index = _card_index(deck, card_id)
    cards = list(deck["cards"])
    del cards[index]
    await _save_cards(store, deck_id, user_id, cards)
    return envelope({}, "Card deleted")


@router.post("/{deck_id}/cards/{card_id}/review")
async def review_card(
    deck_id: str,
    card_id: str,
    body: ReviewRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deck = await _owned(store, deck_id, user_id)
    index = _card_index(deck, card_id)
    now = utc_now()
    cards = list(deck["cards"])
    cards[index] = flashcard_service.review_card(cards[index], body.rating, now)
    await _save_cards(store, deck_id, user_id, cards, lastStudied=iso(now))
    await progress_service.update_stats(store, user_id, counters={"flashcardsReviewed": 1})
    return envelope({"card": cards[index]}, "Card reviewed")


@router.get("/{deck_id}/due")
async def due(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deck = await _owned(store, deck_id, user_id)
    cards = flashcard_service.due_cards(deck.get("cards") or [], utc_now())
    return envelope(
        {"cards": cards, "totalDue": len(cards), "totalCards": len(deck.get("cards") or [])},
        "Due cards retrieved",
    )


@router.put("/{deck_id}")
async def update_deck(
    deck_id: str,
    body: DeckUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    changes["updatedAt"] = iso(utc_now())
    deck = await store.update("flashcards", where(id=deck_id, userId=user_id), changes)
    if deck is None:
        raise not_found("Deck")
    return envelope({"deck": deck}, "Deck updated")


@router.delete("/{deck_id}")
async def delete_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("flashcards", where(id=deck_id, userId=user_id)):
        raise not_found("Deck")
    return envelope({}, "Deck deleted")
