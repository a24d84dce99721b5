"""Flashcard cards, deck summaries and the review schedule."""

import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from server.services.records import iso, new_id, parse_iso

AGAIN, HARD, GOOD, EASY = 1, 2, 3, 4
MASTERY_LEVELS = ("learning", "familiar", "mastered")


def new_card(front: str, back: str, tags: Optional[List[str]], now: datetime) -> Dict[str, Any]:
    ts = iso(now)
    return {
        "id": new_id(),
        "front": front,
        "back": back,
        "tags": list(tags or []),
        "mastery": "learning",
        "nextReview": ts,
        "reviewCount": 0,
        "correctCount": 0,
        "createdAt": ts,
    }


def review_card(card: Dict[str, Any], rating: int, now: datetime) -> Dict[str, Any]:
    """
    Return the card rescheduled after one review.

    again: today, learning. hard: +1 day, learning.
    good: +2 days per review so far, familiar from 3 correct.
    easy: +4 days per review so far, mastered from 5 correct else familiar.
    Any other rating: +1 day, mastery unchanged.
    """
    card = dict(card)
    card["reviewCount"] = card.get("reviewCount", 0) + 1
    correct = card.get("correctCount", 0)
    if rating == AGAIN:
        days = 0
        card["mastery"] = "learning"
    elif rating == HARD:
        days = 1
        card["mastery"] = "learning"
    elif rating == GOOD:
        days = card["reviewCount"] * 2
        correct += 1
        card["mastery"] = "familiar" if correct >= 3 else "learning"
    elif rating == EASY:
        days = card["reviewCount"] * 4
        correct += 1
        card["mastery"] = "mastered" if correct >= 5 else "familiar"
    else:
        days = 1
    card["correctCount"] = correct
    card["nextReview"] = iso(now + timedelta(days=days))
    card["lastReviewed"] = iso(now)
    return card


def deck_summary(deck: Dict[str, Any]) -> Dict[str, Any]:
    cards = deck.get("cards") or []
    counts = {level: sum(1 for c in cards if c.get("mastery") == level) for level in MASTERY_LEVELS}
    return {
        "id": deck["id"],
        "title": deck.get("title"),
        "subject": deck.get("subject"),
        "topic": deck.get("topic"),
        "cardCount": len(cards),
        "masteredCount": counts["mastered"],
        "familiarCount": counts["familiar"],
        "learningCount": counts["learning"],
        "lastStudied": deck.get("lastStudied"),
        "createdAt": deck.get("createdAt"),
        "updatedAt": deck.get("updatedAt"),
    }


def due_cards(cards: List[Dict[str, Any]], now: datetime, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """Cards whose nextReview has passed, shuffled. Unparseable dates count as due."""
    due = []
    for card in cards:
        when = parse_iso(card.get("nextReview"))
        if when is None or when <= now:
            due.append(card)
    (rng or random).shuffle(due)
    return due
