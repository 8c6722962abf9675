"""Engaging lead-in phrases for social posts."""

import random
from typing import Protocol

ENGAGING_PHRASES: tuple[str, ...] = (
    "💡 Interesting read worth hoarding:",
    "📚 Bookmarked this gem for later:",
    "🔖 Just saved this excellent piece:",
    "💎 Found a treasure worth sharing:",
    "🧠 Brain food I've saved for you:",
    "📌 Pinned this must-read article:",
    "⭐ Star content worth your time:",
    "📑 Filed this under 'brilliant reads':",
    "🔍 Discovered this fascinating insight:",
    "💡 Lightbulb moment in this read:",
    "📋 Added to my collection of great finds:",
    "🌟 Stellar content worth remembering:",
    "📖 Page-turner I've saved for reference:",
    "🧩 Insightful piece worth your attention:",
    "🏆 Top-tier content I'm archiving:",
    "📤 Sharing this remarkable article:",
    "💫 Content that deserves a spotlight:",
    "🔆 Bright ideas worth preserving:",
    "📕 Notable read I've archived:",
    "🗃️ Worth keeping in your knowledge base:",
)


class RandomSource(Protocol):
    """Anything with random.Random's choice(); tests pass a seeded Random."""

    def choice(self, seq): ...


def pick_engaging_phrase(rng: RandomSource | None = None) -> str:
    """Return one phrase from ENGAGING_PHRASES, chosen uniformly at random."""
    return (rng or random).choice(ENGAGING_PHRASES)
