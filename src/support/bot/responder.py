"""Keyword bot — answers shoppers while no admin is around.

The bot stays quiet when an admin is online unless the shopper has sent at
least two messages in a row without an answer.
"""

import random
from dataclasses import dataclass

import structlog

from shared.settings import get_settings
from support.bot.knowledge import (
    BOT_RESPONSES,
    CATEGORY_RESPONSES,
    INTENT_ORDER,
    KNOWLEDGE_BASE,
    contact_responses,
    default_responses,
)
from support.message.history import recent_senders
from support.message.message import Sender

logger = structlog.get_logger(__name__)

UNANSWERED_THRESHOLD = 2
LOOKBACK = 5


@dataclass(frozen=True)
class BotReply:
    content: str
    sender_name: str
    delay_seconds: float
    sender: str = Sender.BOT.value


def analyze_intent(text: str):
    """Classify a message into an intent name, or ``("category", keyword)``."""
    lowered = (text or "").lower().strip()

    for intent in INTENT_ORDER:
        for keyword in KNOWLEDGE_BASE[intent]:
            if keyword in lowered:
                return (intent, keyword) if intent == "category" else intent

    return "default"


def generate_response(intent, rng: random.Random | None = None) -> str:
    rng = rng or random

    if isinstance(intent, tuple):
        _, keyword = intent
        answer = CATEGORY_RESPONSES.get(keyword)
        return answer if answer else rng.choice(default_responses())

    if intent == "contact":
        return rng.choice(contact_responses())

    responses = BOT_RESPONSES.get(intent)
    if not responses:
        return rng.choice(default_responses())
    return rng.choice(responses)


def should_respond(senders: list[str], admins_online: bool) -> bool:
    """``senders`` are the room's latest message senders, newest first."""
    if not admins_online:
        return True

    unanswered = 0
    for sender in senders[:LOOKBACK]:
        if sender != Sender.USER.value:
            break
        unanswered += 1

    return unanswered >= UNANSWERED_THRESHOLD


class BotResponder:
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def reply(self, room_id, text: str, admins_online: bool) -> BotReply | None:
        settings = get_settings()
        if not settings.bot_enabled:
            return None

        if not should_respond(recent_senders(room_id, limit=LOOKBACK), admins_online):
            logger.debug("Admin available, bot stays quiet", room_id=str(room_id))
            return None

        intent = analyze_intent(text)
        content = generate_response(intent, self.rng)
        delay = self.rng.uniform(settings.bot_delay_min_seconds, settings.bot_delay_max_seconds)

        logger.info("Bot replying", room_id=str(room_id), intent=str(intent))
        return BotReply(content=content, sender_name=settings.bot_name, delay_seconds=delay)
