"""Conversational travel buddy: free-text replies grounded in the profile."""

import logging

from moodtrip.schemas.personalization import ChatReply
from moodtrip.services.personalization.completion import CompletionRunner
from moodtrip.services.personalization.config import PersonalizationConfig, personalization_config
from moodtrip.services.personalization.context_assembler import PromptContext
from moodtrip.services.personalization.fallbacks import CHAT_UNCLEAR, fallback_chat_reply
from moodtrip.services.personalization.prompts import load_prompt

logger = logging.getLogger(__name__)

_GUIDE = load_prompt("travel_buddy_guide.md")

_CHAT_RULES = """Always:
- Reference their past trips and preferences
- Explain your reasoning: "I suggested this because..."
- Ask follow-up questions to learn more
- Be encouraging and enthusiastic
- Suggest specific, actionable recommendations
- Reply in plain text, not JSON"""


class TravelBuddy:
    def __init__(self, runner: CompletionRunner, config: PersonalizationConfig = personalization_config):
        self._runner = runner
        self._cfg = config

    async def reply(self, context: PromptContext, message: str) -> ChatReply:
        try:
            text = await self._runner.text(
                system=f"{context.render(_GUIDE)}\n\n{_CHAT_RULES}",
                instruction=message,
                params=self._cfg.llm.chat,
                label="chat",
            )
        except Exception as e:
            logger.warning(f"Chat failed for user {context.user_id}, using fallback: {e}")
            return fallback_chat_reply(signed_in=True)

        text = text.strip()
        if not text:
            return ChatReply(reply=CHAT_UNCLEAR, source="fallback")
        return ChatReply(reply=text, source="llm")
