"""Prompt text for the chat model"""

from __future__ import annotations

from lingochat.models.chat import Language

_BASE_INSTRUCTION = (
    "You are a friendly and knowledgeable assistant. "
    "The user's messages have been translated into English for you, and your reply "
    "will be translated back into the user's language, so answer in clear, simple "
    "English. Avoid idioms, puns and wordplay that do not survive translation, "
    "and keep formatting to plain paragraphs and short lists."
)

SYSTEM_PROMPTS: dict[Language, str] = {
    Language.ENGLISH: _BASE_INSTRUCTION,
    Language.TIBETAN: (
        _BASE_INSTRUCTION
        + " The user speaks Tibetan. Be respectful of Tibetan culture and Buddhist "
        "traditions, and prefer examples that are meaningful on the Tibetan plateau."
    ),
    Language.HAWAIIAN: (
        _BASE_INSTRUCTION
        + " The user speaks Hawaiian. Honor Hawaiian culture and values such as aloha "
        "and mālama ʻāina, and keep Hawaiian place names and proper nouns intact."
    ),
    Language.TELUGU: (
        _BASE_INSTRUCTION
        + " The user speaks Telugu. Prefer examples familiar in Andhra Pradesh and "
        "Telangana, and keep Indian names and units as they are."
    ),
}

DEFAULT_SYSTEM_PROMPT = SYSTEM_PROMPTS[Language.ENGLISH]

LANGUAGE_NAMES: dict[Language, str] = {
    Language.ENGLISH: "English",
    Language.TIBETAN: "Tibetan",
    Language.HAWAIIAN: "Hawaiian",
    Language.TELUGU: "Telugu",
}


def system_prompt_for(language: str | Language | None) -> str:
    """Instruction for the system turn; unknown languages get the default"""
    return SYSTEM_PROMPTS.get(Language.resolve(language), DEFAULT_SYSTEM_PROMPT)


def build_naming_prompt(text: str, language: str | Language | None) -> str:
    """Build prompt asking for a short conversation title"""
    language_name = LANGUAGE_NAMES[Language.resolve(language)]
    return f"""Write a title for a conversation that starts with the message below.

MESSAGE:
{text}

Rules:
- 3 to 5 words
- Written in {language_name}
- No quotes, no trailing period, no explanation

Return ONLY the title."""
