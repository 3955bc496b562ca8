"""Trivial-interaction matcher — canned replies that need no generation call.

Categories are checked in a fixed priority order. Identity and capability
questions would otherwise score as topically relevant and trigger an
expensive generation call.
"""

import re
from typing import Optional

from tokayah.domain.models import CannedReply

# -- Canned replies --

GREETING_REPLY = "Waalaikumussalam! How can I help you today?"

THANKS_REPLY = "You're welcome! Feel free to ask if you have any questions."

TEST_REPLY = "Yes, I'm here and working properly. How can I assist you?"

STATUS_REPLY = (
    "Alhamdulillah, I'm online and ready. "
    "Ask me anything about Islamic matters in English or Malay."
)

IDENTITY_REPLY = """Assalamualaikum! I am Tok Ayah, an Islamic knowledge assistant that specializes in Malaysian Islamic context. I can help you with:

• Questions about Islamic rulings (fatwa)
• Understanding different mazhab perspectives
• Information about JAKIM guidelines
• Malaysian Islamic practices and customs
• Comprehensive analysis of Islamic topics

Feel free to ask me any questions about Islamic matters, and I'll do my best to help you understand them from various authentic perspectives."""

CAPABILITY_REPLY = """I can help you in several ways:

1. Direct commands:
/fatwa - Get fatwa rulings
/mazhab - Learn about different mazhab views
/jakim - Get JAKIM guidelines
/malaysianfatwa - Access Malaysian fatwa decisions
/ibadah - Learn about Islamic practices
/opinion - Get a combined view from all perspectives

2. Natural conversations:
Just mention "tok ayah" in your message and ask your question naturally in English or Malay.

For example:
• "tok ayah, apa hukum..."
• "tok ayah, what is the ruling on..."
• "tok ayah, boleh terangkan tentang..."

I'll analyze your question and provide a comprehensive response considering various Islamic perspectives."""

# period -> (English reply, Malay reply)
TIME_OF_DAY_REPLIES = {
    "morning": (
        "Good morning! May your day be blessed. How can I help you?",
        "Selamat pagi! Semoga hari anda diberkati. Ada apa yang boleh saya bantu?",
    ),
    "afternoon": (
        "Good afternoon! How can I help you today?",
        "Selamat petang! Ada apa yang boleh saya bantu?",
    ),
    "evening": (
        "Good evening! How can I help you tonight?",
        "Selamat malam! Ada apa yang boleh saya bantu?",
    ),
    "night": (
        "Good night! May Allah grant you a restful sleep.",
        "Selamat malam, selamat tidur! Semoga Allah memberikan tidur yang lena.",
    ),
}

# -- Patterns --


def _phrase_re(phrases):
    """Compile phrases into one word-bounded alternation."""
    return re.compile(r"\b(?:" + "|".join(re.escape(p) for p in phrases) + r")\b")


# phrase -> (period, is_malay)
TIME_OF_DAY_GREETINGS = {
    "good morning": ("morning", False),
    "morning": ("morning", False),
    "selamat pagi": ("morning", True),
    "good afternoon": ("afternoon", False),
    "selamat tengah hari": ("afternoon", True),
    "selamat tengahari": ("afternoon", True),
    "selamat petang": ("afternoon", True),
    "good evening": ("evening", False),
    "selamat malam": ("evening", True),
    "good night": ("night", False),
    "goodnight": ("night", False),
    "selamat tidur": ("night", True),
}

GREETINGS = frozenset({
    "hi", "hello", "hey", "hai", "helo",
    "assalamualaikum", "assalamualaikum warahmatullah", "salam",
    "as salam", "salam alaikum",
})

_THANKS_RE = re.compile(
    r"\b(?:thank|thanks|thank you|thx|terima kasih|tq|tqvm|ty)\b",
    re.IGNORECASE,
)

TEST_PHRASES = frozenset({"test", "testing", "check", "ping"})

IDENTITY_PATTERNS = (
    "who are you", "who r u", "who are u", "who r you",
    "siapa kamu", "siapa anda", "siapa awak", "siapa tok ayah",
    "introduce yourself", "perkenalkan diri", "kenalkan diri",
    "intro sikit", "tell me about yourself",
    "what is your name", "apa nama awak", "apa nama kamu", "nama awak apa",
)
IDENTITY_EXACT = frozenset({"siapa", "siapa ni", "siapa tu", "who", "who is this"})
_WHO_ARE_YOU_RE = re.compile(r"\bwho\s+(?:are|r)\s*(?:you|u)\b")
_IDENTITY_RE = _phrase_re(IDENTITY_PATTERNS)

CAPABILITY_KEYWORDS = frozenset({"help", "tolong", "bantuan", "command", "commands", "arahan"})
CAPABILITY_PATTERNS = (
    "what can you do", "what do you do", "apa you boleh buat",
    "how to use", "macam mana nak guna", "cara guna",
    "how does this work", "how do you work",
    "what are your functions", "apa fungsi",
)

STATUS_PHRASES = (
    "are you there", "you there", "are you online", "are you alive",
    "still alive", "are you ok", "are you working", "is the bot working",
    "ada tak", "ada ke", "awak ada", "masih hidup", "online ke",
)
# Whole message only, optionally followed by the bot name
_STATUS_RE = re.compile(
    r"^(?:" + "|".join(re.escape(p) for p in STATUS_PHRASES) + r")(?: tok ayah| tokayah)?$"
)
_CAPABILITY_RE = _phrase_re(CAPABILITY_PATTERNS)

_TRAILING_PUNCT_RE = re.compile(r"[\s!?.,~]+$")


def _normalize(text: str) -> str:
    lowered = (text or "").lower().strip()
    lowered = _TRAILING_PUNCT_RE.sub("", lowered)
    return re.sub(r"\s+", " ", lowered)


def _match_time_of_day(text: str) -> Optional[CannedReply]:
    hit = TIME_OF_DAY_GREETINGS.get(text)
    if not hit:
        return None
    period, is_malay = hit
    english, malay = TIME_OF_DAY_REPLIES[period]
    return CannedReply(category=f"time_of_day:{period}", text=malay if is_malay else english)


def _is_identity(text: str) -> bool:
    return text in IDENTITY_EXACT or bool(_IDENTITY_RE.search(text) or _WHO_ARE_YOU_RE.search(text))


def match(text: str) -> Optional[CannedReply]:
    """Return the canned reply for a trivial interaction, or None."""
    normalized = _normalize(text)
    if not normalized:
        return None

    reply = _match_time_of_day(normalized)
    if reply:
        return reply

    if normalized in GREETINGS:
        return CannedReply(category="greeting", text=GREETING_REPLY)

    if _THANKS_RE.search(normalized):
        return CannedReply(category="thanks", text=THANKS_REPLY)

    if normalized in TEST_PHRASES:
        return CannedReply(category="test", text=TEST_REPLY)

    if _is_identity(normalized):
        return CannedReply(category="identity", text=IDENTITY_REPLY)

    if normalized in CAPABILITY_KEYWORDS or _CAPABILITY_RE.search(normalized):
        return CannedReply(category="capability", text=CAPABILITY_REPLY)

    if _STATUS_RE.match(normalized):
        return CannedReply(category="status", text=STATUS_REPLY)

    return None


class TrivialMatcher:
    """Object form of :func:`match`, injected into the Router."""

    def match(self, text: str) -> Optional[CannedReply]:
        return match(text)
