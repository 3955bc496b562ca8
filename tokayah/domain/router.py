"""Router — decides, per inbound message, which path answers it.

Pure logic, no Telegram import: testable with a mock LLMPort. The only
cross-message state is the bot handle, fixed at construction.
"""

import asyncio
import re
import sys
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from tokayah.config import ROUTING_SPECIALIST, ROUTING_SYNTHESIZE
from tokayah.domain import formatter
from tokayah.domain.mention import MentionDetector
from tokayah.domain.models import ResponderKind, RouteAction, RouteResult
from tokayah.domain.responders import APOLOGY_TEXT, Responder
from tokayah.domain.synthesizer import Synthesizer
from tokayah.domain.trivial import CAPABILITY_REPLY, TrivialMatcher
from tokayah.ports.inbound import InboundMessage

PROMPT_FOR_INPUT_TEXT = "Yes? How can I help you?"
FALLBACK_TEXT = (
    "I'm not sure which area your question falls under. "
    "Please rephrase it, or use a command such as /fatwa, /mazhab, /jakim, "
    "/malaysianfatwa, /ibadah or /opinion."
)
GROUP_ONLY_TEXT = "This command can only be used in a group chat."
MISSING_QUESTION_TEXT = "Please provide a question after the /{command} command."

# Broad-question triggers, English and Malay
BROAD_TRIGGERS = (
    "what", "how", "why", "opinion", "think", "view", "explain",
    "tell me about", "what about", "what is", "what are",
    "apa", "bagaimana", "kenapa", "mengapa", "pendapat",
    "fikir", "pandangan", "terangkan", "beritahu", "macam mana",
    "pasal", "tentang", "berkenaan", "mengenai", "tolong",
)
_BROAD_RE = re.compile(r"\b(?:" + "|".join(re.escape(t) for t in BROAD_TRIGGERS) + r")\b")

_COMMAND_RE = re.compile(r"^/(\w+)(?:@(\w+))?(?:\s+(.*))?$", re.DOTALL)


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_command(text: str) -> Optional[Tuple[str, Optional[str], str]]:
    """Split "/cmd@handle question" into (cmd, handle, question), or None."""
    found = _COMMAND_RE.match((text or "").strip())
    if not found:
        return None
    return found.group(1).lower(), found.group(2), (found.group(3) or "").strip()


def is_broad_question(text: str) -> bool:
    lowered = (text or "").lower()
    return "?" in lowered or bool(_BROAD_RE.search(lowered))


def quote_context(prior: str, question: str) -> str:
    """Prepend the replied-to message as quoted context."""
    quoted = "\n".join(f"> {line}" for line in prior.strip().splitlines())
    return f"Previous message:\n{quoted}\n\n{question}"


def _canned(action: RouteAction, text: str, responder: Optional[ResponderKind] = None) -> RouteResult:
    return RouteResult(action=action, chunks=[text], markup=False, responder=responder)


class Router:
    """Per-message routing state machine.

    Handles, first match wins:
    - replies (context from the replied-to message)
    - commands (/fatwa, /mazhab, ..., /opinion, /help)
    - unaddressed messages (ignored unless broad-question routing is on)
    - empty residual after stripping the address (prompt for input)
    - trivial interactions (canned replies)
    - topical routing (best specialist, or the synthesizer)
    """

    def __init__(
        self,
        specialists: Dict[ResponderKind, Responder],
        synthesizer: Synthesizer,
        allowed_channels: Iterable[str],
        handle: Optional[str] = None,
        trivial: Optional[TrivialMatcher] = None,
        mode: str = ROUTING_SPECIALIST,
        broad_questions: bool = False,
    ):
        if mode not in (ROUTING_SPECIALIST, ROUTING_SYNTHESIZE):
            raise ValueError(f"Unsupported routing mode: {mode}")
        self.specialists = dict(specialists)
        self.synthesizer = synthesizer
        self.allowed_channels: FrozenSet[str] = frozenset(str(c) for c in allowed_channels)
        self.mention = MentionDetector(handle)
        self.trivial = trivial or TrivialMatcher()
        self.mode = mode
        self.broad_questions = broad_questions

    @property
    def bot_handle(self) -> str:
        return self.mention.handle

    def responders(self) -> Dict[str, Responder]:
        """Command name -> responder, specialists first."""
        by_command: Dict[str, Responder] = {r.command: r for r in self.specialists.values()}
        by_command[self.synthesizer.command] = self.synthesizer
        return by_command

    def is_allowed(self, channel_id: str) -> bool:
        return str(channel_id) in self.allowed_channels

    async def handle(self, msg: InboundMessage) -> RouteResult:
        """Route one inbound message. Never raises."""
        if msg.is_from_self:
            return RouteResult(action=RouteAction.IGNORE)

        command = parse_command(msg.text)
        if not self.is_allowed(msg.channel_id):
            if command and self._owns_command(command):
                return _canned(RouteAction.GROUP_ONLY, GROUP_ONLY_TEXT)
            _log(f"[Router] message from non-allowed channel {msg.channel_id} ignored")
            return RouteResult(action=RouteAction.IGNORE)

        mentioned = self.mention.is_addressed(msg.text)

        # 1. Replies: only to our own messages, or when independently addressed
        context = None
        if msg.is_reply:
            if not (msg.reply_to_self or mentioned):
                return RouteResult(action=RouteAction.IGNORE)
            context = msg.reply_to_text

        # 2. Commands bypass everything else
        if command:
            if not self._owns_command(command):
                return RouteResult(action=RouteAction.IGNORE)
            name, _, question = command
            return await self.handle_command(name, question)

        # 3. Unaddressed messages
        addressed = mentioned or msg.is_reply
        if not addressed:
            if self.broad_questions and is_broad_question(msg.text):
                return await self._guarded(self._synthesize, msg.text.strip())
            return RouteResult(action=RouteAction.IGNORE)

        return await self._guarded(self._route_addressed, msg.text, context)

    async def handle_command(self, name: str, question: str) -> RouteResult:
        """Dispatch /name question to the matching responder."""
        if name in ("help", "start"):
            return _canned(RouteAction.TRIVIAL, CAPABILITY_REPLY)
        responder = self.responders().get(name)
        if responder is None:
            return RouteResult(action=RouteAction.IGNORE)
        if not question:
            return _canned(
                RouteAction.MISSING_QUESTION,
                MISSING_QUESTION_TEXT.format(command=name),
                responder.kind,
            )
        return await self._guarded(self._answer_with, responder, question, RouteAction.COMMAND)

    def _owns_command(self, command: Tuple[str, Optional[str], str]) -> bool:
        name, target, _ = command
        if target and self.bot_handle and target.lower() != self.bot_handle:
            return False
        return name in ("help", "start") or name in self.responders()

    async def _guarded(self, step, *args) -> RouteResult:
        try:
            return await step(*args)
        except Exception as e:
            _log(f"[Router] error during {getattr(step, '__name__', step)}: {e}")
            return _canned(RouteAction.ERROR, APOLOGY_TEXT)

    async def _route_addressed(self, text: str, context: Optional[str]) -> RouteResult:
        # 4. Strip the address phrase
        residual = self.mention.strip_address(text)
        if not residual:
            return _canned(RouteAction.PROMPT, PROMPT_FOR_INPUT_TEXT)

        # 5. Trivial interactions
        canned = self.trivial.match(residual)
        if canned:
            _log(f"[Router] trivial interaction: {canned.category}")
            return _canned(RouteAction.TRIVIAL, canned.text)

        query = quote_context(context, residual) if context else residual

        # 6. Topical routing
        if self.mode == ROUTING_SYNTHESIZE:
            return await self._synthesize(query)
        return await self._best_specialist(query)

    async def score_all(self, query: str) -> List[Tuple[Responder, float]]:
        """Score every specialist concurrently; results keep declared order."""
        ordered = list(self.specialists.values())
        scores = await asyncio.gather(*(r.score_relevance(query) for r in ordered))
        return list(zip(ordered, scores))

    @staticmethod
    def select(scored: List[Tuple[Responder, float]]) -> Optional[Responder]:
        """Strictly highest score at or above its own threshold; ties go to the first declared."""
        best, best_score = None, -1.0
        for responder, score in scored:
            if score >= responder.threshold and score > best_score:
                best, best_score = responder, score
        return best

    async def _best_specialist(self, query: str) -> RouteResult:
        scored = await self.score_all(query)
        _log("[Router] relevance: " + ", ".join(f"{r.command}={s:.2f}" for r, s in scored))
        winner = self.select(scored)
        if winner is None:
            return _canned(RouteAction.FALLBACK, FALLBACK_TEXT)
        return await self._answer_with(winner, query, RouteAction.SPECIALIST)

    async def _synthesize(self, query: str) -> RouteResult:
        return await self._answer_with(self.synthesizer, query, RouteAction.SYNTHESIS)

    async def _answer_with(self, responder: Responder, query: str, action: RouteAction) -> RouteResult:
        _log(f"[Router] {action.value} -> {responder.name}")
        answer = await responder.generate(query)
        return RouteResult(
            action=action,
            chunks=formatter.render(answer),
            markup=True,
            responder=responder.kind,
        )
