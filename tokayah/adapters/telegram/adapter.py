"""Telegram adapter — bridges python-telegram-bot updates to the Router.

Converts telegram.Message -> InboundMessage, delegates the decision to
Router.handle and sends each resulting chunk in order as a reply to the
triggering message.
"""

import asyncio
import sys
from typing import Optional, Set

from telegram import Bot, Message, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes

from tokayah.domain.models import RouteResult
from tokayah.domain.router import Router
from tokayah.ports.inbound import InboundMessage
from tokayah.ports.outbound import ReplyPort


def _log(msg: str):
    print(msg, file=sys.stderr)


def to_inbound(message: Optional[Message], bot_id: int) -> Optional[InboundMessage]:
    """Convert a Telegram message to a transport-agnostic InboundMessage.

    Returns None for updates without text (stickers, joins, edits of media).
    """
    if message is None or not message.text:
        return None
    sender = message.from_user
    replied = message.reply_to_message
    reply_to_text = None
    reply_to_self = False
    if replied is not None:
        reply_to_text = replied.text or replied.caption or ""
        reply_to_self = bool(replied.from_user and replied.from_user.id == bot_id)
    return InboundMessage(
        text=message.text,
        channel_id=str(message.chat.id),
        message_id=message.message_id,
        reply_to_text=reply_to_text,
        reply_to_self=reply_to_self,
        is_from_self=bool(sender and sender.id == bot_id),
    )


class TelegramReplyAdapter:
    """ReplyPort implementation using telegram.Bot."""

    def __init__(self, bot: Bot):
        self._bot = bot

    async def reply(
        self,
        channel_id: str,
        text: str,
        reply_to_message_id: Optional[int] = None,
        markup: bool = False,
    ) -> None:
        try:
            await self._bot.send_message(
                chat_id=int(channel_id),
                text=text,
                parse_mode=ParseMode.HTML if markup else None,
                reply_to_message_id=reply_to_message_id,
            )
        except BadRequest as e:
            if not markup:
                raise
            # Telegram rejected the entities; resend the same chunk unparsed
            _log(f"[Telegram] HTML rejected ({e}), resending as plain text")
            await self._bot.send_message(
                chat_id=int(channel_id),
                text=text,
                reply_to_message_id=reply_to_message_id,
            )


class TelegramBotAdapter:
    """Thin update handler that delegates every text message to the Router.

    Tracks in-flight handlers so shutdown can wait for them to finish.
    """

    def __init__(self, router: Router, replies: ReplyPort, bot_id: int):
        self._router = router
        self._replies = replies
        self._bot_id = bot_id
        self._in_flight: Set[asyncio.Task] = set()
        self._accepting = True

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def stop_accepting(self):
        self._accepting = False

    async def on_update(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """MessageHandler callback."""
        if not self._accepting:
            return
        msg = to_inbound(update.effective_message, self._bot_id)
        if msg is None:
            return
        task = asyncio.current_task()
        if task is not None:
            self._in_flight.add(task)
        try:
            await self.process(msg)
        finally:
            if task is not None:
                self._in_flight.discard(task)

    async def process(self, msg: InboundMessage) -> RouteResult:
        result = await self._router.handle(msg)
        if result.should_reply:
            await self.deliver(msg, result)
        return result

    async def deliver(self, msg: InboundMessage, result: RouteResult):
        """Send chunks strictly in order; stop at the first failed send."""
        for i, chunk in enumerate(result.chunks):
            try:
                await self._replies.reply(
                    msg.channel_id,
                    chunk,
                    reply_to_message_id=msg.message_id,
                    markup=result.markup,
                )
            except TelegramError as e:
                _log(f"[Telegram] failed to send chunk {i + 1}/{len(result.chunks)} to {msg.channel_id}: {e}")
                return

    async def drain(self, timeout: float) -> int:
        """Wait up to timeout seconds for in-flight handlers. Returns how many were still running."""
        pending = {t for t in self._in_flight if t is not asyncio.current_task()}
        if not pending:
            return 0
        _log(f"[Telegram] waiting for {len(pending)} in-flight message(s)")
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        return len(still_running)
