"""Launcher for the Tok Ayah Telegram bot and its health server."""

import asyncio
import signal
import sys

import uvicorn
from telegram import Update
from telegram.ext import Application, MessageHandler, filters

from tokayah.adapters.llm import create_llm
from tokayah.adapters.telegram.adapter import TelegramBotAdapter, TelegramReplyAdapter
from tokayah.adapters.web.server import ServiceState, create_app
from tokayah.config import AppConfig, ConfigurationError
from tokayah.domain.models import ResponderKind
from tokayah.domain.personas import build_profiles
from tokayah.domain.responders import build_specialists
from tokayah.domain.router import Router
from tokayah.domain.synthesizer import Synthesizer


def _log(msg: str):
    print(msg, file=sys.stderr)


def build_router(config: AppConfig, llm, handle: str) -> Router:
    """Wire specialists, synthesizer and router from config."""
    routing = config.routing
    profiles = build_profiles(
        threshold=routing.specialist_threshold,
        synthesizer_threshold=routing.synthesizer_threshold,
    )
    specialists = build_specialists(llm, profiles=profiles)
    synthesizer = Synthesizer(profiles[ResponderKind.OPINION], llm, list(specialists.values()))
    return Router(
        specialists=specialists,
        synthesizer=synthesizer,
        allowed_channels=config.telegram.group_ids,
        handle=handle,
        mode=routing.mode,
        broad_questions=routing.broad_questions,
    )


def _install_signal_handlers(stop: asyncio.Event):
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform / thread
            pass


async def run(config: AppConfig):
    """Start polling and the health server; stop cooperatively on a signal."""
    state = ServiceState()
    server = uvicorn.Server(
        uvicorn.Config(create_app(state), host="0.0.0.0", port=config.port, log_level="info")
    )
    server_task = asyncio.create_task(server.serve())

    llm = create_llm(config)
    application = Application.builder().token(config.telegram.token).concurrent_updates(True).build()
    await application.initialize()

    me = await application.bot.get_me()
    _log(f"[Launcher] logged in as @{me.username} (id={me.id})")

    router = build_router(config, llm, me.username)
    bot = TelegramBotAdapter(router, TelegramReplyAdapter(application.bot), bot_id=me.id)
    application.add_handler(MessageHandler(filters.TEXT, bot.on_update))

    await application.start()
    await application.updater.start_polling(allowed_updates=Update.ALL_TYPES)
    state.mark_ready(router, llm.usage_tracker)
    _log(
        f"[Launcher] polling: mode={router.mode} broad_questions={router.broad_questions} "
        f"groups={','.join(sorted(router.allowed_channels))} port={config.port}"
    )

    stop = asyncio.Event()
    _install_signal_handlers(stop)
    stop_task = asyncio.create_task(stop.wait())
    await asyncio.wait({stop_task, server_task}, return_when=asyncio.FIRST_COMPLETED)

    _log("[Launcher] shutting down")
    state.mark_stopping()
    bot.stop_accepting()
    await application.updater.stop()
    unfinished = await bot.drain(config.shutdown_grace_seconds)
    if unfinished:
        _log(f"[Launcher] {unfinished} message(s) still running after {config.shutdown_grace_seconds}s grace")
    await application.stop()
    await application.shutdown()

    server.should_exit = True
    stop_task.cancel()
    await asyncio.gather(server_task, stop_task, return_exceptions=True)
    _log("[Launcher] stopped")


def main():
    try:
        config = AppConfig.from_env().validate()
    except ConfigurationError as e:
        _log(f"Configuration error: {e}")
        sys.exit(1)
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
