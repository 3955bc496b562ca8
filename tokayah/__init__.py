"""Tok Ayah — Islamic Q&A assistant for Telegram group chats."""

from tokayah.config import __version__

__all__ = ["__version__"]
