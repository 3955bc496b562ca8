"""Adapters — Telegram transport, DeepSeek LLM and the health server."""
