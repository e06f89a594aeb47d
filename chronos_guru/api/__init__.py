"""API package for Chronos Guru.

Exposes a FastAPI application with two groups of endpoints: stateless
routes that wrap single completion or voice requests (chat, quiz,
reflection, summary, translation, text-to-speech), and stateful session
routes backed by ``ChatSession`` for clients that want the server to own
the conversation.

Notes:
    - Keep this package lightweight; heavy lifting belongs in `core/`.
    - Sessions live in an in-memory registry and vanish on restart.
"""
