"""
Stratagem - Abstract Strategy Games API

A REST gateway for an abstract-strategy-game platform. The gateway exposes:
- Game catalog browsing and game-instance play
- Challenges, standing challenges, tournaments and organized events
- Explorations, playground, notes and comments
- Push notification subscriptions, webhooks and federation
- AbstractPlay compatible query dispatchers

Every backing service is an in-memory stand-in selected at startup.
"""

__version__ = "1.0.0"
