"""Rebel Alliance Command — campaign session engine.

Owns the authoritative state of every running campaign: resource ledger,
phase progression, the options currently on offer, and the final ending.
Exposed over FastAPI and as a terminal game.
"""
