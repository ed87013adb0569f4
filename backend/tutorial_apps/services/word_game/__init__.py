"""Guess-the-word domain services: the round state machine, live round
registry, and the tick scheduler.

The round logic here is plain Python with no Flask imports so it can be
driven directly by tests; HTTP routes and socket handlers sit on top.
"""
