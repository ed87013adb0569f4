"""Sleep tracker services: storage access, the off-thread tracker, and
display helpers for recorded nights.
"""
