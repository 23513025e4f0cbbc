"""
Learner progress engine.

Tracks lesson completion, XP, levels and streaks, scores the placement test,
unlocks achievements and reconciles local progress with a remote backend.
"""

__version__ = "0.1.0"
