"""
Progress engines: store, gamification, curriculum, achievements and sync.
"""
