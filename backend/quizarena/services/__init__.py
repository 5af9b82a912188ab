"""
Service layer for QuizArena: scoring and leaderboard bookkeeping.
"""
