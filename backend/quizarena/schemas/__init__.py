"""
Request schemas for QuizArena.

Bodies use camelCase field names on the wire (``correctAnswer``,
``questionId``) and snake_case attributes in Python.
"""
