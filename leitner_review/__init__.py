"""
Leitner Review

Spaced-repetition scheduling for quiz questions and flashcards using a
five-box Leitner system.
"""

__version__ = "0.1.0"
