"""
vocadrill - spaced-repetition scheduling core for vocabulary decks.

Two scheduling tracks:
- FSRS: continuous memory state (stability, difficulty, retrievability)
- Leitner: three fixed-interval boxes with weighted session selection
"""

__version__ = "0.3.0"
