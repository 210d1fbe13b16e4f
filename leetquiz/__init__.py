"""Practice quizzes about previously solved coding problems."""

__version__ = "0.1.0"
