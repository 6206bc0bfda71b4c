"""liftup: strength-training session tracker and progression engine."""

__version__ = "0.1.0"
