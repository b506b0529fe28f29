"""familycal - recurring event generation for a shared household calendar."""

__version__ = "1.0.0"
__author__ = "familycal Team"
__description__ = "Recurring event occurrence generation and series extension for a household calendar"

__all__ = [
    "__author__",
    "__description__",
    "__version__",
]
