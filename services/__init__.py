"""Memory Guide services — persistence and external integrations.

Route handlers import these modules directly; ``services.quiz`` imports its
collaborators inside functions so tests can patch them by module path.
This __init__ lists all modules for discoverability.
"""

__all__ = [
    "memories",
    "patients",
    "quiz",
    "sessions",
    "tavus",
    "transcripts",
]
