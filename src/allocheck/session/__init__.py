from allocheck.session.filtering import filter_rows
from allocheck.session.orchestrator import ValidationSession

__all__ = ["ValidationSession", "filter_rows"]
