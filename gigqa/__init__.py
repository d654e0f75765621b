"""Multi-agent quality check and dispute review for freelance gig work."""

from .workflow import quality_check, review

__all__ = ["quality_check", "review"]
