"""Exceptions shared by the collaborator parsers."""

from __future__ import annotations


class PayloadError(ValueError):
    """A collaborator returned something that is not the expected structured payload."""


class EnrichmentCancelled(RuntimeError):
    """A cancellation token was triggered while an all-or-nothing enrichment was running."""
