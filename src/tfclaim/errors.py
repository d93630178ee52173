"""Root of the tfclaim exception hierarchy."""

from __future__ import annotations


class TfClaimError(Exception):
    """Base class for every error tfclaim raises on purpose."""
