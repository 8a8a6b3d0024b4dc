"""Shared types for albumsync.

This module defines the error base class and enums used by both the
configuration layer and the sync engine.
"""

from __future__ import annotations

from enum import Enum


class AlbumSyncError(Exception):
    """Base exception for every error albumsync reports to the user."""


class TransferStatus(str, Enum):
    """Result status of a single asset transfer.

    PLANNED is only produced by dry runs.
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PLANNED = "planned"
