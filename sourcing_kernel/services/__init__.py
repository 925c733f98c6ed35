"""Kernel services: flush-only building blocks used inside module transactions."""

from sourcing_kernel.services.base import BaseService
from sourcing_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = ["BaseService", "SequenceCounter", "SequenceService"]
