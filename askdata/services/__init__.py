"""Services that drive conversational turns."""

from .instructions import InstructionsBuilder
from .orchestrator import RunOrchestrator
from .recorder import TranscriptRecorder
from .titles import TitleGenerator, FALLBACK_TITLE

__all__ = [
    "InstructionsBuilder",
    "RunOrchestrator",
    "TranscriptRecorder",
    "TitleGenerator",
    "FALLBACK_TITLE",
]
