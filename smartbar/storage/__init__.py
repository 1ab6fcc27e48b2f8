from .memory import MemoryTranscriptStore

__all__ = ["MemoryTranscriptStore"]
