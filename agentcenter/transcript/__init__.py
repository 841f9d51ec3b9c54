from .builder import (
    SUMMARY_PREFIX, HistoryWindow, TranscriptBuilder, entries_to_messages, flatten,
)
from .tokens import estimate_message_tokens, estimate_tokens, estimate_transcript_tokens

__all__ = [
    "SUMMARY_PREFIX", "HistoryWindow", "TranscriptBuilder", "entries_to_messages", "flatten",
    "estimate_message_tokens", "estimate_tokens", "estimate_transcript_tokens",
]
