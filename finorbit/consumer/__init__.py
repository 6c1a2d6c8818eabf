"""
Consumer side of the pipeline: SQS bodies in, `public.transactions` rows out.
"""

from finorbit.consumer.decoder import MessageDecodeError, Skip, decode_message
from finorbit.consumer.ingestion import BatchReport, process_batch

__all__ = [
    "BatchReport",
    "MessageDecodeError",
    "Skip",
    "decode_message",
    "process_batch",
]
