"""
Milvus_Wait - Synchronous waits for long-running Milvus operations

Loading collections or partitions and flushing buffered writes complete
asynchronously on a Milvus server. This package triggers those operations
and, when the caller asks for it, polls their progress under a bounded
timeout until they succeed, fail or time out.

Operations are available as asyncio coroutines (wait_operations) and as a
blocking client (client.MilvusClient).
"""

__version__ = "0.1.0"
__author__ = "RhythmX"
