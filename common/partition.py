"""
Partition Function
Maps an intermediate key to one of N reduce buckets
"""

FNV32_OFFSET_BASIS = 0x811c9dc5
FNV32_PRIME = 0x01000193


def ihash(key: str) -> int:
    """
    32-bit FNV-1a hash of the key's UTF-8 bytes, masked to non-negative.

    Python's built-in hash() is salted per process, so it cannot be used to
    route keys between workers.
    """
    h = FNV32_OFFSET_BASIS
    for byte in key.encode('utf-8'):
        h ^= byte
        h = (h * FNV32_PRIME) & 0xffffffff
    return h & 0x7fffffff


def partition_for(key: str, num_buckets: int) -> int:
    """
    Get the reduce bucket for a key

    Args:
        key: Intermediate key
        num_buckets: Number of reduce tasks in the job

    Returns:
        Bucket index in [0, num_buckets)
    """
    if num_buckets < 1:
        raise ValueError(f"num_buckets must be >= 1, got {num_buckets}")
    return ihash(key) % num_buckets
