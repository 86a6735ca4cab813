"""Partition planning: split an object into byte ranges for part copies."""

from partcopy.errors import InvalidArgument
from partcopy.models import DEFAULT_COPY_PART_SIZE_BYTES, PartitionRange
from partcopy.validation import validate_size

# S3 rejects any part other than the last one below 5 MB.
MIN_PART_SIZE_BYTES = 5_000_000
MAX_PARTS = 10_000


def calculate_partitions(
    object_size: int,
    part_size: int | None = None,
    min_part_size: int = MIN_PART_SIZE_BYTES,
) -> list[PartitionRange]:
    """Split ``[0, object_size)`` into contiguous inclusive byte ranges.

    Full ranges of ``part_size`` bytes are emitted first. A trailing remainder
    of at least ``min_part_size`` bytes becomes its own range; a smaller one
    is folded into the last full range so that no part ends up undersized.

    Args:
        object_size: Size of the source object in bytes.
        part_size: Desired part size in bytes (defaults to 50 MB).
        min_part_size: Smallest trailing range emitted on its own.

    Returns:
        Ranges ordered by offset, numbered from 1.

    Raises:
        InvalidArgument: If a size is not a positive integer or the object
            would need more than ``MAX_PARTS`` parts.
    """
    part_size = part_size or DEFAULT_COPY_PART_SIZE_BYTES
    validate_size(object_size, "object_size")
    validate_size(part_size, "copy_part_size_bytes")

    whole, remainder = divmod(object_size, part_size)
    bounds = [(i * part_size, (i + 1) * part_size - 1) for i in range(whole)]

    if remainder:
        start = whole * part_size
        if bounds and remainder < min_part_size:
            last_start, last_end = bounds[-1]
            bounds[-1] = (last_start, last_end + remainder)
        else:
            bounds.append((start, start + remainder - 1))

    if len(bounds) > MAX_PARTS:
        raise InvalidArgument(
            f"object_size {object_size} needs {len(bounds)} parts of {part_size} "
            f"bytes; the limit is {MAX_PARTS}"
        )

    return [
        PartitionRange(part_number=index, start=start, end=end)
        for index, (start, end) in enumerate(bounds, 1)
    ]
