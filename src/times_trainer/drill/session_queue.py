"""Session queue transitions and the requeue-on-error policy.

A problem answered wrong is not dropped: it goes back ``offset`` places
behind the head so it comes up again later in the same session, but never as
the very next prompt while other problems are pending.
"""

from times_trainer.models.problem import Problem

DEFAULT_REQUEUE_OFFSET = 3


def advance_on_correct(queue: list[Problem]) -> list[Problem]:
    """Drop the head of the queue."""
    return list(queue[1:])


def advance_on_wrong(queue: list[Problem], offset: int = DEFAULT_REQUEUE_OFFSET) -> list[Problem]:
    """Move the head back into the queue as a fresh copy.

    The copy gets a new id and ``attempts + 1`` and is inserted at
    ``min(len(remaining), offset)``.
    """
    if not queue:
        return []
    if offset < 1:
        raise ValueError(f"requeue offset must be at least 1, got {offset}")
    head, remaining = queue[0], list(queue[1:])
    insert_index = min(len(remaining), offset)
    remaining.insert(insert_index, head.requeued())
    return remaining
