"""Create-or-fetch reconciliation for named provider resources."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from hetzner_kube.exceptions import ConflictError, NotFoundError
from hetzner_kube.logging_config import get_logger

logger = get_logger(__name__)

R = TypeVar("R")
A = TypeVar("A")


@dataclass(frozen=True, slots=True)
class Ensured(Generic[R, A]):
    """Outcome of ``ensure``.

    ``action`` is set only when this call created the resource and the
    provider returned an operation that still has to be awaited.
    """

    resource: R
    action: A | None = None

    @property
    def created(self) -> bool:
        return self.action is not None


def ensure(
    name: str,
    fetch: Callable[[str], R | None],
    create: Callable[[], tuple[A, R]],
) -> Ensured[R, A]:
    """Return the resource called ``name``, creating it when absent.

    An existing resource is returned unchanged. When creation loses a
    naming race to another caller (ConflictError) the resource is fetched
    again and treated as existing. Every other error propagates.

    Args:
        name: Unique resource name
        fetch: Looks the resource up by name, returning None when absent
        create: Submits the create request, returning (action, resource)

    Returns:
        Ensured wrapping the resource and, if created here, its action

    Raises:
        NotFoundError: If a conflicting resource vanished before the refetch
    """
    existing = fetch(name)
    if existing is not None:
        logger.info(f"Loading existing resource '{name}'")
        return Ensured(resource=existing)

    logger.info(f"Creating resource '{name}'")
    try:
        action, resource = create()
    except ConflictError:
        logger.warning(f"Resource '{name}' was created concurrently, fetching it instead")
        existing = fetch(name)
        if existing is None:
            raise NotFoundError(
                f"Resource '{name}' reported as existing but could not be fetched",
                "Re-run the operation; the conflicting resource may have been deleted",
            )
        return Ensured(resource=existing)

    return Ensured(resource=resource, action=action)
