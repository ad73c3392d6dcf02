"""Idempotent create-if-absent protocol shared by the provisioning operations.

The list-then-create sequence is not transactional. Two callers racing on the
same name may both see "no match" and both create; the backend's own
uniqueness constraint, if any, decides the outcome. This layer promises
idempotent intent, not exactly-once creation.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable, Optional, TypeVar

from .operation_result import OperationResult

logger = logging.getLogger(__name__)

R = TypeVar("R")


def reconcile(
    name: str,
    list_existing: Callable[[], Iterable[R]],
    create: Callable[[], R],
    *,
    name_of: Callable[[R], str] = lambda resource: getattr(resource, "name"),
    label: str = "Resource",
) -> OperationResult[R]:
    """Create ``name`` unless a resource with exactly that name is listed.

    Args:
        name: Resource name (compared exactly, case-sensitive)
        list_existing: Returns the resources currently known to the backend
        create: Creates the resource and returns it; called at most once
        name_of: Extracts the comparable name from a listed resource
        label: Resource kind used in messages ("Tenant", "Application", ...)

    Returns:
        AlreadyExists with the matching resource, or Created with the new one
    """
    for existing in list_existing():
        if name_of(existing) == name:
            logger.info("[reconcile] %s '%s' already exists", label, name)
            return OperationResult.already_exists(existing, f"{label} '{name}' already exists")

    resource = create()
    logger.info("[reconcile] %s '%s' created", label, name)
    return OperationResult.created(resource, f"{label} '{name}' created successfully")


def reconcile_lookup(
    key: str,
    lookup: Callable[[], Optional[R]],
    create: Callable[[], R],
    *,
    label: str = "Resource",
) -> OperationResult[R]:
    """Variant of :func:`reconcile` for resources found by direct lookup.

    ``lookup`` returns the existing resource for ``key`` or ``None``.
    """
    existing = lookup()
    if existing is not None:
        logger.info("[reconcile] %s '%s' already exists", label, key)
        return OperationResult.already_exists(existing, f"{label} '{key}' already exists")

    resource = create()
    logger.info("[reconcile] %s '%s' created", label, key)
    return OperationResult.created(resource, f"{label} '{key}' created successfully")
