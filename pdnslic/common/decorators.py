"""
Quota decorators for domain-creation workflows.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from pdnslic.engine.enforcement import EnforcementGate

from pdnslic.common.exceptions import QuotaExceededError

logger = logging.getLogger(__name__)


def _resolve_gate(
    gate: EnforcementGate | Callable[[], EnforcementGate] | str,
    args: tuple[Any, ...],
) -> EnforcementGate:
    # Attribute name - get from self
    if isinstance(gate, str):
        if not args:
            msg = f"Cannot get gate attribute '{gate}' without self"
            raise ValueError(msg)
        return getattr(args[0], gate)
    if callable(gate) and not hasattr(gate, "can_create_resource"):
        return gate()
    return gate  # type: ignore[return-value]


def requires_domain_capacity(
    gate: EnforcementGate | Callable[[], EnforcementGate] | str,
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs the wrapped creation only while quota remains.

    Args:
        gate: EnforcementGate instance, callable returning one, or the name
            of an attribute holding one on the decorated method's ``self``
        raise_exception: Whether to raise QuotaExceededError or return None

    Store failures raised by the gate are not caught: a creation is never
    allowed when the quota cannot be checked.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            decision = _resolve_gate(gate, args).can_create_resource()
            if not decision.allowed:
                message = decision.message or "Domain limit reached"
                if raise_exception:
                    raise QuotaExceededError(message, decision.limit)
                logger.warning("Quota check failed: %s", message)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator
