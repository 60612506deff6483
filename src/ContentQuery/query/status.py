"""Status resolution.

Maps named states to predicates evaluated against one instant ``T``. For
entries, ``live``, ``pending`` and ``expired`` split enabled rows by their
post and expiry dates:

| state   | condition                                                        |
|---------|------------------------------------------------------------------|
| live    | enabled, postDate <= T, expiryDate is null or > T                |
| pending | enabled, postDate > T                                            |
| expired | enabled, expiryDate is not null and <= T                         |

The three are disjoint for well-formed rows. A row whose expiry date is at or
before T while its post date is after T matches both ``pending`` and
``expired``.

``enabled`` / ``disabled`` come from the generic element rules. Callers may
register extra states with ``StatusResolver.register``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional

from ContentQuery.core.errors import UnknownStatusError
from ContentQuery.core.models import (
    STATUS_DISABLED,
    STATUS_ENABLED,
    STATUS_EXPIRED,
    STATUS_LIVE,
    STATUS_PENDING,
)
from ContentQuery.core.predicates import Compare, IsNull, Not, Predicate, and_, or_
from ContentQuery.query.compiler import to_db_date

# Receives T already formatted for the database.
StatusFactory = Callable[[str], Predicate]


def _enabled(now: str) -> Predicate:
    return and_(
        Compare("elements.enabled", "=", True),
        Compare("elements_sites.enabled", "=", True),
    )


def _disabled(now: str) -> Predicate:
    return or_(
        Compare("elements.enabled", "=", False),
        Compare("elements_sites.enabled", "=", False),
    )


def _live(now: str) -> Predicate:
    return and_(
        _enabled(now),
        Compare("entries.postDate", "<=", now),
        or_(IsNull("entries.expiryDate"), Compare("entries.expiryDate", ">", now)),
    )


def _pending(now: str) -> Predicate:
    return and_(_enabled(now), Compare("entries.postDate", ">", now))


def _expired(now: str) -> Predicate:
    return and_(
        _enabled(now),
        Not(IsNull("entries.expiryDate")),
        Compare("entries.expiryDate", "<=", now),
    )


ELEMENT_STATUSES: Mapping[str, StatusFactory] = {
    STATUS_ENABLED: _enabled,
    STATUS_DISABLED: _disabled,
}

ENTRY_STATUSES: Mapping[str, StatusFactory] = {
    STATUS_LIVE: _live,
    STATUS_PENDING: _pending,
    STATUS_EXPIRED: _expired,
}


class StatusResolver:
    """Resolve status names to predicates.

    Lookups consult the element's own states first, then the generic
    element states, so ``disabled`` on an entry query falls through to the
    base "not enabled" rule.
    """

    def __init__(
        self,
        statuses: Mapping[str, StatusFactory] | None = None,
        *,
        base: Mapping[str, StatusFactory] = ELEMENT_STATUSES,
    ) -> None:
        self._statuses: dict[str, StatusFactory] = dict(statuses or {})
        self._base: dict[str, StatusFactory] = dict(base)

    def register(self, name: str, factory: StatusFactory) -> None:
        self._statuses[name.lower()] = factory

    def names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys([*self._statuses, *self._base]))

    def condition(self, status: str, now: datetime) -> Predicate:
        """Return the predicate for one status at instant ``now``.

        Raises:
            UnknownStatusError: If neither the element nor the base rules know
                the name.
        """
        return self._factory(status)(to_db_date(now))

    def conditions(self, statuses: Iterable[str], now: datetime) -> Optional[Predicate]:
        """OR together the predicates of several statuses.

        ``now`` is formatted once so every state sees the same instant.
        """
        db_now = to_db_date(now)
        return or_(*(self._factory(status)(db_now) for status in statuses))

    def _factory(self, status: str) -> StatusFactory:
        key = status.lower()
        factory = self._statuses.get(key) or self._base.get(key)
        if factory is None:
            raise UnknownStatusError(status)
        return factory


def element_status_resolver() -> StatusResolver:
    return StatusResolver()


def entry_status_resolver() -> StatusResolver:
    return StatusResolver(ENTRY_STATUSES)
