from listing_sync.domain.enums.listing_status import ListingStatus

_WORKING_STATES = frozenset(
    {
        ListingStatus.PENDING,
        ListingStatus.ACTIVE,
        ListingStatus.ERROR,
        ListingStatus.REMOVED,
    }
)

# from_status -> set of allowed to_statuses.
# NOT_LISTED is never a target: a pair returns to it only when its row is deleted.
VALID_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.NOT_LISTED: frozenset(
        {ListingStatus.PENDING, ListingStatus.ACTIVE, ListingStatus.ERROR}
    ),
    ListingStatus.PENDING: _WORKING_STATES,
    ListingStatus.ACTIVE: _WORKING_STATES,
    ListingStatus.ERROR: _WORKING_STATES,
    ListingStatus.REMOVED: _WORKING_STATES,
}


class InvalidStatusTransitionError(Exception):
    """Raised when a listing is moved to a status it cannot reach."""

    def __init__(self, from_status: ListingStatus, to_status: ListingStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))}"
        )


class ListingStateMachine:
    """
    Validates status changes of a product listing on one platform.

    Stateless; every call takes explicit statuses.
    """

    def can_transition(self, from_status: ListingStatus, to_status: ListingStatus) -> bool:
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: ListingStatus, to_status: ListingStatus) -> None:
        """Raise InvalidStatusTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidStatusTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: ListingStatus) -> frozenset[ListingStatus]:
        return VALID_TRANSITIONS.get(from_status, frozenset())
