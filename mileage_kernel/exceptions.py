"""
Typed Exception Hierarchy for the Mileage Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Settlement failures have to tell the admin exactly which precondition is
missing ("set fuel rates first" is a different fix from "enter the driver's
fuel efficiency").  Callers therefore catch by TYPE, read a machine-readable
CODE, and use structured attributes instead of parsing message strings.

Example - WRONG way to handle errors:
    try:
        submissions.complete(submission_id, actor)
    except Exception as e:
        if "rates" in str(e):  # FRAGILE - message might change
            prompt_for_rates()

Example - RIGHT way (what this module enables):
    try:
        submissions.complete(submission_id, actor)
    except MissingRatesError as e:
        prompt_for_rates(e.year, e.month)
    except SettlementError as e:
        show_error(code=e.code, message=str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MileageError (base)
    |
    +-- ValidationError
    |
    +-- AuthorizationError
    |   +-- PermissionDeniedError
    |   +-- AuthenticationError
    |
    +-- NotFoundError
    |   +-- DriverNotFoundError
    |   +-- TripRecordNotFoundError
    |   +-- SubmissionNotFoundError
    |
    +-- SettlementError
    |   +-- MissingRatesError
    |   +-- MissingFuelPriceError
    |   +-- MissingFuelEfficiencyError
    |
    +-- LifecycleError
    |   +-- InvalidStateError
    |   +-- DuplicateSubmissionError
    |
    +-- RecordLockError
        +-- SettlementLockedError
        +-- SubmissionPendingError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR            | Bad PIN, non-positive efficiency,
                |                             | missing rate field, bad distance
----------------|-----------------------------|-----------------------------------------
Authorization   | PERMISSION_DENIED           | Actor role/ownership does not allow op
                | AUTHENTICATION_FAILED       | Name + PIN do not match an employee
----------------|-----------------------------|-----------------------------------------
Not found       | DRIVER_NOT_FOUND            | Driver ID doesn't exist
                | TRIP_RECORD_NOT_FOUND       | Trip record ID doesn't exist
                | SUBMISSION_NOT_FOUND        | Submission ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Settlement      | MISSING_RATES               | No rate table entry for (year, month)
                | MISSING_FUEL_PRICE          | Price for vehicle type absent/zero
                | MISSING_FUEL_EFFICIENCY     | Driver efficiency absent/zero
----------------|-----------------------------|-----------------------------------------
Lifecycle       | INVALID_STATE               | Transition not allowed from state
                | DUPLICATE_SUBMISSION        | Month already submitted
----------------|-----------------------------|-----------------------------------------
Record lock     | SETTLEMENT_LOCKED           | Month is settled (completed)
                | SUBMISSION_PENDING          | Month is submitted, awaiting review

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Single operations raise.  Nothing is written when an exception escapes a
   service method; the caller's ``session_scope()`` rolls back.

2. Bulk settlement converts ``SettlementError`` into per-item result values
   and keeps going.  Every other error aborts the batch.

3. Storage errors (``sqlalchemy.exc.SQLAlchemyError``) are never wrapped or
   retried.
"""


class MileageError(Exception):
    """
    Base exception for all mileage kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "MILEAGE_ERROR"


# Validation


class ValidationError(MileageError):
    """Malformed input; the caller must re-prompt."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Authorization


class AuthorizationError(MileageError):
    """Base exception for actor/role failures."""

    code: str = "AUTHORIZATION_ERROR"


class PermissionDeniedError(AuthorizationError):
    """The acting user may not perform this operation."""

    code: str = "PERMISSION_DENIED"

    def __init__(self, actor_id: str, operation: str, reason: str):
        self.actor_id = actor_id
        self.operation = operation
        self.reason = reason
        super().__init__(f"Actor {actor_id} may not {operation}: {reason}")


class AuthenticationError(AuthorizationError):
    """Driver name and PIN do not match."""

    code: str = "AUTHENTICATION_FAILED"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name or PIN does not match for driver '{name}'")


# Lookups


class NotFoundError(MileageError):
    """Base exception for missing rows."""

    code: str = "NOT_FOUND"


class DriverNotFoundError(NotFoundError):
    """Driver with given ID was not found."""

    code: str = "DRIVER_NOT_FOUND"

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(f"Driver not found: {driver_id}")


class TripRecordNotFoundError(NotFoundError):
    """Trip record with given ID was not found."""

    code: str = "TRIP_RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Trip record not found: {record_id}")


class SubmissionNotFoundError(NotFoundError):
    """Monthly submission with given ID was not found."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Monthly submission not found: {submission_id}")


# Settlement preconditions


class SettlementError(MileageError):
    """Base exception for settlement precondition failures."""

    code: str = "SETTLEMENT_ERROR"


class MissingRatesError(SettlementError):
    """No rate table entry exists for the month being settled."""

    code: str = "MISSING_RATES"

    def __init__(self, year: int, month: int):
        self.year = year
        self.month = month
        super().__init__(
            f"No fuel rates set for {year}-{month:02d}; set fuel rates first"
        )


class MissingFuelPriceError(SettlementError):
    """The price for the driver's vehicle type is absent, zero, or not a number."""

    code: str = "MISSING_FUEL_PRICE"

    def __init__(self, year: int, month: int, vehicle_type: str):
        self.year = year
        self.month = month
        self.vehicle_type = vehicle_type
        super().__init__(
            f"No {vehicle_type} price set for {year}-{month:02d}; "
            f"enter the {vehicle_type} price in the rate table first"
        )


class MissingFuelEfficiencyError(SettlementError):
    """The driver has no usable fuel efficiency."""

    code: str = "MISSING_FUEL_EFFICIENCY"

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(
            f"Driver {driver_id} has no fuel efficiency; "
            f"set the driver's fuel efficiency first"
        )


# Submission lifecycle


class LifecycleError(MileageError):
    """Base exception for submission state machine violations."""

    code: str = "LIFECYCLE_ERROR"


class InvalidStateError(LifecycleError):
    """The requested transition is not allowed from the current state."""

    code: str = "INVALID_STATE"

    def __init__(self, action: str, current_state: str):
        self.action = action
        self.current_state = current_state
        super().__init__(
            f"Cannot {action} a submission in state '{current_state}'"
        )


class DuplicateSubmissionError(LifecycleError):
    """The driver already submitted this month."""

    code: str = "DUPLICATE_SUBMISSION"

    def __init__(self, driver_id: str, year: int, month: int, current_state: str):
        self.driver_id = driver_id
        self.year = year
        self.month = month
        self.current_state = current_state
        super().__init__(
            f"Driver {driver_id} already submitted {year}-{month:02d} "
            f"(status: {current_state})"
        )


# Trip record locks


class RecordLockError(MileageError):
    """Base exception for trip-record mutations blocked by submission status."""

    code: str = "RECORD_LOCKED"

    def __init__(self, driver_id: str, year: int, month: int, message: str):
        self.driver_id = driver_id
        self.year = year
        self.month = month
        super().__init__(message)


class SettlementLockedError(RecordLockError):
    """The month is settled; its records can no longer change."""

    code: str = "SETTLEMENT_LOCKED"

    def __init__(self, driver_id: str, year: int, month: int):
        super().__init__(
            driver_id,
            year,
            month,
            f"{year}-{month:02d} is already settled; records cannot be added "
            f"or changed. Contact the administrator if a change is needed",
        )


class SubmissionPendingError(RecordLockError):
    """The month is submitted and under review."""

    code: str = "SUBMISSION_PENDING"

    def __init__(self, driver_id: str, year: int, month: int):
        super().__init__(
            driver_id,
            year,
            month,
            f"{year}-{month:02d} is submitted for settlement; cancel the "
            f"submission before changing its records",
        )
