from enum import Enum


class ErrorKind(str, Enum):
    empty_input = "empty_input"
    network_error = "network_error"
    provider_error = "provider_error"
    address_not_found = "address_not_found"
    invalid_coordinates = "invalid_coordinates"
    ambiguous_location = "ambiguous_location"
    usage_fallback = "usage_fallback"
    superseded = "superseded"


class EstimateError(Exception):
    """Base for every failure the estimate flow can report.

    Callers branch on ``kind``; ``message`` is the text shown to the user.
    """

    kind: ErrorKind
    status_code: int = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyInput(EstimateError):
    kind = ErrorKind.empty_input
    status_code = 422
    default_message = "Please enter a valid address"


class NetworkError(EstimateError):
    kind = ErrorKind.network_error
    status_code = 502
    default_message = "Could not reach the data provider"


class ProviderError(EstimateError):
    kind = ErrorKind.provider_error
    status_code = 502
    default_message = "The data provider returned an error"

    def __init__(self, message: str | None = None, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class AddressNotFound(EstimateError):
    kind = ErrorKind.address_not_found
    status_code = 404
    default_message = "Address not found"


class InvalidCoordinates(EstimateError):
    kind = ErrorKind.invalid_coordinates
    status_code = 422
    default_message = "The address could not be placed on the map"


class AmbiguousLocation(EstimateError):
    kind = ErrorKind.ambiguous_location
    status_code = 422
    default_message = "Could not determine the city or region for this address"


class UsageFallback(EstimateError):
    """Raised inside the usage calculator only; never reaches the user."""

    kind = ErrorKind.usage_fallback
    default_message = "Energy data unavailable"


class Superseded(EstimateError):
    kind = ErrorKind.superseded
    status_code = 409
    default_message = "Superseded by a newer submission"
