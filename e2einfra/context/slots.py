"""Named slots of the per-unit execution context."""

from enum import Enum


class Slot(Enum):
    """Slots a unit's execution context can hold."""

    PAGE = "page"
    BROWSER_CONTEXT = "browser_context"
    SCOPED_RESOURCE = "scoped_resource"
    UNIT_NAME = "unit_name"

    # Captured API exchange, attached to the report when the unit ends
    API_REQUEST = "api_request"
    API_RESPONSE = "api_response"
    API_RESPONSE_STATUS = "api_response_status"


API_SLOTS = (Slot.API_REQUEST, Slot.API_RESPONSE, Slot.API_RESPONSE_STATUS)
