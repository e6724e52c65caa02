"""Completion codes and the post-decode status check.

The completion code is the first byte of every IPMI response. Zero means
success; the nonzero values below are the generic codes defined in
section 5.2 of the IPMI v2.0 specification. Command-specific codes
(0x80-0xBE) fall outside this table and are reported numerically.
"""

from __future__ import annotations

from enum import IntEnum

from .errors import DeviceError


class CompletionCode(IntEnum):
    """Generic completion codes."""

    OK = 0x00
    NODE_BUSY = 0xC0
    INVALID_COMMAND = 0xC1
    INVALID_COMMAND_FOR_LUN = 0xC2
    TIMEOUT = 0xC3
    OUT_OF_SPACE = 0xC4
    RESERVATION_CANCELLED = 0xC5
    REQUEST_DATA_TRUNCATED = 0xC6
    REQUEST_DATA_LENGTH_INVALID = 0xC7
    REQUEST_DATA_FIELD_LENGTH_LIMIT_EXCEEDED = 0xC8
    PARAMETER_OUT_OF_RANGE = 0xC9
    CANNOT_RETURN_REQUESTED_BYTES = 0xCA
    REQUESTED_DATA_NOT_PRESENT = 0xCB
    INVALID_DATA_FIELD = 0xCC
    COMMAND_ILLEGAL_FOR_SENSOR = 0xCD
    RESPONSE_NOT_PROVIDED = 0xCE
    DUPLICATED_REQUEST = 0xCF
    SDR_REPOSITORY_IN_UPDATE = 0xD0
    FIRMWARE_UPDATE_MODE = 0xD1
    BMC_INITIALIZING = 0xD2
    DESTINATION_UNAVAILABLE = 0xD3
    INSUFFICIENT_PRIVILEGE = 0xD4
    NOT_SUPPORTED_IN_PRESENT_STATE = 0xD5
    SUBFUNCTION_DISABLED = 0xD6
    UNSPECIFIED_ERROR = 0xFF


_DESCRIPTIONS: dict[CompletionCode, str] = {
    CompletionCode.OK: "command completed normally",
    CompletionCode.NODE_BUSY: "node busy",
    CompletionCode.INVALID_COMMAND: "invalid command",
    CompletionCode.INVALID_COMMAND_FOR_LUN: "command invalid for given LUN",
    CompletionCode.TIMEOUT: "timeout while processing command",
    CompletionCode.OUT_OF_SPACE: "out of space",
    CompletionCode.RESERVATION_CANCELLED: "reservation cancelled or invalid",
    CompletionCode.REQUEST_DATA_TRUNCATED: "request data truncated",
    CompletionCode.REQUEST_DATA_LENGTH_INVALID: "request data length invalid",
    CompletionCode.REQUEST_DATA_FIELD_LENGTH_LIMIT_EXCEEDED: "request data field length limit exceeded",
    CompletionCode.PARAMETER_OUT_OF_RANGE: "parameter out of range",
    CompletionCode.CANNOT_RETURN_REQUESTED_BYTES: "cannot return number of requested data bytes",
    CompletionCode.REQUESTED_DATA_NOT_PRESENT: "requested sensor, data, or record not present",
    CompletionCode.INVALID_DATA_FIELD: "invalid data field in request",
    CompletionCode.COMMAND_ILLEGAL_FOR_SENSOR: "command illegal for specified sensor or record type",
    CompletionCode.RESPONSE_NOT_PROVIDED: "command response could not be provided",
    CompletionCode.DUPLICATED_REQUEST: "cannot execute duplicated request",
    CompletionCode.SDR_REPOSITORY_IN_UPDATE: "SDR repository in update mode",
    CompletionCode.FIRMWARE_UPDATE_MODE: "device in firmware update mode",
    CompletionCode.BMC_INITIALIZING: "BMC initialization in progress",
    CompletionCode.DESTINATION_UNAVAILABLE: "destination unavailable",
    CompletionCode.INSUFFICIENT_PRIVILEGE: "insufficient privilege level",
    CompletionCode.NOT_SUPPORTED_IN_PRESENT_STATE: "command not supported in present state",
    CompletionCode.SUBFUNCTION_DISABLED: "command sub-function disabled or unavailable",
    CompletionCode.UNSPECIFIED_ERROR: "unspecified error",
}


def describe(code: int) -> str | None:
    """Return the human-readable name of ``code``, or ``None`` if unknown."""
    try:
        return _DESCRIPTIONS[CompletionCode(code)]
    except ValueError:
        return None


def check_completion(response):
    """Raise :class:`DeviceError` if ``response`` carries a failure status.

    Returns the response unchanged on success so the call can be chained.
    """
    code = response.completion_code
    if code != CompletionCode.OK:
        raise DeviceError(code, describe(code), response)
    return response
