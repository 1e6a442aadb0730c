"""
Error Taxonomy - classifies remote results into PublishOutcome values.

Create and submit results share result codes but not their meaning, so
each phase has its own table. Precedence in both phases:

1. I/O failure (the request never completed)
2. Legal agreement pending (overrides any result code, OK included)
3. OK
4. Phase table, then a generic failure naming the raw code
"""
from typing import Dict, Tuple, Union

from ..models import ErrorKind, OutcomeCategory, PublishOutcome, PublishPhase
from ..protocols import CreateItemResult, ResultCode, SubmitItemResult

LEGAL_AGREEMENT_URL = "https://steamcommunity.com/sharedfiles/workshoplegalagreement"
ITEM_URL_TEMPLATE = "https://steamcommunity.com/sharedfiles/filedetails/?id={item_id}"

IO_FAILURE_MESSAGE = "Error: I/O Failure!"
LEGAL_AGREEMENT_MESSAGE = (
    "You need to accept the Steam Workshop legal agreement for this game "
    "before you can upload items!"
)

CREATE_FAILURES: Dict[ResultCode, Tuple[ErrorKind, str]] = {
    ResultCode.INSUFFICIENT_PRIVILEGE: (
        ErrorKind.INSUFFICIENT_PRIVILEGE,
        "Error: Unfortunately, you're banned by the community from uploading to the workshop!",
    ),
    ResultCode.TIMEOUT: (ErrorKind.TIMEOUT, "Error: Timeout"),
    ResultCode.NOT_LOGGED_ON: (
        ErrorKind.NOT_LOGGED_ON,
        "Error: You're not logged into Steam!\nPlease restart Steam and retry.",
    ),
    ResultCode.BANNED: (
        ErrorKind.BANNED,
        "You don't have permission to upload content to this hub because you have "
        "an active VAC or Game ban.",
    ),
    ResultCode.SERVICE_UNAVAILABLE: (
        ErrorKind.SERVICE_UNAVAILABLE,
        "The workshop server hosting the content is having issues - please retry.",
    ),
    ResultCode.INVALID_PARAM: (
        ErrorKind.INVALID_PARAM,
        "One of the submission fields contains something not being accepted by that field.",
    ),
    ResultCode.ACCESS_DENIED: (
        ErrorKind.ACCESS_DENIED,
        "There was a problem trying to save the title and description. Access was denied.",
    ),
    ResultCode.LIMIT_EXCEEDED: (
        ErrorKind.QUOTA_EXCEEDED,
        "You have exceeded your Steam Cloud quota. Remove some items and try again.",
    ),
    ResultCode.FILE_NOT_FOUND: (ErrorKind.NOT_FOUND, "The uploaded file could not be found."),
    ResultCode.DUPLICATE_REQUEST: (
        ErrorKind.DUPLICATE_REQUEST,
        "The file was already successfully uploaded. Please refresh.",
    ),
    ResultCode.DUPLICATE_NAME: (
        ErrorKind.DUPLICATE_NAME,
        "You already have a Steam Workshop item with that name.",
    ),
    ResultCode.SERVICE_READ_ONLY: (
        ErrorKind.SERVICE_READ_ONLY,
        "Due to a recent password or email change, you are not allowed to upload new "
        "content. Usually this restriction will expire in 5 days, but can last up to "
        "30 days if the account has been inactive recently.",
    ),
}

SUBMIT_FAILURES: Dict[ResultCode, Tuple[ErrorKind, str]] = {
    ResultCode.FAIL: (ErrorKind.GENERIC_FAILURE, "Upload failed."),
    ResultCode.INVALID_PARAM: (
        ErrorKind.INVALID_PARAM,
        "Either the provided app ID is invalid or doesn't match the consumer app ID of "
        "the item or, you have not enabled ISteamUGC for the provided app ID on the "
        "Steam Workshop Configuration App Admin page. The preview file is smaller than 16 bytes.",
    ),
    ResultCode.ACCESS_DENIED: (
        ErrorKind.ACCESS_DENIED,
        "ERROR: The user doesn't own a license for the provided app ID.",
    ),
    ResultCode.FILE_NOT_FOUND: (
        ErrorKind.NOT_FOUND,
        "Failed to get the workshop info for the item or failed to read the preview "
        "file.\nDid you manually delete the item from the workshop?",
    ),
    ResultCode.LOCKING_FAILED: (ErrorKind.LOCKING_FAILED, "Failed to acquire UGC Lock."),
    ResultCode.LIMIT_EXCEEDED: (
        ErrorKind.QUOTA_EXCEEDED,
        "The preview image is too large, it must be less than 1 Megabyte; or there is "
        "not enough space available on the users Steam Cloud.",
    ),
}

_SUCCESS_MESSAGES = {
    PublishPhase.CREATE: "Item creation successful! Published Item ID: {item_id}",
    PublishPhase.SUBMIT: "Item update successful! Published Item ID: {item_id}",
}

_GENERIC_MESSAGES = {
    PublishPhase.CREATE: "Item creation failed (result code {code}).",
    PublishPhase.SUBMIT: "Item update failed (result code {code}).",
}

_TABLES = {
    PublishPhase.CREATE: CREATE_FAILURES,
    PublishPhase.SUBMIT: SUBMIT_FAILURES,
}


def item_url(item_id: int) -> str:
    return ITEM_URL_TEMPLATE.format(item_id=item_id)


def _coerce(code: int) -> Union[ResultCode, int]:
    try:
        return ResultCode(code)
    except ValueError:
        return int(code)


def transport_failure(phase: PublishPhase, detail: str = "") -> PublishOutcome:
    """Outcome for a request that never delivered a result."""
    message = f"{IO_FAILURE_MESSAGE} ({detail})" if detail else IO_FAILURE_MESSAGE
    return PublishOutcome.fail(phase, OutcomeCategory.TRANSPORT, ErrorKind.IO_FAILURE, message)


def legal_agreement_required(phase: PublishPhase) -> PublishOutcome:
    return PublishOutcome.fail(
        phase,
        OutcomeCategory.LEGAL_AGREEMENT,
        ErrorKind.LEGAL_AGREEMENT_REQUIRED,
        LEGAL_AGREEMENT_MESSAGE,
        url=LEGAL_AGREEMENT_URL,
    )


def _classify(
    phase: PublishPhase,
    result_code: int,
    item_id: int,
    legal_agreement_pending: bool,
    io_failure: bool,
) -> PublishOutcome:
    if io_failure:
        return transport_failure(phase)

    if legal_agreement_pending:
        return legal_agreement_required(phase)

    code = _coerce(result_code)
    if code == ResultCode.OK:
        return PublishOutcome.ok(
            phase,
            item_id=item_id,
            message=_SUCCESS_MESSAGES[phase].format(item_id=item_id),
            url=item_url(item_id),
        )

    if code in _TABLES[phase]:
        kind, message = _TABLES[phase][code]
    else:
        kind, message = ErrorKind.GENERIC_FAILURE, _GENERIC_MESSAGES[phase].format(code=int(code))
    return PublishOutcome.fail(phase, OutcomeCategory.REMOTE_REJECTION, kind, message)


def classify_create_result(result: CreateItemResult) -> PublishOutcome:
    return _classify(
        PublishPhase.CREATE,
        result.result_code,
        result.item_id,
        result.legal_agreement_pending,
        result.io_failure,
    )


def classify_submit_result(result: SubmitItemResult) -> PublishOutcome:
    return _classify(
        PublishPhase.SUBMIT,
        result.result_code,
        result.item_id,
        result.legal_agreement_pending,
        result.io_failure,
    )
