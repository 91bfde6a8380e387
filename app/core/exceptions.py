# app/core/exceptions.py

from typing import Optional


class AppError(Exception):
    """Base error rendered as ``{"success": false, "error": code, "detail": ...}``."""

    status_code: int = 500
    code: str = "server_error"
    default_detail: str = "Server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidTimeframe(AppError):
    status_code = 400
    code = "invalid_timeframe"
    default_detail = "Unsupported timeframe"


class AggregationFailed(AppError):
    status_code = 500
    code = "aggregation_failed"
    default_detail = "Could not compute net worth data"


class NoDataToShare(AppError):
    status_code = 400
    code = "no_data_to_share"
    default_detail = "There is no net worth data to share yet. Connect an account first."


class ShareNotFound(AppError):
    status_code = 404
    code = "not_found"
    default_detail = "Shared chart not found or no longer available"


class ShareExpired(AppError):
    status_code = 410
    code = "expired"
    default_detail = "This shared chart has expired"


class ShareForbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_detail = "You do not have permission to modify this shared chart"


class AccountNotFound(AppError):
    status_code = 404
    code = "not_found"
    default_detail = "Account not found"


class ShareSaveFailed(AppError):
    status_code = 500
    code = "share_save_failed"
    default_detail = "Could not save the shared chart, please try again"
