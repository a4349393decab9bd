"""
Cloud Functions for Firebase entry points

Deployed with the Firebase CLI (Python runtime). Exposes:
- delete_user_account      callable; deletes the signed-in user's account
- record_activity          callable; refreshes lastActive / detects new users
- sweep_inactive_accounts  scheduled; deletes idle guest accounts

These are thin adapters: they turn the platform's request objects into
AuthenticatedCaller values, run the async flows to completion, and map
lifecycle error codes onto callable error codes.
"""

import asyncio
from typing import Any, Optional

import structlog
from firebase_functions import https_fn, scheduler_fn

from pocket_ledger.config import get_settings, validate_all_settings
from pocket_ledger.lifecycle import AccountLifecycleError, ErrorCode
from pocket_ledger.models.account import AuthenticatedCaller
from pocket_ledger.orchestrator import create_app_components


logger = structlog.get_logger("pocket_ledger.functions")

SETUP_FAILED_MESSAGE = "The service is temporarily unavailable."

_ERROR_CODES = {
    ErrorCode.UNAUTHENTICATED: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    ErrorCode.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    ErrorCode.INTERNAL: https_fn.FunctionsErrorCode.INTERNAL,
}


class ConfigurationError(Exception):
    """One or more settings sections failed validation."""
    pass


def build_components():
    """
    Check every settings section, then wire the lifecycle components.

    Raises:
        ConfigurationError: If any settings section is invalid
    """
    status = validate_all_settings()
    invalid = {
        name: status[f"{name}_error"]
        for name in ("firebase", "sweep", "app")
        if not status[name]
    }
    if invalid:
        raise ConfigurationError(f"Invalid settings: {invalid}")
    return create_app_components()


def caller_from_request(req: https_fn.CallableRequest) -> Optional[AuthenticatedCaller]:
    """The verified session of a callable request, or None if unauthenticated."""
    if req.auth is None or not req.auth.uid:
        return None
    return AuthenticatedCaller(uid=req.auth.uid, token=dict(req.auth.token or {}))


def to_https_error(error: AccountLifecycleError) -> https_fn.HttpsError:
    """Map a lifecycle failure onto the callable error the client sees."""
    return https_fn.HttpsError(
        code=_ERROR_CODES.get(error.code, https_fn.FunctionsErrorCode.INTERNAL),
        message=error.message,
    )


def _components_for_callable(function_name: str):
    try:
        return build_components()
    except Exception as e:
        logger.error("component_setup_failed", function=function_name, error=str(e))
        raise https_fn.HttpsError(
            code=https_fn.FunctionsErrorCode.INTERNAL,
            message=SETUP_FAILED_MESSAGE,
        ) from e


@https_fn.on_call()
def delete_user_account(req: https_fn.CallableRequest) -> dict[str, Any]:
    deletion_flow, _, _ = _components_for_callable("delete_user_account")
    try:
        result = asyncio.run(
            deletion_flow.delete_account(caller_from_request(req), req.data)
        )
    except AccountLifecycleError as e:
        raise to_https_error(e) from e
    return result.to_response()


@https_fn.on_call()
def record_activity(req: https_fn.CallableRequest) -> dict[str, Any]:
    _, _, activity_recorder = _components_for_callable("record_activity")
    try:
        result = asyncio.run(activity_recorder.record_activity(caller_from_request(req)))
    except AccountLifecycleError as e:
        raise to_https_error(e) from e
    return result.to_response()


@scheduler_fn.on_schedule(schedule=get_settings().sweep.schedule)
def sweep_inactive_accounts(event: scheduler_fn.ScheduledEvent) -> None:
    try:
        _, sweep, _ = build_components()
    except Exception as e:
        # Nothing to report to; the next scheduled run tries again
        logger.error("component_setup_failed", function="sweep_inactive_accounts", error=str(e))
        return
    asyncio.run(sweep.run())
