# =============================================================================
# marina_core/errors/handlers.py
# Error Handling Utilities for the Streamlit surface
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional
import streamlit as st

from marina_core.logging import get_logger
from .exceptions import MarinaError, LockedError

logger = get_logger(__name__)


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        show_user_message: Whether to display the error to the operator
        log_error: Whether to log the error
        user_message: Custom message to show (uses the error message if None)
    """
    if isinstance(error, MarinaError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=not isinstance(error, LockedError),
        )

    if show_user_message:
        if isinstance(error, LockedError):
            st.warning(f"🔒 {message}")
        elif recoverable:
            st.error(f"Error: {message}")
        else:
            st.error(f"Critical Error: {message}. Please contact support.")

        if details and st.session_state.get("debug_mode", False):
            with st.expander("Error Details", expanded=False):
                st.json(details)


class ErrorContext:
    """
    Context manager for operator actions with logging and user feedback.

    Usage:
        with ErrorContext("Switching to production data"):
            mode_store.set_mode(DataSourceMode.DATABASE)

        # On error, logs and shows: "Error during: Switching to production data"
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_success: bool = False,
        success_message: Optional[str] = None,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_success = show_success
        self.success_message = success_message
        self.failed = False

    def __enter__(self) -> ErrorContext:
        logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.failed = True
            if isinstance(exc_val, MarinaError):
                handle_error(exc_val)
            else:
                handle_error(
                    exc_val,
                    user_message=f"Error during: {self.operation}",
                )

            return self.recoverable

        logger.info(f"Completed: {self.operation}")
        if self.show_success:
            st.success(self.success_message or f"{self.operation} completed")

        return False
