from .access_event_assert import AccessEventAssert, assert_that, request_line

__all__ = ["AccessEventAssert", "assert_that", "request_line"]
