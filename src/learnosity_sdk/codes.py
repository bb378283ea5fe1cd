"""Code constants for learnosity_sdk.

These enums prevent stringly-typed service names and JSON error codes
and ensure client code uses the values the APIs recognise.
"""

from enum import Enum


class Service(str, Enum):
    """Learnosity services a request can be signed for."""

    ASSESS = "assess"
    AUTHOR = "author"
    DATA = "data"
    EVENTS = "events"
    ITEMS = "items"
    QUESTIONS = "questions"
    REPORTS = "reports"


class JsonErrorCode(str, Enum):
    """Failure taxonomy for canonical JSON encode/decode."""

    NONE = "NONE"
    DEPTH = "DEPTH"
    STATE_MISMATCH = "STATE_MISMATCH"
    CTRL_CHAR = "CTRL_CHAR"
    SYNTAX = "SYNTAX"
    UTF8 = "UTF8"
    UNKNOWN = "UNKNOWN"
