"""faultline core -- outcomes, context chains, and value shrinking.

Manifesto:
    Expected failures are values. ``faultline.core`` gives them a closed
    shape (``Ok`` / ``Err``), a way to compose them without nested ``if``
    ladders, and a way to record what was going on as they travel up the
    stack, so that by the time someone reads the log line it says more than
    ``KeyError: 'id'``.

    - **Closed shape:** Everything else is rejected at the boundary
    - **Failures are data:** Annotated, not raised
    - **No hidden config:** Nothing here reads settings on its own

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Error taxonomy (ProgrammingError, InvalidOutcomeShape)
        result.py          Ok / Err, validate, coerce

    Layer 2 -- Diagnostics
        stacktrace.py      Stack capture + call-site resolution
        shrink.py          Value shrinking and rendering
        context.py         ContextFrame, WrappedError, annotate
        details.py         Outcome details for log adapters

    Layer 3 -- Composition
        combinators.py     run / chain / recover / map_all / ...

    Ambient
        settings.py        FaultlineSettings (pydantic-settings)
        logging.py         structlog configuration helpers

Tags:
    faultline, core, outcomes, error-handling

Doc-Types:
    - Package Overview
"""

from faultline.core.combinators import (
    all_succeed,
    chain,
    chain_unsafe,
    find_first_success,
    map_all,
    map_each,
    recover,
    run,
    run_unsafe,
)
from faultline.core.context import (
    ContextFrame,
    Unwrapped,
    WrappedError,
    annotate,
    render_message,
    unwrap_chain,
)
from faultline.core.errors import (
    ErrorCategory,
    FaultlineError,
    InvalidCallbackReturn,
    InvalidOutcomeShape,
    ProgrammingError,
    UnwrapError,
    categorize_error,
)
from faultline.core.result import NOTHING, Err, Ok, Outcome, coerce, is_err, is_ok, validate
from faultline.core.shrink import Describable, ShrinkOptions, render, shrink
from faultline.core.stacktrace import CallSite, CallSiteResolver, StackEntry

__all__ = [
    # Outcomes
    "Ok",
    "Err",
    "Outcome",
    "NOTHING",
    "validate",
    "coerce",
    "is_ok",
    "is_err",
    # Combinators
    "run",
    "run_unsafe",
    "chain",
    "chain_unsafe",
    "recover",
    "map_all",
    "map_each",
    "find_first_success",
    "all_succeed",
    # Context
    "ContextFrame",
    "WrappedError",
    "Unwrapped",
    "annotate",
    "unwrap_chain",
    "render_message",
    # Shrinking
    "Describable",
    "ShrinkOptions",
    "shrink",
    "render",
    # Call sites
    "StackEntry",
    "CallSite",
    "CallSiteResolver",
    # Errors
    "ErrorCategory",
    "FaultlineError",
    "ProgrammingError",
    "InvalidOutcomeShape",
    "InvalidCallbackReturn",
    "UnwrapError",
    "categorize_error",
]
