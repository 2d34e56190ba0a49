"""faultline -- outcome values with diagnostic context.

Example:
    >>> import faultline
    >>> result = faultline.annotate(faultline.Err("db_timeout"), "fetching user", {"user_id": 123})
    >>> faultline.unwrap_chain(result).reason
    'db_timeout'
"""

from faultline.core import (
    NOTHING,
    CallSiteResolver,
    ContextFrame,
    Describable,
    Err,
    ErrorCategory,
    FaultlineError,
    InvalidCallbackReturn,
    InvalidOutcomeShape,
    Ok,
    Outcome,
    ProgrammingError,
    ShrinkOptions,
    Unwrapped,
    UnwrapError,
    WrappedError,
    all_succeed,
    annotate,
    chain,
    chain_unsafe,
    find_first_success,
    is_err,
    is_ok,
    map_all,
    map_each,
    recover,
    render,
    render_message,
    run,
    run_unsafe,
    shrink,
    unwrap_chain,
    validate,
)
from faultline.core.settings import FaultlineSettings
from faultline.report import Reporter, configure, get_reporter, log, user_message

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Outcomes
    "Ok",
    "Err",
    "Outcome",
    "NOTHING",
    "validate",
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
    "annotate",
    "unwrap_chain",
    "render_message",
    "ContextFrame",
    "WrappedError",
    "Unwrapped",
    # Shrinking
    "shrink",
    "render",
    "ShrinkOptions",
    "Describable",
    # Facade
    "log",
    "user_message",
    "configure",
    "get_reporter",
    "Reporter",
    "FaultlineSettings",
    "CallSiteResolver",
    # Errors
    "ErrorCategory",
    "FaultlineError",
    "ProgrammingError",
    "InvalidOutcomeShape",
    "InvalidCallbackReturn",
    "UnwrapError",
]
