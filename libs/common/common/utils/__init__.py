from .json_model import JsonModel, JsonSnakeCaseModel
from .msgspec import SerializationError, decode_json, encode_json, encode_json_str
from .utils import (
    BestEffortResult,
    ContextVarManager,
    deep_merge,
    get_logger,
    run_best_effort,
    use_context_var,
)

__all__ = [
    "BestEffortResult",
    "ContextVarManager",
    "JsonModel",
    "JsonSnakeCaseModel",
    "SerializationError",
    "decode_json",
    "deep_merge",
    "encode_json",
    "encode_json_str",
    "get_logger",
    "run_best_effort",
    "use_context_var",
]
