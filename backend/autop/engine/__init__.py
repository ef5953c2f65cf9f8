from autop.engine.adapter import (
    ENGINE_NAMES,
    RegexEngine,
    RegexModuleEngine,
    StdlibEngine,
    UnknownEngineError,
    get_engine,
    normalize_engine_name,
)

__all__ = [
    "ENGINE_NAMES",
    "RegexEngine",
    "RegexModuleEngine",
    "StdlibEngine",
    "UnknownEngineError",
    "get_engine",
    "normalize_engine_name",
]
