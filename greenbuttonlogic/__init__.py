from . import (
    canon,
    config,
    exceptions,
    types,
    utils,
    ingest,
    transform,
    formats,
    validate,
    summary,
    export,
)

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "utils",
    "ingest",
    "transform",
    "formats",
    "validate",
    "summary",
    "export",
]
