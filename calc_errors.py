#!/usr/bin/env python3
# calc_errors.py
# Error taxonomy for the lighting calculator. Every error carries a short
# machine-readable code that ends up in the {"type": "error"} reply.

from __future__ import annotations


class LightingError(Exception):
    code = "internal_error"


class LightingInputError(LightingError, ValueError):
    """Missing fields, wrong types, non-finite numbers, unknown units."""
    code = "invalid_input"


class DegenerateInputError(LightingError, ValueError):
    """Inputs that are well-formed but make the math undefined
    (no fixtures, zero area, a source sitting on a sample point)."""
    code = "degenerate_input"


class UnsupportedOperationError(LightingError):
    code = "unsupported_operation"


def error_code(exc: BaseException) -> str:
    return getattr(exc, "code", LightingError.code)
