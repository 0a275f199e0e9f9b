# dense/errors.py
from __future__ import annotations


class DenseLayerError(Exception):
    """Base class for every precondition failure raised by the dense engine."""


class DimensionMismatchError(DenseLayerError, ValueError):
    """Matrix operand shapes are incompatible."""


class LengthMismatchError(DenseLayerError, ValueError):
    """Vector length does not match the layer width it is fed to."""


class InvalidArgumentError(DenseLayerError, ValueError):
    """Non-positive count, out-of-range rate or unknown tag."""


class MissingConfigurationError(DenseLayerError, RuntimeError):
    """Builder asked to build without a required field."""


class WorkerPoolError(DenseLayerError, RuntimeError):
    """A reduction unit timed out or was cancelled."""


class CellIndexError(DenseLayerError, IndexError):
    pass
