"""Package operators for executing installation and removal actions.

This module provides the package-action interface and its winget
implementation.
"""

from wingetctl.operators.base import OperationCanceledError, Operator, OperatorError
from wingetctl.operators.winget import WingetOperator

__all__ = ["OperationCanceledError", "Operator", "OperatorError", "WingetOperator"]
