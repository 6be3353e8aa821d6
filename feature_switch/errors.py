# feature_switch/errors.py
from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass


class ErrorCode(Enum):
    """Canonical error codes for configuration and CLI failures"""
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"


@dataclass
class FeatureSwitchError(Exception):
    """Structured error with code, message, and optional details"""
    code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a plain dictionary"""
        response = {
            "error_code": self.code.value,
            "message": self.message
        }

        if self.details:
            response["details"] = self.details

        return response


# Error factory functions
def config_not_found_error(path: str) -> FeatureSwitchError:
    """Create a missing configuration file error"""
    return FeatureSwitchError(
        code=ErrorCode.CONFIG_NOT_FOUND,
        message=f"Configuration file '{path}' not found",
        details={"path": path}
    )


def config_invalid_error(path: str, reason: str) -> FeatureSwitchError:
    """Create an invalid configuration error"""
    return FeatureSwitchError(
        code=ErrorCode.CONFIG_INVALID,
        message=f"Configuration file '{path}' is invalid: {reason}",
        details={"path": path, "reason": reason}
    )


def source_not_found_error(path: str) -> FeatureSwitchError:
    """Create a missing source file error"""
    return FeatureSwitchError(
        code=ErrorCode.SOURCE_NOT_FOUND,
        message=f"Source file '{path}' not found",
        details={"path": path}
    )
