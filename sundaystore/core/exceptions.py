from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Missing or unreadable actor identity"""
    def __init__(self, message: str = "Authentication required", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )


class AuthorizationError(BaseAPIException):
    """Actor role not allowed for the operation"""
    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details
        )


class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )


class InvalidTransitionError(BaseAPIException):
    """Action not legal for the order's current status"""
    def __init__(self, order_id: int, current_status: str, action: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="ORDER_001",
            message=f"Cannot {action} order {order_id} in status '{current_status}'",
            details={
                "order_id": order_id,
                "current_status": current_status,
                "action": action,
            }
        )


class InsufficientFundsError(BaseAPIException):
    """Debit would make the wallet balance negative"""
    def __init__(self, currency: str, required: Any, available: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_001",
            message=f"Insufficient {currency}. Required: {required}, Available: {available}",
            details={
                "currency": currency,
                "required": str(required),
                "available": str(available),
            }
        )


class InsufficientStockError(BaseAPIException):
    """Decrement would make stock negative"""
    def __init__(self, store_item_id: int, requested: int, available: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="STOCK_001",
            message=f"Out of stock for item {store_item_id}. Requested: {requested}, Available: {available}",
            details={
                "store_item_id": store_item_id,
                "requested": requested,
                "available": available,
            }
        )


class ExceedsMaxAdjustmentError(BaseAPIException):
    """Teacher adjustment larger than the church's cap"""
    def __init__(self, delta: int, max_adjustment: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="POINTS_001",
            message=f"Adjustment exceeds maximum limit of {max_adjustment} points",
            details={"delta": delta, "max_adjustment": max_adjustment}
        )


class FeatureDisabledError(BaseAPIException):
    """Points feature switched off in the church configuration"""
    def __init__(self, feature: str, church_id: Optional[int] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="POINTS_002",
            message=f"{feature} is disabled for this church",
            details={"feature": feature, "church_id": church_id}
        )


class ReferenceConflictError(BaseAPIException):
    """Ledger reference already used for a different amount or currency"""
    def __init__(self, reference_id: str, reason: str, existing_amount: Any, requested_amount: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="LEDGER_001",
            message=f"Reference '{reference_id}' for {reason} was already applied with a different amount",
            details={
                "reference_id": reference_id,
                "reason": reason,
                "existing_amount": str(existing_amount),
                "requested_amount": str(requested_amount),
            }
        )
