from typing import Any, Dict, Optional


class AppError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class StoreError(AppError):
    """Falla del store relacional (constraint, conexión, tabla inexistente...)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="DATABASE_ERROR",
            message=message,
            status_code=500,
            details=details,
        )


class AuthError(Exception):
    """
    Error tipado del proveedor de credenciales.
    `type` discrimina el motivo (ej: "CredentialsSignin").
    """

    def __init__(self, type: str, message: Optional[str] = None):
        self.type = type
        super().__init__(message or type)


def error_body(
    *,
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "request_id": request_id,
        }
    }
    if details is not None:
        body["details"] = details
    return body
