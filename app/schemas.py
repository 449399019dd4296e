from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Literal, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ---------- Invoice ----------
# Tope en unidades mayores: amount * 100 tiene que entrar en un INTEGER de sqlite (int64)
MAX_AMOUNT = 10**15

# Un mensaje fijo por campo, sin importar qué regla falló
FIELD_MESSAGES: Dict[str, str] = {
    "customerId": "please select a customer.",
    "amount": "please enter a number greater than $0.",
    "status": "please select a status.",
}


class CreateInvoice(BaseModel):
    """Campos que envía el formulario; `id` y `date` los pone la operación."""

    model_config = ConfigDict(extra="ignore")

    customerId: str = Field(min_length=1)
    # lax mode: "12.50" -> 12.5; "inf", "nan" y montos gigantes se rechazan
    amount: float = Field(gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    status: Literal["pending", "paid"]


# Update valida exactamente lo mismo que create
UpdateInvoice = CreateInvoice


class InvoiceForm(CreateInvoice):
    id: str
    date: str


class LoginForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)


# ---------- Resultados ----------
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ValidationResult(Generic[M]):
    success: bool
    data: Optional[M] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: Optional[str] = None


def _flatten_errors(exc: ValidationError) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        name = str(loc[0]) if loc else "_form"
        msg = FIELD_MESSAGES.get(name, err.get("msg", "invalid value"))
        msgs = out.setdefault(name, [])
        if msg not in msgs:
            msgs.append(msg)
    return out


def safe_parse(
    model: Type[M],
    raw: Mapping[str, Any],
    message: Optional[str] = None,
) -> ValidationResult[M]:
    """
    Valida sin lanzar: siempre devuelve un ValidationResult.
    En caso de error, `errors` = {campo: [mensajes]} y `message` = resumen
    (el que pasa quien llama, o uno genérico).
    """
    try:
        data = model.model_validate(dict(raw))
    except ValidationError as exc:
        return ValidationResult(
            success=False,
            errors=_flatten_errors(exc),
            message=message or "invalid fields.",
        )
    return ValidationResult(success=True, data=data)


class FormState(BaseModel):
    """Lo que vuelve a la vista después de un submit. No se persiste."""

    errors: Optional[Dict[str, List[str]]] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Redirect:
    """
    Transferencia de control a otra ruta.
    Se convierte en 303 recién en el borde HTTP (app/core/responses.py).
    """

    to: str
    cookies: Dict[str, str] = field(default_factory=dict)
    clear_cookies: Tuple[str, ...] = ()
