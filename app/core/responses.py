from fastapi.responses import JSONResponse, RedirectResponse

from app.core.config import get_settings
from app.schemas import FormState, Redirect


def redirect_response(redirect: Redirect) -> RedirectResponse:
    # 303: el browser hace GET al destino después del POST del form
    response = RedirectResponse(url=redirect.to, status_code=303)

    secure = get_settings().cookie_secure
    for name, value in redirect.cookies.items():
        response.set_cookie(
            key=name,
            value=value,
            httponly=True,
            samesite="lax",
            secure=secure,
            max_age=get_settings().session_ttl_minutes * 60,
        )
    for name in redirect.clear_cookies:
        response.delete_cookie(key=name)
    return response


def form_state_response(state: FormState) -> JSONResponse:
    return JSONResponse(
        status_code=422 if state.errors else 200,
        content=state.model_dump(),
    )


def action_response(result):
    """Borde HTTP de una acción: Redirect -> 303, FormState -> JSON."""
    if isinstance(result, Redirect):
        return redirect_response(result)
    return form_state_response(result)
