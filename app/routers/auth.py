from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.actions import authenticate
from app.auth import sign_out
from app.core.responses import redirect_response
from app.schemas import Redirect

router = APIRouter(tags=["auth"])


@router.post("/login")
async def login(request: Request):
    form = await request.form()
    result = await authenticate(None, form)

    if isinstance(result, Redirect):
        return redirect_response(result)

    # mensaje ya mapeado por authenticate ("invalid authentication." / "an error occurred.")
    return JSONResponse(status_code=401, content={"message": result})


@router.post("/logout")
def logout():
    return redirect_response(sign_out())
