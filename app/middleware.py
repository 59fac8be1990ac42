"""Session middleware: load the server-side session for every request."""
from fastapi import Request

from app.core.config import get_settings
from app.core.security import sign_session_id, unsign_session_id


async def session_middleware(request: Request, call_next):
    settings = get_settings()
    store = request.app.state.session_store

    sid = unsign_session_id(request.cookies.get(settings.session_cookie_name))
    session = store.load(sid) if sid else None
    if session is None:
        session = store.create()
    request.state.session = session

    response = await call_next(request)

    store.save(session)
    # anonymous sessions with nothing in them are not kept, so no cookie either
    if session.id != sid and session.id in store:
        response.set_cookie(
            key=settings.session_cookie_name,
            value=sign_session_id(session.id),
            max_age=settings.session_cookie_max_age,
            httponly=True,
            samesite="lax",
            path="/",
        )
    return response
