from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from fastapi import Depends, FastAPI, Header, Query, Request, Response, status
from fastapi.responses import JSONResponse

from music_player.auth import TOKEN_HEADER, AuthError, TokenResolver
from music_player.models import User
from music_player.playlists import PlaylistError, PlaylistManager

logger = logging.getLogger(__name__)

PRIVATE_PREFIX = "/api/playlist"


async def read_payload(request: Request) -> Dict[str, Any]:
    """Return the request body as a dict.

    JSON objects are taken as-is; anything that does not decode as JSON is
    read as a urlencoded form, with or without a form content type. Empty
    or non-object bodies come back as an empty dict so that the
    required-field checks report them.
    """
    body = await request.body()
    if not body:
        return {}
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("application/x-www-form-urlencoded"):
        try:
            payload = await request.json()
        except ValueError:
            pass
        else:
            return payload if isinstance(payload, dict) else {}
    return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))


def build_app(
    *,
    resolver: TokenResolver,
    manager: PlaylistManager,
) -> FastAPI:
    app = FastAPI(title="Music Player API")

    @app.middleware("http")
    async def auth_gate_middleware(request: Request, call_next):
        # Runs before routing so unknown methods and paths under the prefix also get 401.
        if request.url.path.startswith(PRIVATE_PREFIX):
            token = request.headers.get(TOKEN_HEADER) or request.query_params.get(TOKEN_HEADER)
            try:
                request.state.user = await resolver.authenticate(token)
            except AuthError as exc:
                return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)
        return await call_next(request)

    @app.middleware("http")
    async def request_tracing_middleware(request: Request, call_next):
        request_id = uuid.uuid4().hex[:8]
        method = request.method
        path = request.url.path
        logger.info("REQ_START %s %s %s", request_id, method, path)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as err:
            logger.error("REQ_ERR %s %s %s %s", request_id, method, path, err)
            raise
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "REQ_END %s %s %s %s %.2fms",
            request_id,
            method,
            path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(PlaylistError)
    async def playlist_error_handler(request: Request, exc: PlaylistError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)

    async def current_user(
        request: Request,
        token_header: Optional[str] = Header(default=None, alias=TOKEN_HEADER),
        token_query: Optional[str] = Query(default=None, alias=TOKEN_HEADER),
    ) -> User:
        user = getattr(request.state, "user", None)
        if user is None:
            user = await resolver.authenticate(token_header or token_query)
        return user

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/api/users/authentication")
    async def authenticate():
        token = await resolver.issue()
        return JSONResponse({"token": token})

    @app.get("/api/playlist")
    async def list_playlists(user: User = Depends(current_user)):
        playlists = await manager.list_playlists(user)
        return JSONResponse({"playlist": [playlist.to_public_dict() for playlist in playlists]})

    @app.get("/api/playlist/{playlist_id}")
    async def get_playlist(playlist_id: str, user: User = Depends(current_user)):
        playlist = await manager.get_playlist(user, playlist_id)
        # Absent and foreign playlists read as an empty payload, not 404.
        return JSONResponse({"playlist": playlist.to_public_dict() if playlist else {}})

    @app.post("/api/playlist")
    async def create_playlist(request: Request, user: User = Depends(current_user)):
        payload = await read_payload(request)
        playlist = await manager.create_playlist(user, payload.get("name"))
        return JSONResponse({"playlist": playlist.to_public_dict()}, status_code=status.HTTP_201_CREATED)

    @app.put("/api/playlist/{playlist_id}")
    async def rename_playlist(playlist_id: str, request: Request, user: User = Depends(current_user)):
        payload = await read_payload(request)
        await manager.rename_playlist(user, playlist_id, payload.get("newName"))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/api/playlist/{playlist_id}")
    async def delete_playlist(playlist_id: str, user: User = Depends(current_user)):
        await manager.delete_playlist(user, playlist_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.put("/api/playlist/{playlist_id}/song")
    async def add_song(playlist_id: str, request: Request, user: User = Depends(current_user)):
        payload = await read_payload(request)
        song = await manager.add_song(
            user,
            playlist_id,
            track=payload.get("track"),
            artist=payload.get("artist"),
            album=payload.get("album"),
        )
        return JSONResponse({"song": song.to_dict()}, status_code=status.HTTP_201_CREATED)

    @app.delete("/api/playlist/{playlist_id}/song/{song_id}")
    async def delete_song(playlist_id: str, song_id: str, user: User = Depends(current_user)):
        await manager.delete_song(user, playlist_id, song_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
