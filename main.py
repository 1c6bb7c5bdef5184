import logging

import socketio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from constants import CORS_ALLOWED_ORIGINS, HOST, LOG_LEVEL, PORT, SYNC_STRATEGY
from room_directory import RoomDirectory
from session_handler import RoomSessionHandler
from socket_manager import SocketSessionManager
from sync_strategy import make_sync_strategy

logging.basicConfig(level=LOG_LEVEL)

# python-socketio는 전체 허용을 "*" 문자열로만 인식
sio_origins = "*" if "*" in CORS_ALLOWED_ORIGINS else CORS_ALLOWED_ORIGINS

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=sio_origins)

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

session_manager = SocketSessionManager(sio)
room_directory = RoomDirectory()
room_handler = RoomSessionHandler(
    session_manager,
    room_directory,
    make_sync_strategy(SYNC_STRATEGY, session_manager),
)


@app.get("/")
async def health_check():
    """
    Health check (uptime ping용)
    """
    return {"status": "ok", "rooms": len(room_directory)}


@sio.event
async def connect(sid, environ, auth):
    logging.info(f"User connected: {sid}")


@sio.event
async def disconnect(sid):
    logging.info(f"User disconnected: {sid}")
    await room_handler.handle_disconnect(sid)


@sio.on("createRoom")
async def on_create_room(sid, *args):
    await room_handler.create_room(sid)


@sio.on("joinRoom")
async def on_join_room(sid, room_code=None):
    await room_handler.join_room(sid, room_code)


@sio.on("leaveRoom")
async def on_leave_room(sid, room_code=None):
    await room_handler.leave_room(sid, room_code)


@sio.on("requestSync")
async def on_request_sync(sid, room_code=None):
    await room_handler.request_sync(sid, room_code)


@sio.on("sendSyncData")
async def on_send_sync_data(sid, data=None):
    await room_handler.sync_data(sid, data)


@sio.on("syncData")
async def on_sync_data(sid, data=None):
    await room_handler.sync_data(sid, data)


@sio.on("play")
async def on_play(sid, data=None):
    await room_handler.control(sid, "play", data)


@sio.on("pause")
async def on_pause(sid, data=None):
    await room_handler.control(sid, "pause", data)


@sio.on("seek")
async def on_seek(sid, data=None):
    await room_handler.control(sid, "seek", data)


@sio.on("changeTrack")
async def on_change_track(sid, data=None):
    await room_handler.control(sid, "changeTrack", data)


@sio.on("chatMessage")
async def on_chat_message(sid, data=None):
    await room_handler.chat_message(sid, data)


if __name__ == "__main__":
    uvicorn.run(asgi_app, host=HOST, port=PORT)
