"""
Real-time WebSocket channel
"""

import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.services.broadcast import SENSOR_DATA_EVENT, BroadcastChannel, Subscription

router = APIRouter()

async def _forward(websocket: WebSocket, subscription: Subscription):
    try:
        while True:
            event = await subscription.next_event()
            await websocket.send_json({"event": SENSOR_DATA_EVENT, "data": event})
    except WebSocketDisconnect:
        return

async def _drain(websocket: WebSocket):
    # Client messages are not part of the contract; read until disconnect
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return

@router.websocket("/ws")
async def sensor_updates(websocket: WebSocket):
    """Push sensorDataUpdate events to one observer"""
    channel: BroadcastChannel = websocket.app.state.broadcast
    subscription = channel.subscribe()
    try:
        await websocket.accept()
        tasks = {
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            task.result()
    finally:
        channel.unsubscribe(subscription)
