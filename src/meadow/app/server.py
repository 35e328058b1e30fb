from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import AppConfig, SimulationConfig
from ..sim.core.engine import Ecosystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    sequence: int
    tick: int
    payload: str


class SimulationController:
    """Fixed-rate scheduler around one :class:`Ecosystem`.

    Each firing runs ``speed_multiplier`` ticks under ``_lock``; commands take
    the same lock so they land between ticks, never inside one.
    """

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.engine = Ecosystem(config)
        self.engine.start()
        self.broadcast_interval = max(1, broadcast_interval)
        self.frames = 0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque()
        self._sequence = 0
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._loop())
        logger.info("Scheduler started at %.1f Hz", self.config.tick_rate)

    async def stop(self) -> None:
        task = self._loop_task
        self._loop_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Scheduler stopped after %d frames", self.frames)

    async def restart(self) -> None:
        async with self._lock:
            self.engine.start()
            self.frames = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def _loop(self) -> None:
        interval = 1.0 / self.config.tick_rate
        while True:
            await asyncio.sleep(interval)
            await self.run_frame()

    async def run_frame(self) -> int:
        async with self._lock:
            executed = self.engine.run_frame()
            self.frames += 1
        if self.frames % self.broadcast_interval == 0:
            await self._broadcast_snapshot()
        return executed

    async def command(self, name: str, *args: Any) -> Any:
        async with self._lock:
            result = getattr(self.engine, name)(*args)
        await self._broadcast_snapshot()
        return result

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def snapshot_payload(self, drain_feedback: bool = False) -> Dict[str, Any]:
        snapshot = self.engine.snapshot()
        feedback = self.engine.drain_feedback() if drain_feedback else list(snapshot.feedback)
        return {
            "tick": snapshot.tick,
            "metrics": asdict(snapshot.metrics),
            "phase": asdict(snapshot.phase),
            "entities": asdict(snapshot.entities),
            "controls": asdict(snapshot.controls),
            "metadata": asdict(snapshot.metadata),
            "feedback": feedback,
        }

    def _serialize_snapshot(self) -> QueuedSnapshot:
        payload = self.snapshot_payload(drain_feedback=True)
        self._sequence += 1
        message = {"type": "snapshot", "sequence": self._sequence, "tick": payload["tick"], "payload": payload}
        return QueuedSnapshot(sequence=self._sequence, tick=payload["tick"], payload=json.dumps(message))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.sequence > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.sequence
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            if self._snapshot_queue and self._snapshot_queue[-1].tick == queued.tick:
                self._snapshot_queue[-1] = queued
            else:
                self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app_config = AppConfig()
app = FastAPI(title="Meadow Ecosystem Simulation")
controller = SimulationController(app_config.simulation, broadcast_interval=app_config.broadcast_interval)


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.stop()


@app.get("/api/status")
async def status() -> JSONResponse:
    world = controller.engine.world
    return JSONResponse(
        {
            "running": controller.running,
            "tick": world.tick,
            "phase": world.phase.value,
            "phase_completed": world.phase_completed,
            "paused": world.paused,
            "speed_multiplier": world.speed_multiplier,
            "metrics": asdict(world.metrics),
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(controller.snapshot_payload())


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": controller.running})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": controller.running})


@app.post("/api/control/restart")
async def restart_simulation() -> JSONResponse:
    await controller.restart()
    return JSONResponse({"running": controller.running, "tick": controller.engine.world.tick})


@app.post("/api/control/pause")
async def toggle_pause() -> JSONResponse:
    paused = await controller.command("toggle_pause")
    return JSONResponse({"paused": paused})


@app.post("/api/control/speed")
async def cycle_speed() -> JSONResponse:
    multiplier = await controller.command("cycle_time_speed")
    return JSONResponse({"multiplier": multiplier})


@app.post("/api/control/hint")
async def toggle_hint() -> JSONResponse:
    visible = await controller.command("toggle_hint")
    return JSONResponse({"show_hint": visible})


@app.post("/api/control/advance")
async def advance_phase() -> JSONResponse:
    phase = await controller.command("advance_phase")
    return JSONResponse({"phase": phase.value})


@app.post("/api/control/previous")
async def previous_phase() -> JSONResponse:
    phase = await controller.command("go_to_previous_phase")
    return JSONResponse({"phase": phase.value})


@app.post("/api/command/remove-cloud")
async def remove_cloud(payload: dict) -> JSONResponse:
    removed = await controller.command("remove_pesticide_cloud", int(payload.get("id", -1)))
    return JSONResponse({"removed": removed})


@app.post("/api/command/plant-flower")
async def plant_flower(payload: dict) -> JSONResponse:
    x = float(payload.get("x", 0.5))
    y = float(payload.get("y", 0.5))
    flower_id = await controller.command("plant_flower", x, y)
    return JSONResponse({"id": flower_id})


@app.post("/api/command/place-block")
async def place_block(payload: dict) -> JSONResponse:
    placed = await controller.command("place_habitat_block", int(payload.get("id", -1)))
    return JSONResponse({"placed": placed, "placed_habitat_count": controller.engine.world.placed_habitat_count})


@app.post("/api/command/challenge")
async def record_challenge(payload: dict) -> JSONResponse:
    index = await controller.command("advance_to_next_challenge", bool(payload.get("good_choice", False)))
    return JSONResponse(
        {
            "current_challenge_index": index,
            "environment_status": controller.engine.environment_status_display(),
        }
    )


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]
