"""Browser WebSocket handler driving a drill engine per connection."""

import asyncio
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from times_trainer.config import Settings
from times_trainer.drill.engine import DrillEngine
from times_trainer.models.session import LevelResult, PendingTransition, SessionSnapshot, TrainerContext
from times_trainer.storage.kv_store import JsonFileStore
from times_trainer.storage.progress import ProgressRepository

logger = structlog.get_logger()


class DrillSessionManager:
    """Connects one browser to one ``DrillEngine``.

    Commands are applied in arrival order. Delayed "next problem"
    transitions run as a cancellable task, and completed levels are saved
    in the background.

    Args:
        settings: Application settings.
        browser_ws: WebSocket connection to the browser.
        repository: Progress persistence.
        context: Progress loaded for this connection.
    """

    def __init__(
        self,
        settings: Settings,
        browser_ws: WebSocket,
        repository: ProgressRepository,
        context: TrainerContext | None = None,
    ):
        self.settings = settings
        self.browser_ws = browser_ws
        self.repository = repository
        self.engine = DrillEngine(context, rules=settings.drill_rules)
        self.engine.on_level_complete(self._on_level_complete)
        self._transition_task: asyncio.Task | None = None
        self._save_tasks: set[asyncio.Task] = set()

    async def handle_message(self, data: dict[str, Any]) -> None:
        msg_type = data.get("type", "")

        if msg_type == "start_level":
            snapshot = self.engine.start_level(_as_level_id(data.get("level_id")))
        elif msg_type == "submit_answer":
            snapshot = self.engine.submit_answer(data.get("answer", ""))
        elif msg_type == "acknowledge":
            snapshot = self.engine.acknowledge()
        elif msg_type == "exit_to_menu":
            snapshot = self.engine.exit_to_menu()
        elif msg_type == "get_state":
            snapshot = self.engine.snapshot()
        else:
            logger.warning("unknown_message_type", type=msg_type)
            return

        self._schedule_transition(snapshot.pending_transition)
        await self._send_snapshot(snapshot)

    async def close(self) -> None:
        """Cancel pending transitions and let queued saves finish."""
        self._cancel_transition()
        if self._save_tasks:
            await asyncio.gather(*self._save_tasks, return_exceptions=True)

    def _schedule_transition(self, pending: PendingTransition | None) -> None:
        if pending is None:
            self._cancel_transition()
            return
        if self._transition_task is not None and not self._transition_task.done():
            if self._transition_task.get_name() == pending.transition_id:
                return
            self._cancel_transition()
        self._transition_task = asyncio.create_task(
            self._run_transition(pending), name=pending.transition_id
        )

    def _cancel_transition(self) -> None:
        if self._transition_task is not None and not self._transition_task.done():
            self._transition_task.cancel()
        self._transition_task = None

    async def _run_transition(self, pending: PendingTransition) -> None:
        try:
            await asyncio.sleep(pending.delay_ms / 1000)
            snapshot = self.engine.advance(pending.transition_id)
            await self._send_snapshot(snapshot)
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("transition_error")

    def _on_level_complete(self, context: TrainerContext, result: LevelResult) -> None:
        task = asyncio.get_running_loop().create_task(self.repository.save_context(context))
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)

    async def _send_snapshot(self, snapshot: SessionSnapshot) -> None:
        await self._send_to_browser({"type": "snapshot", **snapshot.model_dump(mode="json")})

    async def _send_to_browser(self, data: dict) -> None:
        """Send a message to the browser WebSocket."""
        try:
            await self.browser_ws.send_json(data)
        except Exception:
            logger.warning("browser_send_failed")


def _as_level_id(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def handle_browser_websocket(
    websocket: WebSocket,
    settings: Settings,
    repository: ProgressRepository | None = None,
) -> None:
    """Handle a browser WebSocket connection."""
    await websocket.accept()
    repository = repository or ProgressRepository(
        JsonFileStore(settings.progress_dir), level_count=settings.level_count
    )
    context = await repository.load_context()
    manager = DrillSessionManager(settings, websocket, repository, context)
    await manager.handle_message({"type": "get_state"})

    try:
        while True:
            data = await websocket.receive_json()
            if not isinstance(data, dict):
                logger.warning("malformed_message")
                continue
            await manager.handle_message(data)

    except WebSocketDisconnect:
        logger.info("browser_disconnected")
    except Exception:
        logger.exception("websocket_handler_error")
    finally:
        await manager.close()
