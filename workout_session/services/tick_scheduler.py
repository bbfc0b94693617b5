import asyncio
from typing import Dict

from workout_session.config import config
from workout_session.services.session_service import WorkoutSession
from workout_session.utils.logging_utils import logger


class TickScheduler:
    """
    Drives the one-second countdown for sessions hosted by the server.
    Ticks keep flowing while a session is paused; the reducer decides whether they count.
    Each tick carries the arm cycle it was scheduled against, so it never lands on a newer countdown.
    """

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, session: WorkoutSession) -> None:
        """Start ticking a session. Must be called from inside a running event loop."""
        if session.session_id in self._tasks:
            return
        loop = asyncio.get_running_loop()
        self._tasks[session.session_id] = loop.create_task(self._run(session))
        logger.info(f"Ticking session {session.session_id} every {self.interval}s")

    async def _run(self, session: WorkoutSession):
        try:
            while not session.closed and not session.ended:
                cycle = session.state.timer.cycle
                await asyncio.sleep(self.interval)
                if session.closed:
                    break
                if session.state.timer.cycle != cycle:
                    # Re-armed mid-interval: the new countdown gets a full interval before its first tick
                    continue
                session.tick(cycle=cycle)
        finally:
            if self._tasks.get(session.session_id) is asyncio.current_task():
                del self._tasks[session.session_id]

    def cancel(self, session_id: str) -> None:
        """Stop ticking a session immediately"""
        task = self._tasks.pop(session_id, None)
        if task is not None:
            task.cancel()

    def is_scheduled(self, session_id: str) -> bool:
        return session_id in self._tasks

    async def shutdown(self):
        """Cancel every pending tick task and wait for them to unwind"""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

# Global service instance
tick_scheduler = TickScheduler(interval=config.tick_interval)
