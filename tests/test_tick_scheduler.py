"""Tests for the asyncio tick driver."""
import asyncio

from workout_session.models.session_state import Phase
from workout_session.services.session_service import WorkoutSession
from workout_session.services.tick_scheduler import TickScheduler
from tests.conftest import make_plan


class TestTickScheduler:

    def test_ticks_drive_the_countdown(self, timed_plan, sink):
        session = WorkoutSession(timed_plan, feedback_sink=sink)
        scheduler = TickScheduler(interval=0.01)

        async def scenario():
            session.start()
            scheduler.schedule(session)
            await asyncio.sleep(0.3)
            await scheduler.shutdown()

        asyncio.run(scenario())

        assert session.state.phase in (Phase.EXERCISING_TIMED, Phase.COMPLETED_EXERCISE_PENDING_NEXT)
        assert session.state.timer_value < 30

    def test_cancel_is_synchronous(self, timed_plan, sink):
        session = WorkoutSession(timed_plan, feedback_sink=sink)
        scheduler = TickScheduler(interval=0.01)

        async def scenario():
            session.start()
            scheduler.schedule(session)
            await asyncio.sleep(0.02)
            scheduler.cancel(session.session_id)
            session.close()
            assert scheduler.is_scheduled(session.session_id) is False
            frozen = session.state
            await asyncio.sleep(0.1)
            return frozen

        frozen = asyncio.run(scenario())
        assert session.state is frozen

    def test_paused_session_keeps_its_value(self, timed_plan, sink):
        session = WorkoutSession(timed_plan, feedback_sink=sink)
        scheduler = TickScheduler(interval=0.01)

        async def scenario():
            session.start()
            session.pause()
            scheduler.schedule(session)
            await asyncio.sleep(0.1)
            # Ticks kept arriving but had no effect
            assert scheduler.is_scheduled(session.session_id) is True
            await scheduler.shutdown()

        asyncio.run(scenario())
        assert session.state.phase == Phase.PAUSED
        assert session.state.timer_value == 3

    def test_task_finishes_when_session_ends(self, sink):
        session = WorkoutSession(make_plan({"name": "Squats"}), feedback_sink=sink)
        scheduler = TickScheduler(interval=0.01)

        async def scenario():
            session.start()
            scheduler.schedule(session)
            session.finish_set()
            await asyncio.sleep(0.05)
            return scheduler.is_scheduled(session.session_id)

        assert asyncio.run(scenario()) is False
        assert session.ended is True

    def test_schedule_twice_is_ignored(self, timed_plan, sink):
        session = WorkoutSession(timed_plan, feedback_sink=sink)
        scheduler = TickScheduler(interval=0.05)

        async def scenario():
            scheduler.schedule(session)
            first = scheduler._tasks[session.session_id]
            scheduler.schedule(session)
            assert scheduler._tasks[session.session_id] is first
            await scheduler.shutdown()

        asyncio.run(scenario())

    def test_rearm_mid_interval_gets_a_full_interval(self, timed_plan, sink):
        """A countdown armed between ticks is not shortened by the tick already in flight."""
        session = WorkoutSession(timed_plan, feedback_sink=sink)
        scheduler = TickScheduler(interval=0.2)

        async def scenario():
            session.start()
            scheduler.schedule(session)
            await asyncio.sleep(0.15)
            session.reset_timer()
            await asyncio.sleep(0.1)
            right_after = session.state.timer_value
            await asyncio.sleep(0.25)
            later = session.state.timer_value
            await scheduler.shutdown()
            return right_after, later

        right_after, later = asyncio.run(scenario())
        assert session.state.phase == Phase.PREPARING
        assert right_after == 3
        assert later == 2
