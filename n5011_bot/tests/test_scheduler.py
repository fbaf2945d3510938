import unittest
from unittest.mock import AsyncMock, MagicMock

from n5011_bot.bot.scheduler import make_refresh_scheduler, refresh_directory_job


def _app() -> MagicMock:
    app = MagicMock()
    app.job_queue.get_jobs_by_name.return_value = ()
    return app


class TestRefreshScheduler(unittest.IsolatedAsyncioTestCase):
    async def test_schedule_hands_job_to_queue_without_awaiting(self) -> None:
        app = _app()
        refresher = MagicMock()
        refresher.refresh = AsyncMock()
        schedule = make_refresh_scheduler(app, refresher)

        self.assertIsNone(schedule(42))

        app.job_queue.run_once.assert_called_once()
        kwargs = app.job_queue.run_once.call_args.kwargs
        self.assertIs(kwargs["callback"], refresh_directory_job)
        self.assertEqual(kwargs["when"], 0)
        self.assertIs(kwargs["data"]["refresher"], refresher)
        self.assertEqual(kwargs["data"]["user_id"], 42)
        self.assertEqual(kwargs["name"], "directory_refresh:42")
        refresher.refresh.assert_not_awaited()

    async def test_job_awaits_refresh(self) -> None:
        refresher = MagicMock()
        refresher.refresh = AsyncMock(return_value=True)
        context = MagicMock()
        context.job.data = {"refresher": refresher, "user_id": 42}

        await refresh_directory_job(context)

        refresher.refresh.assert_awaited_once_with(42)

    async def test_one_pending_lookup_per_user(self) -> None:
        app = _app()
        refresher = MagicMock()
        refresher.refresh = AsyncMock(return_value=False)
        schedule = make_refresh_scheduler(app, refresher)

        schedule(42)
        schedule(42)
        schedule(7)
        self.assertEqual(app.job_queue.run_once.call_count, 2)

        # once the job has finished the user can be looked up again
        context = MagicMock()
        context.job.data = app.job_queue.run_once.call_args_list[0].kwargs["data"]
        await refresh_directory_job(context)
        schedule(42)
        self.assertEqual(app.job_queue.run_once.call_count, 3)

    async def test_job_already_queued_is_not_duplicated(self) -> None:
        app = _app()
        app.job_queue.get_jobs_by_name.return_value = (MagicMock(),)
        schedule = make_refresh_scheduler(app, MagicMock())

        schedule(42)

        app.job_queue.get_jobs_by_name.assert_called_once_with("directory_refresh:42")
        app.job_queue.run_once.assert_not_called()

    async def test_in_flight_cleared_when_refresh_raises(self) -> None:
        app = _app()
        refresher = MagicMock()
        refresher.refresh = AsyncMock(side_effect=RuntimeError("boom"))
        schedule = make_refresh_scheduler(app, refresher)
        schedule(42)

        context = MagicMock()
        context.job.data = app.job_queue.run_once.call_args.kwargs["data"]
        with self.assertRaises(RuntimeError):
            await refresh_directory_job(context)

        schedule(42)
        self.assertEqual(app.job_queue.run_once.call_count, 2)


if __name__ == "__main__":
    unittest.main()
