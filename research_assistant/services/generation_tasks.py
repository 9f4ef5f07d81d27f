"""Supervised background tasks for generation runs.

A run is started from an HTTP request but outlives it. The supervisor owns
the asyncio.Task, keeps a strong reference while it runs, and logs any
exception that escapes the run instead of letting it surface as an
unretrieved task exception.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from research_assistant.api.exceptions import GenerationInProgressError

logger = logging.getLogger(__name__)


class GenerationSupervisor:
    """Tracks at most one running generation task per project.

    Usage:
        supervisor = GenerationSupervisor()
        supervisor.start(project_id, orchestrator.generate(context))
        ...
        await supervisor.shutdown()
    """

    def __init__(self):
        self._tasks: dict[str, asyncio.Task] = {}

    def is_running(self, project_id: str) -> bool:
        task = self._tasks.get(project_id)
        return task is not None and not task.done()

    def start(self, project_id: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run coro in the background for project_id.

        Raises:
            GenerationInProgressError: If a run for the project is still active.
                The coroutine is closed without being run.
        """
        if self.is_running(project_id):
            coro.close()
            raise GenerationInProgressError(project_id)

        task = asyncio.create_task(self._supervise(project_id, coro))
        self._tasks[project_id] = task
        task.add_done_callback(lambda t: self._cleanup(project_id, t))

        logger.info(f"Generation task started for project {project_id}")
        return task

    async def _supervise(self, project_id: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            await coro
        except Exception as e:
            # The orchestrator has already rolled the project back
            logger.error(
                f"Generation task failed for project {project_id}: {e}",
                exc_info=True,
                extra={"project_id": project_id},
            )

    def _cleanup(self, project_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(project_id) is task:
            del self._tasks[project_id]

    async def wait(self, project_id: str) -> None:
        """Wait until the project's run (if any) has finished."""
        task = self._tasks.get(project_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every running task and wait for them to finish."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return

        logger.info(f"Cancelling {len(tasks)} running generation tasks")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
