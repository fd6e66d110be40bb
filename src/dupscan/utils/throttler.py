import asyncio
from asyncio import TaskGroup, Semaphore


class Throttler:
    """Limits how many tasks of a TaskGroup run at once.

    schedule() blocks the producer until a permit is free, so a long list of paths never turns
    into an equally long list of pending tasks.
    """

    def __init__(self, task_group: TaskGroup, concurrency: int):
        """
        Args:
            task_group: The TaskGroup to which tasks will be added
            concurrency: Maximum number of tasks that can run concurrently
        """
        if concurrency < 1:
            raise ValueError(f"Concurrency must be positive, got {concurrency}")

        self._task_group = task_group
        self._semaphore = Semaphore(concurrency)

    async def schedule(self, coro, name=None) -> asyncio.Task:
        """Wait for a free permit, then start coro as a task of the group.

        The permit is returned when the task finishes, whether it succeeds, fails or is
        cancelled.
        """
        try:
            await self._semaphore.acquire()
        except BaseException:
            coro.close()
            raise

        async def wrapper():
            try:
                return await coro
            finally:
                self._semaphore.release()

        task_coro = wrapper()
        try:
            return self._task_group.create_task(task_coro, name=name)
        except BaseException:
            self._semaphore.release()
            task_coro.close()
            coro.close()
            raise
