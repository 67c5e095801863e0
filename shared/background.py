"""
Best-effort post-commit hooks.

Side effects that must never decide the outcome of a request (sales counter
adjustments, CDN invalidation) are handed to a BestEffortRunner after the
primary write has committed. Each hook runs once as its own task; a failing
hook is logged and counted, never retried and never re-raised.
"""
import asyncio
import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from shared.observability import ecomm_best_effort_failures_total

logger = structlog.get_logger(__name__)


class BestEffortRunner:
    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, name: str, action, *args) -> asyncio.Task:
        """Schedule ``action(*args)``. Returns immediately."""
        task = asyncio.create_task(self._run(name, action, args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def submit_db(self, name: str, action, *args) -> asyncio.Task:
        """Schedule ``action(db, *args)`` on a session of its own."""
        if self._session_factory is None:
            raise RuntimeError("BestEffortRunner has no session factory")
        return self.submit(name, self._with_session, action, *args)

    async def drain(self):
        """Wait for every hook that is still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _with_session(self, action, *args):
        async with self._session_factory() as db:
            await action(db, *args)

    async def _run(self, name: str, action, args: tuple):
        try:
            await action(*args)
        except Exception as exc:
            # A failing hook MUST NOT affect the request or the other hooks
            ecomm_best_effort_failures_total.labels(hook=name).inc()
            logger.warning("best_effort_hook_failed", hook=name, error=repr(exc))


def get_hooks(request: Request) -> BestEffortRunner:
    """FastAPI dependency: the app-wide runner created at startup."""
    return request.app.state.hooks
