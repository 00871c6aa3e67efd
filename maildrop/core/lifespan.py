"""Process lifespan: build shared resources once and inject them into handlers."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any

from robyn import Robyn

from maildrop.core.logger import LogIcon, logger
from maildrop.core.settings import settings as st

AsyncHandler = Callable[[], Coroutine[Any, Any, None]]


class State:
    """Process-wide resources shared by every invocation, set once at startup."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        object.__setattr__(self, "_data", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"State has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._data:
            raise AttributeError(f"State attribute '{name}' is already set")
        self._data[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __repr__(self) -> str:
        return f"State({sorted(self._data)})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def clear(self) -> None:
        self._data.clear()


class BaseEvent[T](ABC):
    """A resource created at startup and optionally released at shutdown."""

    name: str

    @abstractmethod
    async def startup(self) -> T:
        """Create and return the resource."""
        ...

    async def shutdown(self, instance: T) -> None:  # noqa: B027
        """Release the resource. Override if cleanup is needed."""


class Lifespan:
    """Runs registered events in order at startup and in reverse at shutdown."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._event_classes: list[type[BaseEvent[Any]]] = []
        self._started: list[BaseEvent[Any]] = []
        self._state = State()

    def register(self, event_cls: type[BaseEvent[Any]]) -> "Lifespan":
        """Register an event class. Returns self for chaining."""
        self._event_classes.append(event_cls)
        return self

    @property
    def state(self) -> State:
        return self._state

    async def _start_all(self) -> None:
        logger.info("Starting application lifespan", icon=LogIcon.START, version=st.API_VERSION)
        for event_cls in self._event_classes:
            event = event_cls()
            logger.info(f"Starting event: {event.name}", icon=LogIcon.PROCESSING)
            try:
                instance = await event.startup()
            except Exception:
                logger.exception(f"Event failed: {event.name}", icon=LogIcon.ERROR)
                await self._stop_all()
                raise
            setattr(self._state, event.name, instance)
            self._started.append(event)
            logger.info(f"Event ready: {event.name}", icon=LogIcon.SUCCESS)

        self._app.inject_global(state=self._state)
        logger.info("App state ready", icon=LogIcon.COMPLETE)

    async def _stop_all(self) -> None:
        for event in reversed(self._started):
            logger.info(f"Shutting down: {event.name}", icon=LogIcon.PROCESSING)
            await event.shutdown(getattr(self._state, event.name))
        self._started.clear()
        self._state.clear()

    @property
    def startup(self) -> AsyncHandler:
        """Return async startup handler function."""
        return self._start_all

    @property
    def shutdown(self) -> AsyncHandler:
        """Return async shutdown handler function."""

        async def _shutdown() -> None:
            if not self._started:
                logger.info("No state to cleanup", icon=LogIcon.WARNING)
                return
            await self._stop_all()
            logger.info("Cleanup complete", icon=LogIcon.COMPLETE)

        return _shutdown


def create_lifespan(app: Robyn) -> Lifespan:
    """Create lifespan manager for event registration."""
    return Lifespan(app)
