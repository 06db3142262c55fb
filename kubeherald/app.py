"""Application bootstrap for kubeherald.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> filter registry + notifier state
              -> notifications -> event handler + command executor -> REST

Shutdown asks the REST server to exit and cancels it if it does not stop
within the grace period.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kubeherald.config import load_config
from kubeherald.models.config import HeraldConfig
from kubeherald.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from kubeherald.controller import EventHandler
    from kubeherald.execute import CommandExecutor, NotifierState
    from kubeherald.filters import FilterRegistry
    from kubeherald.notifications import NotificationDispatcher

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class HeraldApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    The filter registry and notifier state created here are the only
    instances in the process; handlers receive them by injection.
    """

    def __init__(self, config: HeraldConfig | None = None) -> None:
        self.config: HeraldConfig | None = config

        self.registry: FilterRegistry | None = None
        self.notifier_state: NotifierState | None = None
        self.dispatcher: NotificationDispatcher | None = None
        self.event_handler: EventHandler | None = None
        self.executor: CommandExecutor | None = None
        self._rest_server: object | None = None

        self._background_tasks: list[asyncio.Task[None]] = []
        self._running = False
        self._stopped = asyncio.Event()
        self._shutdown_task: asyncio.Task[None] | None = None
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self, serve_rest: bool = True) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            try:
                self.config = load_config()
            except Exception as exc:
                raise _ComponentError("config", exc) from exc

        setup_logging(self.config.log.level, cluster_name=self.config.settings.cluster_name)
        self._log = get_logger("app")
        self._log.info(
            "kubeherald starting",
            version=_herald_version(),
            cluster=self.config.settings.cluster_name,
            allow_kubectl=self.config.settings.allow_kubectl,
        )

        self._build_core()
        await self._start_notifications()
        self._wire_handlers()
        if serve_rest:
            await self._start_rest()

        self._running = True
        self._log.info("kubeherald started", port=self.config.api.port)

    def _build_core(self) -> None:
        """Create the filter registry and the notifier switch."""
        assert self._log is not None
        from kubeherald.execute import NotifierState
        from kubeherald.filters import build_filter_registry

        self.registry = build_filter_registry()
        self.notifier_state = NotifierState(enabled=True)
        self._log.info("filter registry ready", filters=self.registry.names())

    async def _start_notifications(self) -> None:
        assert self._log is not None
        assert self.config is not None
        try:
            from kubeherald.notifications import build_dispatcher

            self.dispatcher = build_dispatcher(self.config.communications, self.config.settings.cluster_name)
            self._log.info("notifications started", notifiers=len(self.dispatcher.notifiers))
        except Exception as exc:
            # Non-fatal: events are still enriched, just not delivered
            from kubeherald.notifications import NotificationDispatcher

            self._log.warning("notification dispatcher failed to start; events will not be delivered", error=str(exc))
            self.dispatcher = NotificationDispatcher(notifiers=[])

    def _wire_handlers(self) -> None:
        assert self.config is not None
        assert self.registry is not None
        assert self.notifier_state is not None
        assert self.dispatcher is not None
        from kubeherald.controller import EventHandler
        from kubeherald.execute import CommandExecutor, SubprocessRunner
        from kubeherald.filters import FilterPipeline

        settings = self.config.settings
        runner = SubprocessRunner(timeout_seconds=settings.kubectl_timeout_seconds)
        self.event_handler = EventHandler(FilterPipeline(self.registry), self.dispatcher, self.notifier_state)
        self.executor = CommandExecutor(
            settings=settings,
            registry=self.registry,
            notifier_state=self.notifier_state,
            runner=runner,
            auth_channel=self.config.communications.slack.channel,
        )

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        try:
            import uvicorn

            from kubeherald.api import create_app

            fastapi_app = create_app(
                executor=self.executor,
                event_handler=self.event_handler,
                notifier_state=self.notifier_state,
                cluster_name=self.config.settings.cluster_name,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            task.add_done_callback(self._on_rest_exit)
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    def _on_rest_exit(self, task: asyncio.Task[None]) -> None:
        """Shut the app down if the REST server exits while the app is running."""
        if not self._running:
            return
        assert self._log is not None
        self._log.error("rest api exited unexpectedly", cancelled=task.cancelled())
        self._shutdown_task = asyncio.get_running_loop().create_task(self.stop(), name="shutdown")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop all components in reverse startup order.  Safe to call twice."""
        if self._stopped.is_set() or (not self._running and self._log is None):
            return

        log = self._log or get_logger("app")
        log.info("kubeherald shutting down")
        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]

        if self._background_tasks:
            _, pending = await asyncio.wait(self._background_tasks, timeout=_SHUTDOWN_GRACE_SECONDS)
            for task in pending:
                log.warning("component stop timed out", task=task.get_name(), timeout=_SHUTDOWN_GRACE_SECONDS)
                task.cancel()
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._rest_server = None

        self._stopped.set()
        log.info("kubeherald stopped")

    @property
    def running(self) -> bool:
        return self._running

    async def wait_stopped(self) -> None:
        """Block until ``stop`` has finished."""
        await self._stopped.wait()


def _herald_version() -> str:
    from kubeherald import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: HeraldConfig | None = None) -> None:
    """Start kubeherald and serve until SIGTERM or SIGINT, then shut down."""
    app = HeraldApp(config)
    loop = asyncio.get_running_loop()
    shutdown: asyncio.Task[None] | None = None

    def _on_signal(sig: signal.Signals) -> None:
        nonlocal shutdown
        if shutdown is not None:
            return
        get_logger("app").info("shutdown requested", signal=sig.name)
        shutdown = loop.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _on_signal, sig)

    try:
        await app.start()
    except _ComponentError as exc:
        get_logger("app").critical("fatal startup error", component=exc.component, error=str(exc.cause))
        await app.stop()
        raise SystemExit(1) from exc

    try:
        await app.wait_stopped()
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
        if app.running:
            await app.stop()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())
