"""ShutdownGuard — forces every output off when the process is told to stop."""

from __future__ import annotations

import asyncio
import signal

import structlog

from alertlight.outputs.driver import OutputDriver
from alertlight.outputs.exceptions import OutputError

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_SHUTDOWN_HARDWARE_FAILURE = 3

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownGuard:
    """Waits for SIGINT/SIGTERM, then leaves every light off.

    On the first trigger the driver is halted (no request can assert a pin
    afterwards), every mapped pin is driven to DEASSERTED, and the exit code
    is fixed: ``EXIT_OK``, or ``EXIT_SHUTDOWN_HARDWARE_FAILURE`` if the
    hardware could not be opened or written. Later triggers are ignored.

    Usage::

        guard = ShutdownGuard(driver)
        guard.install()
        code = await guard.wait()
        sys.exit(code)
    """

    def __init__(self, driver: OutputDriver) -> None:
        self._driver = driver
        self._stop_event = asyncio.Event()
        self._exit_code: int | None = None

    @property
    def triggered(self) -> bool:
        return self._exit_code is not None

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Register signal handlers on *loop* (the running loop by default)."""
        loop = loop or asyncio.get_running_loop()
        for sig in _SIGNALS:
            loop.add_signal_handler(sig, self.trigger, sig)
        logger.debug("shutdown_guard_installed", signals=[s.name for s in _SIGNALS])

    def uninstall(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        loop = loop or asyncio.get_running_loop()
        for sig in _SIGNALS:
            loop.remove_signal_handler(sig)

    def trigger(self, sig: signal.Signals | None = None) -> int:
        """Put outputs in the safe state and release ``wait()``.

        Returns the exit code the process should terminate with.
        """
        if self._exit_code is not None:
            logger.info("shutdown_already_in_progress", signal=sig.name if sig else None)
            return self._exit_code

        logger.info("shutdown_signal_received", signal=sig.name if sig else None)
        self._driver.halt()

        code = EXIT_SHUTDOWN_HARDWARE_FAILURE
        try:
            self._driver.deassert_all()
            code = EXIT_OK
        except OutputError:
            logger.exception("shutdown_deassert_failed")
        except Exception:
            logger.exception("shutdown_deassert_error")
        finally:
            try:
                self._driver.backend.close()
            except Exception:
                logger.exception("shutdown_backend_close_error")
            self._exit_code = code
            self._stop_event.set()

        logger.info("shutdown_outputs_safe", exit_code=code)
        return code

    async def wait(self) -> int:
        """Block until triggered, then return the exit code."""
        await self._stop_event.wait()
        assert self._exit_code is not None
        return self._exit_code
