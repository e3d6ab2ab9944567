"""
Confined-Space Trainer Main Entry Point

Wires the training engine (1 s ticker), the command surface and the web
console, then keeps the process alive until interrupted.
"""
__version__ = "0.1.0"

import asyncio
import logging
import os

from plantsim import TrainingEngine, CommandSurface
from web.app import WebServer

# Configure Logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger("Main")


class TrainingSimulator:
    """
    Main orchestrator: starts and stops the engine and the web console.
    """

    def __init__(self,
                 engine: TrainingEngine,
                 web_server: WebServer = None,
                 status_interval: float = 30.0):
        self._engine = engine
        self._web = web_server
        self._status_interval = status_interval
        self._commands = CommandSurface(engine)

    @property
    def commands(self) -> CommandSurface:
        return self._commands

    async def initialize(self) -> None:
        """Initialize all components."""
        logger.info("Initializing Confined-Space Trainer...")

        self._engine.start()
        if self._web:
            self._web.start()

        logger.info("Confined-Space Trainer initialized")

    async def run(self) -> None:
        """Run the main status loop."""
        logger.info("Entering Main Status Loop")
        await self._status_loop()

    async def _status_loop(self) -> None:
        """Periodic one-line summary of the plant for the process log."""
        while True:
            await asyncio.sleep(self._status_interval)
            s = self._engine.state
            logger.info(
                f"tick={self._engine.tick_count} plant={s.plant_status.value} "
                f"vent={s.ventilation.value} o2={s.o2} co={s.co} ch4={s.ch4_lel} "
                f"alarms={','.join(s.alarm_codes()) or '-'} evac={s.evacuation_timer}"
            )

    def stop(self) -> None:
        """Stop all components."""
        logger.info("Stopping Confined-Space Trainer...")
        self._engine.stop()
        if self._web:
            self._web.stop()
        logger.info("Confined-Space Trainer stopped")


async def main():
    """Application entry point."""
    engine = TrainingEngine()
    web = WebServer(
        engine,
        host=os.environ.get("WEB_HOST", "0.0.0.0"),
        port=int(os.environ.get("WEB_PORT", "8080")),
    )

    simulator = TrainingSimulator(engine, web)

    try:
        await simulator.initialize()
        await simulator.run()
    finally:
        simulator.stop()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
