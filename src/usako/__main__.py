"""
Main entry point for the Usako arcade.

Loads settings, the leaderboard and the sprites, then opens the game
window.
"""

import asyncio
import logging
import sys

from usako.core.state import StateMachine
from usako.core.events import EventBus
from usako.settings import Settings, get_settings


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_game(settings: Settings) -> None:
    """Build the shared components and run the window."""
    from usako.graphics.renderer import Renderer
    from usako.graphics.sprites import FLAPPY_SPRITES, RUNNER_SPRITES, SpriteSet
    from usako.leaderboard.store import LeaderboardStore
    from usako.modes.flappy import FlappyMode
    from usako.modes.runner import RunnerMode
    from usako.modes.manager import ModeManager
    from usako.simulator.window import GameWindow, WindowConfig

    event_bus = EventBus()
    state_machine = StateMachine(event_bus=event_bus)
    leaderboard = LeaderboardStore.from_settings(settings.leaderboard)
    sprites = SpriteSet.load(settings.assets_path, FLAPPY_SPRITES + RUNNER_SPRITES)

    manager = ModeManager(
        state_machine=state_machine,
        event_bus=event_bus,
        leaderboard=leaderboard,
        settings=settings,
        sprites=sprites,
    )
    manager.register_mode(FlappyMode)
    manager.register_mode(RunnerMode)

    display = settings.display
    renderer = Renderer(
        display.width,
        display.height,
        sprites=sprites,
        ground_y=settings.runner.ground_y,
    )
    window = GameWindow(
        manager=manager,
        renderer=renderer,
        config=WindowConfig(
            width=display.width,
            height=display.height,
            scale=display.scale,
            fps=display.fps,
        ),
    )
    await window.run()


def main() -> None:
    """Main entry point."""
    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("Starting Usako arcade")

    try:
        asyncio.run(run_game(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
