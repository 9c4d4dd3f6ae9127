"""
Desktop game window using pygame.

Maps the keyboard to input events, blits the frame buffer and draws the
text layers (score, prompts, game-over overlay, title and ranking).
"""

import pygame
import asyncio
import logging
from dataclasses import dataclass

from ..core.state import StateMachine, State
from ..core.events import EventBus, jump_event, crouch_event, restart_event, exit_event
from ..graphics.renderer import Renderer
from ..modes.base import GameMode, GamePhase
from ..modes.manager import ModeManager

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 12


@dataclass
class WindowConfig:
    """Game window configuration."""
    width: int = 600
    height: int = 600
    scale: int = 1
    title: str = "Usako Game"
    fps: int = 60

    # Colors
    text_color: tuple[int, int, int] = (255, 255, 255)
    dark_text_color: tuple[int, int, int] = (0, 0, 0)
    accent_color: tuple[int, int, int] = (255, 255, 0)
    alert_color: tuple[int, int, int] = (255, 0, 0)
    milestone_color: tuple[int, int, int] = (255, 165, 0)
    overlay_color: tuple[int, int, int, int] = (0, 0, 0, 170)


class GameWindow:
    """
    Main game window.

    Keyboard Mapping:
        TITLE: 1 Flappy, 2 Runner, 3 Ranking, ESC quit
        RANKING: D delete every ranking, then Y to confirm or N to cancel
        SPACE / UP / mouse click: Jump, start, continue
        DOWN (hold): Crouch (runner)
        R: Restart after game over
        ESC: Back to title (not while a life is running)
        Game over name entry: type, BACKSPACE, RETURN to register
    """

    def __init__(
        self,
        manager: ModeManager,
        renderer: Renderer,
        config: WindowConfig | None = None,
        state_machine: StateMachine | None = None,
        event_bus: EventBus | None = None
    ) -> None:
        self.config = config or WindowConfig()
        self.manager = manager
        self.renderer = renderer
        self.state_machine = state_machine or manager.state_machine
        self.event_bus = event_bus or manager.event_bus

        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0

        self._font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None

        self._name_buffer = ""
        self._confirm_clear = False

        logger.info("GameWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        self._screen = pygame.display.set_mode(
            (self.config.width * self.config.scale, self.config.height * self.config.scale),
            pygame.DOUBLEBUF,
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._big_font = pygame.font.SysFont("Verdana", 36, bold=True)
        self._font = pygame.font.SysFont("Verdana", 22, bold=True)
        self._small_font = pygame.font.SysFont("Verdana", 15)

        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    @property
    def _entering_name(self) -> bool:
        report = self.manager.report
        return report is not None and report.rank_in and not report.submitted

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

            elif event.type == pygame.KEYUP:
                if event.key == pygame.K_DOWN:
                    self.event_bus.emit(crouch_event(False))

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if self.state_machine.state in (State.FLAPPY, State.RUNNER) and not self._entering_name:
                    self.event_bus.emit(jump_event(source="mouse"))

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key
        state = self.state_machine.state

        if state == State.TITLE:
            if key == pygame.K_1:
                self.manager.start_mode(GameMode.FLAPPY)
            elif key == pygame.K_2:
                self.manager.start_mode(GameMode.RUNNER)
            elif key == pygame.K_3:
                self.manager.show_ranking()
            elif key in (pygame.K_ESCAPE, pygame.K_q):
                self._running = False
            return

        if state == State.RANKING and self._handle_ranking_key(key):
            return

        if key == pygame.K_ESCAPE:
            self._name_buffer = ""
            self.event_bus.emit(exit_event())
            return

        if self._entering_name:
            self._handle_name_key(event)
            return

        if key in (pygame.K_SPACE, pygame.K_UP):
            self.event_bus.emit(jump_event())
        elif key == pygame.K_DOWN:
            self.event_bus.emit(crouch_event(True))
        elif key == pygame.K_r:
            self.event_bus.emit(restart_event())

    def _handle_ranking_key(self, key: int) -> bool:
        """D asks to delete every ranking, Y confirms, N or ESC cancels."""
        if self._confirm_clear:
            if key == pygame.K_y:
                self.manager.clear_scores()
            self._confirm_clear = False
            return key in (pygame.K_y, pygame.K_n, pygame.K_ESCAPE)
        if key == pygame.K_d:
            self._confirm_clear = True
            return True
        return False

    def _handle_name_key(self, event: pygame.event.Event) -> None:
        if event.key == pygame.K_RETURN:
            self.manager.submit_name(self._name_buffer)
            self._name_buffer = ""
        elif event.key == pygame.K_BACKSPACE:
            self._name_buffer = self._name_buffer[:-1]
        elif event.unicode and event.unicode.isprintable() and len(self._name_buffer) < MAX_NAME_LENGTH:
            self._name_buffer += event.unicode

    # Rendering
    def _render(self) -> None:
        if not self._screen:
            return

        state = self.state_machine.state
        if state == State.TITLE:
            self._render_title()
        elif state == State.RANKING:
            self._render_ranking()
        else:
            snapshot = self.manager.frame(self.renderer)
            if snapshot is not None:
                self._blit_buffer()
                self._render_hud(snapshot)
            if self.manager.report is not None:
                self._render_game_over()

        pygame.display.flip()

    def _blit_buffer(self) -> None:
        surface = pygame.surfarray.make_surface(self.renderer.buffer.swapaxes(0, 1))
        if self.config.scale != 1:
            surface = pygame.transform.scale(surface, self._screen.get_size())
        self._screen.blit(surface, (0, 0))

    def _text(self, font, text: str, color, center_x: int | None = None, y: int = 0, x: int = 0) -> None:
        surface = font.render(text, True, color)
        if center_x is not None:
            x = center_x - surface.get_width() // 2
        self._screen.blit(surface, (x, y))

    def _render_hud(self, snapshot) -> None:
        s = self.config.scale
        cx = self._screen.get_width() // 2
        color = self.config.text_color if snapshot.mode is GameMode.FLAPPY else self.config.dark_text_color
        right = self._screen.get_width() - 220 * s

        self._text(self._font, f"Score: {snapshot.score}", color, x=right, y=30 * s)
        self._text(self._small_font, f"High Score: {snapshot.high_score}", color, x=right, y=65 * s)

        if snapshot.message:
            self._text(self._big_font, snapshot.message, self.config.milestone_color, center_x=cx, y=130 * s)

        if snapshot.phase is GamePhase.IDLE and snapshot.prompt:
            self._text(self._font, snapshot.prompt, color, center_x=cx, y=280 * s)
            self._text(self._small_font, "ESC: TITLE", color, center_x=cx, y=330 * s)

    def _render_game_over(self) -> None:
        report = self.manager.report
        w, h = self._screen.get_size()
        cx = w // 2

        overlay = pygame.Surface((w, h), pygame.SRCALPHA)
        overlay.fill(self.config.overlay_color)
        self._screen.blit(overlay, (0, 0))

        y = h // 6
        self._text(self._big_font, "GAME OVER", self.config.alert_color, center_x=cx, y=y)
        y += 55
        self._text(self._font, f"Score: {report.score}", self.config.text_color, center_x=cx, y=y)
        y += 45
        self._text(self._small_font, "--- RANKING ---", self.config.accent_color, center_x=cx, y=y)
        y += 25
        if not report.top_scores:
            self._text(self._small_font, "No records yet", self.config.text_color, center_x=cx, y=y)
            y += 22
        for rank, entry in enumerate(report.top_scores, start=1):
            self._text(self._small_font, f"{rank}. {entry.name} : {entry.score}", self.config.text_color, center_x=cx, y=y)
            y += 22

        y += 15
        if self._entering_name:
            self._text(self._font, f"Name: {self._name_buffer}_", self.config.accent_color, center_x=cx, y=y)
        else:
            self._text(self._small_font, report.status, self.config.text_color, center_x=cx, y=y)
        y += 40
        self._text(self._small_font, "SPACE / R: RETRY    ESC: TITLE", self.config.text_color, center_x=cx, y=y)

    def _render_title(self) -> None:
        self._screen.fill((135, 206, 235))
        cx = self._screen.get_width() // 2
        self._text(self._big_font, self.config.title, self.config.text_color, center_x=cx, y=120)
        self._text(self._font, "1: Flappy Usako", self.config.text_color, center_x=cx, y=240)
        self._text(self._font, "2: Usako Run!", self.config.text_color, center_x=cx, y=290)
        self._text(self._font, "3: Ranking", self.config.text_color, center_x=cx, y=340)

    def _render_ranking(self) -> None:
        self._screen.fill((30, 30, 60))
        w = self._screen.get_width()
        self._text(self._big_font, "RANKING", self.config.accent_color, center_x=w // 2, y=40)

        columns = self.manager.ranking()
        for index, (mode, entries) in enumerate(columns.items()):
            cx = w * (2 * index + 1) // (2 * max(1, len(columns)))
            self._text(self._font, mode.value.upper(), self.config.text_color, center_x=cx, y=120)
            if not entries:
                self._text(self._small_font, "No records yet", self.config.text_color, center_x=cx, y=170)
            for rank, entry in enumerate(entries, start=1):
                self._text(self._small_font, f"{rank}. {entry.name} : {entry.score}", self.config.text_color, center_x=cx, y=140 + rank * 30)

        if self._confirm_clear:
            self._text(self._font, "Delete all ranking data? (Y/N)", self.config.alert_color, center_x=w // 2, y=480)
        else:
            self._text(self._small_font, "D: DELETE ALL", self.config.text_color, center_x=w // 2, y=490)
        self._text(self._small_font, "ESC: TITLE", self.config.text_color, center_x=w // 2, y=520)

    async def run(self) -> None:
        """Main game loop."""
        self._init_pygame()
        self._running = True

        logger.info("Game window started")

        while self._running:
            self._handle_events()
            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)

            self._frame_count += 1

            # Yield to other tasks
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        pygame.quit()
        logger.info("Game window stopped")

    def stop(self) -> None:
        """Stop the game loop."""
        self._running = False
