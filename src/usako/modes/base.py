"""Generic tick-driven game simulation shared by every mode."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Protocol, Tuple
from dataclasses import dataclass, field
from enum import Enum, auto
import logging
import random
import time

from usako.animation.frames import SpriteFrame
from usako.core.events import Event, EventBus, EventType
from usako.core.physics import Box, collides
from usako.modes.obstacles import Obstacle, ObstacleCategory, RandomSource
from usako.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class GameMode(str, Enum):
    """Identifies a simulation and its leaderboard partition."""

    FLAPPY = "flappy"
    RUNNER = "runner"


class GamePhase(Enum):
    """Phases of a single life."""

    IDLE = auto()       # Waiting for the first input
    RUNNING = auto()    # Physics active
    GAME_OVER = auto()  # Frozen until restart or exit


@dataclass
class SimulationState:
    """Mutable per-mode game state, rebuilt on every reset."""

    phase: GamePhase = GamePhase.IDLE
    score: int = 0
    tick: int = 0
    actor_y: float = 0.0
    actor_vy: float = 0.0
    obstacles: List[Obstacle] = field(default_factory=list)

    # Runner only
    crouching: bool = False
    speed: float = 0.0
    anim_tick: float = 0.0
    spawn_timer: int = 0
    spawn_delay: float = 0.0
    milestone_text: str = ""
    milestone_timer: int = 0

    @property
    def running(self) -> bool:
        return self.phase is GamePhase.RUNNING

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER


@dataclass(frozen=True)
class ObstacleView:
    x: float
    y: float
    width: float
    height: float
    category: ObstacleCategory
    segments: Tuple[Box, ...] = ()


@dataclass(frozen=True)
class Snapshot:
    """Read-only state needed to draw one frame."""

    mode: GameMode
    phase: GamePhase
    tick: int
    actor: Box
    sprite: SpriteFrame
    obstacles: Tuple[ObstacleView, ...]
    score: int
    high_score: int
    message: str = ""
    prompt: Optional[str] = None


class HasSize(Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...


class SpriteSource(Protocol):
    """Anything that can report the size of a named sprite, or None."""

    def get(self, name: str) -> Optional[HasSize]: ...


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Simulation(ABC):
    """Abstract base class for the game modes.

    The base class owns the state machine (IDLE -> RUNNING -> GAME_OVER),
    obstacle scrolling, pass scoring and collision checks. Subclasses
    supply the capabilities that differ between modes:

    - gravity model (``apply_physics``)
    - spawn policy (``spawn``)
    - hitbox rule (``actor_box``, ``hitbox_buffer``)
    - loss rule (``out_of_bounds``)

    Lifecycle:
        1. reset() - fresh state, phase IDLE
        2. handle_input(event) - discrete input events
        3. update() - one simulation tick
        4. snapshot() - render view of the current state
    """

    mode: GameMode
    display_name: str = "Base"
    settings_section: str = ""

    idle_prompt: str = "PRESS TO START"
    game_over_prompt: str = "GAME OVER"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[RandomSource] = None,
        leaderboard=None,
        sprites: Optional[SpriteSource] = None,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        settings = settings or get_settings()
        self.config = getattr(settings, self.settings_section)
        self.display = settings.display
        self.event_bus = event_bus
        self.rng = rng or random.Random()
        self.leaderboard = leaderboard
        self.sprites: SpriteSource = sprites if sprites is not None else {}
        self.clock = clock
        self.high_score = 0
        self.state = SimulationState()

        self._on_game_over: Optional[Callable[[int], None]] = None

        self.reset()
        logger.debug(f"Simulation created: {self.mode.value}")

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    def set_on_game_over(self, callback: Callable[[int], None]) -> None:
        """Set callback receiving the final score."""
        self._on_game_over = callback

    # Lifecycle
    def reset(self) -> None:
        """Return to a fresh IDLE state."""
        self.state = self.initial_state()
        if self.leaderboard is not None:
            self.high_score = self.leaderboard.high_score(self.mode)
        logger.debug(f"{self.mode.value}: reset")

    def start(self) -> None:
        self.state.phase = GamePhase.RUNNING
        logger.info(f"{self.mode.value}: game started")
        self._emit(EventType.GAME_STARTED)

    def handle_input(self, event: Event) -> bool:
        """Process an input event.

        Returns:
            True if event was handled
        """
        phase = self.state.phase

        if event.type == EventType.JUMP_OR_SELECT:
            if phase is GamePhase.IDLE:
                self.start()
                self.on_jump()
            elif phase is GamePhase.RUNNING:
                self.on_jump()
            else:
                self.on_game_over_select()
            return True

        if event.type == EventType.RESTART:
            if phase is GamePhase.GAME_OVER:
                self.reset()
                return True
            return False

        if event.type == EventType.CROUCH_START:
            return self.on_crouch(True)

        if event.type == EventType.CROUCH_END:
            return self.on_crouch(False)

        return False

    def update(self) -> None:
        """Advance one tick. Only RUNNING simulations move."""
        if self.state.phase is not GamePhase.RUNNING:
            return

        state = self.state
        state.tick += 1

        self.apply_physics()
        state.obstacles.extend(self.spawn())

        # Scroll, score passed obstacles, retire off-screen ones
        speed = self.scroll_speed
        live = []
        for obstacle in state.obstacles:
            obstacle.x -= speed
            if not obstacle.scored and self.passed(obstacle):
                obstacle.scored = True
                self.add_score(1)
            if not self.is_offscreen(obstacle):
                live.append(obstacle)
        state.obstacles = live

        if self.check_collision() or self.out_of_bounds():
            self.game_over()
            return

        self.after_tick()

    def game_over(self) -> None:
        self.state.phase = GamePhase.GAME_OVER
        score = self.state.score
        logger.info(f"{self.mode.value}: game over with score {score}")
        self._emit(EventType.GAME_OVER, score=score)
        if self._on_game_over:
            self._on_game_over(score)

    def add_score(self, points: int) -> None:
        self.state.score += points
        self._emit(EventType.SCORE_CHANGED, score=self.state.score)

    def check_collision(self) -> bool:
        hitbox = self.actor_box()
        floor = self.display.height
        boxes = [box for o in self.state.obstacles for box in o.hit_boxes(floor)]
        return collides(hitbox, boxes, self.hitbox_buffer)

    def snapshot(self) -> Snapshot:
        state = self.state
        floor = self.display.height
        obstacles = tuple(
            ObstacleView(
                o.x, o.y, o.width, o.height, o.category,
                tuple(o.hit_boxes(floor)) if o.category is ObstacleCategory.PIPE else (),
            )
            for o in state.obstacles
        )
        if state.phase is GamePhase.IDLE:
            prompt = self.idle_prompt
        elif state.phase is GamePhase.GAME_OVER:
            prompt = self.game_over_prompt
        else:
            prompt = None
        return Snapshot(
            mode=self.mode,
            phase=state.phase,
            tick=state.tick,
            actor=self.display_box(),
            sprite=self.sprite_frame(),
            obstacles=obstacles,
            score=state.score,
            high_score=self.high_score,
            message=self.message(),
            prompt=prompt,
        )

    def _emit(self, event_type: EventType, **data) -> None:
        if self.event_bus is None:
            return
        data["mode"] = self.mode.value
        self.event_bus.emit(Event(event_type, data=data, source=f"mode_{self.mode.value}"))

    # Capabilities (must be implemented by subclasses)
    @abstractmethod
    def initial_state(self) -> SimulationState:
        """Fresh state for a new life."""

    @abstractmethod
    def on_jump(self) -> None:
        """Apply jump input while RUNNING."""

    @abstractmethod
    def apply_physics(self) -> None:
        """Gravity model for one tick."""

    @abstractmethod
    def spawn(self) -> List[Obstacle]:
        """Spawn policy: obstacles created this tick."""

    @abstractmethod
    def actor_box(self) -> Box:
        """Current collision box, before the hitbox buffer."""

    @abstractmethod
    def sprite_frame(self) -> SpriteFrame:
        """Sprite frame for the current state."""

    @property
    @abstractmethod
    def scroll_speed(self) -> float:
        """Horizontal obstacle speed per tick."""

    @property
    @abstractmethod
    def hitbox_buffer(self) -> float:
        """Inward margin applied to the actor box on every side."""

    @abstractmethod
    def is_offscreen(self, obstacle: Obstacle) -> bool:
        """True once an obstacle can be dropped."""

    # Optional overrides
    def on_game_over_select(self) -> None:
        """Jump pressed while GAME_OVER."""
        self.reset()

    def on_crouch(self, pressed: bool) -> bool:
        return False

    def passed(self, obstacle: Obstacle) -> bool:
        """True if the obstacle is worth a point now."""
        return False

    def out_of_bounds(self) -> bool:
        """Loss rule checked after the collision test."""
        return False

    def after_tick(self) -> None:
        """Per-tick bookkeeping after a surviving tick."""

    def display_box(self) -> Box:
        """Box the renderer draws the actor in."""
        return self.actor_box()

    def message(self) -> str:
        return ""
