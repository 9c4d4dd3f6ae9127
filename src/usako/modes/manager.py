"""Mode manager - owns the active simulation, navigation and game-over flow."""

from typing import Callable, Dict, List, Optional, Type
from dataclasses import dataclass, field, replace
import logging
import threading

from usako.core.events import INPUT_EVENTS, Event, EventBus, EventType
from usako.core.state import State, StateMachine
from usako.leaderboard.store import LeaderboardStore, ScoreEntry
from usako.modes.base import GameMode, GamePhase, Simulation, Snapshot, SpriteSource
from usako.settings import Settings, get_settings

logger = logging.getLogger(__name__)

MODE_STATES = {
    GameMode.FLAPPY: State.FLAPPY,
    GameMode.RUNNER: State.RUNNER,
}


@dataclass(frozen=True)
class GameOverReport:
    """What the game-over overlay shows."""

    mode: GameMode
    score: int
    top_scores: List[ScoreEntry] = field(default_factory=list)
    rank_in: bool = False
    submitted: bool = False

    @property
    def status(self) -> str:
        if self.submitted:
            return "Registered!"
        if self.rank_in:
            return "Enter Name"
        return "Rank Out"


class ModeManager:
    """Manages simulations, navigation and the leaderboard hand-off.

    Handles:
    - Entering and leaving modes (a fresh simulation per entry)
    - Routing input events to the active simulation
    - Frame pacing: render the previous tick's snapshot, then update
    - Game over: ranking query and a single name submission

    Input Flow:
    - TITLE: start_mode() / show_ranking() are driven by the menu
    - FLAPPY / RUNNER: the simulation handles input; EXIT_TO_MENU returns
      to TITLE unless a life is running
    - RANKING: EXIT_TO_MENU or JUMP_OR_SELECT returns to TITLE
    """

    def __init__(
        self,
        state_machine: StateMachine,
        event_bus: EventBus,
        leaderboard: LeaderboardStore,
        settings: Optional[Settings] = None,
        sprites: Optional[SpriteSource] = None,
        rng=None,
    ):
        self.state_machine = state_machine
        self.event_bus = event_bus
        self.leaderboard = leaderboard
        self.settings = settings or get_settings()
        self.sprites = sprites
        self.rng = rng

        self._registered_modes: Dict[GameMode, Type[Simulation]] = {}
        self._current: Optional[Simulation] = None
        self._report: Optional[GameOverReport] = None
        self._lock = threading.RLock()

        self._on_game_over: Optional[Callable[[GameOverReport], None]] = None

        self._setup_event_handlers()
        logger.info("ModeManager initialized")

    def _setup_event_handlers(self) -> None:
        """Register event handlers."""
        for event_type in INPUT_EVENTS:
            self.event_bus.subscribe(event_type, self.handle_input)

    # Mode registration
    def register_mode(self, mode_cls: Type[Simulation]) -> None:
        self._registered_modes[mode_cls.mode] = mode_cls
        logger.info(f"Registered mode: {mode_cls.mode.value}")

    def get_available_modes(self) -> List[GameMode]:
        return list(self._registered_modes)

    @property
    def current(self) -> Optional[Simulation]:
        return self._current

    @property
    def report(self) -> Optional[GameOverReport]:
        return self._report

    def set_on_game_over(self, callback: Callable[[GameOverReport], None]) -> None:
        self._on_game_over = callback

    # Navigation
    def start_mode(self, mode: GameMode) -> Simulation:
        """Enter a mode with a brand new simulation."""
        mode = GameMode(mode)
        mode_cls = self._registered_modes[mode]
        with self._lock:
            if not self.state_machine.transition(MODE_STATES[mode]):
                raise ValueError(f"Cannot start {mode.value} from {self.state_machine.state.name}")
            self._current = mode_cls(
                settings=self.settings,
                event_bus=self.event_bus,
                rng=self.rng,
                leaderboard=self.leaderboard,
                sprites=self.sprites,
            )
            self._current.set_on_game_over(self._handle_game_over)
            self._report = None
        logger.info(f"Entering mode: {mode.value}")
        return self._current

    def show_ranking(self) -> bool:
        return self.state_machine.transition(State.RANKING)

    def exit_to_menu(self) -> bool:
        """Leave the current screen. Refused while a life is running."""
        with self._lock:
            if self._current is not None and self._current.phase is GamePhase.RUNNING:
                return False
            if not self.state_machine.transition(State.TITLE):
                return False
            if self._current is not None:
                logger.info(f"Exiting mode: {self._current.mode.value}")
            self._current = None
            self._report = None
        return True

    def retry(self) -> None:
        """Restart the current mode from IDLE."""
        with self._lock:
            if self._current is None:
                return
            self._current.reset()
            self._report = None

    def clear_scores(self) -> None:
        """Delete every mode's leaderboard, on disk and in memory."""
        with self._lock:
            self.leaderboard.clear_all()
            if self._current is not None:
                self._current.high_score = 0
        logger.info("All rankings cleared")
        self.event_bus.emit(Event(EventType.SCORES_CLEARED, source="manager"))

    def ranking(self) -> Dict[GameMode, List[ScoreEntry]]:
        """Top scores of every registered mode, for the ranking screen."""
        return {mode: self.leaderboard.top_scores(mode) for mode in self._registered_modes}

    # Input
    def handle_input(self, event: Event) -> bool:
        state = self.state_machine.state

        if state == State.RANKING:
            if event.type in (EventType.EXIT_TO_MENU, EventType.JUMP_OR_SELECT):
                return self.exit_to_menu()
            return False

        if self._current is None:
            return False

        if event.type == EventType.EXIT_TO_MENU:
            return self.exit_to_menu()

        with self._lock:
            was_over = self._current.phase is GamePhase.GAME_OVER
            handled = self._current.handle_input(event)
            if was_over and self._current.phase is not GamePhase.GAME_OVER:
                self._report = None
        return handled

    # Frame
    def frame(self, render: Optional[Callable[[Snapshot], None]] = None) -> Optional[Snapshot]:
        """Run one frame: draw the last evaluated state, then advance a tick."""
        with self._lock:
            if self._current is None:
                return None
            snapshot = self._current.snapshot()
            if render is not None:
                render(snapshot)
            self._current.update()
        return snapshot

    def snapshot(self) -> Optional[Snapshot]:
        with self._lock:
            return self._current.snapshot() if self._current is not None else None

    # Game over
    def _handle_game_over(self, score: int) -> None:
        mode = self._current.mode
        self._report = GameOverReport(
            mode=mode,
            score=score,
            top_scores=self.leaderboard.top_scores(mode),
            rank_in=self.leaderboard.is_rank_in(mode, score),
        )
        logger.info(f"Game over report: {mode.value} score={score} rank_in={self._report.rank_in}")
        if self._on_game_over:
            self._on_game_over(self._report)

    def submit_name(self, name: str) -> Optional[GameOverReport]:
        """Register the pending score under ``name`` (once per game over)."""
        if not isinstance(name, str):
            raise ValueError(f"Player name must be a string, got {type(name).__name__}")
        with self._lock:
            report = self._report
            if report is None or report.submitted or not report.rank_in:
                return report

            name = name.strip() or self.leaderboard.default_name
            top = self.leaderboard.submit(report.mode, name, report.score)
            self._report = replace(report, top_scores=top, submitted=True)

            if self._current is not None:
                self._current.high_score = self.leaderboard.high_score(report.mode)

        self.event_bus.emit(Event(
            EventType.SCORE_SUBMITTED,
            data={"mode": report.mode.value, "name": name, "score": report.score},
            source="manager",
        ))
        return self._report
