"""Narrative state machine that drives a story graph."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List

from talescape.domain.defs import Choice, Scene, Story
from talescape.domain.entities import Player
from talescape.domain.state import GameState

from . import condition_evaluator, effect_applicator
from .errors import (
    ChoiceDisabledError,
    ChoiceNotFoundError,
    InvalidStoryError,
    NoActiveGameError,
    NoStoryLoadedError,
    SceneNotFoundError,
    StoryMismatchError,
)
from .events import (
    DEFAULT_EVENT_LOG_CAPACITY,
    ChoiceMade,
    CompositeObserver,
    EventLog,
    EventObserver,
    GameEnded,
    GameLoaded,
    GameSaved,
    GameStarted,
    LoggedEvent,
    Occurrence,
    SceneEntered,
    StoryLoaded,
)
from .story_graph_validator import errors_only, format_issue, validate_story

logger = logging.getLogger(__name__)

DEFAULT_DISABLED_REASON = "Requirements not met"
DEFAULT_PLAYER_NAME = "Adventurer"


class EngineState(str, Enum):
    NO_STORY_LOADED = "no_story_loaded"
    STORY_LOADED = "story_loaded"
    IN_GAME = "in_game"
    ENDED = "ended"


@dataclass(slots=True)
class ChoiceResult:
    """Result returned after applying a choice.

    ``navigation`` is set instead of moving the player when the choice
    targets END, RESTART or MAIN_MENU.
    """

    occurrences: List[Occurrence] = field(default_factory=list)
    scene: Scene | None = None
    navigation: str | None = None


class NarrativeEngine:
    """Application service that walks a player through a story graph.

    Access is single-threaded and non-reentrant: callers must not resolve
    two choices against the same engine concurrently.
    """

    def __init__(
        self,
        observer: EventObserver | None = None,
        *,
        event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
        default_player_name: str = DEFAULT_PLAYER_NAME,
    ) -> None:
        self._default_player_name = default_player_name
        self._story: Story | None = None
        self._game_state: GameState | None = None
        self._state = EngineState.NO_STORY_LOADED
        self._event_log = EventLog(event_log_capacity)
        self._observers = CompositeObserver([self._event_log])
        if observer is not None:
            self._observers.add_observer(observer)

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def story(self) -> Story | None:
        return self._story

    @property
    def game_state(self) -> GameState | None:
        """The live session state, for read-only display."""
        return self._game_state

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def is_game_active(self) -> bool:
        return self._state is EngineState.IN_GAME

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.add_observer(observer)

    def load_story(self, story: Story) -> None:
        """Validate and install ``story``, replacing any previous one.

        Any game in progress is dropped.
        """
        issues = validate_story(story)
        for issue in issues:
            if not issue.is_error:
                logger.warning("Story '%s': %s", story.id, format_issue(issue))
        errors = errors_only(issues)
        if errors:
            raise InvalidStoryError(errors)

        logger.info("Loading story: %s (%s)", story.title, story.id)
        self._story = story
        self._game_state = None
        self._state = EngineState.STORY_LOADED
        self._emit(StoryLoaded(story_id=story.id))

    def start_new_game(self, player_name: str | None = None) -> GameState:
        """Create a fresh session at the starting scene and apply its entry effects."""
        story = self._require_story()
        player_name = player_name or self._default_player_name
        logger.info("Starting new game for player: %s", player_name)
        player = Player.create(player_name, story.initial_player_stats)
        game_state = GameState(
            story_id=story.id,
            current_scene_id=story.starting_scene_id,
            player=player,
        )
        game_state.visit_scene(story.starting_scene_id)
        starting_scene = self._require_scene(story, story.starting_scene_id)
        occurrences = effect_applicator.apply_all(starting_scene.effects, game_state)

        self._game_state = game_state
        self._state = EngineState.IN_GAME
        self._emit(GameStarted(story_id=story.id, player_name=player_name))
        self._emit_all(occurrences)
        return game_state

    def load_game(self, game_state: GameState) -> None:
        """Resume a previously saved session without re-entering its scene."""
        story = self._require_story()
        if game_state.story_id != story.id:
            raise StoryMismatchError(story.id, game_state.story_id)
        logger.info("Loading game state for player: %s", game_state.player.name)
        self._game_state = game_state
        self._state = EngineState.IN_GAME
        self._emit(GameLoaded(game_id=game_state.id))

    def get_current_scene(self) -> Scene:
        """Return a copy of the current scene with choice availability computed."""
        story, game_state = self._require_game()
        scene = self._require_scene(story, game_state.current_scene_id)
        return self._process_scene(scene, game_state)

    def make_choice(self, choice_id: str) -> ChoiceResult:
        """Take ``choice_id`` from the current scene and advance the story.

        Occurrences are delivered in order: choice made, choice effects,
        scene entered, then the destination's entry effects.
        """
        story, game_state = self._require_game()
        current_scene = self.get_current_scene()
        choice = current_scene.get_choice(choice_id)
        if choice is None:
            raise ChoiceNotFoundError(choice_id)
        if choice.disabled:
            raise ChoiceDisabledError(choice_id, choice.disabled_reason)

        logger.debug("Player chose: %s (%s)", choice.text, choice_id)
        occurrences: List[Occurrence] = []
        self._record(
            occurrences,
            [
                ChoiceMade(
                    choice_id=choice.id,
                    choice_text=choice.text,
                    from_scene=current_scene.id,
                    target_scene=choice.target_scene_id,
                )
            ],
        )
        self._record(occurrences, effect_applicator.apply_all(choice.effects, game_state))

        if choice.is_navigation:
            logger.debug(
                "Choice '%s' requests navigation to %s", choice_id, choice.target_scene_id
            )
            return ChoiceResult(
                occurrences=occurrences,
                scene=self.get_current_scene(),
                navigation=choice.target_scene_id,
            )

        target_scene = self._require_scene(story, choice.target_scene_id)
        old_scene_id = game_state.current_scene_id
        game_state.visit_scene(target_scene.id)
        entered = SceneEntered(scene_id=target_scene.id, scene_title=target_scene.title)
        self._record(occurrences, [entered])
        self._record(occurrences, effect_applicator.apply_all(target_scene.effects, game_state))
        logger.debug("Moved from scene '%s' to '%s'", old_scene_id, target_scene.id)
        return ChoiceResult(occurrences=occurrences, scene=self.get_current_scene())

    def is_game_ended(self) -> bool:
        """True once the game was ended or the current scene is an ending."""
        if self._state is EngineState.ENDED:
            return True
        if self._state is not EngineState.IN_GAME:
            return False
        if self._story is None or self._game_state is None:
            return False
        scene = self._story.get_scene(self._game_state.current_scene_id)
        return scene is not None and scene.is_ending

    def end_game(self) -> GameState:
        """Close the active session; the final state stays readable."""
        _story, game_state = self._require_game()
        self._state = EngineState.ENDED
        self._emit(GameEnded(ending_scene_id=game_state.current_scene_id))
        logger.info("Game ended at scene: %s", game_state.current_scene_id)
        return game_state

    def save_game(self, save_name: str) -> GameState:
        """Stamp playtime and save time, then return a snapshot for persistence."""
        _story, game_state = self._require_game()
        game_state.mark_saved()
        self._emit(GameSaved(save_name=save_name))
        logger.info("Game saved: %s", save_name)
        return copy.deepcopy(game_state)

    def event_history(self) -> List[LoggedEvent]:
        return self._event_log.events()

    def recent_events(self, count: int) -> List[LoggedEvent]:
        return self._event_log.recent(count)

    def _process_scene(self, scene: Scene, game_state: GameState) -> Scene:
        choices = [self._process_choice(choice, game_state) for choice in scene.choices]
        return replace(scene, choices=choices)

    @staticmethod
    def _process_choice(choice: Choice, game_state: GameState) -> Choice:
        disabled = choice.disabled or not condition_evaluator.evaluate(choice.conditions, game_state)
        reason = choice.disabled_reason
        if disabled and reason is None:
            reason = DEFAULT_DISABLED_REASON
        return replace(choice, disabled=disabled, disabled_reason=reason)

    def _require_story(self) -> Story:
        if self._story is None:
            raise NoStoryLoadedError()
        return self._story

    def _require_game(self) -> tuple[Story, GameState]:
        story = self._require_story()
        if self._game_state is None or self._state is not EngineState.IN_GAME:
            raise NoActiveGameError()
        return story, self._game_state

    @staticmethod
    def _require_scene(story: Story, scene_id: str) -> Scene:
        scene = story.get_scene(scene_id)
        if scene is None:
            raise SceneNotFoundError(scene_id)
        return scene

    def _record(self, collected: List[Occurrence], occurrences: Iterable[Occurrence]) -> None:
        for occurrence in occurrences:
            collected.append(occurrence)
            self._emit(occurrence)

    def _emit_all(self, occurrences: Iterable[Occurrence]) -> None:
        for occurrence in occurrences:
            self._emit(occurrence)

    def _emit(self, occurrence: Occurrence) -> None:
        self._observers.observe(occurrence)
