# =============================================================================
# core/services/game_service.py - Head-to-Head Business Logic
# =============================================================================
# Handles the two-player game lifecycle:
#   create -> join -> ready -> start -> (answer, next) x N -> completed
#
# Every transition that two players can race on is a conditional update:
# - join:  player2_id IS NULL AND status = waiting
# - start: started_at IS NULL AND status = waiting (single starter)
# - next:  current_question_index = <index the caller saw>
# The write either wins and returns the new row, or matches nothing and the
# caller re-reads once. Scores are recomputed from answer rows, so two
# answers landing together cannot overwrite each other's points.
# =============================================================================

import logging
import random
from typing import Any
from uuid import UUID

from agents.question_writer import QuestionWriter
from app.config import settings
from app.exceptions import (
    AlreadyAnsweredError,
    GameCodeUnavailableError,
    GameNotFoundError,
    GameStateError,
    NotAPlayerError,
)
from core.models.game import (
    GAME_CODE_ALPHABET,
    GAME_CODE_LENGTH,
    CreateGameResponse,
    Game,
    GameAnswer,
    GameStateResponse,
    GameStatus,
    StartGameResponse,
    SubmitGameAnswerResponse,
)
from core.models.question import Question
from core.services.profile_service import ProfileService
from lib.scoring import answers_match, build_game_schedule
from lib.supabase_client import DuplicateRowError, SupabaseClient
from lib.utils import normalize_uuid, same_id, utc_now_iso

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 10
HEAD_TO_HEAD_FEATURE = "Head-to-head games"


def generate_game_code(rng: random.Random | None = None) -> str:
    """Random six-character share code without look-alike characters."""
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(GAME_CODE_ALPHABET) for _ in range(GAME_CODE_LENGTH))


class GameService:
    """
    Service for head-to-head games.

    Methods return response models ready for the router.
    """

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _load_for_player(game_id: UUID | str, user_id: UUID | str) -> tuple[dict[str, Any], bool]:
        """
        Fetch a game and check the caller plays in it.

        Returns:
            Tuple of (game row, is_player1)

        Raises:
            GameNotFoundError: If the game doesn't exist
            NotAPlayerError: If the caller isn't player 1 or 2
        """
        game = SupabaseClient.fetch_game(game_id)
        if not game:
            raise GameNotFoundError(str(game_id))

        if same_id(user_id, game.get("player1_id")):
            return game, True
        if same_id(user_id, game.get("player2_id")):
            return game, False

        logger.warning(f"User {user_id} is not a player in game {game_id}")
        raise NotAPlayerError(str(game_id))

    @staticmethod
    def _with_names(game: dict[str, Any]) -> Game:
        """Attach player display names."""
        names = SupabaseClient.fetch_display_names([game.get("player1_id"), game.get("player2_id")])
        lowered = {key.lower(): value for key, value in names.items()}
        return Game.model_validate({
            **game,
            "player1_name": lowered.get(str(game.get("player1_id") or "").lower()),
            "player2_name": lowered.get(str(game.get("player2_id") or "").lower()),
        })

    @staticmethod
    def _find_answer(answers: list[dict[str, Any]], player_id: Any) -> GameAnswer | None:
        for answer in answers:
            if same_id(answer.get("user_id"), player_id):
                return GameAnswer.model_validate(answer)
        return None

    @staticmethod
    def _build_state(
        game: dict[str, Any],
        waiting_for_answers: bool = False,
    ) -> GameStateResponse:
        """
        Build the polling payload for a game.

        While active, includes the current question (without its answer)
        and each player's answer to it so far.
        """
        state = GameStateResponse(
            game=GameService._with_names(game),
            waiting_for_answers=waiting_for_answers,
            game_complete=game.get("status") == GameStatus.COMPLETED.value,
        )

        index = game.get("current_question_index") or 0
        if game.get("status") != GameStatus.ACTIVE.value or index >= game.get("total_questions", 0):
            return state

        game_question = SupabaseClient.fetch_game_question(game["id"], index)
        if not game_question:
            return state

        question_id = str(game_question["question_id"])
        question_row = game_question.get("questions") or SupabaseClient.fetch_question(question_id)
        if question_row:
            state.current_question = Question.model_validate(question_row).to_public()
        state.question_id = question_id
        state.question_points = game_question.get("points")

        answers = SupabaseClient.fetch_game_answers(game["id"], question_id=question_id)
        state.player1_answer = GameService._find_answer(answers, game.get("player1_id"))
        state.player2_answer = GameService._find_answer(answers, game.get("player2_id"))
        return state

    # -------------------------------------------------------------------------
    # Lobby
    # -------------------------------------------------------------------------

    @staticmethod
    def create_game(
        user_id: UUID | str,
        total_questions: int | None = None,
        rng: random.Random | None = None,
    ) -> CreateGameResponse:
        """
        Create a waiting game with the caller as player 1.

        Raises:
            ProRequiredError: If the caller isn't Pro
            GameCodeUnavailableError: If no free code was found
        """
        profile = ProfileService.get_profile(user_id)
        ProfileService.require_pro(profile, HEAD_TO_HEAD_FEATURE)

        total = total_questions or settings.HEAD_TO_HEAD_QUESTIONS
        user_id_str = normalize_uuid(user_id)

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = generate_game_code(rng)
            if SupabaseClient.fetch_game_by_code(code):
                continue

            try:
                game = SupabaseClient.insert_game({
                    "game_code": code,
                    "player1_id": user_id_str,
                    "created_by": user_id_str,
                    "status": GameStatus.WAITING.value,
                    "total_questions": total,
                })
            except DuplicateRowError:
                # Taken between the lookup and the insert
                continue

            logger.info(f"Created game {game['id']} with code {code} (attempt {attempt})")
            return CreateGameResponse(game=GameService._with_names(game), game_code=code)

        raise GameCodeUnavailableError(MAX_CODE_ATTEMPTS)

    @staticmethod
    def join_game(user_id: UUID | str, game_code: str) -> Game:
        """
        Join a waiting game as player 2.

        Raises:
            ProRequiredError: If the caller isn't Pro
            GameNotFoundError: If no game has this code
            GameStateError: If the game is not waiting, is full, or is the caller's own
        """
        profile = ProfileService.get_profile(user_id)
        ProfileService.require_pro(profile, HEAD_TO_HEAD_FEATURE)

        game = SupabaseClient.fetch_game_by_code(game_code)
        if not game:
            raise GameNotFoundError(game_code.upper())

        game_id = str(game["id"])

        # Rejoining is harmless (e.g. the page was reloaded)
        if same_id(user_id, game.get("player2_id")):
            return GameService._with_names(game)

        if game.get("status") != GameStatus.WAITING.value:
            raise GameStateError(
                "This game is no longer accepting players",
                game_id,
                status=game.get("status"),
            )

        if same_id(user_id, game.get("player1_id")):
            raise GameStateError(
                "You cannot join your own game",
                game_id,
                status=game.get("status"),
                status_code=400,
                suggestion="Share the game code with a friend instead",
            )

        if game.get("player2_id"):
            raise GameStateError("This game is already full", game_id, status=game.get("status"))

        updated = SupabaseClient.update_game(
            game_id,
            {"player2_id": normalize_uuid(user_id)},
            expect={"status": GameStatus.WAITING.value},
            expect_null=["player2_id"],
        )

        if updated is None:
            # Lost the race; check whether it was lost to ourselves
            current = SupabaseClient.fetch_game(game_id)
            if current and same_id(user_id, current.get("player2_id")):
                return GameService._with_names(current)
            raise GameStateError("This game is already full", game_id, status=(current or {}).get("status"))

        logger.info(f"User {user_id} joined game {game_id}")
        return GameService._with_names(updated)

    @staticmethod
    def mark_ready(user_id: UUID | str, game_id: UUID | str) -> Game:
        """
        Set the caller's ready flag.

        Raises:
            GameStateError: If the game is no longer waiting or has no second player
        """
        game, is_player1 = GameService._load_for_player(game_id, user_id)

        if game.get("status") != GameStatus.WAITING.value:
            raise GameStateError("Game is not in waiting status", str(game_id), status=game.get("status"))

        if not game.get("player2_id"):
            raise GameStateError("Waiting for a second player to join", str(game_id), status=game.get("status"))

        field = "player1_ready" if is_player1 else "player2_ready"
        updated = SupabaseClient.update_game(
            game_id,
            {field: True},
            expect={"status": GameStatus.WAITING.value, "player2_id": game["player2_id"]},
        )
        if updated is None:
            raise GameStateError("Game has already started", str(game_id))

        logger.info(f"User {user_id} is ready in game {game_id} ({field})")
        return GameService._with_names(updated)

    # -------------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------------

    @staticmethod
    def start_game(
        user_id: UUID | str,
        game_id: UUID | str,
        writer: QuestionWriter | None = None,
        rng: random.Random | None = None,
    ) -> StartGameResponse:
        """
        Generate the game's questions and make it active.

        Either player may start once both have joined and readied up.
        The started_at claim makes sure only one request generates questions;
        if generation fails the claim is released so the game can be
        started again.

        Raises:
            GameStateError: If players are missing/not ready or the game already started
            QuestionGenerationError: If a question couldn't be generated
        """
        game, _ = GameService._load_for_player(game_id, user_id)
        game_id_str = str(game["id"])

        if game.get("status") != GameStatus.WAITING.value or not game.get("player2_id"):
            raise GameStateError(
                "Game is not ready to start. Both players must join first.",
                game_id_str,
                status=game.get("status"),
            )

        if not (game.get("player1_ready") and game.get("player2_ready")):
            raise GameStateError(
                "Both players must be ready before the game starts",
                game_id_str,
                status=game.get("status"),
            )

        claimed = SupabaseClient.update_game(
            game_id_str,
            {"started_at": utc_now_iso()},
            expect={"status": GameStatus.WAITING.value},
            expect_null=["started_at"],
        )
        if claimed is None:
            raise GameStateError("Game has already been started", game_id_str, status=game.get("status"))

        writer = writer or QuestionWriter()
        total = game.get("total_questions") or settings.HEAD_TO_HEAD_QUESTIONS
        schedule = build_game_schedule(total, rng)

        links = []
        try:
            for slot in schedule:
                draft = writer.write_question(slot.category, slot.tier)
                saved = SupabaseClient.insert_question(draft.to_row(
                    category=slot.category.value,
                    difficulty=slot.difficulty.value,
                    tier=slot.tier.value,
                    generated_by=normalize_uuid(user_id),
                ))
                links.append({
                    "game_id": game_id_str,
                    "question_id": str(saved["id"]),
                    "question_index": slot.index,
                    "category": slot.category.value,
                    "points": slot.points,
                })
            SupabaseClient.insert_game_questions(links)

            activated = SupabaseClient.update_game(
                game_id_str,
                {"status": GameStatus.ACTIVE.value, "current_question_index": 0},
                expect={"status": GameStatus.WAITING.value},
            )
            if activated is None:
                raise GameStateError("Game changed while starting", game_id_str)

        except Exception as e:
            logger.error(f"Failed to start game {game_id_str}: {e}")
            SupabaseClient.update_game(
                game_id_str,
                {"started_at": None},
                expect={"status": GameStatus.WAITING.value},
            )
            raise

        logger.info(f"Started game {game_id_str} with {len(links)} questions")
        return StartGameResponse(
            questions_generated=len(links),
            game=GameService._with_names(activated),
        )

    # -------------------------------------------------------------------------
    # Play
    # -------------------------------------------------------------------------

    @staticmethod
    def get_game_state(user_id: UUID | str, game_id: UUID | str) -> GameStateResponse:
        """Current game state for a player."""
        game, _ = GameService._load_for_player(game_id, user_id)
        return GameService._build_state(game)

    @staticmethod
    def submit_answer(
        user_id: UUID | str,
        game_id: UUID | str,
        question_id: UUID | str,
        selected_answer: str,
    ) -> SubmitGameAnswerResponse:
        """
        Answer the current question.

        Raises:
            GameStateError: If the game isn't active or this isn't the current question
            AlreadyAnsweredError: If the player already answered it
        """
        game, is_player1 = GameService._load_for_player(game_id, user_id)
        game_id_str = str(game["id"])
        question_id_str = normalize_uuid(question_id)

        if game.get("status") != GameStatus.ACTIVE.value:
            raise GameStateError("Game is not active", game_id_str, status=game.get("status"))

        game_question = SupabaseClient.fetch_game_question(game_id_str, game.get("current_question_index") or 0)
        if not game_question or not same_id(game_question.get("question_id"), question_id_str):
            raise GameStateError(
                "This is not the current question",
                game_id_str,
                status=game.get("status"),
                suggestion="Refresh the game state and answer the question shown",
            )

        question = game_question.get("questions") or SupabaseClient.fetch_question(question_id_str)
        correct_answer = (question or {}).get("correct_answer", "")
        correct = answers_match(selected_answer, correct_answer)
        points_earned = (game_question.get("points") or 0) if correct else 0

        try:
            SupabaseClient.insert_game_answer({
                "game_id": game_id_str,
                "question_id": question_id_str,
                "user_id": normalize_uuid(user_id),
                "selected_answer": selected_answer,
                "correct": correct,
                "points_earned": points_earned,
            })
        except DuplicateRowError:
            raise AlreadyAnsweredError(question_id_str)

        # Each player only writes their own score column
        answers = SupabaseClient.fetch_game_answers(game_id_str, user_id=user_id)
        score = sum(answer.get("points_earned") or 0 for answer in answers)
        field = "player1_score" if is_player1 else "player2_score"
        updated = SupabaseClient.update_game(game_id_str, {field: score}) or game

        logger.info(
            f"User {user_id} answered question {game.get('current_question_index')} "
            f"of game {game_id_str}: correct={correct}, score={score}"
        )
        return SubmitGameAnswerResponse(
            correct=correct,
            points_earned=points_earned,
            correct_answer=correct_answer,
            game=GameService._with_names(updated),
        )

    @staticmethod
    def advance(user_id: UUID | str, game_id: UUID | str) -> GameStateResponse:
        """
        Move to the next question once both players have answered.

        Both clients call this while polling; whichever request wins the
        compare-and-set advances the game, the other just returns the
        fresh state.

        Raises:
            GameStateError: If the game isn't active
        """
        game, _ = GameService._load_for_player(game_id, user_id)
        game_id_str = str(game["id"])
        status = game.get("status")

        if status == GameStatus.COMPLETED.value:
            return GameService._build_state(game)
        if status != GameStatus.ACTIVE.value:
            raise GameStateError("Game is not active", game_id_str, status=status)

        index = game.get("current_question_index") or 0
        total = game.get("total_questions") or 0

        if index >= total:
            completed = SupabaseClient.update_game(
                game_id_str,
                {"status": GameStatus.COMPLETED.value, "completed_at": utc_now_iso()},
                expect={"status": GameStatus.ACTIVE.value},
            )
            return GameService._build_state(completed or SupabaseClient.fetch_game(game_id_str) or game)

        game_question = SupabaseClient.fetch_game_question(game_id_str, index)
        if not game_question:
            raise GameStateError(
                "Current question not found",
                game_id_str,
                status=status,
                status_code=404,
            )

        answers = SupabaseClient.fetch_game_answers(game_id_str, question_id=game_question["question_id"])
        both_answered = (
            GameService._find_answer(answers, game.get("player1_id")) is not None
            and GameService._find_answer(answers, game.get("player2_id")) is not None
        )
        if not both_answered:
            return GameService._build_state(game, waiting_for_answers=True)

        next_index = index + 1
        data: dict[str, Any] = {"current_question_index": next_index}
        if next_index >= total:
            data["status"] = GameStatus.COMPLETED.value
            data["completed_at"] = utc_now_iso()

        updated = SupabaseClient.update_game(
            game_id_str,
            data,
            expect={"status": GameStatus.ACTIVE.value, "current_question_index": index},
        )
        if updated is None:
            # The other player's request advanced first
            updated = SupabaseClient.fetch_game(game_id_str) or game
        else:
            logger.info(f"Game {game_id_str} advanced to question {next_index}/{total}")

        return GameService._build_state(updated)
