# =============================================================================
# core/models/question.py - Question Schemas
# =============================================================================
# These models define the API contract for solo play:
# - QuestionCategory / Difficulty: Enums for question classification
# - Source: A cited text backing a premium explanation
# - Question: A stored question row (includes the answer)
# - PublicQuestion: What a player sees before answering (no answer)
# - AnswerRequest / AnswerResponse: Solo answer round trip
# - ReviewRequest / ReviewResponse: Rabbinic review submission
#
# Subcategory lists are fixed per category; Jewish History has none.
# =============================================================================

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .profile import Tier


class QuestionCategory(str, Enum):
    """Top-level question categories."""
    CHUMASH = "Chumash"
    TANACH = "Tanach"
    TALMUD = "Talmud"
    HALACHA = "Halacha"
    JEWISH_HISTORY = "Jewish History"


class Difficulty(str, Enum):
    """Question difficulty, one per playable tier."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


# -----------------------------------------------------------------------------
# Subcategories
# -----------------------------------------------------------------------------

CHUMASH_PARSHIYOT = [
    "Bereishit", "Noach", "Lech Lecha", "Vayeira", "Chayei Sarah", "Toldot", "Vayetze", "Vayishlach",
    "Vayeshev", "Miketz", "Vayigash", "Vayechi", "Shemot", "Va'eira", "Bo", "Beshalach",
    "Yitro", "Mishpatim", "Terumah", "Tetzaveh", "Ki Tisa", "Vayakhel", "Pekudei", "Vayikra",
    "Tzav", "Shemini", "Tazria", "Metzora", "Acharei Mot", "Kedoshim", "Emor", "Behar",
    "Bechukotai", "Bamidbar", "Naso", "Beha'alotcha", "Shelach", "Korach", "Chukat", "Balak",
    "Pinchas", "Matot", "Masei", "Devarim", "Va'etchanan", "Eikev", "Re'eh", "Shoftim",
    "Ki Teitzei", "Ki Tavo", "Nitzavim", "Vayeilech", "Ha'azinu", "V'Zot HaBeracha",
]

TANACH_BOOKS = [
    "Bereishit (Genesis)", "Shemot (Exodus)", "Vayikra (Leviticus)", "Bamidbar (Numbers)",
    "Devarim (Deuteronomy)", "Yehoshua (Joshua)", "Shoftim (Judges)", "Shmuel I (Samuel I)",
    "Shmuel II (Samuel II)", "Melachim I (Kings I)", "Melachim II (Kings II)", "Yeshayahu (Isaiah)",
    "Yirmiyahu (Jeremiah)", "Yechezkel (Ezekiel)", "Trei Asar (Twelve Prophets)", "Tehillim (Psalms)",
    "Mishlei (Proverbs)", "Iyov (Job)", "Shir HaShirim (Song of Songs)", "Rut (Ruth)",
    "Eichah (Lamentations)", "Kohelet (Ecclesiastes)", "Esther", "Daniel", "Ezra-Nechemiah",
    "Divrei HaYamim (Chronicles)",
]

TALMUD_TRACTATES = [
    "Berachot", "Shabbat", "Eruvin", "Pesachim", "Rosh Hashanah", "Yoma", "Sukkah", "Beitzah",
    "Taanit", "Megillah", "Moed Katan", "Chagigah", "Yevamot", "Ketubot", "Nedarim", "Nazir",
    "Sotah", "Gittin", "Kiddushin", "Bava Kamma", "Bava Metzia", "Bava Batra", "Sanhedrin",
    "Makkot", "Shevuot", "Avodah Zarah", "Horayot", "Zevachim", "Menachot", "Chullin", "Bechorot",
    "Arachin", "Temurah", "Keritot", "Meilah", "Tamid", "Niddah",
]

HALACHA_TOPICS = [
    "Shabbat", "Kashrut", "Tefillah (Prayer)", "Brachot (Blessings)", "Tzitzit and Tefillin",
    "Mezuzah", "Family Purity (Taharat HaMishpacha)", "Holidays and Festivals", "Rosh Chodesh",
    "Laws of Mourning", "Laws of Conversion", "Business Ethics", "Lashon Hara (Speech)",
    "Honoring Parents", "Charity (Tzedakah)", "Laws of Niddah", "Mikvah", "Kiddush and Havdalah",
    "Chanukah", "Purim", "Pesach (Passover)", "Shavuot", "Sukkot", "Rosh Hashanah", "Yom Kippur",
    "Laws of Eruv", "Laws of Chol HaMoed", "Laws of Yom Tov", "Laws of Shemittah",
    "Laws of Terumah and Maaser",
]

SUBCATEGORIES: dict[QuestionCategory, list[str]] = {
    QuestionCategory.CHUMASH: CHUMASH_PARSHIYOT,
    QuestionCategory.TANACH: TANACH_BOOKS,
    QuestionCategory.TALMUD: TALMUD_TRACTATES,
    QuestionCategory.HALACHA: HALACHA_TOPICS,
    QuestionCategory.JEWISH_HISTORY: [],
}


def is_valid_subcategory(category: QuestionCategory, subcategory: str) -> bool:
    """Check a subcategory against the fixed list for its category."""
    return subcategory in SUBCATEGORIES.get(category, [])


# =============================================================================
# Question Models
# =============================================================================

class Source(BaseModel):
    """
    A cited source for a premium explanation.

    Example:
        {"text": "In the beginning...", "source": "Bereishit 1:1"}
    """

    text: str = Field(..., description="Quoted or paraphrased text")
    source: str = Field(
        ...,
        description='Citation, e.g. "Shabbat 31b" or "Shulchan Aruch Orach Chaim 1:1"'
    )
    commentary: str | None = Field(default=None, description="Optional extra context")


class PublicQuestion(BaseModel):
    """
    A question as shown before it is answered.

    The correct answer and explanations are withheld until the player
    answers through POST /questions/answer.
    """

    question: str
    options: list[str]
    category: str
    difficulty: str
    tier: Tier | None = None
    subcategory: str | None = None


class Question(PublicQuestion):
    """
    A stored row of the questions table.

    Extends PublicQuestion with the answer and explanations.
    """

    id: UUID | None = None
    correct_answer: str
    explanation: str = ""
    premium_explanation: str | None = None
    sources: list[Source] | None = None

    model_config = {"from_attributes": True}

    def to_public(self) -> PublicQuestion:
        """Strip the answer and explanations."""
        return PublicQuestion(
            question=self.question,
            options=self.options,
            category=self.category,
            difficulty=self.difficulty,
            tier=self.tier,
            subcategory=self.subcategory,
        )


class NextQuestionResponse(BaseModel):
    """
    Response for GET /questions/next.

    daily_questions_remaining is None for Pro members (unlimited).
    """

    question_id: str
    question: PublicQuestion
    daily_questions_remaining: int | None = None


class AnswerRequest(BaseModel):
    """Solo answer submission."""

    question_id: UUID = Field(..., description="ID returned by GET /questions/next")
    selected_answer: str = Field(..., min_length=1, description="The chosen option")


class AnswerResponse(BaseModel):
    """
    Result of a solo answer.

    Example:
        {
            "correct": true,
            "points_earned": 25,
            "new_total_points": 310,
            "new_tier": "Scholar",
            "streak": 5,
            "streak_bonus": 5,
            "correct_answer": "Moshe",
            "explanation": "..."
        }
    """

    correct: bool
    points_earned: int
    new_total_points: int
    new_tier: Tier
    streak: int
    streak_bonus: int
    correct_answer: str
    explanation: str
    premium_explanation: str | None = None
    sources: list[Source] | None = None


class ReviewRequest(BaseModel):
    """Submit a question for rabbinic review."""

    question_id: UUID


class ReviewResponse(BaseModel):
    """Confirmation of a review submission."""

    success: bool = True
    message: str = "Question submitted for Rabbinic Review"
    review_id: Any
