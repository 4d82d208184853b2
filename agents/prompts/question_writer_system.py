# =============================================================================
# agents/prompts/question_writer_system.py - Question Writer Prompts
# =============================================================================
# This module contains the prompts for the trivia question writer.
#
# The writer produces one multiple-choice question as a JSON object.
# Category, difficulty and tier are passed in; the model only writes content.
#
# Usage:
#   messages = build_question_messages(
#       category=QuestionCategory.TALMUD,
#       tier=Tier.SCHOLAR,
#       subcategory="Berachot",
#       premium=True,
#   )
# =============================================================================

from __future__ import annotations

from core.models.profile import Tier
from core.models.question import QuestionCategory
from lib.scoring import tier_difficulty

# =============================================================================
# System Prompt
# =============================================================================

QUESTION_WRITER_SYSTEM_PROMPT = """
<role>
You write Torah trivia questions for a learning game. Players range from
beginners to advanced students of Tanach, Talmud and Halacha.
</role>

<rules>
1. Write exactly ONE multiple-choice question with exactly 4 options.
2. Exactly one option is correct; the other three are plausible but wrong.
3. The correct_answer field must repeat the text of the correct option exactly.
4. Stay factual and within mainstream traditional sources. If unsure, pick a
   simpler fact you are sure of.
5. Match the requested difficulty: easy questions test well-known facts,
   expert questions test details a yeshiva student would know.
6. Do not reveal the answer in the question text.
</rules>

<output_format>
Return ONLY a JSON object:
{
  "question": "The question text",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correct_answer": "Option A",
  "explanation": "Why this is correct (2-3 sentences)"
}
</output_format>
"""

PREMIUM_OUTPUT_ADDENDUM = """
<premium>
Also include:
  "premium_explanation": "A deeper explanation (4-6 sentences) with the
   relevant commentators or halachic reasoning",
  "sources": [
    {"text": "Quoted or paraphrased text", "source": "Exact citation, e.g. Shabbat 31a",
     "commentary": "Optional note"}
  ]
Give 1-3 sources with precise citations.
</premium>
"""

# Descriptive labels help the model pick the right corpus
CATEGORY_LABELS: dict[QuestionCategory, str] = {
    QuestionCategory.CHUMASH: "Chumash (Five Books of Moses)",
    QuestionCategory.TANACH: "Tanach (Bible: Chumash, Neviim, Ketuvim)",
    QuestionCategory.TALMUD: "Talmud (Gemara and Mishnah)",
    QuestionCategory.HALACHA: "Halacha (Jewish Law)",
    QuestionCategory.JEWISH_HISTORY: "Jewish History (from Biblical times to modern era)",
}

SUBCATEGORY_LABELS: dict[QuestionCategory, str] = {
    QuestionCategory.CHUMASH: "Parsha",
    QuestionCategory.TANACH: "Book",
    QuestionCategory.TALMUD: "Tractate",
    QuestionCategory.HALACHA: "Topic",
}


def build_question_prompt(
    category: QuestionCategory,
    tier: Tier,
    subcategory: str | None = None,
) -> str:
    """
    Build the user message for one question.

    Example:
        Category: Talmud (Gemara and Mishnah)
        Tractate: Berachot
        Difficulty: hard
        Write a hard Talmud question for a Scholar level student.
    """
    difficulty = tier_difficulty(tier).value
    lines = [f"Category: {CATEGORY_LABELS.get(category, category.value)}"]

    if subcategory:
        label = SUBCATEGORY_LABELS.get(category, "Focus")
        lines.append(f"{label}: {subcategory}")

    lines.append(f"Difficulty: {difficulty}")
    lines.append("")
    lines.append(
        f"Write a {difficulty} {category.value} trivia question "
        f"appropriate for a {tier.value} level student."
    )
    return "\n".join(lines)


def build_question_messages(
    category: QuestionCategory,
    tier: Tier,
    subcategory: str | None = None,
    premium: bool = False,
) -> list[dict[str, str]]:
    """Build the OpenAI messages array for one question."""
    system_prompt = QUESTION_WRITER_SYSTEM_PROMPT
    if premium:
        system_prompt += PREMIUM_OUTPUT_ADDENDUM

    return [
        {"role": "system", "content": system_prompt.strip()},
        {"role": "user", "content": build_question_prompt(category, tier, subcategory)},
    ]
