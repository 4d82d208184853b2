#!/usr/bin/env python3
# =============================================================================
# scripts/generate_question_live.py - Live Test for the Question Writer
# =============================================================================
# Writes real questions with the OpenAI API and prints them. Nothing is saved.
#
# Usage:
#   python scripts/generate_question_live.py
#   python scripts/generate_question_live.py Talmud Scholar Berachot --premium
#
# Make sure OPENAI_API_KEY is set in your environment or .env file.
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

# Check for API key
if not os.getenv("OPENAI_API_KEY"):
    print("ERROR: OPENAI_API_KEY not found in environment")
    print("Please set it in your .env file or environment")
    sys.exit(1)

from agents.question_writer import QuestionWriter, QuestionGenerationError
from core.models.profile import Tier
from core.models.question import QuestionCategory
from lib.scoring import QUESTION_TIERS


def print_draft(category: QuestionCategory, tier: Tier, draft) -> None:
    print("=" * 70)
    print(f"{category.value} / {tier.value}")
    print("=" * 70)
    print(draft.question)
    for option in draft.options:
        marker = "*" if option == draft.correct_answer else " "
        print(f"  [{marker}] {option}")
    print(f"\nExplanation: {draft.explanation}")
    if draft.premium_explanation:
        print(f"\nPremium: {draft.premium_explanation}")
    for source in draft.sources or []:
        print(f"  - {source.source}: {source.text}")
    print()


def main() -> int:
    parser = argparse.ArgumentParser(description="Write trivia questions with OpenAI")
    parser.add_argument("category", nargs="?", choices=[c.value for c in QuestionCategory])
    parser.add_argument("tier", nargs="?", choices=[t.value for t in QUESTION_TIERS])
    parser.add_argument("subcategory", nargs="?")
    parser.add_argument("--premium", action="store_true", help="Request premium explanation and sources")
    args = parser.parse_args()

    writer = QuestionWriter()

    # One question per category unless a category was given
    categories = [QuestionCategory(args.category)] if args.category else list(QuestionCategory)
    tier = Tier(args.tier) if args.tier else Tier.STUDENT

    failures = 0
    for category in categories:
        try:
            draft = writer.write_question(category, tier, subcategory=args.subcategory, premium=args.premium)
            print_draft(category, tier, draft)
        except QuestionGenerationError as e:
            failures += 1
            print(f"FAILED {category.value}: {e}\n")

    print(f"{len(categories) - failures}/{len(categories)} questions written")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
