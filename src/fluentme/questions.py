from typing import Dict, List, Mapping, Optional, Sequence

from fluentme.errors import InvalidAssessment
from fluentme.models import Prompt, SkillType


def _prompts(instruction: str, *texts: str) -> List[Prompt]:
    return [Prompt(instruction=instruction, text=t) for t in texts]


QUESTION_BANK: Dict[SkillType, List[Prompt]] = {
    SkillType.READ: _prompts(
        "Read this aloud:",
        "The quick brown fox jumps over the lazy dog.",
        "Artificial intelligence is shaping the future.",
        "Learning never exhausts the mind.",
        "Consistency is the key to success.",
        "Knowledge speaks, but wisdom listens.",
    ),
    SkillType.WORD: _prompts(
        "Say this word:",
        "Innovation",
        "Technology",
        "Entrepreneurship",
        "Creativity",
        "Collaboration",
    ),
    SkillType.TONGUE: _prompts(
        "Say this tongue twister quickly:",
        "She sells seashells by the seashore.",
        "Peter Piper picked a peck of pickled peppers.",
        "How much wood would a woodchuck chuck?",
        "Fuzzy Wuzzy was a bear, Fuzzy Wuzzy had no hair.",
        "Red lorry, yellow lorry, red lorry, yellow lorry.",
    ),
    SkillType.QUESTION: _prompts(
        "Answer this question:",
        "What is your favorite hobby?",
        "Describe your morning routine.",
        "What motivates you every day?",
        "How do you handle challenges?",
        "If you could travel anywhere, where would you go?",
    ),
    SkillType.PHOTO: _prompts(
        "Describe this photo:",
        "Imagine a park with children playing.",
        "Imagine a busy street market.",
        "Imagine a mountain landscape at sunset.",
        "Imagine a calm beach with waves crashing.",
        "Imagine a bustling city skyline at night.",
    ),
    SkillType.NUMBERS: _prompts(
        "Read these numbers aloud:",
        "One, two, three, four, five.",
        "Ten, twenty, thirty, forty, fifty.",
        "Hundred, two hundred, three hundred, four hundred, five hundred.",
        "Eleven, twelve, thirteen, fourteen, fifteen.",
        "Sixty, seventy, eighty, ninety, one hundred.",
    ),
}


def parse_skill(key: Optional[str]) -> SkillType:
    try:
        return SkillType((key or "").strip().lower())
    except ValueError:
        raise InvalidAssessment(f"Unknown assessment type: {key!r}") from None


def get_questions(key: Optional[str],
                  bank: Mapping[SkillType, Sequence[Prompt]] = QUESTION_BANK) -> List[Prompt]:
    """Ordered prompts for a skill type; InvalidAssessment if there are none."""
    skill = parse_skill(key)
    prompts = bank.get(skill)
    if not prompts:
        raise InvalidAssessment(f"No questions found for assessment type {skill.value!r}")
    return list(prompts)
