"""Word-level edit distance between a reference prompt and a transcript."""
from typing import List, Sequence

from fluentme.analysis.text import tokenize
from fluentme.models import AlignmentResult


def edit_distance(ref: Sequence[str], hyp: Sequence[str]) -> int:
    """Levenshtein distance over tokens with unit costs.

    Keeps two rows of the dp table, dp[i][j] being the edits needed to turn
    ref[:i] into hyp[:j].
    """
    m = len(hyp)
    prev: List[int] = list(range(m + 1))
    for i in range(1, len(ref) + 1):
        curr = [i] + [0] * m
        for j in range(1, m + 1):
            if ref[i - 1] == hyp[j - 1]:
                curr[j] = prev[j - 1]
            else:
                curr[j] = 1 + min(prev[j], curr[j - 1], prev[j - 1])
        prev = curr
    return prev[m]


def align_tokens(ref: Sequence[str], hyp: Sequence[str]) -> AlignmentResult:
    n = len(ref)
    if n == 0:
        # nothing to divide by
        return AlignmentResult(edit_distance=len(hyp), reference_length=0, wer=0.0 if not hyp else 1.0)
    distance = edit_distance(ref, hyp)
    return AlignmentResult(edit_distance=distance, reference_length=n, wer=min(1.0, distance / n))


def align(reference: str, hypothesis: str) -> AlignmentResult:
    return align_tokens(tokenize(reference), tokenize(hypothesis))


def compute_wer(reference: str, hypothesis: str) -> float:
    return align(reference, hypothesis).wer
