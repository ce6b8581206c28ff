"""Stutter-like event detection from token adjacency."""
from typing import List

from fluentme.analysis.text import tokenize
from fluentme.models import DisfluencyEvent, DisfluencyKind


class DisfluencyDetector:
    """
    Flags three patterns for each token after the first:

      repetition     "the the"      identical adjacent tokens
      prefix_repeat  "b ball"       short (<= 2 chars) token that prefixes the next
      prolongation   "b bb bbig"    doubled initial letter, also starting the token two back

    Repetition suppresses the other two checks for the same token;
    prefix_repeat and prolongation can both fire.
    """

    max_prefix_len = 2
    min_prolongation_len = 3

    def detect(self, transcript: str) -> List[DisfluencyEvent]:
        return self.detect_tokens(tokenize(transcript))

    def detect_tokens(self, tokens: List[str]) -> List[DisfluencyEvent]:
        events: List[DisfluencyEvent] = []
        for i in range(1, len(tokens)):
            token, prev = tokens[i], tokens[i - 1]

            if token == prev:
                events.append(DisfluencyEvent(DisfluencyKind.REPETITION, i, token))
                continue

            if len(prev) <= self.max_prefix_len and token.startswith(prev):
                events.append(DisfluencyEvent(DisfluencyKind.PREFIX_REPEAT, i, token, prev_token=prev))

            if self._is_prolongation(tokens, i):
                events.append(DisfluencyEvent(DisfluencyKind.PROLONGATION, i, token))
        return events

    def _is_prolongation(self, tokens: List[str], i: int) -> bool:
        token = tokens[i]
        if len(token) < self.min_prolongation_len or token[0] != token[1]:
            return False
        # needs a token two back to compare against
        if i < 2:
            return False
        return tokens[i - 2][0] == token[0]
