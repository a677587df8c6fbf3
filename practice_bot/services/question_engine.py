from __future__ import annotations

import logging
import random
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from .models import (
    AnswerValue,
    ContentType,
    MatchingPair,
    PairTypeFilter,
    PracticeDocument,
    Question,
    QuestionKind,
    RawChoiceQuestion,
    RawMatchingQuestion,
)

logger = logging.getLogger(__name__)

BUCKET_ORDER = (
    PairTypeFilter(ContentType.text, ContentType.text),
    PairTypeFilter(ContentType.text, ContentType.image),
    PairTypeFilter(ContentType.image, ContentType.text),
    PairTypeFilter(ContentType.image, ContentType.image),
)


def canonical_pairs(
    pool: Iterable[RawMatchingQuestion],
    pair_filter: PairTypeFilter,
) -> FrozenSet[MatchingPair]:
    """Correct pairs of one bucket, projected from the unbucketed matching pool."""
    return frozenset(
        MatchingPair(left=raw.item_a.content, right=raw.item_b.content)
        for raw in pool
        if raw.pair_filter == pair_filter
    )


def _correct_choice_texts(question: Question) -> FrozenSet[str]:
    texts = [choice.text for choice in question.choices if choice.is_correct]
    if not question.allow_multiple:
        # Single-select questions are graded against the first flagged choice.
        texts = texts[:1]
    return frozenset(texts)


def correct_value(question: Question) -> AnswerValue:
    if question.kind == QuestionKind.matching:
        positions: Dict[str, int] = {}
        for idx, item in enumerate(question.left_items):
            positions.setdefault(item.content, idx)
        return tuple(
            sorted(
                question.correct_pairs,
                key=lambda pair: (positions.get(pair.left, len(positions)), pair.right),
            )
        )
    return _correct_choice_texts(question)


def is_correct(question: Question, value: Optional[AnswerValue]) -> bool:
    if question.kind == QuestionKind.choice:
        submitted = frozenset(value or ())
        if not question.allow_multiple and len(submitted) != 1:
            return False
        return submitted == _correct_choice_texts(question)
    if question.kind == QuestionKind.matching:
        if not value:
            return False
        pairs = list(value)
        # A repeated pair would shrink the set and hide an extra submission.
        if len(pairs) != len(set(pairs)):
            return False
        return frozenset(pairs) == question.correct_pairs
    return False


class QuestionEngine:
    """Builds the ordered question list for a practice session and grades answers."""

    def __init__(self, seed: Optional[int] = None):
        self.random = random.Random(seed)

    def normalize(self, document: PracticeDocument) -> List[Question]:
        questions = [self._materialize_choice(raw) for raw in document.choice_questions]
        questions.extend(self._build_matching_questions(document))
        return questions

    def _materialize_choice(self, raw: RawChoiceQuestion) -> Question:
        return Question(
            id=raw.question_id,
            kind=QuestionKind.choice,
            prompt=raw.text,
            points=raw.points,
            time_limit=raw.time_limit,
            hint=raw.hint,
            choices=tuple(raw.answers),
            allow_multiple=raw.allow_multiple,
        )

    def _build_matching_questions(self, document: PracticeDocument) -> List[Question]:
        buckets: Dict[PairTypeFilter, List[RawMatchingQuestion]] = {key: [] for key in BUCKET_ORDER}
        for raw in document.matching_questions:
            buckets[raw.pair_filter].append(raw)
        questions: List[Question] = []
        for pair_filter in BUCKET_ORDER:
            group = buckets[pair_filter]
            if not group:
                continue
            questions.append(
                self._materialize_matching(
                    pair_filter,
                    group,
                    pool=document.matching_questions,
                    time_limit=document.matching_time_limit,
                )
            )
        return questions

    def _materialize_matching(
        self,
        pair_filter: PairTypeFilter,
        group: Sequence[RawMatchingQuestion],
        pool: Sequence[RawMatchingQuestion],
        time_limit: Optional[int],
    ) -> Question:
        left_items = [raw.item_a for raw in group]
        right_items = [raw.item_b for raw in group]
        self.random.shuffle(right_items)
        if len(left_items) != len(right_items):
            logger.warning(
                "Matching bucket %s has %d left and %d right items; only %d can be paired",
                pair_filter.key,
                len(left_items),
                len(right_items),
                min(len(left_items), len(right_items)),
            )
        return Question(
            id=f"matching-{pair_filter.key}",
            kind=QuestionKind.matching,
            prompt=f"Match {pair_filter.label} pairs",
            points=sum(raw.points for raw in group),
            time_limit=time_limit,
            left_items=tuple(left_items),
            right_items=tuple(right_items),
            pair_filter=pair_filter,
            correct_pairs=canonical_pairs(pool, pair_filter),
        )

    def evaluate(self, question: Question, value: Optional[AnswerValue]) -> bool:
        return is_correct(question, value)
