"""Tests for queue transitions and the requeue policy."""

import pytest

from times_trainer.drill.session_queue import advance_on_correct, advance_on_wrong
from times_trainer.models.problem import Problem


def _queue(n: int) -> list[Problem]:
    return [Problem(operand_a=i + 1, operand_b=2) for i in range(n)]


class TestAdvanceOnCorrect:
    def test_drops_head(self):
        queue = _queue(3)
        assert advance_on_correct(queue) == queue[1:]

    def test_single_element_empties(self):
        assert advance_on_correct(_queue(1)) == []

    def test_empty_queue(self):
        assert advance_on_correct([]) == []

    def test_does_not_mutate_input(self):
        queue = _queue(3)
        advance_on_correct(queue)
        assert len(queue) == 3


class TestAdvanceOnWrong:
    def test_reinserted_three_places_back(self):
        queue = _queue(10)
        result = advance_on_wrong(queue)
        assert len(result) == 10
        assert result[:3] == queue[1:4]
        assert (result[3].operand_a, result[3].operand_b) == (1, 2)
        assert result[4:] == queue[4:]

    def test_copy_has_new_id_and_attempt(self):
        queue = _queue(5)
        result = advance_on_wrong(queue)
        copy = result[3]
        assert copy.id != queue[0].id
        assert copy.attempts == 1

    def test_attempts_accumulate(self):
        result = advance_on_wrong(_queue(1))
        result = advance_on_wrong(result)
        assert result[0].attempts == 2

    def test_never_immediately_next_and_appears_once(self):
        for n in range(2, 12):
            queue = _queue(n)
            head = queue[0]
            result = advance_on_wrong(queue)
            positions = [
                i for i, p in enumerate(result)
                if (p.operand_a, p.operand_b) == (head.operand_a, head.operand_b)
            ]
            assert len(positions) == 1
            assert positions[0] > 0
            assert len(result) == n

    def test_short_queue_goes_to_end(self):
        queue = _queue(2)
        result = advance_on_wrong(queue)
        assert result[0] == queue[1]
        assert result[1].operand_a == queue[0].operand_a

    def test_single_problem_comes_straight_back(self):
        queue = _queue(1)
        result = advance_on_wrong(queue)
        assert len(result) == 1
        assert result[0].attempts == 1

    def test_custom_offset(self):
        queue = _queue(6)
        result = advance_on_wrong(queue, offset=2)
        assert result[2].operand_a == queue[0].operand_a

    def test_invalid_offset(self):
        with pytest.raises(ValueError):
            advance_on_wrong(_queue(3), offset=0)

    def test_empty_queue(self):
        assert advance_on_wrong([]) == []
