"""Tests for the tic-tac-toe minimax AI."""

import logging

import pytest

from tictactoe.ai import LOSS_SCORE, WIN_SCORE, MinimaxAI
from tictactoe.errors import IllegalStateError, InvalidArgumentError
from tictactoe.game import Board, GameResult, Mark, is_terminal, result


def test_ai_takes_immediate_win():
    board = Board.from_moves([0, 3, 1])  # O to move, X threatens 2
    ai = MinimaxAI.hard(Mark.X)
    assert ai.choose_move(board) == 2


def test_opponent_to_move_gets_its_best_reply():
    # O to move, X threatens 2: blocking is O's only non-losing reply
    board = Board.from_moves([0, 4, 1])
    assert MinimaxAI.hard(Mark.X).choose_move(board) == 2
    # X to move with a win at 2, searched by an O engine
    board = Board.from_moves([0, 3, 1, 4])
    assert MinimaxAI.hard(Mark.O).choose_move(board) == 2
    assert MinimaxAI.easy(Mark.O).choose_move(board) == 2


def test_either_side_engine_agrees_with_the_mover():
    for moves in ([0, 3, 1], [0, 4, 8], [4, 0, 8, 2]):
        board = Board.from_moves(moves)
        mover = MinimaxAI.hard(board.to_move).choose_move(board)
        assert MinimaxAI.hard(board.to_move.opponent()).choose_move(board) == mover


def test_memo_table_belongs_to_one_instance():
    with pytest.raises(TypeError):
        MinimaxAI(Mark.X, _memo={})
    first, second = MinimaxAI.hard(Mark.X), MinimaxAI.hard(Mark.X)
    first.choose_move(Board.from_moves([0, 4]))
    assert first._memo
    assert second._memo == {}


def test_search_statistics_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="tictactoe.ai")
    MinimaxAI.hard(Mark.X).choose_move(Board.from_moves([0, 4]))
    assert "nodes" in caplog.text
    assert "cached" in caplog.text


def test_ai_blocks_immediate_loss():
    board = Board.from_moves([3, 0, 4, 1])  # O threatens 0-1-2
    ai = MinimaxAI.hard(Mark.X)
    assert ai.choose_move(board) == 2


def test_ai_prefers_center_on_empty_board():
    assert MinimaxAI.hard(Mark.X).choose_move(Board.initial(Mark.X)) == 4


def test_ai_answers_corner_opening_with_center():
    board = Board.from_moves([0])
    assert MinimaxAI.hard(Mark.O).choose_move(board) == 4


def test_o_blocks_when_x_threatens():
    board = Board.from_moves([0, 4, 1])  # X threatens 2
    assert MinimaxAI.hard(Mark.O).choose_move(board) == 2


def test_medium_still_chooses_legal_moves():
    board = Board.initial(Mark.X).apply(4)
    move = MinimaxAI.medium(Mark.O).choose_move(board)
    assert board.is_legal(move)


def test_easy_takes_immediate_win():
    board = Board.from_moves([0, 3, 1, 4])  # X to move, 2 wins
    assert MinimaxAI.easy(Mark.X).choose_move(board) == 2


def test_choice_is_deterministic():
    board = Board.from_moves([0, 4])
    for make in (MinimaxAI.easy, MinimaxAI.medium, MinimaxAI.hard):
        moves = {make(Mark.X).choose_move(board) for _ in range(3)}
        assert len(moves) == 1
        # a reused instance answers the same way
        ai = make(Mark.X)
        assert ai.choose_move(board) == ai.choose_move(board)


def test_pruning_does_not_change_the_choice():
    board = Board.from_moves([0, 4, 8])
    plain = MinimaxAI(Mark.O, use_pruning=False, max_depth=9)
    pruned = MinimaxAI(Mark.O, use_pruning=True, max_depth=9)
    assert plain.choose_move(board) == pruned.choose_move(board) == 1


def test_hard_self_play_is_a_draw():
    board = Board.initial(Mark.X)
    while not is_terminal(board):
        board = board.apply(MinimaxAI.hard(board.to_move).choose_move(board))
    assert result(board) is GameResult.DRAW


def test_hard_never_loses_against_easy():
    for hard_side in (Mark.X, Mark.O):
        board = Board.initial(Mark.X)
        while not is_terminal(board):
            if board.to_move is hard_side:
                ai = MinimaxAI.hard(hard_side)
            else:
                ai = MinimaxAI.easy(board.to_move)
            board = board.apply(ai.choose_move(board))
        assert result(board).winner is not hard_side.opponent()


def test_no_legal_moves_raises():
    full = Board.from_moves([0, 1, 2, 4, 3, 5, 7, 6, 8])
    with pytest.raises(IllegalStateError):
        MinimaxAI.hard(Mark.X).choose_move(full)


def test_configuration_is_validated():
    with pytest.raises(InvalidArgumentError):
        MinimaxAI(Mark.EMPTY)
    with pytest.raises(InvalidArgumentError):
        MinimaxAI(Mark.X, max_depth=0)


def test_terminal_score_rejects_unfinished_positions():
    ai = MinimaxAI.hard(Mark.X)
    with pytest.raises(InvalidArgumentError):
        ai._terminal_score(GameResult.IN_PROGRESS)
    assert ai._terminal_score(GameResult.X_WIN) == WIN_SCORE
    assert ai._terminal_score(GameResult.O_WIN) == LOSS_SCORE
    assert ai._terminal_score(GameResult.DRAW) == 0


def test_evaluate_scores_from_ai_perspective():
    # X to move with a win at 2
    board = Board.from_moves([0, 3, 1, 4])
    assert MinimaxAI.hard(Mark.X).evaluate(board) == WIN_SCORE
    assert MinimaxAI.hard(Mark.O).evaluate(board) == LOSS_SCORE
    assert MinimaxAI.hard(Mark.X).evaluate(Board.initial()) == 0


def test_evaluate_terminal_board():
    board = Board.from_moves([0, 3, 1, 4, 2])
    assert MinimaxAI.easy(Mark.O).evaluate(board) == LOSS_SCORE


def test_heuristic_counts_threats_center_and_corners():
    board = Board(cells=("X", ".", ".", ".", "X", ".", ".", ".", "O"), to_move=Mark.O)
    ai = MinimaxAI.easy(Mark.X)
    # center +3, corner 0 +2, corner 8 -2
    assert ai._heuristic(board) == 3
    threat = Board(cells=("X", "X", ".", ".", "O", ".", ".", ".", "."), to_move=Mark.O)
    # open row +10, corner +2, opposing center -3
    assert ai._heuristic(threat) == 9
