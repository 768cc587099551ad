"""
Unit tests for the drag-drop and time-attack sorting engines.

Covers the shared engine lifecycle (mode guards, idempotent submission,
lesson delay, try again, resume) through the placement games.
"""

import pytest

from questkit.games.base import GameConfigError, GameResult, GameStatus
from questkit.games.drag_drop import DragDropGame, PlacementState, place_item, remove_item
from questkit.games.models import parse_config
from questkit.games.time_attack_sorting import TimeAttackSortingGame


def _place_all(game, wrong=()):
    for item_id, target in {"i1": "ppe", "i2": "ppe", "i3": "tools", "i4": "tools"}.items():
        if item_id in wrong:
            target = "tools" if target == "ppe" else "ppe"
        game.place(item_id, target)


class TestPlacementReducers:
    """Test the pure placement reducers."""

    def test_place_and_move(self, drag_drop_config):
        config = parse_config("drag-drop", drag_drop_config)
        state = place_item(PlacementState(), config, "i1", "ppe")
        state = place_item(state, config, "i1", "tools")
        assert state.placements == {"i1": "tools"}

    def test_unknown_ids_ignored(self, drag_drop_config):
        config = parse_config("drag-drop", drag_drop_config)
        state = PlacementState()
        assert place_item(state, config, "nope", "ppe") is state
        assert place_item(state, config, "i1", "nope") is state

    def test_remove(self, drag_drop_config):
        config = parse_config("drag-drop", drag_drop_config)
        state = place_item(PlacementState(), config, "i1", "ppe")
        assert remove_item(state, "i1").placements == {}
        assert remove_item(state, "i9") is state


class TestDragDropLesson:
    """Test lesson-mode flow."""

    @pytest.fixture
    def game(self, drag_drop_config, scheduler, settings, recorder, feedback_recorder):
        game = DragDropGame(
            drag_drop_config,
            "lesson",
            scheduler=scheduler,
            settings=settings,
            on_complete=recorder,
            on_feedback=feedback_recorder,
        )
        game.start()
        return game

    def test_first_interaction_leaves_idle(self, game):
        assert game.status == GameStatus.IDLE
        game.place("i1", "ppe")
        assert game.status == GameStatus.INTERACTING

    def test_submit_requires_every_item_placed(self, game, recorder):
        game.place("i1", "ppe")
        assert game.submit() is None
        assert game.status == GameStatus.INTERACTING
        assert len(recorder) == 0

    def test_three_of_four_earns_75_xp(self, game, scheduler, recorder):
        _place_all(game, wrong={"i4"})
        scheduler.advance(3)
        result = game.submit()

        assert result.earned_xp == 75
        assert result.earned_points is None
        assert not result.success
        assert result.correct_count == 3
        assert result.total_count == 4

    def test_feedback_then_delayed_completion(self, game, scheduler, recorder, feedback_recorder):
        _place_all(game)
        game.submit()

        assert game.status == GameStatus.SUBMITTED
        assert len(feedback_recorder) == 1
        assert feedback_recorder.last.celebrate
        assert len(recorder) == 0

        scheduler.advance(2.1)
        assert len(recorder) == 0
        scheduler.advance(0.2)
        assert len(recorder) == 1
        assert game.status == GameStatus.COMPLETE

    def test_submit_is_idempotent(self, game, scheduler, recorder):
        _place_all(game)
        first = game.submit()
        assert game.submit() is None
        scheduler.advance(5)

        assert recorder.calls == [first]

    def test_input_ignored_after_submit(self, game):
        _place_all(game)
        game.submit()
        assert not game.remove("i1")
        assert game.state.placements["i1"] == "ppe"

    def test_item_feedback_only_after_submit(self, game):
        _place_all(game, wrong={"i2"})
        assert game.item_feedback() == {}
        game.submit()
        assert game.item_feedback() == {"i1": True, "i2": False, "i3": True, "i4": True}

    def test_try_again_flushes_and_counts_attempts(self, game, scheduler, recorder):
        _place_all(game, wrong={"i1"})
        game.submit()

        assert game.try_again()
        assert len(recorder) == 1
        assert game.state.placements == {}
        assert game.status == GameStatus.INTERACTING

        _place_all(game)
        game.submit()
        scheduler.advance(3)

        assert recorder.last.attempts == 2
        assert recorder.last.success

    def test_unmount_delivers_pending_result(self, game, recorder):
        _place_all(game)
        game.submit()
        game.unmount()
        assert len(recorder) == 1

    def test_user_actions_round_trip(self, game):
        _place_all(game)
        result = game.submit()
        assert result.user_actions == {
            "placements": {"i1": "ppe", "i2": "ppe", "i3": "tools", "i4": "tools"}
        }


class TestDragDropQuiz:
    def test_emits_points_immediately(self, drag_drop_config, scheduler, settings, recorder, feedback_recorder):
        config = {**drag_drop_config, "totalPoints": 8}
        game = DragDropGame(
            config, "quiz", scheduler=scheduler, settings=settings,
            on_complete=recorder, on_feedback=feedback_recorder,
        )
        game.start()
        _place_all(game)
        game.submit()

        assert len(recorder) == 1
        assert recorder.last.earned_points == 8
        assert recorder.last.earned_xp is None
        assert len(feedback_recorder) == 0
        assert game.status == GameStatus.COMPLETE
        assert not game.show_feedback

    def test_try_again_not_available(self, drag_drop_config, scheduler, settings):
        game = DragDropGame(drag_drop_config, "quiz", scheduler=scheduler, settings=settings)
        _place_all(game)
        game.submit()
        assert not game.try_again()


class TestPreviewAndRestore:
    def test_preview_is_inert(self, drag_drop_config, scheduler, settings, recorder):
        game = DragDropGame(drag_drop_config, "preview", scheduler=scheduler, settings=settings, on_complete=recorder)
        game.start()
        assert not game.place("i1", "ppe")
        assert game.submit() is None
        assert len(recorder) == 0

    def test_restore_is_read_only(self, drag_drop_config, scheduler, settings, recorder):
        previous = {
            "userActions": {"placements": {"i1": "ppe", "i2": "tools"}},
            "result": {"success": False, "earnedXp": 25, "attempts": 2},
        }
        game = DragDropGame(
            drag_drop_config, "lesson", scheduler=scheduler, settings=settings,
            on_complete=recorder, previous_state=previous,
        )
        game.start()

        assert game.status == GameStatus.COMPLETE
        assert game.read_only
        assert game.show_feedback
        assert game.state.placements == {"i1": "ppe", "i2": "tools"}
        assert game.attempts == 2
        assert not game.place("i3", "tools")
        assert not game.try_again()
        game.unmount()
        assert len(recorder) == 0

    def test_restore_from_result_model(self, drag_drop_config, settings):
        previous = GameResult(earned_points=5, user_actions={"placements": {"i1": "ppe"}})
        game = DragDropGame(drag_drop_config, "quiz", settings=settings, previous_state=previous)
        assert game.result is previous
        assert game.item_feedback() == {"i1": True, "i2": False, "i3": False, "i4": False}


class TestConfigErrors:
    def test_wrong_shape_raises(self, settings):
        with pytest.raises(GameConfigError) as exc:
            DragDropGame({"items": "not a list"}, settings=settings)
        assert exc.value.messages

    def test_dangling_target_still_playable(self, drag_drop_config, scheduler, settings, recorder):
        drag_drop_config["items"][0]["correctTargetId"] = "ghost"
        game = DragDropGame(drag_drop_config, "quiz", scheduler=scheduler, settings=settings, on_complete=recorder)
        _place_all(game)
        game.submit()
        assert recorder.last.correct_count == 3


class TestTimeAttackSorting:
    """Test the countdown variant."""

    @pytest.fixture
    def timer_updates(self):
        return []

    @pytest.fixture
    def game(self, time_attack_config, scheduler, settings, recorder, timer_updates):
        game = TimeAttackSortingGame(
            time_attack_config,
            "lesson",
            scheduler=scheduler,
            settings=settings,
            on_complete=recorder,
            on_timer_update=timer_updates.append,
        )
        game.start()
        return game

    def test_publishes_timer_state(self, game, scheduler, timer_updates):
        assert timer_updates[0].time_remaining == 30
        scheduler.advance(10.05)
        assert timer_updates[-1].time_remaining == 20

    def test_timeout_scores_what_is_placed(self, game, scheduler, recorder):
        game.place("i1", "ppe")
        game.place("i2", "tools")

        scheduler.advance(31)
        scheduler.advance(3)

        result = recorder.last
        assert game.status == GameStatus.TIMED_OUT
        assert result.timed_out
        assert not result.success
        assert result.time_spent == 30
        assert result.earned_xp == 25
        assert result.incorrect_count == 1
        assert result.missed_count == 2

    def test_timed_out_is_terminal(self, game, scheduler):
        scheduler.advance(31)
        assert not game.place("i1", "ppe")
        assert not game.try_again()
        assert game.status == GameStatus.TIMED_OUT

    def test_early_submit_stops_timer(self, game, scheduler, recorder, timer_updates):
        _place_all(game)
        scheduler.advance(4)
        result = game.submit()

        assert result.success
        assert result.time_spent == 4
        assert timer_updates[-1] is None
        scheduler.advance(60)
        assert len(recorder) == 1
        assert not recorder.last.timed_out

    def test_try_again_restarts_countdown(self, game, scheduler, recorder):
        _place_all(game, wrong={"i3"})
        scheduler.advance(5)
        game.submit()
        game.try_again()

        assert game.timer.time_remaining == 30
        scheduler.advance(33)
        assert game.status == GameStatus.TIMED_OUT
        assert recorder.last.attempts == 2

    def test_preview_never_counts_down(self, time_attack_config, scheduler, settings):
        game = TimeAttackSortingGame(time_attack_config, "preview", scheduler=scheduler, settings=settings)
        game.start()
        assert game.timer is None
        assert scheduler.pending == 0


class TestBrokenImages:
    """A failed item image hides the picture, never the item."""

    @pytest.fixture
    def config(self, drag_drop_config):
        drag_drop_config["items"][0]["imageUrl"] = "https://cdn.example.com/hard-hat.png"
        return drag_drop_config

    def test_item_stays_draggable(self, config, scheduler, settings, recorder):
        game = DragDropGame(config, "quiz", scheduler=scheduler, settings=settings, on_complete=recorder)
        game.start()
        game.mark_media_failed("i1")

        assert game.image_hidden("i1")
        assert not game.image_hidden("i2")
        assert [i.id for i in game.unplaced_items()] == ["i1", "i2", "i3", "i4"]

        _place_all(game)
        assert game.ready_to_submit
        game.submit()

        assert len(recorder) == 1
        assert recorder.last.success
        assert recorder.last.total_count == 4

    def test_time_attack_still_submits(self, config, scheduler, settings, recorder):
        config["timeLimitSeconds"] = 30
        game = TimeAttackSortingGame(config, "quiz", scheduler=scheduler, settings=settings, on_complete=recorder)
        game.start()
        game.mark_media_failed("i1")

        _place_all(game)
        assert game.submit() is not None
        scheduler.advance(60)

        assert len(recorder) == 1
        assert not recorder.last.timed_out
