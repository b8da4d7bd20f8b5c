import random

import pytest
from pydantic import ValidationError

from babushka.models import FlashCard, Session, Unit


# --- FlashCard Model Tests ---


class TestFlashCardModel:
    def test_short_keys_populate_fields(self):
        card = FlashCard(f="Чай", t="Tea", p="chai", c="From a samovar.")
        assert card.front == "Чай"
        assert card.translation == "Tea"
        assert card.phonetic == "chai"
        assert card.context == "From a samovar."

    def test_long_field_names_are_accepted(self):
        card = FlashCard(front="Да", translation="Yes")
        assert card.phonetic == ""
        assert card.context == ""

    def test_to_wire_uses_short_keys(self):
        card = FlashCard(front="Нет", translation="No", phonetic="nyet", context="")
        assert card.to_wire() == {"f": "Нет", "t": "No", "p": "nyet", "c": ""}

    def test_card_is_immutable(self):
        card = FlashCard(f="Да", t="Yes")
        with pytest.raises(ValidationError):
            card.front = "Нет"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"t": "Yes"},
            {"f": "Да"},
            {"f": "", "t": "Yes"},
            {"f": "   ", "t": "Yes"},
            {"f": "Да", "t": " "},
        ],
    )
    def test_front_and_translation_required(self, kwargs):
        with pytest.raises(ValidationError):
            FlashCard(**kwargs)

    def test_unknown_keys_are_ignored(self):
        card = FlashCard(f="Да", t="Yes", extra="whatever")
        assert not hasattr(card, "extra")


# --- Unit Model Tests ---


class TestUnitModel:
    def test_to_wire_omits_missing_icon(self, sample_cards):
        unit = Unit(id="custom_1", name="Greetings", cards=sample_cards)
        wire = unit.to_wire()
        assert "icon" not in wire
        assert wire["id"] == "custom_1"
        assert wire["cards"][0] == {
            "f": "Привет",
            "t": "Hi",
            "p": "pree-VYET",
            "c": "Привет, как дела?",
        }

    def test_round_trip_through_wire_form(self, sample_cards):
        unit = Unit(id="custom_1", name="Greetings", icon="🐻", cards=sample_cards)
        assert Unit.model_validate(unit.to_wire()) == unit

    def test_blank_name_rejected(self, sample_cards):
        with pytest.raises(ValidationError):
            Unit(id="custom_1", name="", cards=sample_cards)

    def test_unit_without_cards_rejected(self):
        with pytest.raises(ValidationError):
            Unit(id="custom_1", name="Empty", cards=[])

    def test_extra_fields_forbidden(self, sample_cards):
        with pytest.raises(ValidationError):
            Unit(id="x", name="X", cards=sample_cards, colour="red")


# --- Session Model Tests ---


class TestSessionModel:
    def test_start_resets_position(self, sample_cards):
        session = Session.start("basics", sample_cards)
        assert session.active_unit_id == "basics"
        assert session.index == 0
        assert session.flipped is False
        assert session.current_card == sample_cards[0]
        assert session.position_label == "1 / 3"

    def test_working_cards_are_a_copy(self, sample_cards):
        session = Session.start("basics", sample_cards)
        sample_cards.pop()
        assert session.size == 3

    def test_empty_session(self):
        session = Session.start("nowhere", [])
        assert session.current_card is None
        assert session.index == 0
        assert session.position_label == "0 / 0"
        assert session.next() == session
        assert session.previous() == session

    def test_index_out_of_bounds_rejected(self, sample_cards):
        with pytest.raises(ValidationError):
            Session(active_unit_id="x", working_cards=tuple(sample_cards), index=3)
        with pytest.raises(ValidationError):
            Session(active_unit_id="x", working_cards=(), index=1)
        with pytest.raises(ValidationError):
            Session(active_unit_id="x", working_cards=tuple(sample_cards), index=-1)

    def test_next_wraps_around(self, sample_cards):
        session = Session.start("basics", sample_cards)
        session = session.next().next()
        assert session.index == 2
        assert session.next().index == 0

    def test_previous_wraps_around(self, sample_cards):
        session = Session.start("basics", sample_cards)
        assert session.previous().index == 2

    def test_next_len_times_returns_to_start(self, many_cards):
        session = Session.start("big", many_cards).next().next()
        start_index = session.index
        for _ in range(session.size):
            session = session.next()
        assert session.index == start_index

    def test_navigation_clears_flip(self, sample_cards):
        session = Session.start("basics", sample_cards).toggle_flip()
        assert session.flipped is True
        assert session.next().flipped is False
        assert session.previous().flipped is False

    def test_single_card_navigation_is_noop(self, sample_cards):
        session = Session.start("one", sample_cards[:1]).toggle_flip()
        assert session.next() is session
        assert session.previous() is session

    def test_toggle_flip_and_unflip(self, sample_cards):
        session = Session.start("basics", sample_cards)
        flipped = session.toggle_flip()
        assert flipped.flipped is True
        assert flipped.toggle_flip().flipped is False
        assert flipped.unflip().flipped is False
        assert session.unflip() is session

    def test_transitions_do_not_mutate_original(self, sample_cards):
        session = Session.start("basics", sample_cards)
        session.next()
        session.toggle_flip()
        assert session.index == 0
        assert session.flipped is False

    def test_shuffle_is_a_permutation(self, many_cards):
        session = Session.start("big", many_cards).next().toggle_flip()
        shuffled = session.shuffle(random.Random(7))
        assert shuffled.index == 0
        assert shuffled.flipped is False
        assert sorted(c.front for c in shuffled.working_cards) == sorted(
            c.front for c in many_cards
        )
        assert list(shuffled.working_cards) != many_cards

    def test_shuffle_is_deterministic_with_seed(self, many_cards):
        session = Session.start("big", many_cards)
        first = session.shuffle(random.Random(99)).working_cards
        second = session.shuffle(random.Random(99)).working_cards
        assert first == second

    def test_select_unit_starts_over(self, sample_cards, many_cards):
        session = Session.start("basics", sample_cards).next().toggle_flip()
        switched = session.select_unit("big", many_cards)
        assert switched.active_unit_id == "big"
        assert switched.index == 0
        assert switched.flipped is False
        assert switched.size == len(many_cards)
