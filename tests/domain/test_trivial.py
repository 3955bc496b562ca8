"""Tests for domain/trivial.py — canned replies without generation."""

import pytest

from tokayah.domain.trivial import (
    CAPABILITY_REPLY,
    GREETING_REPLY,
    IDENTITY_REPLY,
    STATUS_REPLY,
    TEST_REPLY,
    THANKS_REPLY,
    TIME_OF_DAY_REPLIES,
    TrivialMatcher,
    match,
)


class TestCategories:
    @pytest.mark.parametrize("text", ["hi", "Hello!", "assalamualaikum", "salam"])
    def test_greeting(self, text):
        reply = match(text)
        assert reply.category == "greeting"
        assert reply.text == GREETING_REPLY

    @pytest.mark.parametrize("text", ["thanks", "Terima kasih!", "tq", "thank you so much"])
    def test_thanks(self, text):
        assert match(text).text == THANKS_REPLY

    def test_test_phrase(self):
        assert match("ping").text == TEST_REPLY

    @pytest.mark.parametrize("text", ["who are you?", "siapa awak", "siapa", "introduce yourself"])
    def test_identity(self, text):
        assert match(text).text == IDENTITY_REPLY

    @pytest.mark.parametrize("text", ["help", "what can you do?", "macam mana nak guna"])
    def test_capability(self, text):
        assert match(text).text == CAPABILITY_REPLY

    @pytest.mark.parametrize("text", ["are you there?", "online ke", "awak ada", "ada tak tok ayah", "Are you ok?"])
    def test_status(self, text):
        assert match(text).text == STATUS_REPLY

    def test_time_of_day_english(self):
        reply = match("Good morning")
        assert reply.category == "time_of_day:morning"
        assert reply.text == TIME_OF_DAY_REPLIES["morning"][0]

    def test_time_of_day_malay(self):
        reply = match("selamat petang")
        assert reply.category == "time_of_day:afternoon"
        assert reply.text == TIME_OF_DAY_REPLIES["afternoon"][1]


class TestNotTrivial:
    @pytest.mark.parametrize("text", [
        "apa hukum solat jumaat",
        "what is the ruling on riba?",
        "hello, apa hukum makan ketam",
        "ada kesan ke kalau tinggal solat",
        "tolong terangkan tentang zakat fitrah",
        "apa nama solat sunat sebelum subuh",
        "apa awak fikir tentang insurans",
        "ada ke dalil untuk solat hajat",
        "ada tak cara qada solat",
        "are you ok with explaining zakat fitrah",
    ])
    def test_questions_fall_through(self, text):
        assert match(text) is None

    def test_empty(self):
        assert match("") is None
        assert match("   ") is None


class TestPriority:
    def test_thanks_beats_status(self):
        assert match("thanks, are you there").category == "thanks"

    def test_matcher_object_delegates(self):
        assert TrivialMatcher().match("hi").category == "greeting"
