"""Tests for phone and name canonicalization and yes detection."""

import pytest

from phone_booking.conversation.normalizers import (
    canonicalize_name,
    canonicalize_phone,
    is_affirmative,
)


class TestCanonicalizePhone:
    @pytest.mark.parametrize("raw,expected", [
        ("5145551234", "+15145551234"),
        ("514 555 1234", "+15145551234"),
        ("(514) 555-1234", "+15145551234"),
        ("15145551234", "+15145551234"),
        ("1-514-555-1234", "+15145551234"),
        ("+1 514 555 1234", "+15145551234"),
        ("mon numéro c'est le 819 555 0100", "+18195550100"),
    ])
    def test_accepts_north_american_numbers(self, raw, expected):
        assert canonicalize_phone(raw) == expected

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "cinq un quatre",
        "555-1234",
        "25145551234",
        "+33 1 23 45 67 89",
        "514555123456",
    ])
    def test_rejects_everything_else(self, raw):
        assert canonicalize_phone(raw) is None

    @pytest.mark.parametrize("raw", ["5145551234", "1 514 555 1234", "(819) 555-0100"])
    def test_idempotent(self, raw):
        once = canonicalize_phone(raw)
        assert canonicalize_phone(once) == once


class TestCanonicalizeName:
    @pytest.mark.parametrize("raw,expected", [
        ("marie tremblay", "Marie Tremblay"),
        ("MARIE TREMBLAY", "Marie Tremblay"),
        ("  jean   gagnon  ", "Jean Gagnon"),
        ("marie-ève côté", "Marie-ève Côté"),
        ("anne marie de la fontaine", "Anne Marie De La Fontaine"),
    ])
    def test_capitalizes_each_word(self, raw, expected):
        assert canonicalize_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "Marie"])
    def test_needs_two_words(self, raw):
        assert canonicalize_name(raw) is None

    @pytest.mark.parametrize("raw", ["marie tremblay", "JEAN gagnon", "a b c"])
    def test_idempotent(self, raw):
        once = canonicalize_name(raw)
        assert canonicalize_name(once) == once


class TestIsAffirmative:
    @pytest.mark.parametrize("text", [
        "oui",
        "Oui, c'est moi",
        "ouais",
        "c’est ça",
        "exact",
        "yes",
    ])
    def test_agreement(self, text):
        assert is_affirmative(text)

    @pytest.mark.parametrize("text", ["non", "Jean Gagnon", "", None, "ouistiti"])
    def test_anything_else(self, text):
        assert not is_affirmative(text)
