"""
Tests for the safety validator.
Every verdict leaving the pipeline must satisfy these bounds.
"""
import itertools

import pytest

from shopwell.models.facts import FactSet
from shopwell.models.profile import UserProfile
from shopwell.models.verdict import DraftVerdict
from shopwell.pipeline.safety import ALLERGEN_PREFIX, SafetyValidator, truncate
from shopwell.pipeline.verdict import DEFAULT_CAVEAT


@pytest.fixture
def validator() -> SafetyValidator:
    return SafetyValidator()


@pytest.fixture
def peanut_facts() -> FactSet:
    return FactSet(allergen_warnings=["peanuts"])


class TestClamping:
    """Tests for steps 1-3."""

    def test_unknown_verdict_defaults_to_mixed(self, validator):
        verdict = validator.validate(DraftVerdict(verdict="great", bullets=["a", "b"], caveat="c"), FactSet(), UserProfile())

        assert verdict.verdict == "mixed"

    def test_bullets_cut_to_three(self, validator):
        draft = DraftVerdict(verdict="helpful", bullets=["1", "2", "3", "4", "5"], caveat="c")

        assert validator.validate(draft, FactSet(), UserProfile()).bullets == ["1", "2", "3"]

    def test_bullets_padded_to_two(self, validator):
        verdict = validator.validate(DraftVerdict(verdict="helpful", bullets=[], caveat="c"), FactSet(), UserProfile())

        assert len(verdict.bullets) == 2
        assert verdict.bullets[0] != verdict.bullets[1]

    def test_blank_bullets_dropped_before_padding(self, validator):
        draft = DraftVerdict(verdict="mixed", bullets=["  ", "real point", ""], caveat="c")
        verdict = validator.validate(draft, FactSet(), UserProfile())

        assert verdict.bullets[0] == "real point"
        assert len(verdict.bullets) == 2

    def test_long_bullet_truncated(self, validator):
        draft = DraftVerdict(verdict="mixed", bullets=["x" * 120, "short"], caveat="c")
        verdict = validator.validate(draft, FactSet(), UserProfile())

        assert len(verdict.bullets[0]) == 80
        assert verdict.bullets[0].endswith("...")

    def test_long_caveat_truncated(self, validator):
        draft = DraftVerdict(verdict="mixed", bullets=["a", "b"], caveat="y" * 300)
        verdict = validator.validate(draft, FactSet(), UserProfile())

        assert len(verdict.caveat) == 100
        assert verdict.caveat.endswith("...")

    def test_empty_caveat_gets_default(self, validator):
        verdict = validator.validate(DraftVerdict(verdict="mixed", bullets=["a", "b"]), FactSet(), UserProfile())

        assert verdict.caveat == DEFAULT_CAVEAT

    def test_clean_draft_reports_no_clamps(self, validator):
        draft = DraftVerdict(verdict="helpful", bullets=["a", "b"], caveat="c")
        _, clamps = validator.validate_with_report(draft, FactSet(), UserProfile())

        assert clamps == []

    def test_truncate_helper(self):
        assert truncate("abc", 5) == "abc"
        assert truncate("abcdefgh", 5) == "ab..."


class TestAllergenOverride:
    """Tests for step 4."""

    def test_helpful_forced_to_not_ideal(self, validator, peanut_facts):
        draft = DraftVerdict(verdict="helpful", bullets=["great", "buy it"], caveat="Enjoy.", allergen_alert=False)
        verdict = validator.validate(draft, peanut_facts, UserProfile(allergies=["peanuts"]))

        assert verdict.verdict == "not_ideal"
        assert verdict.allergen_alert
        assert verdict.caveat.startswith(f"{ALLERGEN_PREFIX}peanuts.")

    def test_custom_allergy_matches(self, validator):
        facts = FactSet(allergen_warnings=["coconut"])
        verdict = validator.validate(
            DraftVerdict(verdict="helpful", bullets=["a", "b"], caveat="c"),
            facts,
            UserProfile(custom_allergies=["Coconut"]),
        )

        assert verdict.verdict == "not_ideal"
        assert verdict.allergen_alert

    def test_undeclared_allergen_no_alert(self, validator, peanut_facts):
        draft = DraftVerdict(verdict="helpful", bullets=["a", "b"], caveat="c", allergen_alert=True)
        verdict = validator.validate(draft, peanut_facts, UserProfile(allergies=["milk"]))

        assert verdict.verdict == "helpful"
        assert not verdict.allergen_alert

    def test_caveat_stays_bounded_after_prefix(self, validator, peanut_facts):
        draft = DraftVerdict(verdict="mixed", bullets=["a", "b"], caveat="z" * 100)
        verdict = validator.validate(draft, peanut_facts, UserProfile(allergies=["peanuts"]))

        assert len(verdict.caveat) <= 100
        assert verdict.caveat.startswith(ALLERGEN_PREFIX)

    def test_stale_statement_replaced(self, validator, peanut_facts):
        """A caveat that already looks like an allergen statement must still name the match."""
        draft = DraftVerdict(verdict="helpful", bullets=["a", "b"], caveat="Contains your allergens: none detected.")
        verdict = validator.validate(draft, peanut_facts, UserProfile(allergies=["peanuts"]))

        assert verdict.caveat == f"{ALLERGEN_PREFIX}peanuts."
        assert verdict.allergen_alert

    def test_wrong_allergen_statement_replaced_keeps_rest(self, validator, peanut_facts):
        draft = DraftVerdict(
            verdict="not_ideal",
            bullets=["a", "b"],
            caveat="Contains your allergens: milk. Check the label.",
        )
        verdict = validator.validate(draft, peanut_facts, UserProfile(allergies=["peanuts"]))

        assert verdict.caveat == f"{ALLERGEN_PREFIX}peanuts. Check the label."
        assert "milk" not in verdict.caveat

    def test_correct_statement_left_alone(self, validator, peanut_facts):
        caveat = f"{ALLERGEN_PREFIX}peanuts. Check the label."
        draft = DraftVerdict(verdict="not_ideal", bullets=["a", "b"], caveat=caveat)
        verdict, clamps = validator.validate_with_report(draft, peanut_facts, UserProfile(allergies=["peanuts"]))

        assert verdict.caveat == caveat
        assert clamps == []

    def test_statement_only_caveat_is_stable(self, validator, peanut_facts):
        profile = UserProfile(allergies=["peanuts"])
        draft = DraftVerdict(verdict="mixed", bullets=["a", "b"], caveat="Contains your allergens: nothing")

        once = validator.validate(draft, peanut_facts, profile)
        _, clamps = validator.validate_with_report(once, peanut_facts, profile)

        assert once.caveat == f"{ALLERGEN_PREFIX}peanuts."
        assert clamps == []

    @pytest.mark.parametrize("raw_verdict", ["helpful", "mixed", "not_ideal", "bogus", ""])
    def test_override_regardless_of_draft(self, validator, peanut_facts, raw_verdict):
        draft = DraftVerdict(verdict=raw_verdict, bullets=["a"], caveat="")
        verdict = validator.validate(draft, peanut_facts, UserProfile(custom_allergies=["peanut"]))

        assert verdict.verdict == "not_ideal"
        assert verdict.allergen_alert


class TestIdempotence:
    """Validating a validated verdict changes nothing."""

    def test_twice_is_same(self, validator, peanut_facts):
        profile = UserProfile(allergies=["peanuts"])
        draft = DraftVerdict(verdict="helpful", bullets=["x" * 90, "b", "c", "d"], caveat="Note " * 30)

        once = validator.validate(draft, peanut_facts, profile)
        twice = validator.validate(once, peanut_facts, profile)

        assert twice == once
        assert twice.caveat.count(ALLERGEN_PREFIX) == 1

    def test_second_pass_has_no_clamps(self, validator, peanut_facts):
        profile = UserProfile(allergies=["peanuts"])
        once = validator.validate(DraftVerdict(verdict="bogus"), peanut_facts, profile)
        _, clamps = validator.validate_with_report(once, peanut_facts, profile)

        assert clamps == []


class TestBoundsProperty:
    """Output bounds hold over a spread of hostile drafts."""

    BULLET_SETS = [[], ["a"], ["a", "b"], ["q" * 200] * 5, ["", " ", "ok"]]
    CAVEATS = ["", "short", "w" * 500]
    VERDICTS = ["helpful", "NOT IDEAL", "maybe"]

    def test_bounds(self, validator):
        for bullets, caveat, value, allergic in itertools.product(
            self.BULLET_SETS, self.CAVEATS, self.VERDICTS, [True, False]
        ):
            profile = UserProfile(allergies=["milk"] if allergic else [])
            facts = FactSet(allergen_warnings=["milk"])
            verdict = validator.validate(
                DraftVerdict(verdict=value, bullets=bullets, caveat=caveat), facts, profile
            )

            assert 2 <= len(verdict.bullets) <= 3
            assert all(len(b) <= 80 for b in verdict.bullets)
            assert len(verdict.caveat) <= 100
            if allergic:
                assert verdict.verdict == "not_ideal" and verdict.allergen_alert
