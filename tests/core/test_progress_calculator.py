"""Tests for the progression engine."""

import math

import pytest

from lingoxp.core.progress_calculator import (
    DEFAULT_ACTION_XP,
    MULTIPLIER_RULES,
    XP_REWARDS,
    LevelInfo,
    SkillSnapshot,
    apply_multiplier_rules,
    average_skill_level,
    calculate_xp_reward,
    check_level_up,
    current_level_xp,
    format_multiplier,
    generate_progress_summary,
    get_level_info,
    level_from_xp,
    round_half_up,
    total_xp_for_level,
    xp_for_level,
    xp_for_next_level,
    xp_to_next_level,
)


class TestLevelCurve:
    """Tests for xp_for_level and total_xp_for_level."""

    @pytest.mark.parametrize(
        "level,expected",
        [(0, 0), (1, 0), (2, 500), (3, 550), (4, 605), (5, 665), (6, 732)],
    )
    def test_xp_for_level(self, level, expected):
        """Bucket sizes follow floor(500 * 1.1^(L-2))."""
        assert xp_for_level(level) == expected

    @pytest.mark.parametrize(
        "level,expected",
        [(1, 0), (2, 500), (3, 1050), (4, 1655), (5, 2320)],
    )
    def test_total_xp_for_level(self, level, expected):
        """Cumulative thresholds add up the buckets below the level."""
        assert total_xp_for_level(level) == expected

    def test_level_one_is_free(self):
        """Level 1 requires no XP."""
        assert total_xp_for_level(1) == 0

    @pytest.mark.parametrize("level", range(1, 200))
    def test_thresholds_are_monotonic(self, level):
        """Thresholds never decrease as the level grows."""
        assert total_xp_for_level(level) <= total_xp_for_level(level + 1)

    def test_buckets_grow(self):
        """Each bucket is at least as large as the previous one."""
        buckets = [xp_for_level(level) for level in range(2, 60)]
        assert buckets == sorted(buckets)

    def test_xp_for_next_level_is_next_bucket(self):
        """xp_for_next_level(L) is the bucket of L+1."""
        assert xp_for_next_level(1) == 500
        assert xp_for_next_level(2) == 550


class TestLevelFromXP:
    """Tests for level_from_xp."""

    def test_zero_xp_is_level_one(self):
        """No XP means level 1."""
        assert level_from_xp(0) == 1

    @pytest.mark.parametrize(
        "total_xp,expected",
        [(499, 1), (500, 2), (1049, 2), (1050, 3), (1654, 3), (1655, 4)],
    )
    def test_boundaries(self, total_xp, expected):
        """Reaching a threshold exactly moves to the next level."""
        assert level_from_xp(total_xp) == expected

    @pytest.mark.parametrize("total_xp", list(range(0, 25_000, 37)) + [500, 1050, 1655, 2320])
    def test_level_brackets_total_xp(self, total_xp):
        """total_xp lies between the level's threshold and the next one."""
        level = level_from_xp(total_xp)
        assert level >= 1
        assert total_xp_for_level(level) <= total_xp < total_xp_for_level(level + 1)

    def test_large_total_xp_terminates(self):
        """Large totals still resolve to a level."""
        level = level_from_xp(10**9)
        assert total_xp_for_level(level) <= 10**9 < total_xp_for_level(level + 1)

    @pytest.mark.parametrize("bad", [-1, -0.5, math.inf, math.nan])
    def test_out_of_contract_input_raises(self, bad):
        """Negative or non-finite XP is rejected."""
        with pytest.raises(ValueError):
            level_from_xp(bad)


class TestLevelPosition:
    """Tests for current_level_xp and xp_to_next_level."""

    def test_current_level_xp(self):
        """XP earned inside the level."""
        assert current_level_xp(775, 2) == 275
        assert current_level_xp(0, 1) == 0

    def test_xp_to_next_level_is_remaining(self):
        """Remaining XP until the next threshold."""
        assert xp_to_next_level(0, 1) == 500
        assert xp_to_next_level(775, 2) == 275

    def test_xp_to_next_level_negative_on_wrong_level(self):
        """A level below the real one yields a negative remainder."""
        assert xp_to_next_level(2000, 1) == -1500

    def test_positions_are_integers(self):
        """Integer XP in gives integer positions out."""
        info = get_level_info(1100)
        assert isinstance(current_level_xp(1100, 3), int)
        assert isinstance(xp_to_next_level(1100, 3), int)
        assert isinstance(info.current_xp, int)
        assert isinstance(info.xp_to_next_level, int)


class TestGetLevelInfo:
    """Tests for get_level_info."""

    def test_zero_xp(self):
        """Fresh learner is level 1 with a 500 XP bucket."""
        assert get_level_info(0) == LevelInfo(
            level=1, current_xp=0, xp_to_next_level=500, progress_percentage=0
        )

    def test_halfway_through_level_one(self):
        """250 of 500 is 50%."""
        info = get_level_info(250)
        assert info.level == 1
        assert info.current_xp == 250
        assert info.progress_percentage == 50

    def test_denominator_is_bucket_size(self):
        """xp_to_next_level in LevelInfo is the bucket size, not the remainder."""
        info = get_level_info(775)
        assert info.level == 2
        assert info.current_xp == 275
        assert info.xp_to_next_level == 550
        assert info.progress_percentage == 50
        assert xp_to_next_level(775, info.level) == 275

    def test_percentage_rounds_half_up(self):
        """549 of 550 rounds up to 100."""
        assert get_level_info(1049).progress_percentage == 100

    def test_idempotent(self):
        """Same input, same output."""
        assert get_level_info(12345) == get_level_info(12345)

    def test_to_dict_uses_public_keys(self):
        """Serialized keys match the API contract."""
        assert get_level_info(250).to_dict() == {
            "level": 1,
            "currentXP": 250,
            "xpToNextLevel": 500,
            "progressPercentage": 50,
        }

    @pytest.mark.parametrize("total_xp", range(0, 20_000, 113))
    def test_percentage_in_range(self, total_xp):
        """Progress percentage stays within 0..100."""
        assert 0 <= get_level_info(total_xp).progress_percentage <= 100


class TestCheckLevelUp:
    """Tests for check_level_up."""

    @pytest.mark.parametrize("xp", [0, 499, 500, 1050, 99_999])
    def test_no_change_no_level_up(self, xp):
        """Unchanged XP never levels up."""
        assert check_level_up(xp, xp) is False

    def test_crossing_threshold(self):
        """Crossing 500 levels up."""
        assert check_level_up(499, 500) is True

    def test_within_level(self):
        """Staying inside a level is not a level up."""
        assert check_level_up(0, 499) is False

    def test_losing_xp(self):
        """Dropping levels is not a level up."""
        assert check_level_up(600, 100) is False


class TestRoundingHelpers:
    """Tests for round_half_up and format_multiplier."""

    @pytest.mark.parametrize(
        "value,expected",
        [(22.5, 23), (16.5, 17), (22.4, 22), (0.5, 1), (2.5, 3), (0, 0)],
    )
    def test_round_half_up(self, value, expected):
        """Halves round up, unlike round()."""
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(1.5, "1.5"), (2.0, "2"), (1.1, "1.1"), (0.0, "0"), (3, "3")],
    )
    def test_format_multiplier(self, value, expected):
        """Integral multipliers drop the fraction."""
        assert format_multiplier(value) == expected


class TestCalculateXPReward:
    """Tests for calculate_xp_reward."""

    def test_send_message(self):
        """Plain action, no rule applies."""
        reward = calculate_xp_reward("send_message", 1.0)
        assert reward.base_xp == 10
        assert reward.total_xp == 10
        assert reward.multiplier == 1.0
        assert reward.reason == "send message (+10 XP)"

    def test_daily_streak(self):
        """Streak rule multiplies by 1.5 and 22.5 rounds to 23."""
        reward = calculate_xp_reward("daily_streak", 1.0)
        assert reward.base_xp == 15
        assert reward.multiplier == 1.5
        assert reward.total_xp == 23
        assert reward.reason == "daily streak (+23 XP) x1.5"

    def test_perfect_grammar(self):
        """Skill rule multiplies by 1.1."""
        reward = calculate_xp_reward("perfect_grammar", 1.0)
        assert reward.base_xp == 20
        assert reward.multiplier == pytest.approx(1.1)
        assert reward.total_xp == 22
        assert reward.reason.endswith("x1.1")

    def test_accuracy_improvement_rounds_half_up(self):
        """15 * 1.1 = 16.5 becomes 17."""
        reward = calculate_xp_reward("accuracy_improvement")
        assert reward.total_xp == 17

    def test_conversation_rule(self):
        """Response and conversation actions get 1.2."""
        assert calculate_xp_reward("receive_response").total_xp == 6
        assert calculate_xp_reward("long_conversation").total_xp == 24
        assert calculate_xp_reward("detailed_response").multiplier == pytest.approx(1.2)

    def test_conversation_rule_caps_at_two(self):
        """min(2.0 * 1.2, 2.0) = 2.0."""
        reward = calculate_xp_reward("receive_response", 2.0)
        assert reward.multiplier == 2.0
        assert reward.total_xp == 10
        assert reward.reason == "receive response (+10 XP) x2"

    def test_skill_rule_caps_at_one_point_eight(self):
        """min(2.0 * 1.1, 1.8) = 1.8."""
        reward = calculate_xp_reward("grammar_mastery", 2.0)
        assert reward.multiplier == 1.8
        assert reward.total_xp == 45

    def test_streak_rule_is_uncapped(self):
        """Streak rule has no cap."""
        reward = calculate_xp_reward("daily_streak", 2.0)
        assert reward.multiplier == 3.0
        assert reward.total_xp == 45
        assert reward.reason.endswith("x3")

    def test_rules_chain_in_order(self):
        """Later rules see the multiplier produced by earlier ones."""
        reward = calculate_xp_reward("streak_response_grammar")
        # 1.5 -> min(1.8, 2.0) -> min(1.98, 1.8)
        assert reward.multiplier == pytest.approx(1.8)
        assert reward.base_xp == DEFAULT_ACTION_XP
        assert reward.total_xp == 9

    def test_unknown_action_defaults(self):
        """Unknown actions are worth the default base XP."""
        reward = calculate_xp_reward("mystery")
        assert reward.base_xp == DEFAULT_ACTION_XP
        assert reward.total_xp == 5
        assert reward.reason == "mystery (+5 XP)"

    def test_custom_xp_overrides_table(self):
        """custom_xp replaces the table value."""
        reward = calculate_xp_reward("send_message", 1.0, 40)
        assert reward.base_xp == 40
        assert reward.total_xp == 40

    def test_zero_custom_xp_falls_back(self):
        """custom_xp of 0 counts as not provided."""
        assert calculate_xp_reward("send_message", 1.0, 0).base_xp == 10

    def test_caller_multiplier(self):
        """Caller multiplier scales the base."""
        reward = calculate_xp_reward("send_message", 2.0)
        assert reward.total_xp == 20
        assert reward.reason == "send message (+20 XP) x2"

    def test_zero_multiplier(self):
        """Zero multiplier gives zero XP without failing."""
        reward = calculate_xp_reward("daily_streak", 0.0)
        assert reward.total_xp == 0
        assert reward.reason == "daily streak (+0 XP) x0"

    def test_to_dict_uses_public_keys(self):
        """Serialized keys match the API contract."""
        assert calculate_xp_reward("send_message").to_dict() == {
            "totalXP": 10,
            "reason": "send message (+10 XP)",
            "baseXP": 10,
            "multiplier": 1.0,
        }


class TestRewardTable:
    """Tests for XP_REWARDS and MULTIPLIER_RULES."""

    def test_table_has_all_actions(self):
        """Nineteen actions, values between 5 and 100."""
        assert len(XP_REWARDS) == 19
        assert min(XP_REWARDS.values()) == 5
        assert max(XP_REWARDS.values()) == 100

    def test_table_is_read_only(self):
        """The reward table cannot be modified."""
        with pytest.raises(TypeError):
            XP_REWARDS["send_message"] = 1000

    def test_rule_order(self):
        """Rules run streak, conversation, skill."""
        assert [rule.name for rule in MULTIPLIER_RULES] == ["streak", "conversation", "skill"]

    def test_rules_evaluated_independently(self):
        """Each rule can be checked on its own."""
        streak, conversation, skill = MULTIPLIER_RULES
        assert streak.applies("daily_streak")
        assert not streak.applies("send_message")
        assert conversation.applies("quick_response")
        assert skill.applies("vocabulary_expansion")
        assert skill.adjust(1.0) == pytest.approx(1.1)

    def test_no_rule_keeps_multiplier(self):
        """Actions matching nothing keep the caller multiplier."""
        assert apply_multiplier_rules("send_message", 1.3) == 1.3


class TestSkills:
    """Tests for average_skill_level and SkillSnapshot."""

    def test_empty_is_zero(self):
        """No skills, average 0."""
        assert average_skill_level({}) == 0
        assert average_skill_level(None) == 0
        assert average_skill_level(SkillSnapshot()) == 0

    def test_average_of_present_values(self):
        """Missing skills are ignored."""
        assert average_skill_level({"accuracy": 80, "grammar": 60}) == 70

    def test_average_rounds_half_up(self):
        """70.5 rounds to 71."""
        assert average_skill_level({"accuracy": 80, "grammar": 61}) == 71

    def test_none_values_ignored(self):
        """Explicit None is treated as missing."""
        assert average_skill_level({"accuracy": 90, "fluency": None}) == 90

    def test_snapshot_from_mapping_ignores_unknown(self):
        """Unknown keys are dropped."""
        snapshot = SkillSnapshot.from_mapping({"grammar": 50, "charisma": 99})
        assert snapshot.to_dict() == {"grammar": 50}


class TestProgressSummary:
    """Tests for generate_progress_summary."""

    def test_summary_fields(self):
        """Summary composes level info and skill average."""
        summary = generate_progress_summary(775, {"accuracy": 80, "grammar": 60})
        assert summary == {
            "level": 2,
            "currentXP": 275,
            "xpToNext": 550,
            "progress": "275/550 XP",
            "progressPercentage": 50,
            "averageSkill": 70,
            "totalXP": 775,
            "nextLevelXP": 550,
            "skills": {"accuracy": 80, "grammar": 60},
        }

    def test_summary_without_skills(self):
        """Empty skills give averageSkill 0."""
        summary = generate_progress_summary(0, {})
        assert summary["averageSkill"] == 0
        assert summary["progress"] == "0/500 XP"
