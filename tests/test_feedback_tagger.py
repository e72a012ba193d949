"""
Tests for C-LEAR keyword tagging.
"""

import pytest

from feedback_tagger import DEFAULT_RULES, ClearTag, KeywordFeedbackTagger, TagRule, tag


class TestKeywordTagging:
    """Test the default rule table."""

    def test_listen_and_empathize_detected(self):
        tags = tag("I understand your concern, let me explain")

        assert ClearTag.LISTEN in tags
        assert ClearTag.EMPATHIZE in tags

    def test_unrelated_message_has_no_tags(self):
        assert tag("The weather is nice") == frozenset()

    def test_matching_is_case_insensitive(self):
        assert tag("I RECOMMEND it") == frozenset({ClearTag.COUNSEL})

    def test_every_rule_applies_independently(self):
        tags = tag("So you feel it's not normal? Tell me what you heard. I suggest we talk.")

        assert tags == frozenset(ClearTag)

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("I suggest starting today", ClearTag.COUNSEL),
            ("I hear you", ClearTag.LISTEN),
            ("How do you feel about it?", ClearTag.EMPATHIZE),
            ("What have you read?", ClearTag.EXPLORE),
            ("Let me make sure I follow", ClearTag.RESTATE),
            ("That question is completely valid", ClearTag.ACKNOWLEDGE),
        ],
    )
    def test_single_rule_messages(self, message, expected):
        assert expected in tag(message)


class TestKeywordFeedbackTagger:
    """Test the configurable tagger."""

    def test_tag_ordered_follows_rule_table(self):
        tagger = KeywordFeedbackTagger()

        assert tagger.tag_ordered("I hear your concerns, but I recommend the vaccine") == (
            ClearTag.COUNSEL,
            ClearTag.LISTEN,
            ClearTag.EMPATHIZE,
        )

    def test_rule_order_does_not_change_result_set(self):
        message = "I understand, and I recommend it. What do you think?"
        forward = KeywordFeedbackTagger(DEFAULT_RULES)
        backward = KeywordFeedbackTagger(reversed(DEFAULT_RULES))

        assert forward.tag(message) == backward.tag(message)

    def test_custom_rules(self):
        tagger = KeywordFeedbackTagger([TagRule(ClearTag.ACKNOWLEDGE, frozenset({"thank you"}))])

        assert tagger.tag("Thank you for asking") == frozenset({ClearTag.ACKNOWLEDGE})
        assert tagger.tag("I recommend it") == frozenset()

    def test_duplicate_tags_collapse(self):
        tagger = KeywordFeedbackTagger([
            TagRule(ClearTag.LISTEN, frozenset({"hear"})),
            TagRule(ClearTag.LISTEN, frozenset({"understand"})),
        ])

        assert tagger.tag_ordered("I hear you and understand") == (ClearTag.LISTEN,)
