from __future__ import annotations

from trirk.irc.models import Badge, Emote, TagSet
from trirk.irc.tags import (
    KNOWN_TAGS,
    encode_tags,
    parse_badges,
    parse_emote_sets,
    parse_emotes,
    parse_tags,
)

PETSGOMOO_TAGS = (
    "badges=staff/1,broadcaster/1,turbo/1;color=#FF0000;display-name=PetsgomOO;"
    "emote-only=1;emotes=33:0-7;flags=0-7:A.6/P.6,25-36:A.1/I.2;"
    "id=c285c9ed-8b1b-4702-ae1c-c64d76cc74ef;mod=0;room-id=81046256;subscriber=0;"
    "turbo=0;tmi-sent-ts=1550868292494;user-id=81046256;user-type=staff"
)


class TestParseTags:
    def test_known_fields_are_typed(self):
        tags = parse_tags(PETSGOMOO_TAGS)

        assert tags.badges == Badge(staff="1", broadcaster="1", turbo="1")
        assert tags.color == "#FF0000"
        assert tags.display_name == "PetsgomOO"
        assert tags.emote_only is True
        assert tags.emotes == (Emote("33", 0, 7),)
        assert tags.id == "c285c9ed-8b1b-4702-ae1c-c64d76cc74ef"
        assert tags.mod is False
        assert tags.room_id == "81046256"
        assert tags.subscriber is False
        assert tags.turbo is False
        assert tags.tmi_sent_ts == 1550868292494
        assert tags.user_id == "81046256"
        assert tags.user_type == "staff"
        assert tags.vip is False
        assert dict(tags.extra_tags) == {"flags": "0-7:A.6/P.6,25-36:A.1/I.2"}

    def test_badges_color_and_id_leave_no_extra_tags(self):
        tags = parse_tags("badges=staff/1,turbo/1;color=#FF0000;id=abc")

        assert tags.badges.staff == "1"
        assert tags.badges.turbo == "1"
        assert tags.badges.moderator is None
        assert tags.color == "#FF0000"
        assert tags.id == "abc"
        assert dict(tags.extra_tags) == {}

    def test_unknown_key_is_kept_verbatim(self):
        tags = parse_tags("flags=0-7:A.6;mod=0")

        assert tags.extra_tags["flags"] == "0-7:A.6"
        assert tags.mod is False

    def test_leading_at_sign_is_stripped(self):
        tags = parse_tags("@badge-info=subscriber/8;badges=subscriber/6")

        assert tags.badges.subscriber == "6"
        assert dict(tags.extra_tags) == {"badge-info": "subscriber/8"}

    def test_boolean_only_true_for_literal_one(self):
        assert parse_tags("mod=1").mod is True
        assert parse_tags("mod=true").mod is False
        assert parse_tags("vip=").vip is False
        assert parse_tags("subs-only=1;r9k=1;followers-only=1").subs_only is True

    def test_integers_fall_back_to_zero(self):
        tags = parse_tags("tmi-sent-ts=abc;ban-duration=350;slow=-5")

        assert tags.tmi_sent_ts == 0
        assert tags.ban_duration == 350
        assert tags.slow == 0

    def test_integers_need_plain_ascii_digits(self):
        tags = parse_tags("tmi-sent-ts= 5;ban-duration=1_000;slow=+5")

        assert tags.tmi_sent_ts == 0
        assert tags.ban_duration == 0
        assert tags.slow == 0
        assert parse_tags("slow=\u0665").slow == 0

    def test_entries_without_equals_or_key_are_skipped(self):
        tags = parse_tags("mod;=1;;color=#0D4200")

        assert tags.color == "#0D4200"
        assert tags.mod is False
        assert dict(tags.extra_tags) == {}

    def test_value_split_only_on_first_equals(self):
        tags = parse_tags("custom=a=b;display-name=x=y")

        assert tags.extra_tags["custom"] == "a=b"
        assert tags.display_name == "x=y"

    def test_empty_block_gives_defaults(self):
        assert parse_tags("") == TagSet()

    def test_moderation_tags(self):
        tags = parse_tags(
            "login=ronni;room-id=;target-msg-id=abc-123-def;target-user-id=87654321;"
            "msg-id=delete_message_success;reply-parent-msg-id=p-1"
        )

        assert tags.login == "ronni"
        assert tags.room_id == ""
        assert tags.target_msg_id == "abc-123-def"
        assert tags.target_user_id == "87654321"
        assert tags.msg_id == "delete_message_success"
        assert tags.reply_parent_msg_id == "p-1"

    def test_all_known_keys_covered(self):
        assert len(KNOWN_TAGS) == 25


class TestSubParsers:
    def test_badges_skip_unknown_and_malformed(self):
        badge = parse_badges("moderator/1,glitchcon2020/1,bits,subscriber/12")

        assert badge == Badge(moderator="1", subscriber="12")
        assert badge.held() == {"moderator": "1", "subscriber": "12"}

    def test_empty_badges(self):
        assert parse_badges("") == Badge()

    def test_emotes_multiple_codes_and_ranges(self):
        emotes = parse_emotes("25:0-4/12-16,1902:6-10")

        assert emotes == [
            Emote("25", 0, 4),
            Emote("25", 12, 16),
            Emote("1902", 6, 10),
        ]

    def test_emotes_skip_malformed_ranges(self):
        emotes = parse_emotes("25:x-4,33:0-7,44,55:3,:1-2")

        assert emotes == [Emote("33", 0, 7)]

    def test_emote_offsets_not_checked_against_text(self):
        assert parse_emotes("1:500-900") == [Emote("1", 500, 900)]

    def test_emote_sets(self):
        assert parse_emote_sets("0,33,abc,12239") == [0, 33, 0, 12239]

    def test_emote_sets_reject_padded_numbers(self):
        assert parse_emote_sets(" 5,1_0,7") == [0, 0, 7]

    def test_emotes_skip_non_ascii_offsets(self):
        assert parse_emotes("25:\u0660-4,33:0-7") == [Emote("33", 0, 7)]


class TestEncodeTags:
    def test_round_trip_preserves_known_and_extra(self):
        tags = parse_tags(PETSGOMOO_TAGS + ";emote-sets=0,33,50;ban-duration=10")

        assert parse_tags(encode_tags(tags)) == tags

    def test_round_trip_multi_range_emotes(self):
        tags = parse_tags("emotes=25:0-4/12-16,1902:6-10;slow=10")

        assert parse_tags(encode_tags(tags)) == tags

    def test_interleaved_emote_codes_keep_their_order(self):
        tags = parse_tags("emotes=33:0-1,25:2-3,33:4-5")

        assert encode_tags(tags) == "emotes=33:0-1,25:2-3,33:4-5"
        assert parse_tags(encode_tags(tags)) == tags

    def test_defaults_are_omitted(self):
        assert encode_tags(parse_tags("emote-only=0;followers-only=0;r9k=0;slow=0")) == ""

    def test_booleans_encode_as_one(self):
        assert encode_tags(TagSet(mod=True, color="#fff")) == "color=#fff;mod=1"
