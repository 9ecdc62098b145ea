"""Tests for address validation, dedup and nickname reduction."""

from mailbox_verifier.services.address_normalizer import (
    nickname,
    normalize_nicknames,
    valid_distinct_addresses,
    validate_address,
)


class TestValidDistinctAddresses:

    def test_case_insensitive_duplicates_and_invalid_entries(self):
        """Mixed-case duplicates collapse and malformed entries vanish."""
        raw = ["a@x.com", "A@X.COM", "not-an-email", "a@x.com"]

        assert valid_distinct_addresses(raw) == ["a@x.com"]
        assert normalize_nicknames(raw) == ["a"]

    def test_first_seen_order_is_preserved(self):
        raw = ["zoe@contoso.com", "adam@contoso.com", "ZOE@contoso.com", "mia@contoso.com"]

        assert normalize_nicknames(raw) == ["zoe", "adam", "mia"]

    def test_empty_and_none_input(self):
        assert valid_distinct_addresses([]) == []
        assert valid_distinct_addresses(None) == []
        assert normalize_nicknames([]) == []

    def test_blank_and_none_entries_are_dropped(self):
        raw = ["", None, "   ", "bob@contoso.com"]

        assert normalize_nicknames(raw) == ["bob"]

    def test_placeholder_recipients_are_dropped(self):
        """Non-address recipients injected by a migration do not count."""
        raw = [
            "/O=EXCHANGELABS/OU=EXCHANGE ADMINISTRATIVE GROUP/CN=RECIPIENTS/CN=ALEX",
            "alex.wilber@contoso.com",
            "Undisclosed recipients",
        ]

        assert normalize_nicknames(raw) == ["alex.wilber"]

    def test_idempotent_on_normalized_list(self):
        raw = ["Megan.Bowen@Contoso.com", "megan.bowen@contoso.com", "lynne@contoso.com", "bad@"]
        once = valid_distinct_addresses(raw)

        assert valid_distinct_addresses(once) == once
        assert normalize_nicknames(once) == normalize_nicknames(raw)

    def test_display_wrapped_address(self):
        """'Name <address>' resolves to the address."""
        assert normalize_nicknames(["Alex Wilber <alex.wilber@contoso.com>"]) == ["alex.wilber"]


class TestNickname:

    def test_local_part_lower_cased(self):
        assert nickname("Alex.Wilber@contoso.com") == "alex.wilber"

    def test_validate_address_rejects_non_strings(self):
        assert validate_address(42) is None
        assert validate_address("missing-domain@") is None

    def test_lab_and_tenant_domains_are_valid(self):
        """On-premises lab domains count like any other address."""
        raw = ["alex@contoso.local", "bob@labhost", "c@contoso.onmicrosoft.com", "Alex@CONTOSO.local"]

        assert normalize_nicknames(raw) == ["alex", "bob", "c"]
