"""Unit tests for TokenPair."""

import pytest

from dexmonitor.src.TokenPair import (
    DEFAULT_PAIRS,
    USDC,
    WETH,
    TokenPair,
    parse_pairs,
)


class TestTokenPairInit:
    """Test TokenPair construction and validation."""

    def test_valid_pair(self) -> None:
        """A well-formed pair should keep all fields."""
        pair = TokenPair("ETH/USDC", WETH, USDC, 18, 6)
        assert pair.name == "ETH/USDC"
        assert pair.token_a == WETH
        assert pair.token_b == USDC
        assert pair.decimals_a == 18
        assert pair.decimals_b == 6

    def test_str_is_name(self) -> None:
        """String form should be the pair name."""
        assert str(TokenPair("ETH/USDC", WETH, USDC, 18, 6)) == "ETH/USDC"

    def test_empty_name_rejected(self) -> None:
        """Empty name should raise ValueError."""
        with pytest.raises(ValueError, match="name"):
            TokenPair("", WETH, USDC, 18, 6)

    def test_negative_decimals_rejected(self) -> None:
        """Negative decimals should raise ValueError."""
        with pytest.raises(ValueError, match="decimals_b"):
            TokenPair("ETH/USDC", WETH, USDC, 18, -1)

    def test_bool_decimals_rejected(self) -> None:
        """Booleans are not valid decimals."""
        with pytest.raises(ValueError, match="decimals_a"):
            TokenPair("ETH/USDC", WETH, USDC, True, 6)

    def test_frozen(self) -> None:
        """Pairs should be immutable."""
        pair = TokenPair("ETH/USDC", WETH, USDC, 18, 6)
        with pytest.raises(AttributeError):
            pair.name = "other"  # type: ignore[misc]

    def test_default_pairs(self) -> None:
        """Default pairs should be ETH/USDC and USDC/USDT."""
        assert [p.name for p in DEFAULT_PAIRS] == ["ETH/USDC", "USDC/USDT"]
        assert DEFAULT_PAIRS[0].decimals_a == 18
        assert DEFAULT_PAIRS[0].decimals_b == 6
        assert DEFAULT_PAIRS[1].decimals_a == 6


class TestTokenPairParsing:
    """Test parsing pairs from strings."""

    def test_from_string(self) -> None:
        """A five-field definition should parse."""
        pair = TokenPair.from_string(f"ETH/USDC:{WETH}:{USDC}:18:6")
        assert pair == TokenPair("ETH/USDC", WETH, USDC, 18, 6)

    def test_from_string_strips_whitespace(self) -> None:
        """Whitespace around fields should be ignored."""
        pair = TokenPair.from_string(f" ETH/USDC : {WETH} : {USDC} : 18 : 6 ")
        assert pair.name == "ETH/USDC"
        assert pair.token_a == WETH

    def test_from_string_wrong_field_count(self) -> None:
        """Missing fields should raise ValueError."""
        with pytest.raises(ValueError, match="Invalid pair format"):
            TokenPair.from_string(f"ETH/USDC:{WETH}:{USDC}:18")

    def test_from_string_non_integer_decimals(self) -> None:
        """Non-integer decimals should raise ValueError."""
        with pytest.raises(ValueError, match="Invalid pair format"):
            TokenPair.from_string(f"ETH/USDC:{WETH}:{USDC}:eighteen:6")

    def test_parse_pairs_keeps_order(self) -> None:
        """Semicolon-separated definitions should parse in order."""
        pairs = parse_pairs(f"B:{WETH}:{USDC}:18:6;A:{USDC}:{WETH}:6:18;")
        assert [p.name for p in pairs] == ["B", "A"]

    def test_parse_pairs_empty(self) -> None:
        """Empty input should give no pairs."""
        assert parse_pairs("") == []
