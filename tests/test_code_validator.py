import pytest

from app.code_validator import checksum_letter, is_valid_code, normalize_code


def test_checksum_example():
    assert checksum_letter("12345") == "P"
    assert is_valid_code("12345P")
    assert not is_valid_code("12345O")


def test_all_zero_digits_map_to_a():
    assert checksum_letter("00000") == "A"
    assert is_valid_code("00000A")


def test_checksum_wraps_modulo_26():
    # 9 * 5 = 45, 45 % 26 = 19 -> 'T'
    assert checksum_letter("99999") == "T"
    assert is_valid_code("99999T")
    # 26 -> 'A' again
    assert is_valid_code("99800A")


def test_every_prefix_accepts_only_its_checksum_letter():
    for n in range(100000):
        prefix = f"{n:05d}"
        expected = chr(65 + sum(int(d) for d in prefix) % 26)
        assert is_valid_code(prefix + expected)
        wrong = "B" if expected == "A" else "A"
        assert not is_valid_code(prefix + wrong)


@pytest.mark.parametrize(
    "value",
    [
        "1234A",
        "abcdeF",
        "123456",
        "12345p",
        "12345PP",
        "",
        " 12345P",
        "12345P\n",
        "1234５P",
        "ABCDEP",
        None,
        12345,
    ],
)
def test_malformed_codes_are_invalid(value):
    assert is_valid_code(value) is False


def test_normalize_code_uppercases_and_trims():
    assert normalize_code("  12345p ") == "12345P"
    assert normalize_code(None) == ""
