import pytest

from network_manager.errors import SsidDecodeError, SsidTooLongError, SsidValueError
from network_manager.ssid import MAX_SSID_LENGTH, Ssid, as_ssid


@pytest.mark.parametrize("length", [0, 1, 16, MAX_SSID_LENGTH])
def test_ssid_accepts_up_to_32_bytes(length: int) -> None:
    raw = bytes(range(length))
    ssid = Ssid(raw)
    assert ssid.as_bytes() == raw
    assert len(ssid) == length


def test_ssid_rejects_values_longer_than_32_bytes() -> None:
    with pytest.raises(SsidTooLongError) as excinfo:
        Ssid(b"x" * 33)
    assert excinfo.value.length == 33


def test_ssid_from_str_counts_encoded_bytes() -> None:
    # 17 characters, 33 bytes once encoded
    with pytest.raises(SsidTooLongError):
        Ssid.from_str("é" * 16 + "x")
    assert Ssid.from_str("café").as_bytes() == "café".encode("utf-8")


def test_ssid_as_str_fails_for_non_utf8_bytes() -> None:
    ssid = Ssid(b"\xff\xfeNet")
    with pytest.raises(SsidDecodeError):
        ssid.as_str()
    assert ssid.as_bytes() == b"\xff\xfeNet"


def test_ssid_equality_and_order_use_raw_bytes() -> None:
    first = Ssid(b"Alpha")
    same = Ssid.from_str("Alpha")
    later = Ssid(b"Beta")
    assert first == same
    assert hash(first) == hash(same)
    assert first < later
    assert sorted([later, first, Ssid(b"\xffZ")]) == [first, later, Ssid(b"\xffZ")]
    assert {first, same} == {first}


def test_ssid_is_immutable() -> None:
    ssid = Ssid(b"Home")
    with pytest.raises(AttributeError):
        ssid.value = b"Other"  # type: ignore[misc]


def test_ssid_from_bytes_accepts_byte_lists() -> None:
    assert Ssid.from_bytes([72, 105]) == Ssid(b"Hi")


@pytest.mark.parametrize("octets", [[300], [-1], ["H", "i"]])
def test_ssid_rejects_values_that_are_not_octets(octets) -> None:
    with pytest.raises(SsidValueError, match="Invalid SSID octets"):
        Ssid.from_bytes(octets)


def test_ssid_rejects_text_in_constructor() -> None:
    with pytest.raises(TypeError):
        Ssid("Home")  # type: ignore[arg-type]


def test_as_ssid_normalises_inputs() -> None:
    ssid = Ssid(b"Home")
    assert as_ssid(ssid) is ssid
    assert as_ssid("Home") == ssid
    assert as_ssid(b"Home") == ssid
