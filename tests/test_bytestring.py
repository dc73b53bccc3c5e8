import pytest

from dbgen.bytestring import ByteString, Encoding, TryIntoStringError

E = Encoding


PUSH_STR_CASES = [
    (b"abc", "def", E.ASCII, b"abcdef"),
    (b"abc", "", E.ASCII, b"abc"),
    (b"abc\xc2", "def", E.BINARY, b"abc\xc2def"),
    (b"abc\xc2", "", E.BINARY, b"abc\xc2"),
    (b"abc\x80", "def", E.BINARY, b"abc\x80def"),
    (b"abc\x80", "", E.BINARY, b"abc\x80"),
    (b"", "def", E.ASCII, b"def"),
    (b"", "", E.ASCII, b""),
    (b"\xc2", "def", E.BINARY, b"\xc2def"),
    (b"\xc2", "", E.BINARY, b"\xc2"),
    (b"\x80", "def", E.BINARY, b"\x80def"),
    (b"\x80", "", E.BINARY, b"\x80"),
    (b"\xc2\x80", "def", E.UTF8, b"\xc2\x80def"),
    (b"\xc2\x80", "", E.UTF8, b"\xc2\x80"),
]


@pytest.mark.parametrize("initial, text, encoding, expected", PUSH_STR_CASES)
def test_push_str(initial, text, encoding, expected):
    target = ByteString(initial)
    clone1 = target.copy()
    clone2 = target.copy()
    clone3 = target.copy()

    target.extend_str(text)
    assert target.encoding() == encoding
    assert bytes(target) == expected

    clone1.extend_byte_string(ByteString(text))
    assert clone1.encoding() == encoding
    assert bytes(clone1) == expected

    assert clone2.write(text.encode("utf-8")) == len(text)
    assert clone2.encoding() == encoding
    assert bytes(clone2) == expected

    clone3.write(text)
    assert clone3.encoding() == encoding
    assert bytes(clone3) == expected


PUSH_BYTES_CASES = [
    (b"abc", b"def", E.ASCII, b"abcdef"),
    (b"abc", b"def\xc2", E.BINARY, b"abcdef\xc2"),
    (b"abc", b"def\x80", E.BINARY, b"abcdef\x80"),
    (b"abc", b"", E.ASCII, b"abc"),
    (b"abc", b"\xc2", E.BINARY, b"abc\xc2"),
    (b"abc", b"\x80", E.BINARY, b"abc\x80"),
    (b"abc\xc2", b"def", E.BINARY, b"abc\xc2def"),
    (b"abc\xc2", b"def\xc2", E.BINARY, b"abc\xc2def\xc2"),
    (b"abc\xc2", b"def\x80", E.BINARY, b"abc\xc2def\x80"),
    (b"abc\xc2", b"", E.BINARY, b"abc\xc2"),
    (b"abc\xc2", b"\xc2", E.BINARY, b"abc\xc2\xc2"),
    (b"abc\xc2", b"\x80", E.UTF8, b"abc\xc2\x80"),
    (b"abc\x80", b"def", E.BINARY, b"abc\x80def"),
    (b"abc\x80", b"def\xc2", E.BINARY, b"abc\x80def\xc2"),
    (b"abc\x80", b"def\x80", E.BINARY, b"abc\x80def\x80"),
    (b"abc\x80", b"", E.BINARY, b"abc\x80"),
    (b"abc\x80", b"\xc2", E.BINARY, b"abc\x80\xc2"),
    (b"abc\x80", b"\x80", E.BINARY, b"abc\x80\x80"),
    (b"", b"def", E.ASCII, b"def"),
    (b"", b"def\xc2", E.BINARY, b"def\xc2"),
    (b"", b"def\x80", E.BINARY, b"def\x80"),
    (b"", b"", E.ASCII, b""),
    (b"", b"\xc2", E.BINARY, b"\xc2"),
    (b"", b"\x80", E.BINARY, b"\x80"),
    (b"\xc2", b"def", E.BINARY, b"\xc2def"),
    (b"\xc2", b"def\xc2", E.BINARY, b"\xc2def\xc2"),
    (b"\xc2", b"def\x80", E.BINARY, b"\xc2def\x80"),
    (b"\xc2", b"", E.BINARY, b"\xc2"),
    (b"\xc2", b"\xc2", E.BINARY, b"\xc2\xc2"),
    (b"\xc2", b"\x80", E.UTF8, b"\xc2\x80"),
    (b"\x80", b"def", E.BINARY, b"\x80def"),
    (b"\x80", b"def\xc2", E.BINARY, b"\x80def\xc2"),
    (b"\x80", b"def\x80", E.BINARY, b"\x80def\x80"),
    (b"\x80", b"", E.BINARY, b"\x80"),
    (b"\x80", b"\xc2", E.BINARY, b"\x80\xc2"),
    (b"\x80", b"\x80", E.BINARY, b"\x80\x80"),
]


@pytest.mark.parametrize("initial, append, encoding, expected", PUSH_BYTES_CASES)
def test_push_bytes(initial, append, encoding, expected):
    target = ByteString(initial)
    clone = target.copy()

    target.extend_bytes(append)
    assert target.encoding() == encoding
    assert bytes(target) == expected

    clone.extend_byte_string(ByteString(append))
    assert clone.encoding() == encoding
    assert bytes(clone) == expected


TRUNCATE_CASES = [
    (b"abc", 2, E.ASCII, b"ab", E.BINARY, b"ab\x80"),
    (b"abc", 3, E.ASCII, b"abc", E.BINARY, b"abc\x80"),
    (b"abc", 0, E.ASCII, b"", E.BINARY, b"\x80"),
    (b"abc\xc2\x80", 4, E.BINARY, b"abc\xc2", E.UTF8, b"abc\xc2\x80"),
    (b"abc\xf0\x80", 4, E.BINARY, b"abc\xf0", E.BINARY, b"abc\xf0\x80"),
    (b"abc\x80\x80", 4, E.BINARY, b"abc\x80", E.BINARY, b"abc\x80\x80"),
]


@pytest.mark.parametrize(
    "initial, length, encoding, expected, encoding_after, expected_after",
    TRUNCATE_CASES,
)
def test_truncate(initial, length, encoding, expected, encoding_after, expected_after):
    target = ByteString(initial)
    target.truncate(length)
    assert target.encoding() == encoding
    assert bytes(target) == expected

    target.extend_bytes(b"\x80")
    assert target.encoding() == encoding_after
    assert bytes(target) == expected_after


DRAIN_INIT_CASES = [
    (b"abc", 2, E.ASCII, b"c"),
    (b"abc", 3, E.ASCII, b""),
    (b"\xc2\x80", 0, E.UTF8, b"\xc2\x80"),
    (b"\xc2\x80", 1, E.BINARY, b"\x80"),
    (b"\xc2\x80", 2, E.ASCII, b""),
    (b"\x80\xc2", 1, E.BINARY, b"\xc2"),
    (b"\x80\xc2\x80", 1, E.UTF8, b"\xc2\x80"),
]


@pytest.mark.parametrize("initial, length, encoding, expected", DRAIN_INIT_CASES)
def test_drain_init(initial, length, encoding, expected):
    target = ByteString(initial)
    target.drain_init(length)
    assert target.encoding() == encoding
    assert bytes(target) == expected


SPLICE_CASES = [
    ("abcdef", 2, 4, "XYZ", E.ASCII, b"abXYZef"),
    ("ghíj́ḱ", 1, 4, "lmnóṕ", E.UTF8, "glmnóṕj́ḱ".encode("utf-8")),
    (b"abc\xf1\xf2\xf3", 3, 3, "d", E.BINARY, b"abcd\xf1\xf2\xf3"),
    (b"abc\xf1\xf2\xf3", 4, 4, "d", E.BINARY, b"abc\xf1d\xf2\xf3"),
    (b"abc\xf1\xf2\xf3", 3, 6, "d", E.ASCII, b"abcd"),
    (b"\xc2\x80\xc3\x81", 2, 2, b"\xc4\x82", E.UTF8, b"\xc2\x80\xc4\x82\xc3\x81"),
    (b"\xc2\x80\xc3\x81", 1, 3, b"\xc4\x82", E.BINARY, b"\xc2\xc4\x82\x81"),
    (b"\xc2\x80\xc3\x81", 1, 1, b"\x82\xc4", E.UTF8, b"\xc2\x82\xc4\x80\xc3\x81"),
]


@pytest.mark.parametrize("initial, start, end, replacement, encoding, expected", SPLICE_CASES)
def test_splice(initial, start, end, replacement, encoding, expected):
    target = ByteString(initial)
    target.splice(start, end, ByteString(replacement))
    assert target.encoding() == encoding
    assert bytes(target) == expected


def test_splice_keeps_ascii_prefix_consistent():
    target = ByteString("é" + "a")
    target.splice(0, 2, ByteString("X"))
    assert bytes(target) == b"Xa"
    assert target.encoding() == E.ASCII
    assert target.ascii_len == 2


def test_splice_out_of_range_raises():
    target = ByteString("abc")
    with pytest.raises(IndexError):
        target.splice(2, 5, ByteString("x"))
    with pytest.raises(IndexError):
        target.splice(2, 1, ByteString("x"))


def test_to_str_valid_and_invalid():
    assert ByteString("héllo").to_str() == "héllo"
    invalid = ByteString(b"ab\xff")
    with pytest.raises(TryIntoStringError) as info:
        invalid.to_str()
    assert info.value.byte_string == invalid


def test_char_len():
    assert ByteString("abé").char_len() == 3
    assert ByteString("").char_len() == 0
    assert ByteString(b"a\xc2\x80\x80").char_len() == 2


def test_char_range():
    s = ByteString("abé")
    assert s.char_range(0, 2) == (0, 2)
    assert s.char_range(2, 3) == (2, 4)
    assert s.char_range(0, 3) == (0, 4)
    assert s.char_range(3, 5) == (4, 4)


def test_clamp_range():
    s = ByteString("abcd")
    assert s.clamp_range(1, 10) == (1, 4)
    assert s.clamp_range(6, 9) == (4, 4)
    assert s.clamp_range(1, 2) == (1, 2)


def test_equality_and_ordering():
    assert ByteString("abc") == ByteString(b"abc")
    assert ByteString("abc") < ByteString("abd")
    assert ByteString(b"\xff") > ByteString("z")
    assert sorted([ByteString("b"), ByteString("a")]) == [ByteString("a"), ByteString("b")]


def test_len_and_clear():
    s = ByteString("héllo")
    assert len(s) == 6
    s.clear()
    assert len(s) == 0
    assert s.encoding() == E.ASCII


def test_extend_number():
    s = ByteString("n=")
    s.extend_number(42)
    assert bytes(s) == b"n=42"
    assert s.encoding() == E.ASCII


def test_copy_is_independent():
    original = ByteString("abc")
    duplicate = original.copy()
    duplicate.extend_str("d")
    assert bytes(original) == b"abc"
    assert bytes(duplicate) == b"abcd"


def test_encoding_order():
    ascii_enc = ByteString("abc").encoding()
    utf8_enc = ByteString("é").encoding()
    binary_enc = ByteString(b"\xff").encoding()
    assert ascii_enc == E.ASCII
    assert utf8_enc == E.UTF8
    assert binary_enc == E.BINARY
    assert ascii_enc < utf8_enc < binary_enc