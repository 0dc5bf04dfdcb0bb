import random
from collections import Counter

import pytest

from huffzip.bitpack import BitReader, BitWriter, pack, unpack
from huffzip.errors import CorruptPayload, UnknownSymbol
from huffzip.huffman import Leaf, build_table, from_frequencies

ABC = {"a": 2, "b": 2, "c": 2}  # codes: c=0, a=10, b=11


def test_bitwriter_counts_and_pads():
    bw = BitWriter()
    bw.write_code(0b101, 3)
    assert bw.nbits == 3
    bw.write_code(0b11111, 5)
    bw.write_code(0b1, 1)
    assert bw.nbits == 9
    assert bw.finish() == b"\xbf\x80"


def test_bitreader_stops_at_limit():
    br = BitReader(b"\xa0", nbits=3)
    assert [br.read_bit() for _ in range(3)] == [1, 0, 1]
    assert br.remaining == 0
    with pytest.raises(EOFError):
        br.read_bit()


def test_bitreader_reads_whole_buffer_by_default():
    br = BitReader(b"\xa0")
    assert br.remaining == 8
    assert [br.read_bit() for _ in range(8)] == [1, 0, 1, 0, 0, 0, 0, 0]


def test_seven_bits_move_to_front():
    assert pack("a", {"a": "1" * 7}) == b"\xff"


def test_aligned_stream_has_no_marker():
    assert pack("ab", {"a": "1010", "b": "0101"}) == b"\xa5"


def test_partial_byte_relocated():
    table = build_table(from_frequencies(ABC))
    assert table == {"c": "0", "a": "10", "b": "11"}
    # 10 11 0 10 11 0 -> tail "10" goes in front behind the marker
    assert pack("abcabc", table) == b"\x06\xb5"


def test_single_symbol_stream():
    assert pack("aaa", {"a": "0"}) == b"\x08"
    assert unpack(b"\x08", Leaf(3, "a")) == ["a", "a", "a"]


def test_empty_input():
    assert pack("", {"a": "0"}) == b""
    assert unpack(b"", Leaf(0, "a")) == []


def test_unknown_symbol():
    with pytest.raises(UnknownSymbol) as exc:
        pack("ax", {"a": "0"})
    assert exc.value.symbol == "x"


def test_unpack_relocated_stream():
    tree = from_frequencies(ABC)
    assert unpack(b"\x06\xb5", tree) == list("abcabc")


@pytest.mark.parametrize("text", [
    "zzkkkkkkkmmmmmmmmmmmmmmmmmmmmmmmm",
    "abracadabra",
    "aaaaaaaa",
    "x",
    "mississippi river\n",
    "héllo wörld, 你好 😀",
])
def test_round_trip(text):
    tree = from_frequencies(Counter(text))
    payload = pack(text, build_table(tree))
    assert "".join(unpack(payload, tree)) == text


def test_round_trip_random():
    rng = random.Random(1234)
    for n in (1, 7, 8, 9, 63, 64, 65, 1000):
        text = "".join(rng.choice("abcdefg \n") for _ in range(n))
        tree = from_frequencies(Counter(text))
        assert "".join(unpack(pack(text, build_table(tree)), tree)) == text


def test_payload_length_checked():
    tree = from_frequencies(ABC)
    with pytest.raises(CorruptPayload):
        unpack(b"\x06", tree)
    with pytest.raises(CorruptPayload):
        unpack(b"\x06\xb5\x00", tree)
    with pytest.raises(CorruptPayload):
        unpack(b"", tree)


@pytest.mark.parametrize("lead", [0x02, 0x0E, 0x86])
def test_marker_bit_checked(lead):
    with pytest.raises(CorruptPayload):
        unpack(bytes([lead, 0xB5]), from_frequencies(ABC))


def test_leftover_bits_rejected():
    # ten "0" bits decode six c's with four bits to spare
    with pytest.raises(CorruptPayload):
        unpack(b"\x04\x00", from_frequencies(ABC))


def test_bits_exhausted_rejected():
    # ten "1" bits only hold five b's
    with pytest.raises(CorruptPayload):
        unpack(b"\x07\xff", from_frequencies(ABC))


def test_single_symbol_rejects_one_bit():
    with pytest.raises(CorruptPayload):
        unpack(b"\x09", Leaf(3, "a"))
