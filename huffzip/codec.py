from collections import Counter
from typing import Dict, Mapping, Tuple

from .bitpack import check_framing, pack, unpack
from .bitstream import encode_header, iter_headers
from .errors import CorruptPayload
from .huffman import build_table, encoded_bit_length, from_frequencies


def count_frequencies(text: str) -> Counter:
    # Counter keeps first-occurrence order, which fixes the tree's tie-breaks
    return Counter(text)


def encode_payload(text: str, freqs: Mapping[str, int]) -> bytes:
    if not freqs:
        return b""
    table = build_table(from_frequencies(freqs))
    return pack(text, table)


def check_payload(freqs: Mapping[str, int], payload: bytes):
    """Raise CorruptPayload unless payload has the size and marker the header implies."""
    if not freqs:
        if payload:
            raise CorruptPayload(f"Empty header but {len(payload)} payload bytes")
        return
    check_framing(payload, encoded_bit_length(from_frequencies(freqs)))


def split_file(data: bytes) -> Tuple[Dict[str, int], bytes]:
    """
    Split a file into (frequencies, payload).

    The header alone can parse more than one way, so take the first layout
    whose payload fits the tree it describes. If none fits, the error for
    the first layout is raised.
    """
    error = None
    for freqs, payload in iter_headers(data):
        try:
            check_payload(freqs, payload)
        except CorruptPayload as e:
            if error is None:
                error = e
            continue
        return freqs, payload
    raise error


def decode_payload(freqs: Mapping[str, int], payload: bytes) -> str:
    check_payload(freqs, payload)
    if not freqs:
        return ""
    tree = from_frequencies(freqs)
    return "".join(unpack(payload, tree))


def encode_text(text: str) -> bytes:
    """
    Returns: header (with sentinel) followed by the packed payload.
    Empty text is just the sentinel.
    """
    freqs = count_frequencies(text)
    return encode_header(freqs) + encode_payload(text, freqs)


def decode_bytes(data: bytes) -> str:
    freqs, payload = split_file(data)
    return decode_payload(freqs, payload)
