from typing import Iterable, List, Mapping, Optional

import numpy as np

from .errors import CorruptPayload, UnknownSymbol
from .huffman import HuffmanTree, encoded_bit_length


class BitWriter:
    def __init__(self):
        self._buf = bytearray()
        self._cur = 0
        self._nbits = 0  # bits currently in _cur (0..7)

    @property
    def nbits(self) -> int:
        """Total bits written so far."""
        return len(self._buf) * 8 + self._nbits

    def write_code(self, code: int, length: int):
        """Write 'length' bits of code (MSB-first)."""
        for i in range(length - 1, -1, -1):
            bit = (code >> i) & 1
            self._cur = (self._cur << 1) | bit
            self._nbits += 1
            if self._nbits == 8:
                self._buf.append(self._cur)
                self._cur = 0
                self._nbits = 0

    def finish(self) -> bytes:
        """Pad remaining bits with zeros."""
        if self._nbits > 0:
            self._buf.append(self._cur << (8 - self._nbits))
            self._cur = 0
            self._nbits = 0
        return bytes(self._buf)


class BitReader:
    def __init__(self, data: bytes, nbits: Optional[int] = None):
        self.data = data
        self.nbits = len(data) * 8 if nbits is None else nbits
        self.pos = 0  # bits consumed, MSB-first

    @property
    def remaining(self) -> int:
        return self.nbits - self.pos

    def read_bit(self) -> int:
        if self.pos >= self.nbits:
            raise EOFError("Unexpected end of bitstream")
        b = (self.data[self.pos >> 3] >> (7 - (self.pos & 7))) & 1
        self.pos += 1
        return b


def relocate_tail(buf: bytes, nbits: int) -> bytes:
    """
    Move the last nbits % 8 bits of a zero-padded stream to a leading byte:
    0..0 1 b1..br, marker bit followed by the r tail bits.
    """
    r = nbits % 8
    if r == 0:
        return buf
    bits = np.unpackbits(np.frombuffer(buf, dtype=np.uint8))[:nbits]
    lead = np.zeros(8, dtype=np.uint8)
    lead[7 - r] = 1
    lead[8 - r:] = bits[nbits - r:]
    return np.packbits(np.concatenate([lead, bits[:nbits - r]])).tobytes()


def check_framing(payload: bytes, nbits: int):
    """Payload must be ceil(nbits / 8) bytes, with the marker bit leading when nbits % 8."""
    expected = (nbits + 7) // 8
    if len(payload) != expected:
        raise CorruptPayload(
            f"Payload is {len(payload)} bytes, expected {expected} for {nbits} bits"
        )
    r = nbits % 8
    if r and payload[0] >> r != 1:
        raise CorruptPayload(f"Leading byte 0x{payload[0]:02x} lacks a marker bit at position {r}")


def restore_tail(payload: bytes, nbits: int) -> bytes:
    """Inverse of relocate_tail: leading byte's tail bits go back to the end."""
    check_framing(payload, nbits)
    r = nbits % 8
    if r == 0:
        return payload
    bits = np.unpackbits(np.frombuffer(payload, dtype=np.uint8))
    return np.packbits(np.concatenate([bits[8:], bits[8 - r:8]])).tobytes()


def pack(symbols: Iterable[str], table: Mapping[str, str]) -> bytes:
    codes = {sym: (int(code, 2), len(code)) for sym, code in table.items()}
    bw = BitWriter()
    for sym in symbols:
        try:
            code, L = codes[sym]
        except KeyError:
            raise UnknownSymbol(sym) from None
        bw.write_code(code, L)
    nbits = bw.nbits
    return relocate_tail(bw.finish(), nbits)


def decode_one_symbol(tree: HuffmanTree, bitreader: BitReader) -> str:
    if tree.is_leaf:
        # lone symbol is coded as "0"
        if bitreader.read_bit() != 0:
            raise CorruptPayload("Single-symbol stream contains a 1 bit")
        return tree.key
    node = tree
    while not node.is_leaf:
        node = node.right if bitreader.read_bit() else node.left
    return node.key


def unpack(payload: bytes, tree: HuffmanTree) -> List[str]:
    """
    Decode exactly tree.weight symbols.

    The bit count comes from the tree's leaf weights (the header frequencies),
    which is what tells us whether the payload starts with a marker byte.
    """
    nbits = encoded_bit_length(tree)
    nsym = tree.weight
    br = BitReader(restore_tail(payload, nbits), nbits=nbits)
    out = []
    try:
        for _ in range(nsym):
            out.append(decode_one_symbol(tree, br))
    except EOFError as e:
        raise CorruptPayload(f"Bitstream ended after {len(out)} of {nsym} symbols") from e
    if br.remaining:
        raise CorruptPayload(f"{br.remaining} bits left over after {nsym} symbols")
    return out
