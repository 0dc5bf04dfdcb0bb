from typing import BinaryIO, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import InvalidInput, MalformedHeader

# Header layout:
# sym(utf-8) '-' count(big-endian, fewest bytes) [',' sym '-' count ...] SENTINEL
SENTINEL = b"\n**\n"
PAIR_SEP = b","
FIELD_SEP = b"-"
MAX_COUNT_BYTES = 8
TEXT_ENCODING = "utf-8"


def count_to_bytes(n: int) -> bytes:
    return n.to_bytes(max(1, (n.bit_length() + 7) // 8), "big")


def encode_header(frequencies: Mapping[str, int]) -> bytes:
    pairs = []
    for sym, n in frequencies.items():
        if not isinstance(sym, str) or len(sym) != 1:
            raise InvalidInput(f"Symbol must be a single character, got {sym!r}")
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise InvalidInput(f"Count for {sym!r} must be a non-negative int, got {n!r}")
        if n >= 1 << (8 * MAX_COUNT_BYTES):
            raise InvalidInput(f"Count for {sym!r} does not fit in {MAX_COUNT_BYTES} bytes")
        try:
            sym_bytes = sym.encode(TEXT_ENCODING)
        except UnicodeEncodeError as e:
            raise InvalidInput(f"Symbol {sym!r} has no {TEXT_ENCODING} encoding") from e
        pairs.append(sym_bytes + FIELD_SEP + count_to_bytes(n))
    return PAIR_SEP.join(pairs) + SENTINEL


def write_header(f: BinaryIO, frequencies: Mapping[str, int]):
    f.write(encode_header(frequencies))


def _utf8_len(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _read_pair_head(data: bytes, pos: int) -> Optional[Tuple[str, int]]:
    """
    Parse 'sym -' at pos. Returns (sym, count_start) or None.
    """
    if pos >= len(data):
        return None
    n = _utf8_len(data[pos])
    if n == 0 or data[pos + n:pos + n + 1] != FIELD_SEP:
        return None
    try:
        sym = data[pos:pos + n].decode(TEXT_ENCODING)
    except UnicodeDecodeError:
        return None
    return sym, pos + n + 1


def iter_headers(data: bytes) -> Iterator[Tuple[Dict[str, int], bytes]]:
    """
    Yield every (frequencies, remaining) split of data, shortest counts first.

    Counts are not length-prefixed and may contain ',' '-' or the sentinel
    bytes, and the next pair may start with '-', so the same bytes can admit
    more than one layout. The sentinel is only accepted where a pair can end,
    symbols within a layout are distinct, and each count is 1..MAX_COUNT_BYTES
    bytes without a leading zero. Telling the layouts apart takes the payload;
    see codec.split_file.
    """
    if SENTINEL not in data:
        raise MalformedHeader("Sentinel not found; not a compressed stream")
    if data.startswith(SENTINEL):
        # no pair starts with "\n*"
        yield {}, data[len(SENTINEL):]
        return

    # stack entries: (sym, count_start, count_len)
    stack: List[Tuple[str, int, int]] = []
    seen = set()
    pos = 0
    descend = True
    found = False
    while True:
        if descend:
            head = _read_pair_head(data, pos)
            if head is not None and head[0] not in seen:
                stack.append((head[0], head[1], 0))
                seen.add(head[0])
        if not stack:
            break

        sym, start, length = stack.pop()
        length += 1
        descend = False
        if length > MAX_COUNT_BYTES or start + length > len(data):
            seen.discard(sym)
            continue
        stack.append((sym, start, length))
        end = start + length
        if length > 1 and data[start] == 0:
            continue
        if data[end:end + len(SENTINEL)] == SENTINEL:
            found = True
            freqs = {s: int.from_bytes(data[c:c + k], "big") for s, c, k in stack}
            yield freqs, data[end + len(SENTINEL):]
        elif data[end:end + 1] == PAIR_SEP:
            pos = end + 1
            descend = True

    if not found:
        raise MalformedHeader("Header has no valid pair layout ending in the sentinel")


def decode_header(
    data: bytes,
    accept: Optional[Callable[[Dict[str, int], bytes], bool]] = None,
) -> Tuple[Dict[str, int], bytes]:
    """
    First layout from iter_headers that accept(freqs, remaining) agrees with,
    or simply the first layout when no accept is given.
    """
    for freqs, rest in iter_headers(data):
        if accept is None or accept(freqs, rest):
            return freqs, rest
    raise MalformedHeader("No header layout fits the data that follows it")
