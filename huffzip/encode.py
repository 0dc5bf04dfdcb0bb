import argparse, os
from .bitstream import TEXT_ENCODING, write_header
from .codec import count_frequencies, encode_payload
from .huffman import build_table, from_frequencies

def dump_model(freqs):
    """Print symbol, count and code, one line per symbol."""
    if not freqs:
        print("[encode] empty input, no model")
        return
    table = build_table(from_frequencies(freqs))
    for sym, n in freqs.items():
        print(f"node={sym!r:<8} count={n:<8d} code={table[sym]}")

def main(argv=None):
    ap = argparse.ArgumentParser(description="Huffman-compress a text file")
    ap.add_argument("--input", required=True, help="path to text file")
    ap.add_argument("--output", required=True, help="path to .huf")
    ap.add_argument("--encoding", default=TEXT_ENCODING, help=f"input text encoding (default {TEXT_ENCODING})")
    ap.add_argument("--dump", action="store_true", help="print the Huffman model")
    args = ap.parse_args(argv)

    with open(args.input, "r", encoding=args.encoding, newline="") as f:
        text = f.read()

    freqs = count_frequencies(text)
    payload = encode_payload(text, freqs)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "wb") as f:
        write_header(f, freqs)
        f.write(payload)

    if args.dump:
        dump_model(freqs)

    in_size = os.path.getsize(args.input)
    out_size = os.path.getsize(args.output)
    ratio = 100.0 * (1.0 - out_size / in_size) if in_size else 0.0
    print(f"[encode] wrote {args.output}")
    print(f"[encode] symbols={len(text)}, alphabet={len(freqs)}, payload={len(payload)}B")
    print(f"[encode] in={in_size}B, out={out_size}B, ratio={ratio:.1f}%")

if __name__ == "__main__":
    main()
