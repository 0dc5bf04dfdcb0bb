import argparse, os
from .bitstream import TEXT_ENCODING
from .codec import decode_payload, split_file

def main(argv=None):
    ap = argparse.ArgumentParser(description="Restore a Huffman-compressed text file")
    ap.add_argument("--input", required=True, help="path to .huf")
    ap.add_argument("--output", required=True, help="path to output text file")
    ap.add_argument("--encoding", default=TEXT_ENCODING, help=f"output text encoding (default {TEXT_ENCODING})")
    args = ap.parse_args(argv)

    with open(args.input, "rb") as f:
        freqs, payload = split_file(f.read())

    text = decode_payload(freqs, payload)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "w", encoding=args.encoding, newline="") as f:
        f.write(text)

    print(f"[decode] wrote {args.output}")
    print(f"[decode] symbols={len(text)}, alphabet={len(freqs)}, payload={len(payload)}B")

if __name__ == "__main__":
    main()
