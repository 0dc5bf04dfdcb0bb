"""Static Huffman text compressor."""
