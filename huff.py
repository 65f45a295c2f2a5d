import argparse
import sys

from typing import Tuple

from bitio import BitInputStream, BitOutputStream
from huffman import (
    FormatError,
    Header,
    TruncatedInputError,
    compress,
    decompress,
)

EXIT_OK = 0
EXIT_FORMAT = 1  #: Bad magic number or impossible tree
EXIT_TRUNCATED = 2  #: Input ended before a header field or the end-of-data code
EXIT_NOT_FOUND = 3  #: Input file or output directory missing


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman file compressor with an embedded code tree"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    comp = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    comp.add_argument("input", help="File to compress")
    comp.add_argument(
        "-o", "--output", required=True, help="Compressed output file path"
    )
    comp.add_argument(
        "--counts",
        action="store_true",
        help="Store symbol counts instead of the code tree",
    )
    comp.add_argument(
        "-q", "--quiet", action="store_true", help="Do not print a summary"
    )

    decomp = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress a file"
    )
    decomp.add_argument("input", help="File to decompress")
    decomp.add_argument(
        "-o", "--output", required=True, help="Decompressed output file path"
    )
    decomp.add_argument(
        "-q", "--quiet", action="store_true", help="Do not print a summary"
    )

    return parser


def _print_summary(original_size: int, compressed_size: int) -> None:
    """Print sizes in bytes and the compressed/original ratio.

    :param original_size: Uncompressed size in bytes.
    :type original_size: int
    :param compressed_size: Compressed size in bytes.
    :type compressed_size: int
    :returns: None
    :rtype: None
    """
    print(f"Original size: {original_size}")
    print(f"Compressed size: {compressed_size}")
    if original_size > 0:
        print(f"Compression ratio: {compressed_size / original_size:.4f}")


def compress_file(
    input_path: str, output_path: str, header: Header = Header.TREE_HEADER
) -> Tuple[int, int]:
    """Compress ``input_path`` into ``output_path``.

    Nothing is written unless compression succeeds.

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :param header: Header variant to embed.
    :type header: Header
    :returns: Input and output sizes in bytes.
    :rtype: Tuple[int, int]
    :raises FileNotFoundError: If ``input_path`` does not exist.
    """
    with open(input_path, "rb") as f:
        data = f.read()
    out = BitOutputStream()
    compress(BitInputStream(data), out, header=header)
    with open(output_path, "wb") as f:
        out.flush(f)
    return len(data), len(out.tobytes())


def decompress_file(
    input_path: str, output_path: str
) -> Tuple[int, int]:
    """Decompress ``input_path`` into ``output_path``.

    The output file is only created once the whole input has decoded, so a
    corrupt or truncated input never leaves a partial file behind.

    :param input_path: Compressed file.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :returns: Input and output sizes in bytes.
    :rtype: Tuple[int, int]
    :raises FileNotFoundError: If ``input_path`` does not exist.
    :raises FormatError: If the magic number is missing or unknown.
    :raises TruncatedInputError: If the input ends early.
    """
    with open(input_path, "rb") as f:
        data = f.read()
    out = BitOutputStream()
    decompress(BitInputStream(data), out)
    with open(output_path, "wb") as f:
        out.flush(f)
    return len(data), len(out.tobytes())


def main(argv=None):
    """Entry point for the CLI tool.

    :param argv: Argument list; ``sys.argv[1:]`` when ``None``.
    :type argv: list[str] | None
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    try:
        if args.cmd in ["compress", "c"]:
            header = Header.COUNT_HEADER if args.counts else Header.TREE_HEADER
            original_size, compressed_size = compress_file(
                args.input, args.output, header
            )
        else:
            compressed_size, original_size = decompress_file(
                args.input, args.output
            )
    except FileNotFoundError as e:
        print(f"[!] File not found: {e.filename}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except FormatError as e:
        print(f"[!] Not a recognized compressed file: {e}", file=sys.stderr)
        return EXIT_FORMAT
    except TruncatedInputError as e:
        print(f"[!] Compressed file is truncated: {e}", file=sys.stderr)
        return EXIT_TRUNCATED

    if not args.quiet:
        _print_summary(original_size, compressed_size)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
