"""Huffman coding in Python.

Compressed layout, MSB first:

    magic    32 bits   HUFF_TREE or HUFF_COUNTS
    header   tree in preorder (0 = internal, 1 + 9-bit symbol = leaf),
             or 256 counts of 32 bits each
    body     one code per input byte, then the PSEUDO_EOF code,
             zero-padded to a whole byte

Every byte value gets a leaf even if it never occurs, so the tree always has
257 leaves and every symbol has a code.
"""

from enum import Enum
from functools import total_ordering
from heapq import heapify, heappop, heappush
from itertools import count

from bitio import BitInputStream, BitOutputStream


BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 2**BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE
SYMBOL_BITS = BITS_PER_WORD + 1  # 8 bits can't hold PSEUDO_EOF

HUFF_NUMBER = 0xface8200
HUFF_TREE = HUFF_NUMBER | 1
HUFF_COUNTS = HUFF_NUMBER | 2


class Header(Enum):
    TREE_HEADER = HUFF_TREE
    COUNT_HEADER = HUFF_COUNTS


class HuffException(Exception):
    pass


class FormatError(HuffException):
    """Input does not start with a recognized magic number."""


class CorruptTreeError(FormatError):
    """Header parsed, but into a tree this encoder could never have written.

    Only impossible symbol values, nesting deeper than a 257-leaf tree allows
    and a bare-leaf root are caught. Any other damaged header that still
    parses decodes to garbage without an error.
    """


class TruncatedInputError(HuffException):
    """Input ran out where a header field or body bit was expected."""


@total_ordering
class Symbol:
    def __init__(self, symbol, count=0, left=None, right=None, order=0):
        self.symbol = symbol
        self.count = count
        self.left = left
        self.right = right
        self.order = order

    def __lt__(self, other):
        # Equal counts pop in creation order.
        return (self.count, self.order) < (other.count, other.order)

    def is_leaf(self):
        return self.left is None and self.right is None


def read_for_counts(bits):
    counts = [0] * ALPH_SIZE
    while True:
        s = bits.read_bits(BITS_PER_WORD)
        if s is None:
            break
        counts[s] += 1
    return counts


def make_huffman_tree(counts):
    """Merge all 256 byte leaves plus PSEUDO_EOF (weight 1) into one tree.

    The first node popped in each merge becomes the left child. Ties on
    weight are broken by creation order: leaves in symbol order, then merged
    nodes as they are made. The same counts therefore always give the same
    tree, which the count header depends on.
    """
    order = count()
    pq = [Symbol(s, count=counts[s], order=next(order)) for s in range(ALPH_SIZE)]
    pq.append(Symbol(PSEUDO_EOF, count=1, order=next(order)))
    heapify(pq)
    while len(pq) > 1:
        s1 = heappop(pq)
        s2 = heappop(pq)
        new = Symbol(None, count=(s1.count + s2.count), left=s1, right=s2,
                     order=next(order))
        heappush(pq, new)
    return pq[0]


def make_encoding_dictionary(tree):
    def encode_node(node, code):
        if node.is_leaf():
            return {node.symbol: code}
        else:
            merged = {}
            merged.update(encode_node(node.left, code + '0'))
            merged.update(encode_node(node.right, code + '1'))
            return merged
    return encode_node(tree, '')


def write_tree_header(node, out):
    if node.is_leaf():
        out.write_bits(1, 1)
        out.write_bits(SYMBOL_BITS, node.symbol)
    else:
        out.write_bits(1, 0)
        write_tree_header(node.left, out)
        write_tree_header(node.right, out)


def read_tree_header(bits, depth=0):
    """Rebuild a tree written by write_tree_header.

    A 257-leaf tree has no internal node deeper than 255, so a deeper one
    means the header is corrupt.
    """
    is_leaf = bits.read_bits(1)
    if is_leaf is None:
        raise TruncatedInputError('Input ended inside the tree header')
    if is_leaf:
        symbol = bits.read_bits(SYMBOL_BITS)
        if symbol is None:
            raise TruncatedInputError('Input ended inside a leaf symbol')
        if symbol > PSEUDO_EOF:
            raise CorruptTreeError(f'Leaf symbol {symbol} out of range')
        return Symbol(symbol)
    else:
        if depth >= PSEUDO_EOF:
            raise CorruptTreeError(f'Tree header nests deeper than {PSEUDO_EOF} levels')
        left = read_tree_header(bits, depth + 1)
        right = read_tree_header(bits, depth + 1)
        return Symbol(None, left=left, right=right)


def write_count_header(counts, out):
    for c in counts:
        if c >= 2**BITS_PER_INT:
            raise ValueError(f'Count {c} does not fit in {BITS_PER_INT} bits; '
                             'use the tree header')
        out.write_bits(BITS_PER_INT, c)


def read_count_header(bits):
    counts = []
    for _ in range(ALPH_SIZE):
        c = bits.read_bits(BITS_PER_INT)
        if c is None:
            raise TruncatedInputError('Input ended inside the count header')
        counts.append(c)
    return counts


def write_compressed_bits(bits, codings, out):
    while True:
        s = bits.read_bits(BITS_PER_WORD)
        if s is None:
            code = codings[PSEUDO_EOF]
            out.write_bits(len(code), int(code, 2))
            break
        code = codings[s]
        out.write_bits(len(code), int(code, 2))


def read_compressed_bits(bits, out, tree):
    current = tree
    while True:
        bit = bits.read_bits(1)
        if bit is None:
            raise TruncatedInputError('Input ended before the end-of-data code')
        current = current.right if bit else current.left
        if current.is_leaf():
            if current.symbol == PSEUDO_EOF:
                break
            out.write_bits(BITS_PER_WORD, current.symbol)
            current = tree


def compress(bits, out, header=Header.TREE_HEADER):
    """Compress ``bits`` into ``out``; returns the number of bits written.

    Reads the input twice, so ``bits`` must support ``reset()``.
    """
    start = out.bits_written
    counts = read_for_counts(bits)
    tree = make_huffman_tree(counts)
    codings = make_encoding_dictionary(tree)

    out.write_bits(BITS_PER_INT, header.value)
    if header is Header.COUNT_HEADER:
        write_count_header(counts, out)
    else:
        write_tree_header(tree, out)

    bits.reset()
    write_compressed_bits(bits, codings, out)
    return out.bits_written - start


def decompress(bits, out):
    """Decompress ``bits`` into ``out``; returns the number of bits written."""
    start = out.bits_written
    magic = bits.read_bits(BITS_PER_INT)
    if magic is None:
        raise FormatError('Input too short for a magic number')
    if magic in (HUFF_NUMBER, HUFF_TREE):
        tree = read_tree_header(bits)
    elif magic == HUFF_COUNTS:
        tree = make_huffman_tree(read_count_header(bits))
    else:
        raise FormatError(f'Unrecognized magic number {magic:#010x}')
    if tree.is_leaf():
        raise CorruptTreeError('Tree header is a single leaf')

    read_compressed_bits(bits, out, tree)
    return out.bits_written - start


def huffman_encode(data, header=Header.TREE_HEADER):
    out = BitOutputStream()
    compress(BitInputStream(data), out, header=header)
    return out.tobytes()


def huffman_decode(data):
    out = BitOutputStream()
    decompress(BitInputStream(data), out)
    return out.tobytes()

