"""Bit-level input and output streams on top of bitstring."""

from bitstring import Bits, BitArray, ConstBitStream


class BitInputStream:
    """Reads unsigned words of any bit width, MSB first.

    The whole source is held in memory, so the stream can always be rewound
    with :meth:`reset` for a second pass.
    """

    def __init__(self, data=b''):
        if hasattr(data, 'read'):
            data = data.read()
        self.bits = ConstBitStream(bytes(data))

    def read_bits(self, n):
        """Return the next ``n`` bits as an int, or ``None`` if fewer remain.

        Nothing is consumed when ``None`` is returned.
        """
        if self.bits.len - self.bits.pos < n:
            return None
        if n == 0:
            return 0
        return self.bits.read(f'uint:{n}')

    def reset(self):
        self.bits.pos = 0

    @property
    def bits_read(self):
        return self.bits.pos


class BitOutputStream:
    """Accumulates written words; pads with zero bits to a whole byte on output."""

    def __init__(self):
        self.bits = BitArray()

    def write_bits(self, n, value):
        if n == 0:
            return
        self.bits.append(Bits(uint=value, length=n))

    @property
    def bits_written(self):
        return self.bits.len

    def tobytes(self):
        return self.bits.tobytes()

    def flush(self, f):
        f.write(self.tobytes())
