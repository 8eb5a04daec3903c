def ones(n: int) -> int:
    """Returns a bitmask where the lowest n bits are 1."""
    return (1 << n)-1


def get_bits(word: int, offset: int, bits: int) -> int:
    """
    Reads the bits-wide field starting at bit offset.

    >>> get_bits(0b1101100, 2, 3)
    3
    """
    return (word >> offset) & ones(bits)


def put_bits(word: int, offset: int, bits: int, value: int) -> int:
    """
    Overwrites the bits-wide field starting at bit offset.
    The value must fit into the field.

    >>> bin(put_bits(0b1111111, 2, 3, 0b010))
    '0b1101011'
    """
    assert 0 <= value <= ones(bits), \
        f"value {value} does not fit into {bits} bits"
    return (word & ~(ones(bits) << offset)) | (value << offset)


def get_flag(word: int, bit: int) -> bool:
    return bool((word >> bit) & 1)


def put_flag(word: int, bit: int, flag: bool) -> int:
    return put_bits(word, bit, 1, int(flag))


if __name__ == "__main__":
    import doctest
    doctest.testmod(verbose=True)
