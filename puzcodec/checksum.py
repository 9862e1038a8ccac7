import struct

HEADER_CKSUM_FORMAT = '<BBH H H '

MASKSTRING = 'ICHEATED'

# names accepted by Puzzle.compute_checksum, in verification order
CHECKSUM_KINDS = ('cib', 'board', 'masked_low', 'masked_high')


def data_cksum(data, cksum=0):
    for b in data:
        # right-shift one with wrap-around
        lowbit = (cksum & 0x0001)
        cksum = (cksum >> 1)
        if lowbit:
            cksum = (cksum | 0x8000)

        # then add in the data and clear any carried bit past 16
        cksum = (cksum + b) & 0xffff

    return cksum


def header_cksum(width, height, n_clues, bitmask, scrambled_tag, cksum=0):
    return data_cksum(struct.pack(HEADER_CKSUM_FORMAT,
                                  width, height, n_clues,
                                  bitmask, scrambled_tag), cksum)


def text_cksum(title, author, copyright, clues, notes, cksum=0):
    """
    Fold the encoded text fields into cksum. title, author, copyright and
    notes are added with null termination and only when non-empty; clues
    are added without termination.
    """
    for field in (title, author, copyright):
        if field:
            cksum = data_cksum(field + b'\0', cksum)

    for clue in clues:
        cksum = data_cksum(clue, cksum)

    if notes:
        cksum = data_cksum(notes + b'\0', cksum)

    return cksum


def masked_cksums(cksums):
    """
    Mask the four component checksums (header, solution, fill, text) with
    'ICHEATED' and return the low and high halves as hex strings.
    """
    low = bytes(ord(MASKSTRING[i]) ^ (cksum & 0x00ff)
                for i, cksum in enumerate(cksums))
    high = bytes(ord(MASKSTRING[i + 4]) ^ ((cksum & 0xff00) >> 8)
                 for i, cksum in enumerate(cksums))
    return low.hex(), high.hex()
