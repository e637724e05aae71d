"""
Konami RLE encoding of tile strips.

Stream layout:
    $00-7F  repeat the next byte n times
    $80-FE  the next n - $80 bytes are literals
    $FF     end of stream

At least three repeated tiles are needed before the repeated form is used.
"""

import concurrent.futures
import itertools
from collections import namedtuple

import constants
from tiles import build_dictionary, buffer_key, validate_tile_size

# step is the flat index distance between neighbouring tiles in the strip
Axis = namedtuple("Axis", ["name", "step", "length"])

RunOp = namedtuple("RunOp", ["count", "code"])
LiteralOp = namedtuple("LiteralOp", ["codes"])
End = namedtuple("End", [])


def row_axis(buffer, tile_size):
    return Axis(constants.HORIZONTAL, tile_size, buffer.width // tile_size)


def column_axis(buffer, tile_size):
    step = buffer.row_sign * tile_size * buffer.width
    return Axis(constants.VERTICAL, step, buffer.height // tile_size)


def make_axis(name, buffer, tile_size):
    if name == constants.HORIZONTAL:
        return row_axis(buffer, tile_size)
    if name == constants.VERTICAL:
        return column_axis(buffer, tile_size)
    raise ValueError(f"Unknown axis: {name}")


def strip_starts(buffer, tile_size, axis):
    if axis.name == constants.HORIZONTAL:
        return [buffer.tile_origin(row, 0, tile_size) for row in range(buffer.height // tile_size)]
    return [buffer.tile_origin(0, col, tile_size) for col in range(buffer.width // tile_size)]


def strip_codes(buffer, strip_start, tile_size, dictionary, axis):
    codes = []
    for i in range(axis.length):
        key = buffer_key(buffer, strip_start + i * axis.step, tile_size)
        codes.append(dictionary.lookup(key))
    return codes


def encode_codes(codes):
    """Greedy run/literal split of one strip of tile codes into ops, ending with End()."""
    ops = []
    literals = []

    for code, group in itertools.groupby(codes):
        count = len(list(group))

        if count >= constants.MIN_RUN_LENGTH:
            if literals:
                ops.append(LiteralOp(tuple(literals)))
                literals = []

            while count > constants.MAX_RUN_LENGTH:
                ops.append(RunOp(constants.MAX_RUN_LENGTH, code))
                count -= constants.MAX_RUN_LENGTH
            ops.append(RunOp(count, code))

        elif len(literals) > constants.LITERAL_FLUSH_SIZE:
            # The tiles that triggered the flush are not carried into the next segment
            ops.append(LiteralOp(tuple(literals)))
            literals = []

        else:
            literals.extend([code] * count)

    if literals:
        ops.append(LiteralOp(tuple(literals)))

    ops.append(End())
    return ops


def encode_ops(buffer, strip_start, tile_size, dictionary, axis):
    return encode_codes(strip_codes(buffer, strip_start, tile_size, dictionary, axis))


def serialize_ops(ops):
    stream = bytearray()
    for op in ops:
        if isinstance(op, RunOp):
            if not 1 <= op.count <= constants.MAX_RUN_LENGTH:
                raise ValueError(f"Run length {op.count} outside 1..{constants.MAX_RUN_LENGTH}")
            stream.append(op.count)
            stream.append(_code_byte(op.code))
        elif isinstance(op, LiteralOp):
            header = constants.LITERAL_BASE + len(op.codes)
            if not constants.LITERAL_BASE < header <= constants.MAX_LITERAL_HEADER:
                raise ValueError(f"Literal count {len(op.codes)} cannot be framed")
            stream.append(header)
            stream.extend(_code_byte(code) for code in op.codes)
        elif isinstance(op, End):
            stream.append(constants.END_OF_STREAM)
        else:
            raise ValueError(f"Unknown op: {op!r}")
    return bytes(stream)


def _code_byte(code):
    if not 0 <= code < constants.MAX_DICTIONARY_SIZE:
        raise ValueError(f"Tile code {code} does not fit in a byte")
    return code


def encode_strip(buffer, strip_start, tile_size, dictionary, axis):
    return serialize_ops(encode_ops(buffer, strip_start, tile_size, dictionary, axis))


def encode_axis(buffer, tile_size, dictionary, axis_name, max_workers=None):
    """Encode every strip along one axis; streams come back in strip order."""
    axis = make_axis(axis_name, buffer, tile_size)
    starts = strip_starts(buffer, tile_size, axis)

    if not max_workers or max_workers <= 1:
        return [encode_strip(buffer, start, tile_size, dictionary, axis) for start in starts]

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(encode_strip, buffer, start, tile_size, dictionary, axis) for start in starts]
        return [future.result() for future in futures]


def encode_horizontal(buffer, tile_size, dictionary, max_workers=None):
    return encode_axis(buffer, tile_size, dictionary, constants.HORIZONTAL, max_workers)


def encode_vertical(buffer, tile_size, dictionary, max_workers=None):
    return encode_axis(buffer, tile_size, dictionary, constants.VERTICAL, max_workers)


def encode_image(buffer, tile_size, axes=(constants.HORIZONTAL, constants.VERTICAL), max_workers=None):
    """
    Build the tile dictionary for the whole image, then encode the requested axes.

    Returns (dictionary, {axis_name: [stream, ...]}). The dictionary is complete
    before any strip is encoded, so TooManyTiles surfaces before encoding starts.
    """
    validate_tile_size(buffer.width, buffer.height, tile_size)
    dictionary = build_dictionary(buffer, tile_size)

    streams = {}
    for axis_name in axes:
        streams[axis_name] = encode_axis(buffer, tile_size, dictionary, axis_name, max_workers)
    return dictionary, streams


def stream_total(streams):
    return sum(len(stream) for stream in streams)
