import numpy as np

import constants


class TileMapError(Exception):
    pass


class TooManyTiles(TileMapError):
    def __init__(self, count, limit=constants.MAX_DICTIONARY_SIZE):
        super().__init__(f"Too many metatiles generated at provided tile size: {count} (limit {limit})")
        self.count = count
        self.limit = limit


class UnknownTile(TileMapError):
    def __init__(self, key):
        super().__init__(f"Tile not found in dictionary ({len(key)} byte key)")
        self.key = key


class InvalidTileSize(TileMapError):
    def __init__(self, tile_size, width, height, reason):
        super().__init__(f"Invalid tile size {tile_size} for {width}x{height} image: {reason}")
        self.tile_size = tile_size
        self.width = width
        self.height = height


class PixelBuffer:
    """
    Flat RGB pixel buffer of shape (width * height, 3).

    Rows are stored top-down unless bottom_up is set, in which case the first
    stored row is the bottom row of the image (the BMP convention).
    """

    def __init__(self, pixels, width, height, bottom_up=False):
        pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
        if pixels.shape != (width * height, 3):
            raise ValueError(f"Pixel buffer shape {pixels.shape} does not match {width}x{height} RGB")
        self.pixels = pixels
        self.width = width
        self.height = height
        self.bottom_up = bottom_up

    @classmethod
    def from_array(cls, pixels, bottom_up=False):
        """Build from a (height, width, channels) array in visual order; alpha is dropped."""
        height, width = pixels.shape[:2]
        rows = np.asarray(pixels)[:, :, :3]
        if bottom_up:
            rows = rows[::-1]
        return cls(rows.reshape(width * height, 3), width, height, bottom_up)

    @property
    def row_sign(self):
        return -1 if self.bottom_up else 1

    def tile_origin(self, tile_row, tile_col, tile_size):
        # Flat index of the visual top-left pixel of a tile
        y = tile_row * tile_size
        if self.bottom_up:
            y = self.height - 1 - y
        return y * self.width + tile_col * tile_size

    def flipped(self):
        """Same image in the opposite storage order."""
        rows = self.pixels.reshape(self.height, self.width, 3)[::-1]
        return PixelBuffer(rows.reshape(-1, 3), self.width, self.height, not self.bottom_up)

    def to_array(self):
        rows = self.pixels.reshape(self.height, self.width, 3)
        return rows[::-1] if self.bottom_up else rows


# Reads one tile top to bottom, left to right into RGB bytes.
# row_sign walks the buffer downwards (+1) or upwards (-1) from the origin.
def build_key(pixels, origin, width, tile_size, row_sign=1):
    rows = origin + row_sign * width * np.arange(tile_size)
    indices = rows[:, None] + np.arange(tile_size)
    return pixels[indices].tobytes()


def buffer_key(buffer, origin, tile_size):
    return build_key(buffer.pixels, origin, buffer.width, tile_size, buffer.row_sign)


def validate_tile_size(width, height, tile_size):
    if tile_size < constants.MIN_TILE_SIZE:
        raise InvalidTileSize(tile_size, width, height, f"must be at least {constants.MIN_TILE_SIZE} pixels")
    if width % tile_size or height % tile_size:
        raise InvalidTileSize(tile_size, width, height, "dimensions must be evenly divisible by the tile size")


def iter_tile_origins(buffer, tile_size):
    for tile_row in range(buffer.height // tile_size):
        for tile_col in range(buffer.width // tile_size):
            yield buffer.tile_origin(tile_row, tile_col, tile_size)


class TileDictionary:
    """Sorted canonical keys mapped to single byte codes."""

    def __init__(self, keys, tile_size):
        self.keys = sorted(keys)
        if len(self.keys) > constants.MAX_DICTIONARY_SIZE:
            raise TooManyTiles(len(self.keys))
        self.tile_size = tile_size
        self.codes = {key: code for code, key in enumerate(self.keys)}

    def __len__(self):
        return len(self.keys)

    def __contains__(self, key):
        return key in self.codes

    def lookup(self, key):
        try:
            return self.codes[key]
        except KeyError:
            raise UnknownTile(key) from None

    def items(self):
        return list(enumerate(self.keys))


def build_dictionary(buffer, tile_size):
    keys = set()
    for origin in iter_tile_origins(buffer, tile_size):
        keys.add(buffer_key(buffer, origin, tile_size))
    return TileDictionary(keys, tile_size)
