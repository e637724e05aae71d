import os
import numpy as np
from PIL import Image

import constants
from tiles import PixelBuffer

# Renders each byte as a two digit hex token, e.g. 0x01, 0xA3, 0xFF -> "$01", "$A3", "$FF"
def format_stream(stream):
    return [f"{constants.TOKEN_PREFIX}{byte:02X}" for byte in stream]

def stream_to_line(stream):
    return constants.TOKEN_SEPARATOR.join(format_stream(stream))

def load_bitmap(path):
    img = Image.open(path)
    if img.mode != 'RGB':
        img = img.convert('RGB')
    pixels = np.array(img)
    return PixelBuffer.from_array(pixels)

# Canonical keys are raster ordered RGB triples, so they reshape straight back into a tile
def key_to_array(key, tile_size):
    return np.frombuffer(key, dtype=np.uint8).reshape(tile_size, tile_size, 3)

def key_to_image(key, tile_size):
    return Image.fromarray(key_to_array(key, tile_size).copy(), 'RGB')

def ensure_parent_folder(path):
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
