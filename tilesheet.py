from PIL import Image

import constants
import utils

def write_tile_bitmaps(dictionary, output_base):
    """
    Saves one 24-bit bitmap per dictionary entry, named by its code.
    Returns the list of written paths in code order.
    """
    paths = []
    for code, key in dictionary.items():
        path = constants.TILE_FILE % (output_base, code)
        utils.ensure_parent_folder(path)
        utils.key_to_image(key, dictionary.tile_size).save(path, format="BMP")
        paths.append(path)
    return paths

def append_tiles_horizontally(dictionary, columns=16):
    """
    Lays the dictionary tiles out in code order, `columns` tiles per row
    (tile_size*columns x tile_size*rows).
    """
    tile_size = dictionary.tile_size
    count = len(dictionary)
    columns = max(1, min(columns, count))
    rows = (count + columns - 1) // columns

    # Create new blank image
    result = Image.new('RGB', (columns * tile_size, max(rows, 1) * tile_size))

    # Paste each tile into its cell
    for code, key in dictionary.items():
        x = (code % columns) * tile_size
        y = (code // columns) * tile_size
        result.paste(utils.key_to_image(key, tile_size), (x, y))

    return result

def write_tile_sheet(dictionary, output_base, columns=16):
    output_path = constants.TILE_SHEET_FILE % output_base
    utils.ensure_parent_folder(output_path)
    append_tiles_horizontally(dictionary, columns).save(output_path)
    return output_path
