import argparse
import os
import sys
from multiprocessing import cpu_count

import constants
import utils
from konami_rle import encode_axis, stream_total
from tiles import TileMapError, build_dictionary, validate_tile_size
from tilesheet import write_tile_bitmaps, write_tile_sheet

'''
Workflow:
1. Load the map bitmap and check the tile size against its dimensions
2. Collect the distinct tiles into a dictionary of at most 256 codes
3. RLE encode every horizontal and/or vertical strip of tiles
4. Write the encoded strips and the tile bitmaps for the dictionary
'''

AXIS_CHOICES = {
    "horizontal": (constants.HORIZONTAL,),
    "vertical": (constants.VERTICAL,),
    "both": (constants.HORIZONTAL, constants.VERTICAL),
}

def build_parser():
    parser = argparse.ArgumentParser(
        prog="konami-rle",
        description="Utility to RLE encode a bitmap using the Konami algorithm")
    parser.add_argument("-m", "--map", required=True,
                        help="Map to parse and encode")
    parser.add_argument("-o", "--output", default=constants.DEFAULT_OUTPUT_BASE,
                        help="Base name for output files (default: %(default)s)")
    parser.add_argument("-t", "--tile-size", type=int, default=constants.DEFAULT_TILE_SIZE,
                        help="Size of tiles to RLE encode (default: %(default)s)")
    parser.add_argument("-a", "--axis", choices=sorted(AXIS_CHOICES), default="both",
                        help="Strips to encode (default: %(default)s)")
    parser.add_argument("-w", "--workers", type=int, default=None,
                        help="Encode strips on this many threads, 0 for one per CPU (default: sequential)")
    parser.add_argument("--binary", action="store_true",
                        help="Also write the raw streams to <output>-<axis>.bin")
    parser.add_argument("--no-tiles", action="store_true",
                        help="Do not write a bitmap for each tile")
    parser.add_argument("--sheet", action="store_true",
                        help="Write all tiles to <output>-tiles.png")
    return parser

def write_text_output(streams, output_path):
    utils.ensure_parent_folder(output_path)
    with open(output_path, 'w') as output:
        for stream in streams:
            output.write(utils.stream_to_line(stream) + "\n")

def write_binary_output(streams, output_path):
    utils.ensure_parent_folder(output_path)
    with open(output_path, 'wb') as binary_file:
        for stream in streams:
            binary_file.write(stream)

def resolve_workers(workers):
    if workers is None:
        return None
    if workers == 0:
        return cpu_count()
    return workers

def run(args):
    if not os.path.isfile(args.map):
        raise FileNotFoundError(f"Bitmap not found: {args.map}")

    buffer = utils.load_bitmap(args.map)
    tile_size = args.tile_size
    validate_tile_size(buffer.width, buffer.height, tile_size)

    tiles_across = buffer.width // tile_size
    tiles_down = buffer.height // tile_size
    print(f"Map: {args.map} ({buffer.width}x{buffer.height}), {tiles_across}x{tiles_down} tiles of {tile_size}px")

    dictionary = build_dictionary(buffer, tile_size)
    print(f"Distinct tiles: {len(dictionary)}")

    max_workers = resolve_workers(args.workers)
    written = []
    for axis_name in AXIS_CHOICES[args.axis]:
        strip_count = tiles_down if axis_name == constants.HORIZONTAL else tiles_across
        if max_workers:
            print(f"Encoding {strip_count} {axis_name} strips using {max_workers} workers...")
        else:
            print(f"Encoding {strip_count} {axis_name} strips...")

        streams = encode_axis(buffer, tile_size, dictionary, axis_name, max_workers)
        print(f"Total {axis_name} size: {stream_total(streams)} bytes")

        text_path = constants.TEXT_FILE % (args.output, axis_name)
        write_text_output(streams, text_path)
        written.append(text_path)

        if args.binary:
            binary_path = constants.BINARY_FILE % (args.output, axis_name)
            write_binary_output(streams, binary_path)
            written.append(binary_path)

    if not args.no_tiles:
        written.extend(write_tile_bitmaps(dictionary, args.output))

    if args.sheet:
        written.append(write_tile_sheet(dictionary, args.output))

    print(f"Wrote {len(written)} files with base name {args.output}")
    return written

def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except (TileMapError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
