import unittest
import numpy as np
import tempfile
import contextlib
import io
import os

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from PIL import Image

import main


def save_map(path, grid, tile_size=16):
    rows, cols = len(grid), len(grid[0])
    image = np.zeros((rows * tile_size, cols * tile_size, 3), dtype=np.uint8)
    for r, line in enumerate(grid):
        for c, value in enumerate(line):
            image[r * tile_size:(r + 1) * tile_size, c * tile_size:(c + 1) * tile_size] = value
    Image.fromarray(image, 'RGB').save(path)


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.map_path = os.path.join(self.tmp.name, "map.png")
        self.base = os.path.join(self.tmp.name, "out")

    def tearDown(self):
        self.tmp.cleanup()

    def run_main(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            status = main.main(list(argv))
        return status, stdout.getvalue(), stderr.getvalue()

    def read_lines(self, path):
        with open(path) as f:
            return f.read().splitlines()

    def test_writes_both_axes_and_tiles(self):
        save_map(self.map_path, [[10, 10, 10, 20],
                                 [30, 30, 30, 30]])
        status, out, _ = self.run_main("-m", self.map_path, "-o", self.base, "-t", "16", "--binary", "--sheet")

        self.assertEqual(status, 0)
        self.assertIn("Distinct tiles: 3", out)
        self.assertEqual(self.read_lines(self.base + "-horizontal.txt"), [
            "$03, $00, $81, $01, $FF",
            "$04, $02, $FF",
        ])
        self.assertEqual(self.read_lines(self.base + "-vertical.txt"), [
            "$82, $00, $02, $FF",
            "$82, $00, $02, $FF",
            "$82, $00, $02, $FF",
            "$82, $01, $02, $FF",
        ])
        with open(self.base + "-horizontal.bin", "rb") as f:
            self.assertEqual(f.read(), bytes([0x03, 0x00, 0x81, 0x01, 0xFF, 0x04, 0x02, 0xFF]))

        for code, value in enumerate((10, 20, 30)):
            with Image.open(f"{self.base}-tile{code}.bmp") as tile:
                self.assertEqual(tile.size, (16, 16))
                self.assertEqual(tile.convert('RGB').getpixel((15, 15)), (value, value, value))
        with Image.open(self.base + "-tiles.png") as sheet:
            self.assertEqual(sheet.size, (48, 16))

    def test_single_axis_with_workers(self):
        save_map(self.map_path, [[10, 20], [10, 20], [10, 20]])
        status, out, _ = self.run_main("-m", self.map_path, "-o", self.base, "-a", "vertical", "-w", "2", "--no-tiles")

        self.assertEqual(status, 0)
        self.assertIn("using 2 workers", out)
        self.assertFalse(os.path.exists(self.base + "-horizontal.txt"))
        self.assertFalse(os.path.exists(self.base + "-tile0.bmp"))
        self.assertEqual(self.read_lines(self.base + "-vertical.txt"), [
            "$03, $00, $FF",
            "$03, $01, $FF",
        ])

    def test_default_tile_size_must_divide_image(self):
        save_map(self.map_path, [[10, 20]], tile_size=12)
        status, _, err = self.run_main("-m", self.map_path, "-o", self.base)
        self.assertEqual(status, 1)
        self.assertIn("evenly divisible", err)

    def test_tile_size_minimum(self):
        save_map(self.map_path, [[10, 20]])
        status, _, err = self.run_main("-m", self.map_path, "-t", "4", "-o", self.base)
        self.assertEqual(status, 1)
        self.assertIn("at least 8", err)

    def test_missing_map(self):
        status, _, err = self.run_main("-m", os.path.join(self.tmp.name, "nope.bmp"), "-o", self.base)
        self.assertEqual(status, 1)
        self.assertIn("Bitmap not found", err)

    def test_too_many_tiles(self):
        save_map(self.map_path, [[i for i in range(256)] + [0]], tile_size=8)
        image = Image.open(self.map_path).convert('RGB')
        image.putpixel((256 * 8, 0), (0, 1, 0))
        image.save(self.map_path)

        status, _, err = self.run_main("-m", self.map_path, "-t", "8", "-o", self.base)
        self.assertEqual(status, 1)
        self.assertIn("Too many metatiles", err)
        self.assertFalse(os.path.exists(self.base + "-horizontal.txt"))


if __name__ == "__main__":
    unittest.main()
