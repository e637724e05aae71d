# Konami RLE framing
MAX_RUN_LENGTH = 0x7F
LITERAL_BASE = 0x80
LITERAL_FLUSH_LIMIT = 0xFC
MAX_LITERAL_HEADER = 0xFE
END_OF_STREAM = 0xFF

# RLE Constraints
MIN_RUN_LENGTH = 3
LITERAL_FLUSH_SIZE = LITERAL_FLUSH_LIMIT - LITERAL_BASE

# Tiles
MAX_DICTIONARY_SIZE = 256
MIN_TILE_SIZE = 8
DEFAULT_TILE_SIZE = 16

# Output
DEFAULT_OUTPUT_BASE = "out"
TEXT_FILE = "%s-%s.txt"
BINARY_FILE = "%s-%s.bin"
TILE_FILE = "%s-tile%d.bmp"
TILE_SHEET_FILE = "%s-tiles.png"
TOKEN_PREFIX = "$"
TOKEN_SEPARATOR = ", "

HORIZONTAL = "horizontal"
VERTICAL = "vertical"
