"""LED matrix glyphs for the Nuimo Control's 9x9 display."""

MATRIX_SIZE = 9
ON_CHARS = "*"
OFF_CHARS = " ."


class GlyphError(ValueError):
    """Raised for glyph rows that cannot be shown on the matrix."""


class Glyph:
    """A 9x9 on/off pixel grid."""

    def __init__(self, pixels):
        self.pixels = pixels

    @classmethod
    def from_rows(cls, rows):
        """Build a glyph from row strings, e.g. ["  *  ", " *** "].

        Accepts a list of strings or one newline-separated string. Glyphs
        smaller than the matrix are centred.
        """
        if isinstance(rows, str):
            rows = rows.split("\n")
        if not isinstance(rows, list) or not all(isinstance(r, str) for r in rows):
            raise GlyphError("rows must be a string or a list of strings")
        if not rows or not any(rows):
            raise GlyphError("glyph is empty")

        height = len(rows)
        width = max(len(r) for r in rows)
        if height > MATRIX_SIZE or width > MATRIX_SIZE:
            raise GlyphError(f"glyph is {width}x{height}, larger than {MATRIX_SIZE}x{MATRIX_SIZE}")

        top = (MATRIX_SIZE - height) // 2
        left = (MATRIX_SIZE - width) // 2
        pixels = [[False] * MATRIX_SIZE for _ in range(MATRIX_SIZE)]
        for y, row in enumerate(rows):
            for x, char in enumerate(row):
                if char in ON_CHARS:
                    pixels[top + y][left + x] = True
                elif char not in OFF_CHARS:
                    raise GlyphError(f"invalid glyph character {char!r}")
        return cls(pixels)

    def to_bytes(self) -> bytes:
        """Pack the 81 pixels row-major, least significant bit first."""
        data = bytearray(11)
        for index, lit in enumerate(p for row in self.pixels for p in row):
            if lit:
                data[index // 8] |= 1 << (index % 8)
        return bytes(data)

    def __str__(self):
        return "\n".join("".join("*" if p else "." for p in row) for row in self.pixels)
