"""Reference colours for the flag and the colour distance functions.

Deviation is the RGB Euclidean distance normalised by the largest possible
distance (black to white), expressed as a percentage on a 0-100 scale.
"""

import math

Color = tuple[int, int, int]

# Largest possible RGB distance: sqrt(3 * 255^2) ≈ 441.7
MAX_DISTANCE = math.sqrt(3 * 255 * 255)

# Named reference targets
REFERENCE: dict[str, str] = {
    'saffron': '#ff9933',
    'white': '#ffffff',
    'green': '#138808',
    'chakra_blue': '#000080',
}

# Band label -> reference colour name, top to bottom
BAND_COLOURS: dict[str, str] = {
    'top': 'saffron',
    'middle': 'white',
    'bottom': 'green',
}

EMBLEM_COLOUR = 'chakra_blue'

COLOUR_TIPS: dict[str, str] = {
    'saffron': 'Ensure the top band is #FF9933 (vibrant saffron). Avoid faded/reddish tones.',
    'white': 'The middle band should be pure white (#FFFFFF). Avoid gray/off-white shades.',
    'green': 'The bottom band should be deep green (#138808). Avoid yellowish/light greens.',
    'chakra_blue': 'Ashoka Chakra should be navy blue (#000080), not purple or light blue.',
}


def hex_to_rgb(hex_str: str) -> Color:
    """Convert '#rrggbb' or '#rgb' to (r, g, b). Returns (0, 0, 0) on invalid input."""
    h = hex_str.lstrip('#')
    if len(h) == 3:
        h = ''.join(c * 2 for c in h)
    if len(h) != 6:
        return (0, 0, 0)
    try:
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
    except ValueError:
        return (0, 0, 0)


def rgb_to_hex(rgb: Color) -> str:
    r, g, b = rgb
    return f'#{r:02x}{g:02x}{b:02x}'


def reference_rgb(name: str) -> Color:
    """RGB triple of a named reference colour. Raises KeyError for unknown names."""
    return hex_to_rgb(REFERENCE[name])


def rgb_distance(a: Color, b: Color) -> float:
    """Euclidean distance in RGB space. Casts to int to avoid uint8 overflow."""
    return math.sqrt(sum((int(x) - int(y)) ** 2 for x, y in zip(a, b)))


def deviation(a: Color, b: Color) -> float:
    """Normalised distance between two colours as a percentage, one decimal place."""
    return round(rgb_distance(a, b) / MAX_DISTANCE * 100.0, 1)


def chroma(rgb: Color) -> int:
    """Spread between the strongest and weakest channel. Greys and whites are ~0."""
    return max(int(c) for c in rgb) - min(int(c) for c in rgb)
