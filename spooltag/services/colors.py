"""Filament color derivation: hex strings, dual-color tags and display names."""

BASIC_COLOR_NAMES = {
    "#000000": "Black",
    "#FFFFFF": "White",
    "#FF0000": "Red",
    "#00FF00": "Green",
    "#0000FF": "Blue",
    "#FFFF00": "Yellow",
    "#FF00FF": "Magenta",
    "#00FFFF": "Cyan",
}

# A channel must beat both others by this much to name the color after it
DOMINANCE_MARGIN = 64

_CHANNEL_NAMES = ("Reddish", "Greenish", "Bluish")


def rgba_to_hex(rgba: bytes) -> str:
    """#RRGGBB from the first three bytes; alpha is dropped."""
    if len(rgba) < 3:
        return "#000000"
    return "#{:02X}{:02X}{:02X}".format(rgba[0], rgba[1], rgba[2])


def abgr_to_hex(abgr: bytes) -> str:
    """Second-color bytes are stored A, B, G, R."""
    return rgba_to_hex(bytes(reversed(abgr[:4])))


def combine_colors(primary_rgba: bytes, second_abgr: bytes, color_count: int) -> tuple[str, str, str | None]:
    """Return (display color, primary hex, secondary hex or None)."""
    primary = rgba_to_hex(primary_rgba)
    if color_count != 2:
        return primary, primary, None
    secondary = abgr_to_hex(second_abgr)
    return f"{primary} / {secondary}", primary, secondary


def color_name(hex_color: str) -> str:
    hex_color = hex_color.upper()
    name = BASIC_COLOR_NAMES.get(hex_color)
    if name:
        return name

    try:
        channels = [int(hex_color[i : i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return hex_color

    strongest = max(range(3), key=lambda i: channels[i])
    others = [c for i, c in enumerate(channels) if i != strongest]
    if all(channels[strongest] - c >= DOMINANCE_MARGIN for c in others):
        return _CHANNEL_NAMES[strongest]
    return hex_color
