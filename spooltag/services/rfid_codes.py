"""Display names for the product codes in block 1.

Block 1 carries a material id (``GFA00``) and a variant id made of a series
code and a color code (``A00-A0``). Only the names live here; the color
value itself comes from block 5.
"""

MATERIAL_NAMES = {
    # PLA
    "GFA00": "PLA Basic",
    "GFA01": "PLA Basic",
    "GFA02": "PLA Basic",
    "GFA05": "PLA Basic",
    "GFA06": "PLA Basic",
    "GFA07": "PLA Basic",
    "GFA08": "PLA Basic",
    "GFA09": "PLA Basic",
    "GFA11": "PLA Basic",
    "GFA12": "PLA Basic",
    "GFA15": "PLA Basic",
    "GFA16": "PLA Basic",
    "GFA18": "PLA Basic",
    "GFA50": "PLA-CF",
    # ABS / ASA
    "GFB00": "ABS",
    "GFB01": "ASA",
    "GFB02": "ASA Aero",
    "GFB50": "ABS-GF",
    # PC
    "GFC00": "PC",
    # PETG
    "GFG00": "PETG",
    "GFG01": "PETG",
    "GFG02": "PETG",
    "GFG50": "PETG-CF",
    # Nylon
    "GFN04": "PA-CF",
    "GFN08": "PA-GF",
    # Support
    "GFS00": "PLA-S",
    "GFS02": "PLA-S",
    "GFS04": "PVA",
    "GFS05": "PLA-S",
    "GFS06": "ABS-S",
    # TPU
    "GFU02": "TPU-AMS",
}

SERIES_NAMES = {
    "A00": "PLA Standard A00",
    "A01": "PLA Standard A01",
    "A02": "PLA Standard A02",
    "A05": "PLA Standard A05",
    "A06": "PLA Standard A06",
    "A07": "PLA Standard A07",
    "A08": "PLA Standard A08",
    "A09": "PLA Standard A09",
    "A11": "PLA Standard A11",
    "A12": "PLA Standard A12",
    "A15": "PLA Standard A15",
    "A16": "PLA Standard A16",
    "A18": "PLA Standard A18",
    "A50": "PLA Carbon Fiber A50",
    "B00": "ABS Standard B00",
    "B01": "ASA Standard B01",
    "B02": "ASA Aero B02",
    "B50": "ABS Glass Fiber B50",
    "C00": "PC Standard C00",
    "G00": "PETG Standard G00",
    "G01": "PETG Standard G01",
    "G02": "PETG Standard G02",
    "G50": "PETG Carbon Fiber G50",
    "N04": "PA Carbon Fiber N04",
    "N08": "PA Glass Fiber N08",
    "S00": "Support S00",
    "S02": "Support S02",
    "S04": "PVA Support S04",
    "S05": "Support S05",
    "S06": "ABS Support S06",
    "U02": "TPU Flexible U02",
}


def _family(prefix: str, name: str, digits: str) -> dict[str, str]:
    return {f"{prefix}{d}": name for d in digits}


COLOR_CODE_NAMES = {
    **_family("A", "Orange", "012"),
    **_family("B", "Blue", "0123456789"),
    "B4": "Azure",
    "C0": "Black",
    **_family("D", "Grey", "02345"),
    "D1": "Silver",
    **_family("G", "Green", "012367"),
    **_family("K", "Black", "012"),
    "M0": "Mint",
    "M1": "Pink",
    "M2": "Blue",
    "M3": "Pink",
    "M4": "Green",
    "M5": "Blue",
    "M6": "Orange",
    "M7": "Pink",
    "M8": "Orange",
    **_family("N", "Brown", "0123"),
    "P0": "Pink",
    "P1": "Pink",
    "P2": "Purple",
    "P3": "Pink",
    "P4": "Purple",
    "P5": "Purple",
    "P6": "Pink",
    "P7": "Purple",
    **_family("R", "Red", "012345"),
    "T1": "Orange",
    "T2": "Blue",
    "T3": "Blue",
    "T4": "Blue",
    "T5": "Black",
    **_family("W", "White", "0123"),
    **_family("Y", "Yellow", "01234"),
}

# Materials that name some color codes differently from the shared table
MATERIAL_COLOR_OVERRIDES = {
    "GFB00": {
        "B4": "Azure",
        "B6": "Navy Blue",
        "G6": "Bambu Green",
        "G7": "Olive",
        "Y1": "Tangerine Yellow",
    },
    "GFC00": {"K0": "Clear Black", "W0": "Transparent"},
    "GFG50": {"P7": "Violet Purple"},
    "GFS04": {"Y0": "Clear"},
}


def split_variant_id(variant_id: str) -> tuple[str, str]:
    """``"A00-K0"`` -> ``("A00", "K0")``. Missing parts come back empty."""
    series, _, color = variant_id.strip().partition("-")
    return series, color


def material_name(material_id: str) -> str | None:
    if not material_id:
        return None
    return MATERIAL_NAMES.get(material_id, f"Unknown Material ({material_id})")


def series_name(series_code: str) -> str | None:
    if not series_code:
        return None
    return SERIES_NAMES.get(series_code, f"Unknown Series ({series_code})")


def color_code_name(color_code: str, material_id: str = "") -> str | None:
    if not color_code:
        return None
    override = MATERIAL_COLOR_OVERRIDES.get(material_id, {}).get(color_code)
    if override:
        return override
    return COLOR_CODE_NAMES.get(color_code, f"Unknown Colour ({color_code})")
