import csv
import io
from pathlib import Path
from typing import Any, Iterable, List, Optional

from devhub.client.config import client_settings
from devhub.schemas.compound import CompoundRead

CSV_FILENAME = "compounds.csv"
CSV_COLUMNS = ("name", "formula", "pKa", "energy_eV", "geometry", "is_superbase", "synthesis_notes")


def format_value(value: Any) -> str:
    """Render a cell; missing values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compound_row(compound: CompoundRead) -> List[str]:
    properties = compound.properties or {}
    return [
        format_value(compound.name),
        format_value(compound.formula),
        format_value(properties.get("pKa")),
        format_value(properties.get("energy_eV")),
        format_value(properties.get("geometry")),
        format_value(properties.get("is_superbase")),
        format_value(compound.synthesis_notes),
    ]


def compounds_to_csv(compounds: Iterable[CompoundRead]) -> str:
    """Header row, then one fully quoted row per compound."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_COLUMNS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for compound in compounds:
        writer.writerow(compound_row(compound))
    return buffer.getvalue()


def export_csv(compounds: Iterable[CompoundRead], directory: Optional[Path] = None) -> Path:
    """Write the displayed compounds to compounds.csv and return its path."""
    directory = Path(directory or client_settings.download_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / CSV_FILENAME
    path.write_text(compounds_to_csv(compounds), encoding="utf-8")
    return path
