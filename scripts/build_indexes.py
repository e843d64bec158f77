from __future__ import annotations

import argparse
import json
from pathlib import Path

from affiliation_geo.reference import load_reference_data


def build(countries: Path, institutions: Path, out_file: Path) -> dict:
    """Validate the reference lists and write an index audit summary."""
    reference = load_reference_data(countries, institutions)

    institution_collisions = {
        key: sorted({r.country for r in reference.institution_index.get(key)})
        for key in reference.institution_index.multi_country_keys()
    }
    city_collisions = {
        key: sorted({e.country for e in reference.city_index.get(key)})
        for key in reference.city_index.multi_country_keys()
    }
    summary = {
        **reference.summary(),
        "institution_collisions": institution_collisions,
        "city_collisions": city_collisions,
    }

    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate reference data and audit index collisions.")
    parser.add_argument("--countries", default="data/reference/countries.json")
    parser.add_argument("--institutions", default="data/reference/institutions.json")
    parser.add_argument("--out", default="data/reference/index_summary.json")
    args = parser.parse_args()

    summary = build(Path(args.countries), Path(args.institutions), Path(args.out))
    print(
        f"Indexed {summary['institutions']} institutions into {summary['institution_keys']} keys "
        f"({len(summary['institution_collisions'])} multi-country); summary in {args.out}"
    )


if __name__ == "__main__":
    main()
