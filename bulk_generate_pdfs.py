import argparse
import json
from pathlib import Path

from config import Config
from delivery import LocalSave, deliver
from models import document_from_dict
from pdf_service import export_invoice


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bulk generate invoice PDFs from JSON files.")
    parser.add_argument("--input", type=Path, required=True, help="Directory of invoice *.json files.")
    parser.add_argument("--output", type=str, default="", help="Output directory (default: EXPORTS_DIR).")
    parser.add_argument("--flat", action="store_true", help="Do not group PDFs into per-year folders.")
    parser.add_argument("--invariant", action="store_true", help="Reproducible PDF bytes (no embedded timestamp).")
    args = parser.parse_args(argv)

    if not args.input.is_dir():
        raise SystemExit(f"Input directory not found: {args.input}")

    out_dir = args.output or Config.EXPORTS_DIR
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    destination = LocalSave(directory=out_dir, by_year=not args.flat)

    files = sorted(args.input.glob("*.json"))
    if not files:
        print("No invoice JSON files found.")
        return 0

    total = len(files)
    generated = 0
    failed = 0

    for i, path in enumerate(files, start=1):
        try:
            doc = document_from_dict(json.loads(path.read_text(encoding="utf-8")), Config.TAX_RATE)
            result = export_invoice(doc, invariant=args.invariant)
            saved = deliver(result.artifact, result.file_name, destination)
            generated += 1
            note = f"  ({len(result.overflows)} clipped)" if result.overflows else ""
            print(f"[{i}/{total}] DONE  {path.name} -> {saved}{note}")

        except Exception as e:
            failed += 1
            print(f"[{i}/{total}] FAIL  {path.name}  ({e})")

    print("\n✅ Bulk PDF generation complete.")
    print(f"Generated: {generated}")
    print(f"Failed:    {failed}")
    print(f"Exports:   {out_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
