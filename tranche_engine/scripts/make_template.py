from __future__ import annotations

import argparse
import os

from tranche_engine.excel_writer import PACK_SHEETS, ensure_template


def main(argv=None):
    p = argparse.ArgumentParser(description="Create an empty settlement pack template.")
    p.add_argument("--out", default="settlement_template.xlsx", help="Template path")
    args = p.parse_args(argv)

    if os.path.exists(args.out):
        print(f"{args.out} already exists, left untouched")
        return
    ensure_template(args.out)
    print(f"Created {args.out} with sheets: {', '.join(PACK_SHEETS)}")


if __name__ == "__main__":
    main()
