# tools/verify.py
"""Command-line entry point for oracle comparisons.

Usage
-----
$ python -m tools.verify \
      --cfg configs.small  \
      --set epsilon=1e-6 post_op=Relu

The script expects a Python module or file that exposes a top-level ``cfg``
(a ``LayernormConf`` or a list of them).  Dot-list overrides are applied to
every entry.  Exit status is non-zero if any comparison mismatches.
"""
from __future__ import annotations

import argparse
import logging
import sys

from refnorm.config.io import load_py_cfg, apply_dotlist_overrides
from refnorm.harness import run_many

# -----------------------------------------------------------------------------
# 1. CLI parsing
# -----------------------------------------------------------------------------

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="refnorm – host LayerNorm oracle checks")
    p.add_argument(
        "--cfg",
        required=True,
        help="Python file or dotted module path containing a top‑level 'cfg' object.",
    )
    p.add_argument(
        "--set",
        nargs="*",
        default=[],
        metavar="KEY=VAL",
        help="Override fields in every config (dot‑notation).",
    )
    p.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ...")
    return p.parse_args(argv)


# -----------------------------------------------------------------------------
# 2. Main entry
# -----------------------------------------------------------------------------

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    # 2.1 Load + mutate config(s)
    cfg = load_py_cfg(args.cfg)
    cfgs = cfg if isinstance(cfg, (list, tuple)) else [cfg]
    apply_dotlist_overrides(cfgs, args.set)

    # 2.2 Compare
    reports = run_many(cfgs)
    for r in reports:
        print(r.summary())

    n_bad = sum(not r.ok for r in reports)
    print(f"{len(reports) - n_bad}/{len(reports)} configurations passed")
    return 1 if n_bad else 0


if __name__ == "__main__":
    sys.exit(main())
