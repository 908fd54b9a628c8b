"""
SIRE Command Line Interface (CLI)
=================================

This file provides the interactive terminal program you run like:

    python -m sire.cli --data "path/to/repdata_data_StormData.csv.bz2"

It demonstrates:
- Argument parsing (argparse)
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to engine methods (rank, threshold, export, report)

Commands can also be passed up front, which is handy for scripts:

    python -m sire.cli --data storm.csv.bz2 -c "rank health" -c "rank economic"

The CLI DOES NOT modify your dataset file.
"""

from __future__ import annotations
import argparse, logging, os, shlex
from typing import List, Optional
from .loader import load_storm_data
from .engine import SIRE, ANALYSES, get_analysis

HELP = """
SIRE commands
-------------

1) View / Inspect
   help
   stats
   categories [prefix]              (example: categories TORN)
   show <analysis>                  (example: show health)

2) Ranking
   rank <analysis> [n]              (example: rank health 5)
   threshold <n>                    (example: threshold 20)
     sets the minimum events per type for the next rank commands

3) Export (ranked rows of an analysis)
   export csv <analysis> "<out.csv>"
   export json <analysis> "<out.json>"

4) Report (DOCX, every analysis ranked so far)
   report "<out.docx>"

5) Exit
   quit

Analyses: health (fatalities + injuries), economic (property + crop damage)
"""


class Session:
    """CLI session: the engine plus settings changed by commands."""

    def __init__(self, engine: SIRE, min_count: Optional[int] = None) -> None:
        self.engine = engine
        self.min_count = min_count


def __make_citation(engine: SIRE):
    from .report import DatasetCitation
    p = engine.dataset_path
    return DatasetCitation(file_name=os.path.basename(p) if p else None)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sire", description="Rank storm event types by health and economic impact.")
    ap.add_argument("--data", required=True, help="Path to the storm database export (.csv, .csv.bz2 or .xlsx)")
    ap.add_argument("--min-count", type=int, default=None, help="Minimum events per type (default: 10)")
    ap.add_argument("-c", "--command", action="append", default=[], help="Run a command and exit (repeatable)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Show progress logging")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the SIRE CLI.

    1) Load dataset
    2) Run the given commands, or start an interactive REPL
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Loading dataset...")
    events = load_storm_data(args.data)
    engine = SIRE(events=events, dataset_path=args.data)
    session = Session(engine, min_count=args.min_count)
    print(f"Loaded {len(events)} events.")

    if args.command:
        for line in args.command:
            _run(session, line)
        return

    print("Type 'help' for commands.")
    while True:
        try:
            line = input("sire> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            break
        _run(session, line)


def _run(session: Session, line: str) -> None:
    if not line.strip():
        return
    # Keep a lightweight log of commands for the report (reproducibility).
    cmd0 = line.split()[0].lower()
    if cmd0 not in ("help", "show", "categories", "stats", "quit"):
        session.engine.command_log.append(line)
    try:
        handle(session, line)
    except Exception as e:
        print(f"Error: {e}")


def handle(session: Session, line: str) -> None:
    """Handle one CLI command line."""
    engine = session.engine
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        print(f"Events: {len(engine.events)} | Event types: {len(engine.categories())}")
        mc = session.min_count if session.min_count is not None else "default"
        print(f"Minimum events per type: {mc}")
        print(f"Analyses run: {', '.join(engine.results) or 'none'}")
        return

    if cmd == "categories":
        prefix = parts[1] if len(parts) >= 2 else ""
        vals = sorted(engine.categories())
        if prefix:
            p = prefix.lower()
            vals = [v for v in vals if v.lower().startswith(p)]
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "threshold":
        if len(parts) < 2:
            raise ValueError("usage: threshold <n>")
        session.min_count = int(parts[1])
        print(f"Minimum events per type set to {session.min_count}.")
        return

    if cmd == "rank":
        if len(parts) < 2:
            raise ValueError(f"usage: rank <{'|'.join(ANALYSES)}> [n]")
        analysis = get_analysis(parts[1])
        top_n = int(parts[2]) if len(parts) >= 3 else None
        res = engine.analyze(analysis, min_count=session.min_count, top_n=top_n)
        print(f"{analysis.name}: {len(res.filtered)} of {len(res.aggregated)} event types ranked "
              f"(min {res.analysis.min_count} events). Worst {len(res.top)}:")
        _print_rows(res.top)
        return

    if cmd == "show":
        if len(parts) < 2:
            raise ValueError("usage: show <analysis>")
        res = engine.result(parts[1])
        _print_rows(res.top)
        return

    if cmd == "export":
        # export <csv|json> <analysis> "<path>"
        if len(parts) < 4:
            print('Usage: export csv health "out.csv"  OR  export json economic "out.json"')
            return
        fmt, name, out_path = parts[1].lower(), parts[2], parts[3]
        if fmt == "csv":
            engine.export_csv(out_path, name)
        elif fmt == "json":
            engine.export_json(out_path, name)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        if len(parts) < 2:
            raise ValueError('usage: report "<out.docx>"')
        cfg = ReportConfig(citation=__make_citation(engine), command_log=engine.command_log)
        generate_docx_report(list(engine.results.values()), parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


def _print_rows(rows) -> None:
    for i, r in enumerate(rows, start=1):
        ranks = " ".join(f"{k}={v}" for k, v in r.scores.items())
        print(f"{i}. {r.category} | events={r.count} | {ranks} | composite={r.composite_score}")


if __name__ == "__main__":
    main()
