from __future__ import annotations
import argparse
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .config import PROVIDERS, LANGUAGES, ConfigError, Settings
from .controller import Controller, Phase
from .extractor import SelectedFile


def main(argv=None) -> int:
    ap = argparse.ArgumentParser("doc-distiller")
    ap.add_argument("files", nargs="+", help="Documents to distill (.txt, .md, .pdf, .xlsx)")
    ap.add_argument("-o", "--output", default=None, help="Write the result here instead of stdout")
    ap.add_argument("--provider", choices=sorted(PROVIDERS), default=None,
                    help="LLM provider (defaults to LLM_PROVIDER or gemini)")
    ap.add_argument("--model", default=None, help="Model name override")
    ap.add_argument("--lang", choices=LANGUAGES, default=None, help="Prompt and message language")
    ap.add_argument("--html", action="store_true", help="Write rendered HTML instead of markdown")
    ap.add_argument("-v", "--verbose", action="store_true", help="Echo run logs to stderr")

    args = ap.parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True), override=False)

    try:
        settings = Settings.from_env().with_overrides(
            provider=args.provider, model=args.model, lang=args.lang,
        )
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    missing = [f for f in args.files if not Path(f).is_file()]
    if missing:
        print(f"error: not a file: {', '.join(missing)}", file=sys.stderr)
        return 2

    logger = (lambda m: print(m, file=sys.stderr)) if args.verbose else None
    ctl = Controller(settings, logger=logger)
    ctl.add_files(SelectedFile.from_path(f) for f in args.files)
    skipped = len(args.files) - len(ctl.state.files)
    if skipped:
        print(f"note: skipped {skipped} duplicate file name(s)", file=sys.stderr)

    ctl.process()
    if ctl.state.phase is not Phase.SUCCESS:
        print(ctl.state.error_message, file=sys.stderr)
        return 1

    body = ctl.state.html_result if args.html else ctl.state.markdown_result
    if args.output:
        Path(args.output).write_text(body, encoding="utf-8")
        print(f"wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(body)
        if not body.endswith("\n"):
            sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
