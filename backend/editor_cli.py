#!/usr/bin/env python3
"""
Command line tools for 2DA and TLK text files

    reformat <2da> [-o out] [--lenient]     re-align a 2DA file
    check <2da>                             report problems in a 2DA file
    tlk-text-to-json <txt> <json>           convert a TLK text table to converter JSON
    tlk-json-to-text <json> <txt>           convert converter JSON to a TLK text table
"""

import argparse
from pathlib import Path
from typing import List, Optional

from loguru import logger

from config.logging_config import configure_logging
from parsers.tda import TDAFormatError, TDAParser, looks_like_2da
from parsers.tlk_json import TLKJsonError
from services.tda_session import TDAEditSession
from services.tlk_session import TLKEditSession
from services.tlk_tool import TLKToolError


def reformat(args) -> int:
    strict = False if args.lenient else None
    session = TDAEditSession(strict_header=strict)
    session.open(args.file)
    target = session.save(args.output or args.file)
    print(f"Wrote {target}")
    return 0


def check(args) -> int:
    path = Path(args.file)
    text = path.read_text(encoding='utf-8-sig')
    if not looks_like_2da(text):
        print(f"{path.name}: not a 2DA file")
        return 1

    warnings: List[str] = []
    document = TDAParser(log=warnings.append, strict_header=True).parse(text)
    for warning in warnings:
        print(f"{path.name}: {warning}")
    print(f"{path.name}: {len(document.columns)} columns, {document.row_count} rows, {len(warnings)} warning(s)")
    return 0


def tlk_text_to_json(args) -> int:
    session = TLKEditSession()
    if args.json_root:
        session.load_json(Path(args.json_root).read_text(encoding='utf-8-sig'))
    session.load_text(Path(args.input).read_text(encoding='utf-8-sig'))

    Path(args.output).write_text(session.to_json(), encoding='utf-8')
    print(f"Wrote {len(session.entries)} entries to {args.output}")
    return 0


def tlk_json_to_text(args) -> int:
    session = TLKEditSession()
    session.load_json(Path(args.input).read_text(encoding='utf-8-sig'))

    with open(args.output, 'w', encoding='utf-8', newline='\n') as f:
        f.write(session.to_text(use_base_indices=args.base_indices))
    print(f"Wrote {len(session.entries)} entries to {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='NWN 2DA and TLK text tools')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('reformat', help='Re-align a 2DA file')
    p.add_argument('file', help='2DA file')
    p.add_argument('-o', '--output', help='Write here instead of overwriting the input')
    p.add_argument('--lenient', action='store_true', help='Accept files whose first line is not a 2DA version line (it is replaced on save)')
    p.set_defaults(handler=reformat)

    p = subparsers.add_parser('check', help='Report problems in a 2DA file')
    p.add_argument('file', help='2DA file')
    p.set_defaults(handler=check)

    p = subparsers.add_parser('tlk-text-to-json', help='Convert a TLK text table to JSON')
    p.add_argument('input', help='TLK text file')
    p.add_argument('output', help='JSON file to write')
    p.add_argument('--json-root', help='Existing converter JSON whose extra fields are kept')
    p.set_defaults(handler=tlk_text_to_json)

    p = subparsers.add_parser('tlk-json-to-text', help='Convert TLK JSON to a text table')
    p.add_argument('input', help='JSON file')
    p.add_argument('output', help='TLK text file to write')
    p.add_argument('--base-indices', action='store_true', help='Write raw ids instead of module ids')
    p.set_defaults(handler=tlk_json_to_text)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        return args.handler(args)
    except (TDAFormatError, TLKJsonError, TLKToolError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
