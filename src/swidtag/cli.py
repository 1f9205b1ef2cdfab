#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Command line entry for SWID tag conversion.

Commands:
  - convert: load a tag (XML, JSON-LD or HTML links; file or http(s) URL) and write XML or JSON-LD
  - inspect: print a short summary of a tag
  - applicable: check a tag's media expression against KEY=VALUE pairs

Notes:
  - Options come from configs/default.yaml (or --config) and are overridden by flags.
  - Status lines go to stderr prefixed with [cli]; converted documents go to stdout or -o.
  - Return codes: 0 ok, 1 load failed, 2 usage/config error, 3 output exists, 4 not applicable.
"""

from __future__ import annotations

import argparse
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests

from . import html_scraper, jsonld_codec, xml_codec
from .config import OUTPUT_FORMATS, load_config, resolve_options
from .context_loader import ContextLoader
from .document import SwidTag
from .errors import LoadErrorKind, LoadResult, SwidTagError
from .vocabulary import Attributes

INPUT_FORMATS = ("xml", "json", "html")

EXTENSIONS = {
    ".xml": "xml",
    ".swidtag": "xml",
    ".json": "json",
    ".jsonld": "json",
    ".html": "html",
    ".htm": "html",
}

RC_OK, RC_LOAD, RC_USAGE, RC_EXISTS, RC_NOT_APPLICABLE = 0, 1, 2, 3, 4

UTF8_BOM = b"\xef\xbb\xbf"


def _err(msg: str) -> None:
    sys.stderr.write(f"[cli] {msg}\n")


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_source(source: str, timeout: int) -> Tuple[bytes, Optional[str], str]:
    """Return (raw bytes, content type, final location) for a path or URL.

    Bytes are handed to the codecs as they are so that lxml, json and bs4 pick
    the encoding from the BOM, the XML declaration or the meta charset.
    """
    if _is_url(source):
        r = requests.get(source, timeout=timeout)
        r.raise_for_status()
        return r.content, r.headers.get("Content-Type"), r.url or source
    return Path(source).read_bytes(), None, source


def _detect_format(source: str, data: bytes, content_type: Optional[str]) -> str:
    ext = Path(source.split("?", 1)[0]).suffix.lower()
    if ext in EXTENSIONS:
        return EXTENSIONS[ext]
    ct = (content_type or "").lower()
    if "html" in ct:
        return "html"
    if "json" in ct:
        return "json"
    if "xml" in ct:
        return "xml"
    head = data.lstrip().lstrip(UTF8_BOM)[:200].lower()
    if head.startswith(b"{"):
        return "json"
    if head.startswith(b"<!doctype html") or re.match(rb"^<html[\s>]", head):
        return "html"
    return "xml"


def _context_loader(opts: Dict) -> ContextLoader:
    return ContextLoader(allow_remote=bool(opts["allow_remote_contexts"]), timeout=int(opts["timeout"]))


def _load(source: str, from_format: Optional[str], opts: Dict) -> LoadResult:
    try:
        data, content_type, location = _read_source(source, int(opts["timeout"]))
    except (OSError, requests.RequestException) as e:
        return LoadResult.failure(LoadErrorKind.FETCH_FAILURE, str(e), source)

    fmt = from_format or _detect_format(source, data, content_type)
    if fmt == "json":
        return jsonld_codec.load(data, loader=_context_loader(opts))
    if fmt == "html":
        return html_scraper.load(data, base_url=location if _is_url(location) else None)
    return xml_codec.load(data)


def _load_or_report(args: argparse.Namespace, opts: Dict) -> Optional[SwidTag]:
    try:
        result = _load(args.input, getattr(args, "from_format", None), opts)
    except SwidTagError as e:
        _err(f"ERROR: cannot load {args.input}: {e}")
        return None
    if not opts["quiet"]:
        for diag in result.diagnostics:
            _err(f"WARN: {diag}")
    if not result.ok:
        _err(f"ERROR: cannot load {args.input}: {result.error}")
        return None
    return result.document


def _safe_name(tag: SwidTag) -> str:
    base = tag.tag_id or tag.name or "swidtag"
    return re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("_") or "swidtag"


def _default_output_path(tag: SwidTag, out_dir: Path, fmt: str) -> Path:
    date = datetime.now().strftime("%Y%m%d")
    out_dir.mkdir(parents=True, exist_ok=True)
    suffix = "swidtag.json" if fmt == "json" else "swidtag"
    return out_dir / f"{_safe_name(tag)}_{date}.{suffix}"


def _options(args: argparse.Namespace) -> Optional[Dict]:
    cfg_path = Path(args.config) if args.config else None
    if cfg_path is not None and not cfg_path.exists():
        _err(f"ERROR: config file not found: {cfg_path}")
        return None
    cfg = load_config(cfg_path)
    return resolve_options(
        cfg,
        output_format=getattr(args, "format", None),
        output_dir=getattr(args, "output_dir", None),
        overwrite=True if getattr(args, "overwrite", False) else None,
        timeout=args.timeout,
        quiet=True if args.quiet else None,
    )


def cmd_convert(args: argparse.Namespace) -> int:
    opts = _options(args)
    if opts is None:
        return RC_USAGE
    if opts["output_format"] not in OUTPUT_FORMATS:
        _err(f"ERROR: unknown output format: {opts['output_format']}")
        return RC_USAGE

    tag = _load_or_report(args, opts)
    if tag is None:
        return RC_LOAD

    if opts["output_format"] == "json":
        rendered = tag.to_json(loader=_context_loader(opts))
    else:
        rendered = tag.to_xml()

    out_path: Optional[Path] = Path(args.out) if args.out else None
    if out_path is None and opts.get("output_dir"):
        out_path = _default_output_path(tag, Path(opts["output_dir"]), opts["output_format"])
    if out_path is None:
        sys.stdout.write(rendered + "\n")
        return RC_OK

    # If output exists and not overwrite -> abort early
    if out_path.exists() and not opts["overwrite"]:
        _err(f"Output already exists, use --overwrite to replace: {out_path}")
        return RC_EXISTS
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(rendered + "\n", encoding="utf-8")
    if not opts["quiet"]:
        print(f"[OK] {opts['output_format'].upper()} saved to: {out_path}")
    return RC_OK


def _summary(tag: SwidTag) -> List[str]:
    lines = [
        f"name:           {tag.name or '-'}",
        f"version:        {tag.version or '-'} ({tag.version_scheme or 'unknown scheme'})",
        f"tagId:          {tag.tag_id or '-'}",
    ]
    flags = [label for label, value in (("corpus", tag.is_corpus), ("patch", tag.is_patch),
                                        ("supplemental", tag.is_supplemental)) if value]
    if flags:
        lines.append(f"flags:          {', '.join(flags)}")
    if tag.media:
        lines.append(f"media:          {tag.media}")
    for entity in tag.entities:
        lines.append(f"entity:         {entity.name or '-'} [{', '.join(entity.roles)}]")
    for meta in tag.meta:
        for name, value in meta.attributes.items():
            lines.append(f"meta:           {name} = {value}")
    for link in tag.links:
        extra = [f"{n}={v}" for n, v in link.attributes.items()
                 if n not in (Attributes.HRef, Attributes.Relationship)]
        lines.append(f"link:           {link.relationship or '-'} -> {link.href}"
                     + (f" ({', '.join(extra)})" if extra else ""))
    for label, collection in (("payload", tag.payload), ("evidence", tag.evidence)):
        if collection is not None:
            lines.append(f"{label}:{' ' * (15 - len(label))}{len(collection.directories)} dirs, "
                         f"{len(collection.files)} files, {len(collection.processes)} processes, "
                         f"{len(collection.resources)} resources")
    return lines


def cmd_inspect(args: argparse.Namespace) -> int:
    opts = _options(args)
    if opts is None:
        return RC_USAGE
    tag = _load_or_report(args, opts)
    if tag is None:
        return RC_LOAD
    sys.stdout.write("\n".join(_summary(tag)) + "\n")
    return RC_OK


def _parse_env(pairs: List[str]) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected KEY=VALUE, got {pair!r}")
        env[key.strip()] = value.strip()
    return env


def cmd_applicable(args: argparse.Namespace) -> int:
    opts = _options(args)
    if opts is None:
        return RC_USAGE
    try:
        env = _parse_env(args.env) if args.env else dict(opts.get("environment") or {})
    except ValueError as e:
        _err(f"ERROR: {e}")
        return RC_USAGE

    tag = _load_or_report(args, opts)
    if tag is None:
        return RC_LOAD
    applicable = tag.is_applicable(env)
    if not opts["quiet"]:
        verdict = "applicable" if applicable else "not applicable"
        sys.stdout.write(f"{verdict}: media={tag.media or '(none)'}\n")
    return RC_OK if applicable else RC_NOT_APPLICABLE


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="swidtag", description="Convert and inspect SWID tags (ISO/IEC 19770-2)")
    sub = p.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input", help="Tag file path or http(s) URL")
    common.add_argument("--from", dest="from_format", choices=INPUT_FORMATS,
                        help="Input format (default: guessed from extension/content)")
    common.add_argument("--config", help="Config file (default: configs/default.yaml, ignored if missing)")
    common.add_argument("--timeout", type=int, help="HTTP timeout in seconds")
    common.add_argument("-q", "--quiet", action="store_true", help="Less verbose output")

    pc = sub.add_parser("convert", parents=[common], help="Convert a tag to XML or JSON-LD")
    pc.add_argument("-f", "--format", choices=OUTPUT_FORMATS, help="Output format (default: xml)")
    pc.add_argument("-o", "--out", help="Output file; default is stdout, or <output_dir>/<name>_<YYYYMMDD>.swidtag")
    pc.add_argument("--output-dir", help="Directory for generated file names when -o is not given")
    pc.add_argument("--overwrite", action="store_true", help="Replace the output file if it exists")
    pc.set_defaults(func=cmd_convert)

    pi = sub.add_parser("inspect", parents=[common], help="Print a summary of a tag")
    pi.set_defaults(func=cmd_inspect)

    pa = sub.add_parser("applicable", parents=[common], help="Check the tag's media expression")
    pa.add_argument("-e", "--env", action="append", metavar="KEY=VALUE",
                    help="Environment entry (repeatable); default: 'environment' from config")
    pa.set_defaults(func=cmd_applicable)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    rc = args.func(args)
    sys.exit(rc)


if __name__ == "__main__":
    main()
