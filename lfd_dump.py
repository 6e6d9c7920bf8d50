#!/usr/bin/env python3
"""
Print what an LFD container holds.

For every resource we print its tag, name and body length plus a short
codec-specific summary (image box, frame count, palette range, ...), which is
usually enough to tell which file carries which asset.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from lfdreader import (
    Anim,
    Blas,
    DecodeTraceLogger,
    Delt,
    LfdFile,
    Film,
    Font,
    LoadFileError,
    Mask,
    Mtrx,
    Panl,
    Pltt,
    Resource,
    Text,
    log_resource_map,
)
from lfdreader.mesh import MeshResource


def describe_resource(resource: Resource) -> str:
    if isinstance(resource, Delt):
        return f"{resource.width}x{resource.height} at ({resource.left},{resource.top})"
    if isinstance(resource, Anim):
        left, top, right, bottom = resource.bounds
        return f"{len(resource)} frames, box=({left},{top})-({right},{bottom})"
    if isinstance(resource, Pltt):
        return f"colors 0x{resource.start_index:02X}-0x{resource.end_index:02X}, {len(resource.rotators)} rotators"
    if isinstance(resource, Panl):
        width, height = resource.size
        return f"{len(resource)} images, first {width}x{height}"
    if isinstance(resource, Mask):
        return f"{resource.width}x{resource.height} mask"
    if isinstance(resource, Font):
        return f"{len(resource)} glyphs from 0x{resource.start_char:02X}, height {resource.height}"
    if isinstance(resource, Text):
        first = resource[0] if len(resource) else ""
        return f"{len(resource)} strings, first={first[:32]!r}"
    if isinstance(resource, Blas):
        return f"{len(resource.blocks)} sound blocks at {resource.frequency} Hz"
    if isinstance(resource, Film):
        return f"{resource.frames} frames, {len(resource.blocks)} blocks"
    if isinstance(resource, Mtrx):
        return f"{resource.frames} frames ({resource.seconds}s), {resource.objects} objects"
    if isinstance(resource, MeshResource):
        lods = sum(len(component.lods) for component in resource.components)
        return f"{len(resource.components)} components, {lods} LODs"
    return f"{len(resource.raw)} raw bytes"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarise the resources inside an LFD file.")
    parser.add_argument("input", type=Path, help="Path to the .LFD file")
    parser.add_argument("--map-log", type=Path, help="Optional text file receiving the resource map listing")
    parser.add_argument("--trace", type=Path, help="Optional text file receiving one line per decoded resource")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    trace = DecodeTraceLogger(args.trace) if args.trace else None
    try:
        lfd = LfdFile.load(args.input, trace=trace)
    except LoadFileError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1
    finally:
        if trace is not None:
            trace.flush()

    print(f"[+] {args.input} category={lfd.category.value} resources={len(lfd)}")
    if lfd.rmap is not None:
        print(f"[+] map {lfd.rmap.name!r} with {len(lfd.rmap)} entries")
        if args.map_log:
            log_resource_map(lfd.rmap.entries, args.map_log)
            print(f"[+] Map listing written to {args.map_log}")
    for idx, resource in enumerate(lfd):
        print(f"  [{idx:03d}] {resource.tag:<4} {resource.name:<8} len={len(resource.raw):<7} {describe_resource(resource)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
