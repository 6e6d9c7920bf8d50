#!/usr/bin/env python3
"""
Export every resource of an LFD file to plain files.

Images are rendered with the file's own palettes layered over any palettes
given with ``--palette`` (cockpits and most DELTs only carry a partial range,
the rest comes from a shared palette file).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from lfdreader import Anim, Blas, Delt, Font, LfdFile, LoadFileError, Mask, Panl, Pltt, Resource, Text, compose_palettes
from lfdreader.text import ENCODING


def _stem(index: int, resource: Resource) -> str:
    name = resource.name or "unnamed"
    return f"{index:03d}_{name}.{resource.tag.strip(chr(0)).lower()}"


def export_resource(resource: Resource, index: int, palette, outdir: Path) -> List[Path]:
    stem = _stem(index, resource)
    written: List[Path] = []
    if isinstance(resource, Delt):
        target = outdir / f"{stem}.png"
        resource.to_image(palette).save(target)
        written.append(target)
    elif isinstance(resource, Anim):
        for frame_idx, frame in enumerate(resource):
            target = outdir / f"{stem}_{frame_idx:02d}.png"
            frame.to_image(palette).save(target)
            written.append(target)
    elif isinstance(resource, Panl):
        for image_idx in range(len(resource)):
            target = outdir / f"{stem}_{image_idx:02d}.png"
            resource.to_image(palette, image_idx).save(target)
            written.append(target)
    elif isinstance(resource, (Mask, Font)):
        target = outdir / f"{stem}.png"
        resource.to_image().save(target)
        written.append(target)
    elif isinstance(resource, Text):
        target = outdir / f"{stem}.txt"
        target.write_text("\n".join(resource.strings) + "\n", encoding=ENCODING)
        written.append(target)
    elif isinstance(resource, Blas):
        target = outdir / f"{stem}.voc"
        target.write_bytes(resource.to_voc())
        written.append(target)
    else:
        target = outdir / f"{stem}.bin"
        target.write_bytes(resource.encode())
        written.append(target)
    return written


def load_palettes(paths: Sequence[Path]) -> List[Pltt]:
    palettes: List[Pltt] = []
    for path in paths:
        palettes.extend(resource for resource in LfdFile.load(path) if isinstance(resource, Pltt))
    return palettes


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export LFD resources as PNG/TXT/VOC/BIN files.")
    parser.add_argument("input", type=Path, help="Path to the .LFD file")
    parser.add_argument("outdir", type=Path, help="Directory receiving the exported files")
    parser.add_argument(
        "--palette",
        type=Path,
        action="append",
        default=[],
        help="LFD file whose PLTTs are applied before the input's own (repeatable, applied in order)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        base = load_palettes(args.palette)
        lfd = LfdFile.load(args.input)
    except LoadFileError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1
    palette = compose_palettes(base + [resource for resource in lfd if isinstance(resource, Pltt)])
    args.outdir.mkdir(parents=True, exist_ok=True)
    count = 0
    for idx, resource in enumerate(lfd):
        written = export_resource(resource, idx, palette, args.outdir)
        count += len(written)
        for path in written:
            print(f"[+] {resource.tag} {resource.name} -> {path}")
    print(f"[+] Exported {count} files into {args.outdir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
