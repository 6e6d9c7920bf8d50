#!/usr/bin/env python3
"""
Unpack an LFD file into loose bodies plus a JSON manifest, pack it back, or
swap one image for a PNG.

The manifest keeps the map name and the resource order; bodies are stored
without their 16-byte headers so they can be edited with a hex editor and the
lengths are recomputed on pack.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from PIL import Image

from lfdreader import Delt, Header, LfdError, LfdFile, Panl, ResourceMap, ResourceType

MANIFEST_NAME = "manifest.json"


def unpack_command(args: argparse.Namespace) -> int:
    lfd = LfdFile.load(args.input)
    args.output.mkdir(parents=True, exist_ok=True)
    entries: List[Dict[str, Any]] = []
    for idx, resource in enumerate(lfd):
        filename = f"{idx:03d}_{resource.name or 'unnamed'}.{resource.tag.strip(chr(0)).lower()}"
        (args.output / filename).write_bytes(resource.encode())
        entries.append({"tag": resource.tag, "name": resource.name, "file": filename})
    manifest = {
        "source": str(args.input),
        "category": lfd.category.value,
        "rmap": lfd.rmap.name if lfd.rmap is not None else None,
        "resources": entries,
    }
    (args.output / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    print(f"[+] Unpacked {len(entries)} resources from {args.input} -> {args.output}")
    return 0


def build_container(manifest: Dict[str, Any], root: Path) -> bytes:
    chunks: List[bytes] = []
    headers: List[Header] = []
    for entry in manifest.get("resources", []):
        if "tag" not in entry or "file" not in entry:
            raise ValueError("resource entries must provide 'tag' and 'file'")
        body = (root / entry["file"]).read_bytes()
        header = Header(entry["tag"], entry.get("name", ""), len(body))
        headers.append(header)
        chunks.append(header.pack() + body)
    map_name = manifest.get("rmap")
    if map_name is not None:
        chunks.insert(0, ResourceMap(map_name, headers).to_bytes())
    return b"".join(chunks)


def pack_command(args: argparse.Namespace) -> int:
    manifest = json.loads((args.input / MANIFEST_NAME).read_text(encoding="utf-8"))
    blob = build_container(manifest, args.input)
    # decode once so a bad body fails here instead of in the game
    lfd = LfdFile.from_bytes(blob, path=args.output)
    lfd.write(args.output)
    print(f"[+] Packed {len(lfd)} resources into {args.output} ({len(blob)} bytes)")
    return 0


def replace_image_command(args: argparse.Namespace) -> int:
    lfd = LfdFile.load(args.input)
    target = lfd.resources.find(ResourceType.DELT, args.name)
    if target is None:
        target = lfd.resources.find(ResourceType.PANL, args.name)
    if target is None:
        print(f"[!] No DELT or PANL named {args.name!r} in {args.input}", file=sys.stderr)
        return 1
    palette = lfd.palette()
    with Image.open(args.image) as image:
        if isinstance(target, Delt):
            target.set_image(image, palette)
        elif isinstance(target, Panl):
            target.set_image(args.index, image, palette)
    lfd.write()
    print(f"[+] Replaced {target.tag} {target.name} from {args.image} and saved {args.input}")
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pack/unpack LFD containers.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    unpack_p = subparsers.add_parser("unpack", help="Write every resource body plus a manifest into a directory.")
    unpack_p.add_argument("input", type=Path, help="Source .LFD file")
    unpack_p.add_argument("output", type=Path, help="Destination directory")
    unpack_p.set_defaults(func=unpack_command)

    pack_p = subparsers.add_parser("pack", help="Rebuild an LFD file from an unpacked directory.")
    pack_p.add_argument("input", type=Path, help="Directory holding manifest.json and the bodies")
    pack_p.add_argument("output", type=Path, help="Destination .LFD file")
    pack_p.set_defaults(func=pack_command)

    replace_p = subparsers.add_parser("replace-image", help="Re-encode a DELT or PANL from a PNG and save the file.")
    replace_p.add_argument("input", type=Path, help=".LFD file to modify in place")
    replace_p.add_argument("name", help="Resource name of the DELT or PANL")
    replace_p.add_argument("image", type=Path, help="Replacement image (indexed PNGs are copied as-is)")
    replace_p.add_argument("--index", type=int, default=0, help="PANL image index (default 0)")
    replace_p.set_defaults(func=replace_image_command)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return args.func(args)
    except LfdError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
