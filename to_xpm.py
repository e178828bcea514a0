#!/usr/bin/env python3
"""
to_xpm.py
Convert images to colour XPM3 text.

Usage:
  python to_xpm.py INPUT [OUTPUT] --outdir DIR --threshold T --name IDENT --jobs N --debug

Input:
  Any Pillow-readable image, or a folder of them. Only the first frame is used.
  Pixels with alpha below the threshold (default 128) become the single
  transparent colour "None".

Output:
  With OUTPUT, writes that file. Without OUTPUT, a single image is printed to
  stdout; a folder writes <stem>.xpm per image into --outdir (or next to it).

Notes:
  Every distinct colour is kept; nothing is quantised.
  Folder mode converts files in parallel with a ProcessPoolExecutor.
"""

from __future__ import annotations

import argparse
import io
import os
import sys
import time
from contextlib import redirect_stdout
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from xpm_writer.constants import TRANS_THRESH
from xpm_writer.errors import XpmError
from xpm_writer.image_io import load_surface
from xpm_writer.document import check_name, format_xpm
from xpm_writer.sinks import write_to_xpm
from xpm_writer.utils import (
    format_byte_size,
    format_seconds_compact,
    print_banner,
    log,
    debug_log,
    warn,
    error,
    print_config_line,
    key_value_pairs_to_string,
    enable_line_buffered_stdout,
)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff"}

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_FOUND = 2

# CLI args & small helpers


def _threshold_arg(text: str) -> int:
    value = int(text, 0)
    if not 0 <= value <= 256:
        raise argparse.ArgumentTypeError("threshold must be in 0..256")
    return value


def _name_arg(text: str) -> str:
    try:
        return check_name(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        output: optional Path for a single image
        outdir: optional Path for folder outputs
        threshold: alpha cut-off for the transparent colour
        name: optional C array name
        jobs: parallel file workers
        debug: bool for sizing details
    """
    parser = argparse.ArgumentParser(
        prog="to_xpm",
        description="Convert image(s) to colour XPM3 without quantising.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "output", type=Path, nargs="?", default=None, help="Output file (optional)"
    )
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory for folder input"
    )
    parser.add_argument(
        "--threshold",
        type=_threshold_arg,
        default=TRANS_THRESH,
        help="Alpha below this becomes transparent (0..256, default 128).",
    )
    parser.add_argument(
        "--name",
        type=_name_arg,
        default=None,
        help="C array name (default xpm_c<ncols>_).",
    )
    parser.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose sizing details")
    args = parser.parse_args(argv)
    if args.output is not None and args.src.is_dir():
        parser.error("OUTPUT is only valid for a single image; use --outdir for a folder")
    return args


# Per-file processing


def _convert_single_image(
    src_path: Path,
    out_path: Path,
    threshold: int,
    name: Optional[str],
    debug: bool,
) -> None:
    """load -> encode -> write -> report. Raises XpmError on failure."""
    t_start = time.perf_counter()
    print_banner(src_path.name)

    surface = load_surface(src_path)
    t_loaded = time.perf_counter()

    write_to_xpm(surface, out_path, threshold=threshold, name=name, debug=debug)
    t_written = time.perf_counter()

    log(
        f"Wrote {out_path.name} | size={surface.width}x{surface.height} "
        f"| bytes={format_byte_size(out_path.stat().st_size)}"
    )
    if debug:
        debug_log(
            f"Total {format_seconds_compact(t_written - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"encode+write={format_seconds_compact(t_written - t_loaded)})"
        )


def _convert_one_live(
    path: Path,
    outdir: Optional[Path],
    threshold: int,
    name: Optional[str],
    debug: bool,
) -> bool:
    """Convert a single folder entry, streaming logs to stdout. Returns ok."""
    dst = (outdir or path.parent) / f"{path.stem}.xpm"
    try:
        _convert_single_image(path, dst, threshold, name, debug)
    except XpmError as e:
        log(f"[error] {path.name}: {e}")
        return False
    return True


def _convert_one_captured(
    path: Path,
    outdir: Optional[Path],
    threshold: int,
    name: Optional[str],
    debug: bool,
) -> Tuple[str, bool]:
    """
    Convert a single file with stdout capture.

    Runs in a worker process; returns (log text, ok) so the parent can print
    blocks in input order.
    """
    buf = io.StringIO()
    with redirect_stdout(buf):
        ok = _convert_one_live(path, outdir, threshold, name, debug)
    return buf.getvalue(), ok


def _convert_to_stdout(
    src: Path, threshold: int, name: Optional[str], debug: bool
) -> int:
    """Print one image as XPM; logs go to stderr so stdout stays clean."""
    try:
        with redirect_stdout(sys.stderr):
            surface = load_surface(src)
            data = format_xpm(surface, name=name, threshold=threshold, debug=debug)
    except XpmError as e:
        error(f"{src}: {e}")
        return EXIT_FAILED
    out = getattr(sys.stdout, "buffer", None)
    if out is not None:
        sys.stdout.flush()
        out.write(data)
        out.flush()
    else:
        sys.stdout.write(data.decode("ascii"))
        sys.stdout.flush()
    return EXIT_OK


def _list_images(folder: Path) -> List[Path]:
    files = [
        p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTS
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles single file (to OUTPUT or stdout) or folder. In folder mode
    supports --jobs parallelism while preserving readable output ordering.
    """
    args = parse_cli_args(argv)

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return EXIT_NOT_FOUND

    if src.is_file() and args.output is None:
        return _convert_to_stdout(src, args.threshold, args.name, args.debug)

    enable_line_buffered_stdout()
    print_config_line(
        "run",
        [
            ("CPU cores", os.cpu_count() or 1),
            ("Jobs", args.jobs),
            ("Threshold", args.threshold),
        ],
        debug=False,
    )

    if src.is_file():
        try:
            _convert_single_image(
                src, args.output, args.threshold, args.name, args.debug
            )
        except XpmError as e:
            error(f"{src}: {e}")
            return EXIT_FAILED
        return EXIT_OK

    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)
    files = _list_images(src)
    if not files:
        warn(f"no images in {src}")
    if args.debug:
        debug_log(
            key_value_pairs_to_string([("Images", len(files)), ("Jobs", args.jobs)])
        )

    jobs = max(1, int(args.jobs))
    if jobs == 1:
        oks = [
            _convert_one_live(p, args.outdir, args.threshold, args.name, args.debug)
            for p in files
        ]
    else:
        with ProcessPoolExecutor(max_workers=jobs) as ex:
            futures = [
                ex.submit(
                    _convert_one_captured,
                    p,
                    args.outdir,
                    args.threshold,
                    args.name,
                    args.debug,
                )
                for p in files
            ]
            blocks = [f.result() for f in futures]
        print("".join(text for text, _ok in blocks), end="", flush=True)
        oks = [ok for _text, ok in blocks]

    failed = oks.count(False)
    if failed:
        error(f"{failed} of {len(oks)} file(s) failed")
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
