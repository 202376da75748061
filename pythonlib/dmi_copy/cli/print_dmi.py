#!/usr/bin/env python3
import sys
from pathlib import Path

import yaml

import dmi_copy as dc


def summarize(icon):
    states = []
    for st in icon.states:
        entry = {
            "name": st.name,
            "dirs": st.dirs,
            "frames": st.frames,
        }
        if st.delay is not None:
            entry["delay"] = st.delay
        if st.loop:
            entry["loop"] = st.loop
        if st.rewind:
            entry["rewind"] = True
        if st.movement:
            entry["movement"] = True
        states.append(entry)
    return {
        "version": icon.version,
        "width": icon.width,
        "height": icon.height,
        "states": states,
    }


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: dmi-states <file.dmi>", file=sys.stderr)
        return 1

    path = Path(argv[0])

    try:
        with path.open("rb") as f:
            icon = dc.load(f)
    except (OSError, dc.DecodeError) as e:
        print(f"[ERROR] {path}: {e}", file=sys.stderr)
        return 1

    yaml.safe_dump(summarize(icon), sys.stdout, sort_keys=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
