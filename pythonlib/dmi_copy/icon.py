import math
import re

import numpy as np
from PIL import Image, PngImagePlugin

from .errors import DecodeError, EncodeError

DMI_VERSION = "4.0"
_BEGIN = "# BEGIN DMI"
_END = "# END DMI"
_LINE_RE = re.compile(r"^\s*([A-Za-z_]+)\s*=\s*(.*?)\s*$")


def _fmt_number(v):
    v = float(v)
    return str(int(v)) if v.is_integer() else repr(v)


def _quote(name):
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _unquote(raw):
    if len(raw) < 2 or raw[0] != '"' or raw[-1] != '"':
        raise DecodeError(f"state name is not quoted: {raw!r}")
    return re.sub(r"\\(.)", r"\1", raw[1:-1])


class IconState:
    """
    One named image/animation record of a DMI file.

    Parameters
    ----------
    name : str
        State name, may be empty.
    images : list of ndarray
        RGBA arrays of shape (height, width, 4), ordered frame-major:
        all directions of frame 0, then all directions of frame 1, ...
    dirs, frames : int
        Number of directions (1, 4 or 8) and animation frames.
    delay : list of float or None
        Per-frame delay in ticks, one entry per frame.
    """

    def __init__(
        self,
        name,
        images,
        dirs=1,
        frames=1,
        delay=None,
        loop=0,
        rewind=False,
        movement=False,
        hotspots=None,
        extra=None,
    ):
        self.name = name
        self.images = [np.asarray(im, dtype=np.uint8) for im in images]
        self.dirs = int(dirs)
        self.frames = int(frames)
        self.delay = None if delay is None else [float(d) for d in delay]
        self.loop = int(loop)
        self.rewind = bool(rewind)
        self.movement = bool(movement)
        self.hotspots = [tuple(int(c) for c in h) for h in (hotspots or [])]
        # unrecognised keys, kept verbatim so a round trip does not drop them
        self.extra = list(extra or [])

    def image(self, frame=0, direction=0):
        return self.images[frame * self.dirs + direction]

    def _meta(self):
        return (
            self.name,
            self.dirs,
            self.frames,
            self.delay,
            self.loop,
            self.rewind,
            self.movement,
            self.hotspots,
            self.extra,
        )

    def __eq__(self, other):
        if not isinstance(other, IconState):
            return NotImplemented
        if self._meta() != other._meta() or len(self.images) != len(other.images):
            return False
        return all(np.array_equal(a, b) for a, b in zip(self.images, other.images))

    __hash__ = None

    def __repr__(self):
        return f"IconState({self.name!r}, dirs={self.dirs}, frames={self.frames})"


class Icon:
    """Decoded DMI file: icon dimensions plus an ordered list of states."""

    def __init__(self, width=32, height=32, states=None, version=DMI_VERSION):
        self.version = version
        self.width = int(width)
        self.height = int(height)
        self.states = list(states or [])

    def state_names(self):
        return [s.name for s in self.states]

    # ---------- decoding ----------
    @classmethod
    def load(cls, stream):
        try:
            img = Image.open(stream)
            if img.format != "PNG":
                raise DecodeError(f"expected a PNG image, got {img.format}")
            img.load()
            text = img.text.get("Description") or img.info.get("Description")
            pixels = np.asarray(img.convert("RGBA"), dtype=np.uint8)
        except (OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"not a readable PNG image ({e})") from e

        if not text:
            raise DecodeError("PNG has no DMI description chunk")

        icon, layouts = cls._parse_description(text)
        icon._cut_sheet(pixels, layouts)
        return icon

    @classmethod
    def _parse_description(cls, text):
        lines = [ln for ln in text.splitlines() if ln.strip()]
        if not lines or lines[0].strip() != _BEGIN:
            raise DecodeError(f"description does not start with '{_BEGIN}'")
        if _END not in (ln.strip() for ln in lines):
            raise DecodeError(f"description has no '{_END}' line")

        icon = cls()
        layouts = []
        current = None
        for ln in lines[1:]:
            if ln.strip() == _END:
                break
            m = _LINE_RE.match(ln)
            if m is None:
                raise DecodeError(f"malformed description line: {ln!r}")
            key, value = m.groups()
            try:
                if key == "state":
                    current = {"name": _unquote(value), "hotspots": [], "extra": []}
                    layouts.append(current)
                elif current is None:
                    if key == "version":
                        icon.version = value
                    elif key == "width":
                        icon.width = int(value)
                    elif key == "height":
                        icon.height = int(value)
                elif key in ("dirs", "frames", "loop"):
                    current[key] = int(value)
                elif key in ("rewind", "movement"):
                    current[key] = bool(int(value))
                elif key == "delay":
                    current["delay"] = [float(d) for d in value.split(",")]
                elif key == "hotspot":
                    current["hotspots"].append(tuple(int(c) for c in value.split(",")))
                else:
                    current["extra"].append((key, value))
            except ValueError as e:
                raise DecodeError(f"bad value for '{key}': {value!r}") from e

        if icon.width <= 0 or icon.height <= 0:
            raise DecodeError(f"invalid icon size {icon.width}x{icon.height}")
        return icon, layouts

    def _cut_sheet(self, pixels, layouts):
        h, w = self.height, self.width
        cols = pixels.shape[1] // w
        rows = pixels.shape[0] // h
        needed = sum(lay.get("dirs", 1) * lay.get("frames", 1) for lay in layouts)
        if needed > cols * rows:
            raise DecodeError(
                f"image holds {cols * rows} icons of {w}x{h}, description needs {needed}"
            )

        cell = 0
        for lay in layouts:
            n = lay.get("dirs", 1) * lay.get("frames", 1)
            images = []
            for i in range(cell, cell + n):
                r, c = divmod(i, cols)
                images.append(pixels[r * h : (r + 1) * h, c * w : (c + 1) * w].copy())
            cell += n
            self.states.append(IconState(images=images, **lay))

    # ---------- encoding ----------
    def _check(self):
        if self.width <= 0 or self.height <= 0:
            raise EncodeError(f"invalid icon size {self.width}x{self.height}")
        for st in self.states:
            if st.dirs not in (1, 4, 8):
                raise EncodeError(f"state {st.name!r}: dirs must be 1, 4 or 8, got {st.dirs}")
            if st.frames < 1:
                raise EncodeError(f"state {st.name!r}: needs at least one frame")
            if len(st.images) != st.dirs * st.frames:
                raise EncodeError(
                    f"state {st.name!r}: expected {st.dirs * st.frames} images, "
                    f"got {len(st.images)}"
                )
            if st.delay is not None and len(st.delay) != st.frames:
                raise EncodeError(
                    f"state {st.name!r}: {st.frames} frames but {len(st.delay)} delays"
                )
            for im in st.images:
                if im.shape != (self.height, self.width, 4):
                    raise EncodeError(
                        f"state {st.name!r}: image shape {im.shape} does not match "
                        f"icon size {self.width}x{self.height}"
                    )

    def description(self):
        out = [_BEGIN, f"version = {self.version}"]
        out.append(f"\twidth = {self.width}")
        out.append(f"\theight = {self.height}")
        for st in self.states:
            out.append(f"state = {_quote(st.name)}")
            out.append(f"\tdirs = {st.dirs}")
            out.append(f"\tframes = {st.frames}")
            if st.delay is not None:
                out.append("\tdelay = " + ",".join(_fmt_number(d) for d in st.delay))
            if st.loop:
                out.append(f"\tloop = {st.loop}")
            if st.rewind:
                out.append("\trewind = 1")
            if st.movement:
                out.append("\tmovement = 1")
            for hs in st.hotspots:
                out.append("\thotspot = " + ",".join(str(c) for c in hs))
            for key, value in st.extra:
                out.append(f"\t{key} = {value}")
        out.append(_END)
        return "\n".join(out) + "\n"

    def save(self, stream):
        self._check()
        images = [im for st in self.states for im in st.images]
        cols = max(1, math.ceil(math.sqrt(len(images))))
        rows = max(1, math.ceil(len(images) / cols))
        h, w = self.height, self.width

        sheet = np.zeros((rows * h, cols * w, 4), dtype=np.uint8)
        for i, im in enumerate(images):
            r, c = divmod(i, cols)
            sheet[r * h : (r + 1) * h, c * w : (c + 1) * w] = im

        info = PngImagePlugin.PngInfo()
        info.add_text("Description", self.description(), zip=True)
        Image.fromarray(sheet).save(stream, format="PNG", pnginfo=info)


def load(stream):
    return Icon.load(stream)


def save(icon, stream):
    icon.save(stream)
